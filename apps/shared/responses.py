"""Response bodies shared by several apps."""
from pydantic import BaseModel


class SuccessResponse(BaseModel):
    success: bool = True
