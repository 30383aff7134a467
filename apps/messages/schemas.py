"""
Pydantic schemas for the contact form and message moderation.
"""
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

MessageStatus = Literal["UNREAD", "READ", "REPLIED", "ARCHIVED"]


class ContactInput(BaseModel):
    """Public contact form body. Presence and format are checked by the endpoint."""
    name: Optional[str] = None
    email: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None

    @field_validator("name", "email", "subject", "message", mode="before")
    @classmethod
    def _as_text(cls, value: Any):
        if value is None or isinstance(value, str):
            return value
        return str(value)


class ContactResponse(BaseModel):
    success: bool = True
    message: str = "Message sent successfully!"


class MessageUpdate(BaseModel):
    """
    Partial update. Unknown status values are ignored by the endpoint,
    so both fields accept anything here.
    """
    status: Optional[Any] = None
    starred: Optional[Any] = None


class MessageResponse(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: str
    name: str
    email: str
    subject: str
    message: str
    status: MessageStatus
    starred: bool
    created_at: datetime
    updated_at: datetime


class MessageStats(BaseModel):
    total: int = 0
    unread: int = 0
    read: int = 0
    replied: int = 0
    archived: int = 0
    starred: int = 0


class MessageListResponse(BaseModel):
    messages: list[MessageResponse]
    stats: MessageStats
