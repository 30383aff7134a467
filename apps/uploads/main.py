"""
Image upload API

Admin-only upload and delete of project images.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel

from apps.shared.auth import require_session
from apps.shared.errors import bad_request, log_and_sanitize_error
from apps.shared.responses import SuccessResponse
from apps.uploads.storage import ImageStore, StorageError, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["upload"])


class ImageUploadResponse(BaseModel):
    """Response after successful image upload."""
    url: str
    filename: str


@router.post("", response_model=ImageUploadResponse)
async def upload_image(
    file: Optional[UploadFile] = File(None),
    admin: str = Depends(require_session),
    storage: ImageStore = Depends(get_storage),
):
    """
    Upload an image for a project.
    Returns the public URL and the stored path.
    """
    if file is None:
        raise bad_request("No file provided")

    try:
        # Reject by type before reading the body
        storage.check_content_type(file.content_type)
        contents = await file.read()
        stored = await storage.upload(contents, file.content_type, file.filename)
    except StorageError as e:
        raise bad_request(str(e))
    except OSError as e:
        sanitized_msg, _ = log_and_sanitize_error(e, "Image upload", "Failed to upload file")
        raise HTTPException(status_code=500, detail=sanitized_msg)

    return ImageUploadResponse(url=stored.url, filename=stored.path)


@router.delete("", response_model=SuccessResponse)
async def delete_image(
    url: Optional[str] = None,
    admin: str = Depends(require_session),
    storage: ImageStore = Depends(get_storage),
):
    """
    Delete an uploaded image by URL.
    Deleting something that is already gone still succeeds.
    """
    if not url:
        raise bad_request("No URL provided")

    try:
        await storage.delete(url)
    except StorageError as e:
        raise bad_request(str(e))
    except OSError as e:
        logger.warning(f"Image delete failed for {url}: {e}")

    return SuccessResponse()
