"""
Image storage

Uploaded project images are written below UPLOAD_DIR and served publicly
from UPLOAD_BASE_URL. Only URLs under UPLOAD_BASE_URL can be deleted.
"""
import asyncio
import logging
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os
from fastapi import Depends

from apps.shared.config import Settings, get_settings

logger = logging.getLogger(__name__)

ALLOWED_TYPES = {
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/svg+xml",
}
UPLOAD_PREFIX = "projects"
SUFFIX_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


class StorageError(ValueError):
    """Rejected upload or delete request (maps to 400)."""


@dataclass
class StoredImage:
    url: str
    path: str


@dataclass
class DeleteResult:
    url: str
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ImageStore:
    def __init__(self, root: str, base_url: str, max_bytes: int):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")
        self.max_bytes = max_bytes

    def check_content_type(self, content_type: Optional[str]) -> None:
        if content_type not in ALLOWED_TYPES:
            raise StorageError(
                "Invalid file type. Only JPEG, PNG, GIF, WebP, and SVG are allowed."
            )

    def check_size(self, size: int) -> None:
        if size > self.max_bytes:
            raise StorageError(
                f"File too large. Maximum size is {self.max_bytes // (1024 * 1024)}MB."
            )

    def new_path(self, original_name: Optional[str]) -> str:
        """projects/<epoch ms>-<6 random chars>.<ext>"""
        name = original_name or ""
        ext = name.rsplit(".", 1)[-1].lower() if "." in name else ""
        if not ext.isalnum():
            ext = "jpg"
        suffix = "".join(secrets.choice(SUFFIX_ALPHABET) for _ in range(6))
        return f"{UPLOAD_PREFIX}/{int(time.time() * 1000)}-{suffix}.{ext}"

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path}"

    def path_for_url(self, url: str) -> Path:
        """Resolve a public URL to a file below the upload root."""
        prefix = f"{self.base_url}/"
        if not url.startswith(prefix):
            raise StorageError("Invalid URL. Only uploaded image URLs can be deleted.")

        relative = url[len(prefix):].split("?", 1)[0].split("#", 1)[0]
        root = self.root.resolve()
        target = (root / relative).resolve()
        if not relative or root not in target.parents:
            raise StorageError("Invalid URL. Only uploaded image URLs can be deleted.")
        return target

    async def upload(
        self, contents: bytes, content_type: Optional[str], original_name: Optional[str]
    ) -> StoredImage:
        self.check_content_type(content_type)
        self.check_size(len(contents))

        path = self.new_path(original_name)
        filepath = self.root / path
        await aiofiles.os.makedirs(filepath.parent, exist_ok=True)

        async with aiofiles.open(filepath, "wb") as f:
            await f.write(contents)

        logger.info(f"Stored image: {path}")
        return StoredImage(url=self.url_for(path), path=path)

    async def delete(self, url: str) -> None:
        """Delete an uploaded image. Already-missing files count as deleted."""
        target = self.path_for_url(url)
        try:
            await aiofiles.os.remove(target)
        except FileNotFoundError:
            logger.info(f"Image already gone: {url}")
            return
        logger.info(f"Deleted image: {url}")

    async def delete_many(self, urls: list[str]) -> list[DeleteResult]:
        """
        Delete each URL independently. Failures are logged and returned,
        never raised, and never stop the remaining deletions.
        """
        outcomes = await asyncio.gather(
            *(self.delete(url) for url in urls), return_exceptions=True
        )
        results = []
        for url, outcome in zip(urls, outcomes):
            error = outcome if isinstance(outcome, Exception) else None
            if error is not None:
                logger.error(f"Failed to delete image {url}: {type(error).__name__}: {error}")
            results.append(DeleteResult(url=url, error=error))
        return results


def get_storage(settings: Settings = Depends(get_settings)) -> ImageStore:
    return ImageStore(
        root=settings.upload_dir,
        base_url=settings.upload_base_url,
        max_bytes=settings.max_upload_bytes,
    )
