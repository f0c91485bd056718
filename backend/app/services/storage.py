"""
Image Storage

Blob sink for product images. Stored files are exposed by the app under
/uploads/<name>, so the returned URL is that public path.
"""
import asyncio
import logging
import os
import time
import uuid
from abc import ABC, abstractmethod
from pathlib import Path

from fastapi import UploadFile

from app.core.errors import ValidationError

logger = logging.getLogger("uvicorn.error")

ALLOWED_CONTENT_TYPES = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
}


class ImageStorage(ABC):
    """Image storage abstract base class"""

    @abstractmethod
    async def save(self, upload: UploadFile) -> str:
        """
        Persist an uploaded image

        Returns:
        - Public URL of the stored file

        Raises:
        - ValidationError: not an accepted image, empty or too large
        """

    @abstractmethod
    def delete(self, url: str) -> None:
        """Remove a previously stored file (missing files are ignored)"""

    def delete_many(self, urls) -> None:
        for url in urls:
            self.delete(url)


class LocalImageStorage(ImageStorage):
    """Stores images in a local directory served as static files"""

    def __init__(self, directory: str, url_prefix: str = "/uploads", max_bytes: int = 10 * 1024 * 1024):
        self.directory = Path(directory)
        self.url_prefix = url_prefix.rstrip("/")
        self.max_bytes = max_bytes
        self.directory.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _extension(upload: UploadFile, content_type: str) -> str:
        ext = os.path.splitext(upload.filename or "")[1].lower()
        if ext in (".jpg", ".jpeg", ".png"):
            return ext
        return ALLOWED_CONTENT_TYPES[content_type]

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        with open(path, "wb") as f:
            f.write(data)

    async def save(self, upload: UploadFile) -> str:
        content_type = (upload.content_type or "").split(";")[0].strip().lower()
        if content_type not in ALLOWED_CONTENT_TYPES:
            raise ValidationError("Invalid image type, use JPEG or PNG")

        data = await upload.read()
        if not data:
            raise ValidationError("Empty image file")
        if len(data) > self.max_bytes:
            raise ValidationError(f"Image too large (max {self.max_bytes // (1024 * 1024)} MB)")

        filename = f"{time.time_ns()}_{uuid.uuid4().hex[:8]}{self._extension(upload, content_type)}"
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._write, self.directory / filename, data)
        return f"{self.url_prefix}/{filename}"

    def delete(self, url: str) -> None:
        if not url or not url.startswith(self.url_prefix + "/"):
            return
        # Only a bare file name is accepted, never a nested path
        name = url[len(self.url_prefix) + 1:]
        if not name or "/" in name or "\\" in name or name in (".", ".."):
            return
        try:
            (self.directory / name).unlink(missing_ok=True)
        except OSError:
            logger.exception("[storage] could not remove %s", name)
