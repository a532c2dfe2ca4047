"""
Local Storage Service
Stores uploaded images on disk and serves them under /uploads
"""
from pathlib import Path
from typing import Optional
import logging
import random
import time

from fastapi import UploadFile

from app.core.config import Settings
from app.core.exceptions import ValidationFailed

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads"


class LocalStorageService:
    """Blob store backed by a directory on the local filesystem"""

    def __init__(self, settings: Settings):
        self.root = Path(settings.UPLOAD_DIR)
        self.allowed_extensions = settings.allowed_image_extensions_list

    def _validate_image(self, upload: UploadFile, field: str):
        extension = Path(upload.filename or "").suffix.lower().lstrip(".")
        content_type = (upload.content_type or "").lower()
        mime_subtype = content_type.split("/")[-1] if content_type.startswith("image/") else ""

        if extension not in self.allowed_extensions or mime_subtype not in self.allowed_extensions:
            raise ValidationFailed.for_field(field, "Only image files are allowed!")
        return extension

    async def save_image(
        self,
        upload: UploadFile,
        folder: str,
        prefix: str,
        max_size: int,
        field: str
    ) -> str:
        """
        Validate and store an uploaded image

        Args:
            upload: Uploaded file
            folder: Sub-directory (e.g., 'posts', 'avatars')
            prefix: Filename prefix (e.g., 'post', 'avatar')
            max_size: Maximum size in bytes
            field: Form field name used in validation errors

        Returns:
            Public path of the stored file (e.g., '/uploads/posts/post-1700000000000-42.png')
        """
        extension = self._validate_image(upload, field)

        file_content = await upload.read()
        if len(file_content) > max_size:
            raise ValidationFailed.for_field(
                field, f"File too large (max {max_size // (1024 * 1024)}MB)"
            )

        unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
        filename = f"{prefix}-{unique_suffix}.{extension}"

        directory = self.root / folder
        directory.mkdir(parents=True, exist_ok=True)
        (directory / filename).write_bytes(file_content)

        logger.info(f"Stored upload {folder}/{filename} ({len(file_content)} bytes)")
        return f"{PUBLIC_PREFIX}/{folder}/{filename}"

    def delete_file(self, public_path: Optional[str]) -> bool:
        """
        Delete a previously stored file

        Args:
            public_path: Path returned by ``save_image``

        Returns:
            True if a file was removed
        """
        if not public_path or not public_path.startswith(PUBLIC_PREFIX + "/"):
            return False

        relative = public_path[len(PUBLIC_PREFIX) + 1:]
        target = (self.root / relative).resolve()
        if self.root.resolve() not in target.parents:
            logger.warning(f"Refusing to delete file outside upload dir: {public_path}")
            return False

        if target.exists():
            target.unlink()
            logger.info(f"Deleted upload {relative}")
            return True
        return False
