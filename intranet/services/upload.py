"""
Upload Service
Stages incoming images on disk, validates them and forwards them to Cloudinary
"""
import asyncio
import logging
import os
import shutil
import uuid
from typing import List, Optional

import cloudinary
import cloudinary.uploader
from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from intranet.config import settings
from intranet.errors import AppError, BadRequestError, InternalServerError


logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = ["image/jpeg", "image/jpg", "image/png", "image/webp"]
ALLOWED_EXTENSIONS = [".jpg", ".jpeg", ".png", ".webp"]

IMAGE_TRANSFORMATION = [
    {"width": 1920, "height": 1080, "crop": "limit"},
    {"quality": "auto"},
    {"fetch_format": "auto"},
]


class StagedFile(BaseModel):
    """An uploaded part written to the temp directory"""
    path: str
    original_filename: str
    content_type: Optional[str] = None
    size: int


class UploadResult(BaseModel):
    url: str
    public_id: str
    width: Optional[int] = None
    height: Optional[int] = None
    format: Optional[str] = None
    size: Optional[int] = None


def delete_local_file(path: str) -> None:
    """Remove a temp file; failures are only logged"""
    try:
        if os.path.exists(path):
            os.remove(path)
    except OSError:
        logger.exception("Error deleting local file %s", path)


class UploadService:
    """Image upload proxy to Cloudinary"""

    def _configure(self) -> None:
        if not settings.cloudinary_configured:
            raise InternalServerError("Cloudinary is not configured")
        cloudinary.config(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            secure=True,
        )

    def stage(self, upload: UploadFile) -> StagedFile:
        """Write an incoming part to the temp directory under a unique name"""
        filename = upload.filename or ""
        extension = os.path.splitext(filename)[1].lower()
        if extension not in ALLOWED_EXTENSIONS:
            raise BadRequestError("Only image files are allowed (JPEG, PNG, WebP)")

        os.makedirs(settings.UPLOAD_TEMP_DIR, exist_ok=True)
        path = os.path.join(settings.UPLOAD_TEMP_DIR, f"image-{uuid.uuid4().hex}{extension}")

        with open(path, "wb") as buffer:
            shutil.copyfileobj(upload.file, buffer)

        return StagedFile(
            path=path,
            original_filename=filename,
            content_type=upload.content_type,
            size=os.path.getsize(path),
        )

    def stage_all(self, uploads: List[UploadFile]) -> List[StagedFile]:
        if len(uploads) > settings.MAX_UPLOAD_FILES:
            raise BadRequestError(f"Too many files. Maximum is {settings.MAX_UPLOAD_FILES} files")

        staged = []
        try:
            for upload in uploads:
                staged.append(self.stage(upload))
        except Exception:
            for file in staged:
                delete_local_file(file.path)
            raise
        return staged

    def validate_image(self, file: StagedFile) -> None:
        if file.content_type not in ALLOWED_MIME_TYPES:
            raise BadRequestError("Invalid file type. Only JPEG, PNG, and WebP are allowed")

        if file.size > settings.MAX_UPLOAD_SIZE:
            max_mb = settings.MAX_UPLOAD_SIZE // (1024 * 1024)
            raise BadRequestError(f"File size too large. Maximum size is {max_mb}MB")

    async def upload_image(self, file: StagedFile, folder: str = "announce") -> UploadResult:
        """Validate and upload one staged image; the temp file is always removed"""
        try:
            self.validate_image(file)
            self._configure()

            result = await run_in_threadpool(
                cloudinary.uploader.upload,
                file.path,
                folder=folder,
                resource_type="image",
                transformation=IMAGE_TRANSFORMATION,
            )
            logger.info("Uploaded %s to Cloudinary as %s", file.original_filename, result.get("public_id"))

            return UploadResult(
                url=result["secure_url"],
                public_id=result["public_id"],
                width=result.get("width"),
                height=result.get("height"),
                format=result.get("format"),
                size=result.get("bytes"),
            )
        except AppError:
            raise
        except Exception as e:
            logger.exception("Cloudinary upload failed for %s", file.original_filename)
            raise InternalServerError(str(e) or "Failed to upload image")
        finally:
            delete_local_file(file.path)

    async def upload_multiple_images(self, files: List[StagedFile], folder: str = "announcements") -> List[UploadResult]:
        if len(files) > settings.MAX_UPLOAD_FILES:
            for file in files:
                delete_local_file(file.path)
            raise BadRequestError(f"Too many files. Maximum is {settings.MAX_UPLOAD_FILES} files")

        # Reject the whole batch before any file reaches Cloudinary
        try:
            for file in files:
                self.validate_image(file)
        except BadRequestError:
            for file in files:
                delete_local_file(file.path)
            raise

        return list(await asyncio.gather(*(self.upload_image(f, folder) for f in files)))

    async def delete_image(self, public_id: str) -> None:
        self._configure()
        try:
            await run_in_threadpool(cloudinary.uploader.destroy, public_id)
        except Exception:
            logger.exception("Cloudinary delete failed for %s", public_id)
            raise InternalServerError("Failed to delete image")


# Global instance
upload_service = UploadService()
