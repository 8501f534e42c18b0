import logging
from io import BytesIO

import cloudinary.exceptions
import cloudinary.uploader
from fastapi import HTTPException, Request, UploadFile, status
from starlette.concurrency import run_in_threadpool

from config import Settings

logger = logging.getLogger("blog.media")

ALLOWED_FORMATS = ["jpg", "jpeg", "png"]
ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png"}
TRANSFORMATION = [{"width": 500, "height": 500, "crop": "limit"}]


class MediaStore:
    """Image host: takes uploaded bytes, returns a public URL"""

    def __init__(self, settings: Settings):
        self.folder = settings.upload_folder
        self.credentials = {
            "cloud_name": settings.cloudinary_name,
            "api_key": settings.cloudinary_api_key,
            "api_secret": settings.cloudinary_api_secret,
        }

    def _upload(self, data: bytes, filename: str) -> str:
        result = cloudinary.uploader.upload(
            BytesIO(data),
            folder=self.folder,
            filename=filename,
            allowed_formats=ALLOWED_FORMATS,
            transformation=TRANSFORMATION,
            secure=True,
            **self.credentials,
        )
        return result["secure_url"]

    async def upload(self, file: UploadFile) -> str:
        """Upload an image; raises HTTPException(400) on any rejection"""
        if file.content_type not in ALLOWED_CONTENT_TYPES:
            logger.warning(f"Rejected upload {file.filename}: unsupported type {file.content_type}")
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Image upload failed")

        data = await file.read()
        if not data:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Image upload failed")

        try:
            url = await run_in_threadpool(self._upload, data, file.filename or "image")
        except (cloudinary.exceptions.Error, KeyError) as e:
            logger.error(f"Cloudinary upload failed: {e}")
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Image upload failed")

        logger.info(f"Uploaded image {file.filename} to {url}")
        return url


def get_media_store(request: Request) -> MediaStore:
    """Dependency returning the media store bound to the running app"""
    return request.app.state.media
