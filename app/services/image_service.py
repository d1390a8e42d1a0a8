import uuid
import io
import logging
from typing import Any, List, Optional

from PIL import Image

from app.core.exceptions import InvalidInputError, UpstreamError
from app.services.ai_service import parse_data_url

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


class ImageStorageService:
    """Service for storing report photos in Supabase storage"""

    def __init__(
        self,
        client: Any,
        bucket_name: str,
        max_size: int = 10 * 1024 * 1024,
        allowed_types: Optional[List[str]] = None,
    ):
        self.client = client
        self.bucket_name = bucket_name
        self.max_size = max_size
        self.allowed_types = allowed_types or list(_EXTENSIONS)

    def validate_image(self, mime_type: str, image_data: bytes) -> None:
        """Validate declared type, size and that the bytes decode as an image"""
        logger.info(f"Validating image: size={len(image_data)}, content_type={mime_type}")

        if len(image_data) > self.max_size:
            raise InvalidInputError(
                f"Image size too large. Maximum size is {self.max_size / (1024 * 1024):.1f}MB"
            )

        if mime_type not in self.allowed_types:
            logger.warning(f"Invalid content type: {mime_type}, allowed: {self.allowed_types}")
            raise InvalidInputError(
                f"Invalid image type. Allowed types: {', '.join(self.allowed_types)}"
            )

        try:
            with Image.open(io.BytesIO(image_data)) as img:
                img.verify()
                logger.info(f"PIL image verification passed: size={img.size}, format={img.format}")
        except Exception as e:
            logger.error(f"PIL image verification failed: {e}")
            raise InvalidInputError("Invalid image file")

    def upload_data_url(self, data_url: str) -> str:
        """Upload a base64 data URL image and return its public URL"""
        if not self.client:
            raise UpstreamError("Supabase client not available")

        mime_type, image_data = parse_data_url(data_url)
        self.validate_image(mime_type, image_data)

        unique_filename = f"{uuid.uuid4().hex}.{_EXTENSIONS.get(mime_type, 'jpg')}"
        bucket = self.client.storage.from_(self.bucket_name)

        try:
            bucket.upload(
                path=unique_filename,
                file=image_data,
                file_options={"content-type": mime_type},
            )
            public_url = bucket.get_public_url(unique_filename)
        except Exception as e:
            logger.error(f"Error uploading image to Supabase: {e}")
            raise UpstreamError(f"Failed to upload image: {e}")

        if not public_url:
            raise UpstreamError("Failed to get public URL")

        logger.info(f"Image uploaded to Supabase: {unique_filename}")
        return public_url
