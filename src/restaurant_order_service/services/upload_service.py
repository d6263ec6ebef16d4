"""Image upload service storing menu item images in S3."""

import logging
import uuid
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from restaurant_order_service.errors import UploadError
from restaurant_order_service.observability import traced
from restaurant_order_service.observability.metrics import record_image_upload

logger = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024
ALLOWED_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp"}
KEY_PREFIX = "menu-images"


class UploadService:
    """Service validating admin image uploads and writing them to S3."""

    def __init__(
        self,
        s3_client: Any,
        bucket_name: str,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
        public_base_url: str | None = None,
    ) -> None:
        """Initialize the UploadService.

        Args:
            s3_client: Boto3 S3 client
            bucket_name: Bucket receiving the images
            max_upload_bytes: Largest accepted file size
            public_base_url: Base URL images are served from (defaults to the bucket URL)
        """
        self.s3_client = s3_client
        self.bucket_name = bucket_name
        self.max_upload_bytes = max_upload_bytes
        self.public_base_url = (
            public_base_url or f"https://{bucket_name}.s3.amazonaws.com"
        ).rstrip("/")

    def _validate(self, filename: str | None, content_type: str | None, content: bytes) -> str:
        """Check an upload and return its file extension.

        Raises:
            UploadError: If the file is empty, too large or not an image
        """
        if not content:
            raise UploadError("No image file provided")

        if len(content) > self.max_upload_bytes:
            raise UploadError(
                f"Image exceeds maximum allowed size of {self.max_upload_bytes} bytes",
                status_code=413,
            )

        if not content_type or not content_type.startswith("image/"):
            raise UploadError("Only image files are allowed")

        extension = filename.rsplit(".", 1)[-1].lower() if filename and "." in filename else ""
        if extension not in ALLOWED_EXTENSIONS:
            raise UploadError(
                f"File type '{extension}' not allowed. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
            )
        return extension

    @traced("upload_image")
    async def upload_image(
        self, filename: str | None, content_type: str | None, content: bytes
    ) -> str:
        """Store a menu item image and return its public URL.

        Args:
            filename: Original client filename
            content_type: MIME type reported by the client
            content: File bytes

        Returns:
            URL of the stored image

        Raises:
            UploadError: If validation fails (400/413) or S3 rejects the write (500)
        """
        try:
            extension = self._validate(filename, content_type, content)
        except UploadError as e:
            logger.warning(f"Rejected image upload '{filename}': {e.message}")
            record_image_upload(success=False)
            raise

        key = f"{KEY_PREFIX}/menu-{uuid.uuid4()}.{extension}"
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=content,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 upload error for {key}: {e}")
            record_image_upload(success=False)
            raise UploadError("Failed to upload image", status_code=500) from e

        logger.info(f"Uploaded image {key} ({len(content)} bytes)")
        record_image_upload(success=True)
        return f"{self.public_base_url}/{key}"
