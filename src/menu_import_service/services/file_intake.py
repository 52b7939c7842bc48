"""File intake: validate an uploaded menu file and store it in S3."""

import logging
import re
from datetime import UTC, datetime
from pathlib import PurePath
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from menu_import_service.errors import StorageError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024
KEY_PREFIX = "menu-imports"

IMAGE = "image"
PDF = "pdf"

_TYPE_ERRORS = {
    IMAGE: "Please upload an image file (JPG, PNG, WEBP)",
    PDF: "Please upload a PDF file",
}


def _matches_family(declared_type: str, content_type: str) -> bool:
    if declared_type == IMAGE:
        return content_type.startswith("image/")
    return content_type == "application/pdf"


def sanitize_filename(filename: str | None) -> str:
    """Reduce a client filename to a safe object-key segment."""
    name = PurePath(filename or "").name
    name = re.sub(r"[^A-Za-z0-9._-]+", "-", name).strip(".-")
    return name or "upload"


class FileIntakeService:
    """Accepts a single menu file and yields a public URL for it.

    Objects are written under menu-imports/<restaurant_id>/<epoch-ms>-<name>
    so uploads from different tenants, or repeated uploads of the same file,
    never share a key.
    """

    def __init__(
        self,
        s3_client: Any,
        bucket_name: str,
        public_base_url: str,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ) -> None:
        """Initialize the intake service.

        Args:
            s3_client: Boto3 S3 client
            bucket_name: Bucket receiving uploads
            public_base_url: Public URL prefix the bucket is served from
            max_upload_bytes: Largest accepted upload
        """
        self.s3_client = s3_client
        self.bucket_name = bucket_name
        self.public_base_url = public_base_url.rstrip("/")
        self.max_upload_bytes = max_upload_bytes

    def validate(self, declared_type: str, content_type: str | None, size: int | None = None) -> None:
        """Check that the upload matches the declared type family.

        Args:
            declared_type: "image" or "pdf"
            content_type: MIME type reported for the upload
            size: Upload size in bytes, if known

        Raises:
            ValidationError: On a type mismatch, an empty file or an oversized file
        """
        if declared_type not in _TYPE_ERRORS:
            raise ValidationError(f"Unknown file type '{declared_type}', expected image or pdf")

        normalized = (content_type or "").split(";")[0].strip().lower()
        if not _matches_family(declared_type, normalized):
            raise ValidationError(_TYPE_ERRORS[declared_type])

        if size is not None:
            if size == 0:
                raise ValidationError("The uploaded file is empty")
            if size > self.max_upload_bytes:
                raise ValidationError(
                    f"The uploaded file exceeds {self.max_upload_bytes // (1024 * 1024)}MB"
                )

    def build_key(self, restaurant_id: str, filename: str | None) -> str:
        timestamp = int(datetime.now(UTC).timestamp() * 1000)
        return f"{KEY_PREFIX}/{restaurant_id}/{timestamp}-{sanitize_filename(filename)}"

    def store(
        self,
        restaurant_id: str,
        filename: str | None,
        content: bytes,
        content_type: str,
    ) -> str:
        """Write the file to S3 and return its public URL.

        Raises:
            StorageError: If the S3 write fails
        """
        key = self.build_key(restaurant_id, filename)

        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=content,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to store upload for restaurant {restaurant_id}: {e}")
            raise StorageError(f"Failed to store uploaded file: {e}") from e

        url = f"{self.public_base_url}/{key}"
        logger.info(f"Stored menu upload for restaurant {restaurant_id} at {key}")
        return url
