"""Unit tests for FileIntakeService."""

import re
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from menu_import_service.errors import StorageError, ValidationError
from menu_import_service.services.file_intake import FileIntakeService, sanitize_filename


@pytest.mark.unit
class TestSanitizeFilename:
    """Tests for sanitize_filename."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("menu.jpg", "menu.jpg"),
            ("../../etc/passwd", "passwd"),
            ("Lunch Menu (final).png", "Lunch-Menu-final-.png"),
            ("", "upload"),
            (None, "upload"),
            ("...", "upload"),
        ],
    )
    def test_sanitize(self, raw: str | None, expected: str) -> None:
        """Test that filenames are reduced to a safe key segment."""
        assert sanitize_filename(raw) == expected


@pytest.mark.unit
class TestFileIntakeService:
    """Test suite for FileIntakeService."""

    @pytest.fixture
    def mock_s3(self) -> MagicMock:
        """Create a mock S3 client."""
        return MagicMock()

    @pytest.fixture
    def intake(self, mock_s3: MagicMock) -> FileIntakeService:
        """Create an intake service with a small size ceiling."""
        return FileIntakeService(
            s3_client=mock_s3,
            bucket_name="menu-uploads",
            public_base_url="https://cdn.example.com/",
            max_upload_bytes=1024,
        )

    @pytest.mark.parametrize("content_type", ["image/jpeg", "image/png", "image/webp", "IMAGE/PNG"])
    def test_accepts_images(self, intake: FileIntakeService, content_type: str) -> None:
        """Test that any image/* type passes for an image upload."""
        intake.validate("image", content_type, size=10)

    def test_accepts_pdf(self, intake: FileIntakeService) -> None:
        """Test that a PDF passes validation for a pdf upload."""
        intake.validate("pdf", "application/pdf", size=10)

    def test_rejects_pdf_declared_as_image(self, intake: FileIntakeService) -> None:
        """Test the image family message."""
        with pytest.raises(ValidationError, match=r"Please upload an image file \(JPG, PNG, WEBP\)"):
            intake.validate("image", "application/pdf")

    def test_rejects_image_declared_as_pdf(self, intake: FileIntakeService) -> None:
        """Test the pdf family message."""
        with pytest.raises(ValidationError, match="Please upload a PDF file"):
            intake.validate("pdf", "image/png")

    def test_rejects_missing_content_type(self, intake: FileIntakeService) -> None:
        """Test that an upload without a content type is rejected."""
        with pytest.raises(ValidationError):
            intake.validate("image", None)

    def test_rejects_unknown_declared_type(self, intake: FileIntakeService) -> None:
        """Test that only image and pdf are accepted as declared types."""
        with pytest.raises(ValidationError, match="Unknown file type"):
            intake.validate("spreadsheet", "text/csv")

    def test_rejects_empty_and_oversized(self, intake: FileIntakeService) -> None:
        """Test the size bounds."""
        with pytest.raises(ValidationError, match="empty"):
            intake.validate("image", "image/png", size=0)

        with pytest.raises(ValidationError, match="exceeds"):
            intake.validate("image", "image/png", size=1025)

    def test_store_writes_scoped_key(self, intake: FileIntakeService, mock_s3: MagicMock) -> None:
        """Test that uploads land under the restaurant's prefix and yield a public URL."""
        url = intake.store("rest_1", "menu photo.jpg", b"jpeg-bytes", "image/jpeg")

        call_kwargs = mock_s3.put_object.call_args.kwargs
        assert call_kwargs["Bucket"] == "menu-uploads"
        assert call_kwargs["Body"] == b"jpeg-bytes"
        assert call_kwargs["ContentType"] == "image/jpeg"
        assert re.fullmatch(r"menu-imports/rest_1/\d{13}-menu-photo\.jpg", call_kwargs["Key"])
        assert url == f"https://cdn.example.com/{call_kwargs['Key']}"

    def test_store_client_error(self, intake: FileIntakeService, mock_s3: MagicMock) -> None:
        """Test that an S3 error becomes StorageError."""
        mock_s3.put_object.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject"
        )

        with pytest.raises(StorageError):
            intake.store("rest_1", "menu.jpg", b"x", "image/jpeg")

    def test_store_connection_error(self, intake: FileIntakeService, mock_s3: MagicMock) -> None:
        """Test that a transport error becomes StorageError."""
        mock_s3.put_object.side_effect = EndpointConnectionError(endpoint_url="https://s3.example.com")

        with pytest.raises(StorageError):
            intake.store("rest_1", "menu.jpg", b"x", "image/jpeg")
