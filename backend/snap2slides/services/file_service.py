"""
Snap2Slides Backend: Upload Validation Service
================================================

What:  Validates uploaded documents before they are sent to a provider.
How:   Checks the declared MIME type against the supported families and
       the byte size against the configured maximum. Uploads are never
       written to disk; the bytes go straight to the vision provider.
Who:   Called by SlideService as the first step of every upload.

Supported Types:
    image/*, text/*            (prefix match)
    application/pdf
    application/vnd.openxmlformats-officedocument.presentationml.presentation
    application/vnd.ms-powerpoint
    application/msword
    application/vnd.openxmlformats-officedocument.wordprocessingml.document

Validation order (cheapest first):
    1. MIME type check: O(1), header only
    2. Size check: Content-Length header, then actual byte count
"""

import logging
from typing import Optional

from snap2slides.config import Settings
from snap2slides.exceptions import ValidationError

logger = logging.getLogger(__name__)

SUPPORTED_PREFIXES = ("image/", "text/")

SUPPORTED_TYPES = frozenset({
    "application/pdf",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "application/vnd.ms-powerpoint",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
})


class FileService:
    """
    Upload validation for the vision pipeline.

    Args:
        max_file_size: Largest accepted upload in bytes
    """

    def __init__(self, max_file_size: int):
        self.max_file_size = max_file_size

    @classmethod
    def from_settings(cls, settings: Settings) -> "FileService":
        return cls(max_file_size=settings.max_file_size)

    def is_supported(self, mime_type: str) -> bool:
        mime = (mime_type or "").lower().split(";")[0].strip()
        return mime.startswith(SUPPORTED_PREFIXES) or mime in SUPPORTED_TYPES

    def validate_mime_type(self, mime_type: Optional[str]) -> str:
        """
        Returns:  Normalized MIME type (lowercase, parameters stripped).
        Raises:   ValidationError if the type is missing or unsupported.
        """
        if not mime_type or not self.is_supported(mime_type):
            raise ValidationError(
                message=(
                    "File type not supported. Please upload images, PDFs, "
                    "PowerPoint files, or text documents."
                ),
                field="file",
                context={"content_type": mime_type},
            )
        return mime_type.lower().split(";")[0].strip()

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Validate file size against the configured maximum.

        Args:
            content_length: Reported upload size (may be None or inaccurate)
            actual_size:    Actual byte count of the uploaded file

        Raises:
            ValidationError for empty or oversized files
        """
        max_mb = self.max_file_size / (1024 * 1024)

        if actual_size == 0:
            raise ValidationError(
                message="Uploaded file is empty.",
                field="file",
                context={"actual_size": 0},
            )

        if content_length and content_length > self.max_file_size:
            raise ValidationError(
                message=f"File size must be less than {max_mb:.0f}MB",
                field="file",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size > self.max_file_size:
            raise ValidationError(
                message=f"File size must be less than {max_mb:.0f}MB",
                field="file",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    def validate(
        self,
        filename: str,
        mime_type: Optional[str],
        content: bytes,
        content_length: Optional[int] = None,
    ) -> str:
        """
        Full validation pipeline for one upload.

        Returns:  Normalized MIME type to forward to the provider.
        """
        normalized = self.validate_mime_type(mime_type)
        self.validate_size(content_length, len(content))
        logger.debug("Upload accepted: %s (%s, %d bytes)", filename, normalized, len(content))
        return normalized
