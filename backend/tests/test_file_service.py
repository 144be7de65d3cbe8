"""
Snap2Slides Backend: File Service Unit Tests
==============================================

What:  Tests for upload validation (MIME family, size limits).
How:   In-memory bytes only; uploads are never written to disk.

Test Strategy:
    ✅ Image and text prefixes accepted
    ✅ PDF / PowerPoint / Word types accepted
    ✅ Other types rejected with a readable message
    ✅ MIME parameters and case normalized
    ✅ Empty files rejected
    ✅ Size limit enforced on reported and actual size
"""

import pytest

from snap2slides.exceptions import ValidationError
from snap2slides.services.file_service import FileService

ONE_MB = 1024 * 1024


class TestMimeValidation:

    def setup_method(self):
        self.service = FileService(max_file_size=ONE_MB)

    @pytest.mark.parametrize(
        "mime_type",
        [
            "image/png",
            "image/jpeg",
            "text/plain",
            "text/markdown",
            "application/pdf",
            "application/vnd.ms-powerpoint",
            "application/vnd.openxmlformats-officedocument.presentationml.presentation",
            "application/msword",
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        ],
    )
    def test_supported_types(self, mime_type):
        assert self.service.validate_mime_type(mime_type) == mime_type

    @pytest.mark.parametrize(
        "mime_type", ["application/zip", "video/mp4", "application/x-msdownload", "", None]
    )
    def test_unsupported_types(self, mime_type):
        with pytest.raises(ValidationError, match="File type not supported"):
            self.service.validate_mime_type(mime_type)

    def test_normalizes_case_and_parameters(self):
        assert self.service.validate_mime_type("Text/Plain; charset=utf-8") == "text/plain"


class TestSizeValidation:

    def setup_method(self):
        self.service = FileService(max_file_size=ONE_MB)

    def test_empty_file_rejected(self):
        with pytest.raises(ValidationError, match="empty"):
            self.service.validate_size(None, 0)

    def test_exact_limit_accepted(self):
        self.service.validate_size(ONE_MB, ONE_MB)

    def test_actual_size_over_limit(self):
        with pytest.raises(ValidationError, match="less than 1MB"):
            self.service.validate_size(None, ONE_MB + 1)

    def test_reported_size_over_limit(self):
        with pytest.raises(ValidationError) as exc_info:
            self.service.validate_size(ONE_MB * 2, 10)
        assert exc_info.value.context["reported_size"] == ONE_MB * 2

    def test_validate_runs_both_checks(self, sample_image_bytes):
        assert self.service.validate("scan.jpg", "image/jpeg", sample_image_bytes) == "image/jpeg"
        with pytest.raises(ValidationError):
            self.service.validate("scan.jpg", "image/jpeg", b"")

    def test_from_settings(self, app_settings):
        assert FileService.from_settings(app_settings).max_file_size == app_settings.max_file_size
