"""
Snap2Slides Backend: Slide Service Unit Tests
===============================================

What:  Tests for SlideService orchestration over the endpoint pool.
How:   Real EndpointPoolManager with scripted fake provider clients.

What we test:
    ✅ Successful analysis attaches quality, metadata and research
    ✅ Research failure only drops the insights
    ✅ Vision failure returns flagged offline content (never raises)
    ✅ Validation errors propagate
    ✅ Batch analysis parses JSON, falls back on bad JSON, 503 on failure
"""

import pytest

from snap2slides.exceptions import ProviderError, ServiceUnavailableError, ValidationError
from snap2slides.services import content_analysis as analysis
from snap2slides.services.file_service import FileService
from snap2slides.services.slide_service import (
    OFFLINE_SCORE,
    SlideService,
    UploadedFile,
    parse_slide_outline,
)

VISION_TEXT = """DOCUMENT TYPE: Meeting Notes

EXTRACTED TEXT CONTENT:
Weekly sync with Dana Lee on 2024-02-01 about the 3 open invoices.

VISUAL ELEMENTS:
None

ACTUAL CONTENT SLIDES:
Slide 1: Document Overview
Slide 2: All Extracted Text
"""


@pytest.fixture
def service(make_manager):
    def _make(**kwargs):
        return SlideService(
            manager=make_manager(**kwargs),
            file_service=FileService(max_file_size=1024 * 1024),
        )

    return _make


def _upload(content: bytes = b"png-bytes", mime_type: str = "image/png") -> UploadedFile:
    return UploadedFile(filename="notes.png", mime_type=mime_type, content=content)


class TestAnalyzeUpload:

    @pytest.mark.asyncio
    async def test_success_with_research(self, service, vision_client, research_client):
        vision_client.script("gemini_1", VISION_TEXT)
        research_client.script("perplexity_1", "Strategic business view\nNEXT STEPS")

        result = await service().analyze_upload(_upload())

        assert result.mock_data is False
        assert result.api_used == "gemini_1"
        assert result.document_type == "Meeting Notes"
        assert result.extracted_text.startswith("Weekly sync with Dana Lee")
        assert result.has_text_content is True
        assert result.image_metadata.format == "PNG"
        assert result.analysis_metrics.slide_count == 2
        assert result.analysis_metrics.quality_score == result.content_quality.score
        assert result.insights == "Strategic business view\nNEXT STEPS"
        assert result.research.insight_count == 2
        assert vision_client.prompts == [analysis.EXTRACTION_PROMPT]
        assert "Dana Lee" in research_client.queries[0]

    @pytest.mark.asyncio
    async def test_research_failure_is_not_fatal(self, service, vision_client, research_client):
        vision_client.script("gemini_1", VISION_TEXT)
        research_client.script("perplexity_1", ProviderError("HTTP 503: Service Unavailable"))

        result = await service().analyze_upload(_upload())

        assert result.mock_data is False
        assert result.insights is None
        assert result.research is None

    @pytest.mark.asyncio
    async def test_no_research_endpoint(self, service, vision_client):
        vision_client.script("gemini_1", VISION_TEXT)

        result = await service(research=False).analyze_upload(_upload())

        assert result.insights is None
        assert result.api_used == "gemini_1"

    @pytest.mark.asyncio
    async def test_vision_failure_returns_offline_content(self, service, vision_client, research_client):
        vision_client.script("gemini_1", ProviderError("quota exceeded"))
        vision_client.script("gemini_2", ProviderError("quota exceeded"))

        result = await service().analyze_upload(_upload())

        assert result.mock_data is True
        assert result.api_failure is True
        assert result.quota_exceeded is True
        assert result.failure_reason == "All Gemini APIs failed. Last error: quota exceeded"
        assert result.content_quality.score == OFFLINE_SCORE
        assert result.analysis_metrics.slide_count == 8
        assert result.instructions is not None
        assert result.api_used is None
        assert "notes.png" in result.content
        assert research_client.calls == []

    @pytest.mark.asyncio
    async def test_empty_pool_returns_offline_content(self, service, vision_client):
        result = await service(vision_ids=[]).analyze_upload(_upload())

        assert result.mock_data is True
        assert "No available Gemini APIs" in result.failure_reason
        assert vision_client.calls == []

    @pytest.mark.asyncio
    async def test_validation_error_propagates(self, service, vision_client):
        with pytest.raises(ValidationError):
            await service().analyze_upload(_upload(mime_type="application/zip"))
        assert vision_client.calls == []


class TestAnalyzeBatch:

    @pytest.mark.asyncio
    async def test_parses_json_outline(self, service, vision_client):
        vision_client.script(
            "gemini_1",
            '```json\n{"title": "Roadmap", "keyPoints": ["Q1", "Q2"], '
            '"content": "Plan", "extractedText": "ROADMAP"}\n```',
        )

        result = await service(vision_ids=["gemini_1"]).analyze_batch([_upload()])

        item = result.results[0]
        assert item.filename == "notes.png"
        assert item.api_used == "gemini_1"
        assert item.analysis.title == "Roadmap"
        assert item.analysis.key_points == ["Q1", "Q2"]
        assert item.analysis.extracted_text == "ROADMAP"
        assert vision_client.prompts == [analysis.SLIDE_JSON_PROMPT]

    @pytest.mark.asyncio
    async def test_empty_list_rejected(self, service):
        with pytest.raises(ValidationError, match="No files provided"):
            await service().analyze_batch([])

    @pytest.mark.asyncio
    async def test_vision_failure_raises_503(self, service, vision_client):
        vision_client.script("gemini_1", ProviderError("down"))

        with pytest.raises(ServiceUnavailableError) as exc_info:
            await service(vision_ids=["gemini_1"]).analyze_batch([_upload()])

        assert exc_info.value.context["filename"] == "notes.png"


class TestParseSlideOutline:

    def test_plain_text_falls_back(self):
        outline = parse_slide_outline("Just some prose")
        assert outline.title == "Generated Slide"
        assert outline.key_points == ["Content extracted from image"]
        assert outline.content == "Just some prose"

    def test_non_object_json_falls_back(self):
        assert parse_slide_outline("[1, 2]").title == "Generated Slide"

    def test_missing_fields_default(self):
        outline = parse_slide_outline('{"content": "Body"}')
        assert outline.title == "Generated Slide"
        assert outline.key_points == []
        assert outline.content == "Body"
