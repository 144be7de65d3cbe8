"""
Snap2Slides Backend: Slide Service (Business Logic Orchestrator)
==================================================================

What:  Central orchestrator for the upload → validate → vision → research
       → analysis workflow.
How:   Composes FileService, the EndpointPoolManager and the pure helpers
       in content_analysis. Holds no per-request state.
Who:   Called by the vision routes; reached through
       dependencies.get_slide_service().

Orchestration Flow (POST /api/gemini-vision):
    ┌──────────┐    ┌────────────┐    ┌──────────────┐    ┌──────────────┐
    │  Upload  │───▶│  Validate  │───▶│ Vision pool  │───▶│ Research     │
    │  (Route) │    │ (FileServ) │    │ (rotation)   │    │ (optional)   │
    └──────────┘    └────────────┘    └──────┬───────┘    └──────┬───────┘
                                             │ all failed        ▼
                                             ▼            quality scoring
                                      offline demo content

    Validation errors propagate (400). A vision failure never fails the
    request: the caller gets demo content flagged mock_data/api_failure.
    A research failure only drops the insights block.
"""

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from snap2slides.exceptions import ServiceUnavailableError, ValidationError
from snap2slides.schemas.slides import (
    AnalysisMetrics,
    BatchAnalysisItem,
    BatchAnalysisResponse,
    ContentQuality,
    ImageMetadata,
    OfflineInstructions,
    ResearchSummary,
    SlideAnalysisResponse,
    SlideOutline,
)
from snap2slides.services import content_analysis as analysis
from snap2slides.services.endpoint_manager import EndpointPoolManager
from snap2slides.services.file_service import FileService

logger = logging.getLogger(__name__)

OFFLINE_MESSAGE = (
    "AI vision service unavailable or quota exceeded. Demo content generated. "
    "Try again later or upgrade to a paid tier for full AI analysis."
)
OFFLINE_SCORE = 45
OFFLINE_SLIDE_COUNT = 8

_CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")


@dataclass
class UploadedFile:
    """One file from a multipart request, already read into memory."""

    filename: str
    mime_type: Optional[str]
    content: bytes
    content_length: Optional[int] = None


class SlideService:
    """
    Business logic for turning uploads into slide content.

    Args:
        manager:       Endpoint pool used for every provider call
        file_service:  Upload validation
    """

    def __init__(self, manager: EndpointPoolManager, file_service: FileService):
        self.manager = manager
        self.file_service = file_service

    async def analyze_upload(self, upload: UploadedFile) -> SlideAnalysisResponse:
        """
        Analyze one uploaded document end-to-end.

        Raises:
            ValidationError: Unsupported type, empty or oversized file.
        """
        mime_type = self.file_service.validate(
            filename=upload.filename,
            mime_type=upload.mime_type,
            content=upload.content,
            content_length=upload.content_length,
        )
        logger.info(
            "Processing file: %s, type: %s, size: %d", upload.filename, mime_type, len(upload.content)
        )

        vision = await self.manager.analyze_with_vision_provider(
            upload.content, mime_type, analysis.EXTRACTION_PROMPT
        )
        if not vision.success:
            logger.warning("All vision APIs failed, using offline content: %s", vision.error)
            return self._offline_response(upload, mime_type, vision.error)

        content = vision.data or ""
        logger.info("Vision analysis successful with %s", vision.api_used)
        extracted_text = analysis.extract_text_section(content)

        insights: Optional[str] = None
        research = await self.manager.get_insights_with_research_provider(
            analysis.build_research_query(content, extracted_text)
        )
        if research.success:
            insights = research.data
            logger.info("Research insights added with %s", research.api_used)
        else:
            logger.info("Research insights skipped: %s", research.error)

        quality = analysis.assess_quality(content, extracted_text)
        word_summary = (
            f"{quality.word_count} words extracted" if extracted_text else "Visual Analysis Only"
        )
        extraction_summary = (
            f"{quality.data_points} data points, {quality.entities} entities"
            if extracted_text
            else "No Text Detected"
        )

        return SlideAnalysisResponse(
            content=content,
            file_name=upload.filename,
            file_size=len(upload.content),
            mime_type=mime_type,
            upload_date=datetime.now(timezone.utc),
            document_type=analysis.document_type(content),
            extracted_text=extracted_text,
            has_text_content=bool(extracted_text) and len(extracted_text) > 10,
            content_quality=ContentQuality(
                score=quality.score,
                level=quality.level,
                word_count=quality.word_count,
                data_points=quality.data_points,
                entities=quality.entities,
                dates=quality.dates,
            ),
            image_metadata=ImageMetadata(
                dimensions="AI Analyzed",
                format=analysis.format_label(mime_type),
                quality="High Resolution",
                analysis="Complete with Text Extraction",
            ),
            analysis_metrics=AnalysisMetrics(
                comprehensiveness=quality.comprehensiveness,
                detail_level=f"{quality.level} Grade",
                slide_count=quality.slide_count,
                content_depth=word_summary,
                text_extraction_quality=extraction_summary,
                quality_score=quality.score,
            ),
            api_used=vision.api_used,
            insights=insights,
            research=ResearchSummary(**analysis.summarize_research(insights)) if insights else None,
            message=(
                "Slides generated - some content may be generic due to limited "
                "document text extraction"
                if quality.has_placeholders
                else "High-quality slides created with actual extracted content and business insights"
            ),
        )

    def _offline_response(
        self, upload: UploadedFile, mime_type: str, reason: Optional[str]
    ) -> SlideAnalysisResponse:
        size_mb = len(upload.content) / 1024 / 1024
        return SlideAnalysisResponse(
            content=analysis.build_offline_content(upload.filename, len(upload.content), mime_type),
            file_name=upload.filename,
            file_size=len(upload.content),
            mime_type=mime_type,
            upload_date=datetime.now(timezone.utc),
            document_type="AI Services Offline",
            extracted_text=None,
            has_text_content=False,
            content_quality=ContentQuality(
                score=OFFLINE_SCORE,
                level="Demo Mode - AI Services Unavailable",
                word_count=0,
                data_points=0,
                entities=0,
                dates=0,
            ),
            image_metadata=ImageMetadata(
                dimensions="Analysis unavailable",
                format=analysis.format_label(mime_type),
                quality="AI Services Offline",
                analysis="Requires valid API configuration",
            ),
            analysis_metrics=AnalysisMetrics(
                comprehensiveness="Demo Mode - Limited Analysis",
                detail_level="Simulated Results",
                slide_count=OFFLINE_SLIDE_COUNT,
                content_depth=f"Demo analysis of {size_mb:.2f}MB file",
                text_extraction_quality="Demo content generated",
                quality_score=OFFLINE_SCORE,
            ),
            message=OFFLINE_MESSAGE,
            mock_data=True,
            api_failure=True,
            quota_exceeded=True,
            failure_reason=reason,
            instructions=OfflineInstructions(
                issue="Google Gemini API unavailable or free tier quota exceeded",
                solution="Upgrade to a paid Google Cloud account or wait for quota reset",
                reset_time="Daily quotas reset at midnight Pacific Time",
                upgrade_url="https://cloud.google.com/vertex-ai/pricing",
            ),
        )

    async def analyze_batch(self, uploads: List[UploadedFile]) -> BatchAnalysisResponse:
        """
        Ask for a JSON slide outline per file.

        Raises:
            ValidationError:          No files, or a file fails validation.
            ServiceUnavailableError:  The vision pool could not serve a file.
        """
        if not uploads:
            raise ValidationError(message="No files provided", field="files")

        results: List[BatchAnalysisItem] = []
        for upload in uploads:
            mime_type = self.file_service.validate(
                filename=upload.filename,
                mime_type=upload.mime_type,
                content=upload.content,
                content_length=upload.content_length,
            )
            vision = await self.manager.analyze_with_vision_provider(
                upload.content, mime_type, analysis.SLIDE_JSON_PROMPT
            )
            if not vision.success:
                raise ServiceUnavailableError(
                    message="Failed to analyze images",
                    context={"filename": upload.filename, "reason": vision.error},
                )
            results.append(
                BatchAnalysisItem(
                    filename=upload.filename,
                    analysis=parse_slide_outline(vision.data or ""),
                    api_used=vision.api_used,
                )
            )

        logger.info("Batch analysis complete: %d files", len(results))
        return BatchAnalysisResponse(results=results)


def parse_slide_outline(text: str) -> SlideOutline:
    """
    Parse the provider's JSON outline; tolerate a ```json fence.

    Anything that is not a JSON object becomes a "Generated Slide" holding
    the raw text.
    """
    cleaned = _CODE_FENCE_RE.sub("", text.strip())
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        parsed = None

    if not isinstance(parsed, dict):
        return SlideOutline(
            title="Generated Slide",
            key_points=["Content extracted from image"],
            content=text,
            extracted_text="",
        )

    key_points = parsed.get("keyPoints") or parsed.get("key_points") or []
    return SlideOutline(
        title=str(parsed.get("title") or "Generated Slide"),
        key_points=[str(point) for point in key_points] if isinstance(key_points, list) else [],
        content=str(parsed.get("content") or ""),
        extracted_text=str(parsed.get("extractedText") or parsed.get("extracted_text") or ""),
    )
