"""
Snap2Slides Backend: Pydantic Request/Response Schemas
========================================================

What:  API contract between the slide client and the backend.
How:   FastAPI uses these models to serialize responses and generate the
       OpenAPI documentation.
Who:   Returned by the vision, slides and generate routes.

Slide documents posted to /api/slides are free-form JSON objects (normally
a SlideAnalysisResponse the client may have edited), so the store keeps
them as plain dicts.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Upload Analysis (POST /api/gemini-vision)
# ══════════════════════════════════════════════════════════════════════════


class ContentQuality(BaseModel):
    score: int = Field(description="Heuristic content quality score")
    level: str = Field(description="Quality label derived from the score")
    word_count: int
    data_points: int = Field(description="Numbers found in the extracted text")
    entities: int = Field(description="Two-word capitalised names found")
    dates: int


class ImageMetadata(BaseModel):
    dimensions: str
    format: str = Field(description="Upper-cased MIME subtype, e.g. PNG")
    quality: str
    analysis: str


class ResearchSummary(BaseModel):
    """Shape of the optional research enrichment block."""

    has_research: bool = True
    research_quality: str
    insight_count: int
    categories: List[str]
    has_follow_up_questions: bool
    has_market_insights: bool


class AnalysisMetrics(BaseModel):
    comprehensiveness: str
    detail_level: str
    slide_count: int
    content_depth: str
    text_extraction_quality: str
    quality_score: int


class OfflineInstructions(BaseModel):
    issue: str
    solution: str
    reset_time: str
    upgrade_url: str


class SlideAnalysisResponse(BaseModel):
    """
    What:  Result of analysing one uploaded document.
    When:  Returned by POST /api/gemini-vision with HTTP 200, including when
           every vision endpoint failed (mock_data=True, demo content).
    """

    content: str = Field(description="Raw slide text from the vision provider")
    file_name: str
    file_size: int
    mime_type: str
    upload_date: datetime
    document_type: str
    extracted_text: Optional[str] = None
    has_text_content: bool
    content_quality: ContentQuality
    image_metadata: ImageMetadata
    analysis_metrics: AnalysisMetrics
    api_used: Optional[str] = Field(default=None, description="Endpoint that served the call")
    insights: Optional[str] = Field(default=None, description="Research provider insights")
    research: Optional[ResearchSummary] = None
    message: str
    mock_data: bool = False
    api_failure: bool = False
    quota_exceeded: bool = False
    failure_reason: Optional[str] = None
    instructions: Optional[OfflineInstructions] = None


# ══════════════════════════════════════════════════════════════════════════
# Multi-file Analysis (POST /api/analyze)
# ══════════════════════════════════════════════════════════════════════════


class SlideOutline(BaseModel):
    title: str
    key_points: List[str] = Field(default_factory=list)
    content: str = ""
    extracted_text: str = ""


class BatchAnalysisItem(BaseModel):
    filename: str
    analysis: SlideOutline
    api_used: Optional[str] = None


class BatchAnalysisResponse(BaseModel):
    results: List[BatchAnalysisItem]


# ══════════════════════════════════════════════════════════════════════════
# Slides Store (POST/GET/PUT /api/slides)
# ══════════════════════════════════════════════════════════════════════════


class SlidesCreateResponse(BaseModel):
    id: str
    success: bool = True
    data: Dict[str, Any]


class SlidesUpdateResponse(BaseModel):
    success: bool = True
    data: Dict[str, Any]


# ══════════════════════════════════════════════════════════════════════════
# Presentation Outline (POST /api/generate)
# ══════════════════════════════════════════════════════════════════════════


class PresentationSlide(BaseModel):
    id: int
    title: str
    content: str = ""
    key_points: List[Any] = Field(default_factory=list)
    layout: str = "title-content"


class Presentation(BaseModel):
    id: str
    title: str
    slides: List[PresentationSlide]
    created_at: datetime


class GenerateResponse(BaseModel):
    success: bool = True
    presentation: Presentation
    download_url: str


# ══════════════════════════════════════════════════════════════════════════
# Error Response Model
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "slides with ID '1718000000000' was not found",
            "details": {"available_ids": ["1717999999999"]},
            "request_id": "a1b2c3d4"
        }
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")
