"""
Snap2Slides Backend: Presentation Outline Builder
===================================================

What:  Turns a list of slide dicts into a numbered presentation outline.
Who:   POST /api/generate.

This is a JSON outline for the client-side renderer. It does not produce
PPTX or PDF files.
"""

import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from snap2slides.exceptions import ValidationError
from snap2slides.schemas.slides import GenerateResponse, Presentation, PresentationSlide

DEFAULT_TITLE = "AI Generated Presentation"


def build_presentation(
    slides: Any,
    presentation_id: Optional[str] = None,
) -> GenerateResponse:
    """
    Args:
        slides:          Expected to be a list of dicts with optional
                         `title`, `content` and `keyPoints`/`key_points`
        presentation_id: Override for tests; defaults to a millisecond timestamp

    Raises:
        ValidationError if `slides` is missing or not a list
    """
    if not slides or not isinstance(slides, list):
        raise ValidationError(message="Invalid slides data", field="slides")

    built: List[PresentationSlide] = []
    for index, slide in enumerate(slides, start=1):
        data: Dict[str, Any] = slide if isinstance(slide, dict) else {}
        key_points = data.get("keyPoints") or data.get("key_points")
        built.append(
            PresentationSlide(
                id=index,
                title=str(data.get("title") or f"Slide {index}"),
                content=str(data.get("content") or ""),
                key_points=key_points if isinstance(key_points, list) else [],
            )
        )

    pid = presentation_id or str(int(time.time() * 1000))
    presentation = Presentation(
        id=pid,
        title=DEFAULT_TITLE,
        slides=built,
        created_at=datetime.now(timezone.utc),
    )
    return GenerateResponse(presentation=presentation, download_url=f"/api/download/{pid}")
