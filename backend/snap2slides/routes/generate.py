"""
Snap2Slides Backend: Presentation Generate Route
==================================================

What:  POST /api/generate turns a list of slides into a numbered outline.
"""

from typing import Any, Dict

from fastapi import APIRouter, Body

from snap2slides.schemas.slides import ErrorResponse, GenerateResponse
from snap2slides.services.presentation import build_presentation

router = APIRouter(prefix="/api", tags=["Presentation"])


@router.post(
    "/generate",
    response_model=GenerateResponse,
    responses={400: {"description": "slides missing or not a list", "model": ErrorResponse}},
    summary="Build a presentation outline",
)
async def generate_presentation(payload: Dict[str, Any] = Body(...)) -> GenerateResponse:
    return build_presentation(payload.get("slides"))
