"""
Snap2Slides Backend: Vision Route Handlers
============================================

What:  Upload endpoints that send documents through the Gemini key pool.
How:   Reads the multipart upload into memory and delegates to SlideService.
Who:   Called by the upload page of the slide client.

Request Flow (POST /api/gemini-vision):
    1. Client sends multipart/form-data with a 'file' (or legacy 'image') field
    2. Bytes are read into memory; size is bounded by validation
    3. SlideService: validate → vision pool → research → quality scoring
    4. 200 with SlideAnalysisResponse, also when demo content was returned

Security Checks:
    - File type and size: FileService (via SlideService)
    - Rate limit: middleware
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile

from snap2slides.dependencies import get_slide_service
from snap2slides.exceptions import ValidationError
from snap2slides.schemas.slides import (
    BatchAnalysisResponse,
    ErrorResponse,
    SlideAnalysisResponse,
)
from snap2slides.services.slide_service import SlideService, UploadedFile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Vision"])


async def _read_upload(upload: UploadFile) -> UploadedFile:
    try:
        content = await upload.read()
    finally:
        await upload.close()
    return UploadedFile(
        filename=upload.filename or "upload",
        mime_type=upload.content_type,
        content=content,
        content_length=upload.size,
    )


@router.post(
    "/gemini-vision",
    response_model=SlideAnalysisResponse,
    responses={
        400: {"description": "Missing file, unsupported type or bad size", "model": ErrorResponse},
        429: {"description": "Rate limit exceeded", "model": ErrorResponse},
    },
    summary="Analyze a document into slide content",
    description=(
        "Upload an image, PDF, PowerPoint, Word or text document (max 50MB). "
        "The document is analyzed by the first available Gemini key and "
        "optionally enriched with Perplexity research. When every Gemini key "
        "fails, demo content is returned with mock_data=true."
    ),
)
async def analyze_document(
    file: Optional[UploadFile] = File(default=None, description="Document to analyze"),
    image: Optional[UploadFile] = File(default=None, description="Legacy field name for file"),
    service: SlideService = Depends(get_slide_service),
) -> SlideAnalysisResponse:
    upload = file or image
    if upload is None:
        raise ValidationError(message="No file provided", field="file")

    uploaded = await _read_upload(upload)
    logger.info(
        "Received analysis request: filename=%s, size=%d bytes",
        uploaded.filename,
        len(uploaded.content),
    )
    return await service.analyze_upload(uploaded)


@router.post(
    "/analyze",
    response_model=BatchAnalysisResponse,
    responses={
        400: {"description": "No files or invalid file", "model": ErrorResponse},
        503: {"description": "Vision provider unavailable", "model": ErrorResponse},
    },
    summary="Generate a JSON slide outline per uploaded file",
)
async def analyze_files(
    files: Optional[List[UploadFile]] = File(default=None, description="One or more images"),
    service: SlideService = Depends(get_slide_service),
) -> BatchAnalysisResponse:
    if not files:
        raise ValidationError(message="No files provided", field="files")

    uploads = [await _read_upload(f) for f in files]
    logger.info("Received batch analysis request: %d files", len(uploads))
    return await service.analyze_batch(uploads)
