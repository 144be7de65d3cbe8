"""
Snap2Slides Backend: Slides Store Routes
==========================================

What:  Save, fetch and edit slide documents between client pages.
Who:   Upload page (POST), viewer (GET), editor (PUT).

Endpoints:
    POST /api/slides          body: any JSON object → {id, success, data}
    GET  /api/slides?id=...   → the stored document
    PUT  /api/slides?id=...   body: partial object, shallow-merged
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query

from snap2slides.dependencies import get_slides_store
from snap2slides.exceptions import NotFoundError, ValidationError
from snap2slides.schemas.slides import (
    ErrorResponse,
    SlidesCreateResponse,
    SlidesUpdateResponse,
)
from snap2slides.services.slides_store import SlidesStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Slides"])

_ERRORS = {
    400: {"description": "Missing id", "model": ErrorResponse},
    404: {"description": "Unknown id", "model": ErrorResponse},
}


def _require_id(slide_id: Optional[str]) -> str:
    if not slide_id:
        raise ValidationError(message="Slide ID is required", field="id")
    return slide_id


def _not_found(store: SlidesStore, slide_id: str) -> NotFoundError:
    return NotFoundError(
        resource="slides",
        resource_id=slide_id,
        context={"available_ids": store.list_ids()},
    )


@router.post("/slides", response_model=SlidesCreateResponse, summary="Store slide data")
async def create_slides(
    data: Dict[str, Any] = Body(...),
    store: SlidesStore = Depends(get_slides_store),
) -> SlidesCreateResponse:
    document = store.create(data)
    return SlidesCreateResponse(id=document["id"], data=document)


@router.get(
    "/slides",
    response_model=Dict[str, Any],
    responses=_ERRORS,
    summary="Fetch stored slide data",
)
async def get_slides(
    slide_id: Optional[str] = Query(default=None, alias="id"),
    store: SlidesStore = Depends(get_slides_store),
) -> Dict[str, Any]:
    slide_id = _require_id(slide_id)
    document = store.get(slide_id)
    if document is None:
        raise _not_found(store, slide_id)
    return document


@router.put(
    "/slides",
    response_model=SlidesUpdateResponse,
    responses=_ERRORS,
    summary="Merge changes into stored slide data",
)
async def update_slides(
    changes: Dict[str, Any] = Body(...),
    slide_id: Optional[str] = Query(default=None, alias="id"),
    store: SlidesStore = Depends(get_slides_store),
) -> SlidesUpdateResponse:
    slide_id = _require_id(slide_id)
    updated = store.update(slide_id, changes)
    if updated is None:
        raise _not_found(store, slide_id)
    return SlidesUpdateResponse(data=updated)
