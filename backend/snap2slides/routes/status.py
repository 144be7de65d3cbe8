"""
Snap2Slides Backend: Endpoint Status Routes
=============================================

What:  Admin view of provider endpoint health, and manual reset.
Who:   The status dashboard.

Security:
    Responses are built from EndpointStatus, which has no credential field.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from snap2slides.dependencies import get_endpoint_manager
from snap2slides.exceptions import ValidationError
from snap2slides.models.endpoint import ProviderType
from snap2slides.schemas.slides import ErrorResponse
from snap2slides.schemas.status import (
    StatusActionRequest,
    StatusActionResponse,
    StatusResponse,
    StatusSummary,
)
from snap2slides.services.endpoint_manager import EndpointPoolManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Status"])


@router.get("/status", response_model=StatusResponse, summary="Endpoint health summary")
async def get_status(
    manager: EndpointPoolManager = Depends(get_endpoint_manager),
) -> StatusResponse:
    details = manager.get_status_snapshot()
    active = sum(1 for e in details if e.is_healthy)
    return StatusResponse(
        timestamp=datetime.now(timezone.utc),
        summary=StatusSummary(
            total=len(details),
            active=active,
            inactive=len(details) - active,
            gemini=[e for e in details if e.type == ProviderType.VISION.value],
            perplexity=[e for e in details if e.type == ProviderType.RESEARCH.value],
            details=details,
        ),
    )


@router.post(
    "/status",
    response_model=StatusActionResponse,
    responses={400: {"description": "Unsupported action", "model": ErrorResponse}},
    summary="Run an admin action on an endpoint",
)
async def post_status_action(
    body: StatusActionRequest,
    manager: EndpointPoolManager = Depends(get_endpoint_manager),
) -> StatusActionResponse:
    if body.action != "reset" or not body.api_id:
        raise ValidationError(
            message="Invalid action or missing apiId",
            field="action",
            context={"action": body.action},
        )

    manager.reset_endpoint(body.api_id)
    return StatusActionResponse(message=f"API {body.api_id} has been reset")
