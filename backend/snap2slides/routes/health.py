"""
Snap2Slides Backend: Health Check Route
=========================================

What:  Liveness probe plus a summary of provider pool health.
How:   Reads the endpoint manager's status snapshot; makes no provider calls.
Who:   Docker health checks, load balancers, monitoring.

Status levels:
    healthy   → at least one Gemini endpoint in rotation
    degraded  → none in rotation; uploads still answer with demo content,
                so the probe stays HTTP 200
"""

import time

from fastapi import APIRouter, Depends, Response

from snap2slides import __version__
from snap2slides.dependencies import get_endpoint_manager
from snap2slides.models.endpoint import ProviderType
from snap2slides.schemas.status import HealthResponse
from snap2slides.services.endpoint_manager import EndpointPoolManager

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(
    manager: EndpointPoolManager = Depends(get_endpoint_manager),
) -> HealthResponse:
    snapshot = manager.get_status_snapshot()
    vision = [e for e in snapshot if e.type == ProviderType.VISION.value]
    research = [e for e in snapshot if e.type == ProviderType.RESEARCH.value]
    vision_healthy = sum(1 for e in vision if e.is_healthy)

    return HealthResponse(
        status="healthy" if vision_healthy else "degraded",
        version=__version__,
        uptime_seconds=round(time.time() - _start_time, 2),
        vision_endpoints=len(vision),
        vision_healthy=vision_healthy,
        research_endpoints=len(research),
        research_healthy=sum(1 for e in research if e.is_healthy),
    )


@router.head("/health", include_in_schema=False)
async def health_probe() -> Response:
    return Response(status_code=200)
