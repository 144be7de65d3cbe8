"""
Snap2Slides Backend: FastAPI Dependencies
===========================================

What:  Accessors for the process-wide services built by the app factory.
How:   create_app() stores each service on app.state; these functions read
       them back for FastAPI's Depends() system.
Who:   Injected into route handlers.

Usage:
    @router.get("/api/status")
    async def get_status(manager: EndpointPoolManager = Depends(get_endpoint_manager)):
        ...

Tests replace a service by building the app with create_app(endpoint_manager=...)
or by setting app.dependency_overrides.
"""

from fastapi import Request

from snap2slides.services.endpoint_manager import EndpointPoolManager
from snap2slides.services.slide_service import SlideService
from snap2slides.services.slides_store import SlidesStore


def get_endpoint_manager(request: Request) -> EndpointPoolManager:
    return request.app.state.endpoint_manager


def get_slides_store(request: Request) -> SlidesStore:
    return request.app.state.slides_store


def get_slide_service(request: Request) -> SlideService:
    return request.app.state.slide_service
