"""
Snap2Slides Backend: Application Package Initializer
=====================================================

What: Marks the `snap2slides` directory as a Python package.
Who:  Imported by uvicorn (`uvicorn snap2slides.main:app`) and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Orchestration, validation
    ├─────────────────────────────────────┤
    │   Endpoint Pool Manager (Failover)  │  ← Key rotation, health state
    ├─────────────────────────────────────┤
    │   Provider Clients (Gemini, PPLX)   │  ← One bounded upstream call
    └─────────────────────────────────────┘

    Slide documents live in process memory (SlidesStore); there is no
    database layer.
"""

__version__ = "1.0.0"
