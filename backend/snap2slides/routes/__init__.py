"""
Snap2Slides Backend: API Routes Package
=========================================

What:  HTTP route handlers. Routes stay thin: read the request, call a
       service, shape the response. Errors propagate to the global
       exception handlers in main.py.

Route Inventory:
    - vision.py:    POST /api/gemini-vision       (analyze one document)
                    POST /api/analyze             (JSON outline per file)
    - slides.py:    POST/GET/PUT /api/slides      (in-memory slide documents)
    - status.py:    GET/POST /api/status          (endpoint health, reset)
    - generate.py:  POST /api/generate            (presentation outline)
    - health.py:    GET/HEAD /health              (liveness and pool health)
"""
