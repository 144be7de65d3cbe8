"""
Snap2Slides Backend: Services Layer
=====================================

What:  Business logic between the routes (HTTP) and the AI providers.

Service Inventory:
    - EndpointPoolManager: key rotation, failover and health for the
      Gemini (vision) and Perplexity (research) endpoints
    - VisionClient / ResearchClient (abstract): one provider call per endpoint
    - GeminiVisionClient, PerplexityResearchClient: concrete provider clients
    - FileService: upload validation
    - SlideService: upload → validate → vision → research → analysis
    - SlidesStore: in-memory slide documents
    - content_analysis, presentation: pure helpers
"""
