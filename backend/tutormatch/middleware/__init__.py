# Middleware package init
"""
TutorMatch Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Rate Limit] → [Logging] → [GZip] → [CORS] → Route Handler

    - Request ID is outermost so every later layer, including a 429 from
      the rate limiter, can report the correlation id.
    - Rate limiting rejects abusive clients before any route work.
    - Logging measures duration and reads the principal role set by the
      auth dependency.
    - GZip compresses larger JSON bodies (tutor search results).
    - CORS is FastAPI's CORSMiddleware (handles preflight).
"""
