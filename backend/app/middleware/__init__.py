# Middleware package init
"""
TouristMap Backend: Middleware Package
========================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    The request ID is set first so the access log line and any error
    response for the same request carry it.
"""
