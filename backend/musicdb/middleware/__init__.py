# Middleware package init
"""
Music DB API - Middleware Package
===================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [CORS] → [Request ID] → [Logging] → [Availability] → [GZip] → Route Handler

    Why this order:
    1. CORS outermost: browsers can read the 503 from the gate too
    2. Request ID: every later log line and error body carries it
    3. Logging: records 503s from the gate as well as handler responses
    4. Availability: closes the API while the database is down
"""
