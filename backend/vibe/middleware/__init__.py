# Middleware package init
"""
Vibe Backend — Middleware Package
==================================

Middleware chain, outermost first:
    Request ID → Rate Limit → Access Log → GZip → CORS → Route Handler

The request ID is assigned first so that rate limit rejections and every
access log line carry it. Rate limiting runs before the access log and the
routes, so rejected requests cost almost nothing.
"""
