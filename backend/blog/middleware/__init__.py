# Middleware package init
"""
Blog Backend: Middleware Package
==================================

Middleware Chain:
    Request → [Request ID] → [Access Log] → [Unexpected Error] → [GZip] → Route Handler

    Request ID runs first so the access log line carries the ID. On the way
    out, the access log sees the final status code and the request ID
    middleware adds the X-Request-ID header.
    Unexpected Error sits inside both, so an unhandled exception still gets
    the header and the log line.
"""
