from starlette.middleware.base import BaseHTTPMiddleware

SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "no-referrer",
    "Cache-Control": "no-store",
}


class SecurityHeaders(BaseHTTPMiddleware):
    """Add fixed security headers to every response."""

    async def dispatch(self, request, call_next):
        resp = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            resp.headers.setdefault(name, value)
        return resp
