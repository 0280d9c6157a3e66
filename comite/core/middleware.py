"""
Security and CORS middleware
"""
import logging
from typing import List, Optional
from urllib.parse import urlsplit

from fastapi import Request
from fastapi.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

ALLOW_METHODS = "GET,HEAD,PUT,POST,OPTIONS"
ALLOW_HEADERS = "Content-Type, Authorization, x-amz-acl, x-amz-content-sha256"


def request_origin(request: Request) -> Optional[str]:
    """Origin of the caller, from Origin or else Referer reduced to scheme://host"""
    raw = request.headers.get("origin") or request.headers.get("referer")
    if not raw:
        return None
    parts = urlsplit(raw)
    if not parts.scheme or not parts.netloc:
        return None
    return f"{parts.scheme}://{parts.netloc}"


def resolve_allow_origin(allow_list: List[str], origin: Optional[str]) -> str:
    """Echo an allow-listed origin, else fall back to the first entry or the wildcard"""
    if not allow_list:
        return "*"
    if origin and origin in allow_list:
        return origin
    return allow_list[0]


class CorsHeadersMiddleware(BaseHTTPMiddleware):
    """Answer preflight requests and add CORS headers to every response"""

    def __init__(self, app, allow_origins: Optional[List[str]] = None):
        super().__init__(app)
        self.allow_origins = allow_origins or []

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            response = Response(status_code=204)
        else:
            response = await call_next(request)

        response.headers["Access-Control-Allow-Origin"] = resolve_allow_origin(
            self.allow_origins, request_origin(request)
        )
        response.headers["Access-Control-Allow-Methods"] = ALLOW_METHODS
        response.headers["Access-Control-Allow-Headers"] = ALLOW_HEADERS
        if self.allow_origins:
            response.headers["Vary"] = "Origin"
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses"""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "SAMEORIGIN"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response
