"""
Page route gate middleware.

Runs before page handlers and redirects unauthenticated or wrong-role
visitors. API routes (/api/*) are never gated here; they authenticate
per handler.
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from ..dependencies import get_container

logger = logging.getLogger(__name__)


class RouteGateMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if path.startswith("/api/"):
            return await call_next(request)

        decision = get_container().gate.evaluate(path, request.cookies)
        if decision.is_redirect:
            logger.debug("Gate redirect %s -> %s", path, decision.location)
            return RedirectResponse(decision.location, status_code=307)

        return await call_next(request)
