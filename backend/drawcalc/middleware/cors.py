"""
DrawCalc Backend - Permissive CORS Middleware
=============================================

What:  Stamps the Access-Control-Allow-* headers on every response and answers
       every OPTIONS request itself.
How:   Starlette middleware, added last so it runs first (outermost).

Starlette's CORSMiddleware only decorates requests carrying an Origin header
and only short-circuits well-formed preflights. This service promises the
headers on every response, error responses included, and a bare 200 for any
OPTIONS request, so the headers are set unconditionally here.
"""

from typing import Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp


def cors_headers(allow_origin: str, allow_methods: str, allow_headers: str) -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Methods": allow_methods,
        "Access-Control-Allow-Headers": allow_headers,
    }


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """
    Behavior:
        OPTIONS <any path> → 200, empty body, CORS headers; the route is never reached
        anything else      → downstream response + CORS headers
    """

    def __init__(
        self,
        app: ASGIApp,
        allow_origin: str = "*",
        allow_methods: str = "POST, GET, OPTIONS, PUT, DELETE",
        allow_headers: str = "Accept, Content-Type, Content-Length, Authorization",
    ):
        super().__init__(app)
        self.headers = cors_headers(allow_origin, allow_methods, allow_headers)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=self.headers)

        response = await call_next(request)
        response.headers.update(self.headers)
        return response
