"""
Root endpoint and unmatched paths: an empty 200.

`/` answers any method. Any other path with no route of its own gets the
same empty 200 through `answer_unmatched_path`, which is registered as the
404 handler. Browsers probing the API origin (`/`, `/favicon.ico`, ...) get a
response carrying the CORS headers (added by CORSHeadersMiddleware).

A known path hit with the wrong method (GET /calculate) is still a 405:
Starlette only raises 404 when no route matched the path at all.
"""

from fastapi import APIRouter, Request, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

router = APIRouter(include_in_schema=False)


@router.api_route("/", methods=["GET", "HEAD", "POST", "PUT", "DELETE", "PATCH"])
async def root() -> Response:
    return Response(status_code=200)


async def answer_unmatched_path(request: Request, exc: StarletteHTTPException) -> Response:
    return Response(status_code=200)
