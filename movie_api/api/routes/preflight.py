"""Preflight Responder — answers OPTIONS for every path under /api.

Invariants:
    - OPTIONS /api and OPTIONS /api/{anything} -> 204, no body
    - No Origin and no Access-Control-Request-Method header required
    - Allow-Origin follows settings.cors_origins: "*" when the wildcard is
      configured, the request's Origin when it is listed, absent otherwise
    - Vary: Origin is left to CORSMiddleware, which adds it for listed origins

Design Decisions:
    - CORSMiddleware only short-circuits full browser preflights (Origin plus
      Access-Control-Request-Method); this route covers bare OPTIONS requests
      that would otherwise fall through to a 405
"""

from fastapi import APIRouter, Request, Response, status

router = APIRouter(prefix="/api", tags=["cors"])

ALLOWED_METHODS = "GET,HEAD,PUT,PATCH,POST,DELETE"


def allowed_origin(request: Request) -> str | None:
    """Allow-Origin value for this request under the configured origins."""
    settings = getattr(request.app.state, "settings", None)
    origins = settings.cors_origins if settings else ["*"]
    if "*" in origins:
        return "*"
    origin = request.headers.get("origin")
    if origin and origin in origins:
        return origin
    return None


@router.options("", include_in_schema=False)
@router.options("/{path:path}", include_in_schema=False)
async def preflight(request: Request) -> Response:
    headers = {
        "Access-Control-Allow-Methods": ALLOWED_METHODS,
        "Vary": "Access-Control-Request-Headers",
    }
    origin = allowed_origin(request)
    if origin:
        headers["Access-Control-Allow-Origin"] = origin
    requested = request.headers.get("access-control-request-headers")
    if requested:
        headers["Access-Control-Allow-Headers"] = requested
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers=headers)
