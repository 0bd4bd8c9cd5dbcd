"""Body Parsing — request dependency decoding JSON and nested urlencoded bodies.

Invariants:
    - Empty body -> {}
    - Body over settings.max_body_bytes -> PayloadTooLargeError (413)
    - application/json and */*+json: malformed or scalar JSON -> BodyParseError (400)
    - application/x-www-form-urlencoded: bracketed keys decoded into nested dicts/lists
    - Any other content type -> {} (left for the handler to ignore)

Design Decisions:
    - Dependency over middleware: FastAPI caches it per request, and routes that
      never read a body never pay for it
"""

import json
import logging
from typing import Any

from fastapi import Request

from movie_api.core.errors import BodyParseError, ErrorContext, PayloadTooLargeError
from movie_api.core.form_parsing import parse_nested_query

logger = logging.getLogger(__name__)

FORM_MEDIA_TYPE = "application/x-www-form-urlencoded"
JSON_MEDIA_TYPE = "application/json"
DEFAULT_MAX_BODY_BYTES = 100_000


def media_type_of(content_type: str) -> str:
    """'application/json; charset=utf-8' -> 'application/json'."""
    return content_type.split(";", 1)[0].strip().lower()


async def parse_body(request: Request) -> Any:
    """Decode the request body according to its Content-Type."""
    settings = getattr(request.app.state, "settings", None)
    limit = settings.max_body_bytes if settings else DEFAULT_MAX_BODY_BYTES
    context = ErrorContext(path=request.url.path)

    body = await request.body()
    if len(body) > limit:
        raise PayloadTooLargeError(limit, context)
    if not body:
        return {}

    media_type = media_type_of(request.headers.get("content-type", ""))
    if media_type == JSON_MEDIA_TYPE or media_type.endswith("+json"):
        return _decode_json(body, context)
    if media_type == FORM_MEDIA_TYPE:
        try:
            return parse_nested_query(body.decode("utf-8"))
        except UnicodeDecodeError:
            raise BodyParseError("Form body is not valid UTF-8", context)

    logger.debug(
        f"Unparsed body with media type '{media_type}'",
        extra={"path": request.url.path},
    )
    return {}


def _decode_json(body: bytes, context: ErrorContext) -> Any:
    try:
        data = json.loads(body)
    except ValueError:
        raise BodyParseError("Malformed JSON body", context)
    if not isinstance(data, (dict, list)):
        raise BodyParseError("JSON body must be an object or array", context)
    return data
