import re
import time
import uuid
from typing import Callable

import structlog
from django.http import HttpRequest, HttpResponse

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"

# Upstream IDs are echoed into logs and headers, so only plain tokens pass
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def resolve_request_id(raw: str | None) -> str:
    """Return *raw* when it is a usable request ID, else a fresh UUID4."""
    if raw and _VALID_REQUEST_ID.match(raw):
        return raw
    return str(uuid.uuid4())


class CorrelationIdMiddleware:
    """Tags every log line of a request with one ``correlation_id``.

    The ID is taken from ``X-Request-ID`` when the caller (a gateway or the
    storefront SPA) sends a well-formed one, and returned on the response so
    a failed checkout can be traced from the browser to the worker logs.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        cid = resolve_request_id(request.META.get("HTTP_X_REQUEST_ID"))

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id=cid)

        started = time.monotonic()
        response = self.get_response(request)

        logger.info(
            "http.request",
            method=request.method,
            path=request.path,
            status_code=response.status_code,
            duration_ms=round((time.monotonic() - started) * 1000, 2),
        )
        response[REQUEST_ID_HEADER] = cid
        return response
