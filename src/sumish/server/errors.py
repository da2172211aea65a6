"""Error handling for the request cycle.

Maps failures raised anywhere in the dispatch chain to Response
objects. This is the only place sumish catches errors it did not raise
itself.
"""

import html
import logging

from sumish.errors import HTTPError, NotFound
from sumish.http.request import Request
from sumish.http.response import Response

logger = logging.getLogger("sumish.server")


def error_page(status: int, detail: str) -> str:
    """Minimal HTML body for error responses."""
    return f'<div class="sumish-error" data-status="{status}">{html.escape(detail)}</div>'


def handle_not_found(exc: NotFound, request: Request, debug: bool) -> Response:
    """Unmatched route -> 404."""
    logger.debug("404 %s %s - %s", request.method, request.uri, exc.detail)
    detail = exc.detail if debug else "Not Found"
    return Response(body=error_page(404, detail), status=404)


def handle_http_error(exc: HTTPError, request: Request, debug: bool) -> Response:
    """An action asked for a specific status."""
    logger.debug("%d %s %s - %s", exc.status, request.method, request.uri, exc.detail)
    detail = exc.detail or f"Error {exc.status}"
    if debug and exc.detail:
        detail = f"{exc.status}: {exc.detail}"
    return Response(body=error_page(exc.status, detail), status=exc.status)


def handle_internal_error(exc: Exception, request: Request, debug: bool) -> Response:
    """Unexpected failure -> 500, with the message only in debug mode."""
    logger.exception("500 %s %s", request.method, request.uri)
    detail = f"{type(exc).__name__}: {exc}" if debug else "Internal Server Error"
    return Response(body=error_page(500, detail), status=500)
