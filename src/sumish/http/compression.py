"""Gzip response compression negotiated from ``Accept-Encoding``."""

import gzip

from sumish.http.response import Response

MIN_LEVEL = 1
MAX_LEVEL = 9


def detect_encoding(accept_encoding: str) -> str | None:
    """Pick ``gzip`` or ``x-gzip`` from an ``Accept-Encoding`` value.

    ``x-gzip`` is returned only when the client names it and not
    plain ``gzip``.
    """
    tokens = [token.split(";")[0].strip().lower() for token in accept_encoding.split(",")]
    if "gzip" in tokens:
        return "gzip"
    if "x-gzip" in tokens:
        return "x-gzip"
    return None


def compress(response: Response, level: int, accept_encoding: str) -> Response:
    """Gzip *response* when the client accepts it and *level* is 1..9.

    Returns *response* unchanged for out-of-range levels, clients that
    don't accept gzip, empty bodies, or responses that already carry a
    ``Content-Encoding``.
    """
    if not MIN_LEVEL <= level <= MAX_LEVEL:
        return response
    encoding = detect_encoding(accept_encoding)
    if encoding is None or not response.body or response.header("content-encoding"):
        return response
    compressed = gzip.compress(response.body_bytes, compresslevel=level)
    return response.with_body(compressed).with_header("Content-Encoding", encoding)
