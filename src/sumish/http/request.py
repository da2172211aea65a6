"""Immutable, sanitized HTTP request.

Query, form, and cookie values are HTML-escaped once, when the request
is built, so controllers never see raw markup from the client.
"""

from __future__ import annotations

import html
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qs

from sumish.http.headers import Headers

KNOWN_METHODS: frozenset[str] = frozenset(
    {"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"}
)

_FORM_TYPES = ("application/x-www-form-urlencoded",)


def clean(value: Any) -> Any:
    """HTML-escape strings, recursing into dicts and lists.

    Quotes are escaped too: ``<a href="x">`` becomes
    ``&lt;a href=&quot;x&quot;&gt;``.
    """
    if isinstance(value, str):
        return html.escape(value, quote=True).replace("&#x27;", "&#039;")
    if isinstance(value, Mapping):
        return {clean(k): clean(v) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [clean(v) for v in value]
    return value


def parse_cookies(header: str) -> dict[str, str]:
    """Parse a ``Cookie`` header value into a name-value dict."""
    if not header:
        return {}
    cookies: dict[str, str] = {}
    for pair in header.split(";"):
        pair = pair.strip()
        if "=" in pair:
            key, _, value = pair.partition("=")
            cookies[key.strip()] = value.strip()
    return cookies


def parse_params(raw: bytes | str) -> dict[str, str | list[str]]:
    """Parse a query string or urlencoded body.

    Repeated keys keep every value as a list; single keys map to a string.
    """
    text = raw.decode("latin-1") if isinstance(raw, bytes) else raw
    parsed = parse_qs(text, keep_blank_values=True)
    return {key: values[0] if len(values) == 1 else values for key, values in parsed.items()}


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``method`` falls back to ``GET`` for verbs outside ``KNOWN_METHODS``.
    ``uri`` is the path without its query string.
    """

    method: str = "GET"
    uri: str = "/"
    headers: Headers = field(default_factory=Headers)
    query: dict[str, Any] = field(default_factory=dict)
    form: dict[str, Any] = field(default_factory=dict)
    cookies: dict[str, Any] = field(default_factory=dict)
    body: bytes = b""

    @classmethod
    def build(
        cls,
        method: str = "GET",
        target: str = "/",
        *,
        headers: Mapping[str, str] | Headers | None = None,
        body: bytes = b"",
    ) -> Request:
        """Build a sanitized request from a method and a request target.

        *target* may carry a query string (``/search?q=x``); it is split
        off into ``query``.
        """
        if not isinstance(headers, Headers):
            headers = Headers.from_dict(headers or {})
        path, _, query_string = target.partition("?")

        normalized = method.upper()
        if normalized not in KNOWN_METHODS:
            normalized = "GET"

        form: dict[str, Any] = {}
        content_type = headers.get("content-type", "")
        if body and content_type.startswith(_FORM_TYPES):
            form = parse_params(body.decode("utf-8", errors="replace"))

        return cls(
            method=normalized,
            uri=path or "/",
            headers=headers,
            query=clean(parse_params(query_string)),
            form=clean(form),
            cookies=clean(parse_cookies("; ".join(headers.get_list("cookie")))),
            body=body,
        )

    @classmethod
    def from_asgi(cls, scope: Mapping[str, Any], body: bytes = b"") -> Request:
        """Create a Request from an ASGI HTTP scope and its full body."""
        target = scope.get("path", "/")
        query_string = scope.get("query_string", b"")
        if query_string:
            target = f"{target}?{query_string.decode('latin-1')}"
        return cls.build(
            scope.get("method", "GET"),
            target,
            headers=Headers(scope.get("headers", ())),
            body=body,
        )

    @property
    def is_get(self) -> bool:
        return self.method == "GET"

    @property
    def is_post(self) -> bool:
        return self.method == "POST"

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def accept_encoding(self) -> str:
        return self.headers.get("accept-encoding", "")
