"""HTTP response with chainable .with_*() transformation API.

Each transformation returns a new Response; the original is never
modified.
"""

from __future__ import annotations

import json as json_module
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from typing import Any

from sumish.errors import InvalidArgument
from sumish.http.cookies import SetCookie


def parse_header_line(line: str) -> tuple[str, str]:
    """Split ``"Name: value"`` into ``("Name", "value")``."""
    name, sep, value = line.partition(":")
    if not sep or not name.strip():
        msg = f"Malformed header line: {line!r}"
        raise InvalidArgument(msg)
    return name.strip(), value.strip()


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations.

    Construct with a body, then chain ``.with_*()`` calls to set
    status and headers. Each call returns a new ``Response``.
    """

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/html; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()

    def __post_init__(self) -> None:
        if self.body is None:
            msg = "Output cannot be null."
            raise InvalidArgument(msg)

    # -- Chainable transformations --

    def with_status(self, status: int) -> Response:
        """Return a new Response with a different status code."""
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        """Return a new Response with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str] | Iterable[str]) -> Response:
        """Return a new Response with additional headers.

        Accepts a mapping or ``"Name: value"`` lines.
        """
        if isinstance(headers, Mapping):
            new = tuple(headers.items())
        else:
            new = tuple(parse_header_line(line) for line in headers)
        return replace(self, headers=(*self.headers, *new))

    def with_cookie(self, cookie: SetCookie) -> Response:
        """Return a new Response that sets *cookie* on the client."""
        return self.with_header("Set-Cookie", cookie.to_header_value())

    def with_content_type(self, content_type: str) -> Response:
        """Return a new Response with a different content type."""
        return replace(self, content_type=content_type)

    def with_body(self, body: str | bytes) -> Response:
        """Return a new Response with *body* replacing the current one."""
        return replace(self, body=body)

    def append(self, chunk: str | bytes) -> Response:
        """Return a new Response with *chunk* added to the end of the body."""
        if isinstance(self.body, bytes):
            extra = chunk.encode("utf-8") if isinstance(chunk, str) else chunk
            return replace(self, body=self.body + extra)
        extra_text = chunk.decode("utf-8") if isinstance(chunk, bytes) else chunk
        return replace(self, body=self.body + extra_text)

    # -- Accessors --

    def header(self, name: str) -> str | None:
        """First value of header *name* (case-insensitive), or ``None``."""
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return None

    @property
    def body_bytes(self) -> bytes:
        if isinstance(self.body, bytes):
            return self.body
        return self.body.encode("utf-8")

    @property
    def text(self) -> str:
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8", errors="replace")
        return self.body

    # -- Constructors --

    @classmethod
    def redirect(cls, url: str, status: int = 302) -> Response:
        """An empty response pointing the client at *url*."""
        return cls(body="", status=status).with_header("Location", url)

    @classmethod
    def json(cls, data: Any, status: int = 200) -> Response:
        return cls(
            body=json_module.dumps(data, default=str),
            status=status,
            content_type="application/json",
        )

    @classmethod
    def from_output(cls, output: Any) -> Response:
        """Convert an action's return value into a Response.

        ``Response`` passes through, ``str`` becomes HTML, ``bytes``
        becomes an octet stream, ``dict``/``list`` become JSON, and
        ``None`` is rejected.
        """
        match output:
            case Response():
                return output
            case None:
                msg = "Output cannot be null."
                raise InvalidArgument(msg)
            case str():
                return cls(body=output)
            case bytes():
                return cls(body=output, content_type="application/octet-stream")
            case dict() | list():
                return cls.json(output)
            case _:
                return cls(body=str(output))
