"""``Set-Cookie`` serialization for responses.

The read side lives with the Request (``parse_cookies``); this module
only builds the header a Response sends back.
"""

from dataclasses import dataclass

from sumish.errors import InvalidArgument

_SAMESITE = frozenset({"", "lax", "strict", "none"})


@dataclass(frozen=True, slots=True)
class SetCookie:
    """One ``Set-Cookie`` directive.

    ``max_age=None`` makes a browser-session cookie; ``max_age=0``
    tells the client to drop it.
    """

    name: str
    value: str
    max_age: int | None = None
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    httponly: bool = True
    samesite: str = "lax"

    def __post_init__(self) -> None:
        if not self.name or any(c in self.name for c in "=;, \t"):
            msg = f"Invalid cookie name: {self.name!r}"
            raise InvalidArgument(msg)
        if self.samesite.lower() not in _SAMESITE:
            msg = f"SameSite must be one of lax, strict, none; got {self.samesite!r}."
            raise InvalidArgument(msg)

    @classmethod
    def expire(cls, name: str, *, path: str = "/", domain: str | None = None) -> "SetCookie":
        """A directive that deletes cookie *name* on the client."""
        return cls(name=name, value="", max_age=0, path=path, domain=domain)

    def to_header_value(self) -> str:
        parts = [f"{self.name}={self.value}"]
        if self.max_age is not None:
            parts.append(f"Max-Age={self.max_age}")
        if self.path:
            parts.append(f"Path={self.path}")
        if self.domain:
            parts.append(f"Domain={self.domain}")
        if self.secure:
            parts.append("Secure")
        if self.httponly:
            parts.append("HttpOnly")
        if self.samesite:
            parts.append(f"SameSite={self.samesite.capitalize()}")
        return "; ".join(parts)
