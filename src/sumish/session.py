"""Signed cookie sessions.

Session data lives in the client's cookie, signed and timestamped with
itsdangerous. Nothing is kept on the server. A ``Session`` is a
per-request component: it reads the incoming cookie when it is built,
and the Application writes it back onto the response through
``commit()`` when the request asked for the session.

Usage inside a controller::

    session = self.component("session")
    session["user_id"] = user.id
"""

import logging
import secrets
from collections.abc import Iterator
from typing import Any

from itsdangerous import BadData, URLSafeTimedSerializer

from sumish.errors import ConfigurationError
from sumish.http.cookies import SetCookie
from sumish.http.request import Request
from sumish.http.response import Response

logger = logging.getLogger("sumish.session")

_SALT = "sumish.session"


def new_session_id() -> str:
    """A random URL-safe identifier (32 characters)."""
    return secrets.token_urlsafe(24)


class Session:
    """Key-value session data for one client.

    ``data`` must stay JSON-serializable. ``max_age=None`` issues a
    browser-session cookie and accepts tokens of any age; a number of
    seconds bounds both the cookie and how old a token may be.
    """

    __slots__ = (
        "_destroyed",
        "_id",
        "_id_read",
        "_incoming",
        "_serializer",
        "cookie_name",
        "data",
        "domain",
        "httponly",
        "max_age",
        "path",
        "samesite",
        "secure",
    )

    def __init__(
        self,
        request: Request,
        secret_key: str = "",
        cookie_name: str = "sumish_session",
        max_age: int | None = None,
        path: str = "/",
        domain: str | None = None,
        secure: bool = False,
        httponly: bool = True,
        samesite: str = "lax",
    ) -> None:
        if not secret_key:
            msg = "Sessions need a non-empty secret_key in the application config."
            raise ConfigurationError(msg)
        self._serializer = URLSafeTimedSerializer(secret_key, salt=_SALT)
        self.cookie_name = cookie_name
        self.max_age = max_age
        self.path = path
        self.domain = domain
        self.secure = secure
        self.httponly = httponly
        self.samesite = samesite

        self._incoming = request.cookies.get(cookie_name)
        payload = self._load(self._incoming)
        self._id: str = payload.get("id") or new_session_id()
        self.data: dict[str, Any] = payload.get("data", {})
        self._id_read = False
        self._destroyed = False

    def _load(self, token: str | None) -> dict[str, Any]:
        if not token:
            return {}
        try:
            payload = self._serializer.loads(token, max_age=self.max_age)
        except BadData:
            logger.debug("Discarding %r cookie: bad or expired signature", self.cookie_name)
            return {}
        if not isinstance(payload, dict) or not isinstance(payload.get("data"), dict):
            return {}
        if not isinstance(payload.get("id"), str):
            return {}
        return payload

    # -- Data access --

    @property
    def id(self) -> str:
        """This session's identifier. Stable for as long as the cookie lives."""
        self._id_read = True
        return self._id

    @property
    def active(self) -> bool:
        return not self._destroyed

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.data[key] = value

    def __delitem__(self, key: str) -> None:
        del self.data[key]

    def __contains__(self, key: object) -> bool:
        return key in self.data

    def __iter__(self) -> Iterator[str]:
        return iter(self.data)

    def __len__(self) -> int:
        return len(self.data)

    # -- Lifecycle --

    def destroy(self) -> bool:
        """Empty the session and expire its cookie.

        Returns ``False`` if the session was already destroyed.
        """
        if self._destroyed:
            return False
        self.data.clear()
        self._destroyed = True
        return True

    def regenerate_id(self) -> str:
        """Issue a fresh identifier, keeping the data."""
        self._id = new_session_id()
        self._id_read = True
        return self._id

    def cookie_params(self) -> dict[str, Any]:
        """The cookie settings, with ``lifetime`` 0 for a browser-session cookie."""
        return {
            "lifetime": self.max_age or 0,
            "path": self.path,
            "domain": self.domain or "",
            "secure": self.secure,
            "httponly": self.httponly,
            "samesite": self.samesite,
        }

    def dumps(self) -> str:
        """The signed cookie value for the current id and data."""
        return self._serializer.dumps({"id": self._id, "data": self.data})

    def commit(self, response: Response) -> Response:
        """Write the session cookie (or its expiry) onto *response*.

        An untouched, empty session that arrived without a cookie leaves
        the response alone.
        """
        if self._destroyed:
            if self._incoming is None:
                return response
            return response.with_cookie(
                SetCookie.expire(self.cookie_name, path=self.path, domain=self.domain)
            )
        if not self.data and self._incoming is None and not self._id_read:
            return response
        cookie = SetCookie(
            name=self.cookie_name,
            value=self.dumps(),
            max_age=self.max_age,
            path=self.path,
            domain=self.domain,
            secure=self.secure,
            httponly=self.httponly,
            samesite=self.samesite,
        )
        return response.with_cookie(cookie)
