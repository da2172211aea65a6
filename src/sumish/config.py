"""Application configuration.

AppConfig is a frozen dataclass: immutable after creation and built
either directly or from a plain mapping loaded from a settings file.
"""

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from sumish.errors import ConfigurationError

_LOG_LEVELS = frozenset({"debug", "info", "warning", "error", "critical"})

# Keyword arguments of Session that AppConfig.session may override
_SESSION_OPTIONS = frozenset(
    {"cookie_name", "max_age", "path", "domain", "secure", "httponly", "samesite"}
)


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(
            routes={"/": {"controller": "Home", "action": "index"}},
            debug=True,
        )
    """

    # Routing: pattern -> {"controller": ..., "action": ...}
    routes: dict[str, Any] = field(default_factory=dict)

    # Response headers added to every response, as "Name: value" lines
    headers: tuple[str, ...] = ("X-Content-Type-Options: nosniff",)

    # Gzip level 1..9; anything else disables compression
    compression: int = 0

    # Extra or replacement container components: key -> class, import string, factory, value
    components: dict[str, Any] = field(default_factory=dict)

    # Database connection settings, handed to components through "config"
    db: dict[str, Any] = field(default_factory=dict)

    debug: bool = False

    # Templates
    template_dir: str | Path = "templates"

    # Convention packages
    controllers: str = "app.controllers"
    models: str = "app.models"
    libraries: str = "app.libraries"

    # Signed cookie sessions; the "session" component refuses to build without a key
    secret_key: str = ""

    # Session cookie options: cookie_name, max_age, path, domain, secure, httponly, samesite
    session: dict[str, Any] = field(default_factory=dict)

    log_level: str = "info"

    def __post_init__(self) -> None:
        if self.log_level.lower() not in _LOG_LEVELS:
            msg = f"Unknown log level {self.log_level!r}."
            raise ConfigurationError(msg)
        if not isinstance(self.compression, int) or isinstance(self.compression, bool):
            msg = f"compression must be an integer, got {self.compression!r}."
            raise ConfigurationError(msg)
        for line in self.headers:
            if ":" not in line:
                msg = f"Header {line!r} must be a 'Name: value' line."
                raise ConfigurationError(msg)
        unknown_options = sorted(set(self.session) - _SESSION_OPTIONS)
        if unknown_options:
            msg = f"Unknown session option(s): {', '.join(unknown_options)}"
            raise ConfigurationError(msg)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "AppConfig":
        """Build a config from a plain mapping.

        Lists are accepted where tuples are expected. Unknown keys raise
        ``ConfigurationError`` so typos don't pass silently.
        """
        return cls()._merged(data)

    def merge(self, overrides: dict[str, Any]) -> "AppConfig":
        """A new config with *overrides* applied over this one."""
        return self._merged(overrides)

    def _merged(self, data: dict[str, Any]) -> "AppConfig":
        known = {f.name for f in fields(self)}
        unknown = sorted(set(data) - known)
        if unknown:
            msg = f"Unknown configuration key(s): {', '.join(unknown)}"
            raise ConfigurationError(msg)
        values = {
            key: tuple(value) if isinstance(value, list) else value for key, value in data.items()
        }
        return replace(self, **values)
