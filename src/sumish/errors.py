"""Sumish exception hierarchy.

Shared across Container, Router, Controller, and Application so every
module raises and catches the same types.
"""

from dataclasses import dataclass


class SumishError(Exception):
    """Base for all sumish-specific errors."""


class ConfigurationError(SumishError):
    """Raised when application configuration is invalid."""


class NotFound(SumishError, LookupError):  # noqa: N818
    """A component key or a route could not be found.

    ``key`` carries the missing component name or the unmatched URI.
    """

    def __init__(self, detail: str = "Not Found", *, key: str | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.key = key


class InvalidArgument(SumishError, ValueError):  # noqa: N818
    """A registration, route target, or match is malformed."""


class ContainerError(SumishError):
    """A component could not be built.

    Wraps non-instantiable targets, unresolved constructor parameters,
    and exceptions raised inside constructors or factories. ``key`` is
    the component being built, ``parameter`` the constructor parameter
    that failed (when known).
    """

    def __init__(
        self,
        message: str,
        *,
        key: str | None = None,
        parameter: str | None = None,
    ) -> None:
        super().__init__(message)
        self.key = key
        self.parameter = parameter


class ResolutionError(ContainerError):
    """A constructor parameter could not be autowired."""


class DispatchError(SumishError, RuntimeError):
    """A controller or action could not be resolved or invoked."""


class TemplateNotFound(SumishError, RuntimeError):  # noqa: N818
    """A view template file does not exist."""


@dataclass(frozen=True, slots=True)
class HTTPError(SumishError):
    """An error that maps directly to an HTTP status code.

    Raised by actions that want a specific status; the Application
    turns it into a response with the same status.
    """

    status: int
    detail: str = ""

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)
