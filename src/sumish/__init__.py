"""Sumish: a minimal MVC application runtime.

An autowiring dependency-injection container, a URI router with
deterministic matching, and just enough HTTP around them to serve an
application over ASGI.

Basic usage::

    from sumish import Application, Controller

    class HomeController(Controller):
        def index(self):
            return "Hello, World!"

    app = Application({
        "routes": {"/": {"controller": "Home", "action": "index"}},
        "controllers": "myapp.controllers",
    })

The container on its own::

    from sumish import Container

    container = Container.create({"components": {"mailer": SmtpMailer}})
    mailer = container.get("mailer")
"""

__version__ = "0.1.0.dev0"
__all__ = [
    "AppConfig",
    "Application",
    "Container",
    "ContainerError",
    "Controller",
    "DispatchError",
    "HTTPError",
    "InvalidArgument",
    "Loader",
    "NotFound",
    "Request",
    "ResolutionError",
    "Response",
    "Router",
    "Session",
    "SumishError",
    "View",
]

_ERRORS = frozenset(
    {
        "ContainerError",
        "DispatchError",
        "HTTPError",
        "InvalidArgument",
        "NotFound",
        "ResolutionError",
        "SumishError",
    }
)


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import sumish`` fast while providing a clean top-level API.
    """
    if name == "Application":
        from sumish.app import Application

        return Application

    if name == "AppConfig":
        from sumish.config import AppConfig

        return AppConfig

    if name == "Container":
        from sumish.container import Container

        return Container

    if name == "Controller":
        from sumish.controller import Controller

        return Controller

    if name == "Router":
        from sumish.routing.router import Router

        return Router

    if name == "Loader":
        from sumish.loader import Loader

        return Loader

    if name == "Session":
        from sumish.session import Session

        return Session

    if name == "View":
        from sumish.view import View

        return View

    if name == "Request":
        from sumish.http.request import Request

        return Request

    if name == "Response":
        from sumish.http.response import Response

        return Response

    if name in _ERRORS:
        from sumish import errors

        return getattr(errors, name)

    msg = f"module 'sumish' has no attribute {name!r}"
    raise AttributeError(msg)
