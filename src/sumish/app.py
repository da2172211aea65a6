"""Sumish application class.

Drives one request-response cycle per request: a fresh Container is
built from the configuration, the ``router`` component matches the
URI, the matched controller action runs, and its payload becomes a
Response. The Application is an ASGI callable.
"""

import inspect
import logging
from collections.abc import Callable, Mapping
from typing import Any

from sumish._internal.asgi import Receive, Scope, Send, read_body
from sumish.config import AppConfig
from sumish.container import Container
from sumish.errors import HTTPError, NotFound
from sumish.http.compression import compress
from sumish.http.request import Request
from sumish.http.response import Response
from sumish.loader import Loader
from sumish.routing.resolvers import ModuleControllerResolver
from sumish.routing.router import Router
from sumish.server.errors import handle_http_error, handle_internal_error, handle_not_found
from sumish.server.sender import send_response
from sumish.session import Session
from sumish.view import View

logger = logging.getLogger("sumish.server")


class Application:
    """The sumish application.

    Configuration is fixed at construction (or replaced wholesale with
    ``configure()``); every request gets its own Container, so component
    instances never leak between requests.

    Usage::

        app = Application({
            "routes": {"/user/{id}": {"controller": "User", "action": "show"}},
            "controllers": "myapp.controllers",
        })

        # Run with any ASGI server
        # uvicorn myapp:app
    """

    __slots__ = ("_shutdown_hooks", "_startup_hooks", "config")

    def __init__(self, config: AppConfig | Mapping[str, Any] | None = None) -> None:
        if config is None:
            config = AppConfig()
        elif not isinstance(config, AppConfig):
            config = AppConfig.from_mapping(dict(config))
        self.config: AppConfig = config
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        logging.getLogger("sumish").setLevel(config.log_level.upper())

    # -- Configuration --

    @staticmethod
    def config_default() -> AppConfig:
        """The configuration used when nothing is overridden."""
        return AppConfig()

    @staticmethod
    def components_default() -> dict[str, type]:
        """Components registered in every request container unless replaced."""
        return {"router": Router, "view": View, "loader": Loader, "session": Session}

    def configure(self, overrides: Mapping[str, Any]) -> AppConfig:
        """Apply *overrides* over the current config and return the result."""
        self.config = self.config.merge(dict(overrides))
        logging.getLogger("sumish").setLevel(self.config.log_level.upper())
        return self.config

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a sync or async function to run at ASGI lifespan startup."""
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a sync or async function to run at ASGI lifespan shutdown."""
        self._shutdown_hooks.append(func)
        return func

    async def startup(self) -> None:
        """Run the startup hooks in registration order."""
        await _run_hooks(self._startup_hooks)

    async def shutdown(self) -> None:
        """Run the shutdown hooks in registration order."""
        await _run_hooks(self._shutdown_hooks)

    # -- Request cycle --

    def create_container(self, request: Request) -> Container:
        """Build the per-request container.

        Configured components win over the defaults; defaults get their
        settings from the config as explicit constructor arguments.
        """
        config = self.config
        container = Container.create(config)
        defaults: dict[str, dict[str, Any]] = {
            "router": {"resolver": ModuleControllerResolver(config.controllers)},
            "view": {"path": config.template_dir},
            "loader": {"models": config.models, "libraries": config.libraries},
            "session": {"secret_key": config.secret_key, **config.session},
        }
        for key, cls in self.components_default().items():
            if not container.has(key):
                container.set(key, cls, defaults[key])

        container.set("request", request)
        container.set(Request, request)
        container.set("app", self)
        return container

    async def handle(self, request: Request) -> Response:
        """Run one request through routing and dispatch.

        Never raises: routing misses become 404, ``HTTPError`` keeps its
        status, anything else becomes 500.
        """
        debug = self.config.debug
        container = self.create_container(request)
        try:
            response = await self._dispatch(container, request)
        except NotFound as exc:
            response = handle_not_found(exc, request, debug)
        except HTTPError as exc:
            response = handle_http_error(exc, request, debug)
        except Exception as exc:
            response = handle_internal_error(exc, request, debug)
        return self._finalize(response, request, container)

    async def _dispatch(self, container: Container, request: Request) -> Response:
        router: Router = container.get("router")
        router.push(self.config.routes)

        route_match = router.match(request.uri)
        controller = router.resolve_controller(route_match)
        output = router.dispatch(controller)
        if inspect.isawaitable(output):
            output = await output

        logger.debug(
            "%s %s -> %s.%s",
            request.method,
            request.uri,
            route_match.controller,
            route_match.action,
        )
        return Response.from_output(output)

    def _finalize(self, response: Response, request: Request, container: Container) -> Response:
        """Write the session cookie and configured headers, then compress."""
        if container.is_resolved("session"):
            session = container.get("session")
            if isinstance(session, Session):
                response = session.commit(response)
        if self.config.headers:
            response = response.with_headers(self.config.headers)
        return compress(response, self.config.compression, request.accept_encoding)

    # -- ASGI --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return
        if scope["type"] != "http":
            msg = f"Unsupported ASGI scope type: {scope['type']!r}"
            raise RuntimeError(msg)

        body = await read_body(receive)
        request = Request.from_asgi(scope, body)
        response = await self.handle(request)
        await send_response(response, send)

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol with the registered hooks."""
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.startup()
                except Exception as exc:
                    logger.exception("Startup hook failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return


async def _run_hooks(hooks: list[Callable[..., Any]]) -> None:
    for hook in hooks:
        result = hook()
        if inspect.isawaitable(result):
            await result
