"""Tests for sumish.app: the request cycle and ASGI entry."""

import asyncio
from pathlib import Path
from typing import Any

import pytest

from sumish.app import Application
from sumish.config import AppConfig
from sumish.container import Container
from sumish.controller import Controller
from sumish.errors import ConfigurationError, HTTPError
from sumish.http.request import Request
from sumish.http.response import Response
from sumish.loader import Loader
from sumish.routing.resolvers import MappingControllerResolver
from sumish.routing.router import Router
from sumish.session import Session
from sumish.testing import TestClient, assert_header, assert_is_error_page, decoded_text
from sumish.view import View


class Counter:
    def __init__(self) -> None:
        self.value = 0


class HomeController(Controller):
    def index(self) -> str:
        return "<h1>Home</h1>"

    def data(self) -> dict[str, Any]:
        return {"items": [1, 2, 3]}

    async def slow(self) -> str:
        await asyncio.sleep(0)
        return "awaited"

    def search(self) -> str:
        return f"q={self.component('request').query.get('q', '')}"

    def submit(self) -> str:
        return f"title={self.component(Request).form.get('title', '')}"

    def boom(self) -> str:
        msg = "boom"
        raise RuntimeError(msg)

    def forbidden(self) -> str:
        raise HTTPError(status=403, detail="Members only")

    def moved(self) -> Response:
        return Response.redirect("/")

    def nothing(self) -> None:
        return None

    def page(self, name: str) -> str:
        return self.render("page", name=name)

    def count(self) -> str:
        counter = self.component("counter")
        counter.value += 1
        return str(counter.value)

    def login(self) -> str:
        self.component("session")["user"] = "ada"
        return "welcome"

    def whoami(self) -> str:
        return self.component("session").get("user", "anonymous")

    def logout(self) -> str:
        return str(self.component("session").destroy())


def make_router(container: Container) -> Router:
    return Router(container, MappingControllerResolver({"Home": HomeController}))


ROUTES = {
    "/": {"controller": "Home", "action": "index"},
    "/data": {"controller": "Home", "action": "data"},
    "/slow": {"controller": "Home", "action": "slow"},
    "/search": {"controller": "Home", "action": "search"},
    "/submit": {"controller": "Home", "action": "submit"},
    "/boom": {"controller": "Home", "action": "boom"},
    "/forbidden": {"controller": "Home", "action": "forbidden"},
    "/moved": {"controller": "Home", "action": "moved"},
    "/nothing": {"controller": "Home", "action": "nothing"},
    "/page/{name}": {"controller": "Home", "action": "page"},
    "/count": {"controller": "Home", "action": "count"},
    "/login": {"controller": "Home", "action": "login"},
    "/whoami": {"controller": "Home", "action": "whoami"},
    "/logout": {"controller": "Home", "action": "logout"},
    "/ghost": {"controller": "Ghost", "action": "index"},
}


def _app(**overrides: Any) -> Application:
    components = {"router": make_router, "counter": Counter, **overrides.pop("components", {})}
    return Application(AppConfig(routes=ROUTES, components=components, **overrides))


class TestConfiguration:
    def test_defaults(self) -> None:
        app = Application()
        assert app.config == AppConfig()
        assert Application.config_default() == AppConfig()

    def test_mapping_config(self) -> None:
        app = Application({"debug": True})
        assert app.config.debug is True
        assert app.config.compression == 0

    def test_unknown_key(self) -> None:
        with pytest.raises(ConfigurationError):
            Application({"nope": 1})

    def test_configure_merges(self) -> None:
        app = Application({"debug": True})
        config = app.configure({"compression": 5})
        assert config is app.config
        assert config.debug is True
        assert config.compression == 5

    def test_components_default(self) -> None:
        assert Application.components_default() == {
            "router": Router,
            "view": View,
            "loader": Loader,
            "session": Session,
        }


class TestCreateContainer:
    def test_defaults_registered(self, tmp_path: Path) -> None:
        app = Application({"template_dir": str(tmp_path), "models": "my.models"})
        request = Request.build("GET", "/")
        container = app.create_container(request)

        assert isinstance(container.get("router"), Router)
        assert container.get("view").path == tmp_path.resolve()
        assert container.get("loader").models == "my.models"
        assert container.get("request") is request
        assert container.get(Request) is request
        assert container.get("app") is app
        assert container.get("config") is app.config

    def test_configured_component_wins(self) -> None:
        app = _app()
        container = app.create_container(Request.build())
        router = container.get("router")
        assert router.resolve_controller({"controller": "Home", "action": "index"})

    def test_fresh_container_per_request(self) -> None:
        app = _app()
        first = app.create_container(Request.build())
        second = app.create_container(Request.build())
        assert first is not second


class TestHandle:
    async def test_string_output(self) -> None:
        response = await _app().handle(Request.build("GET", "/"))
        assert response.status == 200
        assert response.text == "<h1>Home</h1>"

    async def test_configured_headers_added(self) -> None:
        response = await _app().handle(Request.build("GET", "/"))
        assert_header(response, "X-Content-Type-Options", "nosniff")

    async def test_not_found(self) -> None:
        response = await _app().handle(Request.build("GET", "/missing"))
        assert_is_error_page(response, status=404)

    async def test_none_output_is_error(self) -> None:
        response = await _app(debug=True).handle(Request.build("GET", "/nothing"))
        assert response.status == 500
        assert "Output cannot be null." in response.text


class TestRequestCycle:
    async def test_html(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/")
        assert response.status == 200
        assert "text/html" in response.content_type
        assert response.text == "<h1>Home</h1>"

    async def test_json(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/data")
        assert response.content_type == "application/json"
        assert response.text == '{"items": [1, 2, 3]}'

    async def test_async_action(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/slow")
        assert response.text == "awaited"

    async def test_query_is_sanitized(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/search?q=%3Cb%3E")
        assert response.text == "q=&lt;b&gt;"

    async def test_form_post(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.post("/submit", data={"title": "Hello"})
        assert response.text == "title=Hello"

    async def test_redirect(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/moved")
        assert response.status == 302
        assert_header(response, "location", "/")

    async def test_template_rendering(self, tmp_path: Path) -> None:
        (tmp_path / "page.html").write_text("<p>Hi {{ name }}</p>")
        async with TestClient(_app(template_dir=str(tmp_path))) as client:
            response = await client.get("/page/Ada")
        assert response.text == "<p>Hi Ada</p>"

    async def test_components_are_per_request(self) -> None:
        async with TestClient(_app()) as client:
            first = await client.get("/count")
            second = await client.get("/count")
        assert first.text == "1"
        assert second.text == "1"

    async def test_compression(self) -> None:
        async with TestClient(_app(compression=6)) as client:
            response = await client.get("/", headers={"Accept-Encoding": "gzip, deflate"})
        assert_header(response, "content-encoding", "gzip")
        assert decoded_text(response) == "<h1>Home</h1>"

    async def test_no_compression_without_accept_encoding(self) -> None:
        async with TestClient(_app(compression=6)) as client:
            response = await client.get("/")
        assert response.header("content-encoding") is None
        assert response.text == "<h1>Home</h1>"


class TestErrors:
    async def test_unmatched_route_is_404(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/nope")
        assert_is_error_page(response, status=404)
        assert "No route matches" not in response.text

    async def test_404_detail_in_debug(self) -> None:
        async with TestClient(_app(debug=True)) as client:
            response = await client.get("/nope")
        assert "No route matches" in response.text

    async def test_action_exception_is_500(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/boom")
        assert_is_error_page(response, status=500)
        assert "Internal Server Error" in response.text
        assert "boom" not in response.text

    async def test_500_detail_in_debug(self) -> None:
        async with TestClient(_app(debug=True)) as client:
            response = await client.get("/boom")
        assert response.status == 500
        assert "RuntimeError: boom" in response.text

    async def test_unknown_controller_is_500(self) -> None:
        async with TestClient(_app(debug=True)) as client:
            response = await client.get("/ghost")
        assert response.status == 500
        assert "Controller class not found: Ghost" in response.text

    async def test_http_error_keeps_status(self) -> None:
        async with TestClient(_app(debug=True)) as client:
            response = await client.get("/forbidden")
        assert_is_error_page(response, status=403)
        assert "Members only" in response.text

    async def test_error_pages_get_configured_headers(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/nope")
        assert_header(response, "x-content-type-options", "nosniff")


class TestLifespan:
    async def test_client_runs_hooks(self) -> None:
        app = _app()
        events: list[str] = []

        @app.on_startup
        async def start() -> None:
            events.append("startup")

        @app.on_shutdown
        def stop() -> None:
            events.append("shutdown")

        async with TestClient(app):
            assert events == ["startup"]
        assert events == ["startup", "shutdown"]

    async def test_asgi_protocol(self) -> None:
        app = _app()
        messages = iter([{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}])
        sent: list[dict[str, Any]] = []

        async def receive() -> dict[str, Any]:
            return next(messages)

        async def send(message: dict[str, Any]) -> None:
            sent.append(message)

        await app({"type": "lifespan"}, receive, send)
        assert [m["type"] for m in sent] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]

    async def test_startup_failure_reported(self) -> None:
        app = _app()

        @app.on_startup
        def fail() -> None:
            msg = "no database"
            raise RuntimeError(msg)

        messages = iter([{"type": "lifespan.startup"}])
        sent: list[dict[str, Any]] = []

        async def receive() -> dict[str, Any]:
            return next(messages)

        async def send(message: dict[str, Any]) -> None:
            sent.append(message)

        await app({"type": "lifespan"}, receive, send)
        assert sent == [{"type": "lifespan.startup.failed", "message": "no database"}]


def _session_cookie(response: Response) -> str:
    set_cookie = response.header("set-cookie")
    assert set_cookie is not None
    return set_cookie.split(";", 1)[0]


class TestSessions:
    async def test_session_round_trip(self) -> None:
        app = _app(secret_key="s3cret")
        async with TestClient(app) as client:
            login = await client.get("/login")
            cookie = _session_cookie(login)
            assert cookie.startswith("sumish_session=")

            response = await client.get("/whoami", headers={"cookie": cookie})
        assert response.text == "ada"

    async def test_cookie_attributes(self) -> None:
        app = _app(secret_key="s3cret", session={"cookie_name": "sid", "max_age": 600})
        async with TestClient(app) as client:
            response = await client.get("/login")
        set_cookie = response.header("set-cookie")
        assert set_cookie is not None
        assert set_cookie.startswith("sid=")
        assert "Max-Age=600" in set_cookie
        assert "HttpOnly" in set_cookie
        assert "SameSite=Lax" in set_cookie

    async def test_untouched_session_sets_no_cookie(self) -> None:
        async with TestClient(_app(secret_key="s3cret")) as client:
            response = await client.get("/")
        assert response.header("set-cookie") is None

    async def test_tampered_cookie_starts_fresh(self) -> None:
        async with TestClient(_app(secret_key="s3cret")) as client:
            cookie = _session_cookie(await client.get("/login"))
            response = await client.get("/whoami", headers={"cookie": cookie + "x"})
        assert response.text == "anonymous"

    async def test_cookie_signed_with_other_key_rejected(self) -> None:
        async with TestClient(_app(secret_key="first")) as client:
            cookie = _session_cookie(await client.get("/login"))
        async with TestClient(_app(secret_key="second")) as client:
            response = await client.get("/whoami", headers={"cookie": cookie})
        assert response.text == "anonymous"

    async def test_logout_expires_cookie(self) -> None:
        async with TestClient(_app(secret_key="s3cret")) as client:
            cookie = _session_cookie(await client.get("/login"))
            response = await client.get("/logout", headers={"cookie": cookie})
        assert response.text == "True"
        set_cookie = response.header("set-cookie")
        assert set_cookie is not None
        assert set_cookie.startswith("sumish_session=;")
        assert "Max-Age=0" in set_cookie

    async def test_missing_secret_key_is_500(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/whoami")
        assert response.status == 500

    def test_unknown_session_option(self) -> None:
        with pytest.raises(ConfigurationError):
            AppConfig(session={"lifetime": 10})
