"""Tests for sumish.view: kida-backed template rendering."""

from pathlib import Path

import pytest

from sumish.errors import TemplateNotFound
from sumish.view import View


@pytest.fixture
def templates(tmp_path: Path) -> Path:
    (tmp_path / "test.html").write_text("<h1>{{ title }}</h1>")
    (tmp_path / "static.html").write_text("<p>No data</p>")
    (tmp_path / "admin").mkdir()
    (tmp_path / "admin" / "dashboard.html").write_text("<h2>{{ section }}</h2>")
    (tmp_path / "list.html").write_text(
        "<ul>{% for item in items %}<li>{{ item }}</li>{% end %}</ul>"
    )
    return tmp_path


class TestView:
    def test_constructor_resolves_path(self, templates: Path) -> None:
        assert View(templates).path == templates.resolve()

    def test_render(self, templates: Path) -> None:
        assert View(templates).render("test", {"title": "Test Title"}) == "<h1>Test Title</h1>"

    def test_render_without_data(self, templates: Path) -> None:
        assert View(templates).render("static") == "<p>No data</p>"

    def test_render_from_subdirectory(self, templates: Path) -> None:
        html = View(templates).render("admin/dashboard", {"section": "Admin"})
        assert html == "<h2>Admin</h2>"

    def test_render_with_extension(self, templates: Path) -> None:
        assert View(templates).render("test.html", {"title": "x"}) == "<h1>x</h1>"

    def test_render_loop(self, templates: Path) -> None:
        html = View(templates).render("list", {"items": ["a", "b"]})
        assert "<li>a</li>" in html
        assert "<li>b</li>" in html

    def test_autoescape(self, templates: Path) -> None:
        html = View(templates).render("test", {"title": "<script>"})
        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_missing_template(self, templates: Path) -> None:
        with pytest.raises(TemplateNotFound, match="Template file not found"):
            View(templates).render("missing")

    def test_exists(self, templates: Path) -> None:
        view = View(templates)
        assert view.exists("test")
        assert view.exists("admin/dashboard")
        assert not view.exists("missing")

    def test_add_filter(self, templates: Path) -> None:
        (templates / "shout.html").write_text("{{ word | shout }}")
        view = View(templates)
        view.add_filter("shout", lambda value: value.upper())
        assert view.render("shout", {"word": "hi"}) == "HI"
