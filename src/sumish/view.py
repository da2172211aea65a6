"""Template rendering through kida.

``View`` wraps one kida ``Environment`` rooted at a template directory.
Template names are given without extension; subdirectories are allowed::

    view = View("templates")
    view.render("admin/dashboard", {"title": "Admin"})  # templates/admin/dashboard.html
"""

from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from kida import Environment, FileSystemLoader

from sumish.errors import TemplateNotFound


class View:
    """Renders ``<name><extension>`` templates from *path*."""

    __slots__ = ("_env", "extension", "path")

    def __init__(
        self,
        path: str | Path = "templates",
        extension: str = ".html",
        autoescape: bool = True,
    ) -> None:
        self.path = Path(path).resolve()
        self.extension = extension
        self._env = Environment(
            loader=FileSystemLoader(str(self.path)),
            autoescape=autoescape,
        )

    def template_name(self, name: str) -> str:
        name = name.strip("/")
        if name.endswith(self.extension):
            return name
        return f"{name}{self.extension}"

    def exists(self, name: str) -> bool:
        return (self.path / self.template_name(name)).is_file()

    def render(self, name: str, data: Mapping[str, Any] | None = None) -> str:
        """Render template *name* with *data* as its context.

        Raises ``TemplateNotFound`` when the file does not exist.
        """
        filename = self.template_name(name)
        if not self.exists(name):
            msg = f"Template file not found: {self.path / filename}"
            raise TemplateNotFound(msg)
        template = self._env.get_template(filename)
        return template.render(dict(data or {}))

    def add_filter(self, name: str, func: Callable[..., Any]) -> None:
        """Register a kida template filter."""
        self._env.update_filters({name: func})
