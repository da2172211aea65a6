"""Base controller.

Application controllers subclass ``Controller``. The Router builds them
through the container, assigns the ``RouteMatch`` that selected them,
and calls the matched action method with the route's parameters::

    class UserController(Controller):
        def show(self, id: int, tab: str = "profile"):
            users = self.component("users")
            return self.render("user/show", user=users.find(id), tab=tab)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sumish.container import Container

if TYPE_CHECKING:
    from sumish.routing.route import RouteMatch


class Controller:
    """Base class for application controllers.

    Components are reached through ``component(name)`` rather than
    attribute access, so a typo raises ``NotFound`` instead of
    returning ``None``.
    """

    def __init__(self, container: Container) -> None:
        self._container = container
        self.match: RouteMatch | None = None

    def container(self) -> Container:
        """The container this controller was built from."""
        return self._container

    def component(self, name: str) -> Any:
        """Resolve a component from the container.

        Raises ``NotFound`` with "Component '<name>' not found." when
        nothing is registered under *name*.
        """
        return self._container.get(name)

    def render(self, template: str, /, **context: Any) -> str:
        """Render *template* through the ``view`` component."""
        return self.component("view").render(template, context)
