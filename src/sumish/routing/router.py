"""Route table with trie-based pattern matching and controller dispatch.

Patterns without placeholders go into a dict keyed by normalised path;
patterns with ``{name}`` placeholders go into a segment trie. Matching
walks the trie trying literal children before placeholder children, so
``/user/list`` beats ``/user/{id}`` whatever the registration order,
and the cost depends on path depth rather than table size.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from sumish._internal.signature import describe
from sumish.container import Container
from sumish.controller import Controller
from sumish.errors import DispatchError, InvalidArgument, NotFound
from sumish.routing.params import CONVERTERS, coerce_argument
from sumish.routing.resolvers import ControllerResolver, ModuleControllerResolver
from sumish.routing.route import PathSegment, RouteMatch, Target

logger = logging.getLogger("sumish.routing")

_FLASK_STYLE_PARAM = re.compile(r"<[^>]+>")


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route pattern into segments.

    Examples::

        "/users"          -> [PathSegment("users")]
        "/users/{id}"     -> [PathSegment("users"), PathSegment("{id}", is_param=True, ...)]
        "/users/{id:int}" -> [PathSegment("{id:int}", is_param=True, param_type="int")]

    Raises ``InvalidArgument`` for ``<param>`` syntax, empty placeholder
    names, or unknown converters.
    """
    if _FLASK_STYLE_PARAM.search(path):
        msg = f"Route {path!r} uses <param> syntax. Use {{param}} placeholders instead."
        raise InvalidArgument(msg)

    segments: list[PathSegment] = []
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if part.startswith("{") and part.endswith("}"):
            inner = part[1:-1]
            param_name, _, param_type = inner.partition(":")
            param_type = param_type or "str"
            if not param_name:
                msg = f"Route {path!r} has a placeholder without a name."
                raise InvalidArgument(msg)
            if param_type not in CONVERTERS:
                msg = f"Route {path!r} uses unknown converter {param_type!r}."
                raise InvalidArgument(msg)
            segments.append(
                PathSegment(
                    value=part,
                    is_param=True,
                    param_name=param_name,
                    param_type=param_type,
                )
            )
        else:
            segments.append(PathSegment(value=part))
    return segments


def _normalize(path: str) -> str:
    """``/users/`` and ``users`` both become ``/users``."""
    return "/" + "/".join(p for p in path.strip("/").split("/") if p)


class _TrieNode:
    """A node in the placeholder-pattern trie."""

    __slots__ = ("children", "param_edges", "pattern")

    def __init__(self) -> None:
        # Literal segment children: "users" -> node
        self.children: dict[str, _TrieNode] = {}
        # Placeholder edges, typed converters before plain "str"
        self.param_edges: list[_ParamEdge] = []
        # Registered pattern ending at this node
        self.pattern: str | None = None


@dataclass(slots=True)
class _ParamEdge:
    """A placeholder edge in the trie."""

    param_name: str
    param_type: str
    regex: re.Pattern[str]
    node: _TrieNode


class Router:
    """URI-pattern table, matcher, controller resolver, and dispatcher.

    Usage::

        router = Router(container)
        router.push({
            "/": {"controller": "Home", "action": "index"},
            "/user/{id}": {"controller": "User", "action": "show"},
        })
        match = router.match("/user/42")
        controller = router.resolve_controller(match)
        payload = router.dispatch(controller)
    """

    __slots__ = ("_container", "_resolver", "_root", "_routes", "_static")

    def __init__(
        self,
        container: Container,
        resolver: ControllerResolver | None = None,
    ) -> None:
        self._container = container
        self._resolver: ControllerResolver = resolver or ModuleControllerResolver()
        self._routes: dict[str, Target] = {}
        # Normalised literal path -> registered pattern
        self._static: dict[str, str] = {}
        self._root = _TrieNode()

    # -- Table --

    def add(self, uri: str, target: Target | Mapping[str, Any]) -> None:
        """Register one pattern. Re-adding a pattern replaces its target.

        Raises ``InvalidArgument`` if *uri* is empty or *target* lacks a
        controller or an action.
        """
        if not uri or not isinstance(uri, str):
            msg = "Route URI must be a non-empty string."
            raise InvalidArgument(msg)
        resolved = Target.coerce(target)
        segments = parse_path(uri)

        self._routes[uri] = resolved
        if any(seg.is_param for seg in segments):
            self._insert(uri, segments)
        else:
            self._static[_normalize(uri)] = uri
        logger.debug("Route %s -> %s.%s", uri, resolved.controller, resolved.action)

    def push(self, routes: Mapping[str, Target | Mapping[str, Any]]) -> Router:
        """Add every ``uri -> target`` pair; later pairs overwrite earlier ones."""
        for uri, target in routes.items():
            self.add(uri, target)
        return self

    def get(self, uri: str | None = None) -> dict[str, Target] | Target | None:
        """The whole table, or the target registered under exactly *uri*.

        This is a raw key lookup, not pattern matching.
        """
        if uri is None:
            return dict(self._routes)
        return self._routes.get(uri)

    def _insert(self, uri: str, segments: list[PathSegment]) -> None:
        node = self._root
        for seg in segments:
            if not seg.is_param:
                node = node.children.setdefault(seg.value, _TrieNode())
                continue

            edge = next(
                (
                    e
                    for e in node.param_edges
                    if e.param_name == seg.param_name and e.param_type == seg.param_type
                ),
                None,
            )
            if edge is None:
                pattern, _ = CONVERTERS[seg.param_type]
                edge = _ParamEdge(
                    param_name=seg.param_name or "",
                    param_type=seg.param_type,
                    regex=re.compile(pattern),
                    node=_TrieNode(),
                )
                node.param_edges.append(edge)
                # Stable sort: constrained converters are tried first
                node.param_edges.sort(key=lambda e: e.param_type == "str")
            node = edge.node
        node.pattern = uri

    # -- Matching --

    def match(self, uri: str) -> RouteMatch:
        """Match *uri* against the table.

        Literal patterns are looked up directly; placeholder patterns are
        matched segment by segment with literal segments taking
        precedence over placeholders at each position.

        Raises ``NotFound`` if no pattern matches.
        """
        pattern = self._static.get(_normalize(uri))
        if pattern is not None:
            return self._result(pattern, {})

        parts = [p for p in uri.strip("/").split("/") if p]
        found = self._match_node(self._root, parts, 0, {})
        if found is None:
            msg = f"No route matches {uri!r}"
            raise NotFound(msg, key=uri)
        pattern, params = found
        return self._result(pattern, params)

    def _result(self, pattern: str, params: dict[str, str]) -> RouteMatch:
        target = self._routes[pattern]
        logger.debug("Matched %s -> %s.%s %r", pattern, target.controller, target.action, params)
        return RouteMatch(
            controller=target.controller,
            action=target.action,
            parameters=params,
            pattern=pattern,
        )

    def _match_node(
        self,
        node: _TrieNode,
        parts: list[str],
        index: int,
        params: dict[str, str],
    ) -> tuple[str, dict[str, str]] | None:
        """Recursively match path parts against the trie."""
        if index == len(parts):
            if node.pattern is not None:
                return node.pattern, params
            return None

        part = parts[index]

        # 1. Literal child first
        child = node.children.get(part)
        if child is not None:
            result = self._match_node(child, parts, index + 1, params)
            if result is not None:
                return result

        # 2. Placeholder edges
        for edge in node.param_edges:
            if edge.regex.fullmatch(part):
                result = self._match_node(
                    edge.node, parts, index + 1, {**params, edge.param_name: part}
                )
                if result is not None:
                    return result

        return None

    # -- Controllers --

    def resolve_controller(self, match: RouteMatch | Mapping[str, Any]) -> Controller:
        """Locate, build, and return the controller named by *match*.

        The controller is constructed through the container (so its
        constructor dependencies are autowired) and receives *match*
        as its ``match`` attribute.

        Raises:
            InvalidArgument: *match* has no controller or no action.
            DispatchError: The controller source or class cannot be
                found, or the class does not extend ``Controller``.
        """
        route_match = RouteMatch.coerce(match)
        cls = self._resolver(route_match.controller)
        if cls is None:
            msg = f"Controller class not found: {route_match.controller}"
            raise DispatchError(msg)
        if not (isinstance(cls, type) and issubclass(cls, Controller)):
            msg = "Controller does not extend the base Controller class."
            raise DispatchError(msg)

        controller = self._container.build(cls)
        controller.match = route_match
        return controller

    def dispatch(self, controller: Controller) -> Any:
        """Invoke the controller's matched action and return its result.

        Parameters bind by name: values missing from the match fall back
        to the action's defaults, extra values are ignored. Parameters
        annotated ``int`` or ``float`` receive converted values.

        Raises ``DispatchError`` if the action does not exist or a
        required parameter has no value.
        """
        if getattr(controller, "match", None) is None:
            msg = f"{type(controller).__name__} has no route match assigned."
            raise DispatchError(msg)
        route_match = RouteMatch.coerce(controller.match)
        action = route_match.action
        controller_name = type(controller).__name__

        method = None
        if not action.startswith("_") and not hasattr(Controller, action):
            method = getattr(controller, action, None)
        if method is None or not callable(method):
            msg = f"Action method '{action}' not found in controller {controller_name}."
            raise DispatchError(msg)

        positional: list[Any] = []
        keywords: dict[str, Any] = {}
        for spec in describe(method):
            if spec.name in route_match.parameters:
                value = coerce_argument(route_match.parameters[spec.name], spec.annotation)
            elif spec.has_default:
                value = spec.default
            else:
                msg = (
                    f"Missing parameter '{spec.name}' for action '{action}' "
                    f"in controller {controller_name}."
                )
                raise DispatchError(msg)
            if spec.positional_only:
                positional.append(value)
            else:
                keywords[spec.name] = value

        logger.debug("Dispatching %s.%s", controller_name, action)
        return method(*positional, **keywords)
