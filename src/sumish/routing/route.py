"""PathSegment, Target, and RouteMatch frozen dataclasses."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from sumish.errors import InvalidArgument


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route pattern.

    Static:  ``/users``     (is_param=False)
    Param:   ``/{id}``      (is_param=True, param_name="id")
    Typed:   ``/{id:int}``  (is_param=True, param_name="id", param_type="int")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"


@dataclass(frozen=True, slots=True)
class Target:
    """What a route pattern resolves to: a controller and one of its actions."""

    controller: str
    action: str

    @classmethod
    def coerce(cls, target: Target | Mapping[str, Any]) -> Target:
        """Accept a ``Target`` or a ``{"controller": ..., "action": ...}`` mapping.

        Raises ``InvalidArgument`` when either field is missing or empty.
        """
        if isinstance(target, Target):
            controller, action = target.controller, target.action
        elif isinstance(target, Mapping):
            controller = target.get("controller")
            action = target.get("action")
        else:
            msg = f"Route target must be a mapping or Target, got {type(target).__name__}."
            raise InvalidArgument(msg)

        if not controller or not isinstance(controller, str):
            msg = "Route target requires a non-empty 'controller'."
            raise InvalidArgument(msg)
        if not action or not isinstance(action, str):
            msg = "Route target requires a non-empty 'action'."
            raise InvalidArgument(msg)
        if isinstance(target, Target):
            return target
        return cls(controller=controller, action=action)

    def as_dict(self) -> dict[str, str]:
        return {"controller": self.controller, "action": self.action}


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful match.

    ``parameters`` maps placeholder names to the captured URI segments;
    it is empty when the matched pattern had no placeholders.
    """

    controller: str
    action: str
    parameters: dict[str, str] = field(default_factory=dict)
    pattern: str | None = None

    @classmethod
    def coerce(cls, match: RouteMatch | Mapping[str, Any]) -> RouteMatch:
        """Accept a ``RouteMatch`` or a mapping with the same fields.

        Raises ``InvalidArgument`` when controller or action is missing.
        """
        if isinstance(match, RouteMatch):
            data: Mapping[str, Any] = {"controller": match.controller, "action": match.action}
        else:
            data = match
        if not data.get("controller"):
            msg = "No controller defined in route."
            raise InvalidArgument(msg)
        if not data.get("action"):
            msg = "No action defined in route."
            raise InvalidArgument(msg)
        if isinstance(match, RouteMatch):
            return match
        return cls(
            controller=data["controller"],
            action=data["action"],
            parameters=dict(data.get("parameters") or {}),
            pattern=data.get("pattern"),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "controller": self.controller,
            "action": self.action,
            "parameters": dict(self.parameters),
        }
