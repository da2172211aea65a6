"""Controller resolvers: map a route's controller identifier to a class.

A resolver is any callable ``identifier -> type | None``. It returns
``None`` when the identifier's source exists but defines no such class,
and raises ``DispatchError`` when the source itself cannot be located
or loaded. The Router checks the class hierarchy.
"""

import importlib
import importlib.util
import re
from collections.abc import Callable, Mapping
from typing import Any, TypeAlias

from sumish._internal.imports import import_string, is_import_string
from sumish.errors import DispatchError

ControllerResolver: TypeAlias = Callable[[str], type | None]

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def snake_case(name: str) -> str:
    """``UserProfile`` -> ``user_profile``."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


class ModuleControllerResolver:
    """Resolve identifiers by naming convention inside a package.

    ``"User"`` and ``"UserController"`` both resolve to the class
    ``UserController`` in module ``<package>.user``::

        resolver = ModuleControllerResolver("app.controllers")
        resolver("UserProfile")  # app.controllers.user_profile:UserProfileController
    """

    __slots__ = ("package", "suffix")

    def __init__(self, package: str = "app.controllers", suffix: str = "Controller") -> None:
        self.package = package
        self.suffix = suffix

    def class_name(self, identifier: str) -> str:
        if identifier.endswith(self.suffix):
            return identifier
        return f"{identifier}{self.suffix}"

    def module_name(self, identifier: str) -> str:
        base = identifier.removesuffix(self.suffix) or identifier
        return f"{self.package}.{snake_case(base)}"

    def __call__(self, identifier: str) -> type | None:
        module_path = self.module_name(identifier)
        try:
            spec = importlib.util.find_spec(module_path)
        except ModuleNotFoundError:
            # A parent package is missing
            spec = None
        if spec is None:
            msg = f"Controller source not found: {module_path}"
            raise DispatchError(msg)

        try:
            module = importlib.import_module(module_path)
        except ImportError as exc:
            msg = f"Controller module {module_path!r} failed to load: {exc}"
            raise DispatchError(msg) from exc
        return getattr(module, self.class_name(identifier), None)


class MappingControllerResolver:
    """Resolve identifiers from a static registry.

    Values are classes or ``"module:Class"`` import strings::

        resolver = MappingControllerResolver({"User": UserController})
    """

    __slots__ = ("_controllers",)

    def __init__(self, controllers: Mapping[str, Any]) -> None:
        self._controllers = dict(controllers)

    def __call__(self, identifier: str) -> type | None:
        target = self._controllers.get(identifier)
        if is_import_string(target):
            try:
                target = import_string(target)
            except (ImportError, AttributeError) as exc:
                msg = f"Controller {identifier!r} could not be loaded from {target!r}: {exc}"
                raise DispatchError(msg) from exc
        return target
