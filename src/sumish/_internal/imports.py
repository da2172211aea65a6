"""Import-string resolution: ``"package.module:Attribute"`` to objects.

Used by the Container for class-backed registrations, by the module
controller resolver, and by the ``sumish`` CLI.
"""

import importlib
from typing import Any


def is_import_string(value: object) -> bool:
    """True if *value* looks like ``"package.module:Attribute"``.

    Both halves must be dotted identifiers, so values such as
    ``"sqlite:///app.db"``, ``"https://example.com"`` or ``"12:30"`` stay
    plain strings.
    """
    if not isinstance(value, str):
        return False
    module_path, sep, attr = value.partition(":")
    if not sep:
        return False
    return _is_dotted_name(module_path) and _is_dotted_name(attr)


def _is_dotted_name(value: str) -> bool:
    return bool(value) and all(part.isidentifier() for part in value.split("."))


def import_string(target: str, *, default_attr: str | None = None) -> Any:
    """Resolve an import string to the object it names.

    Accepts ``"module:attribute"``. Dotted attributes walk nested
    objects (``"pkg.mod:Outer.Inner"``). When the attribute portion is
    omitted, *default_attr* is used; without one, the module is returned.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
    """
    module_path, _, attr_path = target.partition(":")
    if not attr_path:
        attr_path = default_attr or ""

    obj: Any = importlib.import_module(module_path)
    for part in filter(None, attr_path.split(".")):
        obj = getattr(obj, part)
    return obj


def qualified_name(cls: type) -> str:
    """Dotted ``module.QualName`` used as the registry key for a class."""
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"
