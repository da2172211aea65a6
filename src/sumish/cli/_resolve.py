"""App import resolution: ``"module:attribute"`` strings to Applications."""

from sumish._internal.imports import import_string
from sumish.app import Application


def resolve_app(target: str) -> Application:
    """Resolve an import string to a sumish Application.

    When the attribute portion is omitted, defaults to ``"app"``
    (``"myapp"`` resolves to ``myapp.app``). Factory functions are
    called.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the resolved object is not an Application or a
            factory returning one.
    """
    obj = import_string(target, default_attr="app")

    if callable(obj) and not isinstance(obj, Application):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {target!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, Application):
        msg = f"{target!r} resolved to {type(obj).__name__}, not a sumish.Application instance"
        raise TypeError(msg)

    return obj
