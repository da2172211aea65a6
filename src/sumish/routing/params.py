"""Placeholder converters and action argument coercion.

Built-in converters for pattern segments like ``{id:int}``. Every
converter matches exactly one URI segment; captured values stay strings
in the ``RouteMatch``.
"""

from typing import Any

# (regex_pattern, python_type) for each supported converter
CONVERTERS: dict[str, tuple[str, type]] = {
    "str": (r"[^/]+", str),
    "int": (r"\d+", int),
    "float": (r"\d+(?:\.\d+)?", float),
}

# Annotations an action parameter may declare to receive a converted value
_COERCIBLE: tuple[type, ...] = (int, float)


def coerce_argument(value: str, annotation: Any) -> Any:
    """Convert *value* to ``int``/``float`` when the action asks for one.

    Anything else, or a value that does not convert, is returned as is.
    """
    if annotation in _COERCIBLE:
        try:
            return annotation(value)
        except ValueError:
            return value
    return value
