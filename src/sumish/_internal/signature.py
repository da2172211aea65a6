"""Parameter descriptors: declared constructor and action signatures.

The Container consumes these instead of calling ``inspect`` inline:
each class is described once and the tuple of ``ParameterSpec`` is
reused for every construction.
"""

import functools
import inspect
import sys
import types
import typing
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

# Declared types that are never looked up in the registry
PRIMITIVES: frozenset[Any] = frozenset(
    {
        bool,
        bytearray,
        bytes,
        complex,
        dict,
        float,
        frozenset,
        int,
        list,
        object,
        set,
        str,
        tuple,
        type,
        type(None),
    }
)


@dataclass(frozen=True, slots=True)
class ParameterSpec:
    """A declared parameter of a constructor or action.

    ``candidates`` holds the declared types in declaration order: one
    entry for a plain annotation, several for a union, none when the
    parameter is unannotated.
    """

    name: str
    position: int
    candidates: tuple[Any, ...]
    has_default: bool
    default: Any = None
    positional_only: bool = False

    @property
    def is_union(self) -> bool:
        return len(self.candidates) > 1

    @property
    def annotation(self) -> Any:
        """The single declared type, or ``None`` for unions and bare names."""
        if len(self.candidates) == 1:
            return self.candidates[0]
        return None


def is_primitive(candidate: Any) -> bool:
    """True for scalar/builtin types and anything that is not a class."""
    if not isinstance(candidate, type):
        return True
    return candidate in PRIMITIVES


def split_union(annotation: Any) -> tuple[Any, ...]:
    """Flatten ``A | B``, ``Union[A, B]`` and ``Optional[A]`` into members."""
    if annotation is inspect.Parameter.empty:
        return ()
    if typing.get_origin(annotation) in (typing.Union, types.UnionType):
        return typing.get_args(annotation)
    return (annotation,)


def _signature(target: Callable[..., Any]) -> inspect.Signature | None:
    try:
        return inspect.signature(target)
    except (TypeError, ValueError):
        # Builtins without introspectable signatures.
        return None


def _namespace(target: Any) -> dict[str, Any]:
    """Globals that string annotations on *target* were written against."""
    if isinstance(target, type):
        init = target.__init__
        if hasattr(init, "__globals__"):
            return init.__globals__
        module = sys.modules.get(target.__module__)
        return vars(module) if module is not None else {}
    while isinstance(target, functools.partial):
        target = target.func
    return getattr(inspect.unwrap(target), "__globals__", {})


def _evaluate(annotation: str, namespace: dict[str, Any]) -> Any:
    try:
        return eval(annotation, namespace)  # noqa: S307
    except (NameError, AttributeError, SyntaxError, TypeError):
        return annotation


def _candidates(annotation: Any, namespace: dict[str, Any]) -> tuple[Any, ...]:
    """Declared types of one parameter.

    String annotations are evaluated one parameter at a time. A name
    that only exists under ``TYPE_CHECKING`` stays a string, as does the
    matching member of a string union; the other members still resolve.
    """
    if not isinstance(annotation, str):
        return split_union(annotation)
    resolved = _evaluate(annotation, namespace)
    if not isinstance(resolved, str):
        return split_union(resolved)
    if "|" not in annotation:
        return (annotation,)
    members: list[Any] = []
    for part in annotation.split("|"):
        member = _evaluate(part.strip(), namespace)
        if member is None:
            member = type(None)
        members.extend(split_union(member) if not isinstance(member, str) else (member,))
    return tuple(members)


def describe(target: Callable[..., Any]) -> tuple[ParameterSpec, ...]:
    """Describe the named parameters of *target* in declaration order.

    ``*args`` and ``**kwargs`` are skipped. For a class, the
    constructor is described (without ``self``).
    """
    sig = _signature(target)
    if sig is None:
        return ()
    namespace = _namespace(target)
    specs: list[ParameterSpec] = []
    position = 0
    for param in sig.parameters.values():
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        has_default = param.default is not inspect.Parameter.empty
        specs.append(
            ParameterSpec(
                name=param.name,
                position=position,
                candidates=_candidates(param.annotation, namespace),
                has_default=has_default,
                default=param.default if has_default else None,
                positional_only=param.kind is param.POSITIONAL_ONLY,
            )
        )
        position += 1
    return tuple(specs)


@functools.cache
def constructor_parameters(cls: type) -> tuple[ParameterSpec, ...]:
    """Cached ``describe`` for classes; constructors don't change at runtime."""
    return describe(cls)
