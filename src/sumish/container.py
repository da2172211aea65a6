"""Dependency-injection container with constructor autowiring.

Components are registered under string keys as live instances, classes
(``type`` objects or ``"module:Class"`` import strings), or factories.
Classes are built lazily on first ``get()`` by inspecting the
constructor's declared parameter types and resolving each one from the
registry. Every resolved component is cached: one instance per key per
container.

Usage::

    container = Container.create({"components": {"db": Database}})
    container.set(Mailer, SmtpMailer)          # class key -> "module.Mailer"
    service = container.get("db")

Thread safety:
    Registration is expected to finish before resolution starts.
    Concurrent first resolution of the same key is not guarded; the
    instance cache is append-only so a shared container stays
    consistent once warm.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from functools import partial
from typing import Any

from sumish._internal.imports import import_string, is_import_string, qualified_name
from sumish._internal.signature import (
    ParameterSpec,
    constructor_parameters,
    describe,
    is_primitive,
)
from sumish.errors import ContainerError, InvalidArgument, NotFound, ResolutionError

logger = logging.getLogger("sumish.container")

_MISSING: Any = object()

# Explicit constructor arguments: by parameter name or by position
ExplicitArgs = Mapping[str, Any] | Sequence[Any]


@dataclass(frozen=True, slots=True)
class _Entry:
    """A registration: what to produce and how."""

    value: Any
    kind: str  # "instance" | "class" | "factory"
    args: ExplicitArgs = ()

    @classmethod
    def of(cls, value: Any, args: ExplicitArgs) -> _Entry:
        if isinstance(value, type) or is_import_string(value):
            return cls(value, "class", args)
        if inspect.isroutine(value) or isinstance(value, partial):
            return cls(value, "factory", args)
        return cls(value, "instance", args)


def _explicit(spec: ParameterSpec, args: ExplicitArgs) -> Any:
    """The explicitly supplied value for *spec*, or ``_MISSING``."""
    if isinstance(args, Mapping):
        return args.get(spec.name, _MISSING)
    if spec.position < len(args):
        return args[spec.position]
    return _MISSING


class Container:
    """Registry, lazy instantiator, and autowiring resolver.

    ``get(key)`` returns the cached instance when one exists; otherwise
    it produces the component from its registration and caches it.
    Failures while producing are raised as ``ContainerError`` carrying
    the component key, so nested autowiring chains read as a path::

        Error creating component 'app': Unable to resolve parameter
        'repo' in constructor of 'app.App': Error creating component ...
    """

    __slots__ = ("_building", "_entries", "_instances", "_memo")

    def __init__(self) -> None:
        self._entries: dict[str, _Entry] = {}
        self._instances: dict[str, Any] = {}
        self._memo: dict[str, Any] = {}
        # Keys currently being produced; re-entry means a cycle
        self._building: dict[str, None] = {}

    @classmethod
    def create(cls, config: Any = None) -> Container:
        """Build a container from a configuration structure.

        Registers *config* itself under ``"config"`` and every entry of
        its ``components`` mapping (key -> class, import string, factory,
        or live value). *config* may be a mapping or an object with a
        ``components`` attribute.
        """
        container = cls()
        if config is None:
            config = {}
        container.set("config", config)

        if isinstance(config, Mapping):
            components = config.get("components") or {}
        else:
            components = getattr(config, "components", None) or {}
        for key, value in components.items():
            container.set(key, value)
        return container

    # -- Registration --

    def set(self, key: str | type, value: Any = _MISSING, args: ExplicitArgs = ()) -> None:
        """Register *value* under *key*, replacing any previous entry.

        *args* are explicit constructor arguments used verbatim instead
        of autowiring: a mapping by parameter name or a sequence by
        position. When *key* is a class and *value* is omitted, the
        class registers itself.
        """
        name = self._key(key)
        if value is _MISSING:
            if not isinstance(key, type):
                msg = f"No value given for component '{name}'."
                raise InvalidArgument(msg)
            value = key
        self._entries[name] = _Entry.of(value, args)
        self._instances.pop(name, None)
        logger.debug("Registered component %r", name)

    def has(self, key: str | type) -> bool:
        """True if *key* has a registration or a cached instance."""
        name = self._key(key)
        return name in self._entries or name in self._instances

    def is_resolved(self, key: str | type) -> bool:
        """True once ``get(key)`` has produced an instance that is still cached."""
        return self._key(key) in self._instances

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str | type):
            return False
        return self.has(key)

    def remove(self, key: str | type) -> None:
        """Drop the registration and cached instance for *key*, if any."""
        name = self._key(key)
        self._entries.pop(name, None)
        self._instances.pop(name, None)

    def clear(self) -> None:
        """Drop every registration, cached instance, and memoized result."""
        self._entries.clear()
        self._instances.clear()
        self._memo.clear()

    # -- Resolution --

    def get(self, key: str | type) -> Any:
        """Resolve *key* to its component instance.

        Raises:
            NotFound: *key* has no registration.
            ContainerError: The component could not be produced.
        """
        name = self._key(key)
        if name in self._instances:
            return self._instances[name]

        entry = self._entries.get(name)
        if entry is None:
            msg = f"Component '{name}' not found."
            raise NotFound(msg, key=name)

        if entry.kind == "instance":
            instance = entry.value
        else:
            if name in self._building:
                chain = " -> ".join([*self._building, name])
                msg = f"Circular dependency detected while building '{name}': {chain}"
                raise ContainerError(msg, key=name)
            self._building[name] = None
            try:
                instance = self._produce(name, entry)
            finally:
                self._building.pop(name, None)

        self._instances[name] = instance
        return instance

    def build(self, target: type | str, args: ExplicitArgs = ()) -> Any:
        """Autowire and construct *target* without registering it.

        Raises ``ContainerError`` keyed by the class's qualified name.
        """
        name = qualified_name(target) if isinstance(target, type) else str(target)
        cls = self._load_class(target, name)
        return self._produce(qualified_name(cls), _Entry(cls, "class", args))

    def cache(self, key: str, func: Callable[..., Any], args: Sequence[Any] = ()) -> Any:
        """Memoize ``func(*args)`` under *key*.

        The first call computes and stores the result. Later calls with
        the same *key* return it without invoking *func*, even when
        *args* differ.
        """
        if key in self._memo:
            return self._memo[key]
        result = func(*args)
        self._memo[key] = result
        return result

    # -- Internals --

    @staticmethod
    def _key(key: object) -> str:
        if isinstance(key, type):
            return qualified_name(key)
        if isinstance(key, str) and key:
            return key
        msg = f"Component key must be a non-empty string or a class, got {key!r}."
        raise InvalidArgument(msg)

    def _produce(self, name: str, entry: _Entry) -> Any:
        """Run a class or factory entry, wrapping failures with *name*."""
        try:
            if entry.kind == "factory":
                return self._invoke(entry.value, entry.args, owner=name)
            cls = self._load_class(entry.value, name)
            return self._construct(cls, entry.args)
        except ContainerError as exc:
            msg = f"Error creating component '{name}': {exc}"
            raise type(exc)(msg, key=name, parameter=exc.parameter) from exc
        except Exception as exc:
            msg = f"Error creating component '{name}': {exc}"
            raise ContainerError(msg, key=name) from exc

    @staticmethod
    def _load_class(value: Any, name: str) -> type:
        if isinstance(value, type):
            return value
        try:
            cls = import_string(value)
        except (ImportError, AttributeError) as exc:
            msg = f"Class '{value}' not found"
            raise ContainerError(msg, key=name) from exc
        if not isinstance(cls, type):
            msg = f"'{value}' does not name a class"
            raise ContainerError(msg, key=name)
        return cls

    def _construct(self, cls: type, args: ExplicitArgs) -> Any:
        if inspect.isabstract(cls) or getattr(cls, "_is_protocol", False):
            msg = f"Class '{qualified_name(cls)}' is not instantiable"
            raise ContainerError(msg)
        owner = qualified_name(cls)
        positional, keywords = self._arguments(constructor_parameters(cls), args, owner)
        logger.debug("Constructing %s", owner)
        return cls(*positional, **keywords)

    def _invoke(self, func: Callable[..., Any], args: ExplicitArgs, owner: str) -> Any:
        positional, keywords = self._arguments(describe(func), args, owner)
        return func(*positional, **keywords)

    def _arguments(
        self,
        specs: tuple[ParameterSpec, ...],
        args: ExplicitArgs,
        owner: str,
    ) -> tuple[tuple[Any, ...], dict[str, Any]]:
        positional: list[Any] = []
        keywords: dict[str, Any] = {}
        for spec in specs:
            value = self._resolve_parameter(spec, args, owner)
            if spec.positional_only:
                positional.append(value)
            else:
                keywords[spec.name] = value
        return tuple(positional), keywords

    def _is_self_type(self, candidate: Any) -> bool:
        return (
            isinstance(candidate, type)
            and issubclass(candidate, Container)
            and isinstance(self, candidate)
        )

    def _resolve_parameter(self, spec: ParameterSpec, args: ExplicitArgs, owner: str) -> Any:
        """Resolve one constructor parameter.

        Order: explicit argument, self-injection, registry lookup by
        declared type (union members in declaration order, scalars
        skipped), declared default.
        """
        explicit = _explicit(spec, args)
        if explicit is not _MISSING:
            return explicit

        if spec.is_union:
            return self._resolve_union(spec, owner)

        candidate = spec.annotation
        if self._is_self_type(candidate):
            return self
        if candidate is None or is_primitive(candidate):
            if spec.has_default:
                return spec.default
            msg = f"Unable to resolve parameter '{spec.name}' in constructor of '{owner}'"
            raise ResolutionError(msg, parameter=spec.name)

        try:
            return self.get(qualified_name(candidate))
        except (NotFound, ContainerError) as exc:
            if spec.has_default:
                return spec.default
            msg = f"Unable to resolve parameter '{spec.name}' in constructor of '{owner}': {exc}"
            raise ResolutionError(msg, parameter=spec.name) from exc

    def _resolve_union(self, spec: ParameterSpec, owner: str) -> Any:
        last_error: Exception | None = None
        for candidate in spec.candidates:
            if is_primitive(candidate):
                continue
            if self._is_self_type(candidate):
                return self
            try:
                return self.get(qualified_name(candidate))
            except (NotFound, ContainerError) as exc:
                last_error = exc

        if spec.has_default:
            return spec.default
        msg = (
            f"Unable to resolve any type from union type for parameter "
            f"'{spec.name}' in constructor of '{owner}'"
        )
        if last_error is not None:
            msg = f"{msg}: {last_error}"
        raise ResolutionError(msg, parameter=spec.name) from last_error

    def list(self) -> frozenset[str]:
        """Registered keys, without values."""
        return frozenset(self._entries) | frozenset(self._instances)
