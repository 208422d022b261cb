from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from diweave._internal.type_checks import zero_value


class MemberKind(str, Enum):
    """Kind of member populated after construction."""

    FIELD = "field"
    """Instance attribute declared with an ``Inject[...]`` class-body annotation."""

    PROPERTY = "property"
    """Writable property whose accessor carries ``@inject``."""


@dataclass(frozen=True, slots=True)
class ParameterDescriptor:
    """Describe one value the injector must supply.

    Constructor and method parameters map to one descriptor each. Fields and
    properties are exposed through the same shape (without default values) so
    a single resolution routine serves every injection point.
    """

    name: str
    dependency: Any
    is_optional: bool = False
    key: str | None = None
    from_parent: bool = False
    has_default: bool = False
    default_value: Any = None
    kind: inspect._ParameterKind = inspect.Parameter.POSITIONAL_OR_KEYWORD

    @property
    def accepts_fallback(self) -> bool:
        """Return true when an unresolved dependency may be replaced by a fallback value."""
        return self.is_optional or self.has_default

    def fallback_value(self) -> Any:
        """Return the explicit default, or the empty value of the declared type."""
        if self.has_default:
            return self.default_value
        return zero_value(self.dependency)


@dataclass(frozen=True, slots=True)
class ConstructorDescriptor:
    """Describe the constructor selected for a type.

    ``factory`` is the class itself for ``__init__`` or the bound alternate
    constructor; calling it with the resolved arguments returns the instance.
    """

    target_type: type[Any]
    name: str
    factory: Callable[..., Any]
    parameters: tuple[ParameterDescriptor, ...] = ()
    is_explicit: bool = False


@dataclass(frozen=True, slots=True)
class MemberDescriptor:
    """Describe an injected field or property."""

    name: str
    kind: MemberKind
    parameter: ParameterDescriptor
    owner: type[Any]

    @property
    def dependency(self) -> Any:
        return self.parameter.dependency

    @property
    def is_optional(self) -> bool:
        return self.parameter.is_optional

    @property
    def key(self) -> str | None:
        return self.parameter.key

    @property
    def from_parent(self) -> bool:
        return self.parameter.from_parent


@dataclass(frozen=True, slots=True)
class MethodDescriptor:
    """Describe an injection method invoked after construction."""

    name: str
    owner: type[Any]
    order: int = 0
    parameters: tuple[ParameterDescriptor, ...] = ()


@dataclass(frozen=True, slots=True)
class InjectionMetadata:
    """Immutable description of every injection point of one type.

    ``methods`` are already sorted by ``order`` with ties kept in declaration
    order, most-derived class first.
    """

    target_type: type[Any]
    constructor: ConstructorDescriptor | None = None
    fields: tuple[MemberDescriptor, ...] = ()
    properties: tuple[MemberDescriptor, ...] = ()
    methods: tuple[MethodDescriptor, ...] = ()
    has_injection_points: bool = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "has_injection_points",
            self.constructor is not None
            or bool(self.fields)
            or bool(self.properties)
            or bool(self.methods),
        )
