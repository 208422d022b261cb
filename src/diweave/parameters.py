from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from diweave._internal.resolver_protocol import ObjectResolver
from diweave.exceptions import DIWeaveInvalidArgumentError

_NO_VALUE: Any = object()


@dataclass(frozen=True, slots=True)
class NamedParameter:
    """Override the parameter or member with the given name.

    Provide either a fixed ``value`` or a ``factory`` receiving the resolver of
    the ongoing call.

    Examples:
        .. code-block:: python

            container.instantiate(Client, parameters=[NamedParameter("timeout", value=5)])

    """

    name: str
    value: Any = _NO_VALUE
    factory: Callable[[ObjectResolver], Any] | None = None

    def __post_init__(self) -> None:
        _validate_source(value=self.value, factory=self.factory, label=f"NamedParameter({self.name!r})")

    def can_supply(self, dependency: Any, name: str) -> bool:
        return name == self.name

    def get_value(self, resolver: ObjectResolver) -> Any:
        if self.factory is not None:
            return self.factory(resolver)
        return self.value


@dataclass(frozen=True, slots=True)
class TypedParameter:
    """Override every parameter or member declared with the given dependency type.

    Matching compares declared types by equality, so ``Annotated`` keys match
    only the same annotated key.
    """

    dependency: Any
    value: Any = _NO_VALUE
    factory: Callable[[ObjectResolver], Any] | None = None

    def __post_init__(self) -> None:
        _validate_source(
            value=self.value,
            factory=self.factory,
            label=f"TypedParameter({self.dependency!r})",
        )

    def can_supply(self, dependency: Any, name: str) -> bool:
        return dependency == self.dependency

    def get_value(self, resolver: ObjectResolver) -> Any:
        if self.factory is not None:
            return self.factory(resolver)
        return self.value


def _validate_source(*, value: Any, factory: Any, label: str) -> None:
    has_value = value is not _NO_VALUE
    has_factory = factory is not None
    if has_value == has_factory:
        msg = f"{label} requires exactly one of 'value' or 'factory'."
        raise DIWeaveInvalidArgumentError(msg)
