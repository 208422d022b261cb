from __future__ import annotations

from typing import Any, Protocol, TypeVar, overload, runtime_checkable

T = TypeVar("T")


@runtime_checkable
class ObjectResolver(Protocol):
    """Protocol for the resolver the injector pulls dependencies from.

    Implementations raise ``DIWeaveResolutionError`` (or a subclass) when a
    required registration is missing, so the injector can tell resolution
    failures apart from errors raised by user code.
    """

    @overload
    def resolve(self, dependency: type[T]) -> T: ...

    @overload
    def resolve(self, dependency: Any) -> Any: ...

    def resolve(self, dependency: Any) -> Any:
        """Resolve the given dependency and return its instance.

        Args:
            dependency: Dependency key to resolve.

        """

    def try_resolve(self, dependency: Any) -> Any | None:
        """Resolve the given dependency or return ``None`` when it is not registered.

        Args:
            dependency: Dependency key to resolve.

        """

    def resolve_keyed(self, dependency: Any, key: str) -> Any:
        """Resolve the registration of dependency stored under key.

        Args:
            dependency: Dependency key to resolve.
            key: Discriminator selecting one of several registrations.

        """

    @property
    def parent(self) -> ObjectResolver | None:
        """Resolver of the enclosing scope, or ``None`` for a root resolver."""


@runtime_checkable
class InjectParameter(Protocol):
    """Protocol for explicit values that override normal resolution for one call."""

    def can_supply(self, dependency: Any, name: str) -> bool:
        """Return true when this override provides the value for a parameter or member.

        Args:
            dependency: Declared dependency type of the parameter or member.
            name: Parameter or member name.

        """

    def get_value(self, resolver: ObjectResolver) -> Any:
        """Return the override value.

        Args:
            resolver: Resolver of the ongoing injection call.

        """
