from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from diweave._internal.metadata import ParameterDescriptor
from diweave._internal.resolver_protocol import InjectParameter, ObjectResolver
from diweave._internal.type_checks import describe_dependency
from diweave.exceptions import (
    DIWeaveDependencyNotRegisteredError,
    DIWeaveNoParentContainerError,
)

_MISSING: Any = object()


@dataclass(slots=True)
class ParameterResolver:
    """Produce the value of one parameter, field or property.

    Strategies are tried in a fixed order and the first one that yields a
    value wins:

    1. explicit override supplied by the caller;
    2. parent scope, for ``FromParent[...]`` dependencies;
    3. keyed lookup, for dependencies carrying a ``Key``;
    4. ordinary ``try_resolve`` on the current resolver;
    5. the default or empty value of optional dependencies.

    Each strategy reports a miss with a sentinel; the exception is raised only
    once no strategy can recover. Only a missing registration is recoverable:
    errors raised while building a registered dependency always propagate.
    """

    def resolve_value(
        self,
        descriptor: ParameterDescriptor,
        resolver: ObjectResolver,
        parameters: Sequence[InjectParameter] | None = None,
    ) -> Any:
        """Return the value injected for descriptor.

        Args:
            descriptor: Parameter, field or property being resolved.
            resolver: Resolver of the current scope.
            parameters: Explicit overrides for this call, checked first.

        Raises:
            DIWeaveNoParentContainerError: ``FromParent`` dependency without a parent scope.
            DIWeaveDependencyNotRegisteredError: Required dependency has no registration.

        """
        value = self._from_overrides(descriptor, resolver, parameters)
        if value is not _MISSING:
            return value

        if descriptor.from_parent:
            return self._from_parent(descriptor, resolver)

        if descriptor.key is not None:
            return self._keyed(descriptor, resolver)

        value = resolver.try_resolve(descriptor.dependency)
        if value is not None:
            return value

        if descriptor.accepts_fallback:
            return descriptor.fallback_value()

        msg = (
            f"Dependency '{describe_dependency(descriptor.dependency)}' for '{descriptor.name}' is not "
            "registered. Register it, mark it Maybe[...], or give it a default value."
        )
        raise DIWeaveDependencyNotRegisteredError(msg, dependency=descriptor.dependency)

    def _from_overrides(
        self,
        descriptor: ParameterDescriptor,
        resolver: ObjectResolver,
        parameters: Sequence[InjectParameter] | None,
    ) -> Any:
        if not parameters:
            return _MISSING
        for parameter in parameters:
            if parameter.can_supply(descriptor.dependency, descriptor.name):
                return parameter.get_value(resolver)
        return _MISSING

    def _from_parent(self, descriptor: ParameterDescriptor, resolver: ObjectResolver) -> Any:
        parent = resolver.parent
        if parent is None:
            if descriptor.accepts_fallback:
                return descriptor.fallback_value()
            msg = (
                f"Dependency '{describe_dependency(descriptor.dependency)}' for '{descriptor.name}' must "
                "come from a parent scope, but the resolver has no parent."
            )
            raise DIWeaveNoParentContainerError(
                msg,
                dependency=descriptor.dependency,
                key=descriptor.key,
            )
        if descriptor.key is not None:
            return parent.resolve_keyed(descriptor.dependency, descriptor.key)
        return parent.resolve(descriptor.dependency)

    def _keyed(self, descriptor: ParameterDescriptor, resolver: ObjectResolver) -> Any:
        try:
            return resolver.resolve_keyed(descriptor.dependency, descriptor.key)  # type: ignore[arg-type]
        except DIWeaveDependencyNotRegisteredError as error:
            # Only a miss on this exact registration is recoverable; misses
            # raised while building it belong to a deeper dependency.
            is_own_miss = error.dependency == descriptor.dependency and error.key == descriptor.key
            if is_own_miss and descriptor.accepts_fallback:
                return descriptor.fallback_value()
            raise
