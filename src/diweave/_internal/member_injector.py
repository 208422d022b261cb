from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from diweave._internal.metadata import MemberDescriptor
from diweave._internal.parameter_resolver import ParameterResolver
from diweave._internal.resolver_protocol import InjectParameter, ObjectResolver
from diweave._internal.type_checks import is_zero_value
from diweave.exceptions import (
    DIWeaveInvalidArgumentError,
    DIWeaveInvocationError,
    DIWeaveResolutionError,
)


@dataclass(slots=True)
class _MemberInjector:
    parameter_resolver: ParameterResolver = field(default_factory=ParameterResolver)

    def inject(
        self,
        instance: Any,
        members: Sequence[MemberDescriptor] | None,
        resolver: ObjectResolver | None,
        parameters: Sequence[InjectParameter] | None = None,
    ) -> None:
        """Resolve and assign every member in order.

        An optional member whose resolved value is the empty value of its type
        is left untouched, so unset optional members stay unset. Members
        assigned before a failure keep their values.

        Args:
            instance: Object receiving the values.
            members: Field or property descriptors from the type's metadata.
            resolver: Resolver providing dependencies.
            parameters: Explicit overrides for this call.

        """
        if not members:
            return
        if instance is None:
            msg = "instance must not be None."
            raise DIWeaveInvalidArgumentError(msg)
        if resolver is None:
            msg = "resolver must not be None."
            raise DIWeaveInvalidArgumentError(msg)

        for member in members:
            value = self.parameter_resolver.resolve_value(member.parameter, resolver, parameters)
            if member.is_optional and is_zero_value(value, member.dependency):
                continue
            try:
                setattr(instance, member.name, value)
            except DIWeaveResolutionError:
                raise
            except Exception as error:
                owner = type(instance).__qualname__
                msg = f"Failed to inject {member.kind.value} '{owner}.{member.name}': {error}"
                raise DIWeaveInvocationError(
                    msg,
                    target=f"{owner}.{member.name}",
                    dependency=member.dependency,
                ) from error


@dataclass(slots=True)
class FieldInjector(_MemberInjector):
    """Assign ``Inject[...]`` fields on an existing instance."""


@dataclass(slots=True)
class PropertyInjector(_MemberInjector):
    """Assign ``@inject`` properties on an existing instance through their setters."""
