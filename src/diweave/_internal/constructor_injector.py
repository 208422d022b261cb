from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from diweave._internal.argument_pool import ArgumentBufferPool
from diweave._internal.invocation import call_with_arguments
from diweave._internal.metadata import ConstructorDescriptor
from diweave._internal.parameter_resolver import ParameterResolver
from diweave._internal.resolver_protocol import InjectParameter, ObjectResolver
from diweave.exceptions import (
    DIWeaveInvalidArgumentError,
    DIWeaveInvocationError,
    DIWeaveResolutionError,
)


@dataclass(slots=True)
class ConstructorInjector:
    """Create instances by resolving constructor arguments and calling the constructor."""

    argument_pool: ArgumentBufferPool = field(default_factory=ArgumentBufferPool)
    parameter_resolver: ParameterResolver = field(default_factory=ParameterResolver)

    def create_instance(
        self,
        constructor: ConstructorDescriptor | None,
        resolver: ObjectResolver | None,
        parameters: Sequence[InjectParameter] | None = None,
    ) -> Any:
        """Resolve every constructor parameter and return the new instance.

        Args:
            constructor: Selected constructor of the target type.
            resolver: Resolver providing dependencies.
            parameters: Explicit overrides for this call.

        Raises:
            DIWeaveInvalidArgumentError: If constructor or resolver is ``None``.
            DIWeaveInvocationError: If the constructor itself raised.

        """
        if constructor is None:
            msg = "constructor must not be None."
            raise DIWeaveInvalidArgumentError(msg)
        if resolver is None:
            msg = "resolver must not be None."
            raise DIWeaveInvalidArgumentError(msg)

        descriptors = constructor.parameters
        with self.argument_pool.lease(len(descriptors)) as arguments:
            try:
                for index, descriptor in enumerate(descriptors):
                    arguments[index] = self.parameter_resolver.resolve_value(
                        descriptor,
                        resolver,
                        parameters,
                    )
                return call_with_arguments(constructor.factory, descriptors, arguments)
            except DIWeaveResolutionError:
                raise
            except Exception as error:
                type_name = constructor.target_type.__qualname__
                msg = (
                    f"Failed to create an instance of '{type_name}' through "
                    f"'{constructor.name}': {error}"
                )
                raise DIWeaveInvocationError(
                    msg,
                    target=type_name,
                    dependency=constructor.target_type,
                ) from error
