from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from diweave._internal.argument_pool import ArgumentBufferPool
from diweave._internal.invocation import call_with_arguments
from diweave._internal.metadata import MethodDescriptor
from diweave._internal.parameter_resolver import ParameterResolver
from diweave._internal.resolver_protocol import InjectParameter, ObjectResolver
from diweave.exceptions import (
    DIWeaveInvalidArgumentError,
    DIWeaveInvocationError,
    DIWeaveResolutionError,
)


@dataclass(slots=True)
class MethodInjector:
    """Invoke ``@inject`` methods on an existing instance.

    Methods run in the order stored in the metadata; later methods may rely on
    side effects of earlier ones.
    """

    argument_pool: ArgumentBufferPool = field(default_factory=ArgumentBufferPool)
    parameter_resolver: ParameterResolver = field(default_factory=ParameterResolver)

    def inject(
        self,
        instance: Any,
        methods: Sequence[MethodDescriptor] | None,
        resolver: ObjectResolver | None,
        parameters: Sequence[InjectParameter] | None = None,
    ) -> None:
        """Invoke every method with resolved arguments.

        Args:
            instance: Object whose methods are invoked.
            methods: Method descriptors, already sorted.
            resolver: Resolver providing dependencies.
            parameters: Explicit overrides for this call.

        """
        if not methods:
            return
        if instance is None:
            msg = "instance must not be None."
            raise DIWeaveInvalidArgumentError(msg)
        if resolver is None:
            msg = "resolver must not be None."
            raise DIWeaveInvalidArgumentError(msg)

        for method in methods:
            self._invoke(instance, method, resolver, parameters)

    def _invoke(
        self,
        instance: Any,
        method: MethodDescriptor,
        resolver: ObjectResolver,
        parameters: Sequence[InjectParameter] | None,
    ) -> None:
        descriptors = method.parameters
        with self.argument_pool.lease(len(descriptors)) as arguments:
            try:
                for index, descriptor in enumerate(descriptors):
                    arguments[index] = self.parameter_resolver.resolve_value(
                        descriptor,
                        resolver,
                        parameters,
                    )
                bound = getattr(instance, method.name)
                call_with_arguments(bound, descriptors, arguments)
            except DIWeaveResolutionError:
                raise
            except Exception as error:
                owner = type(instance).__qualname__
                msg = f"Failed to invoke injection method '{owner}.{method.name}': {error}"
                raise DIWeaveInvocationError(msg, target=f"{owner}.{method.name}") from error
