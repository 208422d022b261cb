from __future__ import annotations

from collections.abc import Sequence
from typing import Any, TypeVar

from diweave._internal.argument_pool import ArgumentBufferPool
from diweave._internal.constructor_injector import ConstructorInjector
from diweave._internal.member_injector import FieldInjector, PropertyInjector
from diweave._internal.metadata import InjectionMetadata
from diweave._internal.metadata_cache import InjectionMetadataCache
from diweave._internal.method_injector import MethodInjector
from diweave._internal.parameter_resolver import ParameterResolver
from diweave._internal.resolver_protocol import InjectParameter, ObjectResolver
from diweave._internal.type_checks import is_abstract_class, is_runtime_class
from diweave.exceptions import (
    DIWeaveCannotInstantiateAbstractError,
    DIWeaveInvalidArgumentError,
    DIWeaveNoSuitableConstructorError,
)

T = TypeVar("T")


class Injector:
    """Create objects and populate their injection points.

    Injection runs in a fixed order: constructor, fields, properties, then
    ``@inject`` methods sorted by order. Every step resolves dependencies
    through the same ``ParameterResolver``.

    The metadata cache and argument pool are owned by the injector's creator
    and may be shared between injectors.
    """

    def __init__(
        self,
        *,
        metadata_cache: InjectionMetadataCache | None = None,
        argument_pool: ArgumentBufferPool | None = None,
        parameter_resolver: ParameterResolver | None = None,
    ) -> None:
        """Initialize an injector.

        Args:
            metadata_cache: Cache of per-type injection metadata. A private
                cache is created when omitted.
            argument_pool: Pool of argument buffers used by constructor and
                method calls. A private pool is created when omitted.
            parameter_resolver: Resolution strategy shared by every injector.

        """
        if metadata_cache is None:
            metadata_cache = InjectionMetadataCache()
        if argument_pool is None:
            argument_pool = ArgumentBufferPool()
        if parameter_resolver is None:
            parameter_resolver = ParameterResolver()
        self.metadata_cache = metadata_cache
        self.argument_pool = argument_pool
        resolver = parameter_resolver
        self._constructor_injector = ConstructorInjector(
            argument_pool=self.argument_pool,
            parameter_resolver=resolver,
        )
        self._field_injector = FieldInjector(parameter_resolver=resolver)
        self._property_injector = PropertyInjector(parameter_resolver=resolver)
        self._method_injector = MethodInjector(
            argument_pool=self.argument_pool,
            parameter_resolver=resolver,
        )

    def create_instance(
        self,
        target_type: type[T],
        resolver: ObjectResolver,
        parameters: Sequence[InjectParameter] | None = None,
    ) -> T:
        """Construct target_type without populating its members.

        Args:
            target_type: Class to instantiate.
            resolver: Resolver providing constructor dependencies.
            parameters: Explicit overrides for this call.

        Raises:
            DIWeaveCannotInstantiateAbstractError: If target_type is abstract and
                has no ``@inject`` constructor.
            DIWeaveNoSuitableConstructorError: If no constructor can be selected.

        """
        self._check_type(target_type)
        if resolver is None:
            msg = "resolver must not be None."
            raise DIWeaveInvalidArgumentError(msg)

        metadata = self.metadata_cache.get_or_create(target_type)
        if metadata.constructor is None:
            if is_abstract_class(target_type):
                msg = f"Cannot instantiate abstract type '{target_type.__qualname__}'."
                raise DIWeaveCannotInstantiateAbstractError(msg, dependency=target_type)
            msg = f"Type '{target_type.__qualname__}' has no constructor available for injection."
            raise DIWeaveNoSuitableConstructorError(msg, dependency=target_type)

        return self._constructor_injector.create_instance(
            metadata.constructor,
            resolver,
            parameters,
        )

    def inject_all(
        self,
        instance: Any,
        target_type: type[Any],
        resolver: ObjectResolver,
        parameters: Sequence[InjectParameter] | None = None,
    ) -> None:
        """Populate fields, properties and methods declared by target_type.

        Args:
            instance: Object to populate.
            target_type: Class whose metadata drives the injection.
            resolver: Resolver providing dependencies.
            parameters: Explicit overrides for this call.

        """
        if instance is None:
            msg = "instance must not be None."
            raise DIWeaveInvalidArgumentError(msg)
        if resolver is None:
            msg = "resolver must not be None."
            raise DIWeaveInvalidArgumentError(msg)
        self._check_type(target_type)

        metadata = self.metadata_cache.get_or_create(target_type)
        self._inject_members(instance, metadata, resolver, parameters)

    def inject(
        self,
        instance: Any,
        resolver: ObjectResolver,
        parameters: Sequence[InjectParameter] | None = None,
    ) -> None:
        """Populate an existing object using the metadata of its runtime type."""
        if instance is None:
            msg = "instance must not be None."
            raise DIWeaveInvalidArgumentError(msg)
        self.inject_all(instance, type(instance), resolver, parameters)

    def instantiate(
        self,
        target_type: type[T],
        resolver: ObjectResolver,
        parameters: Sequence[InjectParameter] | None = None,
    ) -> T:
        """Construct target_type and populate every injection point."""
        instance = self.create_instance(target_type, resolver, parameters)
        metadata = self.metadata_cache.get_or_create(target_type)
        self._inject_members(instance, metadata, resolver, parameters)
        return instance

    def get_injection_metadata(self, target_type: type[Any]) -> InjectionMetadata:
        """Return the cached metadata of target_type, building it if needed."""
        self._check_type(target_type)
        return self.metadata_cache.get_or_create(target_type)

    def requires_injection(self, target_type: type[Any]) -> bool:
        """Return true when target_type declares any injection point."""
        return self.get_injection_metadata(target_type).has_injection_points

    def clear_cache(self) -> None:
        """Drop cached metadata and idle argument buffers."""
        self.metadata_cache.clear()
        self.argument_pool.clear()

    def _inject_members(
        self,
        instance: Any,
        metadata: InjectionMetadata,
        resolver: ObjectResolver,
        parameters: Sequence[InjectParameter] | None,
    ) -> None:
        if metadata.fields:
            self._field_injector.inject(instance, metadata.fields, resolver, parameters)
        if metadata.properties:
            self._property_injector.inject(instance, metadata.properties, resolver, parameters)
        if metadata.methods:
            self._method_injector.inject(instance, metadata.methods, resolver, parameters)

    def _check_type(self, target_type: Any) -> None:
        if not is_runtime_class(target_type):
            msg = f"Expected a class, got {target_type!r}."
            raise DIWeaveInvalidArgumentError(msg)
