from diweave.container import Container
from diweave.exceptions import (
    DIWeaveAnnotationInferenceError,
    DIWeaveCannotInstantiateAbstractError,
    DIWeaveCircularDependencyError,
    DIWeaveDependencyNotRegisteredError,
    DIWeaveError,
    DIWeaveInvalidArgumentError,
    DIWeaveInvalidRegistrationError,
    DIWeaveInvocationError,
    DIWeaveNoParentContainerError,
    DIWeaveNoSuitableConstructorError,
    DIWeaveResolutionError,
)
from diweave.injector import InjectParameter, Injector, ObjectResolver
from diweave.markers import FromParent, Inject, Key, Maybe, constructor, inject
from diweave.metadata import ArgumentBufferPool, InjectionMetadata, InjectionMetadataCache
from diweave.parameters import NamedParameter, TypedParameter

__all__ = [
    "ArgumentBufferPool",
    "Container",
    "DIWeaveAnnotationInferenceError",
    "DIWeaveCannotInstantiateAbstractError",
    "DIWeaveCircularDependencyError",
    "DIWeaveDependencyNotRegisteredError",
    "DIWeaveError",
    "DIWeaveInvalidArgumentError",
    "DIWeaveInvalidRegistrationError",
    "DIWeaveInvocationError",
    "DIWeaveNoParentContainerError",
    "DIWeaveNoSuitableConstructorError",
    "DIWeaveResolutionError",
    "FromParent",
    "Inject",
    "InjectParameter",
    "InjectionMetadata",
    "InjectionMetadataCache",
    "Injector",
    "Key",
    "Maybe",
    "NamedParameter",
    "ObjectResolver",
    "TypedParameter",
    "constructor",
    "inject",
]
