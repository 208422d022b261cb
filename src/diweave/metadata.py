from diweave._internal.argument_pool import ArgumentBufferPool
from diweave._internal.metadata import (
    ConstructorDescriptor,
    InjectionMetadata,
    MemberDescriptor,
    MemberKind,
    MethodDescriptor,
    ParameterDescriptor,
)
from diweave._internal.metadata_builder import InjectionMetadataBuilder
from diweave._internal.metadata_cache import InjectionMetadataCache

__all__ = [
    "ArgumentBufferPool",
    "ConstructorDescriptor",
    "InjectionMetadata",
    "InjectionMetadataBuilder",
    "InjectionMetadataCache",
    "MemberDescriptor",
    "MemberKind",
    "MethodDescriptor",
    "ParameterDescriptor",
]
