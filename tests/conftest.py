"""Shared pytest fixtures for diweave tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from diweave._internal.argument_pool import ArgumentBufferPool
from diweave._internal.metadata_builder import InjectionMetadataBuilder
from diweave._internal.metadata_cache import InjectionMetadataCache
from diweave._internal.parameter_resolver import ParameterResolver
from diweave.container import Container
from diweave.exceptions import DIWeaveDependencyNotRegisteredError
from diweave.injector import Injector


class StubResolver:
    """Dictionary-backed resolver recording every call it receives."""

    def __init__(
        self,
        services: dict[Any, Any] | None = None,
        keyed: dict[tuple[Any, str], Any] | None = None,
        parent: StubResolver | None = None,
    ) -> None:
        self.services = dict(services or {})
        self.keyed = dict(keyed or {})
        self._parent = parent
        self.calls: list[tuple[Any, ...]] = []

    @property
    def parent(self) -> StubResolver | None:
        return self._parent

    def resolve(self, dependency: Any) -> Any:
        self.calls.append(("resolve", dependency))
        if dependency not in self.services:
            msg = f"{dependency!r} is not registered"
            raise DIWeaveDependencyNotRegisteredError(msg, dependency=dependency)
        return self.services[dependency]

    def try_resolve(self, dependency: Any) -> Any | None:
        self.calls.append(("try_resolve", dependency))
        return self.services.get(dependency)

    def resolve_keyed(self, dependency: Any, key: str) -> Any:
        self.calls.append(("resolve_keyed", dependency, key))
        if (dependency, key) not in self.keyed:
            msg = f"{dependency!r} with key {key!r} is not registered"
            raise DIWeaveDependencyNotRegisteredError(msg, dependency=dependency, key=key)
        return self.keyed[(dependency, key)]


@pytest.fixture()
def make_resolver() -> Callable[..., StubResolver]:
    """Factory for dictionary-backed resolvers."""
    return StubResolver


@pytest.fixture()
def resolver() -> StubResolver:
    """Empty dictionary-backed resolver."""
    return StubResolver()


@pytest.fixture()
def builder() -> InjectionMetadataBuilder:
    """Metadata builder without caching."""
    return InjectionMetadataBuilder()


@pytest.fixture()
def metadata_cache() -> InjectionMetadataCache:
    """Fresh metadata cache."""
    return InjectionMetadataCache()


@pytest.fixture()
def argument_pool() -> ArgumentBufferPool:
    """Fresh argument buffer pool."""
    return ArgumentBufferPool()


@pytest.fixture()
def parameter_resolver() -> ParameterResolver:
    """Shared parameter resolution strategy."""
    return ParameterResolver()


@pytest.fixture()
def injector(metadata_cache: InjectionMetadataCache, argument_pool: ArgumentBufferPool) -> Injector:
    """Injector wired to the fresh cache and pool fixtures."""
    return Injector(metadata_cache=metadata_cache, argument_pool=argument_pool)


@pytest.fixture()
def container() -> Container:
    """Root container with its own injector."""
    return Container()
