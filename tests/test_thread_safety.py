"""Tests for thread safety of the metadata cache, buffer pool and Container."""

import threading
from concurrent.futures import ThreadPoolExecutor

from diweave import (
    ArgumentBufferPool,
    Container,
    DIWeaveCircularDependencyError,
    Inject,
    InjectionMetadataCache,
    Injector,
)


class ServiceA:
    pass


class ServiceB:
    service_a: Inject[ServiceA]

    def __init__(self, a: ServiceA) -> None:
        self.a = a


class Loop:
    def __init__(self, other: "LoopPartner") -> None:
        self.other = other


class LoopPartner:
    def __init__(self, loop: Loop) -> None:
        self.loop = loop


class TestConcurrentResolution:
    def test_concurrent_transient_resolution_different_instances(self) -> None:
        """Concurrent resolution builds one instance per call."""
        container = Container()
        container.register_concrete(ServiceA)
        container.register_concrete(ServiceB)
        workers = 10
        barrier = threading.Barrier(workers)

        def resolve_service(_: int) -> ServiceB:
            barrier.wait()
            return container.resolve(ServiceB)

        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(resolve_service, range(workers)))

        assert len({id(result) for result in results}) == workers
        assert all(isinstance(result.service_a, ServiceA) for result in results)
        assert container.injector.metadata_cache.build_count == 2

    def test_concurrent_metadata_requests_share_entry(self) -> None:
        """Concurrent first requests share one metadata entry."""
        cache = InjectionMetadataCache()
        workers = 16
        barrier = threading.Barrier(workers)

        def request(_: int) -> object:
            barrier.wait()
            return cache.get_or_create(ServiceB)

        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(request, range(workers)))

        assert all(result is results[0] for result in results)
        assert cache.build_count == 1


class TestConcurrentPool:
    def test_shared_pool_balances_loans(self) -> None:
        """Every buffer rented by a worker comes back to the shared pool."""
        pool = ArgumentBufferPool()
        injector = Injector(argument_pool=pool)
        container = Container(injector=injector)
        container.register_concrete(ServiceA)

        def build(_: int) -> ServiceB:
            return container.instantiate(ServiceB)

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(build, range(200)))

        assert len(results) == 200
        assert pool.rented_count == 0


class TestCircularDetectionPerThread:
    def test_cycle_detection_is_isolated_per_thread(self) -> None:
        """A cycle in one thread does not leak resolution state into another."""
        container = Container()
        container.register_concrete(Loop)
        container.register_concrete(LoopPartner)
        container.register_concrete(ServiceA)
        errors: list[BaseException] = []
        resolved: list[ServiceA] = []

        def cycle() -> None:
            try:
                container.resolve(Loop)
            except DIWeaveCircularDependencyError as error:
                errors.append(error)

        def plain() -> None:
            resolved.append(container.resolve(ServiceA))

        threads = [threading.Thread(target=cycle if index % 2 else plain) for index in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(errors) == 5
        assert len(resolved) == 5
