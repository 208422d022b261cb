"""End-to-end injection scenarios through the Injector facade."""

import abc
from typing import Annotated, Any, Optional

import pytest

from diweave import (
    Container,
    DIWeaveCannotInstantiateAbstractError,
    DIWeaveNoSuitableConstructorError,
    Inject,
    InjectionMetadataCache,
    Injector,
    Key,
    Maybe,
    constructor,
    inject,
)
from diweave.metadata import InjectionMetadataBuilder


class Clock:
    pass


class Mailer:
    pass


class Storage:
    pass


class Report:
    def __init__(self, clock: Clock, retries: Maybe[int]) -> None:
        self.clock = clock
        self.retries = retries
        self._mailer: Optional[Mailer] = None
        self.storage: Optional[Storage] = None
        self.events: list[str] = []

    @property
    def mailer(self) -> Optional[Mailer]:
        return self._mailer

    @mailer.setter
    @inject
    def mailer(self, value: Maybe[Mailer]) -> None:
        self.events.append("mailer")
        self._mailer = value

    @inject
    def attach(self, storage: Annotated[Storage, Key("k")]) -> None:
        self.events.append("attach")
        self.storage = storage


class Pipeline:
    clock: Inject[Clock]
    retries: Inject[Maybe[int]]

    def __init__(self) -> None:
        self.events: list[str] = []

    @property
    def mailer(self) -> Mailer:
        return self._mailer

    @mailer.setter
    @inject
    def mailer(self, value: Mailer) -> None:
        self.events.append(f"property:{type(getattr(self, 'clock', None)).__name__}")
        self._mailer = value

    @inject(order=10)
    def finish(self) -> None:
        self.events.append("finish")

    @inject
    def start(self, storage: Annotated[Storage, Key("k")]) -> None:
        self.events.append("start")


class Job:
    def __init__(self, name: str) -> None:
        self.name = name
        self.source = "init"

    @constructor
    @inject
    @classmethod
    def scheduled(cls, clock: Clock) -> "Job":
        job = cls("scheduled")
        job.source = "scheduled"
        return job


class Plugin(abc.ABC):
    @abc.abstractmethod
    def run(self) -> None: ...


class BuiltinPlugin(Plugin):
    def __init__(self, clock: Clock) -> None:
        self.clock = clock

    def run(self) -> None: ...


class HiddenPluginFactory(Plugin):
    @constructor
    @inject
    @classmethod
    def _from_clock(cls, clock: Clock) -> Any:
        return BuiltinPlugin(clock)


@pytest.fixture()
def populated(container: Container) -> Container:
    container.register_instance(Clock, Clock())
    container.register_instance(Storage, Storage(), key="k")
    return container


class TestCreateThenInject:
    def test_constructor_then_members(self, injector: Injector, populated: Container) -> None:
        clock = populated.resolve(Clock)
        storage = populated.resolve_keyed(Storage, "k")

        report = injector.create_instance(Report, populated)

        assert report.clock is clock
        assert report.retries == 0
        assert report.storage is None
        assert report.events == []

        injector.inject_all(report, Report, populated)

        assert report.mailer is None
        assert report.storage is storage
        assert report.events == ["attach"]

    def test_instantiate_does_both_steps(self, injector: Injector, populated: Container) -> None:
        populated.register_instance(Mailer, Mailer())

        report = injector.instantiate(Report, populated)

        assert report.mailer is populated.resolve(Mailer)
        assert report.events == ["mailer", "attach"]

    def test_requires_injection(self, injector: Injector) -> None:
        assert injector.requires_injection(Report) is True
        assert injector.get_injection_metadata(Report) is injector.get_injection_metadata(Report)


class TestInjectionOrder:
    def test_fields_properties_then_methods_by_order(self, injector: Injector, populated: Container) -> None:
        populated.register_instance(Mailer, Mailer())
        pipeline = Pipeline()

        injector.inject(pipeline, populated)

        assert pipeline.clock is populated.resolve(Clock)
        assert not hasattr(pipeline, "retries")
        assert pipeline.events == ["property:Clock", "start", "finish"]

    def test_optional_value_field_is_written_when_registered(
        self,
        injector: Injector,
        populated: Container,
    ) -> None:
        populated.register_instance(Mailer, Mailer())
        populated.register_instance(int, 3)
        pipeline = Pipeline()

        injector.inject(pipeline, populated)

        assert pipeline.retries == 3


class TestConstructorSelection:
    def test_explicit_alternate_constructor_is_used(self, injector: Injector, populated: Container) -> None:
        job = injector.instantiate(Job, populated)

        assert job.source == "scheduled"
        assert job.name == "scheduled"

    def test_abstract_type_without_constructor(self, injector: Injector, populated: Container) -> None:
        with pytest.raises(DIWeaveCannotInstantiateAbstractError):
            injector.create_instance(Plugin, populated)

    def test_explicit_private_constructor_on_abstract_type(
        self,
        injector: Injector,
        populated: Container,
    ) -> None:
        plugin = injector.create_instance(HiddenPluginFactory, populated)

        assert isinstance(plugin, BuiltinPlugin)

    def test_no_suitable_constructor(self, populated: Container) -> None:
        class _MembersOnlyBuilder(InjectionMetadataBuilder):
            def build_constructor(self, target_type: type[Any]) -> None:
                return None

        injector = Injector(metadata_cache=InjectionMetadataCache(_MembersOnlyBuilder()))

        with pytest.raises(DIWeaveNoSuitableConstructorError) as exc_info:
            injector.create_instance(Clock, populated)

        assert exc_info.value.dependency is Clock

    def test_clear_cache_drops_metadata(self, injector: Injector) -> None:
        injector.get_injection_metadata(Report)

        injector.clear_cache()

        assert injector.metadata_cache.count == 0
