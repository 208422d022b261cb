from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from types import TracebackType
from typing import TYPE_CHECKING, Any, TypeVar, overload

from diweave._internal.injector import Injector
from diweave._internal.resolution_stack import resolution_guard
from diweave._internal.resolver_protocol import InjectParameter, ObjectResolver
from diweave._internal.type_checks import describe_dependency, is_runtime_class
from diweave.exceptions import (
    DIWeaveDependencyNotRegisteredError,
    DIWeaveInvalidRegistrationError,
)

if TYPE_CHECKING:
    from typing_extensions import Self

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _Registration:
    dependency: Any
    key: str | None
    build: Callable[[Container], Any]
    is_instance: bool = False


class Container:
    """Minimal resolver that builds registered dependencies with an ``Injector``.

    Every registration is transient: concrete types and factories run on each
    resolve, instances are returned as registered. Lookups that miss in a
    scope fall back to its parent. The root container owns the injector and
    its metadata cache and clears them on ``close``; scopes share them.

    Examples:
        .. code-block:: python

            container = Container()
            container.register_concrete(Repository, SqlRepository)
            container.register_instance(Settings, Settings(), key="primary")

            handler = container.instantiate(Handler)

    """

    def __init__(
        self,
        *,
        parent: Container | None = None,
        injector: Injector | None = None,
    ) -> None:
        """Initialize a container.

        Args:
            parent: Enclosing container. Use ``create_scope`` rather than
                passing this directly.
            injector: Injector used to build concrete registrations and to
                serve ``instantiate``/``inject``. Defaults to the parent's
                injector, or a new one for a root container.

        """
        self._parent = parent
        if injector is None:
            injector = parent.injector if parent is not None else Injector()
            self._owns_injector = parent is None
        else:
            self._owns_injector = False
        self._injector = injector
        self._registrations: dict[tuple[Any, str | None], _Registration] = {}
        self._lock = threading.Lock()
        self._closed = False

    @property
    def parent(self) -> Container | None:
        """Enclosing container, or ``None`` for a root container."""
        return self._parent

    @property
    def injector(self) -> Injector:
        """Injector shared by this container and its scopes."""
        return self._injector

    def register_instance(self, dependency: Any, instance: Any, *, key: str | None = None) -> None:
        """Register an already built object.

        Args:
            dependency: Dependency key the instance is served under.
            instance: Object returned on every resolve.
            key: Optional discriminator for keyed resolution.

        """
        self._add(
            _Registration(
                dependency=dependency,
                key=key,
                build=lambda _container: instance,
                is_instance=True,
            ),
        )

    def register_factory(
        self,
        dependency: Any,
        factory: Callable[[ObjectResolver], Any],
        *,
        key: str | None = None,
    ) -> None:
        """Register a callable that receives the requesting container.

        Args:
            dependency: Dependency key the factory result is served under.
            factory: Callable invoked on every resolve.
            key: Optional discriminator for keyed resolution.

        """
        if not callable(factory):
            msg = f"Factory for {dependency!r} must be callable, got {factory!r}."
            raise DIWeaveInvalidRegistrationError(msg)
        self._add(_Registration(dependency=dependency, key=key, build=factory))

    def register_concrete(
        self,
        dependency: Any,
        concrete_type: type[Any] | None = None,
        *,
        key: str | None = None,
    ) -> None:
        """Register a class built through constructor and member injection.

        Args:
            dependency: Dependency key, usually a base class or protocol.
            concrete_type: Class to instantiate. Defaults to dependency.
            key: Optional discriminator for keyed resolution.

        """
        implementation = dependency if concrete_type is None else concrete_type
        if not is_runtime_class(implementation):
            msg = f"Concrete registration for {dependency!r} requires a class, got {implementation!r}."
            raise DIWeaveInvalidRegistrationError(msg)

        def build(container: Container) -> Any:
            return container.injector.instantiate(implementation, container)

        self._add(_Registration(dependency=dependency, key=key, build=build))

    def is_registered(self, dependency: Any, *, key: str | None = None) -> bool:
        """Return true when this container or a parent serves dependency."""
        return self._find(dependency, key) is not None

    @overload
    def resolve(self, dependency: type[T]) -> T: ...

    @overload
    def resolve(self, dependency: Any) -> Any: ...

    def resolve(self, dependency: Any) -> Any:
        """Resolve the given dependency and return its instance.

        Raises:
            DIWeaveDependencyNotRegisteredError: If nothing serves dependency.

        """
        registration = self._find(dependency, None)
        if registration is None:
            msg = f"Dependency '{describe_dependency(dependency)}' is not registered."
            raise DIWeaveDependencyNotRegisteredError(msg, dependency=dependency)
        return self._build(registration)

    def try_resolve(self, dependency: Any) -> Any | None:
        """Resolve the given dependency or return ``None`` when it is not registered."""
        registration = self._find(dependency, None)
        if registration is None:
            return None
        return self._build(registration)

    def resolve_keyed(self, dependency: Any, key: str) -> Any:
        """Resolve the registration of dependency stored under key.

        Raises:
            DIWeaveDependencyNotRegisteredError: If nothing serves dependency under key.

        """
        registration = self._find(dependency, key)
        if registration is None:
            msg = (
                f"Dependency '{describe_dependency(dependency)}' with key '{key}' "
                "is not registered."
            )
            raise DIWeaveDependencyNotRegisteredError(msg, dependency=dependency, key=key)
        return self._build(registration)

    def try_resolve_keyed(self, dependency: Any, key: str) -> Any | None:
        """Resolve the keyed registration or return ``None`` when it is missing."""
        registration = self._find(dependency, key)
        if registration is None:
            return None
        return self._build(registration)

    def instantiate(
        self,
        target_type: type[T],
        parameters: Sequence[InjectParameter] | None = None,
    ) -> T:
        """Construct target_type and populate its injection points from this container."""
        return self._injector.instantiate(target_type, self, parameters)

    def inject(self, instance: Any, parameters: Sequence[InjectParameter] | None = None) -> None:
        """Populate the fields, properties and methods of an existing object."""
        self._injector.inject(instance, self, parameters)

    def create_scope(self) -> Container:
        """Return a child container whose misses fall back to this one."""
        return Container(parent=self, injector=self._injector)

    def close(self) -> None:
        """Drop registrations; the root container also clears the shared injector caches."""
        if self._closed:
            return
        self._closed = True
        with self._lock:
            self._registrations.clear()
        if self._owns_injector:
            self._injector.clear_cache()
        logger.debug("Closed container %#x (root=%s)", id(self), self._parent is None)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def _add(self, registration: _Registration) -> None:
        if self._closed:
            msg = "Cannot register dependencies on a closed container."
            raise DIWeaveInvalidRegistrationError(msg)
        with self._lock:
            self._registrations[(registration.dependency, registration.key)] = registration

    def _find(self, dependency: Any, key: str | None) -> _Registration | None:
        container: Container | None = self
        while container is not None:
            registration = container._registrations.get((dependency, key))
            if registration is not None:
                return registration
            container = container._parent
        return None

    def _build(self, registration: _Registration) -> Any:
        if registration.is_instance:
            return registration.build(self)
        with resolution_guard(registration.dependency, registration.key):
            return registration.build(self)
