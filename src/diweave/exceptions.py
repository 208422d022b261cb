from __future__ import annotations

from typing import Any


class DIWeaveError(Exception):
    """Represent a base class for all DIWeave-specific failures.

    Catch this type when you want to handle any DIWeave error path without
    matching each concrete exception class individually.
    """


class DIWeaveInvalidArgumentError(DIWeaveError):
    """Signal a missing or invalid argument passed to an injection entry point.

    Raised by the injectors when ``instance`` or ``resolver`` is ``None`` while
    there is work to do, and by the argument pool when a buffer is returned
    that is not on loan.
    """


class DIWeaveInvalidRegistrationError(DIWeaveError):
    """Signal invalid registration on a ``Container``.

    Raised by ``register_concrete`` when the implementation is not a class,
    by ``register_factory`` when the factory is not callable, and by any
    registration call on a closed container.
    """


class DIWeaveResolutionError(DIWeaveError):
    """Represent a failure to produce a dependency value.

    Injectors let errors of this kind propagate unchanged. Any other error
    raised while invoking a constructor, method or member write is wrapped in
    ``DIWeaveInvocationError``, which is itself a resolution error.

    Attributes:
        dependency: Declared dependency type that failed, when known.
        key: Key used for keyed resolution, when one was involved.

    """

    def __init__(self, message: str, *, dependency: Any = None, key: str | None = None) -> None:
        super().__init__(message)
        self.dependency = dependency
        self.key = key


class DIWeaveDependencyNotRegisteredError(DIWeaveResolutionError):
    """Signal that a dependency has no registration and is not optional.

    Raised by ordinary and keyed resolution when nothing matches and the
    parameter, field or property has neither a ``Maybe`` marker nor a default.

    Typical fixes include registering the dependency, marking it ``Maybe[...]``,
    giving the parameter a default value, or passing an explicit
    ``NamedParameter``/``TypedParameter`` override.
    """


class DIWeaveNoParentContainerError(DIWeaveResolutionError):
    """Signal a ``FromParent[...]`` dependency requested from a root resolver.

    Typical fixes include resolving from a scope created with
    ``Container.create_scope`` or marking the dependency ``Maybe[...]``.
    """


class DIWeaveInvocationError(DIWeaveResolutionError):
    """Signal that a constructor, injection method or member write raised.

    The original exception is available as ``__cause__``. ``target`` names the
    type, method or member being invoked.
    """

    def __init__(self, message: str, *, target: str, dependency: Any = None) -> None:
        super().__init__(message, dependency=dependency)
        self.target = target


class DIWeaveCannotInstantiateAbstractError(DIWeaveResolutionError):
    """Signal an attempt to instantiate an abstract class or protocol."""


class DIWeaveNoSuitableConstructorError(DIWeaveResolutionError):
    """Signal that a type exposes no constructor the injector may call.

    Typical fix is marking one constructor with ``@inject``.
    """


class DIWeaveCircularDependencyError(DIWeaveResolutionError):
    """Signal a concrete registration that depends on itself, directly or not.

    Attributes:
        chain: Dependency keys in resolution order, ending with the repeated key.

    """

    def __init__(self, message: str, *, dependency: Any, chain: tuple[Any, ...]) -> None:
        super().__init__(message, dependency=dependency)
        self.chain = chain


class DIWeaveAnnotationInferenceError(DIWeaveResolutionError):
    """Signal that an injection point's annotation cannot be evaluated.

    Raised while building metadata when a string annotation on an ``Inject``
    field, a constructor or method parameter, or an ``@inject`` property
    accessor names something the defining module cannot see at runtime, such
    as a name imported only under ``TYPE_CHECKING``. ``dependency`` is the
    type or callable being introspected and the evaluation error is
    ``__cause__``.

    Typical fix is importing the annotated type at runtime.
    """
