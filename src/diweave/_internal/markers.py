from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Annotated, Any, NamedTuple, TypeVar, Union, get_args, get_origin, overload

T = TypeVar("T")
F = TypeVar("F")
_ANNOTATED_MARKER_MIN_ARGS = 2
INJECT_ATTRIBUTE = "__diweave_inject__"
CONSTRUCTOR_ATTRIBUTE = "__diweave_constructor__"


class Key(NamedTuple):
    """Select a keyed registration for one dependency.

    Attach ``Key`` metadata to ``typing.Annotated`` so the injector resolves the
    dependency with ``resolver.resolve_keyed(dependency, key)`` instead of an
    ordinary lookup.

    Examples:
        .. code-block:: python

            from typing import Annotated, TypeAlias


            class Database: ...


            ReplicaDb: TypeAlias = Annotated[Database, Key("replica")]

    """

    value: str


class InjectMarker:
    """Marker that flags a class-body annotation as an injected field."""


class MaybeMarker:
    """Marker that indicates dependency is optional and may resolve to an empty value."""


class FromParentMarker:
    """Marker that indicates dependency must be resolved from the parent scope."""


@dataclass(frozen=True, slots=True)
class InjectOptions:
    """Options recorded by ``@inject`` on constructors, methods and property accessors."""

    order: int = 0


@dataclass(frozen=True, slots=True)
class DependencyAnnotation:
    """Injection facts extracted from one annotation."""

    dependency: Any
    is_inject: bool = False
    is_optional: bool = False
    key: str | None = None
    from_parent: bool = False


if TYPE_CHECKING:
    Inject = Union[T, T]  # noqa: UP007,PYI016
    """Mark a class-body annotation as an injected field.

    At runtime ``Inject[T]`` becomes ``Annotated[T, InjectMarker()]``.

    Examples:
        .. code-block:: python

            class Handler:
                repository: Inject[Repository]
    """

    Maybe = Union[T, None]  # noqa: UP007
    """Mark a dependency as optional.

    Unresolved optional dependencies fall back to the parameter default, or to
    the empty value of the declared type (``0`` for numbers, ``None`` otherwise).
    """

    FromParent = Union[T, T]  # noqa: UP007,PYI016
    """Mark a dependency to resolve from the parent scope of the current resolver."""

else:

    class Inject:
        """Mark a class-body annotation as an injected field.

        At runtime ``Inject[T]`` resolves to ``Annotated[T, InjectMarker()]``.

        Examples:
            .. code-block:: python

                class Handler:
                    repository: Inject[Repository]
                    cache: Inject[Maybe[Cache]]

        """

        def __class_getitem__(cls, item: T) -> Annotated[T, InjectMarker]:
            return _append_marker(item, InjectMarker())

    class Maybe:
        """Mark a dependency as optional.

        At runtime ``Maybe[T]`` resolves to ``Annotated[T, MaybeMarker()]``.
        """

        def __class_getitem__(cls, item: T) -> Annotated[T, MaybeMarker]:
            return _append_marker(item, MaybeMarker())

    class FromParent:
        """Mark a dependency to resolve from the parent scope.

        At runtime ``FromParent[T]`` resolves to ``Annotated[T, FromParentMarker()]``.
        """

        def __class_getitem__(cls, item: T) -> Annotated[T, FromParentMarker]:
            return _append_marker(item, FromParentMarker())


@overload
def inject(target: F, /) -> F: ...


@overload
def inject(*, order: int = 0) -> Callable[[F], F]: ...


def inject(target: Any = None, /, *, order: int = 0) -> Any:
    """Mark a constructor, method or property accessor as an injection point.

    Supports both ``@inject`` and ``@inject(order=...)``. Injection methods run
    in ascending ``order``; methods sharing an order run in declaration order.

    Args:
        target: Decorated object when used without parentheses.
        order: Position of an injection method relative to the others.

    """
    options = InjectOptions(order=order)

    def decorator(obj: F) -> F:
        _set_marker_attribute(obj, INJECT_ATTRIBUTE, options)
        return obj

    if target is None:
        return decorator
    return decorator(target)


def constructor(target: F) -> F:
    """Register a classmethod or staticmethod as an alternate constructor.

    Alternate constructors compete with ``__init__`` during constructor
    selection. Names starting with an underscore are only selected when they
    are also marked with ``@inject``.
    """
    _set_marker_attribute(target, CONSTRUCTOR_ATTRIBUTE, True)
    return target


def get_inject_options(obj: Any) -> InjectOptions | None:
    """Return ``@inject`` options recorded on obj or its wrapped function."""
    function = _unwrap_marker_target(obj)
    if function is None:
        return None
    options = getattr(function, INJECT_ATTRIBUTE, None)
    if isinstance(options, InjectOptions):
        return options
    return None


def is_alternate_constructor(obj: Any) -> bool:
    """Return true when obj was registered with ``@constructor``."""
    function = _unwrap_marker_target(obj)
    return function is not None and getattr(function, CONSTRUCTOR_ATTRIBUTE, False) is True


def parse_dependency_annotation(annotation: Any) -> DependencyAnnotation:
    """Split an annotation into the dependency key and its injection markers.

    Non-marker ``Annotated`` metadata stays on the dependency key so resolvers
    that key registrations by annotated types keep working.
    """
    if get_origin(annotation) is not Annotated:
        return DependencyAnnotation(dependency=annotation)
    annotation_args = get_args(annotation)
    if len(annotation_args) < _ANNOTATED_MARKER_MIN_ARGS:
        return DependencyAnnotation(dependency=annotation)  # pragma: no cover

    inner = annotation_args[0]
    is_inject = False
    is_optional = False
    from_parent = False
    key: str | None = None
    remaining: list[Any] = []
    for item in annotation_args[1:]:
        if isinstance(item, InjectMarker):
            is_inject = True
        elif isinstance(item, MaybeMarker):
            is_optional = True
        elif isinstance(item, FromParentMarker):
            from_parent = True
        elif isinstance(item, Key):
            key = item.value
        else:
            remaining.append(item)

    dependency = _build_annotated((inner, *remaining)) if remaining else inner
    return DependencyAnnotation(
        dependency=dependency,
        is_inject=is_inject,
        is_optional=is_optional,
        key=key,
        from_parent=from_parent,
    )


def _unwrap_marker_target(obj: Any) -> Any:
    if isinstance(obj, (classmethod, staticmethod)):
        return obj.__func__
    if isinstance(obj, property):
        return obj.fget if obj.fget is not None else obj.fset
    return obj


def _set_marker_attribute(obj: Any, name: str, value: object) -> None:
    function = _unwrap_marker_target(obj)
    if function is None:
        msg = f"Cannot mark {obj!r}: property has neither a getter nor a setter."
        raise TypeError(msg)
    setattr(function, name, value)


def _append_marker(item: Any, marker: object) -> Any:
    if get_origin(item) is Annotated:
        args = get_args(item)
        inner = args[0]
        metadata = args[1:]
        return _build_annotated((inner, *metadata, marker))
    return _build_annotated((item, marker))


def _build_annotated(params: tuple[object, ...]) -> Any:
    """Return Annotated[...] with a pre-built params tuple (Py 3.10+ compatible)."""
    try:
        return Annotated.__class_getitem__(params)  # type: ignore[attr-defined]
    except AttributeError:
        return Annotated.__getitem__(params)  # type: ignore[attr-defined]
