from __future__ import annotations

from typing import Annotated, get_args, get_origin

import pytest

from diweave._internal.markers import (
    FromParent,
    FromParentMarker,
    Inject,
    InjectMarker,
    InjectOptions,
    Key,
    Maybe,
    MaybeMarker,
    constructor,
    get_inject_options,
    is_alternate_constructor,
    inject,
    parse_dependency_annotation,
)


class _Database:
    pass


class _Settings:
    pass


def test_inject_builds_annotated_with_marker() -> None:
    annotation = Inject[_Database]

    assert get_origin(annotation) is Annotated
    args = get_args(annotation)
    assert args[0] is _Database
    assert any(isinstance(item, InjectMarker) for item in args[1:])


def test_nested_markers_flatten_into_one_annotated() -> None:
    annotation = Inject[Maybe[FromParent[Annotated[_Database, Key("replica")]]]]

    args = get_args(annotation)
    assert args[0] is _Database
    metadata = args[1:]
    assert any(isinstance(item, InjectMarker) for item in metadata)
    assert any(isinstance(item, MaybeMarker) for item in metadata)
    assert any(isinstance(item, FromParentMarker) for item in metadata)
    assert Key("replica") in metadata


def test_parse_plain_annotation_has_no_markers() -> None:
    parsed = parse_dependency_annotation(_Database)

    assert parsed.dependency is _Database
    assert parsed.is_inject is False
    assert parsed.is_optional is False
    assert parsed.key is None
    assert parsed.from_parent is False


def test_parse_extracts_every_marker() -> None:
    parsed = parse_dependency_annotation(
        Inject[Maybe[FromParent[Annotated[_Database, Key("replica")]]]],
    )

    assert parsed.dependency is _Database
    assert parsed.is_inject is True
    assert parsed.is_optional is True
    assert parsed.from_parent is True
    assert parsed.key == "replica"


def test_parse_keeps_foreign_metadata_on_dependency() -> None:
    marker = object()

    parsed = parse_dependency_annotation(Maybe[Annotated[_Settings, marker]])

    assert parsed.is_optional is True
    assert get_origin(parsed.dependency) is Annotated
    assert get_args(parsed.dependency) == (_Settings, marker)


def test_inject_decorator_direct_form_records_default_order() -> None:
    @inject
    def configure(self: object) -> None: ...

    assert get_inject_options(configure) == InjectOptions(order=0)


def test_inject_decorator_factory_form_records_order() -> None:
    @inject(order=7)
    def configure(self: object) -> None: ...

    options = get_inject_options(configure)
    assert options is not None
    assert options.order == 7


def test_unmarked_function_has_no_inject_options() -> None:
    def configure(self: object) -> None: ...

    assert get_inject_options(configure) is None
    assert get_inject_options(None) is None


def test_inject_marks_classmethod_in_either_decorator_order() -> None:
    class _Factory:
        @classmethod
        @inject
        def inner(cls) -> _Factory:
            return cls()

        @inject
        @classmethod
        def outer(cls) -> _Factory:
            return cls()

    assert get_inject_options(vars(_Factory)["inner"]) is not None
    assert get_inject_options(vars(_Factory)["outer"]) is not None


def test_inject_on_property_marks_getter() -> None:
    class _Holder:
        @inject
        @property
        def value(self) -> int:
            return 1

        @value.setter
        def value(self, new_value: int) -> None: ...

    prop = vars(_Holder)["value"]
    assert get_inject_options(prop.fget) is not None


def test_constructor_marks_alternate_constructor() -> None:
    class _Client:
        @constructor
        @classmethod
        def create(cls) -> _Client:
            return cls()

        @classmethod
        def plain(cls) -> _Client:
            return cls()

    assert is_alternate_constructor(vars(_Client)["create"]) is True
    assert is_alternate_constructor(vars(_Client)["plain"]) is False


def test_inject_rejects_empty_property() -> None:
    with pytest.raises(TypeError, match="neither a getter nor a setter"):
        inject(property())
