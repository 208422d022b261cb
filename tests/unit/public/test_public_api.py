from __future__ import annotations

import inspect
from types import ModuleType

import pytest

import diweave
import diweave.container
import diweave.exceptions
import diweave.injector
import diweave.markers
import diweave.metadata
import diweave.parameters
from diweave import Container, InjectParameter, NamedParameter, ObjectResolver, TypedParameter

_PUBLIC_MODULES = [
    diweave,
    diweave.container,
    diweave.injector,
    diweave.markers,
    diweave.metadata,
]


@pytest.mark.parametrize("module", _PUBLIC_MODULES, ids=lambda module: module.__name__)
def test_all_names_are_importable(module: ModuleType) -> None:
    for name in module.__all__:
        assert hasattr(module, name), f"{module.__name__}.{name} is listed but missing"


def test_package_exports_every_exception() -> None:
    declared = {
        name
        for name, value in vars(diweave.exceptions).items()
        if inspect.isclass(value) and issubclass(value, Exception) and name.startswith("DIWeave")
    }

    assert declared <= set(diweave.__all__)


def test_container_satisfies_resolver_protocol() -> None:
    assert isinstance(Container(), ObjectResolver)


@pytest.mark.parametrize(
    "parameter",
    [NamedParameter("name", value=1), TypedParameter(int, value=1)],
    ids=["named", "typed"],
)
def test_parameters_satisfy_override_protocol(parameter: object) -> None:
    assert isinstance(parameter, InjectParameter)


def test_injector_options_are_keyword_only() -> None:
    signature = inspect.signature(diweave.Injector)

    assert all(
        parameter.kind is inspect.Parameter.KEYWORD_ONLY
        for parameter in signature.parameters.values()
    )


def test_parameters_module_is_not_shadowed() -> None:
    assert diweave.NamedParameter is diweave.parameters.NamedParameter
