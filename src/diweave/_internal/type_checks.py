from __future__ import annotations

import decimal
import fractions
import inspect
import types
from typing import Any, TypeGuard

_VALUE_TYPES: frozenset[type[Any]] = frozenset(
    {
        bool,
        int,
        float,
        complex,
        decimal.Decimal,
        fractions.Fraction,
    },
)


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def is_abstract_class(candidate: type[Any]) -> bool:
    """Return true for ABCs with abstract members and for ``typing.Protocol`` classes."""
    if inspect.isabstract(candidate):
        return True
    return bool(getattr(candidate, "_is_protocol", False))


def describe_dependency(dependency: Any) -> str:
    """Return a readable name for a dependency key used in error messages."""
    name = getattr(dependency, "__qualname__", None)
    if isinstance(name, str):
        return name
    return repr(dependency)


def zero_value(dependency: Any) -> Any:
    """Return the empty value of a declared dependency type.

    Numeric value types map to their zero (``0``, ``0.0``, ``False`` ...);
    everything else maps to ``None``.
    """
    if dependency in _VALUE_TYPES:
        return dependency()
    return None


def is_zero_value(value: Any, dependency: Any) -> bool:
    """Return true when value equals the empty value of its declared type."""
    if value is None:
        return True
    zero = zero_value(dependency)
    if zero is None:
        return False
    return type(value) is type(zero) and value == zero


__all__ = [
    "describe_dependency",
    "is_abstract_class",
    "is_runtime_class",
    "is_zero_value",
    "zero_value",
]
