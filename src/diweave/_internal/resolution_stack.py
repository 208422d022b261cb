from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

from diweave._internal.type_checks import describe_dependency
from diweave.exceptions import DIWeaveCircularDependencyError

# Registrations under construction in the current execution context. A tuple
# keeps each context's view immutable, so threads never share a stack.
_resolution_stack: ContextVar[tuple[tuple[Any, str | None], ...]] = ContextVar(
    "diweave_resolution_stack",
    default=(),
)


@contextmanager
def resolution_guard(dependency: Any, key: str | None = None) -> Iterator[None]:
    """Track one registration while it is being built.

    Raises:
        DIWeaveCircularDependencyError: If the same registration is already
            being built further up the current call chain.

    """
    entry = (dependency, key)
    stack = _resolution_stack.get()
    if entry in stack:
        chain = tuple(item for item, _ in (*stack, entry))
        rendered = " -> ".join(describe_dependency(item) for item in chain)
        msg = f"Circular dependency detected: {rendered}."
        raise DIWeaveCircularDependencyError(msg, dependency=dependency, chain=chain)

    token = _resolution_stack.set((*stack, entry))
    try:
        yield
    finally:
        _resolution_stack.reset(token)
