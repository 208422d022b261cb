from __future__ import annotations

from collections.abc import Callable, Sequence
from inspect import Parameter
from typing import Any

from diweave._internal.metadata import ParameterDescriptor


def call_with_arguments(
    target: Callable[..., Any],
    parameters: Sequence[ParameterDescriptor],
    arguments: list[Any],
) -> Any:
    """Call target with resolved arguments laid out like its signature.

    Positional parameters are passed by position, keyword-only parameters by
    name. ``arguments`` holds one value per descriptor in declaration order.
    """
    keyword_arguments: dict[str, Any] | None = None
    positional_count = len(parameters)
    for index, parameter in enumerate(parameters):
        if parameter.kind is Parameter.KEYWORD_ONLY:
            if keyword_arguments is None:
                keyword_arguments = {}
                positional_count = index
            keyword_arguments[parameter.name] = arguments[index]

    if keyword_arguments is None:
        return target(*arguments)
    return target(*arguments[:positional_count], **keyword_arguments)
