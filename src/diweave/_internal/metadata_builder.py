from __future__ import annotations

import inspect
import re
import sys
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from inspect import Parameter
from typing import Any, ClassVar, get_origin, get_type_hints

from diweave._internal.markers import (
    get_inject_options,
    is_alternate_constructor,
    parse_dependency_annotation,
)
from diweave._internal.metadata import (
    ConstructorDescriptor,
    InjectionMetadata,
    MemberDescriptor,
    MemberKind,
    MethodDescriptor,
    ParameterDescriptor,
)
from diweave._internal.type_checks import describe_dependency, is_abstract_class
from diweave.exceptions import DIWeaveAnnotationInferenceError

_SKIPPED_PARAMETER_KINDS = frozenset({Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD})
_CONSTRUCTOR_NAME = "__init__"
_INJECT_MARKER_PATTERN = re.compile(r"\bInject\b")


@dataclass(frozen=True, slots=True)
class _ConstructorCandidate:
    name: str
    factory: Callable[..., Any]
    annotated: Any
    is_visible: bool
    is_explicit: bool


@dataclass(slots=True)
class InjectionMetadataBuilder:
    """Build ``InjectionMetadata`` for a type by introspecting it once.

    Traversal walks ``__mro__`` from the most-derived class to its bases,
    skipping ``object``. A name declared on a derived class hides the same name
    on every base, so each injection point is reported once.
    """

    def build(self, target_type: type[Any]) -> InjectionMetadata:
        """Return injection metadata for target_type.

        Args:
            target_type: Class to introspect.

        """
        hierarchy = tuple(self._hierarchy(target_type))
        return InjectionMetadata(
            target_type=target_type,
            constructor=self.build_constructor(target_type),
            fields=self.build_fields(hierarchy),
            properties=self.build_properties(hierarchy),
            methods=self.build_methods(hierarchy),
        )

    def build_constructor(self, target_type: type[Any]) -> ConstructorDescriptor | None:
        """Select the constructor used to create target_type.

        The first candidate marked with ``@inject`` wins. Otherwise the visible
        candidate with the most parameters wins, ties going to the earlier
        candidate (``__init__`` first, then alternate constructors in
        declaration order).
        """
        candidates = list(self._constructor_candidates(target_type))
        selected = next((candidate for candidate in candidates if candidate.is_explicit), None)
        selected_parameters: tuple[ParameterDescriptor, ...] = ()

        if selected is not None:
            selected_parameters = self._constructor_parameters(selected)
        else:
            max_parameters = -1
            for candidate in candidates:
                if not candidate.is_visible:
                    continue
                parameters = self._constructor_parameters(candidate)
                if len(parameters) > max_parameters:
                    max_parameters = len(parameters)
                    selected = candidate
                    selected_parameters = parameters

        if selected is None:
            return None
        return ConstructorDescriptor(
            target_type=target_type,
            name=selected.name,
            factory=selected.factory,
            parameters=selected_parameters,
            is_explicit=selected.is_explicit,
        )

    def build_fields(self, hierarchy: tuple[type[Any], ...]) -> tuple[MemberDescriptor, ...]:
        """Collect ``Inject[...]`` class-body annotations across the hierarchy."""
        fields: list[MemberDescriptor] = []
        shadowed: set[str] = set()
        for level in hierarchy:
            declared = self._declared_annotations(level)
            if not declared:
                continue
            hints, errors = self._type_hints(level)
            for name, raw_annotation in declared.items():
                if name in shadowed:
                    continue
                error = errors.get(name)
                if error is not None:
                    # Unresolvable annotations only matter on injection points.
                    if isinstance(raw_annotation, str) and _INJECT_MARKER_PATTERN.search(raw_annotation):
                        raise self._annotation_error(level, f"field '{name}'", error) from error
                    continue
                annotation = hints.get(name, raw_annotation)
                if get_origin(annotation) is ClassVar:
                    continue
                parsed = parse_dependency_annotation(annotation)
                if not parsed.is_inject:
                    continue
                fields.append(
                    MemberDescriptor(
                        name=name,
                        kind=MemberKind.FIELD,
                        parameter=ParameterDescriptor(
                            name=name,
                            dependency=parsed.dependency,
                            is_optional=parsed.is_optional,
                            key=parsed.key,
                            from_parent=parsed.from_parent,
                        ),
                        owner=level,
                    ),
                )
            shadowed.update(declared)
        return tuple(fields)

    def build_properties(self, hierarchy: tuple[type[Any], ...]) -> tuple[MemberDescriptor, ...]:
        """Collect writable properties whose getter or setter carries ``@inject``."""
        properties: list[MemberDescriptor] = []
        shadowed: set[str] = set()
        for level in hierarchy:
            for name, raw in vars(level).items():
                if name in shadowed or not isinstance(raw, property):
                    continue
                if get_inject_options(raw.fget) is None and get_inject_options(raw.fset) is None:
                    continue
                if raw.fset is None:
                    continue
                parsed = parse_dependency_annotation(self._property_annotation(raw))
                properties.append(
                    MemberDescriptor(
                        name=name,
                        kind=MemberKind.PROPERTY,
                        parameter=ParameterDescriptor(
                            name=name,
                            dependency=parsed.dependency,
                            is_optional=parsed.is_optional,
                            key=parsed.key,
                            from_parent=parsed.from_parent,
                        ),
                        owner=level,
                    ),
                )
            shadowed.update(vars(level))
        return tuple(properties)

    def build_methods(self, hierarchy: tuple[type[Any], ...]) -> tuple[MethodDescriptor, ...]:
        """Collect ``@inject`` methods and sort them by order, stable on ties."""
        methods: list[MethodDescriptor] = []
        shadowed: set[str] = set()
        for level in hierarchy:
            for name, raw in vars(level).items():
                if name in shadowed or name == _CONSTRUCTOR_NAME:
                    continue
                if not inspect.isfunction(raw):
                    continue
                options = get_inject_options(raw)
                if options is None:
                    continue
                methods.append(
                    MethodDescriptor(
                        name=name,
                        owner=level,
                        order=options.order,
                        parameters=self.build_parameters(raw, skip_first_parameter=True),
                    ),
                )
            shadowed.update(vars(level))
        return tuple(sorted(methods, key=lambda method: method.order))

    def build_parameters(
        self,
        callable_obj: Callable[..., Any],
        *,
        skip_first_parameter: bool,
        annotated: Any = None,
    ) -> tuple[ParameterDescriptor, ...]:
        """Build descriptors for the injectable parameters of a callable.

        Args:
            callable_obj: Callable whose signature is inspected.
            skip_first_parameter: Drop the implicit ``self`` of unbound methods.
            annotated: Object whose type hints are used, defaults to callable_obj.

        """
        try:
            signature = inspect.signature(callable_obj)
        except (TypeError, ValueError):
            return ()
        parameters = tuple(signature.parameters.values())
        if skip_first_parameter and parameters:
            parameters = parameters[1:]
        owner = callable_obj if annotated is None else annotated
        hints, errors = self._type_hints(owner)
        descriptors: list[ParameterDescriptor] = []
        for parameter in parameters:
            if parameter.kind in _SKIPPED_PARAMETER_KINDS:
                continue
            error = errors.get(parameter.name)
            if error is not None:
                raise self._annotation_error(owner, f"parameter '{parameter.name}'", error) from error
            descriptors.append(self._build_parameter(parameter=parameter, hints=hints))
        return tuple(descriptors)

    def _build_parameter(self, *, parameter: Parameter, hints: dict[str, Any]) -> ParameterDescriptor:
        annotation = hints.get(parameter.name, parameter.annotation)
        if annotation is Parameter.empty:
            annotation = Any
        parsed = parse_dependency_annotation(annotation)
        has_default = parameter.default is not Parameter.empty
        return ParameterDescriptor(
            name=parameter.name,
            dependency=parsed.dependency,
            is_optional=parsed.is_optional or has_default,
            key=parsed.key,
            from_parent=parsed.from_parent,
            has_default=has_default,
            default_value=parameter.default if has_default else None,
            kind=parameter.kind,
        )

    def _constructor_candidates(self, target_type: type[Any]) -> Iterator[_ConstructorCandidate]:
        init = target_type.__init__
        yield _ConstructorCandidate(
            name=_CONSTRUCTOR_NAME,
            factory=target_type,
            annotated=init,
            is_visible=not is_abstract_class(target_type),
            is_explicit=get_inject_options(init) is not None,
        )

        seen: set[str] = set()
        for level in self._hierarchy(target_type):
            for name, raw in vars(level).items():
                if name in seen:
                    continue
                seen.add(name)
                if not isinstance(raw, (classmethod, staticmethod)):
                    continue
                if not is_alternate_constructor(raw):
                    continue
                yield _ConstructorCandidate(
                    name=name,
                    factory=getattr(target_type, name),
                    annotated=raw.__func__,
                    is_visible=not name.startswith("_"),
                    is_explicit=get_inject_options(raw) is not None,
                )

    def _constructor_parameters(
        self,
        candidate: _ConstructorCandidate,
    ) -> tuple[ParameterDescriptor, ...]:
        return self.build_parameters(
            candidate.factory,
            skip_first_parameter=False,
            annotated=candidate.annotated,
        )

    def _property_annotation(self, prop: property) -> Any:
        setter_first = get_inject_options(prop.fget) is None
        readers = (self._setter_annotation, self._getter_annotation)
        for reader in readers if setter_first else reversed(readers):
            annotation = reader(prop)
            if annotation is not Parameter.empty:
                return annotation
        return Any

    def _getter_annotation(self, prop: property) -> Any:
        if prop.fget is None:
            return Parameter.empty
        hints, errors = self._type_hints(prop.fget)
        error = errors.get("return")
        if error is not None:
            raise self._annotation_error(prop.fget, "the return value", error) from error
        return hints.get("return", Parameter.empty)

    def _setter_annotation(self, prop: property) -> Any:
        if prop.fset is None:
            return Parameter.empty
        try:
            setter_parameters = tuple(inspect.signature(prop.fset).parameters.values())
        except (TypeError, ValueError):
            return Parameter.empty
        if len(setter_parameters) < 2:
            return Parameter.empty
        value_parameter = setter_parameters[1]
        hints, errors = self._type_hints(prop.fset)
        error = errors.get(value_parameter.name)
        if error is not None:
            raise self._annotation_error(prop.fset, f"parameter '{value_parameter.name}'", error) from error
        return hints.get(value_parameter.name, value_parameter.annotation)

    def _declared_annotations(self, level: type[Any]) -> dict[str, Any]:
        try:
            return dict(inspect.get_annotations(level))
        except (AttributeError, NameError, TypeError):
            return {}

    def _type_hints(self, obj: Any) -> tuple[dict[str, Any], dict[str, Exception]]:
        """Return evaluated annotations of obj and the errors of those that failed.

        ``get_type_hints`` gives up on the first name it cannot evaluate, so a
        failure falls back to evaluating each annotation on its own. Callers
        decide whether a failed name is an injection point.
        """
        try:
            return get_type_hints(obj, include_extras=True), {}
        except (AttributeError, NameError, TypeError):
            pass

        hints: dict[str, Any] = {}
        errors: dict[str, Exception] = {}
        try:
            raw_annotations = inspect.get_annotations(obj)
        except TypeError:
            return hints, errors
        globalns, localns = self._annotation_namespaces(obj)
        for name, raw in raw_annotations.items():
            if not isinstance(raw, str):
                hints[name] = raw
                continue
            try:
                hints[name] = eval(raw, globalns, localns)
            except (AttributeError, NameError, SyntaxError, TypeError) as error:
                errors[name] = error
        return hints, errors

    def _annotation_namespaces(self, obj: Any) -> tuple[dict[str, Any], dict[str, Any] | None]:
        if isinstance(obj, type):
            module = sys.modules.get(obj.__module__)
            globalns = dict(vars(module)) if module is not None else {}
            return globalns, dict(vars(obj))
        return getattr(inspect.unwrap(obj), "__globals__", {}), None

    def _annotation_error(
        self,
        owner: Any,
        location: str,
        error: Exception,
    ) -> DIWeaveAnnotationInferenceError:
        msg = (
            f"Unable to evaluate the annotation of {location} on "
            f"'{describe_dependency(owner)}': {error}. Import the annotated type at "
            "runtime instead of only under TYPE_CHECKING."
        )
        return DIWeaveAnnotationInferenceError(msg, dependency=owner)

    def _hierarchy(self, target_type: type[Any]) -> Iterator[type[Any]]:
        for level in target_type.__mro__:
            if level is object:
                continue
            yield level
