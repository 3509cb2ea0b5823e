"""Generator synthesis: picks one of four strategies and builds the ``fake`` function."""

from __future__ import annotations

from typing import List, Optional

from ..logging import get_logger
from ..models import (
    Argument,
    Constructor,
    EnumShape,
    GeneratedFunction,
    GeneratedParameter,
    InitializerCall,
    MemberReturn,
    ShapeReport,
    StrategyName,
    StructShape,
)
from .resolver import resolve_default

GENERATOR_NAME = "fake"
RAW_REPRESENTABLE_MARKER = "RawRepresentable"

logger = get_logger("synthesizer")


class UnsupportedDeclarationError(RuntimeError):
    """Raised when a declaration is neither struct-like nor enum-like."""


def select_strategy(report: ShapeReport) -> StrategyName:
    """Return the first matching strategy, in fixed precedence order."""
    if report.shape is None:
        raise UnsupportedDeclarationError(
            f"Unsupported type declaration '{report.keyword} {report.name}': "
            "only struct, class, actor and enum declarations can generate fakes"
        )
    if isinstance(report.shape, EnumShape) and report.shape.cases:
        return "enum_first_case"
    if _raw_representable_member(report) is not None:
        return "raw_representable_singleton"
    if _manual_constructor(report) is not None:
        return "manual_constructor"
    return "memberwise_default"


def synthesize(report: ShapeReport) -> GeneratedFunction:
    """Build the generator function for ``report``."""
    strategy = select_strategy(report)
    logger.debug("Generating %s.%s via %s", report.name, GENERATOR_NAME, strategy)
    if strategy == "enum_first_case":
        return _enum_first_case(report)
    if strategy == "raw_representable_singleton":
        return _raw_representable_singleton(report)
    if strategy == "manual_constructor":
        return _manual_constructor_generator(report)
    return _memberwise_generator(report)


def _enum_first_case(report: ShapeReport) -> GeneratedFunction:
    assert isinstance(report.shape, EnumShape)
    first = report.shape.cases[0]
    arguments = None
    if first.associated_values is not None:
        arguments = tuple(
            Argument(value=resolve_default(value.label or "", value.type), label=value.label)
            for value in first.associated_values
        )
    return GeneratedFunction(
        name=GENERATOR_NAME,
        strategy="enum_first_case",
        parameters=(),
        body=MemberReturn(member=first.name, arguments=arguments),
    )


def _raw_representable_member(report: ShapeReport) -> Optional[str]:
    shape = report.shape
    if not isinstance(shape, StructShape) or shape.keyword != "struct":
        return None
    if RAW_REPRESENTABLE_MARKER not in report.conformances:
        return None
    statics = report.static_fields
    return statics[0].name if statics else None


def _raw_representable_singleton(report: ShapeReport) -> GeneratedFunction:
    member = _raw_representable_member(report)
    assert member is not None
    return GeneratedFunction(
        name=GENERATOR_NAME,
        strategy="raw_representable_singleton",
        parameters=(),
        body=MemberReturn(member=member),
    )


def _manual_constructor(report: ShapeReport) -> Optional[Constructor]:
    return next(
        (item for item in report.constructors if not item.is_decoding_initializer),
        None,
    )


def _manual_constructor_generator(report: ShapeReport) -> GeneratedFunction:
    constructor = _manual_constructor(report)
    assert constructor is not None

    parameters: List[GeneratedParameter] = []
    arguments: List[Argument] = []
    for parameter in constructor.parameters:
        field = report.field_named(parameter.name)
        default = resolve_default(
            parameter.name,
            parameter.type,
            has_custom_default=field is not None and field.has_annex,
        )
        parameters.append(GeneratedParameter(parameter.name, parameter.type, default))
        label = parameter.label.replace("`", "") if parameter.label is not None else None
        arguments.append(Argument(value=parameter.name, label=label))

    return GeneratedFunction(
        name=GENERATOR_NAME,
        strategy="manual_constructor",
        parameters=tuple(parameters),
        body=InitializerCall(arguments=tuple(arguments)),
    )


def _memberwise_generator(report: ShapeReport) -> GeneratedFunction:
    parameters: List[GeneratedParameter] = []
    arguments: List[Argument] = []
    for field in report.candidate_fields:
        assert field.type is not None
        default = resolve_default(
            field.name,
            field.type,
            has_custom_default=field.has_annex,
        )
        parameters.append(GeneratedParameter(field.name, field.type, default))
        arguments.append(Argument(value=field.name, label=field.name.replace("`", "")))

    return GeneratedFunction(
        name=GENERATOR_NAME,
        strategy="memberwise_default",
        parameters=tuple(parameters),
        body=InitializerCall(arguments=tuple(arguments)),
    )


__all__ = [
    "GENERATOR_NAME",
    "RAW_REPRESENTABLE_MARKER",
    "UnsupportedDeclarationError",
    "select_strategy",
    "synthesize",
]
