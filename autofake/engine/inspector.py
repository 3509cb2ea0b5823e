"""Type-shape inspection: turns a parsed declaration into a :class:`ShapeReport`."""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from ..logging import get_logger
from ..models import (
    AssociatedValue,
    Constructor,
    ConstructorParameter,
    EnumCase,
    EnumShape,
    Shape,
    ShapeReport,
    StoredField,
    StructShape,
    TypeDescriptor,
)
from ..syntax.nodes import (
    Attribute,
    CaseElement,
    EnumCaseDecl,
    InitializerDecl,
    PropertyDecl,
    TypeDecl,
)

DEFAULT_ANNOTATION = "AutoFakeDefault"

_STRUCT_LIKE = {"struct", "class", "actor"}
_OBSERVERS = {"willSet", "didSet"}
_LABEL_PREFIX = re.compile(r"^(?:[^\W\d]\w*|`[^`]+`)\s*:(?!:)\s*")
_SIMPLE_CONFORMANCE = re.compile(r"^([^\W\d]\w*)\s*(?:<.*>)?$", re.DOTALL)

logger = get_logger("inspector")


def describe_type(text: str) -> TypeDescriptor:
    """Classify a written type as optional, array, dictionary or named."""
    written = text.strip()
    if written.endswith("?"):
        return TypeDescriptor(kind="optional", text=written)
    if written.startswith("Optional<") and written.endswith(">"):
        return TypeDescriptor(kind="optional", text=written, generic_wrapper=True)
    if written.startswith("[") and _closing_bracket(written) == len(written) - 1:
        kind = "dictionary" if _has_top_level_colon(written[1:-1]) else "array"
        return TypeDescriptor(kind=kind, text=written)
    return TypeDescriptor(kind="named", text=written)


def _closing_bracket(text: str) -> int:
    depth = 0
    for index, char in enumerate(text):
        if char in "[(<":
            depth += 1
        elif char in "])>" and not (char == ">" and index > 0 and text[index - 1] == "-"):
            depth -= 1
            if depth == 0:
                return index
    return -1


def _has_top_level_colon(inner: str) -> bool:
    depth = 0
    for index, char in enumerate(inner):
        if char in "[(<":
            depth += 1
        elif char in "])>" and not (char == ">" and index > 0 and inner[index - 1] == "-"):
            depth -= 1
        elif char == ":" and depth == 0:
            return True
    return False


def inspect(declaration: TypeDecl) -> ShapeReport:
    """Extract the generation-relevant shape of ``declaration``.

    Never raises: declarations that are neither struct-like nor enum-like come
    back with ``shape=None`` and are rejected later by the synthesizer.
    """
    fields: List[StoredField] = []
    cases: List[EnumCase] = []
    constructors: List[Constructor] = []

    for member in declaration.members:
        if isinstance(member, PropertyDecl):
            stored = _stored_field(member)
            if stored is not None:
                fields.append(stored)
        elif isinstance(member, EnumCaseDecl):
            cases.extend(_enum_case(element) for element in member.elements)
        elif isinstance(member, InitializerDecl):
            constructors.append(_constructor(member))

    shape: Optional[Shape]
    if declaration.keyword == "enum":
        shape = EnumShape(cases=tuple(cases))
    elif declaration.keyword in _STRUCT_LIKE:
        shape = StructShape(keyword=declaration.keyword)
    else:
        shape = None

    return ShapeReport(
        name=declaration.name,
        keyword=declaration.keyword,
        shape=shape,
        fields=tuple(fields),
        constructors=tuple(constructors),
        conformances=_conformances(declaration.inherited),
    )


def is_stored_property(member: PropertyDecl) -> bool:
    """Syntactic stored-property check.

    A single binding with no accessor block, or with only ``willSet``/``didSet``
    observers, is stored. Getter blocks or any other accessor make it computed.
    Property wrappers and accessor macros are invisible to this check.
    """
    if len(member.bindings) != 1:
        return False
    accessor = member.bindings[0].accessor
    if accessor is None:
        return True
    if accessor.kind == "getter":
        return False
    return all(specifier in _OBSERVERS for specifier in accessor.specifiers)


def _stored_field(member: PropertyDecl) -> Optional[StoredField]:
    binding = member.bindings[0] if member.bindings else None
    if binding is None or not binding.is_identifier:
        return None

    annotation = _find_attribute(member.attributes, DEFAULT_ANNOTATION)
    expression = _annotation_expression(annotation) if annotation is not None else None
    if annotation is not None and expression is None:
        logger.debug("Ignoring @%s without an argument on '%s'", DEFAULT_ANNOTATION, binding.pattern)

    return StoredField(
        name=binding.pattern,
        type=describe_type(binding.type_text) if binding.type_text else None,
        is_static="static" in member.modifiers,
        is_stored=is_stored_property(member),
        has_default_annotation=annotation is not None,
        default_expression=expression,
    )


def _find_attribute(attributes: List[Attribute], name: str) -> Optional[Attribute]:
    return next((attribute for attribute in attributes if attribute.name == name), None)


def _annotation_expression(attribute: Attribute) -> Optional[str]:
    if not attribute.arguments:
        return None
    expression = _LABEL_PREFIX.sub("", attribute.arguments[0], count=1).strip()
    return expression or None


def _enum_case(element: CaseElement) -> EnumCase:
    if element.parameters is None:
        return EnumCase(name=element.name)
    values = tuple(
        AssociatedValue(type=describe_type(parameter.type_text), label=parameter.label)
        for parameter in element.parameters
    )
    return EnumCase(name=element.name, associated_values=values)


def _constructor(member: InitializerDecl) -> Constructor:
    parameters: List[ConstructorParameter] = []
    for parameter in member.parameters:
        unlabeled = parameter.first_name == "_"
        name = parameter.second_name if unlabeled and parameter.second_name else parameter.first_name
        parameters.append(
            ConstructorParameter(
                name=name,
                type=describe_type(parameter.type_text),
                label=None if unlabeled else parameter.first_name,
            )
        )
    return Constructor(
        parameters=tuple(parameters),
        is_decoding_initializer=_is_decoding_initializer(member),
    )


def _is_decoding_initializer(member: InitializerDecl) -> bool:
    """``init(from decoder: Decoder)`` is the Decodable requirement, never a generation basis."""
    if not member.parameters:
        return False
    first = member.parameters[0]
    return (
        first.first_name == "from"
        and first.second_name == "decoder"
        and first.type_text.strip() == "Decoder"
    )


def _conformances(inherited: List[str]) -> Tuple[str, ...]:
    names: List[str] = []
    for entry in inherited:
        match = _SIMPLE_CONFORMANCE.match(entry.strip())
        if match:
            names.append(match.group(1))
    return tuple(names)


__all__ = ["DEFAULT_ANNOTATION", "describe_type", "inspect", "is_stored_property"]
