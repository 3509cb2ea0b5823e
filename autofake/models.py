"""Core data models shared across autofake components."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Literal, Optional, Tuple, Union

TypeKind = Literal["optional", "array", "dictionary", "named"]
StrategyName = Literal[
    "enum_first_case",
    "raw_representable_singleton",
    "manual_constructor",
    "memberwise_default",
]


@dataclass(frozen=True)
class TypeDescriptor:
    """Normalized classification of a declared type.

    ``text`` is the type exactly as written (used verbatim in generated
    signatures); for named types it is also the raw name matched against the
    default-literal table.
    """

    kind: TypeKind
    text: str
    generic_wrapper: bool = False

    @property
    def is_optional(self) -> bool:
        return self.kind == "optional"


@dataclass(frozen=True)
class StoredField:
    """A property declaration member of a struct-like declaration."""

    name: str
    type: Optional[TypeDescriptor]
    is_static: bool = False
    is_stored: bool = True
    has_default_annotation: bool = False
    default_expression: Optional[str] = None

    @property
    def has_custom_default(self) -> bool:
        """True only for a well-formed annotation that carries an expression."""
        return self.has_default_annotation and self.default_expression is not None

    @property
    def has_annex(self) -> bool:
        """True when an annex helper is emitted for this field."""
        return self.is_stored and self.has_custom_default and self.type is not None


@dataclass(frozen=True)
class AssociatedValue:
    type: TypeDescriptor
    label: Optional[str] = None


@dataclass(frozen=True)
class EnumCase:
    name: str
    associated_values: Optional[Tuple[AssociatedValue, ...]] = None


@dataclass(frozen=True)
class ConstructorParameter:
    name: str
    type: TypeDescriptor
    label: Optional[str] = None


@dataclass(frozen=True)
class Constructor:
    """A user-written initializer found directly in the declaration body."""

    parameters: Tuple[ConstructorParameter, ...]
    is_decoding_initializer: bool = False


@dataclass(frozen=True)
class StructShape:
    keyword: str


@dataclass(frozen=True)
class EnumShape:
    cases: Tuple[EnumCase, ...] = ()


Shape = Union[StructShape, EnumShape]


@dataclass(frozen=True)
class ShapeReport:
    """Everything the synthesizer needs to know about one declaration."""

    name: str
    keyword: str
    shape: Optional[Shape]
    fields: Tuple[StoredField, ...] = ()
    constructors: Tuple[Constructor, ...] = ()
    conformances: Tuple[str, ...] = ()

    @property
    def candidate_fields(self) -> Tuple[StoredField, ...]:
        """Stored, non-static, type-annotated fields in declaration order."""
        return tuple(
            item
            for item in self.fields
            if item.is_stored and not item.is_static and item.type is not None
        )

    @property
    def static_fields(self) -> Tuple[StoredField, ...]:
        return tuple(item for item in self.fields if item.is_stored and item.is_static)

    def field_named(self, name: str) -> Optional[StoredField]:
        return next(
            (item for item in self.fields if item.is_stored and item.name == name),
            None,
        )


@dataclass(frozen=True)
class Argument:
    """One ``label: value`` argument of an emitted call; unlabeled when ``label`` is None."""

    value: str
    label: Optional[str] = None


@dataclass(frozen=True)
class InitializerCall:
    """``Self(arguments)`` body used by the constructor-based strategies."""

    arguments: Tuple[Argument, ...] = ()


@dataclass(frozen=True)
class MemberReturn:
    """``return .member`` or ``return .member(arguments)`` body."""

    member: str
    arguments: Optional[Tuple[Argument, ...]] = None


Body = Union[InitializerCall, MemberReturn]


@dataclass(frozen=True)
class GeneratedParameter:
    name: str
    type: TypeDescriptor
    default: str


@dataclass(frozen=True)
class GeneratedFunction:
    """The synthesized ``fake`` constructor-with-defaults."""

    name: str
    strategy: StrategyName
    parameters: Tuple[GeneratedParameter, ...]
    body: Body
    return_type: str = "Self"


@dataclass(frozen=True)
class AnnexHelper:
    """Zero-argument helper materializing one custom default expression."""

    name: str
    field: str
    return_type: str
    expression: str


GeneratedMember = Union[AnnexHelper, GeneratedFunction]


@dataclass(frozen=True)
class Expansion:
    """Result of analyzing one declaration: annex helpers followed by the generator."""

    report: ShapeReport
    generator: GeneratedFunction
    annexes: Tuple[AnnexHelper, ...] = field(default_factory=tuple)

    @property
    def members(self) -> Tuple[GeneratedMember, ...]:
        return (*self.annexes, self.generator)


@dataclass
class SourceFile:
    """Swift file discovered by the scanner, relative to the manifest root."""

    path: str
    size: int


@dataclass
class SourceManifest:
    root: Path
    files: List[SourceFile]
