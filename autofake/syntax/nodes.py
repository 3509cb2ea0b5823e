"""Syntax nodes produced by the Swift declaration parser."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Literal, Optional, Tuple, Union

TypeKeyword = Literal["struct", "enum", "class", "actor", "protocol", "extension"]
AccessorKind = Literal["getter", "accessors"]


@dataclass(frozen=True)
class Attribute:
    """An ``@name`` or ``@name(arguments)`` attribute attached to a declaration."""

    name: str
    arguments: Optional[Tuple[str, ...]]
    start: int
    end: int


@dataclass(frozen=True)
class AccessorBlock:
    """The ``{ ... }`` block trailing a property binding."""

    kind: AccessorKind
    specifiers: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Binding:
    """One ``pattern: Type = value { accessors }`` binding of a property."""

    pattern: str
    type_text: Optional[str] = None
    initializer: Optional[str] = None
    accessor: Optional[AccessorBlock] = None

    @property
    def is_identifier(self) -> bool:
        return not self.pattern.startswith("(") and self.pattern != "_"


@dataclass
class PropertyDecl:
    attributes: List[Attribute]
    modifiers: List[str]
    specifier: str
    bindings: List[Binding]
    start: int
    end: int


@dataclass(frozen=True)
class CaseParameter:
    label: Optional[str]
    type_text: str


@dataclass(frozen=True)
class CaseElement:
    name: str
    parameters: Optional[Tuple[CaseParameter, ...]] = None
    raw_value: Optional[str] = None


@dataclass
class EnumCaseDecl:
    attributes: List[Attribute]
    modifiers: List[str]
    elements: List[CaseElement]
    start: int
    end: int


@dataclass(frozen=True)
class FunctionParameter:
    first_name: str
    second_name: Optional[str]
    type_text: str
    default_value: Optional[str] = None
    variadic: bool = False


@dataclass
class InitializerDecl:
    attributes: List[Attribute]
    modifiers: List[str]
    parameters: List[FunctionParameter]
    start: int
    end: int
    failable: bool = False


@dataclass
class OtherDecl:
    """A member the parser records but does not interpret (functions, typealiases, ...)."""

    keyword: str
    start: int
    end: int


@dataclass
class TypeDecl:
    """A nominal type declaration together with its parsed member block."""

    keyword: TypeKeyword
    name: str
    attributes: List[Attribute]
    modifiers: List[str]
    inherited: List[str]
    members: List["Member"]
    start: int
    keyword_start: int
    body_start: int
    body_end: int
    line: int
    # Members between `#if` and `#endif`; they never count as direct members.
    conditional_members: List["Member"] = field(default_factory=list)

    def attribute(self, name: str) -> Optional[Attribute]:
        return next((attr for attr in self.attributes if attr.name == name), None)

    def nested_types(self) -> List["TypeDecl"]:
        members = sorted(self.members + self.conditional_members, key=lambda member: member.start)
        return [member for member in members if isinstance(member, TypeDecl)]


Member = Union[PropertyDecl, EnumCaseDecl, InitializerDecl, TypeDecl, OtherDecl]


@dataclass
class SourceTree:
    """Parsed view of one Swift source file."""

    source: str
    declarations: List[TypeDecl] = field(default_factory=list)

    def walk(self) -> Iterator[TypeDecl]:
        """Yield every type declaration, outer declarations before nested ones."""
        stack = list(reversed(self.declarations))
        while stack:
            decl = stack.pop()
            yield decl
            stack.extend(reversed(decl.nested_types()))


__all__ = [
    "AccessorBlock",
    "AccessorKind",
    "Attribute",
    "Binding",
    "CaseElement",
    "CaseParameter",
    "EnumCaseDecl",
    "FunctionParameter",
    "InitializerDecl",
    "Member",
    "OtherDecl",
    "PropertyDecl",
    "SourceTree",
    "TypeDecl",
    "TypeKeyword",
]
