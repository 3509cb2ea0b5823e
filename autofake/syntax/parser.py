"""Tree-sitter powered Swift declaration reader.

Only what the fake generator needs is lifted out of the concrete syntax
tree: nominal type declarations and the members that shape them (properties,
enum cases and initializers). Every other member is recorded as an
:class:`OtherDecl` so its span is still known.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import tree_sitter_swift
from tree_sitter import Language, Node, Parser

from .nodes import (
    AccessorBlock,
    Attribute,
    Binding,
    CaseElement,
    CaseParameter,
    EnumCaseDecl,
    FunctionParameter,
    InitializerDecl,
    Member,
    OtherDecl,
    PropertyDecl,
    SourceTree,
    TypeDecl,
)

SWIFT_LANGUAGE = Language(tree_sitter_swift.language())

_TYPE_NODES = {"class_declaration", "protocol_declaration"}
_TRIVIA = {"comment", "multiline_comment", "diagnostic"}

_OTHER_KEYWORDS = {
    "typealias_declaration": "typealias",
    "function_declaration": "func",
    "protocol_function_declaration": "func",
    "protocol_property_declaration": "var",
    "subscript_declaration": "subscript",
    "deinit_declaration": "deinit",
    "associatedtype_declaration": "associatedtype",
    "import_declaration": "import",
    "operator_declaration": "operator",
    "precedence_group_declaration": "precedencegroup",
    "macro_declaration": "macro",
}

_ACCESSOR_SPECIFIERS = {
    "computed_getter": "get",
    "computed_setter": "set",
    "computed_modify": "_modify",
    "willset_clause": "willSet",
    "didset_clause": "didSet",
}


class SwiftSyntaxError(ValueError):
    """Raised when Swift source cannot be parsed."""

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"{message} (line {line}, column {column})")
        self.line = line
        self.column = column


class SwiftParser:
    """Builds a :class:`SourceTree` from Swift source text."""

    def __init__(self, source: str) -> None:
        self.source = source
        self._data = source.encode("utf-8")
        self._offsets = None if source.isascii() else _char_offsets(source)
        self._parser = Parser(SWIFT_LANGUAGE)

    def parse(self) -> SourceTree:
        tree = self._parser.parse(self._data)
        root = tree.root_node
        if root.has_error:
            self._raise_first_error(root)
        direct, conditional = self._member_block(root.children)
        declarations = [
            member for member in direct + conditional if isinstance(member, TypeDecl)
        ]
        declarations.sort(key=lambda decl: decl.start)
        return SourceTree(source=self.source, declarations=declarations)

    # ---------------- Member blocks ----------------

    def _member_block(self, children: Sequence[Node]) -> Tuple[List[Member], List[Member]]:
        """Split a block into direct members and members under ``#if`` directives."""
        direct: List[Member] = []
        conditional: List[Member] = []
        depth = 0
        for child in children:
            if not child.is_named or child.type in _TRIVIA:
                continue
            if child.type == "directive":
                text = self._text(child)
                if text.startswith("#if"):
                    depth += 1
                elif text.startswith("#endif") and depth:
                    depth -= 1
                continue
            member = self._member(child)
            if member is not None:
                (conditional if depth else direct).append(member)
        return direct, conditional

    def _member(self, node: Node) -> Optional[Member]:
        if node.type in _TYPE_NODES:
            return self._type_decl(node)
        if node.type == "property_declaration":
            return self._property(node)
        if node.type == "enum_entry":
            return self._enum_case(node)
        if node.type == "init_declaration":
            return self._initializer(node)
        if node.type == "statements":
            return None
        keyword = _OTHER_KEYWORDS.get(node.type, node.type)
        return OtherDecl(keyword=keyword, start=self._start(node), end=self._end(node))

    def _modifiers(self, node: Node) -> Tuple[List[Attribute], List[str]]:
        attributes: List[Attribute] = []
        modifiers: List[str] = []
        for child in node.children:
            if child.type != "modifiers":
                continue
            for item in child.named_children:
                if item.type == "attribute":
                    attributes.append(self._attribute(item))
                elif item.type not in _TRIVIA:
                    modifiers.append(self._text(item))
        return attributes, modifiers

    def _attribute(self, node: Node) -> Attribute:
        name_node = next((child for child in node.named_children if child.type == "user_type"), None)
        name = self._text(name_node) if name_node is not None else ""
        arguments: Optional[Tuple[str, ...]] = None
        if any(child.type == "(" for child in node.children):
            arguments = tuple(
                self._span(segment) for segment in _split_on_commas(node.children, "(", ")") if segment
            )
        return Attribute(name, arguments, self._start(node), self._end(node))

    # ---------------- Type declarations ----------------

    def _type_decl(self, node: Node) -> TypeDecl:
        attributes, modifiers = self._modifiers(node)
        keyword = node.child_by_field_name("declaration_kind")
        name = node.child_by_field_name("name")
        body = node.child_by_field_name("body")
        if keyword is None or body is None:
            row, column = node.start_point
            raise SwiftSyntaxError("Incomplete type declaration", row + 1, column + 1)

        inherited = [
            self._text(child) for child in node.named_children if child.type == "inheritance_specifier"
        ]
        members, conditional = self._member_block(body.children)
        close = body.children[-1]
        return TypeDecl(
            keyword=self._text(keyword),  # type: ignore[arg-type]
            name=self._text(name) if name is not None else "",
            attributes=attributes,
            modifiers=modifiers,
            inherited=inherited,
            members=members,
            start=self._start(node),
            keyword_start=self._start(keyword),
            body_start=self._start(body),
            body_end=self._start(close),
            line=keyword.start_point[0] + 1,
            conditional_members=conditional,
        )

    # ---------------- Properties ----------------

    def _property(self, node: Node) -> PropertyDecl:
        attributes, modifiers = self._modifiers(node)
        specifier = ""
        patterns: List[Node] = []
        details: List[List[Node]] = []
        values = node.children_by_field_name("value")
        for child in node.children:
            if child.type == "value_binding_pattern":
                specifier = self._text(child)
            elif child.type == "pattern":
                patterns.append(child)
                details.append([])
            elif details and child.type not in _TRIVIA and (child.is_named or _is_one_of(child, values)):
                details[-1].append(child)

        bindings = [
            self._binding(pattern, extra, values) for pattern, extra in zip(patterns, details)
        ]
        return PropertyDecl(
            attributes=attributes,
            modifiers=modifiers,
            specifier=specifier,
            bindings=bindings,
            start=self._start(node),
            end=self._end(node),
        )

    def _binding(self, pattern: Node, extra: List[Node], values: List[Node]) -> Binding:
        type_text: Optional[str] = None
        initializer: Optional[str] = None
        accessor: Optional[AccessorBlock] = None
        for child in extra:
            if child.type == "type_annotation":
                typed = [item for item in _after(child.children, ":") if item.type not in _TRIVIA]
                if typed:
                    type_text = self.source[self._start(typed[0]) : self._end(child)].strip()
            elif child.type in ("computed_property", "willset_didset_block"):
                accessor = self._accessor(child)
            elif _is_one_of(child, values):
                initializer = self._text(child)
        return Binding(self._text(pattern), type_text, initializer, accessor)

    def _accessor(self, node: Node) -> AccessorBlock:
        specifiers = tuple(
            _ACCESSOR_SPECIFIERS[child.type]
            for child in node.named_children
            if child.type in _ACCESSOR_SPECIFIERS
        )
        if node.type == "computed_property" and not specifiers:
            return AccessorBlock(kind="getter")
        return AccessorBlock(kind="accessors", specifiers=specifiers)

    # ---------------- Enum cases ----------------

    def _enum_case(self, node: Node) -> EnumCaseDecl:
        attributes, modifiers = self._modifiers(node)
        names = node.children_by_field_name("name")
        contents = node.children_by_field_name("data_contents")
        raw_values = node.children_by_field_name("raw_value")

        elements: List[CaseElement] = []
        for index, name in enumerate(names):
            limit = names[index + 1].start_byte if index + 1 < len(names) else node.end_byte
            data = _between(contents, name.end_byte, limit)
            raw = _between(raw_values, name.end_byte, limit)
            elements.append(
                CaseElement(
                    name=self._text(name),
                    parameters=self._case_parameters(data) if data is not None else None,
                    raw_value=self._text(raw) if raw is not None else None,
                )
            )
        return EnumCaseDecl(
            attributes=attributes,
            modifiers=modifiers,
            elements=elements,
            start=self._start(node),
            end=self._end(node),
        )

    def _case_parameters(self, node: Node) -> Tuple[CaseParameter, ...]:
        parameters: List[CaseParameter] = []
        for segment in _split_on_commas(node.children, "(", ")"):
            named = [child for child in segment if child.is_named and child.type not in _TRIVIA]
            if not named:
                continue
            if any(child.type == ":" for child in segment):
                names = _before(segment, ":")
                typed = [child for child in _after(segment, ":") if child.is_named]
                first = self._text(names[0]) if names else "_"
                label = None if first == "_" else first
            else:
                label = None
                typed = named
            parameters.append(CaseParameter(label, self._text(typed[0]) if typed else ""))
        return tuple(parameters)

    # ---------------- Initializers ----------------

    def _initializer(self, node: Node) -> InitializerDecl:
        attributes, modifiers = self._modifiers(node)
        init_keyword = node.child_by_field_name("name")
        failable = False
        if init_keyword is not None:
            marker = self._data[init_keyword.end_byte : init_keyword.end_byte + 1]
            failable = marker in (b"?", b"!")

        parameter_nodes = [child for child in node.named_children if child.type == "parameter"]
        defaults = node.children_by_field_name("default_value")
        parameters: List[FunctionParameter] = []
        for index, parameter in enumerate(parameter_nodes):
            limit = (
                parameter_nodes[index + 1].start_byte
                if index + 1 < len(parameter_nodes)
                else node.end_byte
            )
            default = _between(defaults, parameter.end_byte, limit)
            parameters.append(self._function_parameter(parameter, default))

        return InitializerDecl(
            attributes=attributes,
            modifiers=modifiers,
            parameters=parameters,
            start=self._start(node),
            end=self._end(node),
            failable=failable,
        )

    def _function_parameter(self, node: Node, default: Optional[Node]) -> FunctionParameter:
        names = [child for child in _before(node.children, ":") if child.type not in _TRIVIA]
        first_name = self._text(names[0]) if names else ""
        second_name = self._text(names[1]) if len(names) > 1 else None

        # The span runs to the end of the parameter so hidden `!`/`...` suffixes stay visible.
        typed = [child for child in _after(node.children, ":") if child.type not in _TRIVIA]
        type_text = self.source[self._start(typed[0]) : self._end(node)].strip() if typed else ""
        trailing = self._data[node.end_byte :].lstrip(b" \t")
        variadic = type_text.endswith("...") or trailing.startswith(b"...")
        if type_text.endswith("..."):
            type_text = type_text[:-3].rstrip()

        return FunctionParameter(
            first_name=first_name,
            second_name=second_name,
            type_text=type_text,
            default_value=self._text(default) if default is not None else None,
            variadic=variadic,
        )

    # ---------------- Errors ----------------

    def _raise_first_error(self, root: Node) -> None:
        node = _first_error(root)
        if node is None:
            row, column = root.start_point
            raise SwiftSyntaxError("Unparseable Swift source", row + 1, column + 1)
        row, column = node.start_point
        if node.is_missing:
            raise SwiftSyntaxError(f"Expected '{node.type}'", row + 1, column + 1)
        snippet = self._text(node).strip().splitlines()
        shown = snippet[0][:40] if snippet else ""
        raise SwiftSyntaxError(f"Unexpected '{shown}'", row + 1, column + 1)

    # ---------------- Offsets ----------------

    def _char(self, byte_offset: int) -> int:
        if self._offsets is None:
            return byte_offset
        return self._offsets[byte_offset]

    def _start(self, node: Node) -> int:
        return self._char(node.start_byte)

    def _end(self, node: Node) -> int:
        return self._char(node.end_byte)

    def _text(self, node: Node) -> str:
        return self.source[self._start(node) : self._end(node)]

    def _span(self, nodes: Sequence[Node]) -> str:
        content = [node for node in nodes if node.type not in _TRIVIA]
        if not content:
            return ""
        return self.source[self._start(content[0]) : self._end(content[-1])]


def _char_offsets(source: str) -> List[int]:
    """Map every UTF-8 byte offset of ``source`` to its character offset."""
    offsets: List[int] = []
    for index, char in enumerate(source):
        offsets.extend([index] * len(char.encode("utf-8")))
    offsets.append(len(source))
    return offsets


def _split_on_commas(children: Sequence[Node], opener: str, closer: str) -> List[List[Node]]:
    """Split the children between ``opener`` and ``closer`` on top-level commas."""
    segments: List[List[Node]] = []
    current: Optional[List[Node]] = None
    for child in children:
        if current is None:
            if child.type == opener:
                current = []
            continue
        if child.type == closer:
            segments.append(current)
            break
        if child.type == ",":
            segments.append(current)
            current = []
            continue
        current.append(child)
    return segments


def _before(nodes: Sequence[Node], token: str) -> List[Node]:
    result: List[Node] = []
    for node in nodes:
        if node.type == token:
            break
        if node.is_named or node.type == "_":
            result.append(node)
    return result


def _is_one_of(node: Node, candidates: Sequence[Node]) -> bool:
    span = (node.start_byte, node.end_byte)
    return any((candidate.start_byte, candidate.end_byte) == span for candidate in candidates)


def _after(nodes: Sequence[Node], token: str) -> List[Node]:
    for index, node in enumerate(nodes):
        if node.type == token:
            return list(nodes[index + 1 :])
    return []


def _between(nodes: Sequence[Node], start: int, end: int) -> Optional[Node]:
    return next((node for node in nodes if start <= node.start_byte < end), None)


def _first_error(node: Node) -> Optional[Node]:
    if node.is_error or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


def parse_source(source: str) -> SourceTree:
    """Parse Swift ``source`` into a :class:`SourceTree`."""
    return SwiftParser(source).parse()


__all__ = ["SWIFT_LANGUAGE", "SwiftParser", "SwiftSyntaxError", "parse_source"]
