"""Tests for autofake.syntax.parser."""

from __future__ import annotations

import pytest

from autofake.syntax import SwiftSyntaxError, parse_source
from autofake.syntax.nodes import EnumCaseDecl, InitializerDecl, OtherDecl, PropertyDecl, TypeDecl
from tests._fixtures.source_builder import swift


def _only_decl(source: str) -> TypeDecl:
    tree = parse_source(swift(source))
    assert len(tree.declarations) == 1
    return tree.declarations[0]


def _properties(decl: TypeDecl) -> list[PropertyDecl]:
    return [member for member in decl.members if isinstance(member, PropertyDecl)]


def test_type_declaration_header() -> None:
    decl = _only_decl(
        """
        @AutoFake @MainActor
        public final class Box<T: Equatable>: Base, Codable where T: Hashable {
        }
        """
    )

    assert decl.keyword == "class"
    assert decl.name == "Box"
    assert [attr.name for attr in decl.attributes] == ["AutoFake", "MainActor"]
    assert decl.modifiers == ["public", "final"]
    assert decl.inherited == ["Base", "Codable"]
    assert decl.line == 2
    assert decl.attribute("AutoFake") is not None
    assert decl.attribute("Missing") is None


def test_body_offsets_point_at_braces() -> None:
    source = "struct A { let x: Int }"
    decl = parse_source(source).declarations[0]

    assert source[decl.body_start] == "{"
    assert source[decl.body_end] == "}"
    assert source[decl.keyword_start:].startswith("struct")


def test_property_types_ignore_trailing_comments() -> None:
    decl = _only_decl(
        """
        struct User {
            let flag: Bool? // note
            let dict: [String: [Int]] /* block */
            var wrapped: Optional<Array<Int>> = nil
            let a, b: Int
        }
        """
    )

    bindings = [prop.bindings for prop in _properties(decl)]
    assert bindings[0][0].type_text == "Bool?"
    assert bindings[1][0].type_text == "[String: [Int]]"
    assert bindings[2][0].type_text == "Optional<Array<Int>>"
    assert bindings[2][0].initializer == "nil"
    assert [binding.pattern for binding in bindings[3]] == ["a", "b"]


def test_multiline_initializer_expression() -> None:
    decl = _only_decl(
        """
        struct Config {
            static let shared = Config(
                name: "x"
            )
            let next: Int
        }
        """
    )

    props = _properties(decl)
    assert props[0].modifiers == ["static"]
    assert props[0].bindings[0].initializer == 'Config(\n        name: "x"\n    )'
    assert props[1].bindings[0].pattern == "next"
    assert props[1].bindings[0].initializer is None


def test_accessor_blocks_distinguish_getters_and_observers() -> None:
    decl = _only_decl(
        """
        struct Counter {
            var value: Int = 0 {
                didSet { print(value) }
            }
            var doubled: Int { value * 2 }
            var name: String {
                get { "n" }
                set { }
            }
        }
        """
    )

    observed, computed, accessors = (prop.bindings[0] for prop in _properties(decl))
    assert observed.initializer == "0"
    assert observed.accessor is not None
    assert observed.accessor.kind == "accessors"
    assert observed.accessor.specifiers == ("didSet",)
    assert computed.accessor is not None
    assert computed.accessor.kind == "getter"
    assert accessors.accessor is not None
    assert accessors.accessor.specifiers == ("get", "set")


def test_enum_cases() -> None:
    decl = _only_decl(
        """
        enum Payload {
            case text(String), pair(first: Int, _ second: Int)
            indirect case nested(Payload)
            case code = 3
        }
        """
    )

    elements = [
        element
        for member in decl.members
        if isinstance(member, EnumCaseDecl)
        for element in member.elements
    ]
    assert [element.name for element in elements] == ["text", "pair", "nested", "code"]
    assert elements[0].parameters is not None
    assert elements[0].parameters[0].label is None
    assert elements[0].parameters[0].type_text == "String"
    assert elements[1].parameters is not None
    assert [(p.label, p.type_text) for p in elements[1].parameters] == [("first", "Int"), (None, "Int")]
    assert elements[3].parameters is None
    assert elements[3].raw_value == "3"


def test_initializer_parameters() -> None:
    decl = _only_decl(
        """
        struct Item {
            init(_ value: Int, label name: String = "x", values: Int..., handler: @escaping (Int) -> Void) {
                self.value = value
            }
            init?(from decoder: Decoder) throws {}
        }
        """
    )

    inits = [member for member in decl.members if isinstance(member, InitializerDecl)]
    first, second = inits
    names = [(p.first_name, p.second_name) for p in first.parameters]
    assert names == [("_", "value"), ("label", "name"), ("values", None), ("handler", None)]
    assert first.parameters[1].default_value == '"x"'
    assert first.parameters[2].variadic is True
    assert first.parameters[2].type_text == "Int"
    assert first.parameters[3].type_text == "@escaping (Int) -> Void"
    assert second.failable is True
    assert second.parameters[0].type_text == "Decoder"


def test_other_members_are_skipped() -> None:
    decl = _only_decl(
        """
        class Service {
            typealias Handler = (Int) -> Void
            func load() async throws -> [Int] { [] }
            class func make() -> Service { Service() }
            subscript(index: Int) -> Int { index }
            deinit {}
            let id: Int
        }
        """
    )

    kinds = [type(member).__name__ for member in decl.members]
    assert kinds == ["OtherDecl"] * 5 + ["PropertyDecl"]
    assert [member.keyword for member in decl.members if isinstance(member, OtherDecl)] == [
        "typealias",
        "func",
        "func",
        "subscript",
        "deinit",
    ]


def test_members_under_compiler_directives_are_not_direct_members() -> None:
    decl = _only_decl(
        """
        struct Flags {
            #if DEBUG
            let debug: Bool
            #else
            let release: Bool
            #endif
            let shared: Int
        }
        """
    )

    assert [prop.bindings[0].pattern for prop in _properties(decl)] == ["shared"]
    conditional = [m for m in decl.conditional_members if isinstance(m, PropertyDecl)]
    assert [prop.bindings[0].pattern for prop in conditional] == ["debug", "release"]


def test_nested_types_under_directives_are_still_walked() -> None:
    tree = parse_source(
        swift(
            """
            struct Outer {
                #if os(iOS)
                struct Mobile {}
                #endif
                struct Shared {}
            }
            """
        )
    )

    assert [decl.name for decl in tree.walk()] == ["Outer", "Mobile", "Shared"]
    assert [member.name for member in tree.declarations[0].members if isinstance(member, TypeDecl)] == [
        "Shared"
    ]


def test_nested_types_and_walk_order() -> None:
    tree = parse_source(
        swift(
            """
            struct Outer {
                enum Inner {
                    struct Deepest {}
                }
                struct Sibling {}
            }
            extension Outer.Inner: Equatable {}
            """
        )
    )

    assert [decl.name for decl in tree.walk()] == [
        "Outer",
        "Inner",
        "Deepest",
        "Sibling",
        "Outer.Inner",
    ]
    assert tree.declarations[1].keyword == "extension"
    assert tree.declarations[1].inherited == ["Equatable"]


def test_offsets_are_character_based_for_non_ascii_sources() -> None:
    source = 'let greeting = "héllo 👋"\nstruct A { let x: Int }\n'
    decl = parse_source(source).declarations[0]

    assert source[decl.keyword_start:].startswith("struct A")
    assert source[decl.body_end] == "}"


def test_malformed_source_raises_with_position() -> None:
    with pytest.raises(SwiftSyntaxError) as excinfo:
        parse_source("struct A {\n    let x: Int\n")
    assert excinfo.value.line >= 1

    with pytest.raises(SwiftSyntaxError):
        parse_source("struct A { ) }")
