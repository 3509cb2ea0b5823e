"""Tests for autofake.engine.synthesizer strategy selection."""

from __future__ import annotations

import pytest

from autofake.engine.annex import emit_annexes
from autofake.engine.inspector import inspect
from autofake.engine.synthesizer import UnsupportedDeclarationError, select_strategy, synthesize
from autofake.models import InitializerCall, MemberReturn
from autofake.syntax import parse_source
from tests._fixtures.source_builder import swift


def _synthesize(source: str):
    return synthesize(inspect(parse_source(swift(source)).declarations[0]))


def test_enum_with_cases_uses_first_case() -> None:
    generator = _synthesize(
        """
        enum Side {
            init(flag: Bool) { self = flag ? .left : .right }
            case left, right
        }
        """
    )

    assert generator.strategy == "enum_first_case"
    assert generator.parameters == ()
    assert generator.body == MemberReturn(member="left")


def test_enum_first_case_follows_declaration_order_not_name_order() -> None:
    generator = _synthesize(
        """
        enum Rank {
            case second, first
        }
        """
    )

    assert generator.body == MemberReturn(member="second")


def test_raw_representable_struct_returns_first_static() -> None:
    generator = _synthesize(
        """
        struct Level: RawRepresentable {
            let rawValue: Int
            init(rawValue: Int) { self.rawValue = rawValue }
            static let low = Level(rawValue: 0)
            static let high = Level(rawValue: 1)
        }
        """
    )

    assert generator.strategy == "raw_representable_singleton"
    assert generator.body == MemberReturn(member="low")


def test_raw_representable_without_statics_falls_through() -> None:
    generator = _synthesize(
        """
        struct Level: RawRepresentable {
            let rawValue: Int
        }
        """
    )

    assert generator.strategy == "memberwise_default"
    assert [parameter.name for parameter in generator.parameters] == ["rawValue"]


def test_raw_representable_class_is_not_a_singleton() -> None:
    generator = _synthesize(
        """
        final class Level: RawRepresentable {
            let rawValue: Int
            static let low = Level(rawValue: 0)
        }
        """
    )

    assert generator.strategy == "memberwise_default"


def test_manual_constructor_follows_parameter_order() -> None:
    generator = _synthesize(
        """
        struct Pair {
            @AutoFakeDefault(42)
            let right: Int
            let left: String
            init(_ right: Int, named left: String) {
                self.right = right
                self.left = left
            }
        }
        """
    )

    assert generator.strategy == "manual_constructor"
    assert [(p.name, p.default) for p in generator.parameters] == [
        ("right", "_autoFakeDefault_right()"),
        ("named", '""'),
    ]
    assert isinstance(generator.body, InitializerCall)
    assert [(a.label, a.value) for a in generator.body.arguments] == [(None, "right"), ("named", "named")]


def test_untyped_annotated_field_resolves_by_constructor_type() -> None:
    report = inspect(
        parse_source(
            swift(
                """
                struct Counter {
                    @AutoFakeDefault(1)
                    var count = 1
                    init(count: Int) {
                        self.count = count
                    }
                }
                """
            )
        ).declarations[0]
    )

    generator = synthesize(report)

    assert emit_annexes(report) == ()
    assert generator.strategy == "manual_constructor"
    assert [(p.name, p.default) for p in generator.parameters] == [("count", "0")]


def test_decoding_initializer_alone_falls_back_to_memberwise() -> None:
    generator = _synthesize(
        """
        struct Profile: Decodable {
            let name: String
            init(from decoder: Decoder) throws {
                name = ""
            }
        }
        """
    )

    assert generator.strategy == "memberwise_default"


def test_memberwise_skips_static_computed_and_untyped_fields() -> None:
    generator = _synthesize(
        """
        actor Cache {
            static var hits: Int = 0
            var entries: [String: Data]
            var count: Int { entries.count }
            var loaded = false
            var owner: User
        }
        """
    )

    assert generator.strategy == "memberwise_default"
    assert [(p.name, p.default) for p in generator.parameters] == [
        ("entries", "[:]"),
        ("owner", ".fake()"),
    ]


@pytest.mark.parametrize("keyword", ["protocol", "extension"])
def test_unsupported_declarations_raise(keyword: str) -> None:
    report = inspect(parse_source(f"{keyword} Thing {{}}").declarations[0])

    with pytest.raises(UnsupportedDeclarationError, match=f"{keyword} Thing"):
        select_strategy(report)
