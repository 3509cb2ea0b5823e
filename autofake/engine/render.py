"""Serialization of generated members into Swift source text."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from ..models import (
    AnnexHelper,
    Argument,
    GeneratedFunction,
    GeneratedMember,
    InitializerCall,
    MemberReturn,
)

DEFAULT_INDENT = "    "


def render_member(member: GeneratedMember, indent: str = DEFAULT_INDENT) -> str:
    """Render one generated member without any leading indentation."""
    if isinstance(member, AnnexHelper):
        return render_annex(member, indent)
    return render_function(member, indent)


def render_members(members: Iterable[GeneratedMember], indent: str = DEFAULT_INDENT) -> str:
    """Render members separated by blank lines."""
    return "\n\n".join(render_member(member, indent) for member in members)


def render_annex(helper: AnnexHelper, indent: str = DEFAULT_INDENT) -> str:
    body = _indent_continuation(f"return {helper.expression}", indent)
    return "\n".join(
        [
            f"static func {helper.name}() -> {helper.return_type} {{",
            f"{indent}{body}",
            "}",
        ]
    )


def render_function(function: GeneratedFunction, indent: str = DEFAULT_INDENT) -> str:
    header = f"static func {function.name}"
    body = function.body

    if isinstance(body, MemberReturn):
        reference = f".{body.member}{_call_suffix(body.arguments)}"
        return "\n".join(
            [
                f"{header}() -> {function.return_type} {{",
                f"{indent}return {reference}",
                "}",
            ]
        )

    assert isinstance(body, InitializerCall)
    if not function.parameters:
        return "\n".join(
            [
                f"{header}() -> {function.return_type} {{",
                f"{indent}Self({_join_arguments(body.arguments)})",
                "}",
            ]
        )

    parameters = ", ".join(
        f"{parameter.name}: {parameter.type.text} = {parameter.default}"
        for parameter in function.parameters
    )
    lines: List[str] = [
        f"{header}(",
        f"{indent}{parameters}",
        f") -> {function.return_type} {{",
        f"{indent}Self(",
        f"{indent}{indent}{_join_arguments(body.arguments)}",
        f"{indent})",
        "}",
    ]
    return "\n".join(lines)


def _call_suffix(arguments: Optional[Sequence[Argument]]) -> str:
    if arguments is None:
        return ""
    return f"({_join_arguments(arguments)})"


def _join_arguments(arguments: Sequence[Argument]) -> str:
    return ", ".join(
        f"{argument.label}: {argument.value}" if argument.label is not None else argument.value
        for argument in arguments
    )


def _indent_continuation(text: str, indent: str) -> str:
    lines = text.splitlines() or [""]
    return "\n".join([lines[0], *(f"{indent}{line}" if line else line for line in lines[1:])])


__all__ = [
    "DEFAULT_INDENT",
    "render_annex",
    "render_function",
    "render_member",
    "render_members",
]
