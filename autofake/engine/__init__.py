"""Declaration analysis and fake-generator synthesis."""

from __future__ import annotations

from ..models import Expansion
from ..syntax.nodes import TypeDecl
from .annex import emit_annexes
from .inspector import DEFAULT_ANNOTATION, describe_type, inspect
from .render import render_member, render_members
from .resolver import DEFAULT_LITERALS, annex_name, resolve_default
from .synthesizer import (
    GENERATOR_NAME,
    RAW_REPRESENTABLE_MARKER,
    UnsupportedDeclarationError,
    select_strategy,
    synthesize,
)


def expand_declaration(declaration: TypeDecl) -> Expansion:
    """Analyze one declaration and return its annex helpers and generator.

    Raises :class:`UnsupportedDeclarationError` before producing anything when
    the declaration cannot carry a generator.
    """
    report = inspect(declaration)
    generator = synthesize(report)
    return Expansion(report=report, generator=generator, annexes=emit_annexes(report))


__all__ = [
    "DEFAULT_ANNOTATION",
    "DEFAULT_LITERALS",
    "GENERATOR_NAME",
    "RAW_REPRESENTABLE_MARKER",
    "UnsupportedDeclarationError",
    "annex_name",
    "describe_type",
    "emit_annexes",
    "expand_declaration",
    "inspect",
    "render_member",
    "render_members",
    "resolve_default",
    "select_strategy",
    "synthesize",
]
