"""Custom-default annex helpers."""

from __future__ import annotations

from typing import List, Set, Tuple

from ..models import AnnexHelper, ShapeReport
from .resolver import annex_name


def emit_annexes(report: ShapeReport) -> Tuple[AnnexHelper, ...]:
    """Return one helper per annotated stored field, in declaration order.

    The helper body is the annotation expression verbatim; the resolver only
    ever references it by name, so it is evaluated once per ``fake()`` call.
    """
    helpers: List[AnnexHelper] = []
    seen: Set[str] = set()
    for field in report.fields:
        if not field.has_annex:
            continue
        name = annex_name(field.name)
        if name in seen:
            continue
        seen.add(name)
        assert field.default_expression is not None and field.type is not None
        helpers.append(
            AnnexHelper(
                name=name,
                field=field.name,
                return_type=field.type.text,
                expression=field.default_expression,
            )
        )
    return tuple(helpers)


__all__ = ["emit_annexes"]
