"""Default-value resolution for generated parameters."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from ..models import TypeDescriptor

ANNEX_PREFIX = "_autoFakeDefault_"
RECURSIVE_DEFAULT = ".fake()"
EMPTY_OPTIONAL = "nil"
EMPTY_ARRAY = "[]"
EMPTY_DICTIONARY = "[:]"

# Exact, case-sensitive type-name matches only; no alias or subtype resolution.
DEFAULT_LITERALS: Mapping[str, str] = MappingProxyType(
    {
        "String": '""',
        "Date": "Date(timeIntervalSinceReferenceDate: 0)",
        "Bool": "false",
        "URL": 'URL(string: "https://httpbin.org/get")!',
        "Int": "0",
        "Double": "0.0",
        "Float": "0.0",
        "CGFloat": "0.0",
        "CGRect": ".zero",
        "CGSize": ".zero",
        "CGPoint": ".zero",
    }
)


def annex_name(field_name: str) -> str:
    """Return the helper name materializing the custom default of ``field_name``."""
    return f"{ANNEX_PREFIX}{field_name.replace('`', '')}"


def resolve_default(
    name: str,
    descriptor: TypeDescriptor,
    *,
    has_custom_default: bool = False,
) -> str:
    """Return the default expression for a parameter named ``name``.

    Precedence: custom-default helper, then optional, array, dictionary, the
    literal table, and finally the referenced type's own ``fake()``. The last
    branch assumes that type is also annotated; nothing here verifies it.
    """
    if has_custom_default:
        return f"{annex_name(name)}()"
    if descriptor.kind == "optional":
        return EMPTY_OPTIONAL
    if descriptor.kind == "array":
        return EMPTY_ARRAY
    if descriptor.kind == "dictionary":
        return EMPTY_DICTIONARY
    return DEFAULT_LITERALS.get(descriptor.text, RECURSIVE_DEFAULT)


__all__ = [
    "ANNEX_PREFIX",
    "DEFAULT_LITERALS",
    "RECURSIVE_DEFAULT",
    "annex_name",
    "resolve_default",
]
