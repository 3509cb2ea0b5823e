"""Swift declaration parsing for the expansion harness."""

from .nodes import SourceTree, TypeDecl
from .parser import SwiftParser, SwiftSyntaxError, parse_source

__all__ = [
    "SourceTree",
    "SwiftParser",
    "SwiftSyntaxError",
    "TypeDecl",
    "parse_source",
]
