"""Expansion harness: finds ``@AutoFake`` declarations and splices generated members."""

from __future__ import annotations

import difflib
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .config import AutoFakeConfig, FormatConfig, load_config
from .engine import expand_declaration, render_members
from .engine.inspector import DEFAULT_ANNOTATION
from .engine.synthesizer import UnsupportedDeclarationError
from .logging import get_logger
from .models import Expansion, StrategyName
from .source_scanner import SourceScanner
from .syntax import SwiftSyntaxError, TypeDecl, parse_source
from .syntax.nodes import Attribute, PropertyDecl

TRIGGER_ATTRIBUTE = "AutoFake"

_BLANK_LINE_END = re.compile(r"\n[ \t]*\n$")


class ExpansionError(RuntimeError):
    """Raised when a source file cannot be expanded."""

    def __init__(self, message: str, *, filename: str, declaration: Optional[str] = None) -> None:
        super().__init__(message)
        self.filename = filename
        self.declaration = declaration


@dataclass
class ExpandedDeclaration:
    """Summary of one generated ``fake`` constructor."""

    name: str
    keyword: str
    strategy: StrategyName
    parameters: List[str]
    annexes: List[str]
    line: int


@dataclass
class ExpansionResult:
    source: str
    declarations: List[ExpandedDeclaration] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.declarations)


@dataclass
class FileOutcome:
    """Per-file result of an ``expand_path`` run."""

    path: Path
    result: Optional[ExpansionResult] = None
    written: Optional[Path] = None
    diff: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class RunOutcome:
    root: Path
    files: List[FileOutcome] = field(default_factory=list)

    @property
    def failures(self) -> List[FileOutcome]:
        return [outcome for outcome in self.files if not outcome.ok]

    @property
    def changed(self) -> List[FileOutcome]:
        return [
            outcome
            for outcome in self.files
            if outcome.result is not None and outcome.result.changed
        ]


# (start, end, replacement) over the original source text.
_Edit = Tuple[int, int, str]


class Expander:
    """Coordinates parsing, synthesis and splicing for Swift sources."""

    def __init__(
        self,
        config: AutoFakeConfig | None = None,
        scanner: SourceScanner | None = None,
    ) -> None:
        self.config = config
        self.scanner = scanner
        self.logger = get_logger("expander")

    def expand_source(self, source: str, filename: str = "<memory>") -> ExpansionResult:
        """Expand every annotated declaration of ``source``.

        Raises :class:`ExpansionError` when the file does not parse or an
        annotated declaration cannot carry a generator. Nothing is returned for
        a failing file; partial expansions are never produced.
        """
        fmt = self.config.format if self.config is not None else FormatConfig()
        return self._expand_source(source, filename, fmt.indent_unit)

    def _expand_source(self, source: str, filename: str, unit: str) -> ExpansionResult:
        try:
            tree = parse_source(source)
        except SwiftSyntaxError as exc:
            raise ExpansionError(f"{filename}: {exc}", filename=filename) from exc

        edits: List[_Edit] = []
        declarations: List[ExpandedDeclaration] = []
        for decl in tree.walk():
            trigger = decl.attribute(TRIGGER_ATTRIBUTE)
            if trigger is None:
                continue
            try:
                expansion = expand_declaration(decl)
            except UnsupportedDeclarationError as exc:
                raise ExpansionError(
                    f"{filename}:{decl.line}: {exc}",
                    filename=filename,
                    declaration=decl.name,
                ) from exc

            self.logger.debug(
                "Expanded %s %s via %s (%d annex helper(s))",
                decl.keyword,
                decl.name,
                expansion.generator.strategy,
                len(expansion.annexes),
            )
            edits.append(_removal(source, trigger))
            edits.extend(_removal(source, attr) for attr in _default_annotations(decl))
            edits.append(_insertion(source, decl, render_members(expansion.members, unit), unit))
            declarations.append(_summarize(decl, expansion))

        if not edits:
            return ExpansionResult(source=source)
        return ExpansionResult(source=_apply(source, edits), declarations=declarations)

    def expand_path(
        self,
        path: str | Path,
        *,
        output_dir: str | Path | None = None,
        dry_run: bool = False,
    ) -> RunOutcome:
        """Expand one file or every Swift file under a directory.

        Files that fail are recorded on the outcome and the run continues.
        """
        target = Path(path).expanduser().resolve()
        if not target.exists():
            raise FileNotFoundError(f"Source path not found: {path}")
        config = self.config or load_config(target if target.is_dir() else target.parent)

        scanner = self.scanner or SourceScanner(exclude_paths=config.exclude_paths)
        manifest = scanner.scan(target)
        destination = _resolve_output_dir(output_dir, config)
        self.logger.debug("Scanner discovered %d Swift file(s)", len(manifest.files))

        run = RunOutcome(root=manifest.root)
        for entry in manifest.files:
            source_path = manifest.root / entry.path
            if destination is not None and _is_within(source_path, destination):
                continue
            run.files.append(
                self._expand_file(
                    source_path,
                    entry.path,
                    destination,
                    unit=config.format.indent_unit,
                    dry_run=dry_run,
                )
            )

        self.logger.info(
            "Expanded %d of %d file(s) under %s (%d failed)",
            len(run.changed),
            len(run.files),
            manifest.root,
            len(run.failures),
        )
        return run

    def _expand_file(
        self,
        source_path: Path,
        rel_path: str,
        destination: Optional[Path],
        *,
        unit: str,
        dry_run: bool,
    ) -> FileOutcome:
        outcome = FileOutcome(path=source_path)
        try:
            original = source_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            self.logger.error("Failed to read %s: %s", rel_path, exc)
            outcome.error = f"{rel_path}: {exc}"
            return outcome
        try:
            result = self._expand_source(original, rel_path, unit)
        except ExpansionError as exc:
            self.logger.error("Failed to expand %s: %s", rel_path, exc)
            outcome.error = str(exc)
            return outcome

        outcome.result = result
        if result.changed:
            self.logger.info(
                "Generated %d fake constructor(s) in %s", len(result.declarations), rel_path
            )
        if dry_run:
            outcome.diff = self._render_diff(original, result.source, rel_path)
        elif destination is not None:
            written = destination / rel_path
            written.parent.mkdir(parents=True, exist_ok=True)
            written.write_text(result.source, encoding="utf-8")
            outcome.written = written
        return outcome

    @staticmethod
    def _render_diff(original: str, updated: str, rel_path: str) -> str:
        if original == updated:
            return ""
        diff = difflib.unified_diff(
            original.splitlines(keepends=True),
            updated.splitlines(keepends=True),
            fromfile=f"{rel_path} (original)",
            tofile=f"{rel_path} (expanded)",
        )
        return "".join(diff)


def _resolve_output_dir(output_dir: str | Path | None, config: AutoFakeConfig) -> Optional[Path]:
    if output_dir is not None:
        return Path(output_dir).expanduser().resolve()
    if config.output.directory is not None:
        return config.output.directory.resolve()
    return None


def _default_annotations(decl: TypeDecl) -> List[Attribute]:
    return [
        attr
        for member in decl.members
        if isinstance(member, PropertyDecl)
        for attr in member.attributes
        if attr.name == DEFAULT_ANNOTATION
    ]


def _summarize(decl: TypeDecl, expansion: Expansion) -> ExpandedDeclaration:
    return ExpandedDeclaration(
        name=decl.name,
        keyword=decl.keyword,
        strategy=expansion.generator.strategy,
        parameters=[parameter.name for parameter in expansion.generator.parameters],
        annexes=[helper.name for helper in expansion.annexes],
        line=decl.line,
    )


def _line_start(source: str, offset: int) -> int:
    return source.rfind("\n", 0, offset) + 1


def _line_indent(source: str, offset: int) -> str:
    start = _line_start(source, offset)
    end = start
    while end < len(source) and source[end] in " \t":
        end += 1
    return source[start:end]


def _removal(source: str, attribute: Attribute) -> _Edit:
    """Edit deleting ``attribute``; a line holding only the attribute goes entirely."""
    start = _line_start(source, attribute.start)
    newline = source.find("\n", attribute.end)
    line_end = len(source) if newline == -1 else newline
    if not source[start : attribute.start].strip() and not source[attribute.end : line_end].strip():
        return (start, min(line_end + 1, len(source)), "")

    end = attribute.end
    while end < len(source) and source[end] in " \t":
        end += 1
    return (attribute.start, end, "")


def _insertion(source: str, decl: TypeDecl, rendered: str, unit: str) -> _Edit:
    """Edit placing ``rendered`` before the closing brace, one level deeper than ``decl``."""
    outer = _line_indent(source, decl.keyword_start)
    block = _indent_block(rendered, outer + unit)
    close = decl.body_end

    line_start = _line_start(source, close)
    if not source[line_start:close].strip():
        preceding = source[decl.body_start + 1 : line_start]
        lead = "" if not preceding.strip() or _BLANK_LINE_END.search(preceding) else "\n"
        return (line_start, line_start, f"{lead}{block}\n")

    start = close
    while start > decl.body_start + 1 and source[start - 1] in " \t":
        start -= 1
    lead = "\n" if not source[decl.body_start + 1 : start].strip() else "\n\n"
    return (start, close, f"{lead}{block}\n{outer}")


def _indent_block(text: str, indent: str) -> str:
    return "\n".join(f"{indent}{line}" if line else line for line in text.split("\n"))


def _apply(source: str, edits: Sequence[_Edit]) -> str:
    result = source
    for start, end, replacement in sorted(edits, key=lambda edit: (edit[0], edit[1]), reverse=True):
        result = result[:start] + replacement + result[end:]
    return result


def _is_within(path: Path, directory: Path) -> bool:
    try:
        path.resolve().relative_to(directory)
    except ValueError:
        return False
    return True


__all__ = [
    "ExpandedDeclaration",
    "Expander",
    "ExpansionError",
    "ExpansionResult",
    "FileOutcome",
    "RunOutcome",
    "TRIGGER_ATTRIBUTE",
]
