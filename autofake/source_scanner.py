"""Discovery of Swift sources to expand."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Sequence

from .config import ConfigError, load_config
from .models import SourceFile, SourceManifest

SWIFT_SUFFIX = ".swift"

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".build",
    ".swiftpm",
    "DerivedData",
    "Pods",
    "Carthage",
    "node_modules",
    ".idea",
}


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or .autofake.yml."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            return self.directory_only and rel_path.startswith(f"{self.pattern}/")

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def _build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def _parse_patterns(lines: Sequence[str]) -> List[IgnoreRule]:
    rules: List[IgnoreRule] = []
    for raw_line in lines:
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = _build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def _load_ignore_rules(root: Path, exclude_paths: Sequence[str] | None) -> List[IgnoreRule]:
    gitignore = root / ".gitignore"
    rules = _parse_patterns(gitignore.read_text(encoding="utf-8").splitlines()) if gitignore.exists() else []
    if exclude_paths is None:
        try:
            exclude_paths = load_config(root).exclude_paths
        except ConfigError:
            exclude_paths = []
    rules.extend(_parse_patterns(list(exclude_paths)))
    return rules


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def _iter_swift_files(root: Path, rules: Sequence[IgnoreRule]) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

        kept_dirs = []
        for name in sorted(dirnames):
            if name in _EXCLUDED_DIRS:
                continue
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            if _should_ignore(rel_path, True, rules):
                continue
            kept_dirs.append(name)
        dirnames[:] = kept_dirs

        for filename in sorted(filenames):
            if not filename.endswith(SWIFT_SUFFIX):
                continue
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if _should_ignore(rel_path, False, rules):
                continue
            yield current_dir / filename


class SourceScanner:
    """Walks a directory (or accepts a single file) to list Swift sources."""

    def __init__(self, exclude_paths: Sequence[str] | None = None) -> None:
        self._exclude_paths = list(exclude_paths) if exclude_paths is not None else None

    def scan(self, path: str | Path) -> SourceManifest:
        """Return the Swift files under ``path`` in a stable order."""
        target = Path(path).expanduser().resolve()
        if not target.exists():
            raise FileNotFoundError(f"Source path not found: {path}")

        if target.is_file():
            return SourceManifest(
                root=target.parent,
                files=[SourceFile(path=target.name, size=target.stat().st_size)],
            )

        rules = _load_ignore_rules(target, self._exclude_paths)
        files = [
            SourceFile(path=file.relative_to(target).as_posix(), size=file.stat().st_size)
            for file in _iter_swift_files(target, rules)
        ]
        return SourceManifest(root=target, files=files)


__all__ = ["IgnoreRule", "SourceScanner", "SWIFT_SUFFIX"]
