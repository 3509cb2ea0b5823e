"""Tests for autofake.source_scanner."""

from __future__ import annotations

from pathlib import Path

import pytest

from autofake.source_scanner import SourceScanner
from tests._fixtures.source_builder import SourceBuilder


def test_scan_lists_swift_files_in_stable_order(source_builder: SourceBuilder) -> None:
    source_builder.write(
        {
            "Sources/App/Model.swift": "struct Model {}\n",
            "Sources/App/View.swift": "struct View {}\n",
            "Package.swift": "// swift-tools-version:5.9\n",
            "README.md": "# Readme\n",
            "Tests/AppTests/ModelTests.swift": "final class ModelTests {}\n",
        }
    )

    manifest = source_builder.scan()

    assert manifest.root == source_builder.path().resolve()
    assert [file.path for file in manifest.files] == [
        "Package.swift",
        "Sources/App/Model.swift",
        "Sources/App/View.swift",
        "Tests/AppTests/ModelTests.swift",
    ]
    assert manifest.files[1].size == len("struct Model {}\n")


def test_scan_skips_build_and_vcs_directories(source_builder: SourceBuilder) -> None:
    source_builder.write(
        {
            "Sources/Main.swift": "let x = 1\n",
            ".build/checkouts/Dep.swift": "let y = 1\n",
            "DerivedData/Gen.swift": "let z = 1\n",
            "Pods/Lib/Lib.swift": "let w = 1\n",
            ".git/hooks/hook.swift": "let v = 1\n",
        }
    )

    assert [file.path for file in source_builder.scan().files] == ["Sources/Main.swift"]


def test_scan_respects_gitignore(source_builder: SourceBuilder) -> None:
    source_builder.write(
        {
            ".gitignore": "Generated/\n*.generated.swift\n!Keep.generated.swift\n",
            "Generated/Mocks.swift": "struct Mock {}\n",
            "Sources/Api.generated.swift": "struct Api {}\n",
            "Sources/Keep.generated.swift": "struct Keep {}\n",
            "Sources/Real.swift": "struct Real {}\n",
        }
    )

    paths = [file.path for file in source_builder.scan().files]

    assert paths == ["Sources/Keep.generated.swift", "Sources/Real.swift"]


def test_scan_applies_config_exclude_paths(source_builder: SourceBuilder) -> None:
    source_builder.write(
        {
            ".autofake.yml": """
                exclude_paths:
                  - /Fixtures/
                  - "*Preview.swift"
                """,
            "Fixtures/Sample.swift": "struct Sample {}\n",
            "Sources/Fixtures/Nested.swift": "struct Nested {}\n",
            "Sources/CardPreview.swift": "struct CardPreview {}\n",
            "Sources/Card.swift": "struct Card {}\n",
        }
    )

    paths = [file.path for file in source_builder.scan().files]

    assert paths == ["Sources/Card.swift", "Sources/Fixtures/Nested.swift"]


def test_explicit_exclude_paths_override_config(source_builder: SourceBuilder) -> None:
    source_builder.write(
        {
            ".autofake.yml": "exclude_paths: ['Sources/']\n",
            "Sources/A.swift": "struct A {}\n",
            "Other/B.swift": "struct B {}\n",
        }
    )

    manifest = SourceScanner(exclude_paths=["Other/"]).scan(source_builder.path())

    assert [file.path for file in manifest.files] == ["Sources/A.swift"]


def test_scan_accepts_single_file(source_builder: SourceBuilder) -> None:
    source_builder.write({"Sources/One.swift": "struct One {}\n"})
    target = source_builder.path() / "Sources" / "One.swift"

    manifest = SourceScanner().scan(target)

    assert manifest.root == target.parent.resolve()
    assert [file.path for file in manifest.files] == ["One.swift"]


def test_scan_rejects_missing_path(tmp_path: Path) -> None:
    missing = tmp_path / "missing"

    with pytest.raises(FileNotFoundError) as excinfo:
        SourceScanner().scan(missing)

    assert str(missing) in str(excinfo.value)
