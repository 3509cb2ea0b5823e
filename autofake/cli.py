"""CLI entrypoints for autofake commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List

from .config import ConfigError
from .expander import Expander, ExpansionError, RunOutcome
from .logging import configure_logging
from .syntax import SwiftSyntaxError


def _add_logging_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=argparse.SUPPRESS if suppress_default else None,
        help="Also write a DEBUG-level log of the run to this file.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="autofake",
        description="Generate static fake() constructors for @AutoFake Swift declarations.",
    )
    _add_logging_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    expand_parser = subparsers.add_parser(
        "expand",
        help="Expand @AutoFake declarations in a Swift file or source tree.",
    )
    _add_logging_options(expand_parser, suppress_default=True)
    expand_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Swift file or directory to expand (defaults to current directory).",
    )
    expand_parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Write expanded sources into this directory, mirroring the input layout.",
    )
    expand_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print a unified diff of the changes without writing anything.",
    )

    inspect_parser = subparsers.add_parser(
        "inspect",
        help="List annotated declarations with their generation strategy.",
    )
    _add_logging_options(inspect_parser, suppress_default=True)
    inspect_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Swift file or directory to inspect (defaults to current directory).",
    )
    inspect_parser.add_argument(
        "--json",
        action="store_true",
        help="Emit the report as JSON.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP expansion service (requires the 'service' extra).",
    )
    _add_logging_options(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for autofake commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    if args.command == "serve":
        try:
            from .service import run_service
        except ModuleNotFoundError as exc:
            parser.exit(
                1,
                f"Service mode requires FastAPI and uvicorn ({exc.name} is missing). "
                "Install them with `pip install autofake[service]`.\n",
            )
        run_service(host=args.host, port=args.port)
        return

    expander = Expander()
    dry_run = bool(getattr(args, "dry_run", False))
    try:
        run = expander.expand_path(
            args.path,
            output_dir=getattr(args, "output_dir", None),
            dry_run=dry_run if args.command == "expand" else True,
        )
    except (FileNotFoundError, ConfigError, ExpansionError, SwiftSyntaxError) as exc:
        parser.exit(1, f"autofake {args.command} failed: {exc}\n")

    if args.command == "expand":
        _report_expand(run, dry_run=dry_run)
    elif args.command == "inspect":
        _report_inspect(run, as_json=bool(args.json))
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")

    if run.failures:
        failures = "\n".join(f"  {outcome.error}" for outcome in run.failures)
        parser.exit(1, f"autofake {args.command} failed for {len(run.failures)} file(s):\n{failures}\n")


def _report_expand(run: RunOutcome, *, dry_run: bool) -> None:
    changed = run.changed
    if not changed:
        if not run.failures:
            print("No @AutoFake declarations found")
        return

    for outcome in changed:
        if dry_run:
            print(outcome.diff, end="")
        elif outcome.written is not None:
            print(f"Expanded {_relativize(outcome.path)} -> {_relativize(outcome.written)}")
        else:
            assert outcome.result is not None
            print(outcome.result.source, end="" if outcome.result.source.endswith("\n") else "\n")


def _report_inspect(run: RunOutcome, *, as_json: bool) -> None:
    entries: List[dict[str, object]] = []
    for outcome in run.changed:
        assert outcome.result is not None
        for declaration in outcome.result.declarations:
            entries.append(
                {
                    "file": _relativize(outcome.path),
                    "line": declaration.line,
                    "name": declaration.name,
                    "keyword": declaration.keyword,
                    "strategy": declaration.strategy,
                    "parameters": declaration.parameters,
                    "annexes": declaration.annexes,
                }
            )

    if as_json:
        print(json.dumps(entries, indent=2))
        return
    for entry in entries:
        parameters = ", ".join(entry["parameters"]) or "-"  # type: ignore[arg-type]
        print(
            f"{entry['file']}:{entry['line']}: {entry['keyword']} {entry['name']} "
            f"[{entry['strategy']}] parameters: {parameters}"
        )


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
