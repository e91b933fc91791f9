"""CLI entrypoints for reposcan commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .logging import configure_logging
from .orchestrator import Orchestrator
from .renderer import ReportRenderer, render_json
from .walker import FatalInputError


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_scan_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the repository root (defaults to current directory).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit the structured report as JSON instead of text.",
    )
    parser.add_argument(
        "--no-external-tools",
        action="store_true",
        help="Do not use rg or tree even when they are installed.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reposcan",
        description="Classify a repository and report its structure and dependencies.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log records to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Report file statistics, project type, entry points, dependencies and tooling.",
    )
    _add_verbose_option(analyze_parser, suppress_default=True)
    _add_scan_options(analyze_parser)

    deps_parser = subparsers.add_parser(
        "deps",
        help="Map declared dependencies, internal modules and import patterns.",
    )
    _add_verbose_option(deps_parser, suppress_default=True)
    _add_scan_options(deps_parser)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service exposing repository analysis.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for reposcan commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    if args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
        return

    use_external_tools = False if args.no_external_tools else None
    orchestrator = Orchestrator(use_external_tools=use_external_tools)
    try:
        report = orchestrator.run(args.path)
    except FatalInputError as exc:
        parser.exit(1, f"{exc}\n")

    if args.json:
        print(render_json(report))
        return

    renderer = ReportRenderer()
    if args.command == "analyze":
        print(renderer.render(report), end="")
    elif args.command == "deps":
        print(renderer.render_dependency_map(report), end="")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
