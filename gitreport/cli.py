"""CLI entrypoints for gitreport commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import CONFIG_FILENAME, ConfigError, load_config
from .logging import configure_logging
from .orchestrator import ReportError, ReportOrchestrator, RepositoryNotFoundError


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


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitreport",
        description="Summarize recent GitHub repository activity per contributor.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    report_parser = subparsers.add_parser(
        "report",
        help="Print an activity report for a repository.",
    )
    _add_verbose_option(report_parser, suppress_default=True)
    report_parser.add_argument("owner", help="Repository owner (user or organization).")
    report_parser.add_argument("repo", help="Repository name.")
    report_parser.add_argument(
        "--user",
        default=None,
        help="Only report on this contributor.",
    )
    report_parser.add_argument(
        "--token",
        default=None,
        help="GitHub token for this run (defaults to GITHUB_TOKEN).",
    )
    report_parser.add_argument(
        "--days",
        type=int,
        default=None,
        help="Size of the activity window in days.",
    )
    report_parser.add_argument(
        "--config",
        default=".",
        help=f"Path to {CONFIG_FILENAME} or the directory holding it.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP report service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="0.0.0.0", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to bind.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for gitreport commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "report":
        try:
            config = load_config(Path(args.config))
        except ConfigError as exc:
            parser.exit(1, f"{exc}\n")
        configure_logging(verbose=bool(args.verbose), level=config.report.log_level)
        if args.days is not None and args.days <= 0:
            parser.exit(2, "--days must be a positive integer\n")

        orchestrator = ReportOrchestrator(config)
        try:
            text = orchestrator.run_report(
                args.owner,
                args.repo,
                username=args.user,
                token=args.token,
                days=args.days,
            )
        except RepositoryNotFoundError as exc:
            parser.exit(1, f"{exc}\n")
        except ReportError as exc:
            parser.exit(1, f"gitreport report failed: {exc}\nRun with --verbose for more details.\n")
        except RuntimeError as exc:  # pragma: no cover - defensive guard
            parser.exit(1, f"gitreport report failed: {exc}\nRun with --verbose for more details.\n")
        sys.stdout.write(text)
    elif args.command == "serve":
        configure_logging(verbose=bool(args.verbose))
        from .service import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
