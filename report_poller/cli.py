"""report-poller CLI: fetch a build's test report from the command line."""

import argparse
import logging
import sys
import time
from datetime import datetime
from pathlib import Path

from . import __version__
from .config import get_config_path, get_credentials_config, get_report_config, get_server_config
from .service import create_action, reset_client
from .state import BuildIdentity

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _mask(secret: str | None) -> str:
    if not secret:
        return "(not set)"
    return secret[:2] + "*" * max(len(secret) - 2, 4)


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return number


def _non_negative_float(value: str) -> float:
    number = float(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative, got {value}")
    return number


def setup_logging(verbose: bool = False, log_file: str | None = None) -> None:
    """Configure root logging for the CLI."""
    kwargs = {}
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        kwargs["filename"] = log_file
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        **kwargs,
    )


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------

def cmd_fetch(args: argparse.Namespace) -> None:
    """Poll until the report is final, then print or save it."""
    build = BuildIdentity(name=args.build_name, started_at=args.started_at)
    try:
        action = create_action(
            build,
            workspace=Path(args.workspace) if args.workspace else None,
            archive_dir=Path(args.archive_dir) if args.archive_dir else None,
        )
    except RuntimeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    view = {}
    try:
        for attempt in range(1, args.max_polls + 1):
            view = action.render()
            print(f"[{datetime.now().isoformat()}] Poll {attempt}: {view['state']}")
            if action.poller.state.is_terminal or attempt == args.max_polls:
                break
            time.sleep(args.interval)
    finally:
        reset_client()

    if not view.get("available"):
        if view.get("rate_limited"):
            print("Report service rate limited this account", file=sys.stderr)
        else:
            print(f"No report available for {build.name} ({view.get('state')})", file=sys.stderr)
        sys.exit(1)

    content = view["html"] or ""
    if view["style"]:
        content = f"<style>{view['style']}</style>\n{content}"

    if args.output:
        Path(args.output).write_text(content, encoding="utf-8")
        print(f"Report written to {args.output}")
    else:
        print(content)


def cmd_config(args: argparse.Namespace) -> None:
    """Show the effective configuration."""
    print(f"  {'config file':25s}  {get_config_path()}")
    try:
        server = get_server_config()
    except RuntimeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    credentials = get_credentials_config()
    settings = {
        "server.url": server["url"],
        "server.report_endpoint": server["report_endpoint"],
        "server.timeout": server["timeout"],
        "credentials.username": credentials["username"] or "(not set)",
        "credentials.access_key": _mask(credentials["access_key"]),
    }
    for key, value in get_report_config().items():
        settings[f"report.{key}"] = value

    for key, value in settings.items():
        print(f"  {key:25s}  {value}")


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="report-poller",
        description="Fetch test reports from the report service",
    )
    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--log-file", help="Write logs to this file instead of stderr")
    sub = parser.add_subparsers(dest="command")

    # fetch
    p_fetch = sub.add_parser("fetch", help="Poll until a build's report is ready")
    p_fetch.add_argument("--build-name", "-b", required=True, help="Build name")
    p_fetch.add_argument("--started-at", "-s", required=True, help="Build start timestamp")
    p_fetch.add_argument("--interval", "-i", type=_non_negative_float, default=5.0, help="Seconds between polls")
    p_fetch.add_argument("--max-polls", "-n", type=_positive_int, default=60, help="Give up after this many polls")
    p_fetch.add_argument("--workspace", "-w", help="Write the report artifact under this directory")
    p_fetch.add_argument("--archive-dir", help="Also archive the artifact here")
    p_fetch.add_argument("--output", "-o", help="Save the report HTML to this file")
    p_fetch.set_defaults(func=cmd_fetch)

    # config
    p_config = sub.add_parser("config", help="Show effective configuration")
    p_config.set_defaults(func=cmd_config)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(0)

    setup_logging(args.verbose, args.log_file)
    args.func(args)


if __name__ == "__main__":
    main()
