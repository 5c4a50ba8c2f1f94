"""CLI parser construction."""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version


def _package_version() -> str:
    try:
        return version("tasksync")
    except PackageNotFoundError:
        return "0.0.0"


def _add_config_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", default=None, help="Path to tasksync.json (default: nearest one upwards)")
    parser.add_argument(
        "--home-config",
        default=None,
        help="Path to the home config holding auth profiles (default: $TASKSYNC_HOME_CONFIG or "
        "~/.config/tasksync/config.json)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")


def _add_run_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("remote", help="Remote name from the project config")
    parser.add_argument("--project", default=None, help="Local project (default: default_project)")
    parser.add_argument("--auth-profile", default=None, help="Auth profile overriding the remote's auth_profile")
    parser.add_argument("--dry-run", action="store_true", help="Compute and report changes without writing them")
    parser.add_argument("--strict", action="store_true", help="Abort the run on the first failed item")
    parser.add_argument("--no-report", action="store_true", help="Do not persist the run report")
    parser.add_argument("--json", action="store_true", help="Print the run report as JSON")
    _add_config_flags(parser)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tasksync")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_package_version()}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    pull_parser = subparsers.add_parser("pull", help="Pull remote issues into local tasks")
    _add_run_flags(pull_parser)

    push_parser = subparsers.add_parser("push", help="Push local tasks to remote issues")
    _add_run_flags(push_parser)

    sync_parser = subparsers.add_parser("sync", help="Sync remote operations")
    sync_subparsers = sync_parser.add_subparsers(dest="sync_command", required=True)
    check_parser = sync_subparsers.add_parser("check", help="Validate a remote's mapping, auth, target and filter")
    check_parser.add_argument("remote", help="Remote name from the project config")
    check_parser.add_argument("--auth-profile", default=None, help="Auth profile overriding the remote's auth_profile")
    check_parser.add_argument("--json", action="store_true", help="Print the check result as JSON")
    _add_config_flags(check_parser)

    reports_parser = subparsers.add_parser("reports", help="Inspect persisted run reports")
    reports_subparsers = reports_parser.add_subparsers(dest="reports_command", required=True)
    list_parser = reports_subparsers.add_parser("list", help="List reports, newest first")
    list_parser.add_argument("--project", default=None, help="Only reports for this project")
    list_parser.add_argument("--limit", type=int, default=20, help="Maximum reports to list (default: 20)")
    list_parser.add_argument("--offset", type=int, default=0, help="Reports to skip (default: 0)")
    list_parser.add_argument("--json", action="store_true", help="Print the listing as JSON")
    _add_config_flags(list_parser)
    show_parser = reports_subparsers.add_parser("show", help="Print one report")
    show_parser.add_argument("path", help="Report path relative to the reports directory")
    show_parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    _add_config_flags(show_parser)

    return parser


__all__ = ["build_parser"]
