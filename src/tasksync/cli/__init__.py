"""Command-line interface for tasksync."""

from __future__ import annotations

import asyncio
import logging as logging

from tasksync import TaskSync as TaskSync
from tasksync.cli.app import main as main
from tasksync.cli.commands import check as check_command
from tasksync.cli.commands import reports as reports_command
from tasksync.cli.commands import sync as sync_command
from tasksync.cli.parser import build_parser as build_parser

_format_summary = sync_command.format_sync_summary

_run_pull = sync_command.run_pull
_run_push = sync_command.run_push
_run_check = check_command.run_check
_run_reports_list = reports_command.run_reports_list
_run_reports_show = reports_command.run_reports_show

__all__ = ["asyncio", "build_parser", "main"]

if __name__ == "__main__":
    raise SystemExit(main())
