"""Pull/push command execution and formatting."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import signal
from collections.abc import Iterator

from tasksync.cli.common import format_report
from tasksync.cli.progress.rich import RichSyncProgress
from tasksync.contracts.report import SyncDirection, SyncRunReport
from tasksync.engine.cancellation import CancellationToken


def format_sync_summary(report: SyncRunReport) -> str:
    return format_report(report)


@contextlib.contextmanager
def _cancel_on_interrupt(token: CancellationToken) -> Iterator[None]:
    """Turn the first Ctrl-C into a cooperative cancel so the partial report survives."""
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, token.cancel)
    except (NotImplementedError, RuntimeError):
        yield
        return
    try:
        yield
    finally:
        loop.remove_signal_handler(signal.SIGINT)


async def run_sync(args: argparse.Namespace, direction: SyncDirection) -> SyncRunReport:
    import tasksync.cli as cli

    token = CancellationToken()
    run_kwargs = {
        "project": args.project,
        "dry_run": args.dry_run,
        "auth_profile": args.auth_profile,
        "strict": args.strict,
        "write_report": False if args.no_report else None,
        "cancel_token": token,
    }

    with _cancel_on_interrupt(token):
        if not args.verbose and not args.json:
            with RichSyncProgress() as progress:
                sdk = cli.TaskSync.from_config_files(args.config, args.home_config, progress=progress)
                run = sdk.pull if direction is SyncDirection.PULL else sdk.push
                report = await run(args.remote, **run_kwargs)
        else:
            sdk = cli.TaskSync.from_config_files(args.config, args.home_config)
            run = sdk.pull if direction is SyncDirection.PULL else sdk.push
            report = await run(args.remote, **run_kwargs)

    if args.json:
        print(report.model_dump_json(indent=2))
    else:
        print(cli._format_summary(report))
    return report


async def run_pull(args: argparse.Namespace) -> SyncRunReport:
    return await run_sync(args, SyncDirection.PULL)


async def run_push(args: argparse.Namespace) -> SyncRunReport:
    return await run_sync(args, SyncDirection.PUSH)


__all__ = ["format_sync_summary", "run_pull", "run_push", "run_sync"]
