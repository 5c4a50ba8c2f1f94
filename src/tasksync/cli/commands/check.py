"""``sync check`` command."""

from __future__ import annotations

import argparse

from tasksync.contracts.report import SyncCheckResult


def format_check_summary(result: SyncCheckResult) -> str:
    lines = [
        "",
        f"tasksync - check {result.status}",
        "",
        f"  Remote:    {result.remote} ({result.provider})",
        f"  Target:    {result.target}",
        f"  Filter:    {result.filter or '-'}",
        f"  Mapping:   {result.rules} rules",
    ]
    if result.warnings:
        lines.append("")
        lines.append("  Warnings:")
        lines.extend(f"    {warning}" for warning in result.warnings)
    lines.append("")
    return "\n".join(lines)


async def run_check(args: argparse.Namespace) -> SyncCheckResult:
    import tasksync.cli as cli

    sdk = cli.TaskSync.from_config_files(args.config, args.home_config)
    result = await sdk.check(args.remote, auth_profile=args.auth_profile)
    if args.json:
        print(result.model_dump_json(indent=2))
    else:
        print(format_check_summary(result))
    return result


__all__ = ["format_check_summary", "run_check"]
