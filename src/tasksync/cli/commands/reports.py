"""``reports list`` / ``reports show`` commands."""

from __future__ import annotations

import argparse

from tasksync.cli.common import format_report
from tasksync.contracts.report import SyncReportList, SyncRunReport, SyncSummary


def _short_counts(summary: SyncSummary) -> str:
    return f"+{summary.created} ~{summary.updated} ={summary.skipped} !{summary.failed}"


def format_report_list(listing: SyncReportList) -> str:
    if not listing.reports:
        return "no sync reports found"
    lines = []
    for meta in listing.reports:
        mode = " [dry-run]" if meta.dry_run else ""
        lines.append(
            f"{meta.started_at}  {meta.direction.value:<4}  {meta.remote:<12} {meta.project or '-':<10} "
            f"{meta.status.value:<9} {_short_counts(meta.summary)}{mode}  {meta.stored_path}"
        )
    lines.append(f"({listing.offset + 1}-{listing.offset + len(listing.reports)} of {listing.total})")
    return "\n".join(lines)


def run_reports_list(args: argparse.Namespace) -> SyncReportList:
    import tasksync.cli as cli

    sdk = cli.TaskSync.from_config_files(args.config, args.home_config)
    listing = sdk.list_reports(project=args.project, limit=args.limit, offset=args.offset)
    print(listing.model_dump_json(indent=2) if args.json else format_report_list(listing))
    return listing


def run_reports_show(args: argparse.Namespace) -> SyncRunReport:
    import tasksync.cli as cli

    sdk = cli.TaskSync.from_config_files(args.config, args.home_config)
    report = sdk.read_report(args.path)
    print(report.model_dump_json(indent=2) if args.json else format_report(report))
    return report


__all__ = ["format_report_list", "run_reports_list", "run_reports_show"]
