"""Shared CLI formatting helpers."""

from __future__ import annotations

from tasksync.contracts.report import SyncRunReport


def format_counts(report: SyncRunReport) -> str:
    summary = report.summary
    return (
        f"{summary.created} created, {summary.updated} updated, "
        f"{summary.skipped} skipped, {summary.failed} failed"
    )


def format_report(report: SyncRunReport) -> str:
    mode = "dry-run" if report.dry_run else "apply"
    lines = [
        "",
        f"tasksync - {report.direction.value} {report.status.value} ({mode})",
        "",
        f"  Run:       {report.run_id}",
        f"  Remote:    {report.remote} ({report.provider})",
        f"  Project:   {report.project or '-'}",
        f"  Items:     {report.summary.total} ({format_counts(report)})",
    ]

    failures = report.failures
    if failures:
        lines.append("")
        lines.append("  Failed:")
        for result in failures:
            label = " / ".join(part for part in (result.task_id, result.external_id) if part) or "(unknown)"
            lines.append(f"    {label}: {result.reason}")

    if report.warnings:
        lines.append("")
        lines.append("  Warnings:")
        lines.extend(f"    {warning}" for warning in report.warnings)

    if report.stored_path:
        lines.append("")
        lines.append(f"  Report:    {report.stored_path}")

    if report.dry_run:
        lines.append("")
        lines.append("  [dry-run] No changes were made")

    lines.append("")
    return "\n".join(lines)
