"""Sync report persistence and query surface.

Reports are stored as ``<reports_dir>/<remote>-<timestamp>.json``. Every path
handed to :meth:`ReportStore.read` is relative to the reports root and must
resolve inside it.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime
from pathlib import Path, PurePath
from typing import Any

from pydantic import ValidationError

from tasksync.contracts.exceptions import ConfigError, SyncError
from tasksync.contracts.report import SyncReportList, SyncReportMeta, SyncRunReport

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def sanitize_component(value: str, max_len: int) -> str:
    cleaned = _UNSAFE_CHARS.sub("", re.sub(r"\s+", "-", value)).strip("-.")
    return (cleaned or "sync")[:max_len]


def report_timestamp(value: str) -> str:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return sanitize_component(value.replace(":", "-").replace(".", "-"), 32)
    return parsed.strftime("%Y-%m-%dT%H-%M-%S")


def report_filename(report: SyncRunReport) -> str:
    prefix = sanitize_component(report.remote, 24) if report.remote.strip() else sanitize_component(report.provider, 12)
    return f"{prefix}-{report_timestamp(report.started_at)}-{sanitize_component(report.run_id.rsplit('-', 1)[-1], 8)}.json"


def _meta(report: SyncRunReport, stored_path: str) -> SyncReportMeta:
    return SyncReportMeta(
        run_id=report.run_id,
        remote=report.remote,
        provider=report.provider,
        direction=report.direction,
        project=report.project,
        dry_run=report.dry_run,
        status=report.status,
        started_at=report.started_at,
        summary=report.summary,
        entries_total=len(report.results),
        stored_path=stored_path,
    )


class ReportStore:
    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    def write(self, report: SyncRunReport) -> str:
        """Persist *report* and return its path relative to the reports root."""
        filename = report_filename(report)
        path = self._root / filename
        stored = report.model_copy(update={"stored_path": filename})
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            path.write_text(stored.model_dump_json(indent=2), encoding="utf-8")
        except OSError as exc:
            raise SyncError(f"failed to persist sync report: {path}") from exc
        logger.debug("wrote report %s", path)
        return filename

    def list(self, project: str | None = None, limit: int = 20, offset: int = 0) -> SyncReportList:
        """Newest-first listing; unreadable files are skipped."""
        metas: list[SyncReportMeta] = []
        if self._root.is_dir():
            for path in self._root.iterdir():
                if not path.is_file() or path.suffix != ".json":
                    continue
                try:
                    report = SyncRunReport.model_validate(json.loads(path.read_text(encoding="utf-8")))
                except (OSError, json.JSONDecodeError, ValidationError):
                    logger.debug("skipping unreadable report %s", path)
                    continue
                if project is not None and report.project != project:
                    continue
                metas.append(_meta(report, path.name))

        metas.sort(key=lambda meta: (meta.started_at, meta.run_id), reverse=True)
        start = max(0, offset)
        page = metas[start : start + max(0, limit)]
        return SyncReportList(total=len(metas), limit=limit, offset=offset, reports=page)

    def _resolve(self, relative_path: str) -> Path:
        trimmed = relative_path.strip()
        if not trimmed:
            raise ConfigError("missing report path")
        candidate = PurePath(trimmed)
        if candidate.is_absolute() or ".." in candidate.parts:
            raise ConfigError(f"invalid report path: {relative_path}")

        root = self._root.resolve()
        path = (root / candidate).resolve()
        if not path.is_relative_to(root):
            raise ConfigError(f"invalid report path: {relative_path}")
        if not path.is_file():
            raise ConfigError(f"report not found: {relative_path}")
        return path

    def read(self, relative_path: str) -> SyncRunReport:
        path = self._resolve(relative_path)
        try:
            payload: Any = json.loads(path.read_text(encoding="utf-8"))
            return SyncRunReport.model_validate(payload)
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            raise ConfigError(f"invalid report file: {relative_path}") from exc
