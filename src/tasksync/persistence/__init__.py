"""Report persistence."""

from tasksync.persistence.reports import ReportStore

__all__ = ["ReportStore"]
