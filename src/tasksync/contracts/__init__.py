"""Public contracts for tasksync."""

from tasksync.contracts.adapter import RemoteAdapter
from tasksync.contracts.config import (
    AuthProfile,
    HomeConfig,
    RemoteConfig,
    ResolvedAuth,
    SyncSettings,
    TaskSyncConfig,
)
from tasksync.contracts.exceptions import (
    AdapterError,
    AuthError,
    ConcurrentRunError,
    ConfigError,
    IncompleteCreateError,
    InvalidReferenceFormat,
    LocalStoreError,
    NotFound,
    RateLimited,
    ReferenceScopeError,
    RemoteValidationError,
    SyncError,
    TaskSyncError,
    Timeout,
    UnmappedValueError,
)
from tasksync.contracts.issue import IssueStream, RemoteIssue
from tasksync.contracts.report import (
    RunStatus,
    SyncCheckResult,
    SyncDirection,
    SyncOutcome,
    SyncReportList,
    SyncReportMeta,
    SyncRunReport,
    SyncSummary,
    TaskResult,
)
from tasksync.contracts.store import TaskStore
from tasksync.contracts.task import FieldValue, ReferenceEntry, Task

__all__ = [
    "AdapterError",
    "AuthError",
    "AuthProfile",
    "ConcurrentRunError",
    "ConfigError",
    "FieldValue",
    "HomeConfig",
    "IncompleteCreateError",
    "InvalidReferenceFormat",
    "IssueStream",
    "LocalStoreError",
    "NotFound",
    "RateLimited",
    "ReferenceEntry",
    "ReferenceScopeError",
    "RemoteAdapter",
    "RemoteConfig",
    "RemoteIssue",
    "RemoteValidationError",
    "ResolvedAuth",
    "RunStatus",
    "SyncCheckResult",
    "SyncDirection",
    "SyncError",
    "SyncOutcome",
    "SyncReportList",
    "SyncReportMeta",
    "SyncRunReport",
    "SyncSettings",
    "SyncSummary",
    "Task",
    "TaskResult",
    "TaskStore",
    "TaskSyncConfig",
    "TaskSyncError",
    "Timeout",
    "UnmappedValueError",
]
