"""Public API surface for tasksync."""

__version__ = "0.4.0"

from tasksync.auth import CredentialProvider, HomeConfigCredentialProvider
from tasksync.config import load_home_config, load_project_config
from tasksync.contracts.adapter import RemoteAdapter
from tasksync.contracts.config import AuthProfile, HomeConfig, RemoteConfig, ResolvedAuth, TaskSyncConfig
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
    SyncRunReport,
    TaskResult,
)
from tasksync.contracts.store import TaskStore
from tasksync.contracts.task import ReferenceEntry, Task
from tasksync.engine import CancellationToken, SyncProgress
from tasksync.providers import create_adapter
from tasksync.sdk import TaskSync

__all__ = [
    "AdapterError",
    "AuthError",
    "AuthProfile",
    "CancellationToken",
    "ConcurrentRunError",
    "ConfigError",
    "CredentialProvider",
    "HomeConfig",
    "HomeConfigCredentialProvider",
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
    "SyncProgress",
    "SyncReportList",
    "SyncRunReport",
    "Task",
    "TaskResult",
    "TaskStore",
    "TaskSync",
    "TaskSyncConfig",
    "TaskSyncError",
    "Timeout",
    "UnmappedValueError",
    "__version__",
    "create_adapter",
    "load_home_config",
    "load_project_config",
]
