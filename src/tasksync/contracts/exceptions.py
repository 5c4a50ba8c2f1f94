"""Exception hierarchy for tasksync.

All tasksync exceptions inherit from :class:`TaskSyncError`. Run-fatal classes
(:class:`ConfigError`, :class:`AuthError`, :class:`ConcurrentRunError`) abort a
run before any item is processed; every other class is scoped to a single item
and ends up as a ``failed`` entry in the run report.
"""

from __future__ import annotations


class TaskSyncError(Exception):
    """Base exception for all tasksync errors."""


class ConfigError(TaskSyncError):
    """Configuration loading or validation failure (malformed mapping, unknown provider)."""


class InvalidReferenceFormat(TaskSyncError):
    """A platform reference does not match the provider grammar."""

    def __init__(self, message: str, *, raw: str = "", provider: str = "") -> None:
        super().__init__(message)
        self.raw = raw
        self.provider = provider


class ReferenceScopeError(InvalidReferenceFormat):
    """A well-formed reference points at a different project or repository."""


class UnmappedValueError(TaskSyncError):
    """A value has no entry in a mapping rule's ``values`` table."""

    def __init__(self, message: str, *, field: str, value: object) -> None:
        super().__init__(message)
        self.field = field
        self.value = value


class AdapterError(TaskSyncError):
    """Base remote adapter failure."""


class AuthError(AdapterError):
    """Authentication/authorization failure, or an auth profile that cannot be resolved."""


class NotFound(AdapterError):
    """The remote issue or resource does not exist."""


class RateLimited(AdapterError):
    """The remote platform throttled the request."""

    def __init__(self, message: str, *, retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class Timeout(AdapterError):
    """A remote call did not complete within its timeout."""


class RemoteValidationError(AdapterError):
    """The remote platform rejected the payload."""


class IncompleteCreateError(AdapterError):
    """The issue was created but a follow-up request (closing it, a status transition) failed.

    ``external_id`` names the issue that now exists on the remote so it can
    still be linked to its task.
    """

    def __init__(self, message: str, *, external_id: str) -> None:
        super().__init__(message)
        self.external_id = external_id


class ConcurrentRunError(TaskSyncError):
    """A run for the same remote is already in flight."""


class LocalStoreError(TaskSyncError):
    """The local task store rejected a read or write."""


class SyncError(TaskSyncError):
    """Engine-level synchronization failure."""


TRANSIENT_ERRORS: tuple[type[AdapterError], ...] = (RateLimited, Timeout)
RUN_FATAL_ERRORS: tuple[type[TaskSyncError], ...] = (ConfigError, AuthError, ConcurrentRunError)
