"""Engine module exports."""

from tasksync.engine.cancellation import CancellationToken
from tasksync.engine.orchestrator import RUN_REGISTRY, RunOptions, RunRegistry, SyncOrchestrator
from tasksync.engine.progress import EventSyncProgress, NullSyncProgress, SyncProgress
from tasksync.engine.reconciler import Reconciler

__all__ = [
    "RUN_REGISTRY",
    "CancellationToken",
    "EventSyncProgress",
    "NullSyncProgress",
    "Reconciler",
    "RunOptions",
    "RunRegistry",
    "SyncOrchestrator",
    "SyncProgress",
]
