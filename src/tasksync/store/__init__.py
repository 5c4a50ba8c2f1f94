from tasksync.store.dry_run import DryRunTaskStore
from tasksync.store.json_store import JsonTaskStore

__all__ = ["DryRunTaskStore", "JsonTaskStore"]
