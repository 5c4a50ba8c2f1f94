"""Remote platform adapters."""

from tasksync.providers.dry_run import DryRunAdapter, DryRunOperation
from tasksync.providers.factory import create_adapter, register

__all__ = ["DryRunAdapter", "DryRunOperation", "create_adapter", "register"]
