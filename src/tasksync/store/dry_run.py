"""Dry-run task store stand-in."""

from __future__ import annotations

import logging

from tasksync.contracts.store import TaskStore
from tasksync.contracts.task import FieldValue, ReferenceEntry, Task
from tasksync.providers.dry_run import DryRunOperation

logger = logging.getLogger(__name__)


class DryRunTaskStore(TaskStore):
    """Reads from *inner*; records writes and keeps their effect in memory only.

    The overlay makes later reads within the same run see the intended state,
    so a dry run reports what the live run would.
    """

    def __init__(self, inner: TaskStore) -> None:
        self._inner = inner
        self._overlay: dict[str, Task] = {}
        self._created = 0
        self._operations: list[DryRunOperation] = []

    @property
    def operations(self) -> tuple[DryRunOperation, ...]:
        return tuple(self._operations)

    def _record_operation(self, name: str, item_id: str | None, payload: dict[str, FieldValue]) -> None:
        self._operations.append(
            DryRunOperation(sequence=len(self._operations) + 1, name=name, item_id=item_id, payload=dict(payload))
        )
        logger.debug("dry-run %s %s", name, item_id or "")

    def get_task(self, task_id: str) -> Task:
        if task_id in self._overlay:
            return self._overlay[task_id]
        return self._inner.get_task(task_id)

    def find_by_reference(self, provider: str, external_id: str) -> Task | None:
        for task in self._overlay.values():
            reference = task.reference_for(provider)
            if reference is not None and reference.external_id == external_id:
                return task
        found = self._inner.find_by_reference(provider, external_id)
        if found is not None and found.id in self._overlay:
            return self._overlay[found.id]
        return found

    def create_task(
        self,
        project: str,
        fields: dict[str, FieldValue],
        references: list[ReferenceEntry] | None = None,
    ) -> Task:
        self._created += 1
        task = Task(
            id=f"dry-run-{self._created}",
            project=project,
            fields=dict(fields),
            references=list(references or []),
        )
        self._record_operation("create_task", task.id, fields)
        self._overlay[task.id] = task
        return task

    def update_task_fields(self, task_id: str, fields: dict[str, FieldValue]) -> Task:
        current = self.get_task(task_id)
        self._record_operation("update_task_fields", task_id, fields)
        updated = current.model_copy(update={"fields": {**current.fields, **fields}})
        self._overlay[task_id] = updated
        return updated

    def attach_reference(self, task_id: str, reference: ReferenceEntry) -> Task:
        current = self.get_task(task_id)
        self._record_operation("attach_reference", task_id, {reference.provider: reference.external_id})
        kept = [entry for entry in current.references if entry.provider != reference.provider]
        updated = current.model_copy(update={"references": [*kept, reference]})
        self._overlay[task_id] = updated
        return updated

    def list_tasks_for_project(self, project: str) -> list[Task]:
        tasks = {task.id: task for task in self._inner.list_tasks_for_project(project)}
        for task in self._overlay.values():
            if task.project == project:
                tasks[task.id] = task
        return list(tasks.values())
