"""In-memory task store fake."""

from __future__ import annotations

from tasksync.contracts.exceptions import LocalStoreError
from tasksync.contracts.store import TaskStore
from tasksync.contracts.task import FieldValue, ReferenceEntry, Task


class InMemoryTaskStore(TaskStore):
    """Dict-backed store with ``PROJECT-<n>`` ids and a mutation counter."""

    def __init__(self) -> None:
        self.tasks: dict[str, Task] = {}
        self.mutations = 0
        self.fail_on_update: set[str] = set()
        self._counters: dict[str, int] = {}

    def add(self, project: str, references: list[ReferenceEntry] | None = None, **fields: FieldValue) -> Task:
        task = self.create_task(project, dict(fields), references)
        self.mutations -= 1
        return task

    def get_task(self, task_id: str) -> Task:
        try:
            return self.tasks[task_id]
        except KeyError as exc:
            raise LocalStoreError(f"task not found: {task_id}") from exc

    def find_by_reference(self, provider: str, external_id: str) -> Task | None:
        for task in self.tasks.values():
            reference = task.reference_for(provider)
            if reference is not None and reference.external_id == external_id:
                return task
        return None

    def create_task(
        self,
        project: str,
        fields: dict[str, FieldValue],
        references: list[ReferenceEntry] | None = None,
    ) -> Task:
        key = project.upper()
        self._counters[key] = self._counters.get(key, 0) + 1
        task = Task(id=f"{key}-{self._counters[key]}", project=key, fields=dict(fields), references=list(references or []))
        self.tasks[task.id] = task
        self.mutations += 1
        return task

    def update_task_fields(self, task_id: str, fields: dict[str, FieldValue]) -> Task:
        if task_id in self.fail_on_update:
            raise LocalStoreError(f"disk full while writing {task_id}")
        current = self.get_task(task_id)
        updated = current.model_copy(update={"fields": {**current.fields, **fields}})
        self.tasks[task_id] = updated
        self.mutations += 1
        return updated

    def attach_reference(self, task_id: str, reference: ReferenceEntry) -> Task:
        current = self.get_task(task_id)
        kept = [entry for entry in current.references if entry.provider != reference.provider]
        updated = current.model_copy(update={"references": [*kept, reference]})
        self.tasks[task_id] = updated
        self.mutations += 1
        return updated

    def remove_reference(self, task_id: str, provider: str) -> Task:
        current = self.get_task(task_id)
        updated = current.model_copy(
            update={"references": [entry for entry in current.references if entry.provider != provider]}
        )
        self.tasks[task_id] = updated
        return updated

    def list_tasks_for_project(self, project: str) -> list[Task]:
        return [task for task in self.tasks.values() if task.project == project.upper()]
