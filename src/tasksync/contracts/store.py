"""Local task store contract."""

from __future__ import annotations

from abc import ABC, abstractmethod

from tasksync.contracts.task import FieldValue, ReferenceEntry, Task


class TaskStore(ABC):
    """Persistence boundary for local tasks.

    Implementations raise :class:`~tasksync.contracts.exceptions.LocalStoreError`
    for conflicts and I/O failures. ``update_task_fields`` merges: keys absent
    from *fields* keep their current values.
    """

    @abstractmethod
    def get_task(self, task_id: str) -> Task: ...  # pragma: no cover

    @abstractmethod
    def find_by_reference(self, provider: str, external_id: str) -> Task | None: ...  # pragma: no cover

    @abstractmethod
    def create_task(
        self,
        project: str,
        fields: dict[str, FieldValue],
        references: list[ReferenceEntry] | None = None,
    ) -> Task: ...  # pragma: no cover

    @abstractmethod
    def update_task_fields(self, task_id: str, fields: dict[str, FieldValue]) -> Task: ...  # pragma: no cover

    @abstractmethod
    def attach_reference(self, task_id: str, reference: ReferenceEntry) -> Task: ...  # pragma: no cover

    @abstractmethod
    def list_tasks_for_project(self, project: str) -> list[Task]: ...  # pragma: no cover
