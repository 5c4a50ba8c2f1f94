"""JSON-file task store.

Each project lives in ``<tasks_dir>/<PROJECT>/tasks.json``; task ids are
``<PROJECT>-<N>`` with ``N`` allocated from a per-project counter.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from tasksync.contracts.exceptions import LocalStoreError
from tasksync.contracts.store import TaskStore
from tasksync.contracts.task import FieldValue, ReferenceEntry, Task

logger = logging.getLogger(__name__)

_FILE_NAME = "tasks.json"


class _ProjectFile(BaseModel):
    next_id: int = 1
    tasks: list[Task] = Field(default_factory=list)


class JsonTaskStore(TaskStore):
    def __init__(self, tasks_dir: Path) -> None:
        self._tasks_dir = tasks_dir

    @staticmethod
    def _project_key(project: str) -> str:
        key = project.strip().upper()
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise LocalStoreError(f"invalid project name: {project!r}")
        return key

    def _path(self, project: str) -> Path:
        return self._tasks_dir / self._project_key(project) / _FILE_NAME

    def _load(self, project: str) -> _ProjectFile:
        path = self._path(project)
        if not path.exists():
            return _ProjectFile()
        try:
            payload: Any = json.loads(path.read_text(encoding="utf-8"))
            return _ProjectFile.model_validate(payload)
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            raise LocalStoreError(f"invalid task file: {path}") from exc

    def _save(self, project: str, data: _ProjectFile) -> None:
        path = self._path(project)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(data.model_dump_json(indent=2), encoding="utf-8")
            tmp_path.replace(path)
        except OSError as exc:
            raise LocalStoreError(f"failed to write task file: {path}") from exc

    def _projects(self) -> list[str]:
        if not self._tasks_dir.is_dir():
            return []
        return sorted(entry.name for entry in self._tasks_dir.iterdir() if (entry / _FILE_NAME).is_file())

    @staticmethod
    def _index(data: _ProjectFile, task_id: str) -> int:
        for index, task in enumerate(data.tasks):
            if task.id == task_id:
                return index
        raise LocalStoreError(f"task not found: {task_id}")

    def _replace(self, task_id: str, **update: Any) -> Task:
        project = task_id.rsplit("-", 1)[0]
        data = self._load(project)
        index = self._index(data, task_id)
        try:
            updated = Task.model_validate({**data.tasks[index].model_dump(), **update})
        except ValidationError as exc:
            raise LocalStoreError(f"rejected update for {task_id}: {exc}") from exc
        data.tasks[index] = updated
        self._save(project, data)
        return updated

    def get_task(self, task_id: str) -> Task:
        project = task_id.rsplit("-", 1)[0]
        data = self._load(project)
        return data.tasks[self._index(data, task_id)]

    def find_by_reference(self, provider: str, external_id: str) -> Task | None:
        for project in self._projects():
            for task in self._load(project).tasks:
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
        key = self._project_key(project)
        for reference in references or []:
            existing = self.find_by_reference(reference.provider, reference.external_id)
            if existing is not None:
                raise LocalStoreError(f"{reference.external_id} is already linked to {existing.id}")

        data = self._load(key)
        try:
            task = Task(id=f"{key}-{data.next_id}", project=key, fields=dict(fields), references=list(references or []))
        except ValidationError as exc:
            raise LocalStoreError(f"rejected new task: {exc}") from exc
        data.tasks.append(task)
        data.next_id += 1
        self._save(key, data)
        logger.debug("created task %s", task.id)
        return task

    def update_task_fields(self, task_id: str, fields: dict[str, FieldValue]) -> Task:
        current = self.get_task(task_id)
        return self._replace(task_id, fields={**current.fields, **fields})

    def attach_reference(self, task_id: str, reference: ReferenceEntry) -> Task:
        existing = self.find_by_reference(reference.provider, reference.external_id)
        if existing is not None and existing.id != task_id:
            raise LocalStoreError(f"{reference.external_id} is already linked to {existing.id}")
        current = self.get_task(task_id)
        kept = [entry.model_dump() for entry in current.references if entry.provider != reference.provider]
        return self._replace(task_id, references=[*kept, reference.model_dump()])

    def list_tasks_for_project(self, project: str) -> list[Task]:
        return list(self._load(project).tasks)

