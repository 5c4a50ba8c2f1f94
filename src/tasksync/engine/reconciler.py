"""Per-item reconciliation in one direction.

A :class:`Reconciler` is built once per run and handles one task/issue pair
per call. It never branches on provider identity; everything
provider-specific is behind the adapter or inside the reference grammar.
"""

from __future__ import annotations

import asyncio
import logging

from tasksync.contracts.adapter import RemoteAdapter
from tasksync.contracts.config import RemoteConfig
from tasksync.contracts.exceptions import (
    AdapterError,
    AuthError,
    IncompleteCreateError,
    InvalidReferenceFormat,
    LocalStoreError,
    ReferenceScopeError,
    UnmappedValueError,
)
from tasksync.contracts.issue import RemoteIssue
from tasksync.contracts.report import SyncOutcome, TaskResult
from tasksync.contracts.store import TaskStore
from tasksync.contracts.task import FieldValue, ReferenceEntry, Task
from tasksync.engine.cancellation import CancellationToken
from tasksync.engine.mapping import OMIT, MappingRule, resolve_inbound, resolve_outbound, values_equal
from tasksync.engine.reference import in_scope, make_reference, match, normalize_for_remote

logger = logging.getLogger(__name__)

# Errors that fail a single item. AuthError is an AdapterError but is re-raised
# because a credential problem fails every remaining item the same way.
ITEM_ERRORS = (AdapterError, UnmappedValueError, InvalidReferenceFormat, LocalStoreError)


class Reconciler:
    def __init__(
        self,
        *,
        remote: RemoteConfig,
        rules: list[MappingRule],
        adapter: RemoteAdapter,
        store: TaskStore,
        project: str | None = None,
        store_lock: asyncio.Lock | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        self._remote = remote
        self._rules = rules
        self._adapter = adapter
        self._store = store
        self._project = project
        self._store_lock = store_lock or asyncio.Lock()
        self._cancel_token = cancel_token
        self.warnings: list[str] = []
        # Items left unwritten because the run was cancelled after they started.
        self.cancelled_items = 0

    @property
    def provider(self) -> str:
        return self._remote.provider

    # ------------------------------------------------------------------
    # Pull: remote is authoritative
    # ------------------------------------------------------------------

    async def pull(self, issue: RemoteIssue) -> TaskResult:
        try:
            return await self._pull(issue)
        except AuthError:
            raise
        except ITEM_ERRORS as exc:
            logger.debug("pull %s failed: %s", issue.external_id, exc)
            return TaskResult(
                external_id=issue.external_id,
                title=_text(issue.fields.get("title")) or _text(issue.fields.get("summary")),
                outcome=SyncOutcome.FAILED,
                reason=str(exc),
            )

    async def _pull(self, issue: RemoteIssue) -> TaskResult:
        external_id = normalize_for_remote(issue.external_id, self._remote)
        if self._project is None:
            raise LocalStoreError("pull needs a target project for new tasks")

        async with self._store_lock:
            task = self._store.find_by_reference(self.provider, external_id)
            target = self.inbound_state(issue, task)

            if task is None:
                reference = ReferenceEntry(provider=self.provider, external_id=external_id)
                created = self._store.create_task(self._project, target, [reference])
                logger.debug("pull %s: created %s", external_id, created.id)
                return TaskResult(
                    task_id=created.id,
                    external_id=external_id,
                    title=created.title or None,
                    outcome=SyncOutcome.CREATED,
                    fields=list(target),
                )

            changes = {
                name: value for name, value in target.items() if not values_equal(task.fields.get(name), value)
            }
            if not changes:
                return TaskResult(
                    task_id=task.id,
                    external_id=external_id,
                    title=task.title or None,
                    outcome=SyncOutcome.SKIPPED,
                )

            updated = self._store.update_task_fields(task.id, changes)
            logger.debug("pull %s: updated %s (%s)", external_id, task.id, ", ".join(changes))
            return TaskResult(
                task_id=task.id,
                external_id=external_id,
                title=updated.title or None,
                outcome=SyncOutcome.UPDATED,
                fields=list(changes),
            )

    def inbound_state(self, issue: RemoteIssue, task: Task | None) -> dict[str, FieldValue]:
        """Local values the mapped fields should hold after pulling *issue*.

        A field whose remote value has no entry in its ``values`` table is
        left out and recorded as a warning; the rest of the task still syncs.
        """
        target: dict[str, FieldValue] = {}
        for rule in self._rules:
            current = task.fields.get(rule.local_field) if task is not None else None
            try:
                value = resolve_inbound(issue.fields.get(rule.remote_field), rule, current=current)
            except UnmappedValueError as exc:
                message = f"{issue.external_id}: {exc}"
                logger.warning("Skipping field on pull: %s", message)
                self.warnings.append(message)
                continue
            if value is OMIT:
                continue
            target[rule.local_field] = value
        return target

    # ------------------------------------------------------------------
    # Push: local is authoritative
    # ------------------------------------------------------------------

    async def push(self, task: Task) -> TaskResult:
        reference = task.reference_for(self.provider)
        try:
            if reference is None:
                return await self._push_new(task)
            return await self._push_existing(task, reference)
        except AuthError:
            raise
        except ITEM_ERRORS as exc:
            logger.debug("push %s failed: %s", task.id, exc)
            return TaskResult(
                task_id=task.id,
                external_id=reference.external_id if reference is not None else None,
                title=task.title or None,
                outcome=SyncOutcome.FAILED,
                reason=str(exc),
            )

    async def _push_new(self, task: Task) -> TaskResult:
        fields = self.outbound_state(task)
        if self._is_cancelled():
            return self._cancelled(task, None)
        failure: IncompleteCreateError | None = None
        try:
            issue = await self._adapter.create_issue(fields)
            created_id = issue.external_id
        except IncompleteCreateError as exc:
            failure = exc
            created_id = exc.external_id

        reference = make_reference(created_id, self._remote)
        try:
            async with self._store_lock:
                self._store.attach_reference(task.id, reference)
        except LocalStoreError as exc:
            message = f"{reference.external_id} was created for task {task.id} but could not be linked: {exc}"
            logger.warning("%s", message)
            self.warnings.append(message)
            return self._failed(task, reference.external_id, message)

        if failure is not None:
            logger.debug("push %s: created %s with errors: %s", task.id, reference.external_id, failure)
            return self._failed(task, reference.external_id, str(failure))
        logger.debug("push %s: created %s", task.id, reference.external_id)
        return TaskResult(
            task_id=task.id,
            external_id=reference.external_id,
            title=task.title or None,
            outcome=SyncOutcome.CREATED,
            fields=list(fields),
        )

    async def _push_existing(self, task: Task, reference: ReferenceEntry) -> TaskResult:
        external_id = normalize_for_remote(reference.external_id, self._remote)
        if not in_scope(external_id, self._remote):
            raise ReferenceScopeError(
                f"task {task.id} is linked to {external_id}, outside {self._remote.target}",
                raw=reference.external_id,
                provider=self.provider,
            )

        current = await self._adapter.fetch_issue(external_id)
        if not match(task, current, self.provider, default_repo=self._default_repo):
            raise ReferenceScopeError(
                f"task {task.id} is linked to {external_id} but the remote returned {current.external_id}",
                raw=reference.external_id,
                provider=self.provider,
            )

        changes: dict[str, FieldValue] = {}
        for rule in self._rules:
            remote_value = current.fields.get(rule.remote_field)
            value = resolve_outbound(task.fields.get(rule.local_field), rule, current=remote_value)
            if value is OMIT or values_equal(remote_value, value):
                continue
            changes[rule.remote_field] = value

        if not changes:
            return TaskResult(
                task_id=task.id,
                external_id=external_id,
                title=task.title or None,
                outcome=SyncOutcome.SKIPPED,
            )
        if self._is_cancelled():
            return self._cancelled(task, external_id)

        await self._adapter.update_issue(external_id, changes)
        logger.debug("push %s: updated %s (%s)", task.id, external_id, ", ".join(changes))
        return TaskResult(
            task_id=task.id,
            external_id=external_id,
            title=task.title or None,
            outcome=SyncOutcome.UPDATED,
            fields=list(changes),
        )

    def outbound_state(self, task: Task) -> dict[str, FieldValue]:
        """Remote payload for creating an issue from *task*."""
        fields: dict[str, FieldValue] = {}
        for rule in self._rules:
            value = resolve_outbound(task.fields.get(rule.local_field), rule)
            if value is OMIT:
                continue
            fields[rule.remote_field] = value
        return fields

    @property
    def _default_repo(self) -> str | None:
        return self._remote.repo if self.provider == "github" else None

    def _is_cancelled(self) -> bool:
        return self._cancel_token is not None and self._cancel_token.cancelled

    def _cancelled(self, task: Task, external_id: str | None) -> TaskResult:
        self.cancelled_items += 1
        return TaskResult(
            task_id=task.id,
            external_id=external_id,
            title=task.title or None,
            outcome=SyncOutcome.SKIPPED,
            reason="cancelled",
        )

    def _failed(self, task: Task, external_id: str, reason: str) -> TaskResult:
        return TaskResult(
            task_id=task.id,
            external_id=external_id,
            title=task.title or None,
            outcome=SyncOutcome.FAILED,
            reason=reason,
        )


def _text(value: FieldValue) -> str | None:
    return value if isinstance(value, str) and value else None
