"""Rich-based sync progress display."""

from __future__ import annotations

from types import TracebackType

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.progress import TaskID as RichTaskID

from tasksync.contracts.report import SyncDirection, SyncRunReport, TaskResult
from tasksync.engine.progress import SyncProgress

_DIRECTION_LABELS = {
    SyncDirection.PULL: "[cyan]Pull[/]",
    SyncDirection.PUSH: "[green]Push[/]",
}


class RichSyncProgress(SyncProgress):
    """Live terminal progress bar powered by Rich.

    Use as a context manager so the live display is properly started/stopped::

        with RichSyncProgress() as progress:
            report = await TaskSync.from_config_files(progress=progress).pull("jira")
    """

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(stderr=True)
        self._progress = Progress(
            SpinnerColumn(finished_text="[green]✓[/green]"),
            TextColumn("{task.description:>20}"),
            BarColumn(bar_width=30),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self._console,
            transient=False,
        )
        self._task_id: RichTaskID | None = None
        self._label = ""

    def __enter__(self) -> RichSyncProgress:
        self._progress.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self._progress.stop()

    def sync_started(self, remote: str, direction: SyncDirection) -> None:
        self._label = f"{_DIRECTION_LABELS.get(direction, direction.value)} {remote}"
        self._task_id = self._progress.add_task(self._label, total=None)

    def sync_progress(self, processed: int, total: int, result: TaskResult) -> None:
        if self._task_id is None:
            return
        self._progress.update(self._task_id, total=total, completed=processed)

    def sync_completed(self, report: SyncRunReport) -> None:
        if self._task_id is None:
            return
        task = self._progress.tasks[self._task_id]
        if task.total is None or task.total == 0:
            self._progress.update(self._task_id, total=1, completed=1)
        elif report.status.value == "cancelled":
            self._progress.update(self._task_id, description=f"[yellow]cancelled[/yellow] {self._label}")
        else:
            self._progress.update(self._task_id, completed=task.total)

    def sync_failed(self, reason: str) -> None:
        if self._task_id is None:
            return
        self._progress.update(self._task_id, description=f"[red]✗[/red] {self._label}")
