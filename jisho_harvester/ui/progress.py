"""Terminal progress helpers with Rich-based rendering."""

from __future__ import annotations

from dataclasses import dataclass
from threading import Lock

from rich.console import Console
from rich.errors import LiveError
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)


@dataclass
class ProgressState:
    queued: int = 0
    enriched: int = 0
    unresolved: int = 0
    duplicates: int = 0


class ProgressReporter:
    """Count unique entries as they are enriched and render a bar on stderr.

    The total grows while search pages are still being parsed, so the bar
    only settles once the entry stream has closed.
    """

    def __init__(self, enabled: bool = True, console: Console | None = None) -> None:
        self.enabled = enabled
        self.state = ProgressState()
        self._console = console
        self._progress: Progress | None = None
        self._task_id: TaskID | None = None
        self._lock = Lock()

    def start(self) -> None:
        if not self.enabled:
            return
        if self._console is None:
            self._console = Console(stderr=True)
        if not self._console.is_terminal:
            # non-interactive stderr: keep counters only
            self.enabled = False
            return
        self._progress = Progress(
            SpinnerColumn(style="cyan"),
            TextColumn("[bold blue]entries"),
            BarColumn(bar_width=None, complete_style="green", finished_style="green"),
            TaskProgressColumn(show_speed=False),
            TimeElapsedColumn(),
            TextColumn("[green]✓{task.fields[enriched]:>5}", justify="right"),
            TextColumn("[red]?{task.fields[unresolved]:>4}", justify="right"),
            TextColumn("[yellow]={task.fields[duplicates]:>5}", justify="right"),
            console=self._console,
            transient=True,
            expand=True,
        )
        try:
            self._progress.__enter__()
        except LiveError:
            self.enabled = False
            self._progress = None
            return
        self._task_id = self._progress.add_task(
            "harvest", total=None, enriched=0, unresolved=0, duplicates=0
        )

    def queued(self) -> None:
        with self._lock:
            self.state.queued += 1
            self._refresh()

    def duplicate(self) -> None:
        with self._lock:
            self.state.duplicates += 1
            self._refresh()

    def advance(self, resolved: bool) -> None:
        with self._lock:
            if resolved:
                self.state.enriched += 1
            else:
                self.state.unresolved += 1
            self._refresh()

    def _refresh(self) -> None:
        if self._progress is None or self._task_id is None:
            return
        self._progress.update(
            self._task_id,
            total=self.state.queued,
            completed=self.state.enriched + self.state.unresolved,
            enriched=self.state.enriched,
            unresolved=self.state.unresolved,
            duplicates=self.state.duplicates,
        )

    def close(self) -> None:
        if self._progress is not None:
            self._progress.__exit__(None, None, None)
            self._progress = None


__all__ = ["ProgressReporter", "ProgressState"]
