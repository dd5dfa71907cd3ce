"""Terminal progress helpers with Rich-based rendering."""

from __future__ import annotations

from dataclasses import dataclass
from threading import Lock

from rich.console import Console
from rich.errors import LiveError
from rich.progress import (
    BarColumn,
    Progress,
    ProgressColumn,
    SpinnerColumn,
    Task,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.status import Status
from rich.text import Text


@dataclass
class ProgressState:
    total: int
    processed: int = 0


class RateColumn(ProgressColumn):
    """Codes processed per second."""

    def render(self, task: Task) -> Text:
        speed = task.finished_speed or task.speed
        if speed is None:
            return Text("", style="progress.percentage")
        return Text(f"{speed:.1f} code/s", style="progress.percentage")


class LevelProgress:
    """Render one progress row for the level currently being drained."""

    def __init__(self, enabled: bool = True, console: Console | None = None) -> None:
        self.enabled = enabled
        self._console = console
        self._progress: Progress | None = None
        self._task_id: TaskID | None = None
        self._lock = Lock()
        self.state: ProgressState | None = None
        self.label = ""

    def start(self, total: int, label: str) -> None:
        self.state = ProgressState(total=total)
        self.label = label
        if not self.enabled:
            return
        console = self._console or Console()
        if not console.is_terminal:
            # Non-interactive output: stay silent rather than print every refresh.
            self.enabled = False
            return
        self._progress = Progress(
            SpinnerColumn(style="cyan"),
            TextColumn("[bold blue]{task.fields[label]:<16}", justify="left"),
            BarColumn(bar_width=None, complete_style="green", finished_style="green"),
            TaskProgressColumn(show_speed=False),
            TimeElapsedColumn(),
            RateColumn(),
            TextColumn("[green]✓{task.completed:>6.0f}", justify="right"),
            console=console,
            transient=True,
            refresh_per_second=12,
            expand=True,
        )
        try:
            self._progress.__enter__()
        except LiveError:
            self.enabled = False
            self._progress = None
            return
        self._task_id = self._progress.add_task("level", total=total, label=label)

    def advance(self, count: int = 1) -> None:
        if self.state is None:
            raise RuntimeError("LevelProgress.start must be called before advance")
        with self._lock:
            self.state.processed += count
            if self._progress is not None and self._task_id is not None:
                self._progress.update(self._task_id, advance=count)

    def close(self) -> None:
        if self._progress is not None:
            try:
                self._progress.stop()
            finally:
                self._progress.__exit__(None, None, None)
                self._progress = None
        self._task_id = None

    @property
    def processed(self) -> int:
        return self.state.processed if self.state else 0


class ProgressActivity:
    """Spinner shown while a level's parent codes are being read."""

    def __init__(self, enabled: bool = True, console: Console | None = None) -> None:
        self.enabled = enabled
        self._console = console
        self._status: Status | None = None

    def start(self, message: str) -> None:
        if not self.enabled:
            return
        console = self._console or Console()
        if not console.is_terminal:
            self.enabled = False
            return
        self._status = Status(message, console=console, spinner="dots", spinner_style="green")
        try:
            self._status.start()
        except LiveError:
            self._status = None
            self.enabled = False

    def close(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None


__all__ = ["LevelProgress", "ProgressActivity", "ProgressState", "RateColumn"]
