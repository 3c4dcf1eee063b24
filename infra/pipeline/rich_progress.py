"""Rich progress display for the waiting and collection phases."""

from typing import Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TextColumn,
    TimeElapsedColumn,
)


class RichProgressBar:
    """
    Counts finished units of one phase, marking failures separately.

    Usage:
        with RichProgressBar(len(tests), prefix="Waiting ", unit="tests") as bar:
            ...
            bar.advance(failed=True)

    With disable=True nothing is rendered but the counters still update,
    which is how non-interactive runs use it.
    """

    def __init__(
        self,
        total: int,
        prefix: str = "",
        width: int = 40,
        unit: str = "items",
        console: Optional[Console] = None,
        disable: bool = False
    ):
        self.total = total
        self.unit = unit
        self.completed = 0
        self.failed = 0

        self._progress = Progress(
            TextColumn(f"[bold cyan]{prefix}[/bold cyan]"),
            BarColumn(bar_width=width),
            MofNCompleteColumn(),
            TextColumn(unit),
            TimeElapsedColumn(),
            TextColumn("{task.fields[failures]}"),
            console=console,
            transient=True,
            disable=disable,
        )
        self._task_id = self._progress.add_task(prefix, total=total, failures="")

    def __enter__(self):
        self._progress.start()
        return self

    def __exit__(self, *args):
        self._progress.stop()
        return False

    def advance(self, failed: bool = False):
        self.completed += 1
        if failed:
            self.failed += 1

        self._progress.update(
            self._task_id,
            completed=self.completed,
            failures=f"[red]{self.failed} failed[/red]" if self.failed else "",
        )
