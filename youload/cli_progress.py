"""Console rendering and progress helpers for the youload CLI."""
from __future__ import annotations

import time
from typing import Any, Dict, Iterable, Optional

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from .models import BatchProgress, BatchSummary, ItemStatus, UploadItem
from .utils.formatting import format_duration, format_file_size

console = Console()

_STATUS_STYLE = {
    ItemStatus.PENDING: "dim",
    ItemStatus.UPLOADING: "blue",
    ItemStatus.COMPLETED: "green",
    ItemStatus.ERROR: "red",
}


def render_configuration_summary(config: Dict[str, Any]) -> None:
    """Render startup configuration summary."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column(style="white")

    for key, value in config.items():
        rendered = "-" if value is None else str(value)
        table.add_row(key, rendered)

    panel = Panel(
        table,
        title="[bold green]youload[/bold green]",
        subtitle="[dim]batch video upload[/dim]",
        border_style="blue",
    )
    console.print(panel)


def render_batch_table(items: Iterable[UploadItem], progress: BatchProgress) -> None:
    """Render the selected videos and the upload summary."""
    table = Table(title="Videos", expand=False)
    table.add_column("#", justify="right", style="bold")
    table.add_column("Title", overflow="fold")
    table.add_column("Duration", justify="right")
    table.add_column("Orientation")
    table.add_column("Type")
    table.add_column("Visibility")
    table.add_column("Size", justify="right")
    table.add_column("Status")

    for index, item in enumerate(items, start=1):
        style = _STATUS_STYLE[item.status]
        table.add_row(
            str(index),
            item.title or "[red](missing title)[/red]",
            format_duration(item.duration_seconds),
            "Vertical" if item.is_vertical else "Horizontal",
            "[bold red]SHORTS[/bold red]" if item.is_short_form else "Regular",
            item.visibility.value,
            format_file_size(item.size_bytes),
            f"[{style}]{item.status.value.capitalize()}[/{style}]",
        )
    console.print(table)
    console.print(
        f"[bold]{progress.total_items}[/bold] total videos  "
        f"[green]{progress.short_form_count}[/green] Shorts  "
        f"[blue]{progress.regular_count}[/blue] Regular videos  "
        f"[magenta]{format_file_size(progress.total_size_bytes)}[/magenta] total size"
    )


class BatchUploadProgressDisplay:
    """Event-based console display for a batch upload run."""

    def __init__(self):
        self._overall = Progress(
            SpinnerColumn(),
            TextColumn("[bold cyan]Overall Progress", justify="left"),
            BarColumn(bar_width=36),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TextColumn("[dim]{task.fields[detail]}"),
            TimeElapsedColumn(),
            expand=False,
            console=console,
        )
        self._files = Progress(
            SpinnerColumn(),
            TextColumn("[bold green]{task.fields[label]}", justify="left"),
            BarColumn(bar_width=36),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            expand=False,
            console=console,
        )
        self._live: Optional[Live] = None
        self._overall_task: Optional[TaskID] = None
        self._active: Dict[str, TaskID] = {}

    def _emit_timeline(self, status: str, name: str, error: Optional[str] = None) -> None:
        stamp = time.strftime("%H:%M:%S")
        color = {"DONE": "green", "FAIL": "red"}.get(status, "white")
        error_label = f" cause={error}" if error else ""
        console.print(f"[dim]{stamp}[/dim] [{color}]{status:<4}[/{color}] {name}{error_label}")

    def on_start(self, progress: BatchProgress) -> None:
        if self._live is not None:
            return
        self._live = Live(
            Group(self._overall, self._files),
            console=console,
            refresh_per_second=8,
            vertical_overflow="visible",
        )
        self._live.start()
        self._overall_task = self._overall.add_task(
            "overall",
            total=100,
            completed=progress.overall_percent,
            detail=self._detail(progress),
        )

    @staticmethod
    def _detail(progress: BatchProgress) -> str:
        return f"{progress.completed_items} of {progress.total_items} videos completed"

    def on_item_start(self, item: UploadItem) -> None:
        self._active[item.id] = self._files.add_task("upload", label=item.title[:60], total=100)

    def on_item_progress(self, item: UploadItem) -> None:
        task_id = self._active.get(item.id)
        if task_id is not None:
            self._files.update(task_id, completed=item.progress_percent)

    def _finish_item(self, item: UploadItem) -> None:
        task_id = self._active.pop(item.id, None)
        if task_id is not None:
            self._files.remove_task(task_id)

    def on_item_complete(self, item: UploadItem) -> None:
        self._finish_item(item)
        self._emit_timeline("DONE", item.title)

    def on_item_fail(self, item: UploadItem) -> None:
        self._finish_item(item)
        self._emit_timeline("FAIL", item.title, error=item.error)

    def on_progress(self, progress: BatchProgress) -> None:
        if self._overall_task is not None:
            self._overall.update(
                self._overall_task,
                completed=progress.overall_percent,
                detail=self._detail(progress),
            )

    def on_finish(self, summary: BatchSummary) -> None:
        self.close()
        style = "green" if summary.all_success else "yellow"
        console.print(
            f"[bold {style}]Upload completed![/bold {style}] "
            f"{summary.succeeded_count}/{summary.total_count} videos uploaded successfully."
        )
        for result in summary.results:
            if result.success:
                console.print(f"  [green]{result.filename}[/green] -> {result.watch_url or result.remote_id}")
            else:
                console.print(f"  [red]{result.filename}[/red] failed: {result.error}")

    def close(self) -> None:
        if self._live is None:
            return
        self._live.stop()
        self._live = None

    def attach(self, orchestrator) -> None:
        """Subscribe this display to an orchestrator's events."""
        orchestrator.on_start(self.on_start)
        orchestrator.on_item_start(self.on_item_start)
        orchestrator.on_item_progress(self.on_item_progress)
        orchestrator.on_item_complete(self.on_item_complete)
        orchestrator.on_item_fail(self.on_item_fail)
        orchestrator.on_progress(self.on_progress)
        orchestrator.on_finish(self.on_finish)
