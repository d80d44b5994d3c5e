"""File watcher that feeds source tree changes to the coordinator."""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from pathlib import Path
from typing import Iterable

from rich.markup import escape
from watchfiles import Change, watch

from scss_bundler.coordinator import Coordinator
from scss_bundler.events import EventKind, FileEvent
from scss_bundler.models import is_stylesheet
from scss_bundler.reporter import BuildReport

logger = logging.getLogger(__name__)


# Map event kinds to human-readable strings
EVENT_LABELS = {
    EventKind.ADDED: "[green]added[/green]",
    EventKind.CHANGED: "[yellow]modified[/yellow]",
    EventKind.REMOVED: "[red]deleted[/red]",
}


def events_from_changes(changes: Iterable[tuple[Change, str]]) -> list[FileEvent]:
    """Collapse one watchfiles batch into at most one event per path.

    A batch can hold several raw changes for the same file (editors that
    save by delete + create, for instance), so the file's presence on disk
    after the batch decides what happened.
    """
    kinds: dict[Path, set[Change]] = defaultdict(set)
    for change, raw_path in changes:
        kinds[Path(raw_path).resolve()].add(change)

    events = []
    for path in sorted(kinds):
        seen = kinds[path]
        if not path.exists():
            events.append(FileEvent.removed(path))
        elif Change.added in seen:
            events.append(FileEvent.added(path))
        else:
            events.append(FileEvent.changed(path))
    return events


def watch_and_dispatch(
    coordinator: Coordinator,
    stop_event: threading.Event | None = None,
) -> None:
    """Run the initial build, then dispatch every change until stopped.

    Stylesheets get a specific event. Every changed path, stylesheet or not,
    is followed by the catch-all notification that drives error recovery.
    """
    console = coordinator.console
    source_dir = coordinator.source_dir

    coordinator.full_build()

    console.print(
        f"\n[bold cyan]👁  Watching[/bold cyan] {escape(str(source_dir))} for changes…\n"
        "   Press [bold]Ctrl+C[/bold] to stop.\n"
    )

    try:
        for changes in watch(source_dir, watch_filter=None, stop_event=stop_event):
            for event in events_from_changes(changes):
                if is_stylesheet(event.path):
                    rel = event.path.relative_to(source_dir) if source_dir in event.path.parents else event.path
                    console.print(f"   {EVENT_LABELS[event.kind]}  {escape(str(rel))}")
                    _dispatch(coordinator, event)

                _dispatch(coordinator, FileEvent.any())

    except KeyboardInterrupt:
        console.print("\n[bold cyan]Stopped watching.[/bold cyan]")


def _dispatch(coordinator: Coordinator, event: FileEvent) -> BuildReport | None:
    console = coordinator.console
    try:
        report = coordinator.dispatch(event)
    except Exception as exc:
        console.print(f"[red]   ✗ Build error: {escape(str(exc))}[/red]\n")
        logger.exception("Handling %s failed", event)
        return None

    if event.is_generic and report.action in ("ignore", "consume_echo"):
        return report

    if report.action == "suspended":
        console.print("[yellow]   waiting for the previous error to be fixed[/yellow]\n")
    elif report.ok and report.files_written:
        console.print(
            f"[green]   ✓ {len(report.files_written)} file(s) updated[/green] "
            f"[dim]({report.action}, {report.duration_ms}ms)[/dim]\n"
        )
    elif report.ok:
        console.print(f"[dim]   nothing to rebuild ({report.action})[/dim]\n")
    return report
