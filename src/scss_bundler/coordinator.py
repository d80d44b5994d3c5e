"""Incremental rebuild coordinator.

Owns the in-memory :class:`BuildState` for one build/watch session and turns
each file event into the smallest correct amount of recompilation. Events
are handled strictly one at a time: :meth:`Coordinator.dispatch` returns only
after every write for the event has finished.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from scss_bundler.analysis import identify_common
from scss_bundler.compiler import SassCompiler
from scss_bundler.config import BundlerConfig
from scss_bundler.errors import (
    BundlerError,
    CompileError,
    OutputError,
    StructuralError,
    UnrecoverableDependencyError,
)
from scss_bundler.events import EventKind, FileEvent
from scss_bundler.models import BuildState, is_entry, is_partial, is_stylesheet
from scss_bundler.reporter import BuildReport
from scss_bundler.transitions import (
    Action,
    Plan,
    plan_entry_added,
    plan_entry_changed,
    plan_entry_removed,
    plan_generic,
    plan_partial_added,
    plan_partial_changed,
    plan_partial_removed,
)
from scss_bundler.writer import BundleWriter

logger = logging.getLogger(__name__)

PARTIAL_PLANNERS = {
    EventKind.CHANGED: plan_partial_changed,
    EventKind.ADDED: plan_partial_added,
    EventKind.REMOVED: plan_partial_removed,
}


class Coordinator:
    """Event-driven state machine behind ``build`` and ``watch``."""

    def __init__(
        self,
        config: BundlerConfig,
        console: Console | None = None,
        compiler: SassCompiler | None = None,
    ):
        self.config = config
        self.console = console or Console()
        self.source_dir = config.source_path
        self.compiler = compiler or SassCompiler(self.source_dir, output_style=config.output_style)
        self.writer = BundleWriter(
            self.compiler, self.source_dir, config.out_path, config.shared_file
        )

        self.state = BuildState()
        self.ready = False
        self.last_report: BuildReport | None = None

        # Set when an error is recorded for a specific event; the watcher's
        # catch-all notification for that same edit must then be ignored once.
        self._echo_pending = False
        self._current: FileEvent | None = None

    @property
    def error_flag(self) -> bool:
        return self.state.error_flag

    # ── Discovery ────────────────────────────────────────────────

    def discover_entries(self) -> list[Path]:
        """All entry stylesheets below the source root, sorted."""
        if not self.source_dir.is_dir():
            return []
        return sorted(
            p.resolve()
            for p in self.source_dir.rglob("*")
            if p.is_file() and is_entry(p)
        )

    def _tracks(self, path: Path) -> bool:
        return is_stylesheet(path) and self.source_dir in path.parents

    # ── Full build ───────────────────────────────────────────────

    def full_build(self) -> BuildReport:
        """Compile every entry from scratch and rewrite all outputs.

        Used for the initial build of a watch session and for one-shot
        builds; afterwards ``error_flag`` tells whether it succeeded.
        """
        self.ready = True
        report = BuildReport(trigger="build", action=Action.FULL_REBUILD.value)
        start = time.perf_counter()
        self._full_rebuild(report)
        report.duration_ms = _elapsed_ms(start)
        self.last_report = report
        return report

    def _full_rebuild(self, report: BuildReport) -> None:
        start = time.perf_counter()
        self.console.print("[bold cyan]Bundling SCSS…[/bold cyan]")

        artifacts = {}
        for entry in self.discover_entries():
            artifact = self.compiler.compile_entry(entry)
            report.entries_compiled += 1
            if artifact.failed:
                self._record_error(report, CompileError(entry, artifact.error))
                return
            artifacts[entry] = artifact

        common = identify_common(artifacts.values())

        # Render everything before touching the output tree
        try:
            pages = [
                (artifact.entry_path, self.writer.render_page(artifact, common))
                for artifact in artifacts.values()
            ]
            shared = self.writer.render_shared(common)
        except CompileError as exc:
            self._record_error(report, exc)
            return

        try:
            self.writer.clean()
            for entry, css in pages:
                self._written(report, self.writer.write_page(entry, css))
            self._written(report, self.writer.write_shared_text(shared))
        except OSError as exc:
            self._record_error(report, _output_error(exc, self.writer.out_dir))
            return

        self.state = BuildState(artifacts=artifacts, common_imports=common)
        report.common_imports = [self._display(ref) for ref in common]
        self.console.print(f"[green]SCSS bundled[/green] ({_elapsed_ms(start)}ms)")

    # ── Event reception ──────────────────────────────────────────

    def dispatch(self, event: FileEvent) -> BuildReport:
        """Handle one watcher event end to end."""
        label = event.kind.value if event.is_generic else f"{event.kind.value} {event.path}"
        report = BuildReport(trigger=label)
        start = time.perf_counter()
        self._current = event

        try:
            if event.is_generic:
                self._on_generic(report)
            elif not self.ready:
                raise StructuralError(f"Got '{label}' before the initial build; ignoring it")
            elif self.state.error_flag:
                report.action = "suspended"
            elif not self._tracks(event.path):
                report.action = Action.IGNORE.value
            elif is_partial(event.path):
                planner = PARTIAL_PLANNERS[event.kind]
                self._execute(planner(self.state, event.path), report, event.path)
            else:
                self._on_entry(event, report)
        except StructuralError as exc:
            logger.warning("%s", exc)
            report.warnings.append(str(exc))
            report.action = "aborted"
        finally:
            self._current = None

        report.duration_ms = _elapsed_ms(start)
        self.last_report = report
        return report

    def _on_generic(self, report: BuildReport) -> None:
        plan = plan_generic(self.state, self._echo_pending)
        report.action = plan.action.value

        if plan.action is Action.CONSUME_ECHO:
            self._echo_pending = False
        elif plan.action is Action.FULL_REBUILD:
            self.state.error_flag = False
            self._full_rebuild(report)

    def _on_entry(self, event: FileEvent, report: BuildReport) -> None:
        path = event.path

        if event.kind is EventKind.REMOVED:
            try:
                removed = self.writer.remove_output(path)
            except OSError as exc:
                self._record_error(report, _output_error(exc, path))
                return
            if removed is not None:
                report.files_removed.append(str(removed))
            plan = plan_entry_removed(self.state, path)
            self.state.artifacts.pop(path, None)
            self._execute(plan, report, path)
            return

        fresh = self.compiler.compile_entry(path)
        report.entries_compiled += 1
        if fresh.failed:
            self._record_error(report, CompileError(path, fresh.error))
            return

        previous = self.state.artifacts.get(path)
        if event.kind is EventKind.CHANGED:
            if previous is None:
                raise StructuralError(f"No previous build of {path}; ignoring change")
            plan = plan_entry_changed(self.state, previous, fresh)
        elif previous is not None:
            # Re-added before we saw it go away; treat as an edit
            plan = plan_entry_changed(self.state, previous, fresh)
        else:
            plan = plan_entry_added(self.state, fresh)

        self.state.artifacts[path] = fresh
        self._execute(plan, report, path)

    # ── Plan execution ───────────────────────────────────────────

    def _execute(self, plan: Plan, report: BuildReport, path: Path) -> None:
        report.action = plan.action.value
        if plan.reason:
            logger.debug("%s: %s (%s)", path, plan.action.value, plan.reason)

        if plan.action in (Action.FULL_REBUILD, Action.REMOVE_ENTRY_AND_REBUILD):
            self._full_rebuild(report)

        elif plan.action is Action.WRITE_SHARED:
            try:
                self._written(report, self.writer.write_shared(self.state.common_imports))
            except CompileError as exc:
                self._record_error(report, exc)
            except OSError as exc:
                self._record_error(report, _output_error(exc, self.writer.shared_path))

        elif plan.action is Action.BUNDLE:
            self._bundle(plan.entries, report)

        elif plan.action is Action.REMOVE_ENTRY:
            self.state.common_imports = plan.common_imports or ()
            logger.debug("Removed %s; common imports unchanged", path)

        elif plan.action is Action.MISSING_DEPENDENCY:
            if plan.common_imports is not None:
                self.state.common_imports = plan.common_imports
            self._record_error(
                report,
                UnrecoverableDependencyError(path, list(plan.entries), shared=plan.shared),
            )

    def _bundle(self, entries: tuple[Path, ...], report: BuildReport) -> None:
        common = self.state.common_imports
        try:
            rendered = [
                (entry, self.writer.render_page(self.state.artifacts[entry], common))
                for entry in entries
            ]
        except CompileError as exc:
            self._record_error(report, exc)
            return

        try:
            for entry, css in rendered:
                self._written(report, self.writer.write_page(entry, css))
        except OSError as exc:
            self._record_error(report, _output_error(exc, self.writer.out_dir))

    # ── Bookkeeping ──────────────────────────────────────────────

    def _record_error(self, report: BuildReport, exc: BundlerError) -> None:
        self.state.error_flag = True
        if self._current is not None and not self._current.is_generic:
            self._echo_pending = True

        report.errors.append(str(exc))
        self.console.print(f"[red]✗ {escape(str(exc))}[/red]")
        if isinstance(exc, UnrecoverableDependencyError):
            self.console.print(
                "[yellow]  Restore the file (or edit any stylesheet) to rebuild.[/yellow]"
            )

    def _written(self, report: BuildReport, path: Path) -> None:
        report.files_written.append(str(path))
        if self.config.verbose:
            self.console.print(f"   [dim]{escape(self._display(path))}[/dim]")

    def _display(self, path: Path) -> str:
        for root in (self.source_dir, self.writer.out_dir):
            if root in path.parents:
                return str(path.relative_to(root))
        return str(path)


def _elapsed_ms(start: float) -> int:
    return round((time.perf_counter() - start) * 1000)


def _output_error(exc: OSError, fallback: Path) -> OutputError:
    return OutputError(exc.filename or fallback, exc.strerror or str(exc))
