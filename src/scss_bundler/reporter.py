"""Build reporter — structured summaries of what a build or event did."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table


@dataclass
class BuildReport:
    """Structured report of one full build or one handled event."""

    trigger: str = "build"
    action: str = ""

    entries_compiled: int = 0
    files_written: list[str] = field(default_factory=list)
    files_removed: list[str] = field(default_factory=list)
    common_imports: list[str] = field(default_factory=list)

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_json(self) -> str:
        """Serialize report to JSON for CI/CD integration."""
        return json.dumps(
            {
                "trigger": self.trigger,
                "action": self.action,
                "ok": self.ok,
                "summary": {
                    "entries_compiled": self.entries_compiled,
                    "files_written": len(self.files_written),
                    "files_removed": len(self.files_removed),
                    "common_imports": len(self.common_imports),
                    "duration_ms": self.duration_ms,
                },
                "files_written": self.files_written,
                "files_removed": self.files_removed,
                "common_imports": self.common_imports,
                "errors": self.errors,
                "warnings": self.warnings,
            },
            indent=2,
        )

    def save_json(self, path: Path) -> None:
        """Write report JSON to file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_json(), encoding="utf-8")

    def print_summary(self, console: Console | None = None) -> None:
        """Print a rich summary to the console."""
        console = console or Console()

        if self.common_imports:
            table = Table(title="Common Imports", show_lines=False)
            table.add_column("Import")
            for ref in self.common_imports:
                table.add_row(escape(ref))
            console.print(table)

        lines = [
            f"[bold]Entries:[/bold] {self.entries_compiled} compiled",
            f"[bold]Output:[/bold] {len(self.files_written)} files written",
        ]
        if self.files_removed:
            lines.append(f"[red]-{len(self.files_removed)} removed[/red]")
        if self.errors:
            lines.append(f"[bold red]Errors:[/bold red] {len(self.errors)}")
            for err in self.errors:
                lines.append(f"  [red]{escape(err)}[/red]")
        lines.append(f"[dim]{self.duration_ms} ms[/dim]")

        console.print(
            Panel(
                "\n".join(lines),
                title="[bold cyan]Build Report[/bold cyan]",
                border_style="red" if self.errors else "cyan",
            )
        )
