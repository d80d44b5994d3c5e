"""scss-bundler CLI — build and watch SCSS bundles."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from scss_bundler import __version__
from scss_bundler.config import DEFAULT_CONFIG_FILENAME, BundlerConfig
from scss_bundler.coordinator import Coordinator
from scss_bundler.errors import BundlerError, ConfigError
from scss_bundler.watcher import watch_and_dispatch

app = typer.Typer(
    name="scss-bundler",
    help="Bundle SCSS entries and extract imports shared by every page.",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console()

# -- Helpers -------------------------------------------------------------------


def _load_config(
    config_file: str | None,
    source_dir: str | None,
    out_dir: str | None,
    shared_path: str | None,
    verbose: bool,
    output_style: str | None,
) -> BundlerConfig:
    """Load the config file and apply CLI overrides on top of it."""
    try:
        cfg = BundlerConfig.load(config_file)
        cfg = cfg.override(
            source_dir=source_dir,
            out_dir=out_dir,
            shared_path=shared_path,
            verbose=verbose or None,
            output_style=output_style,
        )
    except ConfigError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)

    # Paths given on the command line are relative to the working directory
    cwd = Path.cwd()
    if source_dir is not None:
        cfg.source_dir = str((cwd / source_dir).resolve())
    if out_dir is not None:
        cfg.out_dir = str((cwd / out_dir).resolve())
    if shared_path is not None:
        cfg.shared_path = str((cwd / shared_path).resolve())

    if not cfg.source_path.is_dir():
        console.print(f"[red]Error:[/red] Source directory not found: {cfg.source_path}")
        raise typer.Exit(1)

    return cfg


def _print_header(command: str, cfg: BundlerConfig) -> None:
    console.print(
        Panel(
            f"[bold]Source:[/bold] {cfg.source_path}\n"
            f"[bold]Output:[/bold] {cfg.out_path}\n"
            f"[bold]Shared:[/bold] {cfg.shared_file}\n"
            f"[bold]Style:[/bold] {cfg.output_style}",
            title=f"[bold cyan]scss-bundler {command}[/bold cyan]",
            border_style="cyan",
        )
    )


SOURCE_OPT = typer.Option(None, "--source-dir", "-s", help="Directory holding the SCSS sources")
OUT_OPT = typer.Option(None, "--out-dir", "-o", help="Directory for compiled CSS")
SHARED_OPT = typer.Option(None, "--shared-path", help="Path of the shared common stylesheet")
STYLE_OPT = typer.Option(None, "--output-style", help="nested, expanded, compact or compressed")
VERBOSE_OPT = typer.Option(False, "--verbose", "-v", help="Print every written file")
CONFIG_OPT = typer.Option(None, "--config", "-c", help=f"Path to {DEFAULT_CONFIG_FILENAME}")


# -- Commands ------------------------------------------------------------------


@app.command()
def build(
    source_dir: str = SOURCE_OPT,
    out_dir: str = OUT_OPT,
    shared_path: str = SHARED_OPT,
    output_style: str = STYLE_OPT,
    verbose: bool = VERBOSE_OPT,
    config: str = CONFIG_OPT,
    report: str = typer.Option(None, "--report", help="Write a JSON build report here"),
) -> None:
    """Build and bundle every SCSS entry once."""
    cfg = _load_config(config, source_dir, out_dir, shared_path, verbose, output_style)
    _print_header("build", cfg)

    coordinator = Coordinator(cfg, console=console)
    try:
        result = coordinator.full_build()
    except BundlerError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)

    result.print_summary(console)
    if report:
        result.save_json(Path(report))

    if coordinator.error_flag:
        raise typer.Exit(1)


@app.command()
def watch(
    source_dir: str = SOURCE_OPT,
    out_dir: str = OUT_OPT,
    shared_path: str = SHARED_OPT,
    output_style: str = STYLE_OPT,
    verbose: bool = VERBOSE_OPT,
    config: str = CONFIG_OPT,
) -> None:
    """Build, then rebuild incrementally whenever a stylesheet changes."""
    cfg = _load_config(config, source_dir, out_dir, shared_path, verbose, output_style)
    _print_header("watch", cfg)

    coordinator = Coordinator(cfg, console=console)
    try:
        watch_and_dispatch(coordinator)
    except BundlerError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)


@app.command()
def init(
    path: str = typer.Option(".", "--path", help="Directory to create config in"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing config"),
) -> None:
    """Create a default scss-bundler.yaml configuration file."""
    target = Path(path) / DEFAULT_CONFIG_FILENAME
    if target.exists() and not force:
        console.print(
            f"[red]Error:[/red] {target} already exists (use [cyan]--force[/cyan] to overwrite)"
        )
        raise typer.Exit(1)

    config_path = BundlerConfig().save(target)
    console.print(f"[green]✓[/green] Created config at [cyan]{config_path}[/cyan]")


@app.command()
def version() -> None:
    """Show scss-bundler version."""
    console.print(f"[bold cyan]scss-bundler[/bold cyan] v{__version__}")


# -- Logging setup -------------------------------------------------------------


@app.callback()
def main(
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
) -> None:
    """scss-bundler — incremental SCSS bundling with a shared common file."""
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


if __name__ == "__main__":
    app()
