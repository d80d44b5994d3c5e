"""Bundling writer — page-specific CSS files and the shared common file."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Iterable

from scss_bundler.compiler import SassCompiler
from scss_bundler.errors import ConfigError
from scss_bundler.models import CompiledArtifact

logger = logging.getLogger(__name__)

OUTPUT_EXTENSION = ".css"


class BundleWriter:
    """Writes compiled artifacts into the output tree."""

    def __init__(
        self,
        compiler: SassCompiler,
        source_dir: str | Path,
        out_dir: str | Path,
        shared_path: str | Path,
    ):
        self.compiler = compiler
        self.source_dir = Path(source_dir).resolve()
        self.out_dir = Path(out_dir).resolve()
        self.shared_path = Path(shared_path).resolve()

    # ── Paths ────────────────────────────────────────────────────

    def output_path_for(self, entry_path: str | Path) -> Path:
        """Mirror an entry's location under the output root with a .css suffix."""
        rel = Path(entry_path).resolve().relative_to(self.source_dir)
        return (self.out_dir / rel).with_suffix(OUTPUT_EXTENSION)

    # ── Rendering (no I/O on the output tree) ────────────────────

    def render_page(self, artifact: CompiledArtifact, common_imports: Iterable[Path]) -> str:
        """Page CSS: every non-common import compiled on its own, then the entry body."""
        common = set(common_imports)
        chunks = [
            self.compiler.render(ref) for ref in artifact.imports if ref not in common
        ]
        chunks.append(artifact.compiled_body)
        return "".join(chunks)

    def render_shared(self, common_imports: Iterable[Path]) -> str:
        return "".join(self.compiler.render(ref) for ref in common_imports)

    # ── Writing ──────────────────────────────────────────────────

    def bundle(self, artifact: CompiledArtifact, common_imports: Iterable[Path]) -> Path:
        """Render and write one entry's output file."""
        return self.write_page(artifact.entry_path, self.render_page(artifact, common_imports))

    def write_shared(self, common_imports: Iterable[Path]) -> Path:
        """Render and write the shared output file."""
        return self.write_shared_text(self.render_shared(common_imports))

    def write_page(self, entry_path: Path, css: str) -> Path:
        output = self.output_path_for(entry_path)
        _write(output, css)
        logger.debug("Wrote %s", output)
        return output

    def write_shared_text(self, css: str) -> Path:
        _write(self.shared_path, css)
        logger.debug("Wrote shared file %s", self.shared_path)
        return self.shared_path

    def remove_output(self, entry_path: str | Path) -> Path | None:
        """Delete an entry's output file. Returns the path if something was removed."""
        output = self.output_path_for(entry_path)
        if not output.exists():
            return None
        output.unlink()
        _cleanup_empty_dirs(output.parent, self.out_dir)
        return output

    def clean(self) -> None:
        """Ensure the output directory exists and is empty."""
        if self.out_dir == self.source_dir or self.out_dir in self.source_dir.parents:
            raise ConfigError(f"Refusing to clean {self.out_dir}: it contains the sources")
        self.out_dir.mkdir(parents=True, exist_ok=True)
        for child in self.out_dir.iterdir():
            if child.is_dir() and not child.is_symlink():
                shutil.rmtree(child)
            else:
                child.unlink()


def _write(path: Path, css: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(css)


def _cleanup_empty_dirs(start: Path, stop: Path) -> None:
    """Remove empty directories up to stop (exclusive)."""
    current = start
    while current != stop and current.exists():
        try:
            current.rmdir()
        except OSError:
            break
        current = current.parent
