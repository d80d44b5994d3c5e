"""Compilation adapter around libsass.

Entries are compiled with an importer hook that records every
``!bundler``-marked import and replaces it with empty content, so tracked
imports are never inlined into the entry's own CSS. Tracked imports are
compiled separately by :mod:`scss_bundler.writer`.

libsass only calls importers for ``@import``. A ``@use`` of a bundler URL
is rewritten to the equivalent ``@import`` before compiling, and any
bundler directive still present in the output is a compile error.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Callable

import sass

from scss_bundler.errors import CompileError
from scss_bundler.models import CompiledArtifact

logger = logging.getLogger(__name__)

BUNDLER_MARKER = "!bundler"

# @use "!bundler/..." [as ns] [with (...)]; the statement terminator is left alone
BUNDLER_USE = re.compile(
    r"""@use\s+(["'])(!bundler[^"']*)\1(?:\s+as\s+[\w*-]+|\s+with\s*\([^)]*\))*"""
)
BUNDLER_DIRECTIVE = re.compile(r"""@(?:use|forward|import)\s+["']!bundler""")

# Importer: url -> [(filename, contents)] to handle, or None to resolve normally
Importer = Callable[[str, str], "list[tuple[str, str]] | None"]
Transform = Callable[[Path, "Importer | None"], str]


def rewrite_bundler_uses(source: str) -> str:
    """Turn ``@use`` of bundler URLs into ``@import`` so the hook sees them."""
    return BUNDLER_USE.sub(lambda m: f'@import "{m.group(2)}"', source)


def sass_transform(path: Path, importer: Importer | None = None, output_style: str = "expanded") -> str:
    """Compile one file with libsass and return the CSS text."""
    kwargs = {"filename": str(path), "output_style": output_style}
    if importer is not None:
        kwargs["importers"] = [(0, importer)]
        try:
            source = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise CompileError(path, str(exc)) from exc

        rewritten = rewrite_bundler_uses(source)
        if rewritten != source:
            del kwargs["filename"]
            kwargs.update(
                string=rewritten,
                include_paths=[str(path.parent)],
                indented=path.suffix == ".sass",
            )

    try:
        css = sass.compile(**kwargs)
    except sass.CompileError as exc:
        raise CompileError(path, str(exc)) from exc
    except OSError as exc:
        raise CompileError(path, str(exc)) from exc

    if BUNDLER_DIRECTIVE.search(css):
        raise CompileError(path, f"{BUNDLER_MARKER} imports must be written as @import or @use")
    return css


class SassCompiler:
    """Compiles entry stylesheets while tracking bundler imports."""

    def __init__(
        self,
        source_dir: str | Path,
        output_style: str = "expanded",
        transform: Transform | None = None,
    ):
        self.source_dir = Path(source_dir).resolve()
        self.output_style = output_style
        self._transform = transform

    def transform(self, path: Path, importer: Importer | None = None) -> str:
        """Run the underlying transformer; raises :class:`CompileError`."""
        if self._transform is not None:
            return self._transform(path, importer)
        return sass_transform(path, importer, self.output_style)

    def render(self, path: str | Path) -> str:
        """Compile a single file on its own, without the import hook."""
        return self.transform(Path(path))

    def compile_entry(self, path: str | Path) -> CompiledArtifact:
        """Compile an entry stylesheet. Failures come back as a failed artifact."""
        path = Path(path).resolve()
        imports: list[Path] = []
        importer = self._make_importer(imports)

        try:
            css = self.transform(path, importer)
        except CompileError as exc:
            logger.debug("Compile failed for %s: %s", path, exc.message)
            return CompiledArtifact(
                entry_path=path,
                imports=tuple(imports),
                failed=True,
                error=exc.message,
            )

        logger.debug("Compiled %s (%d bundler imports)", path, len(imports))
        return CompiledArtifact(entry_path=path, imports=tuple(imports), compiled_body=css)

    def resolve_import(self, url: str) -> Path | None:
        """Resolve a ``!bundler`` URL to an existing file under the source root."""
        relative = Path(url.replace(BUNDLER_MARKER, ".", 1))
        target = (self.source_dir / relative).resolve()

        for candidate in _partial_candidates(target):
            if candidate.is_file():
                return candidate
        return None

    def _make_importer(self, imports: list[Path]) -> Importer:
        """Build the libsass importer that records bundler imports into ``imports``."""

        def importer(url: str, prev: str = "") -> list[tuple[str, str]] | None:
            if not url.startswith(BUNDLER_MARKER):
                return None

            resolved = self.resolve_import(url)
            if resolved is None:
                # Let libsass report its usual "file to import not found"
                logger.debug("Bundler import %s does not exist", url)
                return None

            if resolved not in imports:
                imports.append(resolved)
            return [(str(resolved), "")]

        return importer


def _partial_candidates(target: Path) -> list[Path]:
    """Files Sass would try for an import, in lookup order."""
    if target.suffix in (".scss", ".sass"):
        candidates = [target]
        if not target.name.startswith("_"):
            candidates.append(target.with_name(f"_{target.name}"))
        return candidates

    candidates = []
    for ext in (".scss", ".sass"):
        candidates.append(target.with_name(f"_{target.name}{ext}"))
        candidates.append(target.with_name(f"{target.name}{ext}"))
    return candidates
