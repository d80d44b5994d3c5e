"""Data models for compiled stylesheets and the in-memory build state."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

PARTIAL_PREFIX = "_"
STYLESHEET_EXTENSIONS = {".scss", ".sass"}


def is_stylesheet(path: str | Path) -> bool:
    """Check if a path looks like a Sass/SCSS source file."""
    return Path(path).suffix in STYLESHEET_EXTENSIONS


def is_partial(path: str | Path) -> bool:
    """A partial is only ever pulled in via import, never compiled on its own."""
    return Path(path).name.startswith(PARTIAL_PREFIX)


def is_entry(path: str | Path) -> bool:
    return is_stylesheet(path) and not is_partial(path)


@dataclass
class CompiledArtifact:
    """The compiled output of one entry stylesheet plus its tracked imports."""

    entry_path: Path
    imports: tuple[Path, ...] = ()
    compiled_body: str = ""
    failed: bool = False
    error: str = ""

    @property
    def import_set(self) -> frozenset[Path]:
        return frozenset(self.imports)

    def uses(self, import_ref: Path) -> bool:
        """Check if this entry pulls in ``import_ref`` through a bundler import."""
        return import_ref in self.imports


@dataclass
class BuildState:
    """Everything the coordinator knows about the current build.

    ``common_imports`` is kept ordered (the order the shared file is written
    in) but is always compared as a set.
    """

    artifacts: dict[Path, CompiledArtifact] = field(default_factory=dict)
    common_imports: tuple[Path, ...] = ()
    error_flag: bool = False

    @property
    def common_set(self) -> frozenset[Path]:
        return frozenset(self.common_imports)

    def dependents_of(self, import_ref: Path) -> list[Path]:
        """Return every entry whose tracked imports contain ``import_ref``."""
        return sorted(
            path for path, artifact in self.artifacts.items() if artifact.uses(import_ref)
        )
