"""File events delivered to the coordinator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class EventKind(str, Enum):
    CHANGED = "changed"
    ADDED = "added"
    REMOVED = "removed"
    ANY = "any"


@dataclass(frozen=True)
class FileEvent:
    """One watcher notification. ``ANY`` events carry no path."""

    kind: EventKind
    path: Path | None = None

    @classmethod
    def changed(cls, path: str | Path) -> FileEvent:
        return cls(EventKind.CHANGED, Path(path).resolve())

    @classmethod
    def added(cls, path: str | Path) -> FileEvent:
        return cls(EventKind.ADDED, Path(path).resolve())

    @classmethod
    def removed(cls, path: str | Path) -> FileEvent:
        return cls(EventKind.REMOVED, Path(path).resolve())

    @classmethod
    def any(cls) -> FileEvent:
        return cls(EventKind.ANY)

    @property
    def is_generic(self) -> bool:
        return self.kind is EventKind.ANY
