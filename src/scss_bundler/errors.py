"""Exception types raised and recorded by the bundler."""

from __future__ import annotations

from pathlib import Path


class BundlerError(Exception):
    """Base class for every bundler error."""


class ConfigError(BundlerError):
    """The configuration file exists but could not be used."""


class CompileError(BundlerError):
    """The stylesheet transformer rejected a file."""

    def __init__(self, path: str | Path, message: str):
        self.path = Path(path)
        self.message = message.strip()
        super().__init__(f"{self.path}: {self.message}")


class StructuralError(BundlerError):
    """In-memory bookkeeping does not match the event being handled."""


class UnrecoverableDependencyError(BundlerError):
    """A partial that entries depend on was deleted."""

    def __init__(self, missing: str | Path, affected: list[Path], shared: bool = False):
        self.missing = Path(missing)
        self.affected = list(affected)
        self.shared = shared
        kind = "Shared dependency" if shared else "Dependency"
        names = ", ".join(str(p) for p in self.affected)
        super().__init__(f"{kind} {self.missing} was removed; used by: {names}")


class OutputError(BundlerError):
    """Writing or removing a file in the output tree failed."""

    def __init__(self, path: str | Path, message: str):
        self.path = Path(path)
        self.message = message
        super().__init__(f"Could not write {self.path}: {message}")
