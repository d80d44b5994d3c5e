"""Pure decision logic for incremental rebuilds.

Each planner looks at the current :class:`BuildState` (and, for entries, the
freshly compiled artifact) and returns a :class:`Plan` naming the smallest
piece of work that keeps the common-import set equal to the intersection of
every entry's imports. Planners never touch the filesystem or mutate state;
:class:`scss_bundler.coordinator.Coordinator` carries the plans out.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from scss_bundler.analysis import identify_common
from scss_bundler.models import BuildState, CompiledArtifact


class Action(str, Enum):
    IGNORE = "ignore"
    CONSUME_ECHO = "consume_echo"
    FULL_REBUILD = "full_rebuild"
    WRITE_SHARED = "write_shared"
    BUNDLE = "bundle"
    REMOVE_ENTRY = "remove_entry"
    REMOVE_ENTRY_AND_REBUILD = "remove_entry_and_rebuild"
    MISSING_DEPENDENCY = "missing_dependency"


@dataclass(frozen=True)
class Plan:
    """What the coordinator should do next."""

    action: Action
    entries: tuple[Path, ...] = ()
    common_imports: tuple[Path, ...] | None = None
    shared: bool = False
    reason: str = ""


# ── Generic "something changed" notification ─────────────────────


def plan_generic(state: BuildState, echo_pending: bool) -> Plan:
    """Decide what a catch-all notification means.

    While healthy the notification carries no information. After an error
    the first one is the watcher echoing the failed edit and is swallowed;
    any later one means the user touched something, so try a full rebuild.
    """
    if not state.error_flag:
        return Plan(Action.IGNORE)
    if echo_pending:
        return Plan(Action.CONSUME_ECHO, reason="notification for the failed edit")
    return Plan(Action.FULL_REBUILD, reason="recovering from previous error")


# ── Partials ─────────────────────────────────────────────────────


def plan_partial_changed(state: BuildState, path: Path) -> Plan:
    if path in state.common_set:
        return Plan(Action.WRITE_SHARED, reason="common import changed")

    dependents = state.dependents_of(path)
    if dependents:
        return Plan(Action.BUNDLE, entries=tuple(dependents), reason="import changed")

    return Plan(Action.IGNORE, reason="partial not referenced by any entry")


def plan_partial_added(state: BuildState, path: Path) -> Plan:
    return Plan(Action.IGNORE, reason="partials are inert until imported")


def plan_partial_removed(state: BuildState, path: Path) -> Plan:
    dependents = state.dependents_of(path)
    if not dependents:
        return Plan(Action.IGNORE, reason="partial not referenced by any entry")

    if path in state.common_set:
        remaining = tuple(ref for ref in state.common_imports if ref != path)
        return Plan(
            Action.MISSING_DEPENDENCY,
            entries=tuple(dependents),
            common_imports=remaining,
            shared=True,
        )

    return Plan(Action.MISSING_DEPENDENCY, entries=tuple(dependents))


# ── Entries ──────────────────────────────────────────────────────


def plan_entry_changed(
    state: BuildState, old: CompiledArtifact, new: CompiledArtifact
) -> Plan:
    """Plan for an entry whose recompilation succeeded.

    ``state.artifacts`` may hold either ``old`` or ``new`` for this path;
    the planner substitutes ``new`` itself.
    """
    only_this = (new.entry_path,)

    if new.import_set == old.import_set:
        return Plan(Action.BUNDLE, entries=only_this, reason="imports unchanged")

    removed = old.import_set - new.import_set
    if removed & state.common_set:
        return Plan(Action.FULL_REBUILD, reason="a common import was dropped")

    added = new.import_set - old.import_set
    if added:
        updated = dict(state.artifacts)
        updated[new.entry_path] = new
        recomputed = identify_common(updated.values())
        if set(recomputed) != state.common_set:
            return Plan(Action.FULL_REBUILD, reason="common imports changed")

    return Plan(Action.BUNDLE, entries=only_this, reason="common imports unaffected")


def plan_entry_added(state: BuildState, new: CompiledArtifact) -> Plan:
    """Plan for a new entry; ``state.artifacts`` must not contain it yet."""
    if not state.artifacts:
        # The first entry's imports are the whole intersection
        if new.imports:
            return Plan(Action.FULL_REBUILD, reason="first entry defines the common imports")
        return Plan(Action.BUNDLE, entries=(new.entry_path,))

    if not state.common_set <= new.import_set:
        return Plan(Action.FULL_REBUILD, reason="new entry lacks a common import")

    return Plan(Action.BUNDLE, entries=(new.entry_path,), reason="common imports unaffected")


def plan_entry_removed(state: BuildState, path: Path) -> Plan:
    remaining = [a for p, a in state.artifacts.items() if p != path]
    recomputed = identify_common(remaining)

    if set(recomputed) != state.common_set:
        return Plan(
            Action.REMOVE_ENTRY_AND_REBUILD,
            entries=(path,),
            common_imports=recomputed,
            reason="common imports changed",
        )
    return Plan(Action.REMOVE_ENTRY, entries=(path,), common_imports=recomputed)
