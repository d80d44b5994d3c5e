"""Tests for the pure transition planners."""

from pathlib import Path

from scss_bundler.models import BuildState, CompiledArtifact
from scss_bundler.transitions import (
    Action,
    plan_entry_added,
    plan_entry_changed,
    plan_entry_removed,
    plan_generic,
    plan_partial_added,
    plan_partial_changed,
    plan_partial_removed,
)

A = Path("/src/a.scss")
B = Path("/src/b.scss")
C = Path("/src/c.scss")
P = Path("/src/_p.scss")
Q = Path("/src/_q.scss")
R = Path("/src/_r.scss")


def artifact(entry, *imports):
    return CompiledArtifact(entry_path=entry, imports=tuple(imports))


def state(*artifacts, common=(), error=False):
    return BuildState(
        artifacts={a.entry_path: a for a in artifacts},
        common_imports=tuple(common),
        error_flag=error,
    )


class TestGeneric:
    def test_ignored_when_healthy(self):
        """The catch-all event is ignored without an error."""
        assert plan_generic(state(), echo_pending=False).action is Action.IGNORE

    def test_echo_swallowed_after_error(self):
        """The echo of a failing edit is consumed."""
        assert plan_generic(state(error=True), echo_pending=True).action is Action.CONSUME_ECHO

    def test_rebuild_after_error(self):
        """The next catch-all event after an error rebuilds."""
        assert plan_generic(state(error=True), echo_pending=False).action is Action.FULL_REBUILD


class TestPartials:
    """Changes to partials never recompile entries' own bodies."""

    def test_common_partial_changed_rewrites_shared(self):
        """A common partial edit rewrites the shared file."""
        s = state(artifact(A, P), artifact(B, P), common=[P])
        assert plan_partial_changed(s, P).action is Action.WRITE_SHARED

    def test_non_common_partial_changed_rebundles_dependents(self):
        """A private partial edit rebundles its users."""
        s = state(artifact(A, P, Q), artifact(B, P), artifact(C, P, Q), common=[P])
        plan = plan_partial_changed(s, Q)
        assert plan.action is Action.BUNDLE
        assert plan.entries == (A, C)

    def test_unreferenced_partial_changed(self):
        """Editing an unused partial does nothing."""
        s = state(artifact(A, P), common=[P])
        assert plan_partial_changed(s, R).action is Action.IGNORE

    def test_partial_added_is_inert(self):
        """Adding a partial does nothing."""
        assert plan_partial_added(state(), R).action is Action.IGNORE

    def test_unreferenced_partial_removed(self):
        """Removing an unused partial does nothing."""
        s = state(artifact(A, P), common=[P])
        assert plan_partial_removed(s, R).action is Action.IGNORE

    def test_common_partial_removed(self):
        """Removing a common partial is a shared dependency error."""
        s = state(artifact(A, P, Q), artifact(B, Q, P), common=[P, Q])
        plan = plan_partial_removed(s, P)
        assert plan.action is Action.MISSING_DEPENDENCY
        assert plan.shared
        assert plan.common_imports == (Q,)
        assert plan.entries == (A, B)

    def test_non_common_partial_removed_lists_every_dependent(self):
        """Removing a private partial names every user."""
        s = state(artifact(A, P, Q), artifact(B, P), artifact(C, Q, P), common=[P])
        plan = plan_partial_removed(s, Q)
        assert plan.action is Action.MISSING_DEPENDENCY
        assert not plan.shared
        assert plan.common_imports is None
        assert plan.entries == (A, C)


class TestEntryChanged:
    def test_same_imports_bundles_one(self):
        """Unchanged imports rebundle only the edited entry."""
        old = artifact(A, P, Q)
        new = artifact(A, Q, P)
        s = state(old, artifact(B, P), common=[P])
        plan = plan_entry_changed(s, old, new)
        assert plan.action is Action.BUNDLE
        assert plan.entries == (A,)

    def test_dropping_common_import_rebuilds(self):
        """Losing a common import forces a full rebuild."""
        old = artifact(A, P)
        s = state(old, artifact(B, P), common=[P])
        assert plan_entry_changed(s, old, artifact(A)).action is Action.FULL_REBUILD

    def test_dropping_private_import_bundles_one(self):
        """Losing a private import rebundles only the entry."""
        old = artifact(A, P, Q)
        s = state(old, artifact(B, P), common=[P])
        plan = plan_entry_changed(s, old, artifact(A, P))
        assert plan.action is Action.BUNDLE
        assert plan.entries == (A,)

    def test_adding_import_without_common_change(self):
        """A new private import rebundles only the entry."""
        old = artifact(A, P)
        s = state(old, artifact(B, P), common=[P])
        plan = plan_entry_changed(s, old, artifact(A, P, Q))
        assert plan.action is Action.BUNDLE
        assert plan.entries == (A,)

    def test_adding_import_that_becomes_common_rebuilds(self):
        """A new import that every entry now uses forces a rebuild."""
        old = artifact(A, P)
        s = state(old, artifact(B, P, Q), common=[P])
        assert plan_entry_changed(s, old, artifact(A, P, Q)).action is Action.FULL_REBUILD


class TestEntryAdded:
    def test_superset_of_common_bundles_new_only(self):
        """A new entry using every common import is bundled alone."""
        s = state(artifact(A, P), artifact(B, P), common=[P])
        plan = plan_entry_added(s, artifact(C, P, Q))
        assert plan.action is Action.BUNDLE
        assert plan.entries == (C,)

    def test_missing_common_import_rebuilds(self):
        """A new entry lacking a common import forces a rebuild."""
        s = state(artifact(A, P), artifact(B, P), common=[P])
        assert plan_entry_added(s, artifact(C)).action is Action.FULL_REBUILD

    def test_first_entry_with_imports_rebuilds(self):
        """The first entry with imports starts a full rebuild."""
        assert plan_entry_added(state(), artifact(A, P)).action is Action.FULL_REBUILD

    def test_first_entry_without_imports(self):
        """The first entry without imports is bundled alone."""
        assert plan_entry_added(state(), artifact(A)).action is Action.BUNDLE


class TestEntryRemoved:
    def test_common_unchanged(self):
        """Removing an entry that leaves the common set alone only drops it."""
        s = state(artifact(A, P), artifact(B, P), common=[P])
        plan = plan_entry_removed(s, B)
        assert plan.action is Action.REMOVE_ENTRY
        assert set(plan.common_imports) == {P}

    def test_common_grows(self):
        """Removing an entry that grows the common set rebuilds."""
        s = state(artifact(A, P, Q), artifact(B, P), common=[P])
        plan = plan_entry_removed(s, B)
        assert plan.action is Action.REMOVE_ENTRY_AND_REBUILD
        assert set(plan.common_imports) == {P, Q}

    def test_last_entry_removed(self):
        """Removing the last entry empties the common set and rebuilds."""
        s = state(artifact(A, P), common=[P])
        assert plan_entry_removed(s, A).action is Action.REMOVE_ENTRY_AND_REBUILD
