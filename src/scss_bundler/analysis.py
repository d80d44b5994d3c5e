"""Common-import analysis across compiled entries."""

from __future__ import annotations

from typing import Iterable

from scss_bundler.models import CompiledArtifact


def is_common_import(import_ref, artifacts: list[CompiledArtifact]) -> bool:
    """Check if ``import_ref`` is tracked by every artifact in ``artifacts``."""
    return all(artifact.uses(import_ref) for artifact in artifacts)


def identify_common(artifacts: Iterable[CompiledArtifact]) -> tuple:
    """Return the bundler imports used by every artifact.

    The artifact with the fewest imports supplies the candidates, since the
    intersection can never be larger than its smallest member. The result
    keeps that artifact's import order; with no artifacts it is empty.
    """
    artifacts = list(artifacts)
    if not artifacts:
        return ()

    smallest = min(artifacts, key=lambda a: len(a.import_set))
    others = [a for a in artifacts if a is not smallest]

    return tuple(ref for ref in smallest.imports if is_common_import(ref, others))
