"""Step extraction across workflow-style and composite action manifests."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Literal

ContainerKind = Literal["job", "composite"]


def action_steps(manifest: Any) -> Iterator[tuple[ContainerKind, str, Any, int]]:
    """Yield ``(container_kind, container_id, step, index)`` for every step.

    Visits each ``jobs.<id>.steps`` sequence first, then a composite
    manifest's ``runs.steps``.  Anything that is not shaped like a mapping
    or a sequence where one is expected is silently skipped, so malformed
    manifests simply yield nothing.
    """
    if not isinstance(manifest, dict):
        return

    jobs = manifest.get("jobs")
    if isinstance(jobs, dict):
        for job_id, job in jobs.items():
            if not isinstance(job, dict):
                continue
            steps = job.get("steps")
            if isinstance(steps, list):
                for index, step in enumerate(steps):
                    yield "job", str(job_id), step, index

    runs = manifest.get("runs")
    if isinstance(runs, dict):
        steps = runs.get("steps")
        if isinstance(steps, list):
            for index, step in enumerate(steps):
                yield "composite", "runs", step, index


def step_uses(step: Any) -> str | None:
    """Return the step's ``uses`` string, or None."""
    if not isinstance(step, dict):
        return None
    uses = step.get("uses")
    if isinstance(uses, str) and uses.strip():
        return uses.strip()
    return None
