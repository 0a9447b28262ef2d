"""ResultAggregator: fold per-root results into the global report."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone

from actionscan.engines.action_resolver.identity import ReferenceIdentity
from actionscan.engines.action_resolver.models import (
    RootResult,
    ScanReport,
    ScanSummary,
    UniqueAction,
)


def unique_actions(results: Sequence[RootResult]) -> list[UniqueAction]:
    """Distinct actions across all successful roots, in first-seen order.

    An action is flagged as root when it is the entry node of any root,
    even if it was first reached as another root's dependency.
    """
    root_ids = {r.node.identity for r in results if r.node is not None}

    seen: dict[ReferenceIdentity, UniqueAction] = {}
    for result in results:
        if result.node is None:
            continue
        seen.setdefault(result.node.identity, UniqueAction(result.node.identity, True))
        for dep in result.dependencies:
            seen.setdefault(dep.identity, UniqueAction(dep.identity, dep.identity in root_ids))
    return list(seen.values())


def aggregate(
    results: Sequence[RootResult],
    max_depth: int,
    *,
    timestamp: datetime | None = None,
) -> ScanReport:
    """Build a :class:`ScanReport` from the orchestrator's per-root results."""
    all_unique = unique_actions(results)
    summary = ScanSummary(
        total_root_actions=len(results),
        total_unique_actions=len(all_unique),
        max_depth_used=max_depth,
    )
    ts = timestamp or datetime.now(timezone.utc)
    return ScanReport(
        timestamp=ts.isoformat(),
        summary=summary,
        root_actions=list(results),
        all_unique_actions=all_unique,
    )
