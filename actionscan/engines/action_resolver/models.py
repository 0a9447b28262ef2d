"""Data models for the action resolver engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from actionscan.engines.action_resolver.identity import ReferenceIdentity


@dataclass(eq=False)
class ActionNode:
    """A vertex of the action dependency graph.

    Exactly one node exists per :class:`ReferenceIdentity` within a
    :class:`~actionscan.engines.action_resolver.cache.DependencyCache`.
    ``dependencies`` holds every node transitively reachable from this one,
    keyed by identity; entries are only ever added.
    """

    identity: ReferenceIdentity
    expanded: bool = False
    settled: bool = False
    manifest: dict[str, Any] | None = None
    manifest_fetched: bool = False
    dependencies: dict[ReferenceIdentity, ActionNode] = field(default_factory=dict)

    @property
    def full_name(self) -> str:
        return self.identity.full_name

    @property
    def url(self) -> str:
        return self.identity.url

    def claim(self) -> bool:
        """Atomically mark the node as expanded; False if it already was."""
        if self.expanded:
            return False
        self.expanded = True
        return True

    def release(self) -> None:
        """Undo a claim whose expansion was cancelled before it completed."""
        self.expanded = False

    def add_dependency(self, node: ActionNode) -> None:
        self.dependencies.setdefault(node.identity, node)

    def dependency_list(self) -> list[ActionNode]:
        """Snapshot of the currently known dependencies, in discovery order."""
        return list(self.dependencies.values())

    def __repr__(self) -> str:
        return (
            f"ActionNode({self.full_name!r}, expanded={self.expanded}, "
            f"dependencies={len(self.dependencies)})"
        )


@dataclass
class RootResult:
    """Outcome of resolving a single root reference."""

    reference: str
    node: ActionNode | None = None
    dependencies: list[ActionNode] = field(default_factory=list)
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def total_dependencies(self) -> int:
        return len(self.dependencies)

    def to_dict(self) -> dict[str, Any]:
        return {
            "reference": self.reference,
            "success": self.success,
            "error": self.error,
            "total_dependencies": self.total_dependencies,
            "dependencies": [dep.identity.to_dict() for dep in self.dependencies],
        }


@dataclass
class UniqueAction:
    """One entry of the global, de-duplicated action list."""

    identity: ReferenceIdentity
    is_root_action: bool

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = self.identity.to_dict()
        d["is_root_action"] = self.is_root_action
        return d


@dataclass
class ScanSummary:
    total_root_actions: int
    total_unique_actions: int
    max_depth_used: int


@dataclass
class ScanReport:
    """Full result of a scan run: per-root outcomes plus the global view.

    This is a pure data structure; renderers live in :mod:`actionscan.report`.
    """

    timestamp: str
    summary: ScanSummary
    root_actions: list[RootResult] = field(default_factory=list)
    all_unique_actions: list[UniqueAction] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "summary": {
                "total_root_actions": self.summary.total_root_actions,
                "total_unique_actions": self.summary.total_unique_actions,
                "max_depth_used": self.summary.max_depth_used,
            },
            "root_actions": [r.to_dict() for r in self.root_actions],
            "all_unique_actions": [a.to_dict() for a in self.all_unique_actions],
        }
