"""Memoized, depth-bounded expansion of action manifests."""

from __future__ import annotations

import asyncio
from typing import Any, Protocol, runtime_checkable

import structlog

from actionscan.engines.action_resolver.cache import DependencyCache
from actionscan.engines.action_resolver.identity import ReferenceIdentity
from actionscan.engines.action_resolver.models import ActionNode
from actionscan.engines.action_resolver.steps import action_steps, step_uses
from actionscan.exceptions import MalformedReferenceError, ManifestUnavailableError

log = structlog.get_logger("actionscan.engine")

DEFAULT_MAX_DEPTH = 5
DEFAULT_FETCH_TIMEOUT = 60.0  # seconds, per fetch


@runtime_checkable
class ManifestFetcher(Protocol):
    """Interface that every manifest source must satisfy.

    ``fetch`` returns the parsed manifest, or None when the action has no
    ``action.yml``/``action.yaml``.  Transient failures (network, rate limit)
    are raised as :class:`ManifestUnavailableError`.
    """

    async def fetch(self, identity: ReferenceIdentity) -> dict[str, Any] | None: ...


class GraphResolver:
    """Expand action nodes into their transitive dependencies.

    ``max_depth`` counts expansion levels: a node reached at depth *k* is
    expanded only when ``k < max_depth``, so ``max_depth=0`` leaves even the
    root unexpanded.

    A node is marked expanded *before* its children are visited.  When a
    cycle leads back to a node still being expanded, that node contributes
    only the dependencies gathered so far.
    """

    def __init__(
        self,
        cache: DependencyCache,
        fetcher: ManifestFetcher,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        fetch_timeout: float | None = DEFAULT_FETCH_TIMEOUT,
    ) -> None:
        if max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {max_depth}")
        self.cache = cache
        self.fetcher = fetcher
        self.max_depth = max_depth
        self.fetch_timeout = fetch_timeout

    async def expand(self, node: ActionNode, current_depth: int = 0) -> list[ActionNode]:
        """Expand *node* and return a snapshot of its known dependencies."""
        if current_depth >= self.max_depth:
            return node.dependency_list()

        if not node.claim():
            if not node.settled:
                log.debug(
                    "resolver.cycle_guard",
                    action=node.full_name,
                    partial_dependencies=len(node.dependencies),
                )
            return node.dependency_list()

        log.info("resolver.expand", action=node.full_name, depth=current_depth)

        try:
            manifest = await self._load_manifest(node)
            if manifest is not None:
                await self._expand_steps(node, manifest, current_depth)
        except asyncio.CancelledError:
            # Leave the node retryable; the manifest stays cached if it was fetched.
            node.release()
            raise

        node.settled = True
        return node.dependency_list()

    # ── internal ───────────────────────────────────────────────────────────

    async def _expand_steps(
        self,
        node: ActionNode,
        manifest: dict[str, Any],
        current_depth: int,
    ) -> None:
        for container_kind, container_id, step, index in action_steps(manifest):
            uses = step_uses(step)
            if uses is None:
                continue

            try:
                identity = ReferenceIdentity.parse(uses)
            except MalformedReferenceError as exc:
                log.warning(
                    "resolver.malformed_dependency",
                    action=node.full_name,
                    container=f"{container_kind}:{container_id}",
                    step=index,
                    uses=uses,
                    error=str(exc),
                )
                continue

            child = self.cache.resolve(identity)
            node.add_dependency(child)

            nested = await self.expand(child, current_depth + 1)
            for dep in nested:
                node.add_dependency(dep)

    async def _load_manifest(self, node: ActionNode) -> dict[str, Any] | None:
        """Fetch the node's manifest once; unavailable manifests make it a leaf."""
        if node.manifest_fetched:
            return node.manifest

        try:
            manifest = await asyncio.wait_for(
                self.fetcher.fetch(node.identity), timeout=self.fetch_timeout
            )
        except ManifestUnavailableError as exc:
            log.warning(
                "resolver.manifest_unavailable",
                action=node.full_name,
                error=exc.reason,
            )
            return None
        except asyncio.TimeoutError:
            log.warning(
                "resolver.fetch_timeout",
                action=node.full_name,
                timeout_seconds=self.fetch_timeout,
            )
            return None
        except Exception as exc:
            # CancelledError is a BaseException and still propagates.
            log.warning(
                "resolver.fetch_failed",
                action=node.full_name,
                error=f"{type(exc).__name__}: {exc}",
            )
            return None

        node.manifest = manifest
        node.manifest_fetched = True
        if manifest is None:
            log.info("resolver.manifest_absent", action=node.full_name)
        return manifest


async def expand(
    node: ActionNode,
    cache: DependencyCache,
    fetcher: ManifestFetcher,
    max_depth: int = DEFAULT_MAX_DEPTH,
    current_depth: int = 0,
) -> list[ActionNode]:
    """Functional shortcut for :meth:`GraphResolver.expand`."""
    resolver = GraphResolver(cache, fetcher, max_depth=max_depth)
    return await resolver.expand(node, current_depth)
