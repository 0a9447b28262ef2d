"""ScanOrchestrator: resolve a batch of root references against one shared cache."""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from actionscan.engines.action_resolver.cache import DependencyCache
from actionscan.engines.action_resolver.identity import ReferenceIdentity
from actionscan.engines.action_resolver.models import RootResult
from actionscan.engines.action_resolver.resolver import (
    DEFAULT_FETCH_TIMEOUT,
    DEFAULT_MAX_DEPTH,
    GraphResolver,
    ManifestFetcher,
)

log = structlog.get_logger("actionscan.engine")


async def scan_all(
    raw_references: Sequence[str],
    fetcher: ManifestFetcher,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    fetch_timeout: float | None = DEFAULT_FETCH_TIMEOUT,
) -> list[RootResult]:
    """Resolve every root reference, one at a time, in input order.

    A fresh :class:`DependencyCache` is created for the run, so an action
    shared by several roots is fetched and expanded only once.  Repeated
    raw strings are scanned once.  A failing root is recorded in its
    :class:`RootResult` and never aborts the remaining roots.
    """
    cache = DependencyCache()
    resolver = GraphResolver(cache, fetcher, max_depth=max_depth, fetch_timeout=fetch_timeout)

    unique_refs = list(dict.fromkeys(raw_references))
    log.info("orchestrator.start", roots=len(unique_refs), max_depth=max_depth)

    results: list[RootResult] = []
    for raw in unique_refs:
        log.info("orchestrator.root", reference=raw)
        try:
            identity = ReferenceIdentity.parse(raw)
            node = cache.resolve(identity)
            dependencies = await resolver.expand(node)
        except Exception as exc:
            err_msg = f"{type(exc).__name__}: {exc}"
            log.error("orchestrator.root_failed", reference=raw, error=err_msg)
            results.append(RootResult(reference=raw, error=err_msg))
            continue

        log.info(
            "orchestrator.root_done",
            reference=raw,
            total_dependencies=len(dependencies),
        )
        results.append(RootResult(reference=raw, node=node, dependencies=dependencies))

    return results
