"""ActionScanRunner: reference discovery, then recursive resolution, then the report."""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from actionscan.engines.action_resolver.aggregator import aggregate
from actionscan.engines.action_resolver.models import ScanReport
from actionscan.engines.action_resolver.orchestrator import scan_all
from actionscan.engines.action_resolver.resolver import (
    DEFAULT_FETCH_TIMEOUT,
    DEFAULT_MAX_DEPTH,
    ManifestFetcher,
)
from actionscan.engines.github.client import GitHubClient
from actionscan.engines.github.manifest_fetcher import GitHubManifestFetcher
from actionscan.engines.reference_discovery import (
    discover_from_commit,
    discover_from_pull_request,
    discover_from_workflows,
)

log = structlog.get_logger("actionscan.engine")


class ActionScanRunner:
    """Orchestration layer: wires discovery collaborators to the resolver engine."""

    def __init__(
        self,
        client: GitHubClient,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        fetch_timeout: float | None = DEFAULT_FETCH_TIMEOUT,
        fetcher: ManifestFetcher | None = None,
    ) -> None:
        self._client = client
        self._fetcher = fetcher or GitHubManifestFetcher(client)
        self.max_depth = max_depth
        self.fetch_timeout = fetch_timeout

    async def scan_references(self, references: Sequence[str]) -> ScanReport:
        """Resolve *references* recursively and build the report."""
        if not references:
            log.info("runner.no_references")
        results = await scan_all(
            references,
            self._fetcher,
            max_depth=self.max_depth,
            fetch_timeout=self.fetch_timeout,
        )
        report = aggregate(results, self.max_depth)
        log.info(
            "runner.done",
            roots=report.summary.total_root_actions,
            unique_actions=report.summary.total_unique_actions,
            failed=sum(1 for r in results if not r.success),
        )
        return report

    async def scan_pull_request(self, owner: str, repo: str, number: int) -> ScanReport:
        log.info("runner.scan_pull_request", repository=f"{owner}/{repo}", number=number)
        references = await discover_from_pull_request(self._client, owner, repo, number)
        return await self.scan_references(references)

    async def scan_commit(self, owner: str, repo: str, sha: str) -> ScanReport:
        log.info("runner.scan_commit", repository=f"{owner}/{repo}", sha=sha)
        references = await discover_from_commit(self._client, owner, repo, sha)
        return await self.scan_references(references)

    async def scan_repository(self, owner: str, repo: str, ref: str | None = None) -> ScanReport:
        log.info("runner.scan_repository", repository=f"{owner}/{repo}", ref=ref)
        references = await discover_from_workflows(self._client, owner, repo, ref=ref)
        return await self.scan_references(references)
