"""GitHub access: REST client and manifest fetcher."""

from actionscan.engines.github.client import GitHubClient
from actionscan.engines.github.manifest_fetcher import GitHubManifestFetcher

__all__ = ["GitHubClient", "GitHubManifestFetcher"]
