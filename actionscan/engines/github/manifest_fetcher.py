"""Fetch and parse ``action.yml`` / ``action.yaml`` manifests from GitHub."""

from __future__ import annotations

from typing import Any

import httpx
import structlog
import yaml

from actionscan.engines.action_resolver.identity import ReferenceIdentity
from actionscan.engines.github.client import GitHubClient
from actionscan.exceptions import ManifestUnavailableError, RateLimitError

log = structlog.get_logger("actionscan.engine")


class GitHubManifestFetcher:
    """ManifestFetcher backed by the GitHub contents API.

    Returns None when neither manifest filename exists at the revision.
    Rate limits, timeouts, server errors, and unparseable YAML raise
    :class:`ManifestUnavailableError`.
    """

    def __init__(self, client: GitHubClient) -> None:
        self._client = client

    async def fetch(self, identity: ReferenceIdentity) -> dict[str, Any] | None:
        for path in identity.manifest_paths():
            content = await self._get_content(identity, path)
            if content is None:
                log.debug("manifest.not_found", action=identity.full_name, path=path)
                continue
            return self._parse(identity, path, content)

        log.warning("manifest.absent", action=identity.full_name)
        return None

    async def _get_content(self, identity: ReferenceIdentity, path: str) -> str | None:
        try:
            return await self._client.get_file_content(
                identity.owner, identity.repo, path, ref=identity.revision
            )
        except RateLimitError as exc:
            raise ManifestUnavailableError(identity.full_name, str(exc)) from exc
        except httpx.HTTPStatusError as exc:
            reason = f"HTTP {exc.response.status_code} fetching {path}"
            raise ManifestUnavailableError(identity.full_name, reason) from exc
        except httpx.HTTPError as exc:
            reason = f"{type(exc).__name__} fetching {path}: {exc}"
            raise ManifestUnavailableError(identity.full_name, reason) from exc

    @staticmethod
    def _parse(identity: ReferenceIdentity, path: str, content: str) -> dict[str, Any] | None:
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as exc:
            raise ManifestUnavailableError(
                identity.full_name, f"invalid YAML in {path}: {exc}"
            ) from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            log.warning(
                "manifest.unexpected_shape",
                action=identity.full_name,
                path=path,
                type=type(data).__name__,
            )
            return {}
        return data
