"""Discover the actions a repository's workflows use."""

from __future__ import annotations

from typing import Any

import httpx
import structlog
import yaml

from actionscan.engines.github.client import GitHubClient
from actionscan.exceptions import RateLimitError

log = structlog.get_logger("actionscan.engine")

WORKFLOWS_DIR = ".github/workflows"
_WORKFLOW_SUFFIXES = (".yml", ".yaml")


def is_local_reference(uses: str) -> bool:
    return uses.startswith(("./", "../"))


def is_docker_reference(uses: str) -> bool:
    return uses.startswith("docker://")


def extract_workflow_uses(content: str) -> list[str]:
    """Every string ``uses:`` value found anywhere in a YAML document.

    Order of first appearance is preserved; invalid YAML yields ``[]``.
    """
    try:
        document = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        log.warning("discovery.invalid_yaml", error=str(exc))
        return []

    found: dict[str, None] = {}
    _find_uses(document, found)
    return list(found)


def _find_uses(obj: Any, found: dict[str, None]) -> None:
    if isinstance(obj, list):
        for item in obj:
            _find_uses(item, found)
    elif isinstance(obj, dict):
        for key, value in obj.items():
            if key == "uses" and isinstance(value, str):
                found.setdefault(value.strip(), None)
            else:
                _find_uses(value, found)


async def discover_from_workflows(
    client: GitHubClient,
    owner: str,
    repo: str,
    ref: str | None = None,
) -> list[str]:
    """External action references used by the repository's workflows.

    Local composite actions (``uses: ./path``) referenced by the workflows
    are read as well and their external references are included.  Docker
    image references are not actions and are skipped.
    """
    repository = f"{owner}/{repo}"
    entries = await client.list_directory(owner, repo, WORKFLOWS_DIR, ref=ref)
    if entries is None:
        log.warning("discovery.no_workflows", repository=repository)
        return []

    workflow_files = [
        e for e in entries if e.get("type") == "file" and e.get("name", "").endswith(_WORKFLOW_SUFFIXES)
    ]
    log.info("discovery.workflows", repository=repository, files=len(workflow_files))

    external: dict[str, None] = {}
    local_paths: dict[str, None] = {}
    for entry in workflow_files:
        try:
            content = await client.get_file_content(owner, repo, entry["path"], ref=ref)
        except (httpx.HTTPError, RateLimitError) as exc:
            log.warning("discovery.file_failed", path=entry["path"], error=str(exc))
            continue
        if content is None:
            continue
        _split_uses(extract_workflow_uses(content), external, local_paths)

    if local_paths:
        log.info("discovery.local_actions", repository=repository, count=len(local_paths))
        for local_path in local_paths:
            content = await _fetch_local_action(client, owner, repo, local_path, ref)
            if content is None:
                continue
            # Nested local references are not followed.
            _split_uses(extract_workflow_uses(content), external, {})

    log.info("discovery.done", repository=repository, references=len(external))
    return list(external)


def _split_uses(
    uses_values: list[str],
    external: dict[str, None],
    local_paths: dict[str, None],
) -> None:
    for uses in uses_values:
        if is_docker_reference(uses):
            continue
        if is_local_reference(uses):
            local_paths.setdefault(uses, None)
        else:
            external.setdefault(uses, None)


async def _fetch_local_action(
    client: GitHubClient,
    owner: str,
    repo: str,
    local_path: str,
    ref: str | None,
) -> str | None:
    """Read ``<path>/action.yml`` (or ``.yaml``) for a ``./``-relative action."""
    clean = local_path.removeprefix("./").rstrip("/")
    for filename in ("action.yml", "action.yaml"):
        path = f"{clean}/{filename}"
        try:
            content = await client.get_file_content(owner, repo, path, ref=ref)
        except (httpx.HTTPError, RateLimitError) as exc:
            log.warning("discovery.file_failed", path=path, error=str(exc))
            return None
        if content is not None:
            return content
    log.warning("discovery.local_action_missing", path=local_path)
    return None
