"""Discover SHA-pinned action references in markdown changed by a PR or commit."""

from __future__ import annotations

import re
from typing import Any

import httpx
import structlog

from actionscan.engines.github.client import GitHubClient
from actionscan.exceptions import RateLimitError

log = structlog.get_logger("actionscan.engine")

# "owner/repo@<40-hex sha>"; only commit-pinned references are picked up
ACTION_REFERENCE_PATTERN = re.compile(r"([A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+@[0-9a-fA-F]{40})")

_CHANGED_STATUSES = frozenset({"added", "modified"})


def extract_action_references(content: str) -> list[str]:
    """Return unique pinned references found in *content*, in order of appearance."""
    return list(dict.fromkeys(ACTION_REFERENCE_PATTERN.findall(content)))


def _is_changed_markdown(file: dict[str, Any]) -> bool:
    return str(file.get("filename", "")).endswith(".md") and file.get("status") in _CHANGED_STATUSES


async def discover_from_pull_request(
    client: GitHubClient,
    owner: str,
    repo: str,
    number: int,
) -> list[str]:
    """References from markdown files added or modified by pull request *number*.

    Files are read at the PR head commit.  Failure to read the PR or its
    file list is logged and yields no references.
    """
    log.info("discovery.pull_request", repository=f"{owner}/{repo}", number=number)
    try:
        pull = await client.get(f"/repos/{owner}/{repo}/pulls/{number}")
        head_sha = (pull.get("head") or {}).get("sha")
        files = [
            item
            async for item in client.get_paginated(f"/repos/{owner}/{repo}/pulls/{number}/files")
        ]
    except (httpx.HTTPError, RateLimitError) as exc:
        log.error(
            "discovery.pull_request_failed",
            repository=f"{owner}/{repo}",
            number=number,
            error=str(exc),
        )
        return []

    return await _collect_from_files(client, owner, repo, files, head_sha)


async def discover_from_commit(
    client: GitHubClient,
    owner: str,
    repo: str,
    sha: str,
) -> list[str]:
    """References from markdown files added or modified by commit *sha*."""
    log.info("discovery.commit", repository=f"{owner}/{repo}", sha=sha)
    try:
        commit = await client.get(f"/repos/{owner}/{repo}/commits/{sha}")
    except (httpx.HTTPError, RateLimitError) as exc:
        log.error(
            "discovery.commit_failed",
            repository=f"{owner}/{repo}",
            sha=sha,
            error=str(exc),
        )
        return []

    return await _collect_from_files(client, owner, repo, commit.get("files") or [], sha)


async def _collect_from_files(
    client: GitHubClient,
    owner: str,
    repo: str,
    files: list[dict[str, Any]],
    ref: str | None,
) -> list[str]:
    changed = [f for f in files if _is_changed_markdown(f)]
    if not changed:
        log.info("discovery.no_markdown_changes", repository=f"{owner}/{repo}")
        return []

    references: dict[str, None] = {}
    for file in changed:
        filename = file["filename"]
        log.info("discovery.file", path=filename)
        try:
            content = await client.get_file_content(owner, repo, filename, ref=ref)
        except (httpx.HTTPError, RateLimitError) as exc:
            log.warning("discovery.file_failed", path=filename, error=str(exc))
            continue
        if content is None:
            continue
        for reference in extract_action_references(content):
            references.setdefault(reference, None)

    log.info("discovery.done", repository=f"{owner}/{repo}", references=len(references))
    return list(references)
