"""GitHub URL utilities."""

import re

# https://github.com/owner/repo[/tree|commit/<ref>]
GITHUB_URL_RE = re.compile(
    r"^https://github\.com/(?P<owner>[^/]+)/(?P<repo>[^/]+)(?:/(?:tree|commit)/(?P<ref>[^/]+))?"
)


def parse_repo_url(repo_url: str) -> tuple[str, str]:
    """Extract (owner, repo) from a GitHub URL or an ``owner/repo`` slug.

    Raises ValueError if the URL cannot be parsed.
    """
    result = _extract_owner_repo(repo_url)
    if result is None:
        raise ValueError(f"cannot parse GitHub repo URL: {repo_url!r}")
    owner, repo = result.split("/", 1)
    return owner, repo


def _extract_owner_repo(repo_url: str) -> str | None:
    """Extract 'owner/repo' from a GitHub URL.

    Handles:
      - https://github.com/owner/repo
      - https://github.com/owner/repo.git
      - https://github.com/owner/repo/tree/main
      - git@github.com:owner/repo.git
      - owner/repo
    """
    repo_url = repo_url.strip().rstrip("/")

    match = GITHUB_URL_RE.match(repo_url)
    if match:
        repo = match.group("repo")
        if repo.endswith(".git"):
            repo = repo[:-4]
        return f"{match.group('owner')}/{repo}"

    if repo_url.endswith(".git"):
        repo_url = repo_url[:-4]

    # SSH format: git@github.com:owner/repo
    if repo_url.startswith("git@"):
        colon_idx = repo_url.find(":")
        if colon_idx == -1:
            return None
        path = repo_url[colon_idx + 1 :]
        parts = path.split("/")
        if len(parts) == 2 and all(parts):
            return f"{parts[0]}/{parts[1]}"
        return None

    # Bare slug: owner/repo
    if "://" not in repo_url:
        parts = repo_url.split("/")
        if len(parts) == 2 and all(parts):
            return f"{parts[0]}/{parts[1]}"
    return None
