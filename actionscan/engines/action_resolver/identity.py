"""Parse ``owner/repo[/sub/path]@revision`` action references."""

from __future__ import annotations

import re
from dataclasses import dataclass

from actionscan.exceptions import MalformedReferenceError

# "actions/checkout@v4", "github/codeql-action/init@<sha>"
ACTION_REFERENCE_RE = re.compile(
    r"^(?P<owner>[^/@]+)/(?P<repo>[^/@]+)(?:/(?P<sub_path>[^@]+))?@(?P<revision>.+)$"
)


@dataclass(frozen=True)
class ReferenceIdentity:
    """Structural identity of a single action reference.

    Two identities name the same action iff all four fields match; an empty
    ``sub_path`` is distinct from any non-empty one.  The revision is kept
    verbatim (tag, branch, or commit SHA).
    """

    owner: str
    repo: str
    sub_path: str
    revision: str

    @classmethod
    def parse(cls, raw: str) -> ReferenceIdentity:
        """Parse *raw* into an identity, raising :class:`MalformedReferenceError`."""
        match = ACTION_REFERENCE_RE.match(raw)
        if match is None:
            raise MalformedReferenceError(raw)
        return cls(
            owner=match.group("owner"),
            repo=match.group("repo"),
            sub_path=match.group("sub_path") or "",
            revision=match.group("revision"),
        )

    @property
    def full_name(self) -> str:
        path = f"/{self.sub_path}" if self.sub_path else ""
        return f"{self.owner}/{self.repo}{path}@{self.revision}"

    @property
    def url(self) -> str:
        path = f"/{self.sub_path}" if self.sub_path else ""
        return f"https://github.com/{self.owner}/{self.repo}/tree/{self.revision}{path}"

    def manifest_paths(self) -> list[str]:
        """Candidate manifest file paths, in lookup order."""
        prefix = f"{self.sub_path}/" if self.sub_path else ""
        return [f"{prefix}action.yml", f"{prefix}action.yaml"]

    def to_dict(self) -> dict[str, str]:
        return {
            "full_name": self.full_name,
            "owner": self.owner,
            "repo": self.repo,
            "ref": self.revision,
            "sub_path": self.sub_path,
            "url": self.url,
        }

    def __str__(self) -> str:
        return self.full_name


def parse_reference(raw: str) -> ReferenceIdentity:
    """Shortcut for :meth:`ReferenceIdentity.parse`."""
    return ReferenceIdentity.parse(raw)
