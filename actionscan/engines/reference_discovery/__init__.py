"""Reference discovery: produce root action references for a scan."""

from actionscan.engines.reference_discovery.markdown import (
    discover_from_commit,
    discover_from_pull_request,
    extract_action_references,
)
from actionscan.engines.reference_discovery.workflows import (
    discover_from_workflows,
    extract_workflow_uses,
)

__all__ = [
    "discover_from_commit",
    "discover_from_pull_request",
    "discover_from_workflows",
    "extract_action_references",
    "extract_workflow_uses",
]
