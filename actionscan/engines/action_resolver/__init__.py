"""Action resolver engine: recursive dependency resolution of action references."""

from actionscan.engines.action_resolver.aggregator import aggregate
from actionscan.engines.action_resolver.cache import DependencyCache
from actionscan.engines.action_resolver.identity import ReferenceIdentity, parse_reference
from actionscan.engines.action_resolver.models import (
    ActionNode,
    RootResult,
    ScanReport,
    ScanSummary,
    UniqueAction,
)
from actionscan.engines.action_resolver.orchestrator import scan_all
from actionscan.engines.action_resolver.resolver import GraphResolver, ManifestFetcher, expand

__all__ = [
    "ActionNode",
    "DependencyCache",
    "GraphResolver",
    "ManifestFetcher",
    "ReferenceIdentity",
    "RootResult",
    "ScanReport",
    "ScanSummary",
    "UniqueAction",
    "aggregate",
    "expand",
    "parse_reference",
    "scan_all",
]
