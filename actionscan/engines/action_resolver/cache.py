"""DependencyCache: one ActionNode per identity for the lifetime of a scan run."""

from __future__ import annotations

from collections.abc import Iterator

import structlog

from actionscan.engines.action_resolver.identity import ReferenceIdentity
from actionscan.engines.action_resolver.models import ActionNode

log = structlog.get_logger("actionscan.engine")


class DependencyCache:
    """Registry mapping :class:`ReferenceIdentity` to its single :class:`ActionNode`.

    Create one per scan run and discard it afterwards; nodes carry expansion
    state that must not leak into unrelated scans.

    :meth:`resolve` never awaits, so lookup-or-create is atomic with respect
    to other coroutines on the same event loop.
    """

    def __init__(self) -> None:
        self._nodes: dict[ReferenceIdentity, ActionNode] = {}

    def resolve(self, identity: ReferenceIdentity) -> ActionNode:
        """Return the node for *identity*, creating an unexpanded one on first use."""
        node = self._nodes.get(identity)
        if node is not None:
            log.debug("cache.hit", action=identity.full_name)
            return node
        node = ActionNode(identity=identity)
        self._nodes[identity] = node
        return node

    def get(self, identity: ReferenceIdentity) -> ActionNode | None:
        return self._nodes.get(identity)

    def __contains__(self, identity: object) -> bool:
        return identity in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[ActionNode]:
        return iter(self._nodes.values())
