"""Pure graph walks that pick the next node to show."""
from __future__ import annotations

import logging
from typing import Mapping, Set

from paperbacks.core.types import FlagValue
from paperbacks.domain.defs import StoryGraph, StoryNodeDef
from paperbacks.services.conditions import conditions_met, satisfies

logger = logging.getLogger(__name__)


def resolve_next(
    from_node: StoryNodeDef | None,
    flags: Mapping[str, FlagValue],
    graph: StoryGraph,
    visited: Set[str | None] | None = None,
) -> str | None:
    """Return the id of the node that follows ``from_node``, or None at a dead end.

    ``next_if`` branches are tried first, in authored order, and the first branch
    whose conditions hold and whose target exists wins. Otherwise ``next`` is
    followed, walking forward past targets whose own conditions fail. A node is
    never visited twice in one call, so cycles end the walk instead of looping.
    """
    seen: Set[str | None] = set() if visited is None else visited
    node = from_node
    while node is not None:
        if node.id in seen:
            logger.debug("Loop guard stopped resolution at '%s'.", node.id)
            return None
        seen.add(node.id)

        for branch in node.next_if:
            if not branch.next or not conditions_met(branch.conditions, flags):
                continue
            if branch.next in graph:
                return branch.next
            logger.warning("Branch on '%s' points at missing node '%s'.", node.id, branch.next)

        if not node.next:
            return None
        target = graph.get(node.next)
        if target is None:
            logger.warning("Node '%s' points at missing node '%s'.", node.id, node.next)
            return None
        if satisfies(target, flags):
            return target.id
        node = target
    return None


def resolve_renderable(
    start: StoryNodeDef | None,
    flags: Mapping[str, FlagValue],
    graph: StoryGraph,
) -> StoryNodeDef | None:
    """Return ``start`` if its conditions hold, else the first reachable node that satisfies them."""
    # One visited set for the whole skip, so gated nextIf cycles terminate too.
    visited: Set[str | None] = set()
    node = start
    while node is not None and not satisfies(node, flags):
        node = graph.get(resolve_next(node, flags, graph, visited))
    return node
