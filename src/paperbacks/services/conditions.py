"""Condition checks over the story flag map."""
from __future__ import annotations

from typing import Mapping

from paperbacks.core.types import FlagValue
from paperbacks.domain.defs import StoryNodeDef

_MISSING = object()


def flag_equals(actual: object, expected: object) -> bool:
    """Strict equality: booleans never equal numbers, missing flags equal nothing."""
    if actual is _MISSING:
        return False
    if isinstance(actual, bool) or isinstance(expected, bool):
        return type(actual) is type(expected) and actual == expected
    if isinstance(actual, str) or isinstance(expected, str):
        return type(actual) is type(expected) and actual == expected
    return actual == expected


def conditions_met(conditions: Mapping[str, FlagValue] | None, flags: Mapping[str, FlagValue]) -> bool:
    """Return True if every required flag holds its required value."""
    if not conditions:
        return True
    return all(flag_equals(flags.get(flag_id, _MISSING), value) for flag_id, value in conditions.items())


def satisfies(node: StoryNodeDef | None, flags: Mapping[str, FlagValue]) -> bool:
    """Return True if the node has no conditions or all of them hold."""
    if node is None:
        return True
    return conditions_met(node.conditions, flags)
