"""Character definitions for speaker lookup."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True, slots=True)
class NameStateDef:
    """One stage of a progressive name reveal."""

    label: str | None
    condition: str | None = None


@dataclass(frozen=True, slots=True)
class CharacterDef:
    id: str
    name: str | None = None
    portrait: str = ""
    name_states: List[NameStateDef] = field(default_factory=list)
