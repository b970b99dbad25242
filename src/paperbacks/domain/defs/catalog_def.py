"""Item and note catalog definitions."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class ItemDef:
    """Inventory item the story can hand to or take from the player."""

    id: str
    name: str
    description: str = ""
    acquired: bool = False


@dataclass(slots=True)
class NoteDef:
    """Journal note unlocked by story progress."""

    id: str
    title: str
    text: str = ""
    unlocked: bool = False
