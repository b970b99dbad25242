"""Domain definition exports."""

from .catalog_def import ItemDef, NoteDef
from .character_def import CharacterDef, NameStateDef
from .story_def import (
    AudioCueDef,
    BranchDef,
    CharacterRef,
    InlineCharacterDef,
    StoryChoiceDef,
    StoryGraph,
    StoryNodeDef,
    StoryText,
)

__all__ = [
    "AudioCueDef",
    "BranchDef",
    "CharacterDef",
    "CharacterRef",
    "InlineCharacterDef",
    "ItemDef",
    "NameStateDef",
    "NoteDef",
    "StoryChoiceDef",
    "StoryGraph",
    "StoryNodeDef",
    "StoryText",
]
