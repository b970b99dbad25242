"""Repository exports."""

from .characters_repo import CharactersRepository
from .flags_repo import FlagsRepository
from .items_repo import ItemsRepository
from .notes_repo import NotesRepository
from .story_repo import StoryRepository, parse_story_graph, parse_story_node

__all__ = [
    "CharactersRepository",
    "FlagsRepository",
    "ItemsRepository",
    "NotesRepository",
    "StoryRepository",
    "parse_story_graph",
    "parse_story_node",
]
