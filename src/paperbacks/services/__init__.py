"""Service layer exports."""

from .characters import resolve_character
from .conditions import conditions_met, satisfies
from .effects import AudioPlayer, EffectApplicator
from .errors import SaveLoadError, SnapshotError, StoryEngineError, TraversalInvariantError
from .save_service import SaveData, SaveService
from .snapshot_codec import SNAPSHOT_VERSION, from_snapshot, to_snapshot
from .story_engine import StoryEngine
from .traversal import resolve_next, resolve_renderable

__all__ = [
    "AudioPlayer",
    "EffectApplicator",
    "SNAPSHOT_VERSION",
    "SaveData",
    "SaveLoadError",
    "SaveService",
    "SnapshotError",
    "StoryEngine",
    "StoryEngineError",
    "TraversalInvariantError",
    "conditions_met",
    "from_snapshot",
    "resolve_character",
    "resolve_next",
    "resolve_renderable",
    "satisfies",
    "to_snapshot",
]
