"""Applies node side effects to the flag, inventory and notes collaborators."""
from __future__ import annotations

import logging
from typing import Mapping, Protocol

from paperbacks.core.types import FlagValue
from paperbacks.domain.defs import AudioCueDef, StoryNodeDef
from paperbacks.domain.flags import FlagStore
from paperbacks.domain.inventory import Inventory
from paperbacks.domain.notes import NotesJournal

logger = logging.getLogger(__name__)


class AudioPlayer(Protocol):
    """Playback collaborator; the engine only issues cues."""

    def play_ambience(self, cue_id: str, volume: float) -> None: ...

    def play_one_shot(self, cue_id: str, volume: float) -> None: ...


class EffectApplicator:
    """Routes a node's declared mutations to the owning collaborators.

    Every mutation is idempotent, so re-applying a node that was already applied
    (for example after restoring a save) leaves state unchanged.
    """

    def __init__(self, flags: FlagStore, inventory: Inventory, notes: NotesJournal) -> None:
        self._flags = flags
        self._inventory = inventory
        self._notes = notes

    def apply(self, node: StoryNodeDef | None) -> None:
        if node is None:
            return
        for item_id in node.inventory_add:
            self._inventory.acquire(item_id)
        for item_id in node.inventory_remove:
            self._inventory.release(item_id)
        for note_id in node.notes_add:
            self._notes.unlock(note_id)
        self.apply_flag_effects(node.effects)

    def apply_flag_effects(self, effects: Mapping[str, FlagValue]) -> None:
        for flag_id, value in effects.items():
            logger.debug("Setting flag %s=%r", flag_id, value)
            self._flags.set(flag_id, value)


def play_node_cues(node: StoryNodeDef | None, audio: AudioPlayer | None) -> None:
    """Fire the node's ambience change and one-shot sound, if any."""
    if node is None or audio is None:
        return
    if node.set_ambience is not None:
        play_ambience(node.set_ambience, audio)
    if node.play_sfx is not None:
        audio.play_one_shot(node.play_sfx.id, node.play_sfx.volume)


def play_ambience(cue: AudioCueDef, audio: AudioPlayer) -> None:
    audio.play_ambience(cue.id, cue.volume)
