"""Serialization helpers for quick save/load."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping

from paperbacks.core.types import FlagValue
from paperbacks.domain.flags import FlagStore
from paperbacks.domain.inventory import Inventory
from paperbacks.domain.notes import NotesJournal
from paperbacks.services.errors import SaveLoadError

logger = logging.getLogger(__name__)

SavePayload = Dict[str, Any]


@dataclass(slots=True)
class SaveData:
    """Validated contents of a save, not yet applied to live state."""

    story: Dict[str, Any] | None
    inventory_ids: List[str] = field(default_factory=list)
    note_ids: List[str] = field(default_factory=list)
    flags: Dict[str, FlagValue] = field(default_factory=dict)
    timestamp: str | None = None


class SaveService:
    """Converts story progress to/from a validated, versioned payload."""

    SAVE_VERSION = 1

    def __init__(self, *, flags: FlagStore, inventory: Inventory, notes: NotesJournal) -> None:
        self._flags = flags
        self._inventory = inventory
        self._notes = notes

    def serialize(self, story_snapshot: Mapping[str, Any] | None) -> SavePayload:
        """Return a JSON-serializable payload for the story snapshot plus collaborator state."""
        return {
            "version": self.SAVE_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "story": dict(story_snapshot) if story_snapshot is not None else None,
            "inventoryIds": self._inventory.acquired_ids(),
            "noteIds": self._notes.unlocked_ids(),
            "flags": self._flags.as_dict(),
        }

    def deserialize(self, payload: object) -> SaveData:
        """Validate a persisted payload without touching live state."""
        if not isinstance(payload, Mapping):
            raise SaveLoadError("Save data must be a JSON object.")
        version = payload.get("version")
        if version != self.SAVE_VERSION or isinstance(version, bool):
            raise SaveLoadError(f"Unsupported save version: {version!r}.")
        story = payload.get("story")
        if story is not None and not isinstance(story, Mapping):
            raise SaveLoadError("story must be an object or null.")
        timestamp = payload.get("timestamp")
        return SaveData(
            story=dict(story) if story is not None else None,
            inventory_ids=self._coerce_str_list(payload.get("inventoryIds"), "inventoryIds"),
            note_ids=self._coerce_str_list(payload.get("noteIds"), "noteIds"),
            flags=self._coerce_flags(payload.get("flags")),
            timestamp=timestamp if isinstance(timestamp, str) else None,
        )

    def apply(self, save_data: SaveData) -> Dict[str, Any] | None:
        """Restore flags, inventory and notes; return the story snapshot for the engine."""
        self._flags.replace(save_data.flags)
        self._inventory.restore(save_data.inventory_ids)
        self._notes.restore(save_data.note_ids)
        logger.info("Applied save from %s.", save_data.timestamp or "an unknown time")
        return save_data.story

    @staticmethod
    def _coerce_str_list(value: Any, context: str) -> List[str]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise SaveLoadError(f"{context} must be a list.")
        result: List[str] = []
        for entry in value:
            if not isinstance(entry, str):
                raise SaveLoadError(f"{context} entries must be strings.")
            result.append(entry)
        return result

    @staticmethod
    def _coerce_flags(value: Any) -> Dict[str, FlagValue]:
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise SaveLoadError("flags must be an object.")
        result: Dict[str, FlagValue] = {}
        for key, entry in value.items():
            if not isinstance(key, str):
                raise SaveLoadError("flags keys must be strings.")
            if not isinstance(entry, (bool, str, int, float)):
                raise SaveLoadError(f"flags.{key} must be a boolean, string or number.")
            result[key] = entry
        return result
