"""Notes repository."""
from __future__ import annotations

from typing import Dict

from paperbacks.data.errors import DataValidationError
from paperbacks.data.repositories.base import RepositoryBase
from paperbacks.domain.defs import NoteDef


class NotesRepository(RepositoryBase[NoteDef]):
    """Loads the journal note catalog from ``notes.json``."""

    _top_level_type = list

    def __init__(self, base_path=None) -> None:
        super().__init__("notes.json", base_path)

    def _build(self, raw: object) -> Dict[str, NoteDef]:
        assert isinstance(raw, list)
        notes: Dict[str, NoteDef] = {}
        for index, payload in enumerate(raw):
            context = f"notes[{index}]"
            note_data = self._require_mapping(payload, context)
            note_id = self._require_str(note_data.get("id"), f"{context} id")
            if note_id in notes:
                raise DataValidationError(f"Duplicate note id '{note_id}'.")
            notes[note_id] = NoteDef(
                id=note_id,
                title=self._require_str(note_data.get("title"), f"note '{note_id}' title"),
                text=self._optional_str(note_data.get("text"), f"note '{note_id}' text") or "",
                unlocked=bool(note_data.get("unlocked", False)),
            )
        return notes
