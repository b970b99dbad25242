"""Journal notes unlocked by story progress."""
from __future__ import annotations

import logging
from typing import Iterable, List, Sequence, Set

logger = logging.getLogger(__name__)


class NotesJournal:
    """Unlocked state for the catalogued journal notes."""

    def __init__(self, catalog: Sequence[str] = (), unlocked: Iterable[str] = ()) -> None:
        self._catalog: List[str] = list(dict.fromkeys(catalog))
        self._unlocked: Set[str] = set()
        for note_id in unlocked:
            self.unlock(note_id)

    def unlock(self, note_id: str) -> None:
        if self._catalog and note_id not in self._catalog:
            logger.warning("Ignoring unknown note '%s'.", note_id)
            return
        self._unlocked.add(note_id)

    def is_unlocked(self, note_id: str) -> bool:
        return note_id in self._unlocked

    def unlocked_ids(self) -> List[str]:
        if not self._catalog:
            return sorted(self._unlocked)
        return [note_id for note_id in self._catalog if note_id in self._unlocked]

    def restore(self, note_ids: Iterable[str]) -> None:
        self._unlocked = set()
        for note_id in note_ids:
            self.unlock(note_id)
