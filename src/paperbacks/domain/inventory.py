"""Player inventory tracking for story items."""
from __future__ import annotations

import logging
from typing import Iterable, List, Sequence, Set

logger = logging.getLogger(__name__)


class Inventory:
    """Tracks which catalogued items the player currently holds.

    With an empty catalog any id is accepted. Otherwise ids outside the catalog
    are ignored, since authored content may reference items that were cut.
    """

    def __init__(self, catalog: Sequence[str] = (), acquired: Iterable[str] = ()) -> None:
        self._catalog: List[str] = list(dict.fromkeys(catalog))
        self._acquired: Set[str] = set()
        for item_id in acquired:
            self.acquire(item_id)

    def acquire(self, item_id: str) -> None:
        if not self._is_known(item_id):
            logger.warning("Ignoring unknown inventory item '%s'.", item_id)
            return
        self._acquired.add(item_id)

    def release(self, item_id: str) -> None:
        self._acquired.discard(item_id)

    def is_acquired(self, item_id: str) -> bool:
        return item_id in self._acquired

    def acquired_ids(self) -> List[str]:
        """Return held item ids in catalog order, or sorted when uncatalogued."""
        if not self._catalog:
            return sorted(self._acquired)
        return [item_id for item_id in self._catalog if item_id in self._acquired]

    def restore(self, item_ids: Iterable[str]) -> None:
        """Replace the held set, used when loading a save."""
        self._acquired = set()
        for item_id in item_ids:
            self.acquire(item_id)

    def _is_known(self, item_id: str) -> bool:
        return not self._catalog or item_id in self._catalog
