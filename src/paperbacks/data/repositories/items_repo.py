"""Items repository."""
from __future__ import annotations

from typing import Dict

from paperbacks.data.errors import DataValidationError
from paperbacks.data.repositories.base import RepositoryBase
from paperbacks.domain.defs import ItemDef


class ItemsRepository(RepositoryBase[ItemDef]):
    """Loads the item catalog from ``items.json`` (a list, in display order)."""

    _top_level_type = list

    def __init__(self, base_path=None) -> None:
        super().__init__("items.json", base_path)

    def _build(self, raw: object) -> Dict[str, ItemDef]:
        assert isinstance(raw, list)
        items: Dict[str, ItemDef] = {}
        for index, payload in enumerate(raw):
            context = f"items[{index}]"
            item_data = self._require_mapping(payload, context)
            item_id = self._require_str(item_data.get("id"), f"{context} id")
            if item_id in items:
                raise DataValidationError(f"Duplicate item id '{item_id}'.")
            items[item_id] = ItemDef(
                id=item_id,
                name=self._require_str(item_data.get("name"), f"item '{item_id}' name"),
                description=self._optional_str(item_data.get("description"), f"item '{item_id}' description")
                or "",
                acquired=bool(item_data.get("acquired", False)),
            )
        return items
