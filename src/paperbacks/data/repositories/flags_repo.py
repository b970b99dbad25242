"""Repository for authored flag defaults."""
from __future__ import annotations

from typing import Dict

from paperbacks.core.types import FlagValue
from paperbacks.data.errors import DataValidationError
from paperbacks.data.repositories.base import RepositoryBase


class FlagsRepository(RepositoryBase[FlagValue]):
    """Loads ``flags.json``: ``{flag_id: {"default": value}}``."""

    def __init__(self, base_path=None) -> None:
        super().__init__("flags.json", base_path)

    def _build(self, raw: object) -> Dict[str, FlagValue]:
        assert isinstance(raw, dict)
        defaults: Dict[str, FlagValue] = {}
        for flag_id, payload in raw.items():
            flag_data = self._require_mapping(payload, f"flag '{flag_id}'")
            value = flag_data.get("default", False)
            if not isinstance(value, (bool, str, int, float)):
                raise DataValidationError(f"flag '{flag_id}' default must be a boolean, string or number.")
            defaults[flag_id] = value
        return defaults

    def defaults(self) -> Dict[str, FlagValue]:
        """Return the default value for every declared flag."""
        return self.as_dict()
