"""Story flag storage."""
from __future__ import annotations

from typing import Dict, Mapping

from paperbacks.core.types import FlagValue


class FlagStore:
    """Named story flags seeded from authored defaults."""

    def __init__(self, defaults: Mapping[str, FlagValue] | None = None) -> None:
        self._defaults: Dict[str, FlagValue] = dict(defaults or {})
        self._flags: Dict[str, FlagValue] = dict(self._defaults)

    def get(self, flag_id: str, default: FlagValue | None = None) -> FlagValue | None:
        return self._flags.get(flag_id, default)

    def set(self, flag_id: str, value: FlagValue) -> None:
        """Set a flag; setting the value it already holds changes nothing."""
        self._flags[flag_id] = value

    def reset(self) -> None:
        """Restore every flag to its authored default."""
        self._flags = dict(self._defaults)

    def replace(self, flags: Mapping[str, FlagValue]) -> None:
        """Overwrite all flags, used when restoring a save."""
        self._flags = dict(flags)

    def as_dict(self) -> Dict[str, FlagValue]:
        """Return a copy of the current flag map."""
        return dict(self._flags)

    def __contains__(self, flag_id: object) -> bool:
        return flag_id in self._flags
