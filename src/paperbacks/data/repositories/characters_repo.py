"""Repository for speaking characters."""
from __future__ import annotations

from typing import Dict, List

from paperbacks.data.errors import DataValidationError
from paperbacks.data.repositories.base import RepositoryBase
from paperbacks.domain.defs import CharacterDef, NameStateDef


class CharactersRepository(RepositoryBase[CharacterDef]):
    """Loads the localized characters table from ``characters.json``."""

    def __init__(self, base_path=None) -> None:
        super().__init__("characters.json", base_path)

    def _build(self, raw: object) -> Dict[str, CharacterDef]:
        assert isinstance(raw, dict)
        characters: Dict[str, CharacterDef] = {}
        for char_id, payload in raw.items():
            context = f"character '{char_id}'"
            char_data = self._require_mapping(payload, context)
            characters[char_id] = CharacterDef(
                id=char_id,
                name=self._optional_str(char_data.get("name"), f"{context} name"),
                portrait=self._optional_str(char_data.get("portrait"), f"{context} portrait") or "",
                name_states=self._parse_name_states(char_data.get("nameStates"), context),
            )
        return characters

    def _parse_name_states(self, raw_states: object, context: str) -> List[NameStateDef]:
        if raw_states is None:
            return []
        if not isinstance(raw_states, list):
            raise DataValidationError(f"{context} nameStates must be a list if provided.")
        states: List[NameStateDef] = []
        for index, entry in enumerate(raw_states):
            state_ctx = f"{context} nameStates[{index}]"
            state_data = self._require_mapping(entry, state_ctx)
            states.append(
                NameStateDef(
                    label=self._optional_str(state_data.get("label"), f"{state_ctx} label"),
                    condition=self._optional_str(state_data.get("condition"), f"{state_ctx} condition"),
                )
            )
        return states
