"""Speaker identity resolution with progressive name reveals."""
from __future__ import annotations

import logging
from typing import Mapping

from paperbacks.core.types import FlagValue
from paperbacks.domain.defs import CharacterDef, CharacterRef, InlineCharacterDef
from paperbacks.domain.state import CharacterIdentity

logger = logging.getLogger(__name__)

UNKNOWN_NAME = "???"


def resolve_character(
    ref: CharacterRef | None,
    characters: Mapping[str, CharacterDef],
    flags: Mapping[str, FlagValue],
) -> CharacterIdentity | None:
    """Map a character reference to the name and portrait to display right now.

    A character with ``name_states`` shows the first state whose condition flag
    is truthy, else the first unconditional state, else the first state. Unknown
    ids resolve to a ``"???"`` identity instead of failing; inline references
    fall back to their own name.
    """
    if ref is None:
        return None
    char_id = ref.id if isinstance(ref, InlineCharacterDef) else ref
    base = characters.get(char_id)
    if base is None:
        if isinstance(ref, InlineCharacterDef):
            return CharacterIdentity(id=char_id, name=ref.name or UNKNOWN_NAME, portrait=ref.portrait or "")
        logger.debug("Character '%s' is not in the characters table.", char_id)
        return CharacterIdentity(id=char_id, name=UNKNOWN_NAME, portrait="")

    portrait = base.portrait or ""
    if base.name_states:
        revealed = next(
            (state for state in base.name_states if state.condition and flags.get(state.condition)),
            None,
        )
        if revealed is not None:
            return CharacterIdentity(id=char_id, name=revealed.label or base.name or UNKNOWN_NAME, portrait=portrait)
        fallback = next((state for state in base.name_states if not state.condition), base.name_states[0])
        return CharacterIdentity(id=char_id, name=fallback.label or base.name or UNKNOWN_NAME, portrait=portrait)

    return CharacterIdentity(id=char_id, name=base.name or UNKNOWN_NAME, portrait=portrait)
