"""Repository for story node definitions."""
from __future__ import annotations

import logging
from typing import Dict, List

from paperbacks.core.types import NODE_TYPES, FlagValue
from paperbacks.data.errors import DataValidationError
from paperbacks.data.repositories.base import RepositoryBase
from paperbacks.domain.defs import (
    AudioCueDef,
    BranchDef,
    CharacterRef,
    InlineCharacterDef,
    StoryChoiceDef,
    StoryGraph,
    StoryNodeDef,
    StoryText,
)

logger = logging.getLogger(__name__)

_SCALAR_TYPES = (bool, str, int, float)


class StoryRepository(RepositoryBase[StoryNodeDef]):
    """Loads the localized story graph from ``story.json``."""

    _top_level_type = (dict, list)

    def __init__(self, base_path=None) -> None:
        super().__init__("story.json", base_path)
        self._graph: StoryGraph | None = None

    def graph(self) -> StoryGraph:
        """Return the parsed graph, loading it on first use."""
        self._ensure_loaded()
        assert self._graph is not None
        return self._graph

    def _build(self, raw: object) -> Dict[str, StoryNodeDef]:
        self._graph = parse_story_graph(raw)
        return {node.id: node for node in self._graph.nodes if node.id}


def parse_story_graph(raw: object) -> StoryGraph:
    """Build a StoryGraph from a ``{"nodes": [...]}`` payload or a bare node list."""
    initial_ambience = None
    if isinstance(raw, dict):
        initial_ambience = parse_audio_cue(raw.get("initialAmbience"), "story initialAmbience")
        raw_nodes = raw.get("nodes", [])
    else:
        raw_nodes = raw
    if not isinstance(raw_nodes, list):
        raise DataValidationError("story nodes must be a list.")
    nodes = [parse_story_node(entry, f"story nodes[{index}]") for index, entry in enumerate(raw_nodes)]
    return StoryGraph(nodes=nodes, initial_ambience=initial_ambience)


def parse_story_node(raw: object, context: str) -> StoryNodeDef:
    """Parse one authored node (graph member or inline reaction block)."""
    node_data = RepositoryBase._require_mapping(raw, context)
    node_id = RepositoryBase._optional_str(node_data.get("id"), f"{context} id")
    if node_id:
        context = f"story node '{node_id}'"
    node_type = node_data.get("type")
    if node_type not in NODE_TYPES:
        raise DataValidationError(f"{context} type must be one of {', '.join(NODE_TYPES)}.")
    raw_choices = node_data.get("choices")
    choices: List[StoryChoiceDef] = []
    if raw_choices is not None:
        if not isinstance(raw_choices, list):
            raise DataValidationError(f"{context} choices must be a list if provided.")
        choices = [
            parse_choice(entry, f"{context} choices[{index}]") for index, entry in enumerate(raw_choices)
        ]
    return StoryNodeDef(
        id=node_id,
        type=node_type,
        text=_parse_text(node_data.get("text"), f"{context} text"),
        character=parse_character_ref(node_data.get("character"), f"{context} character"),
        conditions=parse_conditions(node_data.get("conditions"), f"{context} conditions"),
        next=RepositoryBase._optional_str(node_data.get("next"), f"{context} next"),
        next_if=_parse_branches(node_data.get("nextIf"), f"{context} nextIf"),
        effects=parse_flag_effects(node_data.get("effects"), f"{context} effects"),
        inventory_add=_parse_id_list(node_data.get("inventoryAdd"), f"{context} inventoryAdd"),
        inventory_remove=_parse_id_list(node_data.get("inventoryRemove"), f"{context} inventoryRemove"),
        notes_add=_parse_id_list(node_data.get("notesAdd"), f"{context} notesAdd"),
        set_ambience=parse_audio_cue(node_data.get("setAmbience"), f"{context} setAmbience"),
        play_sfx=parse_audio_cue(node_data.get("playSFX"), f"{context} playSFX"),
        choices=choices,
        graphic=RepositoryBase._optional_str(node_data.get("graphic"), f"{context} graphic"),
    )


def parse_choice(raw: object, context: str) -> StoryChoiceDef:
    choice_data = RepositoryBase._require_mapping(raw, context)
    raw_reaction = choice_data.get("reaction")
    reaction: List[StoryNodeDef] = []
    if raw_reaction is not None:
        if not isinstance(raw_reaction, list):
            raise DataValidationError(f"{context} reaction must be a list if provided.")
        reaction = [
            parse_story_node(entry, f"{context} reaction[{index}]") for index, entry in enumerate(raw_reaction)
        ]
    return StoryChoiceDef(
        text=RepositoryBase._require_str(choice_data.get("text"), f"{context} text"),
        next=RepositoryBase._optional_str(choice_data.get("next"), f"{context} next"),
        effects=parse_flag_effects(choice_data.get("effects"), f"{context} effects"),
        reaction=reaction,
    )


def parse_character_ref(raw: object, context: str) -> CharacterRef | None:
    if raw is None or isinstance(raw, str):
        return raw
    char_data = RepositoryBase._require_mapping(raw, context)
    return InlineCharacterDef(
        id=RepositoryBase._require_str(char_data.get("id"), f"{context} id"),
        name=RepositoryBase._optional_str(char_data.get("name"), f"{context} name"),
        portrait=RepositoryBase._optional_str(char_data.get("portrait"), f"{context} portrait"),
    )


def parse_audio_cue(raw: object, context: str) -> AudioCueDef | None:
    if raw is None:
        return None
    if isinstance(raw, str):
        return AudioCueDef(id=raw)
    cue_data = RepositoryBase._require_mapping(raw, context)
    cue_id = RepositoryBase._require_str(cue_data.get("id"), f"{context} id")
    volume = cue_data.get("volume")
    if volume is None:
        return AudioCueDef(id=cue_id)
    if isinstance(volume, bool) or not isinstance(volume, (int, float)):
        raise DataValidationError(f"{context} volume must be a number.")
    return AudioCueDef(id=cue_id, volume=float(volume))


def parse_conditions(raw: object, context: str) -> Dict[str, FlagValue] | None:
    """Parse a conditions mapping; malformed entries are dropped so they pass."""
    if raw is None:
        return None
    if not isinstance(raw, dict):
        logger.warning("%s is not a mapping; treating node as unconditional.", context)
        return None
    conditions: Dict[str, FlagValue] = {}
    for flag_id, value in raw.items():
        if not isinstance(value, _SCALAR_TYPES):
            logger.warning("%s.%s has a non-scalar value; ignoring it.", context, flag_id)
            continue
        conditions[str(flag_id)] = value
    return conditions or None


def parse_flag_effects(raw: object, context: str) -> Dict[str, FlagValue]:
    if raw is None:
        return {}
    effects_data = RepositoryBase._require_mapping(raw, context)
    effects: Dict[str, FlagValue] = {}
    for flag_id, value in effects_data.items():
        if not isinstance(value, _SCALAR_TYPES):
            raise DataValidationError(f"{context}.{flag_id} must be a boolean, string or number.")
        effects[flag_id] = value
    return effects


def _parse_text(raw: object, context: str) -> StoryText:
    if raw is None:
        return ""
    if isinstance(raw, str):
        return raw
    if isinstance(raw, list) and all(isinstance(entry, str) for entry in raw):
        return list(raw)
    raise DataValidationError(f"{context} must be a string or a list of strings.")


def _parse_branches(raw: object, context: str) -> List[BranchDef]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise DataValidationError(f"{context} must be a list if provided.")
    branches: List[BranchDef] = []
    for index, entry in enumerate(raw):
        branch_ctx = f"{context}[{index}]"
        branch_data = RepositoryBase._require_mapping(entry, branch_ctx)
        branches.append(
            BranchDef(
                next=RepositoryBase._optional_str(branch_data.get("next"), f"{branch_ctx} next"),
                conditions=parse_conditions(branch_data.get("conditions"), f"{branch_ctx} conditions"),
            )
        )
    return branches


def _parse_id_list(raw: object, context: str) -> List[str]:
    if raw is None:
        return []
    if not isinstance(raw, list) or not all(isinstance(entry, str) for entry in raw):
        raise DataValidationError(f"{context} must be a list of strings.")
    return list(raw)
