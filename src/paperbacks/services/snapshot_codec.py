"""Conversion between traversal state and the persisted story snapshot."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping

from paperbacks.core.types import NODE_TYPES
from paperbacks.data.errors import DataValidationError
from paperbacks.data.repositories.story_repo import parse_character_ref, parse_choice
from paperbacks.domain.defs import (
    AudioCueDef,
    CharacterRef,
    InlineCharacterDef,
    StoryChoiceDef,
    StoryGraph,
    StoryNodeDef,
)
from paperbacks.domain.state import (
    DEFAULT_MAX_RENDERED_BLOCKS,
    CharacterIdentity,
    RenderedBlock,
    TraversalState,
)
from paperbacks.services.errors import SnapshotError

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1

Snapshot = Dict[str, Any]


def to_snapshot(state: TraversalState) -> Snapshot:
    """Return the JSON-serializable snapshot of ``state``.

    ``waiting_choice`` is deliberately absent: it is recomputed from the graph on
    restore.
    """
    blocks = state.rendered_blocks[-state.max_rendered_blocks :]
    return {
        "version": SNAPSHOT_VERSION,
        "currentNodeId": state.current_node_id,
        "renderedBlocks": [_serialize_block(block) for block in blocks],
    }


def from_snapshot(
    payload: object,
    graph: StoryGraph,
    max_rendered_blocks: int = DEFAULT_MAX_RENDERED_BLOCKS,
) -> TraversalState:
    """Rebuild traversal state from a snapshot, raising SnapshotError on bad data.

    Accepts the current versioned shape and the older unversioned shape that
    only listed recent node ids. Blocks for the older shape are re-derived from
    the graph, so their speakers are resolved live rather than frozen.
    """
    if not isinstance(payload, Mapping):
        raise SnapshotError("Story snapshot must be a JSON object.")

    if "currentNodeId" in payload:
        current_node_id = payload["currentNodeId"]
        if current_node_id is not None and not isinstance(current_node_id, str):
            raise SnapshotError("currentNodeId must be a string or null.")
    else:
        current_node_id = graph.entry_node_id

    version = payload.get("version")
    if version is None and "renderedBlocks" not in payload:
        blocks = _blocks_from_recent_ids(payload.get("recentNodeIds"), graph)
    else:
        if version is not None and (isinstance(version, bool) or not isinstance(version, int)):
            raise SnapshotError("Snapshot version must be an integer.")
        if version is not None and version != SNAPSHOT_VERSION:
            raise SnapshotError(f"Unsupported story snapshot version: {version}.")
        raw_blocks = payload.get("renderedBlocks")
        if not isinstance(raw_blocks, list):
            raise SnapshotError("renderedBlocks must be a list.")
        raw_blocks = raw_blocks[-max_rendered_blocks:]
        blocks = [_deserialize_block(entry, index) for index, entry in enumerate(raw_blocks)]

    current_node = graph.get(current_node_id)
    if current_node_id is not None and current_node is None:
        logger.warning("Snapshot position '%s' is no longer in the story.", current_node_id)
    return TraversalState(
        current_node_id=current_node_id,
        rendered_blocks=blocks,
        waiting_choice=current_node is not None and current_node.is_choice_prompt,
        max_rendered_blocks=max_rendered_blocks,
    )


def _blocks_from_recent_ids(raw_ids: object, graph: StoryGraph) -> List[RenderedBlock]:
    if raw_ids is None:
        raise SnapshotError("Snapshot has neither renderedBlocks nor recentNodeIds.")
    if not isinstance(raw_ids, list):
        raise SnapshotError("recentNodeIds must be a list.")
    blocks: List[RenderedBlock] = []
    for node_id in raw_ids:
        node = graph.get(node_id) if isinstance(node_id, str) else None
        if node is None:
            logger.debug("Dropping legacy history entry %r.", node_id)
            continue
        blocks.append(RenderedBlock.from_node(node))
    return blocks


def _serialize_block(block: RenderedBlock) -> Dict[str, Any]:
    entry: Dict[str, Any] = {
        "id": block.id,
        "type": block.type,
        "text": list(block.text) if isinstance(block.text, list) else block.text,
        "character": _serialize_character_ref(block.character),
        "frozenCharacter": _serialize_identity(block.frozen_character),
    }
    if block.is_choice_prompt:
        entry["choices"] = [_serialize_choice(choice) for choice in block.choices]
    if block.graphic:
        entry["graphic"] = block.graphic
    return entry


def _serialize_character_ref(ref: CharacterRef | None) -> Any:
    if not isinstance(ref, InlineCharacterDef):
        return ref
    payload: Dict[str, Any] = {"id": ref.id}
    if ref.name is not None:
        payload["name"] = ref.name
    if ref.portrait is not None:
        payload["portrait"] = ref.portrait
    return payload


def _serialize_identity(identity: CharacterIdentity | None) -> Dict[str, Any] | None:
    if identity is None:
        return None
    return {"id": identity.id, "name": identity.name, "portrait": identity.portrait}


def _serialize_choice(choice: StoryChoiceDef) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"text": choice.text}
    if choice.next:
        payload["next"] = choice.next
    if choice.effects:
        payload["effects"] = dict(choice.effects)
    if choice.reaction:
        payload["reaction"] = [_serialize_node(node) for node in choice.reaction]
    return payload


def _serialize_node(node: StoryNodeDef) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"type": node.type}
    if node.id:
        payload["id"] = node.id
    if node.text:
        payload["text"] = list(node.text) if isinstance(node.text, list) else node.text
    if node.character is not None:
        payload["character"] = _serialize_character_ref(node.character)
    if node.conditions:
        payload["conditions"] = dict(node.conditions)
    if node.next:
        payload["next"] = node.next
    if node.next_if:
        payload["nextIf"] = [
            {"next": branch.next, **({"conditions": dict(branch.conditions)} if branch.conditions else {})}
            for branch in node.next_if
        ]
    if node.effects:
        payload["effects"] = dict(node.effects)
    if node.inventory_add:
        payload["inventoryAdd"] = list(node.inventory_add)
    if node.inventory_remove:
        payload["inventoryRemove"] = list(node.inventory_remove)
    if node.notes_add:
        payload["notesAdd"] = list(node.notes_add)
    if node.set_ambience is not None:
        payload["setAmbience"] = _serialize_cue(node.set_ambience)
    if node.play_sfx is not None:
        payload["playSFX"] = _serialize_cue(node.play_sfx)
    if node.choices:
        payload["choices"] = [_serialize_choice(choice) for choice in node.choices]
    if node.graphic:
        payload["graphic"] = node.graphic
    return payload


def _serialize_cue(cue: AudioCueDef) -> Dict[str, Any]:
    return {"id": cue.id, "volume": cue.volume}


def _deserialize_block(raw: object, index: int) -> RenderedBlock:
    context = f"renderedBlocks[{index}]"
    if not isinstance(raw, Mapping):
        raise SnapshotError(f"{context} must be an object.")
    block_id = raw.get("id")
    if block_id is not None and not isinstance(block_id, str):
        raise SnapshotError(f"{context}.id must be a string or null.")
    block_type = raw.get("type")
    if block_type not in NODE_TYPES:
        raise SnapshotError(f"{context}.type is not a known node type.")
    text = raw.get("text", "")
    if text is None:
        text = ""
    if not isinstance(text, str) and not (
        isinstance(text, list) and all(isinstance(entry, str) for entry in text)
    ):
        raise SnapshotError(f"{context}.text must be a string or a list of strings.")

    frozen_raw = raw.get("frozenCharacter", raw.get("_frozenCharacter"))
    frozen = _deserialize_identity(frozen_raw, context)
    try:
        character = parse_character_ref(raw.get("character"), f"{context}.character")
        choices: List[StoryChoiceDef] = []
        raw_choices = raw.get("choices")
        if block_type == "dialogueChoice" and isinstance(raw_choices, list):
            choices = [
                parse_choice(entry, f"{context}.choices[{choice_index}]")
                for choice_index, entry in enumerate(raw_choices)
            ]
    except DataValidationError as exc:
        raise SnapshotError(str(exc)) from exc
    if character is None and frozen is not None:
        character = frozen.id

    graphic = raw.get("graphic")
    if graphic is not None and not isinstance(graphic, str):
        raise SnapshotError(f"{context}.graphic must be a string or null.")
    return RenderedBlock(
        id=block_id,
        type=block_type,
        text=list(text) if isinstance(text, list) else text,
        character=character,
        frozen_character=frozen,
        choices=tuple(choices),
        graphic=graphic,
    )


def _deserialize_identity(raw: object, context: str) -> CharacterIdentity | None:
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        raise SnapshotError(f"{context}.frozenCharacter must be an object or null.")
    char_id = raw.get("id")
    name = raw.get("name")
    portrait = raw.get("portrait") or ""
    if char_id is not None and not isinstance(char_id, str):
        raise SnapshotError(f"{context}.frozenCharacter.id must be a string.")
    if not isinstance(name, str) or not isinstance(portrait, str):
        raise SnapshotError(f"{context}.frozenCharacter name and portrait must be strings.")
    return CharacterIdentity(id=char_id, name=name, portrait=portrait)
