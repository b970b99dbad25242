"""Story definition structures used by the runtime."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Union

from paperbacks.core.types import CHOICE_PROMPT, FlagValue, NodeType

StoryText = Union[str, List[str]]


@dataclass(frozen=True, slots=True)
class AudioCueDef:
    """Ambience or one-shot sound cue attached to a node."""

    id: str
    volume: float = 1.0


@dataclass(frozen=True, slots=True)
class InlineCharacterDef:
    """Character reference written directly on a node instead of by id."""

    id: str
    name: str | None = None
    portrait: str | None = None


CharacterRef = Union[str, InlineCharacterDef]


@dataclass(slots=True)
class BranchDef:
    """Conditional successor entry evaluated in authored order."""

    next: str | None
    conditions: Dict[str, FlagValue] | None = None


@dataclass(slots=True)
class StoryChoiceDef:
    """Represents a selectable choice on a choice-prompt node."""

    text: str
    next: str | None = None
    effects: Dict[str, FlagValue] = field(default_factory=dict)
    reaction: List["StoryNodeDef"] = field(default_factory=list)


@dataclass(slots=True)
class StoryNodeDef:
    """Fully parsed story node."""

    id: str | None
    type: NodeType
    text: StoryText = ""
    character: CharacterRef | None = None
    conditions: Dict[str, FlagValue] | None = None
    next: str | None = None
    next_if: List[BranchDef] = field(default_factory=list)
    effects: Dict[str, FlagValue] = field(default_factory=dict)
    inventory_add: List[str] = field(default_factory=list)
    inventory_remove: List[str] = field(default_factory=list)
    notes_add: List[str] = field(default_factory=list)
    set_ambience: AudioCueDef | None = None
    play_sfx: AudioCueDef | None = None
    choices: List[StoryChoiceDef] = field(default_factory=list)
    graphic: str | None = None

    @property
    def is_choice_prompt(self) -> bool:
        return self.type == CHOICE_PROMPT

    @property
    def has_successor(self) -> bool:
        return bool(self.next) or bool(self.next_if)


@dataclass(slots=True)
class StoryGraph:
    """Node lookup built once per session from the authored node list."""

    nodes: List[StoryNodeDef] = field(default_factory=list)
    initial_ambience: AudioCueDef | None = None
    _by_id: Dict[str, StoryNodeDef] = field(init=False, repr=False, compare=False, default_factory=dict)

    def __post_init__(self) -> None:
        # Later duplicates shadow earlier ones, matching a plain id -> node map.
        self._by_id = {node.id: node for node in self.nodes if node.id}

    def get(self, node_id: str | None) -> StoryNodeDef | None:
        """Return the node with the given id, or None when it is not in the graph."""
        if not node_id:
            return None
        return self._by_id.get(node_id)

    def __contains__(self, node_id: object) -> bool:
        return isinstance(node_id, str) and node_id in self._by_id

    def __iter__(self) -> Iterator[StoryNodeDef]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self._by_id)

    @property
    def entry_node_id(self) -> str | None:
        """Id of the first authored node, where a fresh session starts."""
        if not self.nodes:
            return None
        return self.nodes[0].id
