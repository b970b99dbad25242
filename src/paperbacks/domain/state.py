"""Domain-level traversal state tracking."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

from paperbacks.core.types import CHOICE_PROMPT, NodeType
from paperbacks.domain.defs import CharacterRef, StoryChoiceDef, StoryNodeDef, StoryText

DEFAULT_MAX_RENDERED_BLOCKS = 10


@dataclass(frozen=True, slots=True)
class CharacterIdentity:
    """Display identity produced by the character resolver."""

    id: str | None
    name: str
    portrait: str = ""


@dataclass(frozen=True, slots=True)
class RenderedBlock:
    """A node committed to history, with its speaker captured at render time."""

    id: str | None
    type: NodeType
    text: StoryText
    character: CharacterRef | None = None
    frozen_character: CharacterIdentity | None = None
    choices: Tuple[StoryChoiceDef, ...] = ()
    graphic: str | None = None

    @classmethod
    def from_node(
        cls, node: StoryNodeDef, frozen_character: CharacterIdentity | None = None
    ) -> "RenderedBlock":
        text = list(node.text) if isinstance(node.text, list) else node.text
        return cls(
            id=node.id,
            type=node.type,
            text=text,
            character=node.character,
            frozen_character=frozen_character,
            choices=tuple(node.choices) if node.type == CHOICE_PROMPT else (),
            graphic=node.graphic,
        )

    @property
    def is_choice_prompt(self) -> bool:
        return self.type == CHOICE_PROMPT


@dataclass
class TraversalState:
    """Current position, choice gating and the bounded rendered history."""

    current_node_id: str | None
    rendered_blocks: List[RenderedBlock] = field(default_factory=list)
    waiting_choice: bool = False
    max_rendered_blocks: int = DEFAULT_MAX_RENDERED_BLOCKS

    def __post_init__(self) -> None:
        if self.max_rendered_blocks < 1:
            raise ValueError("max_rendered_blocks must be at least 1.")
        self._trim()

    @property
    def is_ended(self) -> bool:
        return self.current_node_id is None

    def has_rendered(self, node_id: str | None) -> bool:
        """Return True if a block with this id is already in history."""
        if not node_id:
            return False
        return any(block.id == node_id for block in self.rendered_blocks)

    def append_blocks(self, blocks: Iterable[RenderedBlock]) -> None:
        """Append blocks in order, evicting the oldest beyond the bound."""
        self.rendered_blocks.extend(blocks)
        self._trim()

    def remove_first(self, node_id: str | None) -> bool:
        """Drop the earliest history entry with the given id."""
        if not node_id:
            return False
        for index, block in enumerate(self.rendered_blocks):
            if block.id == node_id:
                del self.rendered_blocks[index]
                return True
        return False

    def _trim(self) -> None:
        overflow = len(self.rendered_blocks) - self.max_rendered_blocks
        if overflow > 0:
            del self.rendered_blocks[:overflow]
