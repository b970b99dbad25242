"""Story traversal state machine."""
from __future__ import annotations

import logging
from typing import Callable, Dict, List, Mapping

from paperbacks.core.types import CHARACTER_LINE, FlagValue
from paperbacks.domain.defs import (
    AudioCueDef,
    CharacterDef,
    InlineCharacterDef,
    StoryChoiceDef,
    StoryGraph,
    StoryNodeDef,
)
from paperbacks.domain.flags import FlagStore
from paperbacks.domain.state import (
    DEFAULT_MAX_RENDERED_BLOCKS,
    CharacterIdentity,
    RenderedBlock,
    TraversalState,
)
from paperbacks.services.characters import resolve_character
from paperbacks.services.effects import AudioPlayer, EffectApplicator, play_ambience, play_node_cues
from paperbacks.services.errors import StoryEngineError, TraversalInvariantError
from paperbacks.services.snapshot_codec import Snapshot, from_snapshot, to_snapshot
from paperbacks.services.traversal import resolve_next, resolve_renderable

logger = logging.getLogger(__name__)

PLAYER_CHARACTER = InlineCharacterDef(id="you", name="You")


class StoryEngine:
    """Walks the story graph one advance or choice at a time.

    The engine is single-threaded: each public operation runs to completion and
    leaves the state either idle at a node, awaiting a choice, or ended.
    """

    def __init__(
        self,
        graph: StoryGraph,
        characters: Mapping[str, CharacterDef],
        flags: FlagStore,
        effects: EffectApplicator,
        *,
        audio: AudioPlayer | None = None,
        on_begin: Callable[[], None] | None = None,
        state: TraversalState | None = None,
        max_rendered_blocks: int = DEFAULT_MAX_RENDERED_BLOCKS,
    ) -> None:
        self._graph = graph
        self._characters = dict(characters)
        self._flags = flags
        self._effects = effects
        self._audio = audio
        self._on_begin = on_begin
        self._max_rendered_blocks = max_rendered_blocks
        self._state = state or TraversalState(
            current_node_id=graph.entry_node_id,
            max_rendered_blocks=max_rendered_blocks,
        )
        self._has_begun = bool(self._state.rendered_blocks)
        self._ambience_started = False
        self._check_invariants()

    @property
    def state(self) -> TraversalState:
        return self._state

    @property
    def graph(self) -> StoryGraph:
        return self._graph

    @property
    def current_node_id(self) -> str | None:
        return self._state.current_node_id

    @property
    def current_node(self) -> StoryNodeDef | None:
        return self._graph.get(self._state.current_node_id)

    @property
    def waiting_choice(self) -> bool:
        return self._state.waiting_choice

    @property
    def is_ended(self) -> bool:
        return self._state.is_ended

    @property
    def has_begun(self) -> bool:
        """True once the story was begun here or resumed from a snapshot."""
        return self._has_begun

    @property
    def rendered_blocks(self) -> List[RenderedBlock]:
        return list(self._state.rendered_blocks)

    def pending_choices(self) -> List[StoryChoiceDef]:
        """Return the choices of the prompt awaiting an answer, or an empty list."""
        if not self._state.waiting_choice:
            return []
        node = self.current_node
        return list(node.choices) if node is not None else []

    def start_ambience(self) -> None:
        """Play the opening ambience once.

        A fresh session plays the story's initial ambience unless the start node
        sets its own, which plays when that node renders. A session that already
        has history replays the most recent ambience instead.
        """
        if self._ambience_started or self._audio is None:
            return
        self._ambience_started = True
        if self._state.rendered_blocks:
            cue = self._latest_ambience()
        else:
            start = self.current_node
            if start is not None and start.set_ambience is not None:
                return
            cue = self._graph.initial_ambience
        if cue is not None:
            play_ambience(cue, self._audio)

    def reset(self) -> None:
        """Discard all progress and return to the entry node."""
        self._state = TraversalState(
            current_node_id=self._graph.entry_node_id,
            max_rendered_blocks=self._max_rendered_blocks,
        )
        self._has_begun = False
        self._ambience_started = False
        logger.info("Story reset to '%s'.", self._state.current_node_id)

    def begin(self) -> None:
        """Fire the story-begun notification on first use, then advance."""
        if not self._has_begun:
            self._has_begun = True
            logger.info("Story begun at '%s'.", self._state.current_node_id)
            if self._on_begin is not None:
                self._on_begin()
        self.advance()

    def advance(self) -> None:
        """Render the next node reachable from the current position."""
        state = self._state
        if state.current_node_id is None or state.waiting_choice:
            return
        flags = self._flags.as_dict()
        current = self._graph.get(state.current_node_id)
        if current is None:
            logger.warning("Current node '%s' is missing; ending story.", state.current_node_id)
            self._end_story()
            return

        node = resolve_renderable(current, flags, self._graph)
        if node is not None and state.has_rendered(node.id):
            # Already on screen (e.g. just after a restore); step past it once.
            node = resolve_renderable(self._graph.get(resolve_next(node, flags, self._graph)), flags, self._graph)
        if node is None:
            self._end_story()
            return

        self._effects.apply(node)
        play_node_cues(node, self._audio)
        state.append_blocks([self._freeze(node)])
        logger.debug("Rendered node '%s' (%s).", node.id, node.type)

        if node.is_choice_prompt:
            state.current_node_id = node.id
            state.waiting_choice = True
        elif not node.has_successor:
            self._end_story()
        else:
            state.current_node_id = node.id
        self._check_invariants()

    def choose(self, choice: StoryChoiceDef) -> None:
        """Answer the pending prompt with ``choice`` and move on."""
        state = self._state
        if not state.waiting_choice:
            return
        prompt = self.current_node
        merged_flags: Dict[str, FlagValue] = {**self._flags.as_dict(), **choice.effects}
        self._effects.apply_flag_effects(choice.effects)
        for reaction in choice.reaction:
            self._effects.apply(reaction)

        next_id = choice.next if choice.next else resolve_next(prompt, merged_flags, self._graph)
        next_node = self._graph.get(next_id)
        if next_id and next_node is None:
            logger.warning("Choice '%s' leads to missing node '%s'.", choice.text, next_id)
        self._effects.apply(next_node)
        play_node_cues(next_node, self._audio)

        speech = StoryNodeDef(id=None, type=CHARACTER_LINE, text=[choice.text], character=PLAYER_CHARACTER)
        inserted = [self._freeze(speech)]
        inserted.extend(self._freeze(reaction) for reaction in choice.reaction)
        if next_node is not None:
            inserted.append(self._freeze(next_node))
        if prompt is not None:
            state.remove_first(prompt.id)
        state.append_blocks(inserted)
        logger.debug("Chose '%s' at '%s' -> %s.", choice.text, state.current_node_id, next_id)

        state.waiting_choice = False
        if next_node is None:
            self._end_story()
        else:
            state.current_node_id = next_node.id
            state.waiting_choice = next_node.is_choice_prompt
        self._check_invariants()

    def choose_index(self, index: int) -> None:
        """Answer the pending prompt with the choice at ``index``."""
        choices = self.pending_choices()
        if not self._state.waiting_choice:
            raise StoryEngineError("No choice is pending.")
        if not 0 <= index < len(choices):
            raise IndexError(f"Choice index {index} is invalid for node '{self._state.current_node_id}'.")
        self.choose(choices[index])

    def identity_for(self, block: RenderedBlock) -> CharacterIdentity | None:
        """Return the block's frozen speaker, resolving live only for unfrozen blocks."""
        if block.frozen_character is not None:
            return block.frozen_character
        return resolve_character(block.character, self._characters, self._flags.as_dict())

    def last_portrait_block(self) -> RenderedBlock | None:
        """Return the most recent block whose speaker has a portrait."""
        for block in reversed(self._state.rendered_blocks):
            identity = self.identity_for(block)
            if identity is not None and identity.portrait:
                return block
        return None

    def snapshot(self) -> Snapshot:
        return to_snapshot(self._state)

    def snapshot_getter(self) -> Callable[[], Snapshot]:
        """Return a callable the host can use to pull a snapshot when saving."""
        return self.snapshot

    def restore(self, payload: object) -> None:
        """Replace the traversal state from a snapshot.

        Raises SnapshotError for malformed data, leaving the current state as it was.
        """
        restored = from_snapshot(payload, self._graph, self._max_rendered_blocks)
        self._state = restored
        self._check_invariants()
        self._has_begun = True
        self._ambience_started = False
        self.start_ambience()
        logger.info("Restored story at '%s'.", restored.current_node_id)

    def _freeze(self, node: StoryNodeDef) -> RenderedBlock:
        frozen = None
        if node.type == CHARACTER_LINE:
            frozen = resolve_character(node.character, self._characters, self._flags.as_dict())
        return RenderedBlock.from_node(node, frozen)

    def _latest_ambience(self) -> AudioCueDef | None:
        for block in reversed(self._state.rendered_blocks):
            node = self._graph.get(block.id)
            if node is not None and node.set_ambience is not None:
                return node.set_ambience
        return self._graph.initial_ambience

    def _end_story(self) -> None:
        self._state.current_node_id = None
        self._state.waiting_choice = False
        logger.info("Story ended.")

    def _check_invariants(self) -> None:
        state = self._state
        node = self.current_node
        at_prompt = node is not None and node.is_choice_prompt
        if state.waiting_choice and not at_prompt:
            raise TraversalInvariantError(
                f"Waiting on a choice but current node '{state.current_node_id}' is not a choice prompt."
            )
        # A prompt that has not been shown yet (fresh session entry) is not pending.
        if at_prompt and not state.waiting_choice and state.has_rendered(state.current_node_id):
            raise TraversalInvariantError(
                f"Choice prompt '{state.current_node_id}' is displayed but not awaiting an answer."
            )
