from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

import pytest

from paperbacks.data.repositories import parse_story_graph
from paperbacks.domain.defs import CharacterDef, NameStateDef, StoryGraph
from paperbacks.domain.flags import FlagStore
from paperbacks.domain.inventory import Inventory
from paperbacks.domain.notes import NotesJournal
from paperbacks.services import EffectApplicator, StoryEngine


@dataclass
class RecordingAudio:
    calls: List[Tuple[str, str, float]] = field(default_factory=list)

    def play_ambience(self, cue_id: str, volume: float) -> None:
        self.calls.append(("ambience", cue_id, volume))

    def play_one_shot(self, cue_id: str, volume: float) -> None:
        self.calls.append(("sfx", cue_id, volume))


@dataclass
class Harness:
    engine: StoryEngine
    graph: StoryGraph
    flags: FlagStore
    inventory: Inventory
    notes: NotesJournal
    audio: RecordingAudio
    characters: Dict[str, CharacterDef]

    def block_ids(self) -> List[str | None]:
        return [block.id for block in self.engine.rendered_blocks]


STRANGER = CharacterDef(
    id="stranger",
    name="Stranger",
    portrait="iris.png",
    name_states=[NameStateDef(label="Iris", condition="strangerNamed"), NameStateDef(label="Hooded Stranger")],
)


@pytest.fixture
def make_harness():
    def _make(
        nodes: List[Dict[str, Any]],
        *,
        flags: Dict[str, Any] | None = None,
        characters: Dict[str, CharacterDef] | None = None,
        initial_ambience: Any = None,
        max_rendered_blocks: int = 10,
        on_begin=None,
    ) -> Harness:
        payload: Dict[str, Any] = {"nodes": nodes}
        if initial_ambience is not None:
            payload["initialAmbience"] = initial_ambience
        graph = parse_story_graph(payload)
        flag_store = FlagStore(flags or {})
        inventory = Inventory()
        notes = NotesJournal()
        audio = RecordingAudio()
        table = {"stranger": STRANGER} if characters is None else characters
        engine = StoryEngine(
            graph,
            table,
            flag_store,
            EffectApplicator(flag_store, inventory, notes),
            audio=audio,
            on_begin=on_begin,
            max_rendered_blocks=max_rendered_blocks,
        )
        return Harness(engine, graph, flag_store, inventory, notes, audio, table)

    return _make


@pytest.fixture
def abc_nodes() -> List[Dict[str, Any]]:
    """A -> B -> C where C is a two-option prompt."""
    return [
        {"id": "A", "type": "singleParagraph", "text": "First.", "next": "B"},
        {
            "id": "B",
            "type": "characterDialogue",
            "character": "stranger",
            "text": ["Hello."],
            "inventoryAdd": ["key"],
            "next": "C",
        },
        {
            "id": "C",
            "type": "dialogueChoice",
            "text": "Pick one.",
            "choices": [
                {
                    "text": "Ask her name.",
                    "effects": {"asked": True},
                    "reaction": [
                        {
                            "type": "characterDialogue",
                            "character": "stranger",
                            "text": ["Iris."],
                            "effects": {"strangerNamed": True},
                        }
                    ],
                },
                {"text": "Leave.", "next": "E"},
            ],
            "nextIf": [{"conditions": {"asked": True}, "next": "D"}],
            "next": "E",
        },
        {"id": "D", "type": "characterDialogue", "character": "stranger", "text": ["Read the margins."], "next": "F"},
        {"id": "E", "type": "singleParagraph", "text": "You leave."},
        {"id": "F", "type": "singleParagraph", "text": "The end."},
    ]
