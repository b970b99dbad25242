from paperbacks.data.repositories import parse_story_node
from paperbacks.domain.flags import FlagStore
from paperbacks.domain.inventory import Inventory
from paperbacks.domain.notes import NotesJournal
from paperbacks.services.effects import EffectApplicator, play_node_cues


class _Audio:
    def __init__(self) -> None:
        self.calls = []

    def play_ambience(self, cue_id: str, volume: float) -> None:
        self.calls.append(("ambience", cue_id, volume))

    def play_one_shot(self, cue_id: str, volume: float) -> None:
        self.calls.append(("sfx", cue_id, volume))


def _applicator():
    flags = FlagStore({"doorOpen": False})
    inventory = Inventory(catalog=["key", "lamp"], acquired=["lamp"])
    notes = NotesJournal(catalog=["map"])
    return EffectApplicator(flags, inventory, notes), flags, inventory, notes


def test_apply_routes_every_mutation() -> None:
    applicator, flags, inventory, notes = _applicator()
    node = parse_story_node(
        {
            "id": "cellar",
            "type": "singleParagraph",
            "effects": {"doorOpen": True, "mood": "uneasy"},
            "inventoryAdd": ["key"],
            "inventoryRemove": ["lamp"],
            "notesAdd": ["map"],
        },
        "test node",
    )

    applicator.apply(node)

    assert flags.as_dict() == {"doorOpen": True, "mood": "uneasy"}
    assert inventory.acquired_ids() == ["key"]
    assert notes.unlocked_ids() == ["map"]


def test_reapplying_a_node_changes_nothing() -> None:
    applicator, flags, inventory, notes = _applicator()
    node = parse_story_node(
        {"id": "n", "type": "singleParagraph", "effects": {"doorOpen": True}, "inventoryAdd": ["key"]},
        "test node",
    )

    applicator.apply(node)
    once = (flags.as_dict(), inventory.acquired_ids(), notes.unlocked_ids())
    applicator.apply(node)

    assert (flags.as_dict(), inventory.acquired_ids(), notes.unlocked_ids()) == once


def test_apply_ignores_missing_node() -> None:
    applicator, flags, _, _ = _applicator()

    applicator.apply(None)

    assert flags.as_dict() == {"doorOpen": False}


def test_node_cues_play_ambience_then_sound() -> None:
    audio = _Audio()
    node = parse_story_node(
        {"id": "n", "type": "singleParagraph", "setAmbience": {"id": "wind", "volume": 0.3}, "playSFX": "thud"},
        "test node",
    )

    play_node_cues(node, audio)
    play_node_cues(node, None)
    play_node_cues(None, audio)

    assert audio.calls == [("ambience", "wind", 0.3), ("sfx", "thud", 1.0)]
