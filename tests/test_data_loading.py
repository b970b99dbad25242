import json

import pytest

from paperbacks.data import DataLoadError, DataValidationError
from paperbacks.data.repositories import (
    CharactersRepository,
    FlagsRepository,
    ItemsRepository,
    NotesRepository,
    StoryRepository,
    parse_story_graph,
    parse_story_node,
)


def _write(tmp_path, filename, payload) -> None:
    (tmp_path / filename).write_text(json.dumps(payload), encoding="utf-8")


def test_bundled_story_loads() -> None:
    graph = StoryRepository().graph()

    assert graph.entry_node_id == "lonelyStreet"
    assert graph.initial_ambience.id == "rain_street"
    assert graph.initial_ambience.volume == pytest.approx(0.6)
    prompt = graph.get("askStranger")
    assert prompt.is_choice_prompt
    assert [choice.text for choice in prompt.choices] == ["Who are you?", "I don't want the book."]
    assert prompt.choices[0].reaction[0].effects == {"strangerNamed": True}
    assert graph.get("shopDoor").play_sfx.id == "door_creak"


def test_bundled_story_references_resolve() -> None:
    graph = StoryRepository().graph()
    characters = CharactersRepository().as_dict()
    flags = FlagsRepository().defaults()
    items = {item.id for item in ItemsRepository().all()}
    notes = {note.id for note in NotesRepository().all()}

    for node in graph:
        for target in [node.next, *(branch.next for branch in node.next_if)]:
            assert target is None or target in graph
        if isinstance(node.character, str):
            assert node.character in characters
        for flag_id in (node.conditions or {}):
            assert flag_id in flags
        assert set(node.inventory_add) | set(node.inventory_remove) <= items
        assert set(node.notes_add) <= notes


def test_bundled_characters_have_name_states() -> None:
    stranger = CharactersRepository().get("stranger")

    assert stranger.portrait.endswith("iris.png")
    assert [state.label for state in stranger.name_states] == ["Iris", "Hooded Stranger"]
    assert stranger.name_states[0].condition == "strangerNamed"


def test_repository_reads_from_custom_dir(tmp_path) -> None:
    _write(tmp_path, "flags.json", {"lit": {"default": True}, "mood": {}})

    assert FlagsRepository(tmp_path).defaults() == {"lit": True, "mood": False}


def test_story_dir_env_override(tmp_path, monkeypatch) -> None:
    _write(tmp_path, "story.json", [{"id": "only", "type": "singleParagraph", "text": "Hi."}])
    monkeypatch.setenv("PAPERBACKS_STORY_DIR", str(tmp_path))

    assert StoryRepository().graph().entry_node_id == "only"


def test_missing_file_raises_load_error(tmp_path) -> None:
    with pytest.raises(DataLoadError):
        CharactersRepository(tmp_path).all()


def test_invalid_json_raises_load_error(tmp_path) -> None:
    (tmp_path / "story.json").write_text("{nodes:", encoding="utf-8")

    with pytest.raises(DataLoadError):
        StoryRepository(tmp_path).graph()


def test_wrong_top_level_type_is_rejected(tmp_path) -> None:
    _write(tmp_path, "items.json", {"key": {"name": "Key"}})

    with pytest.raises(DataValidationError):
        ItemsRepository(tmp_path).all()


def test_duplicate_catalog_ids_are_rejected(tmp_path) -> None:
    _write(tmp_path, "notes.json", [{"id": "map", "title": "Map"}, {"id": "map", "title": "Map again"}])

    with pytest.raises(DataValidationError):
        NotesRepository(tmp_path).all()


def test_unknown_node_type_is_rejected() -> None:
    with pytest.raises(DataValidationError):
        parse_story_graph({"nodes": [{"id": "x", "type": "poem"}]})


def test_malformed_conditions_are_dropped() -> None:
    node = parse_story_node(
        {"id": "x", "type": "singleParagraph", "conditions": {"ok": True, "bad": [1]}},
        "test node",
    )
    open_node = parse_story_node({"id": "y", "type": "singleParagraph", "conditions": "always"}, "test node")

    assert node.conditions == {"ok": True}
    assert open_node.conditions is None


def test_inline_character_and_text_forms() -> None:
    node = parse_story_node(
        {"type": "characterDialogue", "character": {"id": "you", "name": "You"}, "text": ["One.", "Two."]},
        "reaction",
    )

    assert node.id is None
    assert node.character.name == "You"
    assert node.text == ["One.", "Two."]


def test_repository_get_unknown_id_raises_key_error() -> None:
    with pytest.raises(KeyError):
        ItemsRepository().get("missing")


def test_story_file_must_be_object_or_list(tmp_path) -> None:
    _write(tmp_path, "story.json", "just text")

    with pytest.raises(DataValidationError, match="object or array"):
        StoryRepository(tmp_path).graph()
