import logging
from pathlib import Path

from paperbacks.data import paths
from paperbacks.domain.state import CharacterIdentity, RenderedBlock
from paperbacks.presentation.cli import config
from paperbacks.presentation.cli.render import format_block, render_blocks, wrap_paragraph
from paperbacks.presentation.cli.save_slots import QuickSaveStore


def test_definitions_path_prefers_explicit_then_env(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv(paths.STORY_DIR_ENV, raising=False)
    assert paths.get_definitions_path() == paths.get_repo_root() / "data" / "definitions"

    monkeypatch.setenv(paths.STORY_DIR_ENV, str(tmp_path))
    assert paths.get_definitions_path() == tmp_path
    assert paths.get_definitions_path("elsewhere") == Path("elsewhere")


def test_config_round_trip_and_defaults(tmp_path) -> None:
    path = tmp_path / "config.json"
    assert config.load_config(path) == {"text_display_mode": "instant", "log_level": "WARNING"}

    config.save_config({"text_display_mode": "step", "log_level": "debug"}, path)

    assert config.load_config(path) == {"text_display_mode": "step", "log_level": "DEBUG"}


def test_config_ignores_corrupt_file(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text("[1, 2", encoding="utf-8")

    assert config.load_config(path)["log_level"] == "WARNING"


def test_log_level_resolution_order(monkeypatch) -> None:
    monkeypatch.delenv("PAPERBACKS_DEBUG", raising=False)
    user_config = {"log_level": "ERROR"}

    assert config.resolve_log_level(user_config) == logging.ERROR
    assert config.resolve_log_level(user_config, "info") == logging.INFO

    monkeypatch.setenv("PAPERBACKS_DEBUG", "1")
    assert config.resolve_log_level(user_config) == logging.DEBUG


def test_wrap_paragraph_respects_width_and_indent() -> None:
    lines = wrap_paragraph("one two three four five six", width=12, indent="  ")

    assert all(len(line) <= 12 for line in lines)
    assert all(line.startswith("  ") for line in lines)
    assert wrap_paragraph("") == [""]


def test_format_dialogue_block_uses_frozen_speaker(monkeypatch) -> None:
    monkeypatch.delenv("PAPERBACKS_DEBUG", raising=False)
    identity = CharacterIdentity(id="stranger", name="Iris")
    block = RenderedBlock(
        id="greet", type="characterDialogue", text=["Hello."], character="stranger", frozen_character=identity
    )

    assert format_block(block, identity) == ["Iris:", "  Hello."]
    assert format_block(block, None)[0] == "???:"


def test_format_paragraph_block_separates_paragraphs(monkeypatch) -> None:
    monkeypatch.setenv("PAPERBACKS_DEBUG", "1")
    block = RenderedBlock(id="door", type="multipleParagraphs", text=["First.", "Second."])

    assert format_block(block) == ["[door]", "First.", "", "Second."]


def test_quick_save_store_skips_identical_writes(tmp_path) -> None:
    store = QuickSaveStore(tmp_path / "saves")
    assert store.read() is None
    assert not store.exists()

    assert store.write({"version": 1, "timestamp": "a", "flags": {}}) is True
    assert store.write({"version": 1, "timestamp": "b", "flags": {}}) is False
    assert store.read()["timestamp"] == "a"

    assert store.write({"version": 1, "timestamp": "c", "flags": {"lit": True}}) is True
    assert store.exists()


def test_render_blocks_pauses_between_blocks_in_step_mode(monkeypatch, capsys) -> None:
    monkeypatch.delenv("PAPERBACKS_DEBUG", raising=False)
    blocks = [
        RenderedBlock(id="a", type="singleParagraph", text="One."),
        RenderedBlock(id="b", type="singleParagraph", text="Two."),
        RenderedBlock(id="c", type="singleParagraph", text="Three."),
    ]
    pauses = []

    render_blocks(blocks, lambda block: None, pause=lambda: pauses.append(True))

    assert len(pauses) == 2
    assert capsys.readouterr().out == "One.\nTwo.\nThree.\n"


def test_render_blocks_separates_with_blank_lines_by_default(monkeypatch, capsys) -> None:
    monkeypatch.delenv("PAPERBACKS_DEBUG", raising=False)
    blocks = [
        RenderedBlock(id="a", type="singleParagraph", text="One."),
        RenderedBlock(id="b", type="singleParagraph", text="Two."),
    ]

    render_blocks(blocks, lambda block: None)

    assert capsys.readouterr().out == "One.\n\nTwo.\n"
