import pytest

from paperbacks.presentation.cli import app
from paperbacks.presentation.cli.save_slots import QuickSaveStore


@pytest.fixture
def session(monkeypatch):
    monkeypatch.delenv("PAPERBACKS_STORY_DIR", raising=False)
    return app.build_session()


def _play_to_prompt(session) -> None:
    session.engine.begin()
    while not session.engine.waiting_choice:
        session.engine.advance()


def test_bundled_story_plays_through_asking_path(session) -> None:
    _play_to_prompt(session)
    assert session.engine.current_node_id == "askStranger"
    assert session.inventory.is_acquired("oldPaperback")

    session.engine.choose_index(0)
    assert session.engine.current_node_id == "irisExplains"
    assert session.notes.is_unlocked("marginNote")

    session.engine.advance()
    assert session.engine.is_ended
    assert session.engine.rendered_blocks[-1].id == "closing"


def test_bundled_story_refusal_path(session) -> None:
    _play_to_prompt(session)

    session.engine.choose_index(1)

    assert session.engine.current_node_id == "leaveShop"
    assert session.flags.get("refusedBook") is True
    assert not session.inventory.is_acquired("oldPaperback")


def test_quick_save_and_load_restore_progress(session, tmp_path, monkeypatch) -> None:
    store = QuickSaveStore(tmp_path)
    _play_to_prompt(session)
    assert app.quick_save(session, store)

    monkeypatch.delenv("PAPERBACKS_STORY_DIR", raising=False)
    fresh = app.build_session()
    assert app.quick_load(fresh, store)

    assert fresh.engine.waiting_choice is True
    assert fresh.engine.snapshot() == session.engine.snapshot()
    assert fresh.inventory.acquired_ids() == ["oldPaperback"]


def test_quick_load_without_save_fails_cleanly(session, tmp_path) -> None:
    assert app.quick_load(session, QuickSaveStore(tmp_path)) is False


def test_quick_load_rejects_bad_save_without_changes(session, tmp_path) -> None:
    store = QuickSaveStore(tmp_path)
    store.write({"version": 1, "story": {"version": 9, "renderedBlocks": []}, "flags": {"askedName": True}})
    session.engine.begin()
    before = session.engine.snapshot()

    assert app.quick_load(session, store) is False

    assert session.engine.snapshot() == before
    assert session.flags.get("askedName") is False


def test_main_quits_immediately(monkeypatch, tmp_path, capsys) -> None:
    monkeypatch.delenv("PAPERBACKS_STORY_DIR", raising=False)
    monkeypatch.setattr(app.config, "get_default_config_path", lambda: tmp_path / "config.json")
    monkeypatch.setattr("builtins.input", lambda prompt="": "q")

    app.main(["--save-dir", str(tmp_path)])

    out = capsys.readouterr().out
    assert "=== Paperbacks ===" in out
    assert "Goodbye!" in out


def _feed(monkeypatch, commands) -> None:
    pending = iter(commands)
    monkeypatch.setattr("builtins.input", lambda prompt="": next(pending))


def test_enter_after_load_continues_without_restarting(monkeypatch, tmp_path) -> None:
    monkeypatch.delenv("PAPERBACKS_STORY_DIR", raising=False)
    store = QuickSaveStore(tmp_path)
    first = app.build_session()
    first.engine.begin()
    app.quick_save(first, store)

    begun = []
    resumed = app.build_session(on_begin=lambda: begun.append(True))
    _feed(monkeypatch, ["l", "", "q"])
    app._run_story_loop(resumed, store)

    assert begun == []
    assert [block.id for block in resumed.engine.rendered_blocks] == ["lonelyStreet", "shopDoor"]


def test_step_mode_waits_between_new_blocks(monkeypatch, session, tmp_path, capsys) -> None:
    _play_to_prompt(session)
    # "1" adds three blocks; the two blank inputs step past the pauses between them.
    _feed(monkeypatch, ["1", "", "", "q"])

    app._run_story_loop(session, QuickSaveStore(tmp_path), step=True)

    out = capsys.readouterr().out
    assert "You:" in out
    assert "Iris:" in out
    assert session.engine.current_node_id == "irisExplains"


def test_new_game_restores_authored_defaults(session) -> None:
    _play_to_prompt(session)
    session.engine.choose_index(0)

    app.new_game(session)

    assert session.engine.current_node_id == "lonelyStreet"
    assert session.engine.rendered_blocks == []
    assert session.engine.has_begun is False
    assert session.flags.get("askedName") is False
    assert session.inventory.acquired_ids() == []
    assert session.notes.unlocked_ids() == []


def test_main_mentions_existing_quick_save(monkeypatch, tmp_path, capsys) -> None:
    monkeypatch.delenv("PAPERBACKS_STORY_DIR", raising=False)
    monkeypatch.setattr(app.config, "get_default_config_path", lambda: tmp_path / "config.json")
    QuickSaveStore(tmp_path).write({"version": 1, "story": None})
    _feed(monkeypatch, ["q"])

    app.main(["--save-dir", str(tmp_path)])

    assert "A quick save is available" in capsys.readouterr().out
