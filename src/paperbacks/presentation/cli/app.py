"""Console-driven story loop for Paperbacks."""
from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence

from paperbacks.data.repositories import (
    CharactersRepository,
    FlagsRepository,
    ItemsRepository,
    NotesRepository,
    StoryRepository,
)
from paperbacks.domain.flags import FlagStore
from paperbacks.domain.inventory import Inventory
from paperbacks.domain.notes import NotesJournal
from paperbacks.domain.state import RenderedBlock
from paperbacks.presentation.cli import config
from paperbacks.presentation.cli.render import render_blocks, render_choices, render_heading
from paperbacks.presentation.cli.save_slots import QuickSaveStore
from paperbacks.services import (
    EffectApplicator,
    SaveLoadError,
    SaveService,
    SnapshotError,
    StoryEngine,
)

logger = logging.getLogger(__name__)


class LoggingAudio:
    """Audio stand-in for the console: cues are only logged."""

    def play_ambience(self, cue_id: str, volume: float) -> None:
        logger.info("Ambience -> %s (volume %.2f)", cue_id, volume)

    def play_one_shot(self, cue_id: str, volume: float) -> None:
        logger.info("SFX -> %s (volume %.2f)", cue_id, volume)


@dataclass(slots=True)
class StorySession:
    """Everything one play-through needs, wired together."""

    engine: StoryEngine
    save_service: SaveService
    flags: FlagStore
    inventory: Inventory
    notes: NotesJournal
    starting_items: List[str] = field(default_factory=list)
    starting_notes: List[str] = field(default_factory=list)


def build_session(story_dir: Path | str | None = None, *, on_begin=None) -> StorySession:
    """Load the authored data and construct the engine with its collaborators."""
    story_repo = StoryRepository(story_dir)
    characters_repo = CharactersRepository(story_dir)
    flags = FlagStore(FlagsRepository(story_dir).defaults())
    items = ItemsRepository(story_dir).all()
    notes_defs = NotesRepository(story_dir).all()
    inventory = Inventory(
        catalog=[item.id for item in items],
        acquired=[item.id for item in items if item.acquired],
    )
    notes = NotesJournal(
        catalog=[note.id for note in notes_defs],
        unlocked=[note.id for note in notes_defs if note.unlocked],
    )
    engine = StoryEngine(
        story_repo.graph(),
        characters_repo.as_dict(),
        flags,
        EffectApplicator(flags, inventory, notes),
        audio=LoggingAudio(),
        on_begin=on_begin,
    )
    save_service = SaveService(flags=flags, inventory=inventory, notes=notes)
    return StorySession(
        engine=engine,
        save_service=save_service,
        flags=flags,
        inventory=inventory,
        notes=notes,
        starting_items=inventory.acquired_ids(),
        starting_notes=notes.unlocked_ids(),
    )


def new_game(session: StorySession) -> None:
    """Throw away progress and restart from the first node with authored defaults."""
    session.engine.reset()
    session.flags.reset()
    session.inventory.restore(session.starting_items)
    session.notes.restore(session.starting_notes)
    session.engine.start_ambience()


def quick_save(session: StorySession, store: QuickSaveStore) -> bool:
    """Write the current progress to the quick-save slot."""
    payload = session.save_service.serialize(session.engine.snapshot())
    try:
        store.write(payload)
    except OSError as exc:
        logger.error("Save failed: %s", exc)
        return False
    return True


def quick_load(session: StorySession, store: QuickSaveStore) -> bool:
    """Restore progress from the quick-save slot, leaving the session untouched on failure."""
    try:
        raw = store.read()
    except (OSError, ValueError) as exc:
        logger.error("Load failed: %s", exc)
        return False
    if raw is None:
        logger.warning("No save data found.")
        return False
    try:
        save_data = session.save_service.deserialize(raw)
        if save_data.story is None:
            raise SaveLoadError("Save has no story progress.")
        session.engine.restore(save_data.story)
    except (SaveLoadError, SnapshotError) as exc:
        logger.error("Load failed: %s", exc)
        return False
    session.save_service.apply(save_data)
    return True


def main(argv: Sequence[str] | None = None) -> None:
    """Start the interactive CLI session."""
    args = _parse_args(argv)
    user_config = config.load_config()
    logging.basicConfig(
        level=config.resolve_log_level(user_config, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )
    session = build_session(args.story_dir, on_begin=lambda: print("\n~ The story begins ~\n"))
    store = QuickSaveStore(args.save_dir)
    print("=== Paperbacks ===")
    print("Enter: continue | number: choose | s: save | l: load | n: new game | h: history | q: quit")
    if store.exists():
        print("A quick save is available (l to load).")
    session.engine.start_ambience()
    _run_story_loop(session, store, step=user_config["text_display_mode"] == "step")
    print("Goodbye!")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="paperbacks", description="Play a Paperbacks story in the terminal.")
    parser.add_argument("--story-dir", default=None, help="Directory holding story.json and friends.")
    parser.add_argument("--save-dir", default=None, help="Directory for the quick-save slot.")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR.")
    return parser.parse_args(argv)


def _run_story_loop(session: StorySession, store: QuickSaveStore, *, step: bool = False) -> None:
    engine = session.engine
    while True:
        if engine.waiting_choice:
            render_choices(engine.pending_choices())
        elif engine.is_ended:
            print("\n-- The End --")
        command = input("> ").strip().lower()
        if command == "q":
            return
        if command == "s":
            print("Saved." if quick_save(session, store) else "Save failed.")
            continue
        if command == "l":
            if quick_load(session, store):
                render_heading("Loaded")
                render_blocks(engine.rendered_blocks, engine.identity_for)
            else:
                print("Load failed.")
            continue
        if command == "n":
            new_game(session)
            print("Started a new story.")
            continue
        if command == "h":
            render_heading("History")
            render_blocks(engine.rendered_blocks, engine.identity_for)
            continue

        before = engine.rendered_blocks
        if command.isdigit() and engine.waiting_choice:
            try:
                engine.choose_index(int(command) - 1)
            except IndexError:
                print(f"Please enter a value between 1 and {len(engine.pending_choices())}.")
                continue
        elif not command:
            if engine.has_begun:
                engine.advance()
            else:
                engine.begin()
        else:
            print("Unknown command.")
            continue
        _render_new_blocks(engine, before, step=step)


def _render_new_blocks(engine: StoryEngine, before: List[RenderedBlock], *, step: bool = False) -> None:
    fresh = [block for block in engine.rendered_blocks if not any(block is old for old in before)]
    if fresh:
        print()
        render_blocks(fresh, engine.identity_for, pause=_wait_for_enter if step else None)


def _wait_for_enter() -> None:
    input("  ...")
