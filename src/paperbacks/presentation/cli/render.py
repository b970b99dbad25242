"""Shared CLI rendering helpers."""
from __future__ import annotations

import os
import textwrap
from typing import Callable, List, Sequence

from paperbacks.domain.defs import StoryChoiceDef
from paperbacks.domain.state import CharacterIdentity, RenderedBlock

DEFAULT_WIDTH = 72


def debug_enabled() -> bool:
    """Return True only when PAPERBACKS_DEBUG is explicitly set to '1'."""
    return os.getenv("PAPERBACKS_DEBUG") == "1"


def wrap_paragraph(text: str, width: int = DEFAULT_WIDTH, *, indent: str = "") -> list[str]:
    """
    Wrap text on word boundaries.

    Args:
        text: The paragraph to wrap
        width: Maximum width per line, including the indent
        indent: Prefix for every line (used under speaker labels)

    Returns:
        List of wrapped lines; an empty paragraph yields a single empty line
    """
    if not text:
        return [indent.rstrip()]
    return textwrap.wrap(
        text,
        width=max(width, len(indent) + 1),
        initial_indent=indent,
        subsequent_indent=indent,
        break_long_words=False,
        break_on_hyphens=False,
    ) or [indent.rstrip()]


def block_paragraphs(block: RenderedBlock) -> list[str]:
    if isinstance(block.text, list):
        return list(block.text)
    return [block.text] if block.text else []


def format_block(
    block: RenderedBlock,
    identity: CharacterIdentity | None = None,
    width: int = DEFAULT_WIDTH,
) -> list[str]:
    """Return the printable lines for one history block."""
    lines: List[str] = []
    if debug_enabled() and block.id:
        lines.append(f"[{block.id}]")
    if block.type == "characterDialogue":
        speaker = identity.name if identity is not None else "???"
        lines.append(f"{speaker}:")
        for paragraph in block_paragraphs(block):
            lines.extend(wrap_paragraph(paragraph, width, indent="  "))
        return lines
    for index, paragraph in enumerate(block_paragraphs(block)):
        if index > 0:
            lines.append("")
        lines.extend(wrap_paragraph(paragraph, width))
    return lines


def render_heading(title: str) -> None:
    """Print a consistent section heading."""
    print(f"\n=== {title} ===")


def render_blocks(
    blocks: Sequence[RenderedBlock],
    identity_for: Callable[[RenderedBlock], CharacterIdentity | None],
    *,
    pause: Callable[[], None] | None = None,
) -> None:
    """Print history blocks separated by blank lines.

    With ``pause`` set (step display mode) it is called between blocks instead
    of printing the separator, so the reader reveals one block at a time.
    """
    for index, block in enumerate(blocks):
        if index > 0:
            if pause is not None:
                pause()
            else:
                print()
        for line in format_block(block, identity_for(block)):
            print(line)


def render_choices(choices: Sequence[StoryChoiceDef]) -> None:
    """Display numbered story choices."""
    if not choices:
        return
    render_heading("Choices")
    for idx, choice in enumerate(choices, start=1):
        print(f"{idx}. {choice.text}")
