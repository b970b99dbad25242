"""Shared type aliases for the core and domain layers."""
from typing import Literal, Union

NodeType = Literal["singleParagraph", "multipleParagraphs", "characterDialogue", "dialogueChoice"]
FlagValue = Union[bool, str, int, float]

NODE_TYPES: tuple[NodeType, ...] = (
    "singleParagraph",
    "multipleParagraphs",
    "characterDialogue",
    "dialogueChoice",
)
CHOICE_PROMPT: NodeType = "dialogueChoice"
CHARACTER_LINE: NodeType = "characterDialogue"

__all__ = ["CHARACTER_LINE", "CHOICE_PROMPT", "FlagValue", "NODE_TYPES", "NodeType"]
