"""Formatting utilities for composing and serializing styled cell text."""

from cellnote.formatting.ir import (
    ScriptPosition,
    StyleSpec,
    TextRun,
    RichText,
)
from cellnote.formatting.composer import (
    InvalidOffsetError,
    StyledRunComposer,
    compose,
    split_text,
)
from cellnote.formatting.markup import plain_text, to_shared_string

__all__ = [
    "ScriptPosition",
    "StyleSpec",
    "TextRun",
    "RichText",
    "InvalidOffsetError",
    "StyledRunComposer",
    "compose",
    "split_text",
    "plain_text",
    "to_shared_string",
]
