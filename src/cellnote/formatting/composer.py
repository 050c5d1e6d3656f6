"""Compose a cell's text around a superscript or subscript annotation."""

import logging
from typing import Optional

from cellnote.formatting.ir import RichText, StyleSpec
from cellnote.formatting.markup import to_shared_string

logger = logging.getLogger(__name__)


class InvalidOffsetError(ValueError):
    """Split offset falls outside the base text."""

    def __init__(self, offset: object, length: int) -> None:
        self.offset = offset
        self.length = length
        super().__init__(
            f"Invalid offset {offset!r}: must be an integer between 0 and {length}"
        )


def resolve_offset(text: str, offset: Optional[int] = None) -> int:
    """Validate a split offset, defaulting to the end of ``text``."""
    if offset is None:
        return len(text)
    if isinstance(offset, bool) or not isinstance(offset, int):
        raise InvalidOffsetError(offset, len(text))
    if not 0 <= offset <= len(text):
        raise InvalidOffsetError(offset, len(text))
    return offset


def split_text(text: str, offset: Optional[int] = None) -> tuple[str, str]:
    """Split text into the part before and after the annotation.

    Args:
        text: The base text
        offset: Number of characters kept before the annotation
            (defaults to the whole text)

    Returns:
        Tuple of (pre_text, post_text) where ``pre_text + post_text == text``

    Raises:
        InvalidOffsetError: If offset is not in ``[0, len(text)]``
    """
    position = resolve_offset(text, offset)
    return text[:position], text[position:]


class StyledRunComposer:
    """Build the three runs of an annotated cell.

    The base text is split at an offset; the annotation is inserted at
    the split point with the style's script position, and the text on
    either side keeps the normal style. Empty runs are kept, so the
    result always holds exactly three runs.
    """

    def __init__(self, style: Optional[StyleSpec] = None) -> None:
        """Initialize the composer.

        Args:
            style: Default style for every composition (overridable per call)
        """
        self.style = style or StyleSpec()

    def compose(
        self,
        base_text: str,
        annotation_text: str,
        split_offset: Optional[int] = None,
        style: Optional[StyleSpec] = None,
    ) -> RichText:
        """Compose the pre-text, annotation and post-text runs."""
        style = style or self.style
        pre_text, post_text = split_text(base_text, split_offset)

        normal = style.normal()
        rich_text = RichText()
        rich_text.append(pre_text, normal)
        rich_text.append(annotation_text, style.annotation())
        rich_text.append(post_text, normal)

        logger.debug(
            "Composed %r + %r (%s) + %r",
            pre_text, annotation_text, style.script.value, post_text,
        )
        return rich_text

    def render(
        self,
        base_text: str,
        annotation_text: str,
        split_offset: Optional[int] = None,
        style: Optional[StyleSpec] = None,
    ) -> str:
        """Compose and serialize straight to shared-string markup."""
        return to_shared_string(
            self.compose(base_text, annotation_text, split_offset, style)
        )


def compose(
    base_text: str,
    annotation_text: str,
    split_offset: Optional[int] = None,
    style: Optional[StyleSpec] = None,
) -> str:
    """Compose and render in one call, returning the markup fragment.

    Unlike ``StyledRunComposer.compose``, which returns the ``RichText``
    model, this returns the same string as ``StyledRunComposer.render``.
    """
    return StyledRunComposer(style).render(base_text, annotation_text, split_offset)
