"""Write an annotated value into a spreadsheet cell."""

import logging
from typing import Optional

from cellnote.config import get_settings
from cellnote.formatting.composer import StyledRunComposer
from cellnote.formatting.ir import StyleSpec
from cellnote.workbook.pool import AmbiguousSlotError, SharedStringDocument

logger = logging.getLogger(__name__)


def annotate_cell(
    document: SharedStringDocument,
    sheet: str,
    row: int,
    col: int,
    text: str,
    annotation: str,
    split_offset: Optional[int] = None,
    style: Optional[StyleSpec] = None,
    placeholder: Optional[str] = None,
) -> int:
    """Put ``text`` with a superscript/subscript ``annotation`` into a cell.

    A placeholder is written to the cell first so that its shared-string
    entry can be found, then that entry is overwritten with the three
    composed runs.

    Args:
        document: Workbook to modify in place
        sheet: Worksheet name
        row: 1-based row number
        col: 1-based column number
        text: The cell's base text
        annotation: Text rendered in the script position (e.g. "1,2")
        split_offset: Characters of ``text`` placed before the annotation
            (defaults to all of them)
        style: Style for the cell (defaults to the configured style)
        placeholder: Sentinel text (defaults to the configured placeholder)

    Returns:
        Index of the shared string that now holds the composed text

    Raises:
        InvalidOffsetError: If split_offset is outside the text
        SlotNotFoundError: If the placeholder cannot be found after writing
        AmbiguousSlotError: If the placeholder already exists in the workbook
        ValueError: If the text contains characters XML cannot hold
    """
    settings = get_settings()
    style = style or settings.default_style()
    placeholder = placeholder or settings.placeholder

    # Everything that can fail runs before the document is touched
    markup = StyledRunComposer(style).render(text, annotation, split_offset)
    existing = document.shared_strings.find_all(placeholder)
    if existing:
        raise AmbiguousSlotError(placeholder, existing)

    document.write_placeholder(sheet, row, col, placeholder)
    slot = document.shared_strings.find_slot(placeholder)
    document.shared_strings.replace(slot, markup)

    logger.info(
        "Annotated %s row %d col %d with %r (shared string %d)",
        sheet, row, col, annotation, slot,
    )
    return slot
