"""Cellnote - superscript and subscript annotations for spreadsheet cells."""

__version__ = "0.1.0"

from cellnote.annotator import annotate_cell
from cellnote.formatting import (
    InvalidOffsetError,
    ScriptPosition,
    StyleSpec,
    StyledRunComposer,
    compose,
)
from cellnote.workbook import (
    AmbiguousSlotError,
    SlotNotFoundError,
    XlsxWorkbook,
)

__all__ = [
    "__version__",
    "annotate_cell",
    "InvalidOffsetError",
    "ScriptPosition",
    "StyleSpec",
    "StyledRunComposer",
    "compose",
    "AmbiguousSlotError",
    "SlotNotFoundError",
    "XlsxWorkbook",
]
