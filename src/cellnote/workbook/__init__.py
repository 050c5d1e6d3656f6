"""Spreadsheet documents and their shared-string tables."""

from cellnote.workbook.pool import (
    SharedStringPool,
    SharedStringDocument,
    SlotLookupError,
    SlotNotFoundError,
    AmbiguousSlotError,
)
from cellnote.workbook.xlsx import (
    XlsxWorkbook,
    WorkbookError,
    SheetNotFoundError,
    cell_reference,
)

__all__ = [
    "SharedStringPool",
    "SharedStringDocument",
    "SlotLookupError",
    "SlotNotFoundError",
    "AmbiguousSlotError",
    "XlsxWorkbook",
    "WorkbookError",
    "SheetNotFoundError",
    "cell_reference",
]
