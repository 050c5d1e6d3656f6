"""Microsoft Excel (.xlsx) workbook access at the package level.

Only the parts needed to place text in cells are parsed: the workbook
sheet list, its relationships, the worksheets that get edited and the
shared-string table. Every other part is copied through untouched.
"""

import logging
import re
import zipfile
from pathlib import Path, PurePosixPath
from typing import Optional

from lxml import etree

from cellnote.formatting.markup import (
    SPREADSHEET_NAMESPACE,
    plain_text,
    plain_text_entry,
    strip_namespace,
)
from cellnote.workbook.pool import SharedStringDocument, SharedStringPool

logger = logging.getLogger(__name__)

RELATIONSHIPS_NAMESPACE = "http://schemas.openxmlformats.org/package/2006/relationships"
OFFICE_REL_NAMESPACE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
CONTENT_TYPES_NAMESPACE = "http://schemas.openxmlformats.org/package/2006/content-types"

SHARED_STRINGS_REL_TYPE = f"{OFFICE_REL_NAMESPACE}/sharedStrings"
CALC_CHAIN_REL_TYPE = f"{OFFICE_REL_NAMESPACE}/calcChain"
SHARED_STRINGS_CONTENT_TYPE = (
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sharedStrings+xml"
)

WORKBOOK_PART = "xl/workbook.xml"
WORKBOOK_RELS_PART = "xl/_rels/workbook.xml.rels"
CONTENT_TYPES_PART = "[Content_Types].xml"
DEFAULT_SHARED_STRINGS_PART = "xl/sharedStrings.xml"

CELL_REF_PATTERN = re.compile(r"^([A-Z]+)(\d+)$")


def _ns(tag: str, namespace: str = SPREADSHEET_NAMESPACE) -> str:
    return f"{{{namespace}}}{tag}"


class WorkbookError(Exception):
    """The workbook package is missing a required part or is malformed."""

    pass


class SheetNotFoundError(KeyError):
    """No worksheet with the requested name."""

    def __init__(self, sheet: str, available: list[str]) -> None:
        self.sheet = sheet
        self.available = available
        super().__init__(
            f"Sheet not found: {sheet!r}. Available sheets: {', '.join(available)}"
        )

    def __str__(self) -> str:
        return self.args[0]


def column_letter(col: int) -> str:
    """Convert a 1-based column number to letters (1 -> A, 27 -> AA)."""
    if col < 1:
        raise ValueError(f"Column must be 1 or greater, got {col}")
    letters = ""
    while col:
        col, remainder = divmod(col - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


def column_index(letters: str) -> int:
    """Convert column letters back to a 1-based number."""
    index = 0
    for char in letters:
        index = index * 26 + (ord(char) - ord("A") + 1)
    return index


def cell_reference(row: int, col: int) -> str:
    """A1-style reference for a 1-based row and column."""
    if row < 1:
        raise ValueError(f"Row must be 1 or greater, got {row}")
    return f"{column_letter(col)}{row}"


def _resolve_target(base_dir: str, target: str) -> str:
    """Resolve a relationship target to a package part name."""
    if target.startswith("/"):
        return target.lstrip("/")
    parts: list[str] = []
    for piece in (PurePosixPath(base_dir) / target).parts:
        if piece == "..":
            if parts:
                parts.pop()
        elif piece != ".":
            parts.append(piece)
    return "/".join(parts)


class XlsxWorkbook(SharedStringDocument):
    """An .xlsx package opened for editing cell text.

    Usage::

        workbook = XlsxWorkbook.open("report.xlsx")
        workbook.write_placeholder("Sheet1", 1, 1, "Table title")
        workbook.save("report-annotated.xlsx")
    """

    def __init__(self, parts: dict[str, bytes]) -> None:
        """Build a workbook from raw package parts (name -> bytes)."""
        self._parts = dict(parts)
        self._loaded_sheets: dict[str, etree._Element] = {}

        for required in (WORKBOOK_PART, WORKBOOK_RELS_PART):
            if required not in self._parts:
                raise WorkbookError(f"Not a workbook package: missing {required}")

        self._workbook = etree.fromstring(self._parts[WORKBOOK_PART])
        self._rels = etree.fromstring(self._parts[WORKBOOK_RELS_PART])

        self._sheet_parts = self._read_sheet_parts()
        self._shared_strings_part = self._find_shared_strings_part()
        self._pool = self._read_shared_strings()

    @classmethod
    def open(cls, path: Path) -> "XlsxWorkbook":
        """Read an .xlsx file from disk."""
        path = Path(path)
        try:
            with zipfile.ZipFile(path, "r") as zf:
                parts = {name: zf.read(name) for name in zf.namelist()}
        except zipfile.BadZipFile as e:
            raise WorkbookError(f"Not an .xlsx file: {path}") from e
        logger.debug("Opened %s (%d parts)", path, len(parts))
        return cls(parts)

    # -------------------------------------------------------------------------
    # Package structure
    # -------------------------------------------------------------------------

    def _relationships(self) -> dict[str, etree._Element]:
        return {
            rel.get("Id"): rel
            for rel in self._rels.iter(_ns("Relationship", RELATIONSHIPS_NAMESPACE))
        }

    def _read_sheet_parts(self) -> dict[str, str]:
        """Map sheet names to worksheet part names, in workbook order."""
        rels = self._relationships()
        sheets: dict[str, str] = {}
        for sheet in self._workbook.iter(_ns("sheet")):
            rel_id = sheet.get(_ns("id", OFFICE_REL_NAMESPACE))
            rel = rels.get(rel_id)
            if rel is None:
                raise WorkbookError(f"Sheet {sheet.get('name')!r} has no relationship {rel_id!r}")
            sheets[sheet.get("name")] = _resolve_target("xl", rel.get("Target"))
        return sheets

    def _find_shared_strings_part(self) -> Optional[str]:
        for rel in self._relationships().values():
            if rel.get("Type") == SHARED_STRINGS_REL_TYPE:
                return _resolve_target("xl", rel.get("Target"))
        return None

    def _read_shared_strings(self) -> SharedStringPool:
        if self._shared_strings_part is None or self._shared_strings_part not in self._parts:
            return SharedStringPool()
        sst = etree.fromstring(self._parts[self._shared_strings_part])
        return SharedStringPool(strip_namespace(si) for si in sst.iter(_ns("si")))

    @property
    def sheet_names(self) -> list[str]:
        """Worksheet names in workbook order."""
        return list(self._sheet_parts)

    @property
    def shared_strings(self) -> SharedStringPool:
        return self._pool

    # -------------------------------------------------------------------------
    # Cells
    # -------------------------------------------------------------------------

    def _sheet(self, sheet: str) -> etree._Element:
        if sheet not in self._sheet_parts:
            raise SheetNotFoundError(sheet, self.sheet_names)
        part = self._sheet_parts[sheet]
        if part not in self._loaded_sheets:
            if part not in self._parts:
                raise WorkbookError(f"Worksheet part missing from package: {part}")
            self._loaded_sheets[part] = etree.fromstring(self._parts[part])
        return self._loaded_sheets[part]

    def _cell(self, sheet: str, row: int, col: int, create: bool) -> Optional[etree._Element]:
        """Find (or create, keeping rows and cells ordered) a ``<c>`` element."""
        reference = cell_reference(row, col)
        worksheet = self._sheet(sheet)
        sheet_data = worksheet.find(_ns("sheetData"))
        if sheet_data is None:
            if not create:
                return None
            raise WorkbookError(f"Worksheet {sheet!r} has no sheetData element")

        row_element = None
        number = 0
        for existing in sheet_data.findall(_ns("row")):
            # rows without r follow the previous row
            number = int(existing.get("r", number + 1))
            if create:
                existing.set("r", str(number))
            if number == row:
                row_element = existing
                break
            if number > row:
                if not create:
                    return None
                row_element = etree.Element(_ns("row"), r=str(row))
                existing.addprevious(row_element)
                break
        if row_element is None:
            if not create:
                return None
            row_element = etree.SubElement(sheet_data, _ns("row"), r=str(row))

        existing_col = 0
        for existing in row_element.findall(_ns("c")):
            match = CELL_REF_PATTERN.match(existing.get("r", ""))
            # cells without r follow the previous cell
            existing_col = column_index(match.group(1)) if match else existing_col + 1
            if create and not match:
                existing.set("r", cell_reference(row, existing_col))
            if existing_col == col:
                return existing
            if existing_col > col:
                if not create:
                    return None
                cell = etree.Element(_ns("c"), r=reference)
                existing.addprevious(cell)
                return cell
        if not create:
            return None
        return etree.SubElement(row_element, _ns("c"), r=reference)

    def write_placeholder(self, sheet: str, row: int, col: int, text: str) -> None:
        """Store ``text`` in a cell as a shared string.

        Any previous value, formula or inline string in the cell is
        replaced; the cell's style attribute is kept. Overwriting a
        formula drops the calculation chain, which Excel rebuilds.
        """
        entry = plain_text_entry(text)
        cell = self._cell(sheet, row, col, create=True)
        index = self._pool.append(entry)

        if cell.find(_ns("f")) is not None:
            self._drop_calc_chain()
        for child in list(cell):
            cell.remove(child)
        cell.set("t", "s")
        value = etree.SubElement(cell, _ns("v"))
        value.text = str(index)
        logger.debug("Wrote shared string %d to %s!%s", index, sheet, cell.get("r"))

    def cell_text(self, sheet: str, row: int, col: int) -> Optional[str]:
        """Visible text of a shared-string cell, or None for other cells."""
        cell = self._cell(sheet, row, col, create=False)
        if cell is None or cell.get("t") != "s":
            return None
        value = cell.find(_ns("v"))
        if value is None or value.text is None:
            return None
        return plain_text(self._pool[int(value.text)])

    # -------------------------------------------------------------------------
    # Saving
    # -------------------------------------------------------------------------

    def _drop_calc_chain(self) -> None:
        """Remove the calculation chain part, its relationship and content type."""
        for rel in list(self._relationships().values()):
            if rel.get("Type") != CALC_CHAIN_REL_TYPE:
                continue
            part = _resolve_target("xl", rel.get("Target"))
            self._rels.remove(rel)
            self._parts.pop(part, None)
            self._parts[WORKBOOK_RELS_PART] = etree.tostring(
                self._rels, xml_declaration=True, encoding="UTF-8", standalone=True
            )

            if CONTENT_TYPES_PART in self._parts:
                types = etree.fromstring(self._parts[CONTENT_TYPES_PART])
                for override in types.findall(_ns("Override", CONTENT_TYPES_NAMESPACE)):
                    if override.get("PartName") == f"/{part}":
                        types.remove(override)
                self._parts[CONTENT_TYPES_PART] = etree.tostring(
                    types, xml_declaration=True, encoding="UTF-8", standalone=True
                )
            logger.debug("Dropped calculation chain %s", part)

    def _ensure_shared_strings_part(self) -> str:
        """Register a shared-string part if the package has none yet."""
        if self._shared_strings_part is not None:
            return self._shared_strings_part

        part = DEFAULT_SHARED_STRINGS_PART
        existing_ids = set(self._relationships())
        number = len(existing_ids) + 1
        while f"rId{number}" in existing_ids:
            number += 1
        etree.SubElement(
            self._rels,
            _ns("Relationship", RELATIONSHIPS_NAMESPACE),
            Id=f"rId{number}",
            Type=SHARED_STRINGS_REL_TYPE,
            Target="sharedStrings.xml",
        )
        self._parts[WORKBOOK_RELS_PART] = etree.tostring(
            self._rels, xml_declaration=True, encoding="UTF-8", standalone=True
        )

        if CONTENT_TYPES_PART in self._parts:
            types = etree.fromstring(self._parts[CONTENT_TYPES_PART])
            etree.SubElement(
                types,
                _ns("Override", CONTENT_TYPES_NAMESPACE),
                PartName=f"/{part}",
                ContentType=SHARED_STRINGS_CONTENT_TYPE,
            )
            self._parts[CONTENT_TYPES_PART] = etree.tostring(
                types, xml_declaration=True, encoding="UTF-8", standalone=True
            )

        self._shared_strings_part = part
        return part

    def _count_references(self) -> int:
        """Number of cells across the workbook that use a shared string."""
        count = 0
        for part in self._sheet_parts.values():
            if part in self._loaded_sheets:
                worksheet = self._loaded_sheets[part]
            elif part in self._parts:
                worksheet = etree.fromstring(self._parts[part])
            else:
                continue
            count += sum(1 for c in worksheet.iter(_ns("c")) if c.get("t") == "s")
        return count

    def _serialize_shared_strings(self) -> bytes:
        """Rebuild ``sharedStrings.xml`` from the pool's entries.

        Entries are bare ``<si>`` fragments; placing them textually
        inside the ``<sst>`` root puts them in the SpreadsheetML
        namespace, so the result is parsed back once to validate it.
        """
        body = "".join(self._pool)
        document = (
            f'<sst xmlns="{SPREADSHEET_NAMESPACE}" count="{self._count_references()}" '
            f'uniqueCount="{len(self._pool)}">{body}</sst>'
        )
        try:
            sst = etree.fromstring(document.encode("utf-8"))
        except etree.XMLSyntaxError as e:
            raise WorkbookError(f"Shared strings are not well-formed: {e}") from e
        return etree.tostring(sst, xml_declaration=True, encoding="UTF-8", standalone=True)

    def to_parts(self) -> dict[str, bytes]:
        """Current package parts, with edited sheets and strings serialized."""
        for part, worksheet in self._loaded_sheets.items():
            self._parts[part] = etree.tostring(
                worksheet, xml_declaration=True, encoding="UTF-8", standalone=True
            )
        if len(self._pool) or self._shared_strings_part is not None:
            part = self._ensure_shared_strings_part()
            self._parts[part] = self._serialize_shared_strings()
        return dict(self._parts)

    def save(self, path: Path) -> None:
        """Write the package to ``path``."""
        parts = self.to_parts()
        ordered = [CONTENT_TYPES_PART] if CONTENT_TYPES_PART in parts else []
        ordered += [name for name in parts if name != CONTENT_TYPES_PART]

        with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
            for name in ordered:
                zf.writestr(name, parts[name])
        logger.debug("Saved %s", path)
