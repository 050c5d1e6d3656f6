"""Pytest fixtures for Cellnote tests."""

import zipfile
from pathlib import Path
from typing import Optional

import pytest

from cellnote.formatting.ir import StyleSpec
from cellnote.workbook.pool import SharedStringDocument, SharedStringPool


CONTENT_TYPES = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">
<Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>
<Default Extension="xml" ContentType="application/xml"/>
<Override PartName="/xl/workbook.xml" ContentType="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet.main+xml"/>
<Override PartName="/xl/worksheets/sheet1.xml" ContentType="application/vnd.openxmlformats-officedocument.spreadsheetml.worksheet+xml"/>
<Override PartName="/xl/worksheets/sheet2.xml" ContentType="application/vnd.openxmlformats-officedocument.spreadsheetml.worksheet+xml"/>
{shared_strings_override}
</Types>"""

SHARED_STRINGS_OVERRIDE = (
    '<Override PartName="/xl/sharedStrings.xml" ContentType="application/'
    'vnd.openxmlformats-officedocument.spreadsheetml.sharedStrings+xml"/>'
)

ROOT_RELS = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
<Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument" Target="xl/workbook.xml"/>
</Relationships>"""

WORKBOOK = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<workbook xmlns="http://schemas.openxmlformats.org/spreadsheetml/2006/main" xmlns:r="http://schemas.openxmlformats.org/officeDocument/2006/relationships">
<sheets>
<sheet name="Data" sheetId="1" r:id="rId1"/>
<sheet name="Notes" sheetId="2" r:id="rId2"/>
</sheets>
</workbook>"""

WORKBOOK_RELS = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
<Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/worksheet" Target="worksheets/sheet1.xml"/>
<Relationship Id="rId2" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/worksheet" Target="worksheets/sheet2.xml"/>
{shared_strings_rel}
</Relationships>"""

SHARED_STRINGS_REL = (
    '<Relationship Id="rId3" Type="http://schemas.openxmlformats.org/'
    'officeDocument/2006/relationships/sharedStrings" Target="sharedStrings.xml"/>'
)

SHEET1 = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<worksheet xmlns="http://schemas.openxmlformats.org/spreadsheetml/2006/main">
<sheetData>
<row r="1"><c r="A1" t="s"><v>0</v></c><c r="C1" t="s"><v>1</v></c></row>
<row r="3"><c r="B3"><v>42</v></c></row>
</sheetData>
</worksheet>"""

SHEET2 = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<worksheet xmlns="http://schemas.openxmlformats.org/spreadsheetml/2006/main">
<sheetData/>
</worksheet>"""

SHARED_STRINGS = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<sst xmlns="http://schemas.openxmlformats.org/spreadsheetml/2006/main" count="2" uniqueCount="2">
<si><t>Region</t></si>
<si><t>Revenue</t></si>
</sst>"""


SHEET1_FORMULA = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<worksheet xmlns="http://schemas.openxmlformats.org/spreadsheetml/2006/main">
<sheetData>
<row r="1"><c r="A1" t="s"><v>0</v></c><c r="C1" t="s"><v>1</v></c></row>
<row r="3"><c r="B3"><f>40+2</f><v>42</v></c><c r="C3"><v>7</v></c></row>
</sheetData>
</worksheet>"""

CALC_CHAIN = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<calcChain xmlns="http://schemas.openxmlformats.org/spreadsheetml/2006/main">
<c r="B3" i="1"/>
</calcChain>"""

CALC_CHAIN_REL = (
    '<Relationship Id="rId4" Type="http://schemas.openxmlformats.org/'
    'officeDocument/2006/relationships/calcChain" Target="calcChain.xml"/>'
)

CALC_CHAIN_OVERRIDE = (
    '<Override PartName="/xl/calcChain.xml" ContentType="application/'
    'vnd.openxmlformats-officedocument.spreadsheetml.calcChain+xml"/>'
)


def xlsx_parts(with_shared_strings: bool = True, with_calc_chain: bool = False) -> dict[str, str]:
    """Parts of a minimal two-sheet workbook package."""
    overrides = SHARED_STRINGS_OVERRIDE if with_shared_strings else ""
    rels = SHARED_STRINGS_REL if with_shared_strings else ""
    sheet1 = SHEET1 if with_shared_strings else SHEET2
    if with_calc_chain:
        overrides += CALC_CHAIN_OVERRIDE
        rels += CALC_CHAIN_REL
        sheet1 = SHEET1_FORMULA

    parts = {
        "[Content_Types].xml": CONTENT_TYPES.format(shared_strings_override=overrides),
        "_rels/.rels": ROOT_RELS,
        "xl/workbook.xml": WORKBOOK,
        "xl/_rels/workbook.xml.rels": WORKBOOK_RELS.format(shared_strings_rel=rels),
        "xl/worksheets/sheet1.xml": sheet1,
        "xl/worksheets/sheet2.xml": SHEET2,
    }
    if with_shared_strings:
        parts["xl/sharedStrings.xml"] = SHARED_STRINGS
    if with_calc_chain:
        parts["xl/calcChain.xml"] = CALC_CHAIN
    return parts


def build_xlsx(
    path: Path, with_shared_strings: bool = True, with_calc_chain: bool = False
) -> Path:
    """Write a minimal two-sheet workbook package."""
    with zipfile.ZipFile(path, "w") as zf:
        for name, content in xlsx_parts(with_shared_strings, with_calc_chain).items():
            zf.writestr(name, content)
    return path


class InMemoryDocument(SharedStringDocument):
    """Document double that records cells as (sheet, row, col) -> index."""

    def __init__(self, entries: Optional[list[str]] = None) -> None:
        self._pool = SharedStringPool(entries)
        self.cells: dict[tuple[str, int, int], int] = {}

    @property
    def shared_strings(self) -> SharedStringPool:
        return self._pool

    def write_placeholder(self, sheet: str, row: int, col: int, text: str) -> None:
        self.cells[(sheet, row, col)] = self._pool.add_text(text)


@pytest.fixture
def xlsx_file(tmp_path: Path) -> Path:
    """A workbook with an existing shared-string table."""
    return build_xlsx(tmp_path / "report.xlsx")


@pytest.fixture
def bare_xlsx_file(tmp_path: Path) -> Path:
    """A workbook without any shared-string part."""
    return build_xlsx(tmp_path / "bare.xlsx", with_shared_strings=False)


@pytest.fixture
def memory_document() -> InMemoryDocument:
    """An in-memory document with two existing entries."""
    return InMemoryDocument(["<si><t>Region</t></si>", "<si><t>Revenue</t></si>"])


@pytest.fixture
def default_style() -> StyleSpec:
    """The built-in default style."""
    return StyleSpec()


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path: Path):
    """Keep CELLNOTE_* variables and .env files out of tests."""
    import cellnote.config as config

    for name in (
        "CELLNOTE_FONT",
        "CELLNOTE_SIZE",
        "CELLNOTE_COLOR",
        "CELLNOTE_FAMILY",
        "CELLNOTE_SCRIPT",
        "CELLNOTE_PLACEHOLDER",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config, "_settings", None)
    yield
    monkeypatch.setattr(config, "_settings", None)


@pytest.fixture
def formula_xlsx_file(tmp_path: Path) -> Path:
    """A workbook with a formula cell (B3) listed in its calculation chain."""
    return build_xlsx(tmp_path / "formulas.xlsx", with_calc_chain=True)
