"""SpreadsheetML shared-string markup for rich text.

A rich-text shared string looks like::

    <si>
      <r><rPr><sz val="8"/>...</rPr><t xml:space="preserve">Table title</t></r>
      <r><rPr>...<vertAlign val="superscript"/></rPr><t xml:space="preserve">1</t></r>
      ...
    </si>

Fragments are produced without a namespace declaration so they can be
dropped straight into ``xl/sharedStrings.xml``, whose root declares the
SpreadsheetML namespace as the default.
"""

from typing import Optional

from lxml import etree

from cellnote.formatting.ir import RichText, ScriptPosition, StyleSpec


SPREADSHEET_NAMESPACE = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"
XML_SPACE = "{http://www.w3.org/XML/1998/namespace}space"


def _tag(name: str, namespace: Optional[str]) -> str:
    return f"{{{namespace}}}{name}" if namespace else name


def build_run_properties(style: StyleSpec, namespace: Optional[str] = None) -> etree._Element:
    """Build the ``<rPr>`` block for a style.

    Children are emitted in a fixed order: size, color, font, family,
    then the optional vertical alignment, bold, italic and underline
    markers.
    """
    rpr = etree.Element(_tag("rPr", namespace))
    etree.SubElement(rpr, _tag("sz", namespace), val=str(style.size))
    etree.SubElement(rpr, _tag("color", namespace), rgb=style.argb)
    etree.SubElement(rpr, _tag("rFont", namespace), val=style.font)
    etree.SubElement(rpr, _tag("family", namespace), val=str(style.family))
    if style.script is not ScriptPosition.NONE:
        etree.SubElement(rpr, _tag("vertAlign", namespace), val=style.script.value)
    if style.bold:
        etree.SubElement(rpr, _tag("b", namespace))
    if style.italic:
        etree.SubElement(rpr, _tag("i", namespace))
    if style.underline:
        etree.SubElement(rpr, _tag("u", namespace))
    return rpr


def build_shared_string(rich_text: RichText, namespace: Optional[str] = None) -> etree._Element:
    """Build an ``<si>`` element with one ``<r>`` per run."""
    si = etree.Element(_tag("si", namespace), nsmap={None: namespace} if namespace else None)
    for run in rich_text.runs:
        r = etree.SubElement(si, _tag("r", namespace))
        r.append(build_run_properties(run.style, namespace))
        t = etree.SubElement(r, _tag("t", namespace))
        t.set(XML_SPACE, "preserve")
        t.text = run.text
    return si


def to_shared_string(rich_text: RichText, with_namespace: bool = False) -> str:
    """Serialize rich text as a shared-string markup fragment.

    Args:
        rich_text: The runs to serialize
        with_namespace: Declare the SpreadsheetML namespace on ``<si>``
            (useful when the fragment is stored on its own)

    Returns:
        The ``<si>...</si>`` markup as a string
    """
    namespace = SPREADSHEET_NAMESPACE if with_namespace else None
    element = build_shared_string(rich_text, namespace)
    return etree.tostring(element, encoding="unicode")


def plain_text_entry(text: str) -> str:
    """Markup for an unstyled shared string (``<si><t>text</t></si>``)."""
    si = etree.Element("si")
    t = etree.SubElement(si, "t")
    if text != text.strip():
        t.set(XML_SPACE, "preserve")
    t.text = text
    return etree.tostring(si, encoding="unicode")


def plain_text(markup: str) -> str:
    """Extract the visible text of a shared-string entry.

    Works on both plain (``<si><t>``) and rich (``<si><r>``) entries,
    with or without a namespace. Phonetic runs (``<rPh>``) are skipped.
    """
    element = etree.fromstring(markup)
    parts: list[str] = []
    for node in element.iter():
        if not isinstance(node.tag, str) or etree.QName(node).localname != "t":
            continue
        parent = node.getparent()
        if parent is not None and etree.QName(parent).localname == "rPh":
            continue
        parts.append(node.text or "")
    return "".join(parts)


def strip_namespace(element: etree._Element) -> str:
    """Serialize a parsed ``<si>`` element as a bare fragment.

    Used when loading ``sharedStrings.xml`` so that loaded entries and
    freshly composed ones share one representation.
    """
    copy = _bare_copy(element)
    copy.tail = None
    return etree.tostring(copy, encoding="unicode")


def _bare_copy(node: etree._Element) -> etree._Element:
    copy = etree.Element(etree.QName(node).localname, attrib=dict(node.attrib))
    copy.text = node.text
    copy.tail = node.tail
    for child in node:
        # comments and processing instructions are dropped
        if isinstance(child.tag, str):
            copy.append(_bare_copy(child))
    return copy
