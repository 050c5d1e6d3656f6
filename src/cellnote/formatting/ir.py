"""Intermediate Representation for styled cell text.

This module defines the data structures that sit between the caller's
plain strings and the SpreadsheetML rich-text markup. A cell's text is
a sequence of runs, each carrying one immutable style.
"""

import re
from dataclasses import dataclass, field, replace
from enum import Enum


HEX_COLOR_PATTERN = re.compile(r"^[0-9A-Fa-f]{6}$")


class ScriptPosition(Enum):
    """Vertical offset of a run (the OOXML ``vertAlign`` values)."""

    NONE = "baseline"
    SUPERSCRIPT = "superscript"
    SUBSCRIPT = "subscript"

    @classmethod
    def parse(cls, value: "str | ScriptPosition") -> "ScriptPosition":
        """Accept an enum member, a member name or a ``vertAlign`` value."""
        if isinstance(value, cls):
            return value
        key = str(value).strip()
        for member in cls:
            if key.upper() == member.name or key.lower() == member.value:
                return member
        raise ValueError(
            f"Unknown script position: {value!r}. "
            f"Expected one of: {', '.join(m.name.lower() for m in cls)}"
        )


@dataclass(frozen=True)
class StyleSpec:
    """Font settings shared by one or more runs.

    Attributes:
        font: Font name written to ``rFont`` (e.g. "Arial")
        size: Point size, a positive integer
        color: RGB hex triple without the leading ``#`` (stored upper-case)
        family: OOXML font family number (2 is Swiss, i.e. sans-serif)
        bold: Whether runs are bold
        italic: Whether runs are italic
        underline: Whether runs are underlined
        script: Vertical alignment applied to the annotation run
    """

    font: str = "Arial"
    size: int = 8
    color: str = "000000"
    family: int = 2
    bold: bool = False
    italic: bool = False
    underline: bool = False
    script: ScriptPosition = ScriptPosition.SUPERSCRIPT

    def __post_init__(self) -> None:
        if isinstance(self.size, bool) or not isinstance(self.size, int) or self.size <= 0:
            raise ValueError(f"Font size must be a positive integer, got {self.size!r}")
        if isinstance(self.family, bool) or not isinstance(self.family, int) or self.family <= 0:
            raise ValueError(f"Font family must be a positive integer, got {self.family!r}")
        if not self.font:
            raise ValueError("Font name must not be empty")

        color = str(self.color).lstrip("#")
        if not HEX_COLOR_PATTERN.match(color):
            raise ValueError(f"Color must be a six-digit hex RGB value, got {self.color!r}")
        # frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "color", color.upper())
        object.__setattr__(self, "script", ScriptPosition.parse(self.script))

    @property
    def argb(self) -> str:
        """Colour in the opaque ARGB form SpreadsheetML expects."""
        return f"FF{self.color}"

    def normal(self) -> "StyleSpec":
        """Style for the text surrounding the annotation."""
        return replace(self, script=ScriptPosition.NONE)

    def annotation(self) -> "StyleSpec":
        """Style for the annotation run itself."""
        return self

    def with_options(self, **changes) -> "StyleSpec":
        """Return a copy with the given fields changed (None values ignored)."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


@dataclass
class TextRun:
    """A contiguous run of text with consistent styling.

    Attributes:
        text: The text content
        style: Style applied to the whole run
    """

    text: str
    style: StyleSpec = field(default_factory=StyleSpec)

    @property
    def bold(self) -> bool:
        return self.style.bold

    @property
    def italic(self) -> bool:
        return self.style.italic

    @property
    def underline(self) -> bool:
        return self.style.underline

    @property
    def script(self) -> ScriptPosition:
        return self.style.script

    def __str__(self) -> str:
        return self.text


@dataclass
class RichText:
    """The styled content of one cell, as an ordered list of runs."""

    runs: list[TextRun] = field(default_factory=list)

    @property
    def plain_text(self) -> str:
        """Get the plain text content without styling."""
        return "".join(run.text for run in self.runs)

    def append(self, text: str, style: StyleSpec) -> None:
        """Append a new run."""
        self.runs.append(TextRun(text=text, style=style))

    def __len__(self) -> int:
        return len(self.runs)

    def __str__(self) -> str:
        return self.plain_text
