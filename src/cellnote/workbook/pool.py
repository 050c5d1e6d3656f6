"""Shared-string pool and the document interface the annotator writes to."""

import logging
from abc import ABC, abstractmethod
from typing import Iterable, Iterator, Optional

from cellnote.formatting.markup import plain_text, plain_text_entry

logger = logging.getLogger(__name__)


class SlotLookupError(LookupError):
    """The placeholder could not be resolved to a single shared string."""

    def __init__(self, sentinel: str, message: str) -> None:
        self.sentinel = sentinel
        super().__init__(message)


class SlotNotFoundError(SlotLookupError):
    """No shared string matches the placeholder."""

    def __init__(self, sentinel: str) -> None:
        super().__init__(sentinel, f"Placeholder not found in shared strings: {sentinel!r}")


class AmbiguousSlotError(SlotLookupError):
    """More than one shared string matches the placeholder."""

    def __init__(self, sentinel: str, indices: list[int]) -> None:
        self.indices = indices
        super().__init__(
            sentinel,
            f"Placeholder {sentinel!r} matches {len(indices)} shared strings "
            f"(indices {', '.join(map(str, indices))})",
        )


class SharedStringPool:
    """Ordered table of shared-string entries.

    Entries are ``<si>`` markup fragments. Cells refer to them by index,
    so entries are replaced in place and never reordered.
    """

    def __init__(self, entries: Optional[Iterable[str]] = None) -> None:
        self._entries: list[str] = list(entries or [])

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> str:
        return self._entries[index]

    def append(self, markup: str) -> int:
        """Add an entry and return its index."""
        self._entries.append(markup)
        return len(self._entries) - 1

    def add_text(self, text: str) -> int:
        """Append an unstyled entry for ``text`` and return its index.

        A new entry is always added, even when an identical one exists,
        so a placeholder written twice shows up as an ambiguous slot.
        """
        return self.append(plain_text_entry(text))

    def texts(self) -> list[str]:
        """Visible text of every entry."""
        return [plain_text(markup) for markup in self._entries]

    def find_all(self, text: str) -> list[int]:
        """Indices of every entry whose visible text is exactly ``text``."""
        return [
            index for index, markup in enumerate(self._entries)
            if plain_text(markup) == text
        ]

    def find_slot(self, sentinel: str) -> int:
        """Locate the single entry whose text is exactly ``sentinel``.

        Raises:
            SlotNotFoundError: If no entry matches
            AmbiguousSlotError: If more than one entry matches
        """
        matches = self.find_all(sentinel)
        if not matches:
            raise SlotNotFoundError(sentinel)
        if len(matches) > 1:
            raise AmbiguousSlotError(sentinel, matches)
        logger.debug("Placeholder resolved to shared string %d", matches[0])
        return matches[0]

    def replace(self, index: int, markup: str) -> None:
        """Overwrite the entry at ``index``."""
        if not 0 <= index < len(self._entries):
            raise IndexError(f"Shared string index out of range: {index}")
        self._entries[index] = markup


class SharedStringDocument(ABC):
    """A spreadsheet document the annotator can write into.

    Implementations own the shared-string pool and know how to put a
    plain text value into a cell of a named sheet.
    """

    @property
    @abstractmethod
    def shared_strings(self) -> SharedStringPool:
        """The document's shared-string table."""
        ...

    @abstractmethod
    def write_placeholder(self, sheet: str, row: int, col: int, text: str) -> None:
        """Write plain text into a cell (1-based row and column).

        Args:
            sheet: Name of the worksheet
            row: Row number, starting at 1
            col: Column number, starting at 1
            text: Text to store via the shared-string table
        """
        ...
