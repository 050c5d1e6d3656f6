"""Tests for the shared-string pool and slot lookup."""

import pytest

from cellnote.workbook.pool import (
    AmbiguousSlotError,
    SharedStringPool,
    SlotLookupError,
    SlotNotFoundError,
)


SENTINEL = "placeholder that never appears"


class TestSharedStringPool:
    """Tests for SharedStringPool."""

    @pytest.fixture
    def pool(self) -> SharedStringPool:
        """A pool with a few plain entries."""
        return SharedStringPool(["<si><t>Region</t></si>", "<si><t>Revenue</t></si>"])

    def test_append_returns_index(self, pool: SharedStringPool):
        """Test that appended entries are indexed at the end."""
        assert pool.append("<si><t>Cost</t></si>") == 2
        assert len(pool) == 3

    def test_add_text_always_appends(self, pool: SharedStringPool):
        """Test that add_text never reuses an existing entry."""
        first = pool.add_text("Region")

        assert first == 2
        assert pool.texts() == ["Region", "Revenue", "Region"]

    def test_find_all(self, pool: SharedStringPool):
        """Test that every exact match is listed in order."""
        pool.add_text(SENTINEL)
        pool.add_text(f"{SENTINEL} (copy)")
        pool.add_text(SENTINEL)

        assert pool.find_all(SENTINEL) == [2, 4]
        assert pool.find_all("Cost") == []

    def test_find_slot(self, pool: SharedStringPool):
        """Test locating a unique sentinel."""
        index = pool.add_text(SENTINEL)

        assert pool.find_slot(SENTINEL) == index

    def test_find_slot_requires_exact_match(self, pool: SharedStringPool):
        """Test that substrings do not count as matches."""
        pool.add_text(f"{SENTINEL} (copy)")

        with pytest.raises(SlotNotFoundError):
            pool.find_slot(SENTINEL)

    def test_find_slot_missing(self, pool: SharedStringPool):
        """Test that a missing sentinel raises SlotNotFoundError."""
        with pytest.raises(SlotNotFoundError) as exc_info:
            pool.find_slot(SENTINEL)

        assert exc_info.value.sentinel == SENTINEL
        assert isinstance(exc_info.value, LookupError)

    def test_find_slot_ambiguous(self, pool: SharedStringPool):
        """Test that duplicate sentinels fail loudly with every index."""
        pool.add_text(SENTINEL)
        pool.add_text(SENTINEL)

        with pytest.raises(AmbiguousSlotError) as exc_info:
            pool.find_slot(SENTINEL)

        assert exc_info.value.indices == [2, 3]
        assert "2, 3" in str(exc_info.value)

    def test_errors_share_base_class(self):
        """Test that both lookup failures can be caught together."""
        assert issubclass(SlotNotFoundError, SlotLookupError)
        assert issubclass(AmbiguousSlotError, SlotLookupError)

    def test_sentinel_in_rich_entry_found(self, pool: SharedStringPool):
        """Test matching against the visible text of rich entries."""
        pool.append("<si><r><t>place</t></r><r><t>holder</t></r></si>")

        assert pool.find_slot("placeholder") == 2

    def test_replace(self, pool: SharedStringPool):
        """Test overwriting an entry in place."""
        pool.replace(1, "<si><t>Income</t></si>")

        assert pool.texts() == ["Region", "Income"]

    def test_replace_out_of_range(self, pool: SharedStringPool):
        """Test that replacing a missing index raises IndexError."""
        with pytest.raises(IndexError):
            pool.replace(5, "<si><t>x</t></si>")

    def test_iteration_order(self, pool: SharedStringPool):
        """Test that iteration yields entries in index order."""
        assert list(pool) == [pool[0], pool[1]]
