"""Unit tests for range parsing and selection resolution."""
import pytest

from models.selection import PageSelection, RangeMode, SelectionMode
from services.errors import EmptySelectionError, InvalidInputError, RangeExpressionError
from services.page_selection import PageSelectionResolver, parse_range_groups


class TestParseRangeGroups:
    """Test suite for parse_range_groups."""

    def test_singles_and_ranges(self):
        """Each token becomes one group, in token order."""
        assert parse_range_groups("1-2,4", 5) == [[0, 1], [3]]

    def test_range_clipped_to_page_count(self):
        assert parse_range_groups("3-9", 5) == [[2, 3, 4]]

    def test_out_of_range_single_is_empty_group(self):
        """A page past the end contributes nothing."""
        assert parse_range_groups("7", 5) == [[]]

    def test_range_starting_past_end_is_empty(self):
        assert parse_range_groups("6-8", 5) == [[]]

    def test_whitespace_and_empty_tokens_ignored(self):
        assert parse_range_groups(" 1 , ,2- 3,", 5) == [[0], [1, 2]]

    def test_empty_expression(self):
        assert parse_range_groups("", 5) == []

    def test_tokens_keep_order_and_duplicates(self):
        assert parse_range_groups("5,1-2,1", 5) == [[4], [0, 1], [0]]

    @pytest.mark.parametrize("expression", ["abc", "abc-5", "5-2", "0", "0-3", "-3", "1-", "1-2-3", "2.5"])
    def test_malformed_tokens_rejected(self, expression):
        """Malformed tokens raise instead of being guessed at."""
        with pytest.raises(RangeExpressionError):
            parse_range_groups(expression, 5)

    def test_every_index_within_bounds(self):
        for page_count in range(1, 8):
            groups = parse_range_groups("1-3,2,5-10,7,4", page_count)
            assert all(0 <= i < page_count for group in groups for i in group)


class TestPageSelectionResolver:
    """Test suite for PageSelectionResolver."""

    @pytest.fixture
    def resolver(self):
        return PageSelectionResolver()

    def test_all(self, resolver):
        resolved = resolver.resolve(PageSelection.all(), 4)
        assert resolved.flatten() == [0, 1, 2, 3]
        assert not resolved.merged

    def test_range_group_flattens_in_token_order(self, resolver):
        resolved = resolver.resolve(PageSelection.range("4,1-2", RangeMode.GROUP), 5)
        assert resolved.flatten() == [3, 0, 1]
        assert resolved.merged

    def test_range_each_not_merged(self, resolver):
        resolved = resolver.resolve(PageSelection.range("1-2,4", RangeMode.EACH), 5)
        assert resolved.mode == SelectionMode.RANGE
        assert not resolved.merged

    def test_manual_sorted_regardless_of_click_order(self, resolver):
        selection = PageSelection.manual([4, 0, 2])
        assert resolver.resolve(selection, 5).flatten() == [0, 2, 4]

    def test_manual_drops_out_of_bounds(self, resolver):
        assert resolver.resolve(PageSelection.manual([1, 9, -1]), 5).flatten() == [1]

    def test_manual_empty_rejected(self, resolver):
        with pytest.raises(EmptySelectionError):
            resolver.resolve(PageSelection.manual([]), 5)

    def test_validate_order(self, resolver):
        assert resolver.validate_order([3, 1, 2], 3) == [2, 0, 1]

    def test_validate_order_requires_every_page(self, resolver):
        with pytest.raises(InvalidInputError) as exc_info:
            resolver.validate_order([2], 3)
        assert exc_info.value.error.details == {"received": 1, "page_count": 3}

    @pytest.mark.parametrize("order", [[0, 1, 2], [1, 2, 4], [1, 1, 2], ["1", 2, 3], [1.0, 2, 3], [True, 2, 3]])
    def test_validate_order_rejects_bad_values(self, resolver, order):
        with pytest.raises(InvalidInputError):
            resolver.validate_order(order, 3)

    def test_validate_order_rejects_empty(self, resolver):
        with pytest.raises(EmptySelectionError):
            resolver.validate_order([], 3)
