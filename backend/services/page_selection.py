"""Page selection resolver: maps a selection mode to zero-based page indices."""
import logging
import re
from typing import Iterable, List

from models.selection import PageSelection, ResolvedSelection, SelectionMode
from services.errors import EmptySelectionError, InvalidInputError, RangeExpressionError

logger = logging.getLogger(__name__)

_PAGE_NUMBER = re.compile(r"^\d+$")


def _parse_page_number(text: str, token: str) -> int:
    text = text.strip()
    if not _PAGE_NUMBER.match(text):
        raise RangeExpressionError(f"Invalid page number in '{token}'", {"token": token})
    number = int(text)
    if number < 1:
        raise RangeExpressionError(f"Page numbers start at 1 (got '{token}')", {"token": token})
    return number


def parse_range_groups(expression: str, page_count: int) -> List[List[int]]:
    """
    Parse a range expression such as "1-3,5,8-9" into groups of zero-based indices.

    Each comma-separated token yields one group. Ranges are inclusive and
    clipped to the page count; a token pointing past the last page yields
    an empty group.

    Raises:
        RangeExpressionError: On non-numeric tokens, page 0 or inverted ranges
    """
    groups: List[List[int]] = []

    for raw_token in expression.split(","):
        token = raw_token.strip()
        if not token:
            continue

        if "-" in token:
            start_text, _, end_text = token.partition("-")
            start = _parse_page_number(start_text, token)
            end = _parse_page_number(end_text, token)
            if start > end:
                raise RangeExpressionError(f"Range '{token}' is inverted", {"token": token})
            groups.append(list(range(start - 1, min(end, page_count))))
        else:
            page = _parse_page_number(token, token)
            groups.append([page - 1] if page <= page_count else [])

    return groups


class PageSelectionResolver:
    """Resolves split selections and validates reorder permutations."""

    def resolve(self, selection: PageSelection, page_count: int) -> ResolvedSelection:
        """
        Compute the ordered zero-based indices for a selection.

        Args:
            selection: Selection mode and its parameters
            page_count: Number of pages in the source document

        Returns:
            ResolvedSelection whose indices all lie in [0, page_count)

        Raises:
            RangeExpressionError: Malformed range expression
            EmptySelectionError: Manual selection with nothing checked
        """
        if selection.mode == SelectionMode.ALL:
            resolved = ResolvedSelection(mode=selection.mode, groups=[list(range(page_count))])

        elif selection.mode == SelectionMode.RANGE:
            groups = parse_range_groups(selection.range_expression, page_count)
            resolved = ResolvedSelection(mode=selection.mode, groups=groups, range_mode=selection.range_mode)

        elif selection.mode == SelectionMode.MANUAL:
            pages = sorted(i for i in selection.checked_pages if 0 <= i < page_count)
            if not pages:
                logger.warning("Manual split requested with no pages selected")
                raise EmptySelectionError("Select at least one page to split")
            resolved = ResolvedSelection(mode=selection.mode, groups=[pages])

        else:
            raise InvalidInputError(f"Unknown selection mode: {selection.mode}")

        logger.debug(f"Resolved {selection.mode.value} selection to {resolved.groups}")
        return resolved

    @staticmethod
    def validate_order(pages_order: Iterable, page_count: int) -> List[int]:
        """
        Validate a reorder permutation of original 1-based page numbers.

        Every page must appear exactly once.

        Returns:
            Zero-based indices in the requested order
        """
        order = list(pages_order)
        if not order:
            raise EmptySelectionError("Page order cannot be empty")
        if len(order) != page_count:
            raise InvalidInputError(
                f"Page order must list all {page_count} pages",
                {"received": len(order), "page_count": page_count},
            )

        seen = set()
        for page in order:
            if isinstance(page, bool) or not isinstance(page, int):
                raise InvalidInputError("Page order must contain integers", {"value": page})
            if not 1 <= page <= page_count:
                raise InvalidInputError(
                    f"Page {page} is outside the document (1-{page_count})",
                    {"page": page, "page_count": page_count},
                )
            if page in seen:
                raise InvalidInputError(f"Page {page} appears more than once", {"page": page})
            seen.add(page)

        return [page - 1 for page in order]
