"""Page selection data models."""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Set


class SelectionMode(str, Enum):
    """How pages are chosen for a split run."""
    ALL = "all"
    RANGE = "range"
    MANUAL = "manual"


class RangeMode(str, Enum):
    """Whether range groups are merged into one document or split per page."""
    GROUP = "group"
    EACH = "each"


@dataclass
class PageSelection:
    """User selection for the split tool."""
    mode: SelectionMode
    range_expression: str = ""
    range_mode: RangeMode = RangeMode.GROUP
    checked_pages: Set[int] = field(default_factory=set)  # 0-indexed

    @classmethod
    def all(cls) -> "PageSelection":
        return cls(mode=SelectionMode.ALL)

    @classmethod
    def range(cls, expression: str, range_mode: RangeMode = RangeMode.GROUP) -> "PageSelection":
        return cls(mode=SelectionMode.RANGE, range_expression=expression, range_mode=RangeMode(range_mode))

    @classmethod
    def manual(cls, indices) -> "PageSelection":
        return cls(mode=SelectionMode.MANUAL, checked_pages=set(indices))


@dataclass
class ResolvedSelection:
    """Zero-based page indices produced by the resolver, grouped by range token."""
    mode: SelectionMode
    groups: List[List[int]]
    range_mode: RangeMode = RangeMode.EACH

    def flatten(self) -> List[int]:
        """Concatenate groups left to right in token order."""
        return [index for group in self.groups for index in group]

    @property
    def merged(self) -> bool:
        return self.mode == SelectionMode.RANGE and self.range_mode == RangeMode.GROUP
