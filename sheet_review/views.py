"""
Derived row views: color filters, text search and match navigation.

Everything here is a pure function of the rows, the annotations and the
query. Filtering keeps each row's original index because highlighting,
scrolling and export address rows by that index, never by filtered position.
"""

import time
from enum import Enum
from typing import Callable, Generic, List, Mapping, NamedTuple, Optional, Sequence, TypeVar

from .annotations import CellKey
from .colors import HighlightColor
from .values import CellValue, display_text

T = TypeVar('T')


class FilterMode(str, Enum):
    ALL = "all"
    GREEN = "green"
    RED = "red"
    NONE = "none"


class IndexedRow(NamedTuple):
    index: int
    row: Sequence[CellValue]


def filter_rows(
    rows: Sequence[Sequence[CellValue]],
    mode: FilterMode,
    highlights: Mapping[CellKey, HighlightColor],
) -> List[IndexedRow]:
    """
    Select rows by highlight color.

    ``green`` and ``red`` keep rows with at least one cell of that color,
    ``none`` keeps rows without any colored cell and ``all`` keeps every row.
    """
    mode = FilterMode(mode)
    indexed = [IndexedRow(idx, row) for idx, row in enumerate(rows)]
    if mode == FilterMode.ALL:
        return indexed

    colors_by_row = {}
    for key, color in highlights.items():
        colors_by_row.setdefault(key.row, set()).add(color)

    if mode == FilterMode.NONE:
        return [item for item in indexed if not colors_by_row.get(item.index)]

    wanted = HighlightColor(mode.value)
    return [item for item in indexed if wanted in colors_by_row.get(item.index, ())]


def search_rows(rows: Sequence[IndexedRow], query: Optional[str]) -> List[int]:
    """
    Original indices of rows with a cell containing ``query``, case-insensitively.

    A blank query suppresses the search and matches nothing.
    """
    if not query or not query.strip():
        return []

    needle = query.lower()
    matches = []
    for item in rows:
        if any(needle in display_text(cell).lower() for cell in item.row):
            matches.append(item.index)
    return matches


class MatchCursor:
    """Bounded position within a sequence of search matches."""

    def __init__(self, matches: Sequence[int] = ()):
        self.matches = list(matches)
        self.position = 0

    def __len__(self) -> int:
        return len(self.matches)

    @property
    def current(self) -> Optional[int]:
        """Row index of the current match, None without matches."""
        if not self.matches:
            return None
        return self.matches[self.position]

    def next(self) -> Optional[int]:
        if self.position + 1 < len(self.matches):
            self.position += 1
        return self.current

    def previous(self) -> Optional[int]:
        if self.position > 0:
            self.position -= 1
        return self.current


class Debouncer(Generic[T]):
    """
    Holds back a changing value until it has been quiet for ``window_ms``.

    The clock is injectable so the quiet period can be driven explicitly.
    """

    def __init__(self, window_ms: int, initial: T, clock: Callable[[], float] = time.monotonic):
        self.window = window_ms / 1000.0
        self.clock = clock
        self._settled = initial
        self._pending = initial
        self._changed_at: Optional[float] = None

    def push(self, value: T) -> None:
        self._pending = value
        self._changed_at = self.clock()

    def reset(self, value: T) -> None:
        """Settle ``value`` immediately, dropping anything pending."""
        self._settled = value
        self._pending = value
        self._changed_at = None

    @property
    def pending(self) -> bool:
        return self._changed_at is not None

    def settled(self) -> T:
        if self._changed_at is not None and self.clock() - self._changed_at >= self.window:
            self._settled = self._pending
            self._changed_at = None
        return self._settled

    def flush(self) -> T:
        """Settle whatever is pending without waiting for the window."""
        self._settled = self._pending
        self._changed_at = None
        return self._settled
