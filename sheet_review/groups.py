"""
Group header detection.

A group header row is a row whose first cell, trimmed, starts with the group
prefix. Each header owns the contiguous rows up to the next header, or up to
the last row for the final group.
"""

from bisect import bisect_right
from typing import Iterator, List, NamedTuple, Optional, Sequence

from .values import CellValue, display_text


class Group(NamedTuple):
    """Inclusive row range owned by a group header at ``start``."""

    start: int
    end: int

    @property
    def data_rows(self) -> range:
        return range(self.start + 1, self.end + 1)


def is_group_label(value: CellValue, prefix: str) -> bool:
    return display_text(value).strip().startswith(prefix)


def find_group_column(headers: Sequence[str], prefix: str) -> int:
    """Index of the first header starting with ``prefix``, or -1."""
    for idx, header in enumerate(headers):
        if (header or '').strip().startswith(prefix):
            return idx
    return -1


class GroupIndex:
    """Ordered group header rows derived from a row matrix."""

    def __init__(self, header_rows: Sequence[int], row_count: int):
        self.header_rows: List[int] = sorted(header_rows)
        self.row_count = row_count

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[CellValue]], prefix: str) -> "GroupIndex":
        header_rows = [
            idx for idx, row in enumerate(rows)
            if row and is_group_label(row[0], prefix)
        ]
        return cls(header_rows, len(rows))

    def __len__(self) -> int:
        return len(self.header_rows)

    def is_group_header(self, row: int) -> bool:
        pos = bisect_right(self.header_rows, row)
        return pos > 0 and self.header_rows[pos - 1] == row

    def owner_of(self, row: int) -> Optional[int]:
        """Greatest header row <= ``row``; None when ``row`` precedes every header."""
        pos = bisect_right(self.header_rows, row)
        if pos == 0:
            return None
        return self.header_rows[pos - 1]

    def group_of(self, row: int) -> Optional[Group]:
        pos = bisect_right(self.header_rows, row)
        if pos == 0:
            return None
        return self._group_at(pos - 1)

    def groups(self) -> Iterator[Group]:
        for pos in range(len(self.header_rows)):
            yield self._group_at(pos)

    def _group_at(self, pos: int) -> Group:
        start = self.header_rows[pos]
        if pos + 1 < len(self.header_rows):
            end = self.header_rows[pos + 1] - 1
        else:
            end = self.row_count - 1
        return Group(start, end)
