"""
The review document: one loaded sheet plus its annotations.
"""

import logging
from typing import List, Optional, Sequence

from .annotations import AnnotationStore
from .colors import HighlightColor
from .config import ReviewConfig
from .groups import GroupIndex, find_group_column
from .values import CellValue, normalize_cell_value
from .views import FilterMode, IndexedRow, filter_rows, search_rows
from .widths import auto_widths, fit_widths

logger = logging.getLogger(__name__)


def pad_row(row: Sequence, width: int) -> List[CellValue]:
    """Normalize a row and pad or truncate it to ``width`` cells."""
    cells = [normalize_cell_value(value) for value in list(row)[:width]]
    cells.extend([None] * (width - len(cells)))
    return cells


class ReviewDocument:
    """
    Aggregate owning the rows, headers, annotations and column widths of a sheet.

    Rows are addressed by their position in ``rows``, which stays stable for
    the lifetime of the document. Derived views are computed on demand; the
    group index is cached until the row data is replaced.
    """

    def __init__(
        self,
        file_name: str,
        headers: Sequence[Optional[str]],
        rows: Sequence[Sequence],
        annotations: Optional[AnnotationStore] = None,
        column_widths: Optional[Sequence[int]] = None,
        config: Optional[ReviewConfig] = None,
    ):
        self.config = config or ReviewConfig()
        self.file_name = file_name
        self.headers: List[str] = [str(h) if h is not None else '' for h in headers]
        self.rows: List[List[CellValue]] = [pad_row(row, len(self.headers)) for row in rows]
        self.annotations = annotations or AnnotationStore()
        self.annotations.prune(len(self.rows), len(self.headers))
        if column_widths is None:
            column_widths = auto_widths(self.headers, self.rows, self.config.group_prefix)
        self.column_widths: List[int] = fit_widths(column_widths, len(self.headers))
        self._revision = 0
        self._group_cache = None

    def __repr__(self) -> str:
        return (
            f"ReviewDocument({self.file_name!r}, rows={len(self.rows)}, "
            f"columns={len(self.headers)}, highlights={len(self.annotations.highlights)}, "
            f"notes={len(self.annotations.notes)})"
        )

    @property
    def group_column(self) -> int:
        return find_group_column(self.headers, self.config.group_prefix)

    @property
    def group_index(self) -> GroupIndex:
        if self._group_cache is None or self._group_cache[0] != self._revision:
            index = GroupIndex.from_rows(self.rows, self.config.group_prefix)
            self._group_cache = (self._revision, index)
        return self._group_cache[1]

    def _check_cell(self, row: int, col: int) -> None:
        if not 0 <= row < len(self.rows):
            raise IndexError(f"Row {row} is outside 0..{len(self.rows) - 1}")
        self._check_column(col)

    def _check_column(self, col: int) -> None:
        if not 0 <= col < len(self.headers):
            raise IndexError(f"Column {col} is outside 0..{len(self.headers) - 1}")

    def toggle_cell_color(self, row: int, col: int) -> Optional[HighlightColor]:
        self._check_cell(row, col)
        return self.annotations.toggle_cell_color(row, col, self.group_index, self.group_column)

    def set_note(self, row: int, col: int, text: Optional[str]) -> Optional[str]:
        self._check_cell(row, col)
        return self.annotations.set_note(row, col, text)

    def toggle_header_highlight(self, col: int) -> bool:
        self._check_column(col)
        return self.annotations.toggle_header_highlight(col, self.group_column)

    def resize_column(self, col: int, width: int) -> None:
        self._check_column(col)
        if width <= 0:
            raise ValueError(f"Column width must be positive, got {width}")
        widths = list(self.column_widths)
        widths[col] = int(width)
        self.column_widths = widths

    def replace_rows(self, rows: Sequence[Sequence]) -> None:
        """Swap in new row data; annotations outside the new grid are dropped."""
        self.rows = [pad_row(row, len(self.headers)) for row in rows]
        self.annotations.prune(len(self.rows), len(self.headers))
        self._revision += 1

    def filtered_rows(self, mode: FilterMode = FilterMode.ALL) -> List[IndexedRow]:
        return filter_rows(self.rows, mode, self.annotations.highlights)

    def search(self, query: Optional[str], mode: FilterMode = FilterMode.ALL) -> List[int]:
        return search_rows(self.filtered_rows(mode), query)
