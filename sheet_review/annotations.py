"""
In-memory highlight and note state for one loaded sheet.
"""

import logging
from typing import Dict, Iterable, Mapping, NamedTuple, Optional, Set

from .colors import HighlightColor
from .groups import GroupIndex

logger = logging.getLogger(__name__)


class CellKey(NamedTuple):
    """Zero-based (row, column) coordinate of a data cell."""

    row: int
    col: int


_NEXT_COLOR = {
    None: HighlightColor.GREEN,
    HighlightColor.GREEN: HighlightColor.RED,
    HighlightColor.RED: None,
}


class AnnotationStore:
    """
    Highlight colors, notes and header decorations keyed by cell.

    Highlight toggles keep the group invariant: whenever a cell outside the
    group column is red, the group-column cell of the owning group header is
    red as well. Every mutation builds the new mapping on a copy and swaps it
    in, so a failure part way leaves the previous state untouched.
    """

    def __init__(
        self,
        highlights: Optional[Mapping[CellKey, HighlightColor]] = None,
        notes: Optional[Mapping[CellKey, str]] = None,
    ):
        self.highlights: Dict[CellKey, HighlightColor] = {}
        self.notes: Dict[CellKey, str] = {}
        self.header_highlights: Set[int] = set()
        self.replace(highlights or {}, notes or {})

    def replace(
        self,
        highlights: Mapping[CellKey, HighlightColor],
        notes: Mapping[CellKey, str],
    ) -> None:
        """Supersede all state; nothing from the previous file survives."""
        new_highlights = {CellKey(*key): HighlightColor(color) for key, color in highlights.items()}
        new_notes = {}
        for key, text in notes.items():
            text = (text or '').strip()
            if text:
                new_notes[CellKey(*key)] = text
        self.highlights = new_highlights
        self.notes = new_notes
        self.header_highlights = set()

    def color_at(self, row: int, col: int) -> Optional[HighlightColor]:
        return self.highlights.get(CellKey(row, col))

    def note_at(self, row: int, col: int) -> Optional[str]:
        return self.notes.get(CellKey(row, col))

    def toggle_cell_color(
        self,
        row: int,
        col: int,
        groups: GroupIndex,
        group_column: int = -1,
    ) -> Optional[HighlightColor]:
        """
        Cycle a cell through none -> green -> red -> none.

        Args:
            row: Row index in the full row matrix
            col: Column index
            groups: Group index of the current rows
            group_column: Column holding group labels, -1 when the sheet has none

        Returns:
            The cell's new color, or None when it was cleared
        """
        key = CellKey(row, col)
        current = self.highlights.get(key)
        new_color = _NEXT_COLOR[current]

        # A group header cell stays red while its group still holds red
        if new_color is None and col == group_column and self._group_has_red(key, groups):
            return current

        highlights = dict(self.highlights)
        if new_color is None:
            del highlights[key]
        else:
            highlights[key] = new_color

        if group_column != -1 and col != group_column:
            self._sync_group_header(highlights, row, current, new_color, groups, group_column)

        self.highlights = highlights
        return new_color

    def _sync_group_header(self, highlights, row, previous, new_color, groups, group_column):
        group = groups.group_of(row)
        if group is None:
            return

        header_key = CellKey(group.start, group_column)
        if new_color == HighlightColor.RED:
            highlights[header_key] = HighlightColor.RED
            return

        if previous == HighlightColor.RED and new_color is None:
            if self._group_has_red(header_key, groups, highlights):
                return
            if highlights.pop(header_key, None) is not None:
                logger.debug("Released group header %s after last red cell cleared", header_key)

    def _group_has_red(self, header_key, groups, highlights=None):
        """True when a cell of the group headed at ``header_key`` other than that key is red."""
        if highlights is None:
            highlights = self.highlights
        if not groups.is_group_header(header_key.row):
            return False
        group = groups.group_of(header_key.row)
        return any(
            color == HighlightColor.RED and key != header_key and group.start <= key.row <= group.end
            for key, color in highlights.items()
        )

    def set_note(self, row: int, col: int, text: Optional[str]) -> Optional[str]:
        """Store trimmed note text; empty text removes the note."""
        key = CellKey(row, col)
        text = (text or '').strip()
        notes = dict(self.notes)
        if text:
            notes[key] = text
        else:
            notes.pop(key, None)
        self.notes = notes
        return text or None

    def toggle_header_highlight(self, col: int, group_column: int) -> bool:
        """Flip the header decoration of the group column; other columns ignore it."""
        if group_column == -1 or col != group_column:
            return False
        if col in self.header_highlights:
            self.header_highlights = self.header_highlights - {col}
        else:
            self.header_highlights = self.header_highlights | {col}
        return True

    def prune(self, row_count: int, col_count: int) -> None:
        """Drop keys that fall outside a row_count x col_count grid."""
        def inside(key):
            return 0 <= key.row < row_count and 0 <= key.col < col_count

        self.highlights = {k: v for k, v in self.highlights.items() if inside(k)}
        self.notes = {k: v for k, v in self.notes.items() if inside(k)}
        self.header_highlights = {c for c in self.header_highlights if 0 <= c < col_count}

    def rows_with_color(self, color: HighlightColor) -> Set[int]:
        return {key.row for key, value in self.highlights.items() if value == color}

    def red_rows(self) -> Set[int]:
        return self.rows_with_color(HighlightColor.RED)

    def noted_rows(self) -> Set[int]:
        return {key.row for key in self.notes}

    def row_colors(self) -> Dict[int, Set[HighlightColor]]:
        """Colors present in each annotated row."""
        colors: Dict[int, Set[HighlightColor]] = {}
        for key, value in self.highlights.items():
            colors.setdefault(key.row, set()).add(value)
        return colors

    def is_empty(self) -> bool:
        return not self.highlights and not self.notes


def parse_cell_keys(keys: Iterable[str]) -> Dict[str, CellKey]:
    """Map ``"row-col"`` wire keys to cell keys, skipping malformed ones."""
    parsed = {}
    for raw in keys:
        row, sep, col = str(raw).partition('-')
        if not sep:
            continue
        try:
            parsed[raw] = CellKey(int(row), int(col))
        except ValueError:
            logger.debug("Skipping malformed cell key %r", raw)
    return parsed


def format_cell_key(key: CellKey) -> str:
    return f"{key.row}-{key.col}"
