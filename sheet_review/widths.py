"""
Column width estimation in screen pixels.
"""

from typing import Dict, List, Optional, Sequence

from openpyxl.utils import column_index_from_string

from .groups import is_group_label
from .values import CellValue, display_text

MIN_WIDTH = 60
MAX_WIDTH = 500
PADDING = 24
PIXELS_PER_CHAR = 8
DEFAULT_WIDTH = 100

# Export widths in character units
FIRST_COLUMN_CHARS = 5
MIN_COLUMN_CHARS = 10
FALLBACK_EXPORT_PIXELS = 80


def auto_widths(
    headers: Sequence[str],
    rows: Sequence[Sequence[CellValue]],
    group_prefix: str,
) -> List[int]:
    """
    Estimate pixel widths from the longest text in each column.

    Group header labels are skipped for column 0: they span the whole row when
    displayed and would otherwise blow up the first column.
    """
    lengths = [len(header or '') for header in headers]

    for row in rows:
        skip_first = bool(row) and is_group_label(row[0], group_prefix)
        for idx, cell in enumerate(row[:len(lengths)]):
            if idx == 0 and skip_first:
                continue
            lengths[idx] = max(lengths[idx], len(display_text(cell)))

    return [
        max(MIN_WIDTH, min(MAX_WIDTH, length * PIXELS_PER_CHAR + PADDING))
        for length in lengths
    ]


def stored_char_widths(worksheet) -> Dict[int, float]:
    """Zero-based column index -> stored width in characters."""
    widths = {}
    for letter, dim in worksheet.column_dimensions.items():
        if not dim.width:
            continue
        first = dim.min or column_index_from_string(letter)
        last = dim.max or first
        for col in range(first, last + 1):
            widths[col - 1] = dim.width
    return widths


def widths_from_worksheet(
    worksheet,
    headers: Sequence[str],
    rows: Sequence[Sequence[CellValue]],
    group_prefix: str,
) -> List[int]:
    """
    Pixel widths from stored column metadata, or estimated when there is none.

    Columns without stored metadata get the default width.
    """
    stored = stored_char_widths(worksheet) if worksheet is not None else {}
    if not stored:
        return auto_widths(headers, rows, group_prefix)

    return [
        int(round(stored[idx] * PIXELS_PER_CHAR)) if idx in stored else DEFAULT_WIDTH
        for idx in range(len(headers))
    ]


def fit_widths(widths: Sequence[int], count: int, default: int = DEFAULT_WIDTH) -> List[int]:
    """Pad or truncate ``widths`` to exactly ``count`` entries."""
    fitted = list(widths[:count])
    fitted.extend([default] * (count - len(fitted)))
    return fitted


def export_width(widths: Sequence[Optional[int]], col: int) -> float:
    """Character width written for a column of an exported row sheet."""
    if col == 0:
        return FIRST_COLUMN_CHARS
    pixels = widths[col] if col < len(widths) and widths[col] else FALLBACK_EXPORT_PIXELS
    return max(MIN_COLUMN_CHARS, pixels / PIXELS_PER_CHAR)
