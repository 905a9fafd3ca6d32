"""
Normalize stored cell values to plain scalars.
"""

import re
from datetime import date, datetime, time
from typing import Any, Union

from openpyxl.cell.rich_text import CellRichText

CellValue = Union[str, int, float, bool, None]


def normalize_cell_value(value: Any) -> CellValue:
    """
    Map a heterogeneous stored value to a string, number, boolean or None.

    Handles openpyxl rich text, formula results (cached values or objects
    carrying a ``result``), rich-text run lists and objects exposing ``text``.
    Anything else falls back to its string form.

    Args:
        value: Raw value as stored in a workbook or a persisted snapshot

    Returns:
        The normalized scalar
    """
    if value is None:
        return None

    if isinstance(value, (bool, int, float, str)):
        return value

    if isinstance(value, CellRichText):
        return str(value)

    if isinstance(value, (datetime, date, time)):
        return value.isoformat()

    if isinstance(value, dict):
        if value.get('result') is not None:
            return normalize_cell_value(value['result'])
        runs = value.get('richText')
        if isinstance(runs, list):
            return ''.join(str(run.get('text') or '') if isinstance(run, dict) else str(run) for run in runs)
        if value.get('text') is not None:
            return str(value['text'])
        return str(value)

    result = getattr(value, 'result', None)
    if result is not None:
        return normalize_cell_value(result)

    return str(value)


def display_text(value: CellValue) -> str:
    """String form of a normalized value as shown to the reviewer."""
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


NUMERIC_TEXT = re.compile(
    r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?"
    r"|[+-]?Infinity"
    r"|0[xX][0-9a-fA-F]+|0[oO][0-7]+|0[bB][01]+"
)


def is_numeric_text(text: str) -> bool:
    """
    True for non-empty text that reads as a number.

    Accepts decimal and exponent forms, ``Infinity`` and 0x/0o/0b integer
    literals. ``nan``, ``inf`` and digit separators are not numbers.
    """
    text = text.strip()
    if not text:
        return False
    return NUMERIC_TEXT.fullmatch(text) is not None
