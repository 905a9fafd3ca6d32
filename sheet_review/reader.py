"""
Read a workbook into a review document.

Only the first worksheet is read. Row 1 holds the headers; every following
row is padded to the header width. Fills and comments already present in the
file are classified back into highlights and notes, so a workbook exported by
this package can be opened and edited again.
"""

import logging
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Optional, Union

import openpyxl.styles.colors
from openpyxl import load_workbook

from .annotations import AnnotationStore, CellKey
from .colors import classify_fill
from .config import ReviewConfig
from .document import ReviewDocument
from .exceptions import SheetReadError
from .values import display_text, normalize_cell_value
from .widths import widths_from_worksheet

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = ('.xlsx', '.xlsm', '.xltx', '.xltm')

Source = Union[str, Path, bytes, BinaryIO]


def _patch_openpyxl_colors():
    """Make openpyxl tolerate malformed RGB strings instead of refusing the file."""
    rgb_descriptor = openpyxl.styles.colors.RGB
    if getattr(rgb_descriptor, '_sheet_review_patched', False):
        return
    original_rgb_set = rgb_descriptor.__set__

    def patched_rgb_set(self, instance, value):
        if value is not None and isinstance(value, str):
            value = ''.join(c for c in value if c in '0123456789ABCDEFabcdef')
            if len(value) == 6:
                value = 'FF' + value
            elif len(value) < 6:
                value = value.ljust(8, '0')
            elif len(value) > 8:
                value = value[:8]
        try:
            original_rgb_set(self, instance, value)
        except (TypeError, ValueError):
            # Left unset; the classifier treats the fill as uncolored
            instance.__dict__[self.name] = None

    rgb_descriptor.__set__ = patched_rgb_set
    rgb_descriptor._sheet_review_patched = True


def _note_text(comment) -> Optional[str]:
    if comment is None:
        return None
    try:
        text = comment.text
    except AttributeError:
        text = comment
    if text is None:
        return None
    text = str(text).strip()
    return text or None


class SheetReader:
    """Input adapter turning an xlsx workbook into a ``ReviewDocument``."""

    def __init__(self, config: Optional[ReviewConfig] = None):
        self.config = config or ReviewConfig()
        _patch_openpyxl_colors()

    def read(self, source: Source, file_name: Optional[str] = None) -> ReviewDocument:
        """
        Load the first worksheet of ``source``.

        Args:
            source: Path to an xlsx file, its raw bytes or a binary file object
            file_name: Name recorded on the document; defaults to the path's name

        Returns:
            The loaded document with highlights, notes and widths from the file

        Raises:
            FileNotFoundError: If ``source`` is a path that doesn't exist
            SheetReadError: If the file is not a readable workbook or has no worksheet
        """
        handle, file_name = self._resolve(source, file_name)

        try:
            workbook = load_workbook(handle, data_only=True, rich_text=True)
        except Exception as e:
            raise SheetReadError(f"Unable to read workbook {file_name}: {e}") from e

        if not workbook.worksheets:
            raise SheetReadError(f"Workbook {file_name} contains no worksheets")
        worksheet = workbook.worksheets[0]

        headers = self._read_headers(worksheet)
        if not headers:
            raise SheetReadError(f"First sheet of {file_name} has no header row")
        if worksheet.max_column > len(headers):
            logger.debug(
                "Ignoring %d column(s) past the last header of %s",
                worksheet.max_column - len(headers), file_name
            )

        rows = []
        highlights = {}
        notes = {}
        width = len(headers)

        if worksheet.max_row > 1:
            for row_idx, cells in enumerate(worksheet.iter_rows(min_row=2, max_row=worksheet.max_row, max_col=width)):
                values = []
                for col_idx, cell in enumerate(cells):
                    values.append(normalize_cell_value(cell.value))

                    color = classify_fill(getattr(cell, 'fill', None))
                    if color is not None:
                        highlights[CellKey(row_idx, col_idx)] = color

                    note = _note_text(getattr(cell, 'comment', None))
                    if note:
                        notes[CellKey(row_idx, col_idx)] = note
                values.extend([None] * (width - len(values)))
                rows.append(values)

        column_widths = widths_from_worksheet(worksheet, headers, rows, self.config.group_prefix)

        document = ReviewDocument(
            file_name,
            headers,
            rows,
            annotations=AnnotationStore(highlights, notes),
            column_widths=column_widths,
            config=self.config,
        )
        logger.info(
            "Loaded %s: %d rows, %d columns, %d highlights, %d notes",
            file_name, len(rows), width, len(highlights), len(notes)
        )
        return document

    def _resolve(self, source: Source, file_name: Optional[str]):
        if isinstance(source, (bytes, bytearray)):
            return BytesIO(source), file_name or 'workbook.xlsx'

        if isinstance(source, (str, Path)):
            path = Path(source)
            if not path.exists():
                raise FileNotFoundError(f"File not found: {source}")
            if path.suffix.lower() not in SUPPORTED_SUFFIXES:
                raise SheetReadError(f"File must be an Excel workbook (xlsx), got: {path.suffix}")
            return str(path), file_name or path.name

        name = getattr(source, 'name', None)
        return source, file_name or (Path(name).name if isinstance(name, str) else 'workbook.xlsx')

    @staticmethod
    def _read_headers(worksheet):
        header_cells = next(worksheet.iter_rows(min_row=1, max_row=1), ())
        values = [normalize_cell_value(cell.value) for cell in header_cells]
        while values and display_text(values[-1]).strip() == '':
            values.pop()
        return [display_text(value) for value in values]


def read_document(source: Source, file_name: Optional[str] = None,
                  config: Optional[ReviewConfig] = None) -> ReviewDocument:
    return SheetReader(config).read(source, file_name)
