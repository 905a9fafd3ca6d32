"""
Compose and write the annotated workbook.

The composer turns a document into sheet descriptions; the writer renders
those descriptions with openpyxl. Neither touches the document's state.
"""

import logging
from dataclasses import dataclass, field
from io import BytesIO
from typing import Dict, Iterable, List, NamedTuple, Optional

from openpyxl import Workbook
from openpyxl.comments import Comment
from openpyxl.styles import PatternFill
from openpyxl.utils import get_column_letter

from .annotations import CellKey
from .colors import argb_for
from .config import ReviewConfig
from .document import ReviewDocument
from .exceptions import ExportError
from .values import CellValue, display_text, is_numeric_text
from .widths import export_width

logger = logging.getLogger(__name__)

SUMMARY_WIDTHS = {0: 50, 1: 30, 2: 30}
NOT_AVAILABLE = "N/A"


@dataclass
class SheetSpec:
    """
    Description of one output sheet.

    ``fills`` and ``notes`` are keyed by position within ``rows`` (row 0 is
    the sheet's header row); ``widths`` maps a column index to its width in
    character units.
    """

    title: str
    rows: List[List[CellValue]]
    fills: Dict[CellKey, str] = field(default_factory=dict)
    notes: Dict[CellKey, str] = field(default_factory=dict)
    widths: Dict[int, float] = field(default_factory=dict)


class ExportResult(NamedTuple):
    file_name: str
    content: bytes
    sheet_titles: List[str]


class ExportComposer:
    """Build the sheet descriptions for an exported review."""

    def __init__(self, config: Optional[ReviewConfig] = None):
        self.config = config or ReviewConfig()

    def compose(self, document: ReviewDocument) -> List[SheetSpec]:
        """
        Describe the output workbook for ``document``.

        Always emits the main sheet. The flagged sheet follows when any cell is
        red, the commented sheet when any note exists and the group summary
        when the rows contain group headers.
        """
        sheets = [self.main_sheet(document)]

        red_rows = document.annotations.red_rows()
        if red_rows:
            sheets.append(self.subset_sheet(document, self.config.flagged_sheet_title, red_rows))

        noted_rows = document.annotations.noted_rows()
        if noted_rows:
            sheets.append(self.subset_sheet(document, self.config.commented_sheet_title, noted_rows))

        if len(document.group_index):
            sheets.append(self.summary_sheet(document))

        return sheets

    def main_sheet(self, document: ReviewDocument) -> SheetSpec:
        annotations = document.annotations
        fills = {
            CellKey(key.row + 1, key.col): argb_for(color, self.config)
            for key, color in annotations.highlights.items()
        }
        notes = {CellKey(key.row + 1, key.col): text for key, text in annotations.notes.items()}

        return SheetSpec(
            title=self.config.main_sheet_title,
            rows=[list(document.headers)] + [list(row) for row in document.rows],
            fills=fills,
            notes=notes,
            widths=self._row_sheet_widths(document),
        )

    def subset_sheet(self, document: ReviewDocument, title: str, selected: Iterable[int]) -> SheetSpec:
        """
        Rows in ``selected`` in ascending order, each preceded by its group header.

        A group header is emitted once, right before the first selected row of
        its group. A selected row that is itself that header is not repeated.
        """
        groups = document.group_index
        rows = [list(document.headers)]
        last_header = None

        for idx in sorted(selected):
            owner = groups.owner_of(idx)
            if owner is not None and owner != last_header:
                rows.append(list(document.rows[owner]))
                last_header = owner
                if owner == idx:
                    continue
            rows.append(list(document.rows[idx]))

        return SheetSpec(title=title, rows=rows, widths=self._row_sheet_widths(document))

    def summary_sheet(self, document: ReviewDocument) -> SheetSpec:
        red_rows = document.annotations.red_rows()
        rows = [list(self.config.summary_headers)]

        for group in document.group_index.groups():
            label = document.rows[group.start][0]
            if display_text(label).strip() == '':
                label = self.config.untitled_group_label

            item_count = self._last_sequence_number(document, group)
            red_count = sum(1 for idx in group.data_rows if idx in red_rows)
            rows.append([label, item_count, red_count])

        return SheetSpec(
            title=self.config.summary_sheet_title,
            rows=rows,
            widths=dict(SUMMARY_WIDTHS),
        )

    @staticmethod
    def _last_sequence_number(document: ReviewDocument, group) -> str:
        # Walk up from the group's last row; sub-label rows without a number are skipped
        for idx in reversed(group.data_rows):
            row = document.rows[idx]
            if not row:
                continue
            text = display_text(row[0]).strip()
            if is_numeric_text(text):
                return text
        return NOT_AVAILABLE

    @staticmethod
    def _row_sheet_widths(document: ReviewDocument) -> Dict[int, float]:
        return {col: export_width(document.column_widths, col) for col in range(len(document.headers))}


class WorkbookWriter:
    """Output adapter rendering sheet descriptions into an xlsx buffer."""

    def __init__(self, config: Optional[ReviewConfig] = None):
        self.config = config or ReviewConfig()

    def write(self, sheets: List[SheetSpec]) -> bytes:
        """
        Serialize ``sheets`` in order.

        Raises:
            ExportError: If openpyxl refuses a value, title or the workbook itself
        """
        try:
            workbook = Workbook()
            for position, spec in enumerate(sheets):
                worksheet = workbook.active if position == 0 else workbook.create_sheet()
                self._write_sheet(worksheet, spec)

            buffer = BytesIO()
            workbook.save(buffer)
            return buffer.getvalue()
        except Exception as e:
            raise ExportError(f"Unable to write workbook: {e}") from e

    def _write_sheet(self, worksheet, spec: SheetSpec) -> None:
        worksheet.title = spec.title

        for row_idx, row in enumerate(spec.rows, 1):
            for col_idx, value in enumerate(row, 1):
                if value is None:
                    continue
                cell = worksheet.cell(row=row_idx, column=col_idx, value=value)
                # Text that happens to start with "=" stays text
                if isinstance(value, str) and value.startswith('='):
                    cell.data_type = 's'

        for key, argb in spec.fills.items():
            cell = worksheet.cell(row=key.row + 1, column=key.col + 1)
            cell.fill = PatternFill(start_color=argb, end_color=argb, fill_type='solid')

        for key, text in spec.notes.items():
            cell = worksheet.cell(row=key.row + 1, column=key.col + 1)
            cell.comment = Comment(text, self.config.comment_author)

        for col, width in spec.widths.items():
            worksheet.column_dimensions[get_column_letter(col + 1)].width = width


def export_document(document: ReviewDocument, config: Optional[ReviewConfig] = None) -> ExportResult:
    """
    Export ``document`` as an annotated workbook.

    Returns:
        The output file name (original name with the edit prefix), the xlsx
        bytes and the titles of the sheets written
    """
    config = config or document.config
    sheets = ExportComposer(config).compose(document)
    content = WorkbookWriter(config).write(sheets)
    file_name = f"{config.edit_prefix}{document.file_name}"
    logger.info("Exported %s with sheets %s", file_name, [sheet.title for sheet in sheets])
    return ExportResult(file_name, content, [sheet.title for sheet in sheets])
