"""
sheet-review - Mark spreadsheet cells as approved or flagged, attach notes and
export an annotated workbook.

Highlights are written as native solid fills and notes as cell comments, so an
exported workbook can be opened again and the review continues where it left
off. Exports add a flagged-rows sheet, a commented-rows sheet and a per-group
summary derived from the annotations.

Example:
    from pathlib import Path
    from sheet_review import ReviewSession

    session = ReviewSession()
    document = session.load_file('inventory.xlsx')
    document.toggle_cell_color(4, 2)          # green
    document.toggle_cell_color(4, 2)          # red
    document.set_note(4, 2, 'Count differs from stock card')

    result = session.export()
    Path(result.file_name).write_bytes(result.content)
"""

from .annotations import AnnotationStore, CellKey
from .colors import HighlightColor, classify_fill, classify_hex
from .config import ReviewConfig
from .document import ReviewDocument
from .exceptions import ExportError, PersistenceError, SheetReadError, SheetReviewError
from .exporter import ExportComposer, ExportResult, SheetSpec, WorkbookWriter, export_document
from .formatter import RowFormatter
from .groups import Group, GroupIndex, find_group_column
from .persistence import AutoSaver, JsonSnapshotStore, Snapshot, SnapshotStore
from .reader import SheetReader, read_document
from .session import ReviewSession
from .values import normalize_cell_value
from .views import Debouncer, FilterMode, IndexedRow, MatchCursor, filter_rows, search_rows
from .widths import auto_widths, widths_from_worksheet

__version__ = "0.1.0"
__all__ = [
    "AnnotationStore", "CellKey",
    "HighlightColor", "classify_fill", "classify_hex",
    "ReviewConfig",
    "ReviewDocument",
    "ExportError", "PersistenceError", "SheetReadError", "SheetReviewError",
    "ExportComposer", "ExportResult", "SheetSpec", "WorkbookWriter", "export_document",
    "RowFormatter",
    "Group", "GroupIndex", "find_group_column",
    "AutoSaver", "JsonSnapshotStore", "Snapshot", "SnapshotStore",
    "SheetReader", "read_document",
    "ReviewSession",
    "normalize_cell_value",
    "Debouncer", "FilterMode", "IndexedRow", "MatchCursor", "filter_rows", "search_rows",
    "auto_widths", "widths_from_worksheet",
]
