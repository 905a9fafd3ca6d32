"""
Tests for column width estimation.
"""

from openpyxl import Workbook

from sheet_review.widths import auto_widths, export_width, fit_widths, widths_from_worksheet

PREFIX = "Revision group"


class TestAutoWidths:

    def test_length_formula(self):
        widths = auto_widths(["No", "Description"], [[1, "Short"], [2, "A much longer text"]], PREFIX)
        # "No" -> 2 chars; "A much longer text" -> 18 chars
        assert widths == [60, 18 * 8 + 24]

    def test_bounds_and_length(self):
        headers = ["", "x" * 200, "Qty", "Extra"]
        rows = [[None, "y", 123456789012345, True], ["z" * 1000]]
        widths = auto_widths(headers, rows, PREFIX)
        assert len(widths) == len(headers)
        assert all(60 <= width <= 500 for width in widths)
        assert widths[1] == 500

    def test_group_label_skipped_in_first_column(self):
        rows = [["Revision group with a very long descriptive label", None], [12, "Pump"]]
        widths = auto_widths(["No", "Name"], rows, PREFIX)
        assert widths[0] == 60

    def test_rows_longer_than_headers(self):
        widths = auto_widths(["A"], [["a", "ignored" * 50]], PREFIX)
        assert widths == [60]


class TestWidthsFromWorksheet:

    def test_stored_widths(self):
        """Stored character widths become pixels; other columns default to 100."""
        wb = Workbook()
        ws = wb.active
        ws.column_dimensions['A'].width = 5
        ws.column_dimensions['C'].width = 30
        widths = widths_from_worksheet(ws, ["No", "Name", "Qty"], [], PREFIX)
        assert widths == [40, 100, 240]

    def test_falls_back_to_auto(self):
        wb = Workbook()
        ws = wb.active
        widths = widths_from_worksheet(ws, ["No", "Name"], [[1, "x" * 30]], PREFIX)
        assert widths == auto_widths(["No", "Name"], [[1, "x" * 30]], PREFIX)

    def test_no_worksheet(self):
        assert widths_from_worksheet(None, ["No"], [], PREFIX) == [60]


class TestFitAndExportWidths:

    def test_fit_widths(self):
        assert fit_widths([80, 90], 4) == [80, 90, 100, 100]
        assert fit_widths([80, 90, 70], 2) == [80, 90]
        assert fit_widths([], 0) == []

    def test_export_width(self):
        widths = [300, 240, 40, 0]
        assert export_width(widths, 0) == 5
        assert export_width(widths, 1) == 30
        assert export_width(widths, 2) == 10
        # Unknown width falls back to 80 px, clamped to the 10 character minimum
        assert export_width(widths, 3) == 10
        assert export_width(widths, 9) == 10
