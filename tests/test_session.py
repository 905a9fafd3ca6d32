"""
Tests for the review session: loading, view state and export.
"""

from io import BytesIO

import pytest
from openpyxl import Workbook, load_workbook
from openpyxl.styles import PatternFill

from sheet_review import (
    CellKey,
    FilterMode,
    HighlightColor,
    ReviewConfig,
    ReviewSession,
    SheetReadError,
    Snapshot,
)

RED = HighlightColor.RED
GREEN = HighlightColor.GREEN


class FakeClock:
    def __init__(self):
        self.now_ms = 0

    def __call__(self):
        return self.now_ms / 1000.0

    def advance(self, ms):
        self.now_ms += ms


def create_workbook(path, first_name='Pump'):
    wb = Workbook()
    ws = wb.active
    ws.append(['No', 'Name', 'Revision group'])
    ws.append(['Revision group A', None, None])
    ws.append([1, first_name, None])
    ws.append([2, 'Pump seal', None])
    ws.append([3, 'Valve', None])
    ws['B4'].fill = PatternFill(start_color='00B050', end_color='00B050', fill_type='solid')
    wb.save(path)
    return path


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session(clock):
    return ReviewSession(ReviewConfig(search_debounce_ms=300), clock=clock)


class TestLoading:

    def test_load_replaces_state(self, session, tmp_path):
        first = create_workbook(tmp_path / "first.xlsx")
        second = create_workbook(tmp_path / "second.xlsx", first_name='Motor')

        document = session.load_file(first)
        document.toggle_cell_color(1, 1)
        session.set_filter(FilterMode.GREEN)

        replaced = session.load_file(second)
        assert session.document is replaced
        assert replaced.file_name == "second.xlsx"
        assert replaced.annotations.highlights == {CellKey(2, 1): GREEN}
        assert session.filter_mode == FilterMode.ALL

    def test_failed_load_keeps_previous_document(self, session, tmp_path):
        document = session.load_file(create_workbook(tmp_path / "first.xlsx"))
        broken = tmp_path / "broken.xlsx"
        broken.write_bytes(b"not a workbook")

        with pytest.raises(SheetReadError):
            session.load_file(broken)
        with pytest.raises(FileNotFoundError):
            session.load_file(tmp_path / "missing.xlsx")

        assert session.document is document

    def test_load_bytes_with_name(self, session, tmp_path):
        content = create_workbook(tmp_path / "a.xlsx").read_bytes()
        document = session.load_file(content, "upload.xlsx")
        assert document.file_name == "upload.xlsx"
        assert len(document.rows) == 4

    def test_reset(self, session, tmp_path):
        session.load_file(create_workbook(tmp_path / "a.xlsx"))
        session.reset()
        assert session.document is None
        with pytest.raises(RuntimeError):
            session.visible_rows()

    def test_snapshot_round_trip(self, session, tmp_path):
        document = session.load_file(create_workbook(tmp_path / "a.xlsx"))
        document.set_note(3, 1, "check stock")
        snapshot = Snapshot.model_validate_json(session.snapshot("u").model_dump_json(by_alias=True))

        session.reset()
        restored = session.load_snapshot(snapshot)
        assert restored.file_name == "a.xlsx"
        assert restored.annotations.notes == {CellKey(3, 1): "check stock"}
        assert restored.annotations.highlights == {CellKey(2, 1): GREEN}


class TestViewState:

    def test_filter(self, session, tmp_path):
        session.load_file(create_workbook(tmp_path / "a.xlsx"))
        session.set_filter("green")
        assert [item.index for item in session.visible_rows()] == [2]
        session.set_filter(FilterMode.NONE)
        assert [item.index for item in session.visible_rows()] == [0, 1, 3]

    def test_query_applies_after_debounce(self, session, clock, tmp_path):
        session.load_file(create_workbook(tmp_path / "a.xlsx"))

        session.type_query("p")
        clock.advance(100)
        session.type_query("pump")
        clock.advance(299)
        assert session.query == ""
        assert session.matches() == []

        clock.advance(1)
        assert session.query == "pump"
        assert session.matches() == [1, 2]

    def test_match_navigation(self, session, clock, tmp_path):
        session.load_file(create_workbook(tmp_path / "a.xlsx"))
        session.type_query("pump")
        clock.advance(300)

        assert session.current_match == 1
        assert session.next_match() == 2
        assert session.next_match() == 2
        assert session.previous_match() == 1
        assert session.previous_match() == 1

    def test_matches_follow_filter(self, session, clock, tmp_path):
        session.load_file(create_workbook(tmp_path / "a.xlsx"))
        session.type_query("pump")
        clock.advance(300)
        session.next_match()

        session.set_filter(FilterMode.GREEN)
        assert session.matches() == [2]
        assert session.current_match == 2

    def test_load_clears_query(self, session, clock, tmp_path):
        session.load_file(create_workbook(tmp_path / "a.xlsx"))
        session.type_query("pump")
        clock.advance(300)
        assert session.matches() == [1, 2]

        session.load_file(create_workbook(tmp_path / "b.xlsx"))
        assert session.query == ""
        assert session.current_match is None


class TestSessionExport:

    def test_export_leaves_document_untouched(self, session, tmp_path):
        document = session.load_file(create_workbook(tmp_path / "a.xlsx"))
        document.toggle_cell_color(3, 1)
        document.toggle_cell_color(3, 1)
        before = dict(document.annotations.highlights)

        result = session.export()

        assert result.file_name == "edited_a.xlsx"
        assert result.sheet_titles == ["Main", "Flagged", "Group summary"]
        assert document.annotations.highlights == before

        wb = load_workbook(BytesIO(result.content))
        assert wb["Flagged"]["A2"].value == "Revision group A"
        assert wb["Flagged"]["B3"].value == "Valve"
        assert [c.value for c in wb["Group summary"][2]] == ["Revision group A", "3", 1]
