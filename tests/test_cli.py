"""
Tests for the sheet-review command line.
"""

import pytest
from click.testing import CliRunner
from openpyxl import Workbook, load_workbook
from openpyxl.styles import PatternFill

from sheet_review import CellKey, HighlightColor, SheetReader
from sheet_review.cli import main


def create_test_excel(path):
    wb = Workbook()
    ws = wb.active
    ws.append(['No', 'Name', 'Revision group'])
    ws.append(['Revision group A', None, None])
    ws.append([1, 'Pump', None])
    ws.append([2, 'Pump seal', None])
    ws['B4'].fill = PatternFill(start_color='00B050', end_color='00B050', fill_type='solid')
    wb.save(path)
    return path


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def workbook(tmp_path):
    return create_test_excel(tmp_path / "review.xlsx")


class TestExportCommand:

    def test_export_beside_input(self, runner, workbook):
        result = runner.invoke(main, ['export', str(workbook)])

        assert result.exit_code == 0
        target = workbook.with_name("edited_review.xlsx")
        assert f"Saved {target}" in result.output
        assert load_workbook(target).sheetnames == ["Main", "Group summary"]

    def test_export_to_output(self, runner, workbook, tmp_path):
        output = tmp_path / "out.xlsx"
        result = runner.invoke(main, ['export', str(workbook), '-o', str(output)])

        assert result.exit_code == 0
        document = SheetReader().read(output)
        assert document.annotations.highlights == {CellKey(2, 1): HighlightColor.GREEN}

    def test_unreadable_input(self, runner, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        result = runner.invoke(main, ['export', str(path)])

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_missing_input(self, runner, tmp_path):
        result = runner.invoke(main, ['export', str(tmp_path / "missing.xlsx")])
        assert result.exit_code == 2


class TestMarkCommand:

    def test_toggle_twice_flags_cell(self, runner, workbook, tmp_path):
        output = tmp_path / "out.xlsx"
        result = runner.invoke(main, ['mark', str(workbook), '--cell', 'B3', '-c', 'b3', '-o', str(output)])

        assert result.exit_code == 0
        assert "B3: green" in result.output
        assert "B3: red" in result.output

        document = SheetReader().read(output)
        assert document.annotations.highlights[CellKey(1, 1)] == HighlightColor.RED
        # The group header is flagged along with its item
        assert document.annotations.highlights[CellKey(0, 2)] == HighlightColor.RED
        assert "Flagged" in load_workbook(output).sheetnames

    def test_header_row_rejected(self, runner, workbook):
        result = runner.invoke(main, ['mark', str(workbook), '--cell', 'B1'])
        assert result.exit_code == 2
        assert "header row" in result.output

    def test_cell_outside_sheet(self, runner, workbook):
        result = runner.invoke(main, ['mark', str(workbook), '--cell', 'Z40'])
        assert result.exit_code == 1
        assert "Error:" in result.output


class TestNoteCommand:

    def test_set_and_clear_note(self, runner, workbook, tmp_path):
        noted = tmp_path / "noted.xlsx"
        result = runner.invoke(main, ['note', str(workbook), 'C3', '  check supplier  ', '-o', str(noted)])
        assert result.exit_code == 0
        assert SheetReader().read(noted).annotations.notes == {CellKey(1, 2): "check supplier"}
        assert "Commented" in load_workbook(noted).sheetnames

        cleared = tmp_path / "cleared.xlsx"
        result = runner.invoke(main, ['note', str(noted), 'C3', '', '-o', str(cleared)])
        assert result.exit_code == 0
        assert SheetReader().read(cleared).annotations.notes == {}


class TestReportCommands:

    def test_summary_csv(self, runner, workbook):
        result = runner.invoke(main, ['summary', str(workbook), '--format', 'csv'])

        assert result.exit_code == 0
        lines = result.output.strip().splitlines()
        assert lines[0] == "Revision group,Item count,Red count"
        assert lines[1] == "Revision group A,2,0"

    def test_summary_without_groups(self, runner, tmp_path):
        wb = Workbook()
        wb.active.append(['No', 'Name'])
        wb.active.append([1, 'Pump'])
        path = tmp_path / "plain.xlsx"
        wb.save(path)

        result = runner.invoke(main, ['summary', str(path)])
        assert result.exit_code == 0
        assert "No group headers found" in result.output

    def test_rows_filter(self, runner, workbook):
        result = runner.invoke(main, ['rows', str(workbook), '--filter', 'green'])

        assert result.exit_code == 0
        assert result.output.splitlines() == ["row,No,Name,Revision group", "2,2,Pump seal,"]

    def test_rows_search(self, runner, workbook):
        result = runner.invoke(main, ['rows', str(workbook), '--search', 'PUMP', '--format', 'markdown'])

        assert result.exit_code == 0
        assert "Pump seal" in result.output
        assert "Revision group A |" not in result.output
        assert len(result.output.strip().splitlines()) == 4

    def test_group_prefix_option(self, runner, tmp_path):
        wb = Workbook()
        wb.active.append(['No', 'Section'])
        wb.active.append(['Section 1', None])
        wb.active.append([1, 'Pump'])
        path = tmp_path / "sections.xlsx"
        wb.save(path)

        result = runner.invoke(main, ['--group-prefix', 'Section', 'summary', str(path), '--format', 'csv'])
        assert result.exit_code == 0
        assert result.output.strip().splitlines()[1] == "Section 1,1,0"
