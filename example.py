#!/usr/bin/env python3
"""
Example usage of the sheet-review library.
"""

from pathlib import Path

from openpyxl import Workbook

from sheet_review import FilterMode, JsonSnapshotStore, ReviewSession, RowFormatter


def build_sample(path: Path) -> None:
    """Write a small inventory with two revision groups."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Inventory"
    ws.append(['No', 'Item', 'Revision group', 'Qty'])
    ws.append(['Revision group A', None, None, None])
    ws.append([1, 'Pump P-101', None, 2])
    ws.append([2, 'Valve V-7', None, 4])
    ws.append(['Revision group B', None, None, None])
    ws.append([1, 'Motor M-3', None, 1])
    wb.save(path)


def main():
    """Demonstrate a review from load to export."""

    excel_file = Path("example_inventory.xlsx")
    if not excel_file.exists():
        build_sample(excel_file)

    # Example 1: Load and annotate
    print("=== Example 1: Annotate ===")
    session = ReviewSession()
    document = session.load_file(excel_file)
    print(document)

    document.toggle_cell_color(1, 1)            # green
    document.toggle_cell_color(2, 3)            # green
    document.toggle_cell_color(2, 3)            # red, flags group A as well
    document.set_note(2, 3, 'Stock card says 3')
    print(f"Highlights: {document.annotations.highlights}")
    print()

    # Example 2: Filter and search
    print("=== Example 2: Filter and Search ===")
    session.set_filter(FilterMode.RED)
    frame = RowFormatter.rows_frame(document.headers, session.visible_rows())
    print(RowFormatter.render(frame, "markdown"))
    print(f"Rows matching 'motor': {document.search('motor')}")
    print()

    # Example 3: Export the annotated workbook
    print("=== Example 3: Export ===")
    result = session.export()
    output = excel_file.with_name(result.file_name)
    output.write_bytes(result.content)
    print(f"Saved {output} with sheets {result.sheet_titles}")
    print()

    # Example 4: Save and resume
    print("=== Example 4: Snapshots ===")
    store = JsonSnapshotStore("snapshots")
    store.save(session.snapshot("demo"))
    restored = ReviewSession().load_snapshot(store.load("demo", document.file_name))
    print(f"Restored {restored}")


if __name__ == "__main__":
    main()
