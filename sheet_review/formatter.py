"""
Tabular rendering of review rows and summaries.
"""

from typing import List, Literal, Sequence

import pandas as pd

from .values import CellValue, display_text
from .views import IndexedRow

OutputFormat = Literal["csv", "html", "markdown"]

ROW_COLUMN = "row"


class RowFormatter:
    """Render rows through a DataFrame in csv, html or markdown."""

    @staticmethod
    def rows_frame(headers: Sequence[str], rows: Sequence[IndexedRow]) -> pd.DataFrame:
        """
        Build a frame of ``rows`` keyed by their original row index.

        Blank or duplicate headers are made unique so every column survives.
        """
        columns = RowFormatter._unique_columns(headers)
        data = [[item.index] + [display_text(cell) for cell in item.row] for item in rows]
        return pd.DataFrame(data, columns=[ROW_COLUMN] + columns)

    @staticmethod
    def summary_frame(rows: Sequence[Sequence[CellValue]]) -> pd.DataFrame:
        """Frame of a summary sheet whose first row is its header."""
        if not rows:
            return pd.DataFrame()
        header, body = rows[0], rows[1:]
        return pd.DataFrame([list(row) for row in body], columns=[str(h) for h in header])

    @staticmethod
    def render(frame: pd.DataFrame, output_format: OutputFormat = "csv") -> str:
        if output_format == "csv":
            return frame.to_csv(index=False)
        elif output_format == "html":
            return frame.to_html(index=False)
        elif output_format == "markdown":
            return frame.to_markdown(index=False)
        raise ValueError(f"Unsupported output format: {output_format}")

    @staticmethod
    def _unique_columns(headers: Sequence[str]) -> List[str]:
        seen = {ROW_COLUMN: 1}
        columns = []
        for idx, header in enumerate(headers):
            name = (header or '').strip() or f"column_{idx + 1}"
            if name in seen:
                seen[name] += 1
                name = f"{name}_{seen[name]}"
            else:
                seen[name] = 1
            columns.append(name)
        return columns
