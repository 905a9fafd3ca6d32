"""
Command-line interface for sheet-review.
"""

import logging
from functools import wraps
from pathlib import Path

import click
from openpyxl.utils.cell import coordinate_from_string, column_index_from_string

from .config import ReviewConfig
from .exceptions import SheetReviewError
from .exporter import ExportComposer, export_document
from .formatter import RowFormatter
from .reader import SheetReader
from .views import FilterMode

FORMATS = click.Choice(['csv', 'html', 'markdown'])


def parse_cell_reference(reference: str):
    """Turn an A1-style reference into a zero-based (data row, column) pair."""
    try:
        letters, sheet_row = coordinate_from_string(reference.strip().upper())
    except ValueError:
        raise click.BadParameter(f"'{reference}' is not a cell reference like B3")
    if sheet_row < 2:
        raise click.BadParameter(f"'{reference}' is in the header row")
    return sheet_row - 2, column_index_from_string(letters) - 1


def report_errors(command):
    """Print failures as ``Error: ...`` and abort, as every command does."""
    @wraps(command)
    def wrapper(*args, **kwargs):
        try:
            return command(*args, **kwargs)
        except (click.Abort, click.ClickException):
            raise
        except (FileNotFoundError, ValueError, IndexError, SheetReviewError) as e:
            click.echo(f"Error: {e}", err=True)
            raise click.Abort()
        except Exception as e:
            click.echo(f"Unexpected error: {e}", err=True)
            raise click.Abort()
    return wrapper


def _load(ctx, input_file):
    config = ctx.obj['config']
    return SheetReader(config).read(input_file)


def _write_export(ctx, document, input_file, output):
    result = export_document(document, ctx.obj['config'])
    target = Path(output) if output else Path(input_file).with_name(result.file_name)
    target.write_bytes(result.content)
    click.echo(f"Saved {target} ({', '.join(result.sheet_titles)})")


@click.group()
@click.option('--group-prefix', default=None, help='Label prefix marking group header rows (default: "Revision group")')
@click.option('-v', '--verbose', is_flag=True, help='Log loading and export details')
@click.pass_context
def main(ctx, group_prefix, verbose):
    """
    Review spreadsheets: mark cells green or red, attach notes and export
    an annotated workbook with flagged, commented and group summary sheets.

    Examples:

        # Re-export a reviewed workbook with its derived sheets
        sheet-review export review.xlsx

        # Flag two cells and save the result
        sheet-review mark review.xlsx --cell B3 --cell B3

        # List red rows containing "pump"
        sheet-review rows review.xlsx --filter red --search pump
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s'
    )
    config = ReviewConfig()
    if group_prefix:
        config = config.model_copy(update={'group_prefix': group_prefix})
    ctx.obj = {'config': config}


@main.command()
@click.argument('input_file', type=click.Path(exists=True))
@click.option('-o', '--output', type=click.Path(), help='Output file (default: edited_<name> beside the input)')
@click.pass_context
@report_errors
def export(ctx, input_file, output):
    """Re-export INPUT_FILE with its highlights, notes and derived sheets."""
    document = _load(ctx, input_file)
    _write_export(ctx, document, input_file, output)


@main.command()
@click.argument('input_file', type=click.Path(exists=True))
@click.option('--format', 'output_format', type=FORMATS, default='markdown', help='Output format (default: markdown)')
@click.pass_context
@report_errors
def summary(ctx, input_file, output_format):
    """Print item and red-row counts per group."""
    document = _load(ctx, input_file)
    if not len(document.group_index):
        click.echo("No group headers found", err=True)
        return
    sheet = ExportComposer(ctx.obj['config']).summary_sheet(document)
    click.echo(RowFormatter.render(RowFormatter.summary_frame(sheet.rows), output_format))


@main.command()
@click.argument('input_file', type=click.Path(exists=True))
@click.option('--filter', 'filter_mode', type=click.Choice([m.value for m in FilterMode]), default='all',
              help='Keep rows by highlight color (default: all)')
@click.option('--search', 'query', default=None, help='Keep rows with a cell containing this text')
@click.option('--format', 'output_format', type=FORMATS, default='csv', help='Output format (default: csv)')
@click.pass_context
@report_errors
def rows(ctx, input_file, filter_mode, query, output_format):
    """Print rows selected by color and search text."""
    document = _load(ctx, input_file)
    selected = document.filtered_rows(FilterMode(filter_mode))
    if query is not None:
        matches = set(document.search(query, FilterMode(filter_mode)))
        selected = [item for item in selected if item.index in matches]
    frame = RowFormatter.rows_frame(document.headers, selected)
    click.echo(RowFormatter.render(frame, output_format), nl=False)


@main.command()
@click.argument('input_file', type=click.Path(exists=True))
@click.option('-c', '--cell', 'cells', multiple=True, required=True,
              help='Cell to toggle (none -> green -> red -> none), e.g. B3; repeatable')
@click.option('-o', '--output', type=click.Path(), help='Output file (default: edited_<name> beside the input)')
@click.pass_context
@report_errors
def mark(ctx, input_file, cells, output):
    """Toggle cell highlights and export the result."""
    coordinates = [parse_cell_reference(cell) for cell in cells]
    document = _load(ctx, input_file)
    for reference, (row, col) in zip(cells, coordinates):
        color = document.toggle_cell_color(row, col)
        click.echo(f"{reference.upper()}: {color.value if color else 'none'}")
    _write_export(ctx, document, input_file, output)


@main.command()
@click.argument('input_file', type=click.Path(exists=True))
@click.argument('cell')
@click.argument('text')
@click.option('-o', '--output', type=click.Path(), help='Output file (default: edited_<name> beside the input)')
@click.pass_context
@report_errors
def note(ctx, input_file, cell, text, output):
    """Set the note of CELL to TEXT (blank TEXT removes it) and export the result."""
    row, col = parse_cell_reference(cell)
    document = _load(ctx, input_file)
    document.set_note(row, col, text)
    _write_export(ctx, document, input_file, output)


if __name__ == '__main__':
    main()
