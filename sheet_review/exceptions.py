"""
Exceptions raised by sheet-review.
"""


class SheetReviewError(Exception):
    """Base class for sheet-review failures."""


class SheetReadError(SheetReviewError, ValueError):
    """The input workbook could not be read or has no worksheet."""


class ExportError(SheetReviewError):
    """The annotated workbook could not be serialized."""


class PersistenceError(SheetReviewError):
    """A snapshot could not be saved to or loaded from the store."""
