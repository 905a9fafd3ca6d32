"""
Review session: the currently loaded document and its view state.

Loading a file or a snapshot and resetting are the only operations that
replace the document, and each replaces it wholesale. A load that fails
leaves the previous document in place.
"""

import logging
import time
from typing import Callable, List, Optional

from .config import ReviewConfig
from .document import ReviewDocument
from .exporter import ExportResult, export_document
from .persistence import Snapshot
from .reader import SheetReader, Source
from .views import Debouncer, FilterMode, IndexedRow, MatchCursor

logger = logging.getLogger(__name__)


class ReviewSession:
    """Owns at most one document plus filter, search and match navigation state."""

    def __init__(self, config: Optional[ReviewConfig] = None, clock: Callable[[], float] = time.monotonic):
        self.config = config or ReviewConfig()
        self.reader = SheetReader(self.config)
        self.document: Optional[ReviewDocument] = None
        self.filter_mode = FilterMode.ALL
        self._query: Debouncer[str] = Debouncer(self.config.search_debounce_ms, '', clock)
        self._cursor = MatchCursor()

    def load_file(self, source: Source, file_name: Optional[str] = None) -> ReviewDocument:
        document = self.reader.read(source, file_name)
        self._install(document)
        return document

    def load_snapshot(self, snapshot: Snapshot) -> ReviewDocument:
        document = snapshot.to_document(self.config)
        self._install(document)
        return document

    def reset(self) -> None:
        self._install(None)

    def _install(self, document: Optional[ReviewDocument]) -> None:
        self.document = document
        self.filter_mode = FilterMode.ALL
        self._query.reset('')
        self._cursor = MatchCursor()
        if document is not None:
            logger.info("Opened %r", document)

    def require_document(self) -> ReviewDocument:
        if self.document is None:
            raise RuntimeError("No document is loaded")
        return self.document

    def set_filter(self, mode: FilterMode) -> None:
        self.filter_mode = FilterMode(mode)

    def visible_rows(self) -> List[IndexedRow]:
        return self.require_document().filtered_rows(self.filter_mode)

    def type_query(self, text: str) -> None:
        """Record raw search input; it applies once the debounce window passes."""
        self._query.push(text)

    @property
    def query(self) -> str:
        return self._query.settled()

    def matches(self) -> List[int]:
        """Original row indices matching the settled query among the visible rows."""
        return self._sync_cursor().matches

    def _sync_cursor(self) -> MatchCursor:
        document = self.require_document()
        matches = document.search(self.query, self.filter_mode)
        if matches != self._cursor.matches:
            self._cursor = MatchCursor(matches)
        return self._cursor

    @property
    def current_match(self) -> Optional[int]:
        return self._sync_cursor().current

    def next_match(self) -> Optional[int]:
        return self._sync_cursor().next()

    def previous_match(self) -> Optional[int]:
        return self._sync_cursor().previous()

    def export(self) -> ExportResult:
        return export_document(self.require_document(), self.config)

    def snapshot(self, user_id: str) -> Snapshot:
        return Snapshot.from_document(self.require_document(), user_id)
