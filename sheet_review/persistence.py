"""
Snapshot persistence for review documents.

A snapshot holds everything needed to resume a review: headers, rows,
highlights and notes. Snapshots are keyed by (user, file name) and saving
always writes the whole current state; the last write wins.
"""

import json
import logging
import os
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union
from urllib.parse import quote, unquote

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .annotations import AnnotationStore, format_cell_key, parse_cell_keys
from .colors import HighlightColor
from .config import ReviewConfig
from .document import ReviewDocument
from .exceptions import PersistenceError
from .views import Debouncer

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Snapshot(BaseModel):
    """
    Persisted review state.

    Cell coordinates travel as ``"row-col"`` strings on the wire and are
    converted to cell keys when the snapshot becomes a document again.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: str
    file_name: str
    headers: List[str] = Field(default_factory=list)
    rows: List[List[Any]] = Field(default_factory=list, alias='sheet_data')
    highlights: Dict[str, HighlightColor] = Field(default_factory=dict, alias='highlighted_cells')
    notes: Dict[str, str] = Field(default_factory=dict)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator('highlights', mode='before')
    @classmethod
    def _drop_unknown_colors(cls, value):
        if not isinstance(value, dict):
            return value
        kept = {}
        for key, color in value.items():
            try:
                kept[key] = HighlightColor(color)
            except (TypeError, ValueError):
                logger.debug("Dropping highlight %r with unknown color %r", key, color)
        return kept

    @field_validator('notes', mode='before')
    @classmethod
    def _drop_non_text_notes(cls, value):
        if not isinstance(value, dict):
            return value
        kept = {}
        for key, text in value.items():
            if isinstance(text, str):
                kept[key] = text
            else:
                logger.debug("Dropping note %r with non-text value %r", key, text)
        return kept

    @classmethod
    def from_document(cls, document: ReviewDocument, user_id: str) -> "Snapshot":
        annotations = document.annotations
        return cls(
            user_id=user_id,
            file_name=document.file_name,
            headers=list(document.headers),
            rows=[list(row) for row in document.rows],
            highlights={format_cell_key(key): color for key, color in annotations.highlights.items()},
            notes={format_cell_key(key): text for key, text in annotations.notes.items()},
        )

    def to_document(self, config: Optional[ReviewConfig] = None) -> ReviewDocument:
        """Rebuild a document; widths are re-estimated and stale keys dropped."""
        highlight_keys = parse_cell_keys(self.highlights)
        note_keys = parse_cell_keys(self.notes)
        annotations = AnnotationStore(
            {key: self.highlights[raw] for raw, key in highlight_keys.items()},
            {key: self.notes[raw] for raw, key in note_keys.items()},
        )
        return ReviewDocument(self.file_name, self.headers, self.rows, annotations=annotations, config=config)

    def payload(self) -> str:
        """Serialized content without the timestamp, for change detection."""
        return self.model_dump_json(by_alias=True, exclude={'updated_at'})


class SnapshotStore(ABC):
    """Key-value store of snapshots keyed by (user id, file name)."""

    @abstractmethod
    def save(self, snapshot: Snapshot) -> Snapshot:
        """Write ``snapshot``, replacing any previous one for the same key."""

    @abstractmethod
    def load(self, user_id: str, file_name: str) -> Optional[Snapshot]:
        """Return the stored snapshot or None."""

    @abstractmethod
    def list_files(self, user_id: str) -> List[Snapshot]:
        """Snapshots of ``user_id``, most recently updated first."""

    @abstractmethod
    def delete(self, user_id: str, file_name: str) -> bool:
        """Remove a snapshot; False when there was none."""


class JsonSnapshotStore(SnapshotStore):
    """Snapshots as JSON files under ``directory/<user>/<file name>.json``."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def _path(self, user_id: str, file_name: str) -> Path:
        return self.directory / quote(user_id, safe='') / f"{quote(file_name, safe='')}.json"

    def save(self, snapshot: Snapshot) -> Snapshot:
        snapshot = snapshot.model_copy(update={'updated_at': _utcnow()})
        path = self._path(snapshot.user_id, snapshot.file_name)
        tmp_path = path.with_suffix('.json.tmp')
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(snapshot.model_dump_json(by_alias=True), encoding='utf-8')
            os.replace(tmp_path, path)
        except OSError as e:
            raise PersistenceError(f"Unable to save {snapshot.file_name}: {e}") from e
        logger.info("Saved snapshot %s for %s", snapshot.file_name, snapshot.user_id)
        return snapshot

    def _read(self, path: Path) -> Snapshot:
        try:
            return Snapshot.model_validate(json.loads(path.read_text(encoding='utf-8')))
        except (OSError, ValueError, ValidationError) as e:
            raise PersistenceError(f"Unable to load snapshot {path.name}: {e}") from e

    def load(self, user_id: str, file_name: str) -> Optional[Snapshot]:
        path = self._path(user_id, file_name)
        if not path.exists():
            return None
        return self._read(path)

    def list_files(self, user_id: str) -> List[Snapshot]:
        user_dir = self.directory / quote(user_id, safe='')
        if not user_dir.is_dir():
            return []
        snapshots = [self._read(path) for path in user_dir.glob('*.json')]
        return sorted(snapshots, key=lambda s: s.updated_at, reverse=True)

    def delete(self, user_id: str, file_name: str) -> bool:
        path = self._path(user_id, file_name)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise PersistenceError(f"Unable to delete {unquote(path.stem)}: {e}") from e
        return True


class AutoSaver:
    """
    Debounced, whole-snapshot saving of the current document.

    Failures never interrupt editing: they are recorded on ``error`` and the
    next save attempt writes the full current state again.
    """

    def __init__(
        self,
        store: SnapshotStore,
        user_id: str,
        config: Optional[ReviewConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.user_id = user_id
        self.config = config or ReviewConfig()
        self._pending = Debouncer(self.config.autosave_delay_ms, None, clock)
        self._last_payload: Optional[str] = None
        self.saving = False
        self.error: Optional[str] = None

    def touch(self, document: Optional[ReviewDocument]) -> None:
        """Note that ``document`` changed; it is saved once the delay passes."""
        self._pending.push(document)

    def poll(self) -> bool:
        """Save if the delay has elapsed since the last change."""
        return self.save_now(self._pending.settled())

    def flush(self) -> bool:
        """Save the pending document immediately."""
        return self.save_now(self._pending.flush())

    def save_now(self, document: Optional[ReviewDocument]) -> bool:
        """
        Persist ``document``.

        Returns:
            True when a snapshot was written, False when there was nothing new
            to save or the store failed
        """
        if document is None:
            return False

        snapshot = Snapshot.from_document(document, self.user_id)
        payload = snapshot.payload()
        if payload == self._last_payload:
            return False

        self.saving = True
        try:
            self.store.save(snapshot)
        except PersistenceError as e:
            self.error = str(e)
            logger.warning("Auto-save of %s failed: %s", document.file_name, e)
            return False
        finally:
            self.saving = False

        self._last_payload = payload
        self.error = None
        return True
