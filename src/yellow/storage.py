"""JSON file storage for memos: load, legacy migration, save and retention."""

import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from .config import RETENTION, ensure_data_dir
from .models import Memo, MemoData, now

logger = logging.getLogger(__name__)

# Older versions wrote a bare list of memos
LegacyDocument = TypeAdapter(list[Memo])


class StorageError(Exception):
    """Base exception for memo file errors."""
    pass


class MemoFormatError(StorageError):
    """Memo file is neither the current nor the legacy format."""
    pass


def parse_document(raw: str | bytes) -> MemoData:
    """Parse the memo file contents.

    The current format is an object with "active" and "deleted" lists. A
    legacy bare list is read as all active.

    Raises:
        MemoFormatError: if neither format matches
    """
    try:
        return MemoData.model_validate_json(raw)
    except ValidationError as current_error:
        try:
            return MemoData(active=LegacyDocument.validate_json(raw))
        except ValidationError:
            raise MemoFormatError(f"Cannot parse memo file: {current_error}") from current_error


class Storage:
    """Reads and writes the full memo collection to a single JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self, current_time: datetime | None = None) -> MemoData:
        """Load all memos, purging deleted ones past the retention window.

        A missing file is an empty collection. When memos were purged the
        cleaned collection is written back before returning; a failed write
        is logged and the caller still gets the cleaned view.

        Raises:
            MemoFormatError: if the file cannot be parsed
            StorageError: if the file cannot be read
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return MemoData()
        except UnicodeDecodeError as e:
            raise MemoFormatError(f"Cannot parse memo file: not UTF-8 text ({e})") from e
        except OSError as e:
            raise StorageError(f"Cannot read {self.path}: {e}") from e

        data = parse_document(raw)

        cutoff = (current_time or now()) - RETENTION
        purged = data.purge_expired(cutoff)
        if purged:
            logger.info("Purged %d expired deleted memo(s) from %s", purged, self.path)
            self._save_cleaned(data)

        return data

    def save(self, data: MemoData) -> None:
        """Write the whole collection, replacing the file in one step.

        Raises:
            StorageError: if the file cannot be written
        """
        payload = data.model_dump_json(indent=2, exclude_none=True)
        tmp_name = None
        try:
            ensure_data_dir(self.path)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Cannot write {self.path}: {e}") from e

    def _save_cleaned(self, data: MemoData) -> None:
        try:
            self.save(data)
        except StorageError as e:
            logger.warning("Failed to save cleaned deleted memos: %s", e)
