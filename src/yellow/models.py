"""Memo model and the pure lifecycle operations on a memo collection."""

import time
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

TITLE_MAX_LENGTH = 50
EMPTY_TITLE = "(empty memo)"
DESCRIPTION_FORMAT = "%Y-%m-%d %H:%M:%S"

# Stand-in for timestamps an older file never recorded
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def now() -> datetime:
    """Current local time, timezone-aware."""
    return datetime.now().astimezone()


def generate_id() -> str:
    return str(time.time_ns())


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


class Memo(BaseModel):
    """A single free-text note."""

    id: str
    content: str = ""
    created_at: datetime = EPOCH
    updated_at: datetime = EPOCH
    deleted_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def fill_missing_timestamps(cls, data: Any) -> Any:
        """Either timestamp stands in for the other when only one was stored."""
        if not isinstance(data, dict):
            return data
        created, updated = data.get("created_at"), data.get("updated_at")
        if created is None and updated is not None:
            data = {**data, "created_at": updated}
        elif updated is None and created is not None:
            data = {**data, "updated_at": created}
        return data

    @field_validator("created_at", "updated_at", "deleted_at")
    @classmethod
    def assume_local_time(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.astimezone()
        return value

    @property
    def title(self) -> str:
        """First line of the content, truncated for the list view."""
        if not self.content:
            return EMPTY_TITLE
        first_line = self.content.split("\n", 1)[0]
        return truncate(first_line, TITLE_MAX_LENGTH)

    @property
    def description(self) -> str:
        return self.updated_at.strftime(DESCRIPTION_FORMAT)

    @property
    def filter_value(self) -> str:
        return self.content


def create_draft() -> Memo:
    """A new, empty memo that is not yet part of any collection."""
    timestamp = now()
    return Memo(id=generate_id(), created_at=timestamp, updated_at=timestamp)


def sort_newest_first(memos: list[Memo]) -> None:
    memos.sort(key=lambda m: m.updated_at, reverse=True)


class MemoData(BaseModel):
    """The active and soft-deleted memos, kept as two disjoint lists."""

    active: list[Memo] = Field(default_factory=list)
    deleted: list[Memo] = Field(default_factory=list)

    @field_validator("active", "deleted", mode="before")
    @classmethod
    def null_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    def get(self, memo_id: str) -> Optional[Memo]:
        for memo in self.active:
            if memo.id == memo_id:
                return memo
        return None

    def commit_new(self, draft: Memo, content: str) -> bool:
        """Add a draft to the active list. Blank content discards it.

        Returns:
            True if the memo was added
        """
        if not content.strip():
            return False
        draft.content = content
        draft.updated_at = now()
        self.active.append(draft)
        sort_newest_first(self.active)
        return True

    def commit_edit(self, memo_id: str, content: str) -> bool:
        memo = self.get(memo_id)
        if memo is None:
            return False
        memo.content = content
        memo.updated_at = now()
        sort_newest_first(self.active)
        return True

    def delete(self, memo_id: str) -> bool:
        """Soft-delete: move the memo to the deleted list with a timestamp."""
        for i, memo in enumerate(self.active):
            if memo.id == memo_id:
                memo.deleted_at = now()
                self.deleted.append(memo)
                del self.active[i]
                sort_newest_first(self.active)
                return True
        return False

    def purge_expired(self, cutoff: datetime) -> int:
        """Drop deleted memos whose deletion is older than cutoff.

        Entries without a deletion timestamp cannot be dated and are
        dropped too.

        Returns:
            Number of memos purged
        """
        kept = [m for m in self.deleted if m.deleted_at is not None and m.deleted_at >= cutoff]
        purged = len(self.deleted) - len(kept)
        self.deleted[:] = kept
        return purged

    def snapshot(self) -> "MemoData":
        """Detached copy, safe to hand to a background writer."""
        return self.model_copy(deep=True)
