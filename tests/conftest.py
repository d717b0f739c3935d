"""Test fixtures for yellow."""

import os
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from yellow.models import Memo, MemoData

BASE_TIME = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_memo(memo_id: str, content: str = "", minutes: int = 0, deleted_days: float | None = None) -> Memo:
    """Memo updated ``minutes`` after BASE_TIME, optionally deleted ``deleted_days`` ago."""
    timestamp = BASE_TIME + timedelta(minutes=minutes)
    deleted_at = None
    if deleted_days is not None:
        deleted_at = datetime.now(timezone.utc) - timedelta(days=deleted_days)
    return Memo(
        id=memo_id,
        content=content,
        created_at=timestamp,
        updated_at=timestamp,
        deleted_at=deleted_at,
    )


@pytest.fixture
def temp_file(tmp_path: Path) -> Path:
    """Point YELLOW_FILE at a temporary memo file."""
    data_path = tmp_path / "memos.json"
    os.environ["YELLOW_FILE"] = str(data_path)
    yield data_path
    if "YELLOW_FILE" in os.environ:
        del os.environ["YELLOW_FILE"]


@pytest.fixture
def temp_file_path(tmp_path: Path) -> str:
    """Return just the path string for --file flag testing."""
    return str(tmp_path / "memos.json")


@pytest.fixture
def seeded_file(temp_file_path: str) -> str:
    """Memo file with three active memos and one recently deleted one."""
    data = MemoData(
        active=[
            make_memo("1", "Buy milk\nand eggs", minutes=1),
            make_memo("2", "foo bar meeting notes", minutes=2),
            make_memo("3", "Call the foo vendor", minutes=3),
        ],
        deleted=[make_memo("4", "Old draft", deleted_days=2)],
    )
    Path(temp_file_path).write_text(data.model_dump_json(indent=2))
    return temp_file_path
