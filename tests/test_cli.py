"""CLI integration tests for yellow.

These tests verify actual behavior, not just "something happened".
"""

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

from typer.testing import CliRunner

from conftest import make_memo
from yellow.cli import app
from yellow.models import MemoData

runner = CliRunner()


class TestList:
    """Tests for the list command."""

    def test_empty_file_shows_message(self, temp_file_path: str) -> None:
        result = runner.invoke(app, ["list", "--file", temp_file_path])
        assert result.exit_code == 0
        assert "No memos found." in result.stdout

    def test_json_lists_active_newest_first(self, seeded_file: str) -> None:
        result = runner.invoke(app, ["list", "--json", "--file", seeded_file])
        assert result.exit_code == 0

        memos = json.loads(result.stdout)
        assert [m["id"] for m in memos] == ["3", "2", "1"]
        assert memos[2]["title"] == "Buy milk"
        assert memos[2]["content"] == "Buy milk\nand eggs"

    def test_deleted_flag_lists_trash(self, seeded_file: str) -> None:
        result = runner.invoke(app, ["list", "--deleted", "--json", "--file", seeded_file])
        memos = json.loads(result.stdout)
        assert [m["id"] for m in memos] == ["4"]
        assert memos[0]["deleted_at"]

    def test_quiet_prints_ids(self, seeded_file: str) -> None:
        result = runner.invoke(app, ["list", "-q", "-n", "2", "--file", seeded_file])
        assert result.stdout.split() == ["3", "2"]

    def test_table_output_shows_titles(self, seeded_file: str) -> None:
        result = runner.invoke(app, ["list", "--file", seeded_file])
        assert result.exit_code == 0
        assert "Call the foo vendor" in result.stdout

    def test_env_var_selects_file(self, temp_file: Path) -> None:
        temp_file.write_text(MemoData(active=[make_memo("9", "from env")]).model_dump_json())
        result = runner.invoke(app, ["list", "--quiet"])
        assert result.stdout.split() == ["9"]

    def test_corrupt_file_exits_with_error(self, temp_file_path: str) -> None:
        Path(temp_file_path).write_text("{not json")
        result = runner.invoke(app, ["list", "--file", temp_file_path])
        assert result.exit_code == 1
        assert "Cannot parse memo file" in result.output

    def test_legacy_file_is_listed(self, temp_file_path: str) -> None:
        Path(temp_file_path).write_text(json.dumps([{
            "id": "1",
            "content": "x",
            "created_at": "2024-01-01T00:00:00Z",
            "updated_at": "2024-01-01T00:00:00Z",
        }]))
        result = runner.invoke(app, ["list", "--quiet", "--file", temp_file_path])
        assert result.stdout.split() == ["1"]

    def test_non_utf8_file_exits_with_error(self, temp_file_path: str) -> None:
        Path(temp_file_path).write_bytes(b"\xff\xfe\x00garbage")
        result = runner.invoke(app, ["list", "--file", temp_file_path])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_root_file_option_applies_to_command(self, seeded_file: str, monkeypatch) -> None:
        monkeypatch.delenv("YELLOW_FILE", raising=False)
        result = runner.invoke(app, ["--file", seeded_file, "list", "--quiet"])
        assert result.exit_code == 0
        assert result.stdout.split() == ["3", "2", "1"]

    def test_command_file_option_beats_root(self, seeded_file: str, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.delenv("YELLOW_FILE", raising=False)
        other = tmp_path / "other.json"
        other.write_text(MemoData(active=[make_memo("9", "other")]).model_dump_json())
        result = runner.invoke(app, ["--file", seeded_file, "list", "-q", "--file", str(other)])
        assert result.stdout.split() == ["9"]

    def test_legacy_file_without_timestamps_is_listed(self, temp_file_path: str) -> None:
        Path(temp_file_path).write_text('[{"id": "1", "content": "x"}]')
        result = runner.invoke(app, ["list", "--quiet", "--file", temp_file_path])
        assert result.exit_code == 0
        assert result.stdout.split() == ["1"]


class TestStats:

    def test_stats_counts_correct(self, seeded_file: str) -> None:
        result = runner.invoke(app, ["stats", "--json", "--file", seeded_file])
        assert result.exit_code == 0

        data = json.loads(result.stdout)
        assert data["active_count"] == 3
        assert data["deleted_count"] == 1
        assert data["file_size_bytes"] > 0
        next_purge = datetime.fromisoformat(data["next_purge"])
        expected = datetime.now(timezone.utc) + timedelta(days=5)
        assert abs(next_purge - expected) < timedelta(minutes=1)

    def test_stats_on_missing_file(self, temp_file_path: str) -> None:
        result = runner.invoke(app, ["stats", "--file", temp_file_path])
        assert result.exit_code == 0
        assert "Memos: 0" in result.stdout
        assert "Next purge" not in result.stdout


class TestExport:

    def test_export_copies_collection(self, seeded_file: str, tmp_path: Path) -> None:
        target = tmp_path / "backup" / "copy.json"
        result = runner.invoke(app, ["export", str(target), "--file", seeded_file])
        assert result.exit_code == 0
        assert "Exported 3 memos (1 in trash)" in result.stdout

        copied = json.loads(target.read_text())
        assert sorted(m["id"] for m in copied["active"]) == ["1", "2", "3"]
        assert [m["id"] for m in copied["deleted"]] == ["4"]

    def test_export_drops_expired_trash(self, temp_file_path: str, tmp_path: Path) -> None:
        data = MemoData(deleted=[make_memo("old", deleted_days=10)])
        Path(temp_file_path).write_text(data.model_dump_json())
        target = tmp_path / "copy.json"
        runner.invoke(app, ["export", str(target), "--file", temp_file_path])
        assert json.loads(target.read_text())["deleted"] == []


class TestLaunch:

    def test_no_command_runs_tui_with_resolved_file(self, temp_file_path: str, tmp_path: Path, monkeypatch) -> None:
        launched = []
        monkeypatch.setattr("yellow.tui.run", lambda yellow_app: launched.append(yellow_app))
        log_path = tmp_path / "yellow.log"

        result = runner.invoke(app, ["--file", temp_file_path, "--log", str(log_path)])

        assert result.exit_code == 0
        assert len(launched) == 1
        assert launched[0].storage.path == Path(temp_file_path).resolve()
        assert "Starting with" in log_path.read_text()

    def test_tui_failure_exits_nonzero(self, temp_file_path: str, tmp_path: Path, monkeypatch) -> None:
        def broken(yellow_app):
            raise RuntimeError("no terminal")

        monkeypatch.setattr("yellow.tui.run", broken)
        result = runner.invoke(app, ["--file", temp_file_path, "--log", str(tmp_path / "y.log")])
        assert result.exit_code == 1
        assert "no terminal" in result.output

    def test_help_lists_commands(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for name in ("list", "stats", "export"):
            assert name in result.stdout
