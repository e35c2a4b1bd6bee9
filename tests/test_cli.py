"""
Tests for the command line interface.
"""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from lessonslots.cli.app import app


runner = CliRunner()


@pytest.fixture
def store_file(tmp_path: Path, monkeypatch) -> Path:
    """Empty working directory without config.yaml, plus a store path."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("LESSONSLOTS_CONFIG", raising=False)
    return tmp_path / "slots.json"


class TestCheckCommand:
    """Tests for `lessonslots check`."""

    def test_free_slot(self, store_file: Path):
        result = runner.invoke(app, ["check", "2024-11-26", "10:00", "--store", str(store_file), "--mock"])

        assert result.exit_code == 0
        assert "is available" in result.output

    def test_restricted_slot_exits_with_2(self, store_file: Path):
        result = runner.invoke(app, ["check", "2024-11-26", "08:00", "--store", str(store_file), "--mock"])

        assert result.exit_code == 2
        assert "Restricted: Morning Zone (07:30-09:30)" in result.output

    def test_holiday_from_bundled_data(self, store_file: Path):
        result = runner.invoke(app, ["check", "2024-12-25", "08:00", "--store", str(store_file), "--mock"])

        assert result.exit_code == 0

    def test_broken_store_exits_with_1(self, store_file: Path):
        store_file.write_text("not json", encoding="utf-8")

        result = runner.invoke(app, ["check", "2024-11-26", "10:00", "--store", str(store_file), "--mock"])

        assert result.exit_code == 1
        assert "Error" in result.output


class TestWeekCommands:
    """Tests for copy-week and list."""

    def test_copy_week_and_list(self, store_file: Path):
        store_file.write_text(json.dumps([
            {"id": "a", "date": "2024-11-26", "time": "10:00", "endTime": "10:45", "duration": 45,
             "status": "Open", "type": "Taxi 6", "location": "Mong Kok"},
        ]), encoding="utf-8")

        copied = runner.invoke(app, ["copy-week", "--week-start", "2024-11-25", "--store", str(store_file), "--mock"])
        listed = runner.invoke(app, ["list", "--week-start", "2024-12-02", "--store", str(store_file)])

        assert copied.exit_code == 0
        assert "Copied 1 slot(s) to next week." in copied.output
        assert listed.exit_code == 0
        assert "Draft" in listed.output

    def test_conflicting_week_flags(self, store_file: Path):
        result = runner.invoke(
            app, ["list", "--week-start", "2024-11-25", "--next-week", "--store", str(store_file)]
        )

        assert result.exit_code == 1

    def test_invalid_week_start(self, store_file: Path):
        result = runner.invoke(app, ["list", "--week-start", "25.11.2024", "--store", str(store_file)])

        assert result.exit_code == 1


class TestSlotCommands:
    """Tests for delete, available and suggest."""

    def test_delete(self, store_file: Path):
        store_file.write_text(json.dumps([
            {"id": "a", "date": "2024-11-26", "time": "10:00", "endTime": "10:45", "duration": 45, "status": "Open"},
            {"id": "b", "date": "2024-11-26", "time": "11:00", "endTime": "11:45", "duration": 45, "status": "Open"},
        ]), encoding="utf-8")

        result = runner.invoke(app, ["delete", "a", "--store", str(store_file)])
        missing = runner.invoke(app, ["delete", "a", "--store", str(store_file)])

        assert result.exit_code == 0
        assert [record["id"] for record in json.loads(store_file.read_text(encoding="utf-8"))] == ["b"]
        assert missing.exit_code == 1

    def test_available_hides_booked_and_past(self, store_file: Path):
        """Everything in 2024 lies in the past, so nothing is bookable."""
        store_file.write_text(json.dumps([
            {"id": "a", "date": "2024-11-26", "time": "10:00", "endTime": "10:45", "duration": 45, "status": "Open"},
        ]), encoding="utf-8")

        result = runner.invoke(
            app, ["available", "--week-start", "2024-11-25", "--store", str(store_file), "--mock"]
        )

        assert result.exit_code == 0
        assert "No bookable slots" in result.output

    def test_suggest_rejects_invalid_hour(self, store_file: Path):
        result = runner.invoke(app, ["suggest", "2024-11-26", "25", "--store", str(store_file), "--mock"])

        assert result.exit_code != 0
