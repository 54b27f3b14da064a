"""Tests for the command line interface."""

import json
from datetime import datetime, timedelta
from unittest.mock import patch
from zoneinfo import ZoneInfo

import pytest
from click.testing import CliRunner

from lazyflow.cli import main
from lazyflow.config import Config

TZ = ZoneInfo("America/Toronto")


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def config(tmp_path):
    config = Config(
        feedback_file=str(tmp_path / "feedback.json"),
        completion_patterns_file=str(tmp_path / "patterns.json"),
    )
    with patch("lazyflow.cli.load_config", return_value=config):
        yield config


class TestNext:
    def test_lists_occurrences(self, runner):
        result = runner.invoke(
            main, ["next", '{"frequency": "daily"}', "--from", "2025-01-15T09:00:00-05:00", "-n", "2"]
        )
        assert result.exit_code == 0
        assert result.output.splitlines() == ["Daily", "  Thu 2025-01-16 09:00", "  Fri 2025-01-17 09:00"]

    def test_series_end(self, runner):
        rule = '{"frequency": "weekly", "endDate": "2025-01-20T00:00:00-05:00"}'
        result = runner.invoke(main, ["next", rule, "--from", "2025-01-15T09:00:00-05:00"])
        assert "(series ended)" in result.output

    def test_invalid_rule(self, runner):
        result = runner.invoke(main, ["next", '{"frequency": "fortnightly"}'])
        assert result.exit_code == 1
        assert "Error: invalid rule" in result.output

    def test_rejected_rule(self, runner):
        result = runner.invoke(main, ["next", '{"frequency": "daily", "interval": 0}'])
        assert result.exit_code == 1


class TestDay:
    def test_intraday_times(self, runner):
        rule = '{"frequency": "hourly", "hourInterval": 4, "activeHoursStart": "08:00", "activeHoursEnd": "16:00"}'
        result = runner.invoke(main, ["day", rule, "--date", "2025-01-15"])
        assert result.exit_code == 0
        assert result.output.strip() == "08:00, 12:00, 16:00"

    def test_calendar_rule(self, runner):
        result = runner.invoke(main, ["day", '{"frequency": "daily"}', "--date", "2025-01-15"])
        assert result.output.strip() == "Daily does not repeat within a day."


class TestExport:
    def test_biweekly(self, runner):
        result = runner.invoke(main, ["export", '{"frequency": "biweekly", "daysOfWeek": [2]}'])
        assert result.output.strip() == "RRULE:FREQ=WEEKLY;INTERVAL=2;BYDAY=MO"

    def test_intraday(self, runner):
        result = runner.invoke(main, ["export", '{"frequency": "timesPerDay"}'])
        assert "cannot be exported" in result.output


@pytest.fixture
def snapshot(tmp_path):
    """Task and event files with one medium conflict a few hours from now."""
    start = (datetime.now(TZ) + timedelta(hours=3)).replace(second=0, microsecond=0)
    tasks = tmp_path / "tasks.json"
    events = tmp_path / "events.json"
    tasks.write_text(
        json.dumps(
            [
                {
                    "id": "1",
                    "title": "Write report",
                    "dueDate": start.date().isoformat(),
                    "dueTime": start.strftime("%H:%M"),
                    "estimatedMinutes": 60,
                }
            ]
        )
    )
    events.write_text(
        json.dumps(
            [
                {
                    "id": "e1",
                    "title": "Standup",
                    "start": (start + timedelta(minutes=30)).isoformat(),
                    "end": (start + timedelta(minutes=90)).isoformat(),
                }
            ]
        )
    )
    return tasks, events


class TestConflicts:
    def test_text_output(self, runner, snapshot):
        tasks, events = snapshot
        result = runner.invoke(main, ["conflicts", "--tasks", str(tasks), "--events", str(events)])
        assert result.exit_code == 0
        assert result.output.strip() == '[Medium] Write report: Conflicts with "Standup" (30m overlap)'

    def test_json_output(self, runner, snapshot):
        tasks, events = snapshot
        result = runner.invoke(main, ["conflicts", "--tasks", str(tasks), "--events", str(events), "--json"])
        data = json.loads(result.output)
        assert data[0]["severity"] == "medium"
        assert data[0]["overlap_minutes"] == 30
        assert data[0]["type"] == "calendarEvent"

    def test_offsetless_and_all_day_events(self, runner, snapshot):
        tasks, events = snapshot
        standup = json.loads(events.read_text())[0]
        start = datetime.fromisoformat(standup["start"])
        standup["start"] = start.replace(tzinfo=None).isoformat()
        standup["end"] = datetime.fromisoformat(standup["end"]).replace(tzinfo=None).isoformat()
        holiday = {
            "id": "h",
            "title": "Holiday",
            "start": start.date().isoformat(),
            "end": (start.date() + timedelta(days=1)).isoformat(),
            "isAllDay": True,
        }
        events.write_text(json.dumps([holiday, standup]))

        result = runner.invoke(main, ["conflicts", "--tasks", str(tasks), "--events", str(events)])

        assert result.exit_code == 0
        assert result.output.strip() == '[Medium] Write report: Conflicts with "Standup" (30m overlap)'

    def test_no_conflicts(self, runner, tmp_path):
        tasks = tmp_path / "tasks.json"
        events = tmp_path / "events.json"
        tasks.write_text("[]")
        events.write_text("[]")
        result = runner.invoke(main, ["conflicts", "--tasks", str(tasks), "--events", str(events)])
        assert result.output.strip() == "No conflicts."


class TestSignals:
    def test_cold_start(self, runner):
        result = runner.invoke(main, ["signals"])
        assert result.exit_code == 0
        assert "Not enough feedback yet (0 events)." in result.output

    def test_digest(self, runner, config):
        event = {
            "taskID": "t1",
            "action": "startedImmediately",
            "timestamp": "2025-01-15T09:00:00-05:00",
            "originalScore": 50,
            "taskCategory": 1,
            "hourOfDay": 9,
        }
        config.feedback_path().write_text(json.dumps({"events": [event] * 10}))

        result = runner.invoke(main, ["signals"])

        assert result.exit_code == 0
        assert "User behavior from 10 interactions:" in result.output


class TestReorder:
    def test_clamps(self, runner):
        result = runner.invoke(main, ["reorder", "5", "5", "4", "3", "2", "1", "--max-displacement", "2"])
        assert result.output.strip() == "3 4 1 2 5"

    def test_sanitizes(self, runner):
        result = runner.invoke(main, ["reorder", "4", "1", "1", "1", "1"])
        assert result.output.strip() == "1 2 3 4"

    def test_requires_items(self, runner):
        result = runner.invoke(main, ["reorder", "0"])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_negative_values_are_candidates(self, runner):
        result = runner.invoke(main, ["reorder", "5", "99", "-1", "0"])
        assert result.exit_code == 0
        assert result.output.strip() == "1 2 3 4 5"

    def test_rejects_negative_bound(self, runner):
        result = runner.invoke(main, ["reorder", "3", "3", "1", "2", "-m", "-1"])
        assert result.exit_code == 1
        assert "Error: --max-displacement must not be negative" in result.output
