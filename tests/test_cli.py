"""
Tests for the Atlas CLI

Tests cover:
- check / brief / ask / version commands
- JSON output
- Config and data file errors
"""

import json
import pytest
from click.testing import CliRunner

from atlas_cli import cli


SCHEDULE_YAML = """\
user_id: demo
bookings:
  - id: b_flight
    booking_type: flight
    title: Flight to Chicago
    status: booked
    origin: SFO
    destination: ORD
    depart_date: "2026-10-18T14:00:00"
events:
  - id: e_sync
    title: Team sync
    start_time: "2026-10-18T10:30:00"
    end_time: "2026-10-18T11:00:00"
"""


NOW = "2026-10-18T08:00:00"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def schedule_file(tmp_path):
    path = tmp_path / "schedule.yaml"
    path.write_text(SCHEDULE_YAML)
    return str(path)


class TestCheckCommand:
    """Tests for `atlas check`."""

    def test_ride_json(self, runner, schedule_file):
        result = runner.invoke(cli, [
            "--json", "check", "ride", "--at", "2026-10-18T14:00:00", "--data", schedule_file,
            "--now", NOW,
        ])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["outcome"] == "conflict"
        assert data["adjusted_time"] == "2026-10-18T11:30:00"

    def test_rich_output(self, runner, schedule_file):
        result = runner.invoke(cli, [
            "check", "doctor", "--at", "2026-10-18T10:00:00", "--data", schedule_file, "--now", NOW
        ])
        assert result.exit_code == 0, result.output
        assert "Conflict Check" in result.output
        assert "Team sync" in result.output

    def test_airport_destination(self, runner, schedule_file):
        result = runner.invoke(cli, [
            "--json", "check", "ride", "--at", "2026-10-18T13:00:00",
            "--destination", "SFO airport", "--data", schedule_file, "--now", NOW
        ])
        data = json.loads(result.output)
        assert data["conflicts"][0]["severity"] == "soft"

    def test_departed_flight_is_ignored(self, runner, schedule_file):
        result = runner.invoke(cli, [
            "--json", "check", "ride", "--at", "2026-10-18T14:00:00", "--data", schedule_file,
            "--now", "2026-10-18T14:30:00",
        ])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["adjusted_time"] is None

    def test_invalid_time(self, runner, schedule_file):
        result = runner.invoke(cli, ["check", "ride", "--at", "soon", "--data", schedule_file])
        assert result.exit_code != 0
        assert "Invalid datetime" in result.output

    def test_unknown_booking_type(self, runner, schedule_file):
        result = runner.invoke(cli, ["check", "hotel", "--at", "2026-10-18T10:00", "--data", schedule_file])
        assert result.exit_code == 2

    def test_missing_data_file(self, runner, tmp_path):
        result = runner.invoke(cli, [
            "check", "ride", "--at", "2026-10-18T10:00", "--data", str(tmp_path / "none.yaml")
        ])
        assert result.exit_code == 1
        assert "InMemoryScheduleStore" in result.output


class TestBriefCommand:
    """Tests for `atlas brief`."""

    def test_day_json(self, runner, schedule_file):
        result = runner.invoke(cli, [
            "--json", "brief", "day", "--data", schedule_file, "--now", "2026-10-18T08:00:00"
        ])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["period"] == "day"
        assert [i["id"] for i in data["items"]] == ["e_sync", "b_flight"]
        assert data["gaps"][0]["duration_minutes"] == 180

    def test_rich_output(self, runner, schedule_file):
        result = runner.invoke(cli, ["brief", "week", "--data", schedule_file, "--now", "2026-10-18T08:00"])
        assert result.exit_code == 0, result.output
        assert "This week, you have 2 scheduled items." in result.output

    def test_empty_period(self, runner, schedule_file):
        result = runner.invoke(cli, [
            "--json", "brief", "day", "--data", schedule_file, "--now", "2027-01-05T08:00:00"
        ])
        assert json.loads(result.output)["summary"] == "You have no scheduled events for today."

    def test_invalid_now(self, runner, schedule_file):
        result = runner.invoke(cli, ["brief", "--data", schedule_file, "--now", "later"])
        assert result.exit_code == 2


class TestAskCommand:
    """Tests for `atlas ask`."""

    def test_briefing_message(self, runner, schedule_file):
        result = runner.invoke(cli, [
            "--json", "ask", "what's on my agenda this week",
            "--data", schedule_file, "--now", "2026-10-18T08:00"
        ])
        data = json.loads(result.output)
        assert data["handled"] is True
        assert data["intent"]["period"] == "week"
        assert len(data["briefing"]["items"]) == 2

    def test_other_message(self, runner, schedule_file):
        result = runner.invoke(cli, ["--json", "ask", "book me a hotel", "--data", schedule_file])
        assert json.loads(result.output) == {
            "handled": False, "intent": {"is_briefing": False, "period": None}
        }


class TestConfigOption:
    """Tests for --config."""

    def test_config_overrides_buffers(self, runner, schedule_file, tmp_path):
        config = tmp_path / "atlas.yaml"
        config.write_text("buffers:\n  travel_to_airport: 30\n")
        result = runner.invoke(cli, [
            "--json", "--config", str(config),
            "check", "ride", "--at", "2026-10-18T14:00:00", "--data", schedule_file, "--now", NOW
        ])
        assert json.loads(result.output)["adjusted_time"] == "2026-10-18T12:00:00"

    def test_invalid_config(self, runner, schedule_file, tmp_path):
        config = tmp_path / "atlas.yaml"
        config.write_text("buffers:\n  travel_to_airport: -1\n")
        result = runner.invoke(cli, ["--config", str(config), "version"])
        assert result.exit_code == 1
        assert "non-negative" in result.output


class TestVersionCommand:
    def test_version_json(self, runner):
        result = runner.invoke(cli, ["--json", "version"])
        assert json.loads(result.output)["name"] == "Atlas CLI"

    def test_version_rich(self, runner):
        result = runner.invoke(cli, ["version"])
        assert result.exit_code == 0
        assert "1.0.0" in result.output
