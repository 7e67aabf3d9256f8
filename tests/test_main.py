"""
ChoirStats - CLI Tests

Tests for the command line entry point.
"""

import json
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from choirstats.cache.redis_store import InMemoryDocumentStore, RedisDocumentStore
from choirstats.exceptions import StatisticsStoreError
from choirstats.main import load_events, main


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CHOIRSTATS_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.delenv("CHOIRSTATS_HOME_REGION", raising=False)
    for name in (
        "CHOIRSTATS_REFRESH_INTERVAL", "CHOIRSTATS_KEY_PREFIX",
        "REDIS_URL", "REDIS_HOST", "REDIS_PORT"
    ):
        monkeypatch.delenv(name, raising=False)
    yield tmp_path
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        handler.close()
        root_logger.removeHandler(handler)


def _write_events(path, data):
    path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
    return str(path)


class TestLoadEvents:
    """Test suite for load_events."""

    def test_list_and_wrapped_formats(self, tmp_path):
        """Verify both a bare list and a {'concerts': [...]} object load."""
        concerts = [{"date": "2025-06-01", "region": "Коми"}, "not a concert"]

        bare = load_events(_write_events(tmp_path / "a.json", concerts))
        wrapped = load_events(_write_events(tmp_path / "b.json", {"concerts": concerts}))

        assert len(bare) == len(wrapped) == 1
        assert bare[0].region == "Коми"

    def test_rejects_other_json(self, tmp_path):
        """Verify a scalar document is an error."""
        with pytest.raises(ValueError):
            load_events(_write_events(tmp_path / "c.json", 42))


class TestWindowsCommand:
    """Test suite for --windows."""

    def test_prints_windows_for_reference_month(self, workdir, capsys):
        """Verify JSON output for a chosen reference month."""
        path = _write_events(workdir / "concerts.json", [
            {"date": "2024-11-20", "region": "Воронежская область"},
            {"date": "2025-01-15", "region": "Коми"},
            {"date": "2025-01-16"},
        ])

        exit_code = main(["--windows", path, "--ref", "2025-01"])

        output = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert output["monthly"] == {"homeCount": 0, "otherCount": 2, "total": 2}
        assert output["last4Months"] == {"homeCount": 1, "otherCount": 2, "total": 3}
        assert output["labels"]["quarterly"] == "Q1 2025"

    def test_missing_file_fails(self, workdir):
        """Verify an unreadable events file gives exit code 1."""
        assert main(["--windows", str(workdir / "missing.json")]) == 1

    def test_bad_reference_month_fails(self, workdir):
        """Verify a malformed --ref gives exit code 1."""
        path = _write_events(workdir / "concerts.json", [])
        assert main(["--windows", path, "--ref", "2025-13"]) == 1

    def test_quarter_requires_year(self, workdir):
        """Verify argument validation for --quarter."""
        with pytest.raises(SystemExit):
            main(["--quarter", "2"])


@pytest.fixture
def memory_store(monkeypatch):
    """Replace the Redis store with an in-memory one that records ping/close."""
    store = InMemoryDocumentStore()
    store.ping = AsyncMock(return_value=True)
    store.close = AsyncMock()
    store_class = MagicMock(return_value=store)
    monkeypatch.setattr("choirstats.main.RedisDocumentStore", store_class)
    store.store_class = store_class
    return store


def _run(argv, capsys):
    """Run the CLI and return (exit_code, parsed stdout)."""
    exit_code = main(argv)
    out = capsys.readouterr().out
    return exit_code, json.loads(out) if out.strip() else None


class TestStoreCommands:
    """Test suite for the commands backed by the statistics store."""

    @pytest.fixture
    def events_path(self, workdir):
        return _write_events(workdir / "concerts.json", [
            {"date": "2025-05-10", "region": "Воронежская область"},
            {"date": "2025-06-01", "region": "Воронежская область"},
            {"date": "2025-06-02", "region": "Коми"},
            {"date": "2025-06-03"},
        ])

    def test_save_month_prints_saved_aggregate(self, events_path, memory_store, capsys):
        """Verify --save-month stores and prints the month."""
        exit_code, output = _run(["--save-month", "2025-06", "--events", events_path], capsys)

        assert exit_code == 0
        assert output["monthKey"] == "2025-06"
        assert output["monthly"] == {"homeCount": 1, "otherCount": 2, "total": 3}
        assert output["byCity"]["Неизвестно"]["count"] == 1
        assert output["createdAt"] is not None
        memory_store.store_class.assert_called_once_with(
            "redis://localhost:6379", key_prefix=RedisDocumentStore.PREFIX_MONTHLY
        )
        memory_store.ping.assert_awaited_once()
        memory_store.close.assert_awaited_once()

    def test_month_missing_prints_null(self, workdir, memory_store, capsys):
        """Verify a month without a record prints null and still succeeds."""
        exit_code, output = _run(["--month", "2025-06"], capsys)

        assert exit_code == 0
        assert output is None
        memory_store.close.assert_awaited_once()

    def test_rollups_and_listings(self, events_path, memory_store, capsys):
        """Verify month, quarter, year and listing modes read saved months."""
        for key in ("2025-05", "2025-06"):
            assert _run(["--save-month", key, "--events", events_path], capsys)[0] == 0

        exit_code, month = _run(["--month", "2025-05"], capsys)
        assert exit_code == 0
        assert month["monthly"] == {"homeCount": 1, "otherCount": 0, "total": 1}

        exit_code, quarter = _run(["--quarter", "2", "--year", "2025"], capsys)
        assert exit_code == 0
        assert (quarter["homeCount"], quarter["otherCount"], quarter["total"]) == (2, 2, 4)

        exit_code, year = _run(["--yearly", "2025"], capsys)
        assert exit_code == 0
        assert year["total"] == 4
        assert year["quarters"]["Q2"]["total"] == 4
        assert year["quarters"]["Q1"]["total"] == 0

        exit_code, years = _run(["--list-years"], capsys)
        assert exit_code == 0
        assert years == [2025]

        exit_code, months = _run(["--list-months", "2025"], capsys)
        assert exit_code == 0
        assert [entry["key"] for entry in months] == ["2025-06", "2025-05"]
        assert months[0]["data"]["monthly"]["total"] == 3

        assert memory_store.close.await_count == 7

    def test_store_error_exits_with_failure(self, workdir, memory_store, capsys):
        """Verify a storage failure gives exit code 1 and the store is closed."""
        memory_store.get = AsyncMock(side_effect=StatisticsStoreError("get", "2025-06", "connection reset"))

        exit_code, output = _run(["--month", "2025-06"], capsys)

        assert exit_code == 1
        assert output is None
        memory_store.close.assert_awaited_once()

    def test_unreachable_store_exits_with_failure(self, workdir, memory_store, capsys):
        """Verify a failed ping stops before any command runs."""
        memory_store.ping.side_effect = StatisticsStoreError("ping", "localhost:6379", "refused")

        exit_code, output = _run(["--list-years"], capsys)

        assert exit_code == 1
        assert output is None
        memory_store.close.assert_awaited_once()
