"""Tests covering the dashboard orchestrator and CLI."""

from __future__ import annotations

import random
from datetime import datetime, timezone

import requests

from carbonmix import client, run
from carbonmix.client import FetchError

NOW = datetime(2024, 1, 10, 12, tzinfo=timezone.utc)


def test_build_dashboard_mock():
    """Mock mode generates, normalises and aggregates a full range."""

    result = run.build_dashboard("5Y", use_mock=True, now=NOW, rng=random.Random(5))

    assert len(result.chart_data) == 61
    assert result.avg_intensity > 0
    assert result.latest is result.chart_data[-1]


def test_build_dashboard_live(monkeypatch):
    """Live mode unwraps the provider response before aggregation."""

    calls = []

    def fake_fetch(range_key, zone, now):
        calls.append((range_key, zone, now))
        return {
            "zone": "IN",
            "history": [
                {
                    "datetime": "2024-01-01T00:00:00Z",
                    "carbonIntensity": 400,
                    "powerProductionBreakdown": {"coal": 100, "solar": 50},
                },
                {
                    "datetime": "2024-01-02T00:00:00Z",
                    "carbonIntensity": 300,
                    "powerProductionBreakdown": {"coal": 80, "solar": 80, "wind": 40},
                },
            ],
        }

    monkeypatch.setattr(run, "fetch_history", fake_fetch)

    result = run.build_dashboard("1Y", use_mock=False, zone="IN", now=NOW)

    assert calls == [("1Y", "IN", NOW)]
    assert result.avg_intensity == 350
    assert result.latest.renewable_pct == 60.0


def test_build_dashboard_empty_is_none(monkeypatch):
    """An empty provider response yields no result rather than an error."""

    monkeypatch.setattr(run, "fetch_history", lambda range_key, zone, now: {"data": []})

    assert run.build_dashboard("1Y", use_mock=False) is None


def test_main_prints_summary(capsys):
    """The CLI should print the headline figures for mock data."""

    code = run.main(["--range", "5Y", "--seed", "1", "--end-date", "2024-01-10T12:00:00Z"])

    out = capsys.readouterr().out
    assert code == 0
    assert "61 points" in out
    assert "Avg carbon intensity" in out
    assert "Current low carbon (incl. nuclear)" in out


def test_main_passes_end_date(monkeypatch):
    """`--end-date` is parsed to an aware UTC datetime."""

    seen = {}

    def fake_build(range_key, use_mock, zone, now, rng):
        seen.update(range_key=range_key, use_mock=use_mock, zone=zone, now=now)
        return None

    monkeypatch.setattr(run, "build_dashboard", fake_build)

    run.main(["--live", "--zone", "DE", "--end-date", "2024-01-10T12:00:00Z"])

    assert seen == {"range_key": "1Y", "use_mock": False, "zone": "DE", "now": NOW}


def test_main_no_data(monkeypatch, capsys):
    """No data is reported but is not a failure."""

    monkeypatch.setattr(run, "build_dashboard", lambda *args, **kwargs: None)

    code = run.main([])

    assert code == 0
    assert "No data available" in capsys.readouterr().out


def test_main_fetch_error(monkeypatch, capsys):
    """Retrieval failures exit non-zero with a message on stderr."""

    def boom(*args, **kwargs):
        raise FetchError(502, "https://api.test/power-breakdown/history")

    monkeypatch.setattr(run, "build_dashboard", boom)

    code = run.main(["--live"])

    assert code == 1
    assert "ERROR: Failed to fetch data: HTTP 502" in capsys.readouterr().err


def test_main_transport_error(monkeypatch, capsys):
    """Transport failures after the last retry exit non-zero with a message."""

    def down(path, params):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(client, "get", down)

    code = run.main(["--live"])

    assert code == 1
    assert "ERROR: down" in capsys.readouterr().err


def test_main_undecodable_response(monkeypatch, capsys):
    """A non-JSON body is reported rather than raised."""

    class NotJson:
        ok = True

        def json(self):
            raise ValueError("Expecting value")

    monkeypatch.setattr(client, "get", lambda path, params: NotJson())

    code = run.main(["--live"])

    assert code == 1
    assert "ERROR: Expecting value" in capsys.readouterr().err


def test_main_bad_end_date(capsys):
    """A malformed `--end-date` is reported rather than raised."""

    code = run.main(["--end-date", "not-a-date"])

    assert code == 1
    assert capsys.readouterr().err.startswith("ERROR: ")
