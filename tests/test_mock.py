"""Tests for the synthetic history generator."""

from __future__ import annotations

import random
from datetime import datetime, timezone

import pytest

from carbonmix import aggregate, mock

NOW = datetime(2024, 12, 31, tzinfo=timezone.utc)


def test_one_year_is_daily_and_chronological():
    """1Y yields 366 daily points ending at `now`."""

    data = mock.generate_mock_history("1Y", now=NOW, rng=random.Random(1))

    assert len(data) == 366
    assert data[0]["datetime"] == "2024-01-01T00:00:00Z"
    assert data[-1]["datetime"] == "2024-12-31T00:00:00Z"
    assert [d["datetime"] for d in data] == sorted(d["datetime"] for d in data)


def test_five_years_is_monthly():
    """5Y yields 61 monthly points."""

    data = mock.generate_mock_history("5Y", now=NOW, rng=random.Random(1))

    assert len(data) == 61
    assert data[0]["datetime"] == "2019-12-31T00:00:00Z"
    assert data[1]["datetime"] == "2020-01-31T00:00:00Z"


def test_shape_matches_provider_records():
    """Each point has the same keys as an Electricity Maps record."""

    (point,) = mock.generate_mock_history("1Y", now=NOW, rng=random.Random(0))[-1:]

    assert set(point) == {"datetime", "carbonIntensity", "powerProductionBreakdown"}
    assert set(point["powerProductionBreakdown"]) == {
        "coal",
        "solar",
        "wind",
        "hydro",
        "nuclear",
        "gas",
        "unknown",
    }
    assert isinstance(point["carbonIntensity"], int)


def test_seeded_output_is_repeatable():
    """The same seed gives the same series."""

    a = mock.generate_mock_history("5Y", now=NOW, rng=random.Random(42))
    b = mock.generate_mock_history("5Y", now=NOW, rng=random.Random(42))

    assert a == b


def test_monsoon_seasonality():
    """Solar dips and hydro rises from June to September."""

    rng = random.Random(3)
    july = mock.simulate_mix(7, rng)
    january = mock.simulate_mix(1, rng)

    assert july["solar"] == 15000
    assert july["hydro"] == 20000
    assert july["wind"] == 25000
    assert january["solar"] >= 35000
    assert january["hydro"] == 8000


def test_intensity_is_generation_weighted():
    """Only coal, gas and unknown contribute emissions."""

    mix = {"coal": 50, "gas": 0, "unknown": 0, "solar": 50}

    assert mock.intensity_of(mix) == 410


def test_unknown_range_rejected():
    with pytest.raises(ValueError):
        mock.generate_mock_history("2Y")


def test_mock_history_aggregates():
    """Mock data flows through the aggregation without special handling."""

    data = mock.generate_mock_history("1Y", now=NOW, rng=random.Random(7))

    result = aggregate.enrich(data)

    assert len(result.chart_data) == 366
    assert result.latest.datetime == data[-1]["datetime"]
    # Nuclear is always present, so low carbon strictly exceeds renewable.
    for point in result.chart_data:
        assert point.renewable_pct < point.carbon_free_pct < 100


def test_intensity_rounds_halves_up():
    """An exact half rounds up, like the aggregated average."""

    # 820 / 40 == 20.5
    assert mock.intensity_of({"coal": 1, "solar": 39}) == 21
