"""
carbonmix/mock.py

Synthetic history generator used when no API token with historical access
is available.

The output has exactly the shape of the Electricity Maps records
(`datetime`, `carbonIntensity`, `powerProductionBreakdown`), so the
aggregation layer cannot tell mock data from real data.

The seasonal model is a rough picture of the Indian grid: a large coal
base load, solar dipping and wind/hydro rising during the June-September
monsoon.
"""

from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Any

from dateutil.relativedelta import relativedelta

from .aggregate import round_half_up

# Number of steps back from "now" per range: days for 1Y, months for 5Y.
RANGE_POINTS = {"1Y": 365, "5Y": 60}

# Emission factors (gCO2eq/kWh) for the fossil sources in the model.
EMISSION_FACTORS = {"coal": 820, "gas": 490, "unknown": 700}

MONSOON_MONTHS = range(6, 10)  # June-September


def simulate_mix(month: int, rng: random.Random) -> dict[str, float]:
    """Return a generation mix (MW) for a calendar month (1-12)."""
    monsoon = month in MONSOON_MONTHS
    return {
        "coal": 120000 + rng.random() * 20000,
        "solar": 15000 if monsoon else 35000 + rng.random() * 5000,
        "wind": 25000 if monsoon else 10000 + rng.random() * 5000,
        "hydro": 20000 if monsoon else 8000,
        "nuclear": 5000,
        "gas": 5000 + rng.random() * 2000,
        "unknown": 2000,
    }


def intensity_of(mix: dict[str, float]) -> int:
    """Generation-weighted carbon intensity of a mix, rounded."""
    total = sum(mix.values())
    emissions = sum(mix.get(src, 0) * factor for src, factor in EMISSION_FACTORS.items())
    return round_half_up(emissions / total)


def generate_mock_history(
    range_key: str = "1Y",
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> list[dict[str, Any]]:
    """Generate a chronological mock history for a dashboard range.

    Args:
        range_key: "1Y" for daily points over a year, "5Y" for monthly
            points over five years.
        now: Timestamp of the final point; defaults to the current UTC time.
        rng: Random source; pass a seeded `random.Random` for repeatable
            output.

    Returns:
        list[dict]: Raw records, oldest first, ending at `now`.

    Raises:
        ValueError: If `range_key` is unknown.
    """
    if range_key not in RANGE_POINTS:
        raise ValueError(f"Unknown range {range_key!r}; expected one of {sorted(RANGE_POINTS)}")

    now = now or datetime.now(timezone.utc)
    rng = rng or random.Random()
    step = relativedelta(days=1) if range_key == "1Y" else relativedelta(months=1)

    data = []
    for i in range(RANGE_POINTS[range_key], -1, -1):
        when = now - step * i
        mix = simulate_mix(when.month, rng)
        data.append(
            {
                "datetime": when.isoformat().replace("+00:00", "Z"),
                "carbonIntensity": intensity_of(mix),
                "powerProductionBreakdown": mix,
            }
        )
    return data
