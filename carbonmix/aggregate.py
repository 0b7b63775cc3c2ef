"""
carbonmix/aggregate.py

Aggregation layer turning raw generation-mix records into chart-ready rows
and summary statistics.

Responsibilities
----------------
- Define the fixed source classifications `RENEWABLE` and `LOW_CARBON`.
- Provide `coerce_number`, the single place where missing or non-numeric
  values are defaulted to zero.
- Provide `enrich`, which computes per-record totals and renewable /
  low-carbon shares plus the latest snapshot and average intensity.

Conventions
-----------
- Records are processed in the order given; the last one is "latest".
- Percentages are in the range 0-100 and are 0 when the total is 0.
- Mix values that are not real numbers are skipped when summing but are
  carried through unchanged on the enriched record.

Notes
-----
- A missing `carbonIntensity` counts as 0 in the average. This biases the
  average downward when data is sparse; it is kept for compatibility with
  the existing dashboard figures.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .validate import RawRecord

RENEWABLE = frozenset({"solar", "wind", "geothermal", "hydro", "biomass"})
LOW_CARBON = RENEWABLE | {"nuclear"}


def is_number(value: Any) -> bool:
    """Return True for finite ints/floats (booleans excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # ints too large for a float
        return False


def coerce_number(value: Any) -> float:
    """Return `value` as a float, or 0.0 when missing or non-numeric."""
    return float(value) if is_number(value) else 0.0


class EnrichedRecord(BaseModel):
    """A raw record plus its derived totals and shares.

    Attributes:
        datetime: Observation timestamp as delivered upstream.
        carbon_intensity: Carbon intensity (gCO2eq/kWh), 0 when missing.
        total: Sum of all numeric mix values.
        renewable_pct: Share of `total` from `RENEWABLE` sources.
        carbon_free_pct: Share of `total` from `LOW_CARBON` sources.
        mix: The original generation mix, values unchanged.
    """

    datetime: Any = None
    carbon_intensity: float = Field(0.0, alias="carbonIntensity")
    total: float = 0.0
    renewable_pct: float = Field(0.0, alias="renewablePct")
    carbon_free_pct: float = Field(0.0, alias="carbonFreePct")
    mix: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True)

    def as_row(self) -> dict[str, Any]:
        """Flatten into a single chart row.

        Mix keys sit alongside the derived fields; on a name clash the
        derived field wins.
        """
        row = dict(self.mix)
        row.update(self.model_dump(by_alias=True, exclude={"mix"}))
        return row


class Aggregate(BaseModel):
    """Result of `enrich` for a non-empty series."""

    chart_data: list[EnrichedRecord]
    latest: EnrichedRecord
    avg_intensity: int

    def chart_rows(self) -> list[dict[str, Any]]:
        """Return `chart_data` as flat dict rows for generic charting."""
        return [rec.as_row() for rec in self.chart_data]


def round_half_up(x: float) -> int:
    """Round to the nearest integer with halves rounding up."""
    return math.floor(x + 0.5)


def enrich_record(raw: RawRecord | Mapping[str, Any]) -> EnrichedRecord:
    """Compute totals and shares for a single record."""
    if not isinstance(raw, RawRecord):
        raw = RawRecord.model_validate(dict(raw))

    mix = raw.mix()
    total = renewable = low_carbon = 0.0

    for key, value in mix.items():
        if not is_number(value):
            continue
        total += value
        if key in RENEWABLE:
            renewable += value
        if key in LOW_CARBON:
            low_carbon += value

    return EnrichedRecord(
        datetime=raw.datetime,
        carbon_intensity=coerce_number(raw.carbonIntensity),
        total=total,
        renewable_pct=100 * renewable / total if total > 0 else 0.0,
        carbon_free_pct=100 * low_carbon / total if total > 0 else 0.0,
        mix=mix,
    )


def enrich(raw: Iterable[RawRecord | Mapping[str, Any]] | None) -> Aggregate | None:
    """Enrich a series of raw records and summarise it.

    Args:
        raw: Records in chronological order. May be `None` or empty.

    Returns:
        Aggregate | None: The enriched series, the last record as `latest`
        and the rounded mean intensity, or `None` when there is no data.
    """
    if not raw:
        return None

    processed = [enrich_record(rec) for rec in raw]
    if not processed:
        return None

    mean = sum(rec.carbon_intensity for rec in processed) / len(processed)
    if not math.isfinite(mean):
        # The sum overflowed; treat like unusable intensities.
        mean = 0.0
    return Aggregate(
        chart_data=processed,
        latest=processed[-1],
        avg_intensity=round_half_up(mean),
    )
