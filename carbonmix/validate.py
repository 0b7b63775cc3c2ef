"""
carbonmix/validate.py

Shape normalisation for raw Electricity Maps responses.

Responsibilities
----------------
- Define a lenient `RawRecord` model that captures:
  * `datetime`: the observation timestamp (ISO-8601 string upstream).
  * `carbonIntensity`: carbon intensity in gCO2eq/kWh, possibly missing.
  * `powerProductionBreakdown`: mapping of source name to output (MW).
- Provide `normalize_payload` to unwrap provider-specific response shapes
  into a flat list of `RawRecord`.

Conventions
-----------
- `/carbon-intensity/past-range` wraps records under `"data"`.
- `/power-breakdown/history` wraps records under `"history"`.
- A bare JSON list is accepted as-is (e.g. mock data).

Notes
-----
- Field values are not coerced here. Malformed numbers are tolerated and
  dealt with by `carbonmix/aggregate.py`, so a single bad field never
  invalidates a record.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from dateutil import parser as dtp
from pydantic import BaseModel, ConfigDict

# Keys under which the provider nests the record list.
RECORD_KEYS = ("data", "history")


class RawRecord(BaseModel):
    """One observation as delivered by the data source.

    Every field accepts any value; unknown provider fields are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    datetime: Any = None
    carbonIntensity: Any = None
    powerProductionBreakdown: Any = None

    def mix(self) -> dict[str, Any]:
        """Return the generation mix, or an empty dict when absent."""
        if isinstance(self.powerProductionBreakdown, Mapping):
            return dict(self.powerProductionBreakdown)
        return {}


def extract_records(payload: Any) -> list:
    """Return the list of raw record objects inside a provider response."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, Mapping):
        for key in RECORD_KEYS:
            records = payload.get(key)
            if isinstance(records, list):
                return records
    return []


def normalize_payload(payload: Any) -> list[RawRecord]:
    """Normalise a provider response into a list of `RawRecord`.

    Args:
        payload: Parsed JSON, either a list of records or an object holding
            one under `"data"` or `"history"`.

    Returns:
        list[RawRecord]: Records in upstream order. Elements that are not
        JSON objects are dropped.
    """
    return [
        RawRecord.model_validate(dict(rec))
        for rec in extract_records(payload)
        if isinstance(rec, Mapping)
    ]


def parse_utc(s: str) -> datetime:
    """Parse an ISO-8601 string as a timezone-aware UTC datetime.

    Naive timestamps are assumed to already be in UTC.
    """
    dt = dtp.isoparse(s)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
