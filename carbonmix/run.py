"""
carbonmix/run.py

Orchestrator tying the data source to the aggregation layer.

Responsibilities
----------------
- Obtain raw records for a dashboard range, either from the mock generator
  or from Electricity Maps (normalised to a flat record list).
- Run the aggregation and return the dashboard result.
- Expose a CLI printing the headline figures for a range.

Conventions
-----------
- Mock data is the default; `--live` switches to the API.
- A retrieval failure surfaces as `FetchError` and never reaches the
  aggregation step.
- An empty series is not an error: the result is `None`.
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
from datetime import datetime

import requests

from .aggregate import Aggregate, enrich
from .client import DEFAULT_ZONE, RANGE_YEARS, FetchError, fetch_history
from .mock import generate_mock_history
from .validate import RawRecord, normalize_payload, parse_utc

logger = logging.getLogger(__name__)


def load_raw(
    range_key: str = "1Y",
    use_mock: bool = True,
    zone: str | None = None,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> list[RawRecord]:
    """Return raw records for `range_key` from the selected source.

    Args:
        range_key: "1Y" or "5Y".
        use_mock: Generate synthetic data instead of calling the API.
        zone: Zone id for the API; ignored for mock data.
        now: Override for the end of the window (testing).
        rng: Random source for the mock generator.

    Raises:
        FetchError: If the API and its fallback both fail.
    """
    if use_mock:
        payload = generate_mock_history(range_key, now=now, rng=rng)
    else:
        payload = fetch_history(range_key, zone=zone, now=now)

    records = normalize_payload(payload)
    logger.info(
        "Loaded %d %s records for range %s",
        len(records),
        "mock" if use_mock else "live",
        range_key,
    )
    return records


def build_dashboard(
    range_key: str = "1Y",
    use_mock: bool = True,
    zone: str | None = None,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> Aggregate | None:
    """Load and aggregate the records for a dashboard range.

    Returns:
        Aggregate | None: The enriched series and summary, or `None` when
        the source returned no records.
    """
    records = load_raw(range_key, use_mock=use_mock, zone=zone, now=now, rng=rng)
    result = enrich(records)
    if result is None:
        logger.info("No records for range %s", range_key)
    return result


def main(argv=None):
    """CLI entry point printing the dashboard headline figures.

    Args:
        argv: Optional list of CLI arguments (useful for testing).

    Returns:
        int: Exit code (0 on success or no data, 1 on retrieval failure,
        an undecodable response, or a malformed `--end-date`).
    """
    parser = argparse.ArgumentParser(description="Historic carbon intensity summary")
    parser.add_argument("--range", dest="range_key", choices=sorted(RANGE_YEARS), default="1Y")
    parser.add_argument("--zone", default=DEFAULT_ZONE, help="Electricity Maps zone id")
    parser.add_argument("--live", action="store_true", help="Use the API instead of mock data")
    parser.add_argument("--end-date", help="ISO-8601 end of the window (default: now)")
    parser.add_argument("--seed", type=int, help="Seed for mock data")
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    rng = random.Random(args.seed) if args.seed is not None else None
    try:
        now = parse_utc(args.end_date) if args.end_date else None
        result = build_dashboard(
            args.range_key, use_mock=not args.live, zone=args.zone, now=now, rng=rng
        )
    except (FetchError, requests.RequestException, ValueError) as exc:
        logger.debug("Loading dashboard data failed", exc_info=True)
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    if result is None:
        print("No data available for the selected range.")
        return 0

    latest = result.latest
    print(f"Zone: {args.zone} ({args.range_key}, {len(result.chart_data)} points)")
    print(f"Avg carbon intensity: {result.avg_intensity} gCO2eq/kWh")
    print(f"Current renewable: {latest.renewable_pct:.1f}%")
    print(f"Current low carbon (incl. nuclear): {latest.carbon_free_pct:.1f}%")
    return 0


if __name__ == "__main__":
    # Convert the `main()` return value into a process exit status.
    raise SystemExit(main())
