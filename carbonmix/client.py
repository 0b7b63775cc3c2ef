"""
carbonmix/client.py

A minimal Electricity Maps client used to fetch historical carbon-intensity
and generation-mix records for a single zone.

Responsibilities
---------------
- Compute the UTC window for a dashboard range ("1Y" or "5Y").
- Request `/carbon-intensity/past-range` for that window and, when the
  provider refuses it (e.g. free-tier tokens), fall back to the coarser
  `/power-breakdown/history` endpoint.
- Perform HTTP GET requests with a bounded timeout, a custom User-Agent,
  the `auth-token` header, and exponential backoff retries for transport
  failures.

Environment Variables
---------------------
ELECTRICITY_MAPS_BASE_URL
    Base API endpoint. Defaults to "https://api.electricitymap.org/v3".
ELECTRICITY_MAPS_API_TOKEN
    API token sent as the `auth-token` header. Sent empty when unset; the
    provider rejects the request rather than this module.
ELECTRICITY_MAPS_ZONE
    Default zone identifier. Defaults to "IN".

Notes
-----
- The past-range endpoint needs a paid token with historical access.
- Responses are returned as parsed JSON; unwrapping into records happens in
  `carbonmix/validate.py`.
"""

from __future__ import annotations

import logging
import os
import time
from datetime import datetime, timezone
from typing import Any

import requests
from dateutil.relativedelta import relativedelta
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

BASE_URL = os.getenv("ELECTRICITY_MAPS_BASE_URL", "https://api.electricitymap.org/v3")
API_TOKEN = os.getenv("ELECTRICITY_MAPS_API_TOKEN", "")
DEFAULT_ZONE = os.getenv("ELECTRICITY_MAPS_ZONE", "IN")

# HTTP client settings.
HTTP_TIMEOUT = 30  # seconds
USER_AGENT = "historic-carbon-dashboard/0.1"
MAX_RETRIES = 5  # total attempts including the first try

# Years of history requested per dashboard range.
RANGE_YEARS = {"1Y": 1, "5Y": 5}


class FetchError(Exception):
    """Raised when both the primary and the fallback request fail."""

    def __init__(self, status: int, url: str):
        super().__init__(f"Failed to fetch data: HTTP {status} from {url}")
        self.status = status
        self.url = url


def range_window(range_key: str, now: datetime | None = None) -> tuple[str, str]:
    """Return the `(start, end)` ISO-8601 UTC strings for a dashboard range.

    Raises:
        ValueError: If `range_key` is not one of `RANGE_YEARS`.
    """
    if range_key not in RANGE_YEARS:
        raise ValueError(f"Unknown range {range_key!r}; expected one of {sorted(RANGE_YEARS)}")
    end = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    start = end - relativedelta(years=RANGE_YEARS[range_key])
    return start.isoformat(), end.isoformat()


def get(path: str, params: dict[str, str]) -> requests.Response:
    """GET `BASE_URL + path` with auth, timeout and transport retries.

    Non-success statuses are returned to the caller, not raised; only
    `requests.RequestException`s are retried.

    Raises:
        requests.RequestException: If every attempt fails at the transport
            level (the last exception is re-raised).
    """
    url = f"{BASE_URL}{path}"
    headers = {"auth-token": API_TOKEN or "", "User-Agent": USER_AGENT}

    for attempt in range(MAX_RETRIES):
        try:
            logger.debug("GET %s params=%s (attempt %d)", url, params, attempt + 1)
            return requests.get(url, params=params, headers=headers, timeout=HTTP_TIMEOUT)
        except requests.RequestException:
            if attempt == MAX_RETRIES - 1:
                raise
            # Exponential backoff: 1, 2, 4, 8... seconds between retries.
            time.sleep(2**attempt)

    raise RuntimeError("Unreachable")


def fetch_history(
    range_key: str = "1Y",
    zone: str | None = None,
    now: datetime | None = None,
) -> Any:
    """Fetch raw history for `zone`, falling back to recent history.

    Args:
        range_key: Dashboard range, "1Y" or "5Y".
        zone: Electricity Maps zone id; defaults to `DEFAULT_ZONE`.
        now: Override for the window end (testing).

    Returns:
        The parsed JSON body of whichever request succeeded.

    Raises:
        FetchError: If the fallback request also returns a non-success
            status.
        requests.RequestException: On persistent transport failures.
    """
    zone = zone or DEFAULT_ZONE
    start, end = range_window(range_key, now)

    res = get("/carbon-intensity/past-range", {"zone": zone, "start": start, "end": end})
    if res.ok:
        return res.json()

    logger.warning(
        "Failed to fetch %s data for %s: %s. Falling back to recent history.",
        range_key,
        zone,
        res.status_code,
    )
    fallback = get("/power-breakdown/history", {"zone": zone})
    if not fallback.ok:
        raise FetchError(fallback.status_code, fallback.url)
    return fallback.json()
