"""Pytest configuration shared across the test suite."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure the project root is on sys.path so ``import carbonmix`` works when
# running the test suite without installing the package.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def offline(monkeypatch):
    """Fail loudly if a test reaches the real network."""

    import requests

    def refuse(*args, **kwargs):
        raise AssertionError("tests must not perform real HTTP requests")

    monkeypatch.setattr(requests, "get", refuse)
