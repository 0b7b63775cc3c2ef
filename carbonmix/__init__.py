"""Data modules for the Historic Carbon Dashboard project."""

from . import aggregate, charts, client, mock, run, validate

__all__ = ["aggregate", "charts", "client", "mock", "run", "validate"]
