# src/gw2_stat_table/errors.py
"""Exception types raised while building the stat table."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class StatTableError(Exception):
    """Base class for every error this package raises."""


class NetworkError(StatTableError):
    """Transport failure or non-200 answer from the wiki."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class FetchExhaustedError(StatTableError):
    """Every attempt for one cell failed."""

    def __init__(self, item_type: str, rarity: str, level: int | str,
                 attempts: int, last_error: BaseException | None = None):
        super().__init__(
            f"gave up on {rarity} {item_type} of level {level} "
            f"after {attempts} attempts: {last_error}"
        )
        self.item_type = item_type
        self.rarity = rarity
        self.level = level
        self.attempts = attempts
        self.last_error = last_error


class MalformedResponseError(StatTableError):
    """A fetched payload did not have the expected nested shape."""


class CacheWriteError(StatTableError):
    """The cache file could not be written."""


@dataclass
class CellFailure:
    item_type: str
    rarity: str
    level: str
    error: BaseException

    def describe(self) -> str:
        return (f"{self.item_type} / {self.rarity} / level {self.level}: "
                f"{type(self.error).__name__}: {self.error}")


class TableBuildError(StatTableError):
    """One or more cells could not be populated.

    ``table`` holds whatever was resolved before the run stopped; completed
    cells are already in the cache, so a rerun only fetches the rest.
    """

    def __init__(self, failures: list[CellFailure], table: dict[str, Any]):
        lines = "\n  ".join(f.describe() for f in failures)
        super().__init__(f"{len(failures)} cell(s) failed:\n  {lines}")
        self.failures = failures
        self.table = table
