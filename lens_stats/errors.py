"""
errors.py - Exception types raised by lens_stats.

Malformed GEDCOM never raises; these exceptions cover structurally invalid
record streams and failed collectors so callers can tell a failure apart
from an empty result.
"""


class LensStatsError(Exception):
    """Base class for all lens_stats errors."""


class InvalidRecordStreamError(LensStatsError):
    """A row from the store is structurally invalid (not merely sparse)."""


class CollectorError(LensStatsError):
    """A statistics collector failed while running in strict mode."""

    def __init__(self, collector_id: str) -> None:
        super().__init__(f"Statistics collector '{collector_id}' failed")
        self.collector_id = collector_id
