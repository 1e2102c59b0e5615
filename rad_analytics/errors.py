"""
errors.py — Exception types raised by RadAnalytics.

Row-level problems never raise (see records.Skipped); these cover the
batch- and call-level failures the caller has to react to.
"""


class RadAnalyticsError(Exception):
    """Base class for all RadAnalytics errors."""


class UnsupportedFormatError(RadAnalyticsError):
    """Input file extension has no row extractor."""


class MissingDatasetError(RadAnalyticsError):
    """No ingested data set in the session; go back to ingestion."""


class DatasetDecodeError(RadAnalyticsError):
    """The stored data set could not be decoded as a list of rows."""


class TimeRangeError(RadAnalyticsError, ValueError):
    """A time-range bound is not a valid HH:MM value."""


class IngestError(RadAnalyticsError):
    """The input file exists but its contents could not be read."""
