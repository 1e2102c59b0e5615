"""
filters.py — Filter criteria and filter engine

FilterCriteria is a plain value: three categorical selections plus an
inclusive date range and an inclusive time range. An empty selection means
"no restriction", not "match nothing".

The two analytic views evaluate ranges differently and both behaviours are
kept as selectable modes:

  Workflow view (WORKFLOW_MODE)
    - time range at HOUR granularity: a whole bucket is zeroed when its hour
      is outside [start hour, end hour]; minutes are ignored
    - date range compared as raw strings
    - signer compared as stored ("" never matches a selection)

  Productivity view (PRODUCTIVITY_MODE)
    - time range at MINUTE granularity, per record
    - date range parsed as calendar dates; any parse failure lets the
      record through
    - missing signer compared as "Unassigned"

Every function here is pure: inputs are never modified and the same inputs
always give equal outputs.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Iterable, Optional, Tuple

from rad_analytics.buckets import HourBucket
from rad_analytics.config import (
    BOUND_DATE_FORMATS,
    DEFAULT_TIME_END,
    DEFAULT_TIME_START,
    RECORD_DATE_FORMAT,
)
from rad_analytics.records import StudyRecord
from rad_analytics.timeparse import parse_clock, parse_time

logger = logging.getLogger(__name__)


class TimeGranularity(Enum):
    HOUR = "hour"
    MINUTE = "minute"


class DateComparisonMode(Enum):
    LEXICOGRAPHIC_STRING = "lexicographic_string"
    PARSED_CALENDAR_PERMISSIVE = "parsed_calendar_permissive"


class SignerMatch(Enum):
    RAW = "raw"
    UNASSIGNED_LABEL = "unassigned_label"


@dataclass(frozen=True)
class FilterMode:
    time_granularity: TimeGranularity
    date_comparison: DateComparisonMode
    signer_match: SignerMatch


WORKFLOW_MODE = FilterMode(
    time_granularity=TimeGranularity.HOUR,
    date_comparison=DateComparisonMode.LEXICOGRAPHIC_STRING,
    signer_match=SignerMatch.RAW,
)

PRODUCTIVITY_MODE = FilterMode(
    time_granularity=TimeGranularity.MINUTE,
    date_comparison=DateComparisonMode.PARSED_CALENDAR_PERMISSIVE,
    signer_match=SignerMatch.UNASSIGNED_LABEL,
)


# ---------------------------------------------------------------------------
# Criteria
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DateRange:
    start: str = ""
    end: str = ""

    @property
    def bounded(self) -> bool:
        return bool(self.start) and bool(self.end)


@dataclass(frozen=True)
class TimeRange:
    start: str = DEFAULT_TIME_START
    end: str = DEFAULT_TIME_END

    def bounds(self) -> Tuple[Tuple[int, int], Tuple[int, int]]:
        """((start_hour, start_minute), (end_hour, end_minute)); blanks mean full day."""
        return (
            parse_clock(self.start or DEFAULT_TIME_START),
            parse_clock(self.end or DEFAULT_TIME_END),
        )

    @property
    def is_full_day(self) -> bool:
        return self.bounds() == ((0, 0), (23, 59))


@dataclass(frozen=True)
class FilterCriteria:
    modalities: frozenset = field(default_factory=frozenset)
    statuses: frozenset = field(default_factory=frozenset)
    signers: frozenset = field(default_factory=frozenset)
    date_range: DateRange = field(default_factory=DateRange)
    time_range: TimeRange = field(default_factory=TimeRange)

    @classmethod
    def from_strings(
        cls,
        modalities: Optional[Iterable[str]] = None,
        statuses: Optional[Iterable[str]] = None,
        signers: Optional[Iterable[str]] = None,
        date_start: str = "",
        date_end: str = "",
        time_start: str = DEFAULT_TIME_START,
        time_end: str = DEFAULT_TIME_END,
    ) -> "FilterCriteria":
        """Build criteria from picker values; validates the time bounds."""
        time_range = TimeRange(time_start or DEFAULT_TIME_START, time_end or DEFAULT_TIME_END)
        time_range.bounds()
        return cls(
            modalities=frozenset(modalities or ()),
            statuses=frozenset(statuses or ()),
            signers=frozenset(signers or ()),
            date_range=DateRange(date_start or "", date_end or ""),
            time_range=time_range,
        )

    @classmethod
    def cleared(cls) -> "FilterCriteria":
        return cls()

    def is_unrestricted(self) -> bool:
        return (
            not self.modalities
            and not self.statuses
            and not self.signers
            and not self.date_range.bounded
            and self.time_range.is_full_day
        )


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def _in_selection(value: str, selection: frozenset) -> bool:
    return not selection or value in selection


def _parse_bound(value: str) -> Optional[date]:
    for fmt in BOUND_DATE_FORMATS:
        try:
            return datetime.strptime(value.strip(), fmt).date()
        except ValueError:
            continue
    return None


def _parse_record_date(value: str) -> Optional[date]:
    try:
        return datetime.strptime(value.strip(), RECORD_DATE_FORMAT).date()
    except ValueError:
        return None


def date_matches(record: StudyRecord, date_range: DateRange, mode: DateComparisonMode) -> bool:
    if not date_range.bounded:
        return True

    if mode is DateComparisonMode.LEXICOGRAPHIC_STRING:
        return date_range.start <= record.date <= date_range.end

    start = _parse_bound(date_range.start)
    end = _parse_bound(date_range.end)
    current = _parse_record_date(record.date)
    if start is None or end is None or current is None:
        return True
    return start <= current <= end


def time_matches(record: StudyRecord, time_range: TimeRange) -> bool:
    """Minute-granularity check used by the productivity view."""
    parsed = parse_time(record.time)
    if parsed is None:
        return False
    (sh, sm), (eh, em) = time_range.bounds()
    return sh * 60 + sm <= parsed.minute_of_day <= eh * 60 + em


def hour_in_range(hour: int, time_range: TimeRange) -> bool:
    """Hour-granularity check used for whole buckets."""
    (start_hour, _), (end_hour, _) = time_range.bounds()
    return start_hour <= hour <= end_hour


def record_matches(
    record: StudyRecord,
    criteria: FilterCriteria,
    mode: FilterMode = PRODUCTIVITY_MODE,
) -> bool:
    """
    True when the record passes every categorical and date predicate, and,
    in MINUTE mode, the time range as well. HOUR mode leaves the time range
    to filter_buckets().
    """
    signer = (
        record.signer_label if mode.signer_match is SignerMatch.UNASSIGNED_LABEL
        else record.report_signed_by
    )
    if not _in_selection(record.modality, criteria.modalities):
        return False
    if not _in_selection(record.status, criteria.statuses):
        return False
    if not _in_selection(signer, criteria.signers):
        return False
    if not date_matches(record, criteria.date_range, mode.date_comparison):
        return False
    if mode.time_granularity is TimeGranularity.MINUTE:
        return time_matches(record, criteria.time_range)
    return True


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------

def filter_buckets(
    buckets: Iterable[HourBucket],
    criteria: FilterCriteria,
    mode: FilterMode = WORKFLOW_MODE,
) -> Tuple[HourBucket, ...]:
    """Return new buckets with entries and counts recomputed under criteria."""
    result = []
    for bucket in buckets:
        if mode.time_granularity is TimeGranularity.HOUR and not hour_in_range(bucket.hour, criteria.time_range):
            result.append(bucket.emptied())
            continue
        result.append(bucket.with_entries(
            e for e in bucket.entries if record_matches(e, criteria, mode)
        ))
    return tuple(result)


def filter_records(
    records: Iterable[StudyRecord],
    criteria: FilterCriteria,
    mode: FilterMode = PRODUCTIVITY_MODE,
) -> Tuple[StudyRecord, ...]:
    """
    Return the records passing criteria, in input order.

    In HOUR mode the time range is applied per record at hour granularity so
    the result agrees with filter_buckets() for the same mode.
    """
    kept = []
    for record in records:
        if mode.time_granularity is TimeGranularity.HOUR:
            parsed = parse_time(record.time)
            if parsed is None or not hour_in_range(parsed.hour, criteria.time_range):
                continue
        if record_matches(record, criteria, mode):
            kept.append(record)
    return tuple(kept)
