"""
buckets.py — Hourly workflow distribution

Places every StudyRecord into one of 24 fixed hour slots. All 24 buckets exist
whether or not any study falls in them, and they are always emitted 0 → 23.

Entries inside a bucket are ordered by the raw "date time" timestamp string.
That is a plain string sort: "1/10/2024" sorts before "1/2/2024".
"""

import logging
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional, Tuple

from rad_analytics.config import HOURS_PER_DAY
from rad_analytics.records import StudyRecord
from rad_analytics.timeparse import format_hour, parse_time

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HourBucket:
    hour: int
    count: int = 0
    entries: Tuple[StudyRecord, ...] = ()

    @property
    def hour_label_24(self) -> str:
        return format_hour(self.hour)[0]

    @property
    def hour_label_12(self) -> str:
        return format_hour(self.hour)[1]

    def label(self, time_format: str = "24") -> str:
        return self.hour_label_12 if time_format == "12" else self.hour_label_24

    def emptied(self) -> "HourBucket":
        return replace(self, count=0, entries=())

    def with_entries(self, entries: Iterable[StudyRecord]) -> "HourBucket":
        kept = tuple(entries)
        return replace(self, count=len(kept), entries=kept)


@dataclass(frozen=True)
class HourlyDistribution:
    buckets: Tuple[HourBucket, ...]
    valid_entries: int


def empty_buckets() -> Tuple[HourBucket, ...]:
    return tuple(HourBucket(hour=h) for h in range(HOURS_PER_DAY))


def build_hourly_buckets(records: Iterable[StudyRecord]) -> HourlyDistribution:
    """
    Bucket records by the hour of their raw time string.

    The hour is parsed again from record.time; records whose time no longer
    parses are left out (normalize_rows never produces those).
    """
    slots: Dict[int, List[StudyRecord]] = {h: [] for h in range(HOURS_PER_DAY)}
    valid = 0

    for record in records:
        parsed = parse_time(record.time)
        if parsed is None:
            logger.warning(f"Record with unparseable time {record.time!r} left out of buckets")
            continue
        slots[parsed.hour].append(record)
        valid += 1

    buckets = tuple(
        bucket.with_entries(sorted(slots[bucket.hour], key=lambda r: r.timestamp))
        for bucket in empty_buckets()
    )
    logger.info(f"Bucketed {valid} studies into {HOURS_PER_DAY} hourly slots")
    return HourlyDistribution(buckets=buckets, valid_entries=valid)


def total_count(buckets: Iterable[HourBucket]) -> int:
    return sum(b.count for b in buckets)


def active_hours(buckets: Iterable[HourBucket]) -> int:
    return sum(1 for b in buckets if b.count > 0)


def find_peak(buckets: Iterable[HourBucket]) -> Optional[HourBucket]:
    """
    Busiest bucket, scanning left to right with a strict greater-than.

    Ties go to the earliest hour. Returns None when every bucket is empty.
    """
    peak: Optional[HourBucket] = None
    for bucket in buckets:
        if bucket.count > (peak.count if peak else 0):
            peak = bucket
    return peak
