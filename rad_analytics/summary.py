"""
summary.py — Summary report builder

Reduces a filtered workflow view plus the active FilterCriteria to the data
the export writers need. Three sections, always in this order:

  Overview               metric / value pairs
  Modality Distribution  modality / count pairs
  Applied Filters        filter / value pairs ("All" for an empty dimension)

No file I/O happens here; see exporter.py.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from rad_analytics.buckets import HourBucket, active_hours, find_peak, total_count
from rad_analytics.config import ALL_LABEL, DEFAULT_TIME_END, DEFAULT_TIME_START, NO_DATA_LABEL
from rad_analytics.filters import FilterCriteria

logger = logging.getLogger(__name__)

SECTION_OVERVIEW = "Overview"
SECTION_MODALITIES = "Modality Distribution"
SECTION_FILTERS = "Applied Filters"

SECTION_HEADERS: Dict[str, Tuple[str, str]] = {
    SECTION_OVERVIEW:   ("Metric", "Value"),
    SECTION_MODALITIES: ("Modality", "Count"),
    SECTION_FILTERS:    ("Filter", "Value"),
}


@dataclass(frozen=True)
class Overview:
    total_studies: int
    active_hours: int
    peak_hour: Optional[str]      # None when nothing passed the filter
    peak_hour_count: int

    @property
    def peak_hour_label(self) -> str:
        return self.peak_hour if self.peak_hour is not None else NO_DATA_LABEL


@dataclass(frozen=True)
class SummaryReport:
    overview: Overview
    modality_counts: List[Tuple[str, int]] = field(default_factory=list)
    applied_filters: List[Tuple[str, str]] = field(default_factory=list)

    def to_payload(self) -> Dict[str, List[Tuple[str, Any]]]:
        """Plain three-section structure handed to the export writers."""
        return {
            SECTION_OVERVIEW: [
                ("Total Studies", self.overview.total_studies),
                ("Active Hours", self.overview.active_hours),
                ("Peak Hour", self.overview.peak_hour_label),
                ("Peak Hour Studies", self.overview.peak_hour_count),
            ],
            SECTION_MODALITIES: list(self.modality_counts),
            SECTION_FILTERS: list(self.applied_filters),
        }


def _joined_or_all(values: Iterable[str]) -> str:
    return ", ".join(sorted(values)) or ALL_LABEL


def describe_filters(criteria: FilterCriteria) -> List[Tuple[str, str]]:
    dr, tr = criteria.date_range, criteria.time_range
    return [
        ("Date Range", f"{dr.start or ALL_LABEL} to {dr.end or ALL_LABEL}"),
        ("Time Range", f"{tr.start or DEFAULT_TIME_START} to {tr.end or DEFAULT_TIME_END}"),
        ("Selected Modalities", _joined_or_all(criteria.modalities)),
        ("Selected Statuses", _joined_or_all(criteria.statuses)),
        ("Selected Signers", _joined_or_all(criteria.signers)),
    ]


def count_modalities(buckets: Iterable[HourBucket]) -> List[Tuple[str, int]]:
    """Modality counts over all bucket entries, in first-seen order."""
    counts: Dict[str, int] = {}
    for bucket in buckets:
        for entry in bucket.entries:
            counts[entry.modality] = counts.get(entry.modality, 0) + 1
    return list(counts.items())


def build_summary(
    buckets: Iterable[HourBucket],
    criteria: FilterCriteria,
    time_format: str = "24",
) -> SummaryReport:
    """
    Build the summary for already-filtered buckets.

    time_format: "24" labels the peak hour "HH:00", "12" uses "hh:00 AM/PM".
    """
    buckets = tuple(buckets)
    peak = find_peak(buckets)
    overview = Overview(
        total_studies=total_count(buckets),
        active_hours=active_hours(buckets),
        peak_hour=peak.label(time_format) if peak else None,
        peak_hour_count=peak.count if peak else 0,
    )
    report = SummaryReport(
        overview=overview,
        modality_counts=count_modalities(buckets),
        applied_filters=describe_filters(criteria),
    )
    logger.debug(f"Summary built: {overview}")
    return report
