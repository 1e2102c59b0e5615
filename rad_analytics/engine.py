"""
engine.py — Analytic views over one ingested data set

WorkflowView     hourly distribution; buckets are built once, filters are
                 applied to the buckets (hour-granularity time range,
                 string date range)
ProductivityView per-staff breakdown; filters are applied to the records
                 (minute-granularity time range, calendar date range)

Each apply() call recomputes its whole result from the unfiltered input.
Nothing is patched incrementally and no result is cached between calls.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from rad_analytics.buckets import (
    HourBucket,
    active_hours,
    build_hourly_buckets,
    find_peak,
    total_count,
)
from rad_analytics.errors import DatasetDecodeError
from rad_analytics.filters import (
    PRODUCTIVITY_MODE,
    WORKFLOW_MODE,
    FilterCriteria,
    filter_buckets,
    filter_records,
)
from rad_analytics.handoff import SessionContext, load_dataset
from rad_analytics.productivity import ProductivitySummary, aggregate_productivity
from rad_analytics.records import FilterOptions, Skipped, StudyRecord, normalize_rows
from rad_analytics.summary import SummaryReport, build_summary

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Error processing data. Please try uploading the file again."


# ---------------------------------------------------------------------------
# Workflow view
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class WorkflowSnapshot:
    buckets: Tuple[HourBucket, ...]
    total_studies: int
    active_hours: int
    peak: Optional[HourBucket]


class WorkflowView:
    """Hourly workflow distribution for one data set."""

    def __init__(
        self,
        records: Iterable[StudyRecord],
        options: Optional[FilterOptions] = None,
    ):
        self.records: Tuple[StudyRecord, ...] = tuple(records)
        self.options = options or FilterOptions()
        distribution = build_hourly_buckets(self.records)
        self.buckets = distribution.buckets
        self.total_entries = distribution.valid_entries

    @classmethod
    def empty(cls) -> "WorkflowView":
        return cls([])

    def apply(self, criteria: Optional[FilterCriteria] = None) -> WorkflowSnapshot:
        criteria = criteria or FilterCriteria.cleared()
        buckets = filter_buckets(self.buckets, criteria, WORKFLOW_MODE)
        return WorkflowSnapshot(
            buckets=buckets,
            total_studies=total_count(buckets),
            active_hours=active_hours(buckets),
            peak=find_peak(buckets),
        )

    def summary(
        self,
        criteria: Optional[FilterCriteria] = None,
        time_format: str = "24",
    ) -> SummaryReport:
        criteria = criteria or FilterCriteria.cleared()
        return build_summary(self.apply(criteria).buckets, criteria, time_format)


# ---------------------------------------------------------------------------
# Productivity view
# ---------------------------------------------------------------------------

class ProductivityView:
    """Per-staff productivity breakdown for one data set."""

    def __init__(
        self,
        records: Iterable[StudyRecord],
        options: Optional[FilterOptions] = None,
    ):
        self.records: Tuple[StudyRecord, ...] = tuple(records)
        self.options = options or FilterOptions()

    @classmethod
    def empty(cls) -> "ProductivityView":
        return cls([])

    def filtered(self, criteria: Optional[FilterCriteria] = None) -> Tuple[StudyRecord, ...]:
        return filter_records(self.records, criteria or FilterCriteria.cleared(), PRODUCTIVITY_MODE)

    def apply(self, criteria: Optional[FilterCriteria] = None) -> ProductivitySummary:
        return aggregate_productivity(self.filtered(criteria))


# ---------------------------------------------------------------------------
# Loading from the session hand-off
# ---------------------------------------------------------------------------

@dataclass
class ViewLoadResult:
    workflow: WorkflowView
    productivity: ProductivityView
    diagnostics: List[Skipped] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def build_views(rows: Iterable[Dict[str, Any]]) -> ViewLoadResult:
    """Normalize rows once and build both views on the result."""
    result = normalize_rows(rows)
    return ViewLoadResult(
        workflow=WorkflowView(result.records, result.options),
        productivity=ProductivityView(result.records, result.options),
        diagnostics=list(result.diagnostics),
    )


def load_views(session: SessionContext) -> ViewLoadResult:
    """
    Build both views from the session's data set.

    A missing data set raises MissingDatasetError (the caller goes back to
    ingestion). A data set that cannot be decoded gives empty views and one
    error message instead of raising.
    """
    try:
        rows = load_dataset(session)
    except DatasetDecodeError as e:
        logger.warning(f"Could not decode stored data set: {e}")
        return ViewLoadResult(
            workflow=WorkflowView.empty(),
            productivity=ProductivityView.empty(),
            error=LOAD_ERROR_MESSAGE,
        )
    return build_views(rows)

