"""
RadAnalytics — Radiology workflow and staff productivity analytics

Modules:
- timeparse: Free-form study time parsing, hour labels
- records: Study record model, row normalization with skip diagnostics
- buckets: 24-slot hourly aggregation, peak hour
- filters: Filter criteria, filter engine (workflow / productivity modes)
- productivity: Per-staff and per-modality aggregation
- summary: Three-section summary report builder
- engine: Workflow and productivity views over one data set
- handoff: Session-scoped hand-off from ingestion to the views
- ingest: CSV / XLSX / PDF row extraction
- exporter: CSV, Excel, text and PDF summary writers
- config: Field names, sentinels, date patterns, output locations
- charts: matplotlib charts for both views
"""

from .config import RECOGNIZED_KEYS, get_config

from .timeparse import ParsedTime, parse_time, format_hour

from .records import (
    StudyRecord,
    Skipped,
    FilterOptions,
    normalize_row,
    normalize_rows,
)

from .buckets import HourBucket, build_hourly_buckets, empty_buckets, find_peak

from .filters import (
    DateComparisonMode,
    DateRange,
    FilterCriteria,
    FilterMode,
    PRODUCTIVITY_MODE,
    TimeGranularity,
    TimeRange,
    WORKFLOW_MODE,
    filter_buckets,
    filter_records,
)

from .productivity import aggregate_productivity

from .summary import build_summary

from .engine import ProductivityView, WorkflowView, build_views, load_views

from .handoff import SessionContext, clear_dataset, load_dataset, store_dataset

__all__ = [
    "RECOGNIZED_KEYS",
    "get_config",
    "ParsedTime",
    "parse_time",
    "format_hour",
    "StudyRecord",
    "Skipped",
    "FilterOptions",
    "normalize_row",
    "normalize_rows",
    "HourBucket",
    "build_hourly_buckets",
    "empty_buckets",
    "find_peak",
    "DateComparisonMode",
    "DateRange",
    "FilterCriteria",
    "FilterMode",
    "PRODUCTIVITY_MODE",
    "TimeGranularity",
    "TimeRange",
    "WORKFLOW_MODE",
    "filter_buckets",
    "filter_records",
    "aggregate_productivity",
    "build_summary",
    "ProductivityView",
    "WorkflowView",
    "build_views",
    "load_views",
    "SessionContext",
    "clear_dataset",
    "load_dataset",
    "store_dataset",
]
