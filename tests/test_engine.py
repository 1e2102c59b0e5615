"""
Tests for normalization, hourly bucketing, the filter engine and the views
"""

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from rad_analytics import RECOGNIZED_KEYS, get_config
from rad_analytics.buckets import HourBucket, build_hourly_buckets, empty_buckets, find_peak
from rad_analytics.engine import ProductivityView, WorkflowView, build_views
from rad_analytics.errors import TimeRangeError
from rad_analytics.filters import (
    PRODUCTIVITY_MODE,
    WORKFLOW_MODE,
    DateComparisonMode,
    DateRange,
    FilterCriteria,
    TimeRange,
    date_matches,
    filter_buckets,
    filter_records,
)
from rad_analytics.records import Skipped, StudyRecord, normalize_row, normalize_rows


def _counts(buckets):
    return {b.hour: b.count for b in buckets if b.count}


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

class TestNormalizeRow:

    def test_defaults(self):
        record = normalize_row({"Time": "10:00"})
        assert isinstance(record, StudyRecord)
        assert record.date == "N/A"
        assert record.patient_id == "N/A"
        assert record.modality == "N/A"
        assert record.body_part == "N/A"
        assert record.report_signed_by == ""
        assert record.timestamp == "N/A 10:00"

    def test_to_row_uses_recognized_keys(self):
        record = normalize_row({"Time": "10:00", "Mod.": "CT"})
        assert list(record.to_row()) == RECOGNIZED_KEYS
        assert get_config()["recognized_keys"] == RECOGNIZED_KEYS
        assert get_config()["dataset_key"] == "radiology_data"

    def test_time_trimmed(self):
        record = normalize_row({"Date": "01/01/2024", "Time": "  9:15 AM "})
        assert record.time == "9:15 AM"
        assert record.timestamp == "01/01/2024 9:15 AM"

    def test_missing_time_skipped(self):
        result = normalize_row({"Date": "01/01/2024", "Time": "   "}, row_index=4)
        assert isinstance(result, Skipped)
        assert result.reason == "missing time"
        assert result.row_index == 4

    def test_unparseable_time_skipped(self):
        result = normalize_row({"Time": "pending"})
        assert isinstance(result, Skipped)
        assert result.reason == "unparseable time"
        assert result.raw_time == "pending"

    def test_non_mapping_skipped(self):
        assert isinstance(normalize_row(["09:00"]), Skipped)

    def test_numeric_and_nan_cells(self):
        record = normalize_row({"Time": "10:00", "Patient ID": 12345.0, "Accession": 77, "Mod.": float("nan")})
        assert record.patient_id == "12345"
        assert record.accession == "77"
        assert record.modality == "N/A"

    def test_unrecognized_and_case_mismatched_keys_ignored(self):
        record = normalize_row({"Time": "10:00", "mod.": "CT", "Extra": "x"})
        assert record.modality == "N/A"


class TestNormalizeRows:

    def test_keeps_and_skips(self, mixed_rows):
        result = normalize_rows(mixed_rows)
        assert len(result.records) == 5
        assert result.skipped == 2
        assert {d.reason for d in result.diagnostics} == {"unparseable time", "missing time"}

    def test_filter_options(self, mixed_rows):
        options = normalize_rows(mixed_rows).options
        assert options.modalities == ["CT", "MR", "XR"]
        assert options.statuses == ["Final", "Prelim"]
        assert options.signers == ["Dr. A", "Dr. B"]
        assert options.productivity_signers == ["Dr. A", "Dr. B", "Unassigned"]


# ---------------------------------------------------------------------------
# Hourly aggregation
# ---------------------------------------------------------------------------

class TestHourlyBuckets:

    def test_scenario_counts(self, scenario_rows):
        dist = build_hourly_buckets(normalize_rows(scenario_rows).records)
        assert len(dist.buckets) == 24
        assert [b.hour for b in dist.buckets] == list(range(24))
        assert _counts(dist.buckets) == {9: 2, 14: 1}
        assert dist.valid_entries == 3

    def test_sum_equals_parsed_records(self, mixed_rows):
        records = normalize_rows(mixed_rows).records
        dist = build_hourly_buckets(records)
        assert sum(b.count for b in dist.buckets) == len(records)
        assert _counts(dist.buckets) == {0: 1, 9: 2, 14: 1, 23: 1}

    def test_empty_input_has_24_buckets(self):
        dist = build_hourly_buckets([])
        assert len(dist.buckets) == 24
        assert all(b.count == 0 and b.entries == () for b in dist.buckets)

    def test_empty_buckets(self):
        slots = empty_buckets()
        assert [b.hour for b in slots] == list(range(24))
        assert slots == build_hourly_buckets([]).buckets

    def test_entries_sorted_by_timestamp_string(self):
        records = normalize_rows([
            {"Date": "1/2/2024", "Time": "9:30"},
            {"Date": "1/10/2024", "Time": "9:00"},
        ]).records
        bucket = build_hourly_buckets(records).buckets[9]
        assert [e.date for e in bucket.entries] == ["1/10/2024", "1/2/2024"]

    def test_labels(self):
        bucket = HourBucket(hour=15)
        assert bucket.hour_label_24 == "15:00"
        assert bucket.hour_label_12 == "03:00 PM"
        assert bucket.label("12") == "03:00 PM"


class TestPeak:

    def test_tie_resolves_to_earliest(self):
        buckets = [HourBucket(0, 5), HourBucket(1, 5), HourBucket(2, 3)] + [HourBucket(h) for h in range(3, 24)]
        assert find_peak(buckets).hour == 0

    def test_later_strictly_greater_wins(self):
        buckets = [HourBucket(0, 1), HourBucket(1, 4), HourBucket(2, 4)]
        assert find_peak(buckets).hour == 1

    def test_empty_is_none(self):
        assert find_peak([HourBucket(h) for h in range(24)]) is None


# ---------------------------------------------------------------------------
# Filter engine
# ---------------------------------------------------------------------------

@pytest.fixture
def records(mixed_rows):
    return normalize_rows(mixed_rows).records


@pytest.fixture
def buckets(records):
    return build_hourly_buckets(records).buckets


CRITERIA_GRID = [
    FilterCriteria(),
    FilterCriteria(modalities=frozenset({"CT"})),
    FilterCriteria(statuses=frozenset({"Final"})),
    FilterCriteria(signers=frozenset({"Dr. A", "Dr. B"})),
    FilterCriteria(date_range=DateRange("01/02/2024", "01/04/2024")),
    FilterCriteria(time_range=TimeRange("09:30", "14:00")),
    FilterCriteria(modalities=frozenset({"CT", "XR"}), time_range=TimeRange("10:00", "23:59")),
]


class TestFilterBuckets:

    def test_identity_when_unrestricted(self, buckets):
        assert FilterCriteria().is_unrestricted()
        assert filter_buckets(buckets, FilterCriteria()) == buckets

    @pytest.mark.parametrize("criteria", CRITERIA_GRID)
    def test_count_matches_record_filter(self, records, buckets, criteria):
        filtered = filter_buckets(buckets, criteria, WORKFLOW_MODE)
        expected = filter_records(records, criteria, WORKFLOW_MODE)
        assert sum(b.count for b in filtered) == len(expected)
        assert sorted(e.timestamp for b in filtered for e in b.entries) == sorted(r.timestamp for r in expected)

    @pytest.mark.parametrize("criteria", CRITERIA_GRID)
    def test_idempotent(self, buckets, criteria):
        assert filter_buckets(buckets, criteria) == filter_buckets(buckets, criteria)

    def test_inputs_not_mutated(self, buckets):
        before = tuple(b.count for b in buckets)
        filter_buckets(buckets, FilterCriteria(modalities=frozenset({"MR"})))
        assert tuple(b.count for b in buckets) == before

    def test_modality(self, buckets):
        filtered = filter_buckets(buckets, FilterCriteria(modalities=frozenset({"CT"})))
        assert _counts(filtered) == {0: 1, 9: 1, 14: 1}

    def test_time_range_hour_granularity(self, buckets):
        # 09:30 start still keeps the 09:15 study: whole hour 9 is in range
        filtered = filter_buckets(buckets, FilterCriteria(time_range=TimeRange("09:30", "13:00")))
        assert _counts(filtered) == {9: 2}
        assert len(filtered) == 24
        assert filtered[14].entries == ()

    def test_signer_raw_in_workflow(self, buckets):
        filtered = filter_buckets(buckets, FilterCriteria(signers=frozenset({"Unassigned"})))
        assert sum(b.count for b in filtered) == 0

    def test_date_range_string_compare(self, buckets):
        filtered = filter_buckets(buckets, FilterCriteria(date_range=DateRange("01/02/2024", "01/03/2024")))
        assert _counts(filtered) == {14: 1, 23: 1}

    def test_half_open_date_range_is_unbounded(self, buckets):
        filtered = filter_buckets(buckets, FilterCriteria(date_range=DateRange("01/02/2024", "")))
        assert filtered == buckets


class TestFilterRecords:

    def test_time_range_minute_granularity(self, records):
        kept = filter_records(records, FilterCriteria(time_range=TimeRange("09:30", "13:00")))
        assert [r.time for r in kept] == ["09:45 AM"]

    def test_signer_unassigned_label(self, records):
        kept = filter_records(records, FilterCriteria(signers=frozenset({"Unassigned"})))
        assert [r.modality for r in kept] == ["XR"]

    def test_calendar_date_range(self, records):
        kept = filter_records(records, FilterCriteria(date_range=DateRange("2024-01-02", "2024-01-03")))
        assert sorted(r.date for r in kept) == ["01/02/2024", "01/03/2024"]

    def test_calendar_date_range_not_lexicographic(self):
        records = normalize_rows([{"Date": "1/9/2024", "Time": "10:00"}, {"Date": "1/10/2024", "Time": "10:00"}]).records
        kept = filter_records(records, FilterCriteria(date_range=DateRange("2024-01-09", "2024-01-10")))
        assert len(kept) == 2

    def test_half_open_calendar_date_range_is_unbounded(self, records):
        kept = filter_records(records, FilterCriteria(date_range=DateRange("2024-01-03", "")))
        assert kept == tuple(records)
        kept = filter_records(records, FilterCriteria(date_range=DateRange("", "2024-01-01")))
        assert kept == tuple(records)

    def test_overflowing_minutes_compare_as_minute_of_day(self):
        records = normalize_rows([{"Time": "10:75"}]).records
        assert records[0].time == "10:75"
        # 10:75 is minute 675, past 11:10 (670) but before 11:20 (680)
        assert filter_records(records, FilterCriteria(time_range=TimeRange("10:00", "11:10"))) == ()
        assert len(filter_records(records, FilterCriteria(time_range=TimeRange("10:00", "11:20")))) == 1

    def test_order_preserved(self, records):
        kept = filter_records(records, FilterCriteria())
        assert kept == tuple(records)


class TestDateComparisonModes:

    def test_permissive_on_unparseable_record_date(self):
        record = StudyRecord(date="N/A", time="10:00")
        dr = DateRange("2024-01-01", "2024-01-31")
        assert date_matches(record, dr, DateComparisonMode.PARSED_CALENDAR_PERMISSIVE)

    def test_permissive_on_unparseable_bound(self):
        record = StudyRecord(date="05/05/2024", time="10:00")
        dr = DateRange("someday", "2024-01-31")
        assert date_matches(record, dr, DateComparisonMode.PARSED_CALENDAR_PERMISSIVE)

    def test_us_style_bounds_accepted(self):
        record = StudyRecord(date="05/05/2024", time="10:00")
        dr = DateRange("01/01/2024", "01/31/2024")
        assert not date_matches(record, dr, DateComparisonMode.PARSED_CALENDAR_PERMISSIVE)

    def test_lexicographic_compares_raw_strings(self):
        record = StudyRecord(date="01/15/2024", time="10:00")
        dr = DateRange("2024-01-01", "2024-01-31")
        assert not date_matches(record, dr, DateComparisonMode.LEXICOGRAPHIC_STRING)


class TestFilterCriteria:

    def test_from_strings(self):
        criteria = FilterCriteria.from_strings(modalities=["CT", "CT"], time_start="", time_end="")
        assert criteria.modalities == frozenset({"CT"})
        assert criteria.time_range == TimeRange("00:00", "23:59")
        assert not criteria.is_unrestricted()

    def test_from_strings_rejects_bad_time(self):
        with pytest.raises(TimeRangeError):
            FilterCriteria.from_strings(time_start="25:00")

    def test_cleared_is_unrestricted(self):
        assert FilterCriteria.cleared().is_unrestricted()
        assert not FilterCriteria(time_range=TimeRange("08:00", "17:00")).is_unrestricted()


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------

class TestViews:

    def test_workflow_scenario(self, scenario_rows):
        views = build_views(scenario_rows)
        snap = views.workflow.apply()
        assert snap.total_studies == 3
        assert snap.active_hours == 2
        assert snap.peak.hour == 9

    def test_workflow_modality_filter_scenario(self, scenario_rows):
        views = build_views(scenario_rows)
        snap = views.workflow.apply(FilterCriteria(modalities=frozenset({"CT"})))
        assert snap.total_studies == 2
        assert _counts(snap.buckets) == {9: 1, 14: 1}
        assert snap.peak.hour == 9

    def test_workflow_buckets_built_once(self, scenario_rows):
        view = WorkflowView(normalize_rows(scenario_rows).records)
        original = view.buckets
        view.apply(FilterCriteria(modalities=frozenset({"MR"})))
        assert view.buckets is original

    def test_productivity_uses_minute_granularity(self, scenario_rows):
        view = ProductivityView(normalize_rows(scenario_rows).records)
        summary = view.apply(FilterCriteria(time_range=TimeRange("09:30", "23:59")))
        assert summary.total_studies == 2

    def test_empty_view(self):
        snap = WorkflowView.empty().apply()
        assert snap.total_studies == 0
        assert snap.peak is None
        assert len(snap.buckets) == 24
