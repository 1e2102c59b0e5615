"""
report.py — Command-line RadAnalytics run

Full orchestration:
  1. Extract rows from the uploaded worklist (.csv / .xlsx / .pdf)
  2. Hand the rows to the analysis session
  3. Build the workflow and productivity views, apply the filters
  4. Print the hourly distribution and staff breakdown
  5. Export the summary report (and optional charts / detail files)

Usage:
  python -m rad_analytics.report --input worklist.csv
  python -m rad_analytics.report --input worklist.xlsx --modality CT,MR \
      --start-time 08:00 --end-time 17:59 --export xlsx,pdf --visual
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from rad_analytics.charts import CHART_TYPES, generate_charts
from rad_analytics.config import DEFAULT_TIME_END, DEFAULT_TIME_START, OUTPUTS_DIR
from rad_analytics.engine import load_views
from rad_analytics.errors import RadAnalyticsError, TimeRangeError
from rad_analytics.exporter import (
    SUMMARY_WRITERS,
    export_hourly,
    export_staff_csv,
    export_summary,
)
from rad_analytics.filters import FilterCriteria
from rad_analytics.handoff import SessionContext, store_dataset
from rad_analytics.ingest import load_rows

logger = logging.getLogger(__name__)


def _split_list(values: Optional[List[str]]) -> List[str]:
    """Flatten repeated / comma-separated flag values."""
    out: List[str] = []
    for value in values or []:
        out += [v.strip() for v in value.split(",") if v.strip()]
    return out


# ---------------------------------------------------------------------------
# Main orchestrator
# ---------------------------------------------------------------------------

def run_report(
    input_path: Path,
    criteria: Optional[FilterCriteria] = None,
    output_dir: Path = OUTPUTS_DIR,
    formats: Optional[List[str]] = None,
    time_format: str = "24",
    visual: bool = False,
    chart_type: str = "line",
    details: bool = False,
) -> Dict[str, Any]:
    """
    Run both views over one input file and export the summary.

    Returns:
        Dict with workflow snapshot, productivity summary, summary report,
        skipped-row diagnostics and output paths.
    """
    criteria = criteria or FilterCriteria.cleared()
    formats = formats if formats is not None else ["xlsx", "pdf"]
    output_dir = Path(output_dir)
    sep = "=" * 70

    print(f"\n{sep}")
    print(f"  RADANALYTICS REPORT — {Path(input_path).name}")
    print(f"{sep}\n")

    # ── 1. Extract ─────────────────────────────────────────────────────────
    print("Step 1/5: Reading input...")
    rows = load_rows(input_path)
    print(f"  ✓ {len(rows)} rows")

    # ── 2. Session hand-off ────────────────────────────────────────────────
    print("\nStep 2/5: Storing data set in session...")
    session = SessionContext()
    store_dataset(session, rows)

    # ── 3. Views ───────────────────────────────────────────────────────────
    print("\nStep 3/5: Building views...")
    views = load_views(session)
    if not views.ok:
        print(f"  ✗ {views.error}")
    print(f"  ✓ {views.workflow.total_entries} studies | {len(views.diagnostics)} rows skipped")
    for skipped in views.diagnostics[:10]:
        print(f"    ⚠ {skipped}")
    if len(views.diagnostics) > 10:
        print(f"    ... {len(views.diagnostics) - 10} more")

    snapshot = views.workflow.apply(criteria)
    productivity = views.productivity.apply(criteria)
    summary = views.workflow.summary(criteria, time_format=time_format)

    # ── 4. Console output ──────────────────────────────────────────────────
    print("\nStep 4/5: Results")
    print("─" * 70)
    print("  Hourly Workflow")
    print("─" * 70)
    for bucket in snapshot.buckets:
        if bucket.count:
            print(f"  {bucket.label(time_format):<10} {bucket.count:>6}  {'█' * min(bucket.count, 50)}")
    ov = summary.overview
    print(f"\n  Total studies:   {ov.total_studies}")
    print(f"  Active hours:    {ov.active_hours}")
    print(f"  Peak hour:       {ov.peak_hour_label} ({ov.peak_hour_count} studies)")

    print("\n" + "─" * 70)
    print("  Staff Productivity")
    print("─" * 70)
    print(f"  Total studies: {productivity.total_studies} | Working days: {productivity.working_days}")
    for staff in productivity.staff:
        mix = ", ".join(f"{m}={c}" for m, c in sorted(staff.modalities.items()))
        print(f"  {staff.signer:<24} {staff.count:>6}   {mix}")
    print("\n  Modality distribution:")
    for m in productivity.modalities:
        print(f"    {m.modality:<12} {m.count:>6}  {m.percentage:5.1f}%")

    # ── 5. Export ──────────────────────────────────────────────────────────
    print("\nStep 5/5: Exporting...")
    outputs: Dict[str, Path] = {}
    if formats:
        outputs.update(export_summary(summary.to_payload(), output_dir, formats=formats))
    if details:
        outputs["hourly"] = export_hourly(snapshot.buckets, output_dir / "hourly_distribution.csv")
        outputs["staff"] = export_staff_csv(productivity, output_dir / "staff_productivity.csv")
    if visual:
        for key, path in generate_charts(
            snapshot.buckets, productivity, output_dir,
            chart_type=chart_type, time_format=time_format,
        ).items():
            outputs[f"chart_{key}"] = path
    for key, path in outputs.items():
        print(f"  ✓ {key:<22} {path.name}")

    print(f"\n{sep}\n")

    return {
        "workflow":     snapshot,
        "productivity": productivity,
        "summary":      summary,
        "diagnostics":  views.diagnostics,
        "error":        views.error,
        "outputs":      outputs,
    }


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Hourly workflow and staff productivity report for a radiology worklist"
    )
    parser.add_argument("--input",       required=True, help="Worklist file (.csv, .xlsx, .pdf)")
    parser.add_argument("--modality",    action="append", help="Modality filter (repeat or comma-separate)")
    parser.add_argument("--status",      action="append", help="Status filter (repeat or comma-separate)")
    parser.add_argument("--signer",      action="append", help="Report signer filter (repeat or comma-separate)")
    parser.add_argument("--start-date",  default="", help="Date range start")
    parser.add_argument("--end-date",    default="", help="Date range end")
    parser.add_argument("--start-time",  default=DEFAULT_TIME_START, help="Time range start HH:MM")
    parser.add_argument("--end-time",    default=DEFAULT_TIME_END,   help="Time range end HH:MM")
    parser.add_argument("--time-format", choices=["12", "24"], default="24", help="Hour label format")
    parser.add_argument(
        "--export",
        default="xlsx,pdf",
        help=f"Summary formats, comma-separated ({', '.join(SUMMARY_WRITERS)}); empty to skip",
    )
    parser.add_argument("--output-dir",  default=None, help="Output directory (default: outputs/)")
    parser.add_argument("--details",     action="store_true", help="Also export hourly and staff detail CSVs")
    parser.add_argument("--visual",      action="store_true", help="Generate matplotlib charts")
    parser.add_argument("--chart-type",  choices=CHART_TYPES, default="line", help="Hourly chart type")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    args = build_parser().parse_args(argv)

    try:
        criteria = FilterCriteria.from_strings(
            modalities=_split_list(args.modality),
            statuses=_split_list(args.status),
            signers=_split_list(args.signer),
            date_start=args.start_date,
            date_end=args.end_date,
            time_start=args.start_time,
            time_end=args.end_time,
        )
    except TimeRangeError as e:
        print(f"Invalid time range: {e}")
        return 1

    out_dir = Path(args.output_dir) if args.output_dir else OUTPUTS_DIR
    try:
        run_report(
            Path(args.input),
            criteria=criteria,
            output_dir=out_dir,
            formats=_split_list([args.export]),
            time_format=args.time_format,
            visual=args.visual,
            chart_type=args.chart_type,
            details=args.details,
        )
    except (RadAnalyticsError, FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
