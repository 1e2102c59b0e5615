"""
exporter.py — Export Layer for RadAnalytics summaries

Outputs (all carry the same three sections: Overview, Modality Distribution,
Applied Filters):
  - CSV (.csv):   flat rows, one section after another
  - Excel (.xlsx): single "Summary Report" sheet, styled section headers
  - Text (.txt):  fixed-width console style report
  - PDF (.pdf):   title + one table per section (reportlab)

Plus detail exports for the views themselves:
  - hourly distribution (.csv / .xlsx)
  - staff productivity (.csv)

Usage:
  from rad_analytics.exporter import export_summary
  export_summary(report.to_payload(), outputs_dir, formats=["xlsx", "pdf"])
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from rad_analytics.buckets import HourBucket
from rad_analytics.config import REPORT_BASENAME, REPORT_TITLE
from rad_analytics.productivity import ProductivitySummary
from rad_analytics.summary import SECTION_HEADERS

logger = logging.getLogger(__name__)

Payload = Dict[str, List[Tuple[str, Any]]]


def _generated_stamp(generated_at: Optional[datetime]) -> str:
    return (generated_at or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")


def payload_rows(payload: Payload, generated_at: Optional[datetime] = None) -> List[List[Any]]:
    """Lay the payload out as spreadsheet rows (title, stamp, then each section)."""
    rows: List[List[Any]] = [
        [REPORT_TITLE],
        ["Generated on", _generated_stamp(generated_at)],
    ]
    for section, pairs in payload.items():
        rows.append([])
        rows.append([section])
        rows.append(list(SECTION_HEADERS.get(section, ("", ""))))
        for key, value in pairs:
            rows.append([key, value])
    return rows


# ---------------------------------------------------------------------------
# CSV Export
# ---------------------------------------------------------------------------

def export_summary_csv(
    payload: Payload,
    output_path: Path,
    generated_at: Optional[datetime] = None,
) -> Path:
    import csv
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", newline="") as f:
        writer = csv.writer(f)
        for row in payload_rows(payload, generated_at):
            writer.writerow(row)

    logger.info(f"Summary CSV exported → {output_path}")
    return output_path


# ---------------------------------------------------------------------------
# Excel Export
# ---------------------------------------------------------------------------

def export_summary_excel(
    payload: Payload,
    output_path: Path,
    generated_at: Optional[datetime] = None,
) -> Path:
    """Write the summary to one worksheet named after the report title."""
    import pandas as pd

    output_path.parent.mkdir(parents=True, exist_ok=True)
    rows = payload_rows(payload, generated_at)
    width = max(len(r) for r in rows)
    df = pd.DataFrame([r + [None] * (width - len(r)) for r in rows])

    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=REPORT_TITLE, index=False, header=False)
        _format_summary_sheet(writer, REPORT_TITLE, set(payload))

    logger.info(f"Summary Excel exported → {output_path}")
    return output_path


def _format_summary_sheet(writer: Any, sheet_name: str, section_titles: set) -> None:
    """Bold title and section rows, shaded column headers, fitted widths."""
    try:
        from openpyxl.styles import Font, PatternFill
        ws = writer.sheets[sheet_name]
        header_fill = PatternFill("solid", fgColor="1F4E79")
        header_font = Font(bold=True, color="FFFFFF")
        header_values = {h for pair in SECTION_HEADERS.values() for h in pair}

        ws["A1"].font = Font(bold=True, size=14)
        previous_was_section = False
        for row in ws.iter_rows():
            first = row[0]
            if first.value in section_titles:
                first.font = Font(bold=True, size=12)
                previous_was_section = True
                continue
            if previous_was_section and first.value in header_values:
                for cell in row:
                    if cell.value is not None:
                        cell.fill = header_fill
                        cell.font = header_font
            previous_was_section = False

        for col in ws.columns:
            max_len = max((len(str(c.value)) for c in col if c.value is not None), default=8)
            ws.column_dimensions[col[0].column_letter].width = min(max_len + 2, 40)

    except Exception as e:
        logger.warning(f"Excel formatting failed (non-critical): {e}")


# ---------------------------------------------------------------------------
# Text Export
# ---------------------------------------------------------------------------

def render_summary_text(payload: Payload, generated_at: Optional[datetime] = None) -> str:
    sep = "=" * 60
    lines = [
        sep,
        f"  {REPORT_TITLE.upper()}",
        f"  Generated on {_generated_stamp(generated_at)}",
        sep,
    ]
    for section, pairs in payload.items():
        left, right = SECTION_HEADERS.get(section, ("", ""))
        lines += [
            "",
            "─" * 60,
            f"  {section}",
            "─" * 60,
            f"  {left:<28} {right}",
        ]
        if not pairs:
            lines.append("  (none)")
        for key, value in pairs:
            lines.append(f"  {str(key):<28} {value}")
    lines += ["", sep]
    return "\n".join(lines)


def export_summary_text(
    payload: Payload,
    output_path: Path,
    generated_at: Optional[datetime] = None,
) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(render_summary_text(payload, generated_at))
    logger.info(f"Summary text report exported → {output_path}")
    return output_path


# ---------------------------------------------------------------------------
# PDF Export
# ---------------------------------------------------------------------------

def export_summary_pdf(
    payload: Payload,
    output_path: Path,
    generated_at: Optional[datetime] = None,
) -> Path:
    """One reportlab table per section, under the report title."""
    from reportlab.lib import colors
    from reportlab.lib.pagesizes import letter
    from reportlab.lib.styles import getSampleStyleSheet
    from reportlab.lib.units import inch
    from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

    output_path.parent.mkdir(parents=True, exist_ok=True)
    styles = getSampleStyleSheet()
    table_style = TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#1F4E79")),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 10),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#D1D5DB")),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#EBF3FB")]),
        ("LEFTPADDING", (0, 0), (-1, -1), 6),
        ("RIGHTPADDING", (0, 0), (-1, -1), 6),
    ])

    story: List[Any] = [
        Paragraph(REPORT_TITLE, styles["Title"]),
        Paragraph(f"Generated on {_generated_stamp(generated_at)}", styles["Normal"]),
        Spacer(1, 0.2 * inch),
    ]
    for section, pairs in payload.items():
        story.append(Paragraph(section, styles["Heading2"]))
        data = [list(SECTION_HEADERS.get(section, ("", "")))]
        data += [[str(k), str(v)] for k, v in pairs]
        table = Table(data, colWidths=[2.75 * inch, 3.75 * inch])
        table.setStyle(table_style)
        story.append(table)
        story.append(Spacer(1, 0.2 * inch))

    doc = SimpleDocTemplate(
        str(output_path),
        pagesize=letter,
        leftMargin=0.75 * inch,
        rightMargin=0.75 * inch,
        topMargin=0.75 * inch,
        bottomMargin=0.75 * inch,
    )
    doc.build(story)
    logger.info(f"Summary PDF exported → {output_path}")
    return output_path


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

SUMMARY_WRITERS = {
    "csv":  export_summary_csv,
    "xlsx": export_summary_excel,
    "txt":  export_summary_text,
    "pdf":  export_summary_pdf,
}


def export_summary(
    payload: Payload,
    output_dir: Path,
    formats: Sequence[str] = ("xlsx", "pdf"),
    basename: str = REPORT_BASENAME,
    generated_at: Optional[datetime] = None,
) -> Dict[str, Path]:
    """Write the payload in each requested format. Returns {format: path}."""
    written: Dict[str, Path] = {}
    for fmt in formats:
        fmt = fmt.lower().lstrip(".")
        writer = SUMMARY_WRITERS.get(fmt)
        if writer is None:
            raise ValueError(f"Unknown export format '{fmt}'. Choose from: {', '.join(SUMMARY_WRITERS)}")
        written[fmt] = writer(payload, Path(output_dir) / f"{basename}.{fmt}", generated_at)
    return written


# ---------------------------------------------------------------------------
# View detail exports
# ---------------------------------------------------------------------------

def hourly_frame(buckets: Iterable[HourBucket]) -> Any:
    import pandas as pd
    return pd.DataFrame([
        {"Hour": b.hour_label_24, "Hour (12h)": b.hour_label_12, "Studies": b.count}
        for b in buckets
    ])


def export_hourly(buckets: Iterable[HourBucket], output_path: Path) -> Path:
    """Hourly distribution as .csv or .xlsx, chosen by the path's suffix."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df = hourly_frame(buckets)
    if output_path.suffix.lower() == ".xlsx":
        df.to_excel(output_path, index=False, sheet_name="Hourly")
    else:
        df.to_csv(output_path, index=False)
    logger.info(f"Hourly distribution exported → {output_path}")
    return output_path


def export_staff_csv(summary: ProductivitySummary, output_path: Path) -> Path:
    """Staff × modality grid: one row per signer, one column per modality."""
    import pandas as pd

    output_path.parent.mkdir(parents=True, exist_ok=True)
    modalities = [m.modality for m in summary.modalities]
    rows = []
    for staff in summary.staff:
        row: Dict[str, Any] = {"Report Signed By": staff.signer, "Studies": staff.count}
        for m in modalities:
            row[m] = staff.modalities.get(m, 0)
        rows.append(row)
    pd.DataFrame(rows, columns=["Report Signed By", "Studies"] + modalities).to_csv(output_path, index=False)
    logger.info(f"Staff productivity exported → {output_path}")
    return output_path
