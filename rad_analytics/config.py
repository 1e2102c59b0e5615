"""
config.py — Configuration Module for RadAnalytics

Field names, default sentinels, date patterns and output locations shared by
the ingestion, filtering and export layers.

Row keys are exact-match and case-sensitive. RECOGNIZED_KEYS lists the
columns a worklist may carry, in StudyRecord.to_row() order. normalize_row
reads the FIELD_* keys one by one and ignores every other key.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
OUTPUTS_DIR = PROJECT_ROOT / "outputs"


# ---------------------------------------------------------------------------
# Row schema
# ---------------------------------------------------------------------------

FIELD_DATE         = "Date"
FIELD_TIME         = "Time"
FIELD_PATIENT_ID   = "Patient ID"
FIELD_PATIENT_NAME = "Patient Name"
FIELD_MODALITY     = "Mod."
FIELD_DESCRIPTION  = "Description"
FIELD_STATUS       = "Status"
FIELD_ACCESSION    = "Accession"
FIELD_BODY_PART    = "Body Part"
FIELD_SIGNED_BY    = "Report Signed By"

RECOGNIZED_KEYS: List[str] = [
    FIELD_DATE,
    FIELD_TIME,
    FIELD_PATIENT_ID,
    FIELD_PATIENT_NAME,
    FIELD_MODALITY,
    FIELD_DESCRIPTION,
    FIELD_STATUS,
    FIELD_ACCESSION,
    FIELD_BODY_PART,
    FIELD_SIGNED_BY,
]


# ---------------------------------------------------------------------------
# Defaults / sentinels
# ---------------------------------------------------------------------------

MISSING_VALUE = "N/A"          # default for every field except the signer
UNSIGNED_VALUE = ""            # workflow view: absent signer
UNASSIGNED_LABEL = "Unassigned"  # productivity view: absent signer
ALL_LABEL = "All"              # applied-filter echo for an empty dimension
NO_DATA_LABEL = "No data"      # peak hour when nothing passes the filter

HOURS_PER_DAY = 24


# ---------------------------------------------------------------------------
# Date / time patterns
# ---------------------------------------------------------------------------

# Source rows carry US-style dates (e.g. 01/31/2024)
RECORD_DATE_FORMAT = "%m/%d/%Y"

# Range bounds come from date pickers (ISO) but typed US dates are accepted too
BOUND_DATE_FORMATS: Tuple[str, ...] = ("%Y-%m-%d", "%m/%d/%Y")

DEFAULT_TIME_START = "00:00"
DEFAULT_TIME_END   = "23:59"


# ---------------------------------------------------------------------------
# Session hand-off / ingestion
# ---------------------------------------------------------------------------

DATASET_KEY = "radiology_data"

SUPPORTED_EXTENSIONS: Tuple[str, ...] = (".csv", ".xlsx", ".pdf")

# A PDF text line needs at least this many whitespace tokens to be a study row
PDF_MIN_TOKENS = 6


# ---------------------------------------------------------------------------
# Export / charts
# ---------------------------------------------------------------------------

REPORT_TITLE = "Summary Report"
REPORT_BASENAME = "radiology-summary-report"

CHART_COLORS: List[str] = [
    "#4f46e5", "#06b6d4", "#8b5cf6", "#ec4899",
    "#f97316", "#84cc16", "#14b8a6", "#6366f1",
    "#a855f7", "#f43f5e", "#f59e0b",
]


def get_config() -> Dict[str, Any]:
    return {
        "recognized_keys":    list(RECOGNIZED_KEYS),
        "missing_value":      MISSING_VALUE,
        "unassigned_label":   UNASSIGNED_LABEL,
        "record_date_format": RECORD_DATE_FORMAT,
        "bound_date_formats": BOUND_DATE_FORMATS,
        "default_time_range": (DEFAULT_TIME_START, DEFAULT_TIME_END),
        "dataset_key":        DATASET_KEY,
        "outputs_dir":        OUTPUTS_DIR,
        "chart_colors":       list(CHART_COLORS),
    }
