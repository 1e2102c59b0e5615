"""
ingest.py — Row extraction from uploaded files

Supported inputs:
  - .csv   header row + one study per line (pandas)
  - .xlsx  first worksheet, header row + one study per row (pandas/openpyxl)
  - .pdf   text layer of worklist printouts (pypdf), one study per text line

Every reader returns a list of plain dicts keyed by the sheet's column headers.
No validation happens here beyond what the format needs; see records.py.
"""

import logging
import re
import zipfile
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

from rad_analytics.config import (
    FIELD_DATE,
    FIELD_DESCRIPTION,
    FIELD_MODALITY,
    FIELD_PATIENT_ID,
    FIELD_PATIENT_NAME,
    FIELD_STATUS,
    FIELD_TIME,
    PDF_MIN_TOKENS,
    SUPPORTED_EXTENSIONS,
)
from rad_analytics.errors import IngestError, UnsupportedFormatError

logger = logging.getLogger(__name__)

Row = Dict[str, Any]

# PDF rows only count when the time carries an explicit AM/PM marker
PDF_TIME_PATTERN = re.compile(r"\d{1,2}:\d{2}\s*(?:AM|PM)", re.IGNORECASE)


def _frame_to_rows(df: Any) -> List[Row]:
    df = df.dropna(how="all")
    return df.to_dict(orient="records")


# ---------------------------------------------------------------------------
# Tabular readers
# ---------------------------------------------------------------------------

def read_csv_rows(path: Path) -> List[Row]:
    """Read a delimited-text worklist; every cell comes back as a string."""
    import pandas as pd

    df = pd.read_csv(path, dtype=str, keep_default_na=False, skip_blank_lines=True)
    df.columns = [str(c).strip() for c in df.columns]
    rows = _frame_to_rows(df)
    logger.info(f"Read {len(rows)} rows from {path}")
    return rows


def read_xlsx_rows(path: Path) -> List[Row]:
    """Read the first worksheet of an Excel workbook."""
    import pandas as pd

    df = pd.read_excel(path, sheet_name=0, dtype=str, engine="openpyxl")
    df.columns = [str(c).strip() for c in df.columns]
    rows = _frame_to_rows(df)
    logger.info(f"Read {len(rows)} rows from {path}")
    return rows


# ---------------------------------------------------------------------------
# PDF reader
# ---------------------------------------------------------------------------

def parse_pdf_line(line: str) -> Union[Row, None]:
    """
    Map one text line to a row.

    Layout: Date, Patient ID, Patient Name, Mod., Description, Status, ...
    with a "H:MM AM|PM" time somewhere on the line.
    """
    parts = line.split()
    if len(parts) < PDF_MIN_TOKENS:
        return None
    match = PDF_TIME_PATTERN.search(line)
    if not match:
        return None
    return {
        FIELD_DATE:         parts[0],
        FIELD_TIME:         match.group(0),
        FIELD_PATIENT_ID:   parts[1],
        FIELD_PATIENT_NAME: parts[2],
        FIELD_MODALITY:     parts[3],
        FIELD_DESCRIPTION:  parts[4],
        FIELD_STATUS:       parts[5],
    }


def read_pdf_rows(path: Path) -> List[Row]:
    """Extract study rows from every page's text layer."""
    from pypdf import PdfReader

    reader = PdfReader(str(path))
    rows: List[Row] = []
    for page_no, page in enumerate(reader.pages, start=1):
        try:
            text = page.extract_text() or ""
        except Exception as e:
            logger.warning(f"Could not read text from page {page_no} of {path}: {e}")
            continue
        for line in text.splitlines():
            row = parse_pdf_line(line)
            if row is not None:
                rows.append(row)

    logger.info(f"Read {len(rows)} rows from {len(reader.pages)} PDF pages in {path}")
    return rows


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

def _read_errors() -> Tuple[type, ...]:
    import pandas as pd
    from openpyxl.utils.exceptions import InvalidFileException
    from pypdf.errors import PdfReadError

    return (
        PdfReadError,
        InvalidFileException,
        zipfile.BadZipFile,
        pd.errors.ParserError,
        pd.errors.EmptyDataError,
        UnicodeDecodeError,
        KeyError,
    )


READERS = {
    ".csv":  read_csv_rows,
    ".xlsx": read_xlsx_rows,
    ".pdf":  read_pdf_rows,
}


def load_rows(path: Union[str, Path]) -> List[Row]:
    """
    Extract rows from a worklist file, choosing the reader by extension.

    Raises:
        FileNotFoundError:      path does not exist
        UnsupportedFormatError: extension is not .csv, .xlsx or .pdf
        IngestError:            file is corrupt or not in the format its
                                extension claims
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFormatError(
            f"Unsupported file format '{suffix or path.name}'. "
            "Please upload an Excel, CSV, or PDF file."
        )
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    try:
        return READERS[suffix](path)
    except _read_errors() as e:
        logger.error(f"Failed to read {path}: {e}")
        raise IngestError(f"Error processing file {path.name}: {e}") from e
