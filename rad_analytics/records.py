"""
records.py — Study record model and row normalization

Turns loosely-typed rows (CSV/XLSX/PDF extraction, or the session hand-off)
into immutable StudyRecord values.

A row whose Time field is missing or unparseable is skipped, never raised:
normalize_row() returns a Skipped value and normalize_rows() collects those
into a diagnostics list next to the kept records.
"""

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set, Union

from rad_analytics.config import (
    FIELD_ACCESSION,
    FIELD_BODY_PART,
    FIELD_DATE,
    FIELD_DESCRIPTION,
    FIELD_MODALITY,
    FIELD_PATIENT_ID,
    FIELD_PATIENT_NAME,
    FIELD_SIGNED_BY,
    FIELD_STATUS,
    FIELD_TIME,
    MISSING_VALUE,
    UNASSIGNED_LABEL,
    UNSIGNED_VALUE,
)
from rad_analytics.timeparse import parse_time

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StudyRecord:
    date: str
    time: str
    patient_id: str = MISSING_VALUE
    patient_name: str = MISSING_VALUE
    modality: str = MISSING_VALUE
    description: str = MISSING_VALUE
    status: str = MISSING_VALUE
    accession: str = MISSING_VALUE
    body_part: str = MISSING_VALUE
    report_signed_by: str = UNSIGNED_VALUE

    @property
    def timestamp(self) -> str:
        """Date and raw time joined for display and sorting only."""
        return f"{self.date} {self.time}"

    @property
    def signer_label(self) -> str:
        """Signer as shown in the productivity view."""
        return self.report_signed_by or UNASSIGNED_LABEL

    def to_row(self) -> Dict[str, str]:
        return {
            FIELD_DATE:         self.date,
            FIELD_TIME:         self.time,
            FIELD_PATIENT_ID:   self.patient_id,
            FIELD_PATIENT_NAME: self.patient_name,
            FIELD_MODALITY:     self.modality,
            FIELD_DESCRIPTION:  self.description,
            FIELD_STATUS:       self.status,
            FIELD_ACCESSION:    self.accession,
            FIELD_BODY_PART:    self.body_part,
            FIELD_SIGNED_BY:    self.report_signed_by,
        }


@dataclass(frozen=True)
class Skipped:
    reason: str
    row_index: Optional[int] = None
    raw_time: Optional[str] = None

    def __str__(self) -> str:
        where = f"row {self.row_index}" if self.row_index is not None else "row"
        if self.raw_time:
            return f"{where}: {self.reason} ({self.raw_time!r})"
        return f"{where}: {self.reason}"


NormalizedRow = Union[StudyRecord, Skipped]


@dataclass(frozen=True)
class FilterOptions:
    """Sorted distinct values offered by the filter pickers."""
    modalities: List[str] = field(default_factory=list)
    statuses: List[str] = field(default_factory=list)
    signers: List[str] = field(default_factory=list)
    productivity_signers: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class NormalizationResult:
    records: List[StudyRecord]
    diagnostics: List[Skipped]
    options: FilterOptions

    @property
    def skipped(self) -> int:
        return len(self.diagnostics)


# ---------------------------------------------------------------------------
# Cell helpers
# ---------------------------------------------------------------------------

def _cell(row: Mapping, key: str) -> str:
    """
    Read one cell as a trimmed string.

    None, NaN (pandas blanks) and whitespace-only values all come back as "".
    Numbers from spreadsheets are stringified (12345.0 → "12345").
    """
    value = row.get(key)
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def _or_missing(value: str) -> str:
    return value if value else MISSING_VALUE


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

def normalize_row(row: Any, row_index: Optional[int] = None) -> NormalizedRow:
    """Map one raw row to a StudyRecord, or to Skipped(reason)."""
    if not isinstance(row, Mapping):
        return Skipped("row is not a mapping", row_index)

    time_str = _cell(row, FIELD_TIME)
    if not time_str:
        return Skipped("missing time", row_index)
    if parse_time(time_str) is None:
        return Skipped("unparseable time", row_index, time_str)

    return StudyRecord(
        date=_or_missing(_cell(row, FIELD_DATE)),
        time=time_str,
        patient_id=_or_missing(_cell(row, FIELD_PATIENT_ID)),
        patient_name=_or_missing(_cell(row, FIELD_PATIENT_NAME)),
        modality=_or_missing(_cell(row, FIELD_MODALITY)),
        description=_or_missing(_cell(row, FIELD_DESCRIPTION)),
        status=_or_missing(_cell(row, FIELD_STATUS)),
        accession=_or_missing(_cell(row, FIELD_ACCESSION)),
        body_part=_or_missing(_cell(row, FIELD_BODY_PART)),
        report_signed_by=_cell(row, FIELD_SIGNED_BY),
    )


def normalize_rows(rows: Iterable[Any]) -> NormalizationResult:
    """
    Normalize a batch of rows.

    Collects the kept records in input order, one Skipped per dropped row and
    the distinct modality / status / signer values seen on kept records.
    """
    records: List[StudyRecord] = []
    diagnostics: List[Skipped] = []
    modalities: Set[str] = set()
    statuses: Set[str] = set()
    signers: Set[str] = set()
    productivity_signers: Set[str] = set()

    for idx, row in enumerate(rows):
        result = normalize_row(row, row_index=idx)
        if isinstance(result, Skipped):
            logger.debug(f"Skipped {result}")
            diagnostics.append(result)
            continue

        records.append(result)
        modalities.add(result.modality)
        statuses.add(result.status)
        if result.report_signed_by:
            signers.add(result.report_signed_by)
        productivity_signers.add(result.signer_label)

    options = FilterOptions(
        modalities=sorted(modalities),
        statuses=sorted(statuses),
        signers=sorted(signers),
        productivity_signers=sorted(productivity_signers),
    )
    logger.info(f"Normalized {len(records)} studies ({len(diagnostics)} rows skipped)")
    return NormalizationResult(records=records, diagnostics=diagnostics, options=options)
