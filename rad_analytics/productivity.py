"""
productivity.py — Staff / modality aggregation

Per-signer study counts, per-signer modality mix, overall modality
distribution and working days for an already-filtered record set.

Everything is rebuilt from scratch on each call; the result is a snapshot
that holds no reference back into the caller's data.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set, Tuple

from rad_analytics.config import MISSING_VALUE
from rad_analytics.records import StudyRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StaffAggregate:
    signer: str
    count: int
    studies: Tuple[StudyRecord, ...] = ()
    modalities: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class ModalityAggregate:
    modality: str
    count: int
    percentage: float


@dataclass(frozen=True)
class ProductivitySummary:
    staff: Tuple[StaffAggregate, ...]              # nonzero counts only
    staff_modalities: Tuple[StaffAggregate, ...]   # every signer seen
    modalities: Tuple[ModalityAggregate, ...]
    modalities_with_data: Tuple[ModalityAggregate, ...]
    working_days: int
    total_studies: int

    def staff_by_name(self) -> Dict[str, StaffAggregate]:
        return {s.signer: s for s in self.staff_modalities}

    def modality_columns(self, available: Iterable[str]) -> List[str]:
        """Modalities from `available` that at least one signer has studies in."""
        return [
            m for m in available
            if any(s.modalities.get(m, 0) > 0 for s in self.staff_modalities)
        ]


def percentage(count: int, total: int) -> float:
    return (count / total) * 100 if total > 0 else 0.0


def aggregate_productivity(records: Iterable[StudyRecord]) -> ProductivitySummary:
    """
    Single pass over records, keyed by signer and by modality at once.

    Sequences are sorted by count descending; equal counts keep first-seen
    order. Working days count distinct non-placeholder date values.
    """
    staff_counts: Dict[str, int] = {}
    staff_studies: Dict[str, List[StudyRecord]] = {}
    staff_modalities: Dict[str, Dict[str, int]] = {}
    modality_counts: Dict[str, int] = {}
    dates: Set[str] = set()
    total = 0

    for record in records:
        total += 1
        signer = record.signer_label
        modality = record.modality

        if record.date and record.date != MISSING_VALUE:
            dates.add(record.date)

        modality_counts[modality] = modality_counts.get(modality, 0) + 1

        staff_counts[signer] = staff_counts.get(signer, 0) + 1
        staff_studies.setdefault(signer, []).append(record)
        per_signer = staff_modalities.setdefault(signer, {})
        per_signer[modality] = per_signer.get(modality, 0) + 1

    all_staff = tuple(sorted(
        (
            StaffAggregate(
                signer=name,
                count=count,
                studies=tuple(staff_studies[name]),
                modalities=dict(staff_modalities[name]),
            )
            for name, count in staff_counts.items()
        ),
        key=lambda s: s.count,
        reverse=True,
    ))

    modalities = tuple(sorted(
        (
            ModalityAggregate(modality=m, count=c, percentage=percentage(c, total))
            for m, c in modality_counts.items()
        ),
        key=lambda m: m.count,
        reverse=True,
    ))

    logger.debug(f"Aggregated {total} studies across {len(all_staff)} signers, {len(dates)} days")
    return ProductivitySummary(
        staff=tuple(s for s in all_staff if s.count > 0),
        staff_modalities=all_staff,
        modalities=modalities,
        modalities_with_data=tuple(m for m in modalities if m.count > 0),
        working_days=len(dates),
        total_studies=total,
    )
