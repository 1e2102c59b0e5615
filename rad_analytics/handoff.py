"""
handoff.py — Session-scoped hand-off between ingestion and the analytic views

The ingestion step stores the extracted rows once; each view reads them back.
Returning to ingestion clears the entry.

Usage:
  session = SessionContext()
  store_dataset(session, rows)        # after a successful upload
  rows = load_dataset(session)        # in each view
  clear_dataset(session)              # back to ingestion
"""

import json
import logging
from typing import Any, Dict, Iterable, List, Optional

from rad_analytics.config import DATASET_KEY
from rad_analytics.errors import DatasetDecodeError, MissingDatasetError

logger = logging.getLogger(__name__)


class SessionContext:
    """String-keyed store that lives as long as one analysis session."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._store: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._store.get(key)

    def set(self, key: str, value: str) -> None:
        self._store[key] = value

    def clear(self, key: Optional[str] = None) -> None:
        """Remove one key, or everything when key is None."""
        if key is None:
            self._store.clear()
        else:
            self._store.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._store


def store_dataset(session: SessionContext, rows: Iterable[Dict[str, Any]]) -> int:
    """Serialize rows as a JSON array under DATASET_KEY. Returns the row count."""
    rows = list(rows)
    session.set(DATASET_KEY, json.dumps(rows, default=str))
    logger.info(f"Stored {len(rows)} rows in session under '{DATASET_KEY}'")
    return len(rows)


def load_dataset(session: SessionContext) -> List[Dict[str, Any]]:
    """
    Read the stored rows back.

    Raises:
        MissingDatasetError: nothing was ingested in this session.
        DatasetDecodeError:  the entry is not a JSON array.
    """
    raw = session.get(DATASET_KEY)
    if raw is None:
        raise MissingDatasetError("No radiology data in session; upload a file first.")
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise DatasetDecodeError(f"Stored data set is not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise DatasetDecodeError(f"Stored data set must be a list of rows, got {type(data).__name__}")
    return data


def clear_dataset(session: SessionContext) -> None:
    session.clear(DATASET_KEY)
    logger.info("Session data set cleared")
