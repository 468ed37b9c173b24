"""
Record Classification for pick-list exports.

This module turns raw export rows into ``NormalizedRecord`` objects: one per
real work item, carrying its stage-by deadline, lifecycle state and the set
of associates working it.

Column resolution
-----------------
Exports from different station tools name their columns differently
("Stage By Time", "Stage_Time", "Picklist Code", "PL Code" ...).  The header
is resolved once per input against ``core.config.COLUMN_ALIASES`` in two
phases:

::

    Phase 1: exact match
        |  For each alias in priority order, look for a header cell equal
        |  to it (trimmed, lower-cased).  First hit wins.
        v
    Phase 2: substring match
        |  For each header cell in column order, for each alias in priority
        |  order, accept the first cell that contains the alias.
        v
    Unresolved: COLUMN_NOT_FOUND (-1)

An unresolved column is not an error.  Every row then reads an empty value
for that field, which usually drops the row further down.

Status cascade
--------------
The status text is matched against an ordered list of patterns and the
first match claims the row:

::

    ^picked\\b                         -> PICKED
    (^|\\s)in\\s*progress\\b | picking   -> IN_PROGRESS
    not\\s*assigned | unassigned        -> UNASSIGNED
    (anything else)                    -> OTHER

Order matters: a status mentioning both "picking" and "unassigned" is
IN_PROGRESS.

Drop rules
----------
A row without a pick-list code, or whose stage-by value does not parse as a
time, is not a work item for this computation and is skipped silently.
"""

import re
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import FrozenSet, Iterable, List, Optional, Sequence

from tqdm import tqdm

from ..core.config import COLUMN_ALIASES, COLUMN_NOT_FOUND
from ..core.utils import to_text, normalize_key
from ..ingest.csv_parser import cell
from ..ingest.time_parser import parse_instant
from ..models.data_models import LifecycleState, NormalizedRecord

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Status patterns, evaluated in order against the lower-cased status text.
# ---------------------------------------------------------------------------
_STATUS_PATTERNS = [
    (re.compile(r'^picked\b'), LifecycleState.PICKED),
    (re.compile(r'(^|\s)in\s*progress\b|picking'), LifecycleState.IN_PROGRESS),
    (re.compile(r'not\s*assigned|unassigned'), LifecycleState.UNASSIGNED),
]

_ASSOCIATE_SPLIT_RE = re.compile(r'[;,]')


class HeaderError(ValueError):
    """Raised when the export header cannot be interpreted at all."""


# ============================================================================
# COLUMN RESOLUTION
# ============================================================================

@dataclass(frozen=True)
class ColumnIndex:
    """Header position of each logical field (``COLUMN_NOT_FOUND`` if absent)."""
    stage_by: int = COLUMN_NOT_FOUND
    status: int = COLUMN_NOT_FOUND
    assoc: int = COLUMN_NOT_FOUND
    plcode: int = COLUMN_NOT_FOUND

    def unresolved(self) -> List[str]:
        return [name for name in ('stage_by', 'status', 'assoc', 'plcode')
                if getattr(self, name) == COLUMN_NOT_FOUND]


def normalize_header(header: Sequence) -> List[str]:
    """Trimmed, lower-cased header cells"""
    return [normalize_key(h) for h in header]


def find_column(normalized_header: Sequence[str], aliases: Sequence[str]) -> int:
    """Two-phase lookup of a logical field: exact alias first, then substring."""
    for alias in aliases:
        if alias in normalized_header:
            return normalized_header.index(alias)
    for j, name in enumerate(normalized_header):
        for alias in aliases:
            if alias in name:
                return j
    return COLUMN_NOT_FOUND


def resolve_columns(header: Optional[Sequence]) -> ColumnIndex:
    """
    Resolve every logical field against the export header.

    Raises:
        HeaderError: if the header is missing or every cell is blank.
    """
    if not header:
        raise HeaderError("Missing header row.")
    normalized = normalize_header(header)
    if not any(normalized):
        raise HeaderError("Header row has no column names.")

    columns = ColumnIndex(**{
        field_name: find_column(normalized, aliases)
        for field_name, aliases in COLUMN_ALIASES.items()
    })
    missing = columns.unresolved()
    if missing:
        logger.warning(f"Unresolved columns: {missing}. Those fields will read as empty.")
    return columns


# ============================================================================
# FIELD NORMALISATION
# ============================================================================

def classify_status(status_text) -> LifecycleState:
    """Map free-text status to a lifecycle state (ordered precedence)."""
    status = normalize_key(status_text)
    for pattern, state in _STATUS_PATTERNS:
        if pattern.search(status):
            return state
    return LifecycleState.OTHER


def split_associates(raw) -> FrozenSet[str]:
    """Associates listed in one cell, split on ``;`` or ``,``."""
    text = to_text(raw).strip()
    if not text:
        return frozenset()
    return frozenset(p.strip() for p in _ASSOCIATE_SPLIT_RE.split(text) if p.strip())


# ============================================================================
# ROW CLASSIFICATION
# ============================================================================

def classify_row(row: Sequence, columns: ColumnIndex,
                 reference_now: datetime) -> Optional[NormalizedRecord]:
    """Normalise one export row, or return None if it is not a work item."""
    plcode = to_text(cell(row, columns.plcode)).strip()
    if not plcode:
        return None

    deadline = parse_instant(cell(row, columns.stage_by), reference_now)
    if deadline is None:
        return None

    return NormalizedRecord(
        deadline=deadline,
        lifecycle_state=classify_status(cell(row, columns.status)),
        assigned_workers=split_associates(cell(row, columns.assoc)),
        pick_list_id=plcode,
    )


def classify_rows(rows: Iterable[Sequence], columns: ColumnIndex,
                  reference_now: datetime,
                  show_progress: bool = False) -> List[NormalizedRecord]:
    """Classify every data row, dropping the ones that are not work items.

    Args:
        rows: Data rows (header excluded).
        columns: Resolved header positions.
        reference_now: The run's reference time (anchors bare clock times).
        show_progress: Show a tqdm progress bar.

    Returns:
        Records in input order.
    """
    records = []
    dropped = 0
    for row in tqdm(rows, desc="Classifying pick-lists", disable=not show_progress):
        record = classify_row(row, columns, reference_now)
        if record is None:
            dropped += 1
            continue
        records.append(record)

    logger.debug(f"Classified {len(records)} pick-lists, dropped {dropped} rows")
    return records


__all__ = [
    'ColumnIndex',
    'HeaderError',
    'normalize_header',
    'find_column',
    'resolve_columns',
    'classify_status',
    'split_associates',
    'classify_row',
    'classify_rows',
]
