"""
Data models for the pick risk engine.

This module defines the **schema layer** of Pick Risk.  Every stage of the
engine hands the next stage one of the types below, so the dataclasses
double as documentation of the data flow:

::

    list[list[str]]           (csv_parser)
         |
         v
    NormalizedRecord          one per real work item (classification)
         |
         v
    Bucket                    one per distinct stage-by instant (aggregation)
         |
         v
    ComputedBucket            per-bucket risk result (scoring)
         |
         v
    RiskReport                future buckets + run-wide RiskSummary

Result types are frozen, and two runs on identical input compare equal.

Bucket invariants
-----------------
- ``total = picked + in_progress + unassigned + other``.  Items in the
  ``other`` lifecycle state are only counted in ``total``.
- ``lists_remaining = total - picked``.
- ``fully_departed`` is true when ``total > 0`` and every list is picked.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Tuple

import pandas as pd

# Column order of ``RiskReport.to_dataframe``
BUCKET_COLUMNS = [
    'deadline', 'is_past', 'total', 'picked', 'in_progress', 'unassigned',
    'lists_remaining', 'fully_departed', 'cumulative_need',
    'time_left_minutes', 'capacity', 'headcount_need', 'pl_need_for_risk',
    'ratio', 'time_left', 'risk_tier',
]


# ============================================================================
# ENUMERATIONS
# ============================================================================

class LifecycleState(Enum):
    """Normalised pick-list status."""
    PICKED = "picked"
    IN_PROGRESS = "in_progress"
    UNASSIGNED = "unassigned"
    OTHER = "other"


class RiskTier(Enum):
    """
    Risk classification of a future wave.

    Ordered from least to most severe:
        SAFE < LOW_RISK < HIGH_RISK < PROJECTED_MISS

    ``NOT_EVALUATED`` is given to waves whose deadline has already passed.
    Values are the display labels of the reference spreadsheet.
    """
    NOT_EVALUATED = ""
    SAFE = "Safe"
    LOW_RISK = "Low Risk"
    HIGH_RISK = "High Risk"
    PROJECTED_MISS = "Proj Miss"


# ============================================================================
# RECORD AND BUCKET MODELS
# ============================================================================

@dataclass(frozen=True)
class NormalizedRecord:
    """A single pick-list row after classification.

    Attributes:
        deadline: Stage-by instant (naive local wall-clock).
        lifecycle_state: Normalised status.
        assigned_workers: Distinct associate identifiers on the row.
        pick_list_id: The pick-list code the row was keyed on.
    """
    deadline: datetime
    lifecycle_state: LifecycleState
    assigned_workers: FrozenSet[str] = frozenset()
    pick_list_id: str = ""


@dataclass
class Bucket:
    """Counts of pick-lists sharing one stage-by instant.

    Buckets are created lazily by the aggregator and filled in place while
    records are folded in; they are never merged or split.
    """
    deadline: datetime
    total: int = 0
    picked: int = 0
    in_progress: int = 0
    unassigned: int = 0

    @property
    def other(self) -> int:
        """Items counted in ``total`` but in no named state."""
        return self.total - self.picked - self.in_progress - self.unassigned

    @property
    def lists_remaining(self) -> int:
        return self.total - self.picked

    @property
    def fully_departed(self) -> bool:
        return self.total > 0 and self.picked == self.total

    def totals(self) -> "BucketTotals":
        return BucketTotals(
            total=self.total,
            picked=self.picked,
            in_progress=self.in_progress,
            unassigned=self.unassigned,
        )


@dataclass(frozen=True)
class BucketTotals:
    """Frozen snapshot of a bucket's counts."""
    total: int = 0
    picked: int = 0
    in_progress: int = 0
    unassigned: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            'total': self.total,
            'picked': self.picked,
            'in_progress': self.in_progress,
            'unassigned': self.unassigned,
        }


# ============================================================================
# RESULT MODELS
# ============================================================================

@dataclass(frozen=True)
class ComputedBucket:
    """Risk result for one stage-by wave.

    Attributes:
        deadline: Stage-by instant of the wave.
        is_past: True when the deadline is at or before the reference now.
        totals: Counts by lifecycle state.
        lists_remaining: ``total - picked``.
        fully_departed: Every list in the wave is picked.
        cumulative_need: Running sum of unassigned + in-progress lists up to
            and including this wave.
        time_left_minutes: Minutes from now to the deadline (0 when past).
        capacity: Lists the active workforce can finish before the deadline.
        headcount_need: Associates required to clear the cumulative need,
            inflated by the safe threshold.
        pl_need_for_risk: Pick-list need back-solved from ``headcount_need``;
            the denominator of ``ratio``.
        ratio: ``capacity / pl_need_for_risk``.
        time_left_display: ``H:MM:SS`` or the past marker.
        risk_tier: Tier for future waves, ``NOT_EVALUATED`` for past ones.
    """
    deadline: datetime
    is_past: bool
    totals: BucketTotals
    lists_remaining: int
    fully_departed: bool
    cumulative_need: int
    time_left_minutes: float
    capacity: float
    headcount_need: int
    pl_need_for_risk: int
    ratio: float
    time_left_display: str
    risk_tier: RiskTier

    def to_dict(self) -> Dict[str, Any]:
        """Flat dictionary for DataFrame / JSON serialisation."""
        return {
            'deadline': self.deadline,
            'is_past': self.is_past,
            **self.totals.to_dict(),
            'lists_remaining': self.lists_remaining,
            'fully_departed': self.fully_departed,
            'cumulative_need': self.cumulative_need,
            'time_left_minutes': self.time_left_minutes,
            'capacity': self.capacity,
            'headcount_need': self.headcount_need,
            'pl_need_for_risk': self.pl_need_for_risk,
            'ratio': self.ratio,
            'time_left': self.time_left_display,
            'risk_tier': self.risk_tier.value,
        }


@dataclass(frozen=True)
class RiskSummary:
    """Run-wide statistics shown above the waves table."""
    now_time: str
    total_records: int
    in_progress_records: int
    avg_pick_list_minutes: float
    shift_end_display: str
    active_headcount: int
    max_headcount_need: int
    headcount_surplus: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'now_time': self.now_time,
            'total_records': self.total_records,
            'in_progress_records': self.in_progress_records,
            'avg_pick_list_minutes': self.avg_pick_list_minutes,
            'shift_end_display': self.shift_end_display,
            'active_headcount': self.active_headcount,
            'max_headcount_need': self.max_headcount_need,
            'headcount_surplus': self.headcount_surplus,
        }


@dataclass(frozen=True)
class RiskReport:
    """Output of one risk computation.

    Attributes:
        future_buckets: Non-past, non-fully-departed waves, ascending by
            deadline.  The Safe filter is applied by the presentation layer.
        summary: Run-wide statistics.
        all_buckets: Every computed wave, including past and departed ones.
    """
    future_buckets: Tuple[ComputedBucket, ...]
    summary: RiskSummary
    all_buckets: Tuple[ComputedBucket, ...] = ()

    @property
    def at_risk_buckets(self) -> List[ComputedBucket]:
        """Future waves that are not Safe."""
        return [b for b in self.future_buckets if b.risk_tier is not RiskTier.SAFE]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'future_buckets': [b.to_dict() for b in self.future_buckets],
            'summary': self.summary.to_dict(),
        }

    def to_dataframe(self, include_all: bool = False) -> pd.DataFrame:
        """Computed waves as a DataFrame, one row per wave."""
        buckets = self.all_buckets if include_all else self.future_buckets
        return pd.DataFrame([b.to_dict() for b in buckets], columns=BUCKET_COLUMNS)
