"""
Bucket aggregation for classified pick-lists.

Groups records into one ``Bucket`` per distinct stage-by instant and
measures the active headcount that drives capacity.

Buckets are keyed by exact instant equality, not by interval: ``08:00:00``
and ``08:00:30`` are two separate waves.

Active headcount is the number of distinct associates on in-progress
pick-lists.  Some exports omit the associate column entirely; when no
in-progress record names anyone, each in-progress record counts as one
associate instead.
"""

import logging
from typing import Dict, Iterable, List

from ..models.data_models import Bucket, LifecycleState, NormalizedRecord

logger = logging.getLogger(__name__)


def aggregate_buckets(records: Iterable[NormalizedRecord]) -> List[Bucket]:
    """Fold records into per-deadline buckets, sorted ascending by deadline."""
    buckets: Dict = {}
    for record in records:
        bucket = buckets.get(record.deadline)
        if bucket is None:
            bucket = buckets[record.deadline] = Bucket(deadline=record.deadline)
        bucket.total += 1
        state = record.lifecycle_state
        if state is LifecycleState.PICKED:
            bucket.picked += 1
        elif state is LifecycleState.IN_PROGRESS:
            bucket.in_progress += 1
        elif state is LifecycleState.UNASSIGNED:
            bucket.unassigned += 1

    ordered = sorted(buckets.values(), key=lambda b: b.deadline)
    logger.debug(f"Aggregated into {len(ordered)} stage-by buckets")
    return ordered


def active_headcount(records: Iterable[NormalizedRecord]) -> int:
    """Distinct associates on in-progress pick-lists (record count fallback)."""
    in_progress = [r for r in records if r.lifecycle_state is LifecycleState.IN_PROGRESS]
    workers = set()
    for record in in_progress:
        workers.update(record.assigned_workers)
    if workers:
        return len(workers)
    return len(in_progress)


__all__ = ['aggregate_buckets', 'active_headcount']
