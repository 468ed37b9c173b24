"""
Pick Risk Scoring Engine.

=== PURPOSE ===
This module is the heart of the Pick Risk tool.  It takes the stage-by
buckets produced by the aggregator plus the active headcount and projects,
for every upcoming wave, whether the associates currently picking will
clear the outstanding pick-lists before the stage-by deadline.

=== SCORING FORMULA ===
Buckets are walked in ascending deadline order with a running cumulative
need that is never reset:

    cum_need      += unassigned + in_progress
    time_left      = max(0, deadline - now) in minutes
    capacity       = active_hc * (time_left / avg_pl_min)
    hc_need        = ceil(cum_need * (avg_pl_min / time_left) * safe)

The risk ratio does not compare capacity against ``cum_need`` directly.
The reference spreadsheet's risk bands were calibrated against a pick-list
need derived back from the (ceiling-rounded) headcount need:

    pl_need_for_risk = max(1, round(hc_need * time_left / (avg_pl_min * safe)))
    ratio            = capacity / pl_need_for_risk

``round`` here is half-up, as the spreadsheet rounds.  This inversion is a
calibration contract and must be reproduced exactly, not simplified.

=== TIERS ===
    ratio >= safe  -> Safe
    ratio >= low   -> Low Risk
    ratio >= high  -> High Risk
    otherwise      -> Proj Miss

Waves whose deadline is at or before now are not evaluated (tier "") and
get zero capacity and zero headcount need.

=== SUMMARY ===
``max_headcount_need`` is taken over future, not fully departed waves, and
``headcount_surplus = active_hc - max_headcount_need`` (may be negative).
"""

import logging
import math
from datetime import datetime
from typing import Iterable, List

from ..core.config import RiskConfig, Thresholds
from ..ingest.time_parser import format_time_left, minutes_until
from ..models.data_models import (
    Bucket, ComputedBucket, RiskReport, RiskSummary, RiskTier
)

logger = logging.getLogger(__name__)


def spreadsheet_round(value: float) -> int:
    """Round half up (2.5 -> 3), unlike Python's round-half-even."""
    return math.floor(value + 0.5)


def classify_tier(ratio: float, thresholds: Thresholds) -> RiskTier:
    """Map a capacity ratio to a risk tier."""
    if not math.isfinite(ratio):
        return RiskTier.SAFE
    if ratio >= thresholds.safe:
        return RiskTier.SAFE
    if ratio >= thresholds.low:
        return RiskTier.LOW_RISK
    if ratio >= thresholds.high:
        return RiskTier.HIGH_RISK
    return RiskTier.PROJECTED_MISS


def compute_bucket(bucket: Bucket, cum_need: int, active_hc: int,
                   config: RiskConfig, now: datetime) -> ComputedBucket:
    """
    Score one wave given the cumulative need up to and including it.

    Args:
        bucket: The wave's counts.
        cum_need: Running sum of unassigned + in-progress lists, this wave
            included.
        active_hc: Active headcount for the whole run.
        config: Pace and threshold configuration.
        now: Reference time.

    Returns:
        The frozen ``ComputedBucket``.
    """
    avg = config.avg_pick_list_minutes
    safe = config.thresholds.safe

    is_past = bucket.deadline <= now
    time_left = minutes_until(now, bucket.deadline)

    if time_left > 0:
        capacity = active_hc * (time_left / avg)
        hc_need = math.ceil(cum_need * (avg / time_left) * safe)
        pl_need_for_risk = max(1, spreadsheet_round((hc_need * time_left) / (avg * safe)))
    else:
        capacity = 0.0
        hc_need = 0
        pl_need_for_risk = cum_need

    ratio = capacity / pl_need_for_risk if pl_need_for_risk > 0 else math.inf
    tier = RiskTier.NOT_EVALUATED if is_past else classify_tier(ratio, config.thresholds)

    return ComputedBucket(
        deadline=bucket.deadline,
        is_past=is_past,
        totals=bucket.totals(),
        lists_remaining=max(0, bucket.lists_remaining),
        fully_departed=bucket.fully_departed,
        cumulative_need=cum_need,
        time_left_minutes=time_left,
        capacity=capacity,
        headcount_need=hc_need,
        pl_need_for_risk=pl_need_for_risk,
        ratio=ratio,
        time_left_display=format_time_left(time_left, is_past=is_past),
        risk_tier=tier,
    )


def compute_risk(buckets: Iterable[Bucket], active_headcount: int,
                 config: RiskConfig, now: datetime) -> RiskReport:
    """
    Project staffing risk for every stage-by wave.

    Args:
        buckets: Stage-by buckets.  They are scored in ascending deadline
            order whatever order they arrive in.
        active_headcount: Distinct associates currently picking.
        config: Immutable configuration.
        now: Reference time for the whole run.

    Returns:
        ``RiskReport`` with the future waves and the run summary.
    """
    ordered = sorted(buckets, key=lambda b: b.deadline)

    cum_need = 0
    computed: List[ComputedBucket] = []
    for bucket in ordered:
        cum_need += bucket.unassigned + bucket.in_progress
        computed.append(compute_bucket(bucket, cum_need, active_headcount, config, now))

    future = tuple(b for b in computed if not b.is_past and not b.fully_departed)
    max_hc_need = max((b.headcount_need for b in future), default=0)

    summary = RiskSummary(
        now_time=now.strftime('%H:%M:%S'),
        total_records=sum(b.total for b in ordered),
        in_progress_records=sum(b.in_progress for b in ordered),
        avg_pick_list_minutes=config.avg_pick_list_minutes,
        shift_end_display=config.shift_end_display,
        active_headcount=active_headcount,
        max_headcount_need=max_hc_need,
        headcount_surplus=active_headcount - max_hc_need,
    )

    at_risk = sum(1 for b in future if b.risk_tier is not RiskTier.SAFE)
    logger.info(
        f"Scored {len(computed)} waves: {len(future)} upcoming, {at_risk} at risk, "
        f"active HC {active_headcount}, max HC need {max_hc_need}"
    )
    return RiskReport(future_buckets=future, summary=summary, all_buckets=tuple(computed))


__all__ = [
    'spreadsheet_round',
    'classify_tier',
    'compute_bucket',
    'compute_risk',
]
