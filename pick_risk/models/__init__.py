"""
Models module for Pick Risk.

Contains the dataclasses passed between engine stages.
"""

from .data_models import (
    LifecycleState,
    RiskTier,
    NormalizedRecord,
    Bucket,
    BucketTotals,
    ComputedBucket,
    RiskSummary,
    RiskReport,
    BUCKET_COLUMNS,
)

__all__ = [
    'LifecycleState',
    'RiskTier',
    'NormalizedRecord',
    'Bucket',
    'BucketTotals',
    'ComputedBucket',
    'RiskSummary',
    'RiskReport',
    'BUCKET_COLUMNS',
]
