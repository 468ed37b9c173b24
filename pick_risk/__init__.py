"""
Pick Risk - staffing-risk projection for warehouse pick-list exports.

This package turns a station's pick-list CSV export into a per-wave risk
table:
- Quote-aware CSV scanning of the export
- Normalisation of mixed timestamp / clock-time stage-by values
- Status classification and associate extraction per pick-list
- Aggregation into stage-by waves and active headcount
- Capacity vs. demand scoring calibrated to the reference spreadsheet
- Console, Excel and Streamlit presentation of the result
"""

__version__ = "4.0.0"
__author__ = "Pick Risk Team"

# Core imports
from .core.config import RiskConfig, Thresholds, ConfigStore, ConfigError
from .models import (
    LifecycleState,
    RiskTier,
    NormalizedRecord,
    Bucket,
    ComputedBucket,
    RiskSummary,
    RiskReport,
)

# Engine stages
from .ingest import parse_csv, read_table, parse_instant, NotTabularDataError
from .classification import resolve_columns, classify_rows, HeaderError
from .aggregation import aggregate_buckets, active_headcount
from .scoring import compute_risk

# Pipeline and Reports
from .pipeline import PickRiskPipeline, compute_from_rows, compute_from_text
from .reports import generate_report, format_console_report

__all__ = [
    # Config
    'RiskConfig',
    'Thresholds',
    'ConfigStore',
    'ConfigError',

    # Models
    'LifecycleState',
    'RiskTier',
    'NormalizedRecord',
    'Bucket',
    'ComputedBucket',
    'RiskSummary',
    'RiskReport',

    # Engine
    'parse_csv',
    'read_table',
    'parse_instant',
    'NotTabularDataError',
    'resolve_columns',
    'classify_rows',
    'HeaderError',
    'aggregate_buckets',
    'active_headcount',
    'compute_risk',

    # Pipeline & Reports
    'PickRiskPipeline',
    'compute_from_rows',
    'compute_from_text',
    'generate_report',
    'format_console_report',

    # Metadata
    '__version__',
]
