"""
Pipeline Orchestrator - main execution flow for Pick Risk.

This module wires the engine stages into the single entry point used by the
CLI and the dashboard.

Data flow
---------
::

    [CSV text]
         |
         v
    read_table()        --> header + data rows          (ingest)
         |
         v
    resolve_columns()   --> ColumnIndex                 (classification)
    classify_rows()     --> NormalizedRecord list
         |
         v
    aggregate_buckets() --> Bucket list                 (aggregation)
    active_headcount()  --> int
         |
         v
    compute_risk()      --> RiskReport                  (scoring)

Every stage is a pure function of its input and the immutable
``RiskConfig``.  The reference time ``now`` is captured once per run so all
stages agree on it, and nothing is remembered between runs:
``compute_from_rows`` called twice with the same arguments returns equal
reports.

Failure kinds
-------------
- ``NotTabularDataError`` -- the text is not a delimited table.
- ``HeaderError``         -- the header cannot be interpreted.
- ``ConfigError``         -- the configuration cannot drive a computation.

Rows that are not work items are dropped silently and never fail a run.
"""

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from ..core.config import ConfigStore, RiskConfig, ensure_valid
from ..classification import resolve_columns, classify_rows
from ..aggregation import aggregate_buckets, active_headcount
from ..scoring import compute_risk
from ..ingest.csv_parser import read_table
from ..models.data_models import RiskReport

logger = logging.getLogger(__name__)


# ============================================================================
# STATELESS ENTRY POINTS
# ============================================================================

def compute_from_rows(rows: Sequence[Sequence[str]], header: Sequence[str],
                      config: RiskConfig, now: Optional[datetime] = None,
                      show_progress: bool = False) -> RiskReport:
    """
    Compute the risk report for already-parsed export rows.

    Args:
        rows: Data rows, header excluded.
        header: Header row of the export.
        config: Immutable configuration.
        now: Reference time; defaults to the current local time.
        show_progress: Show a progress bar while classifying rows.

    Returns:
        The ``RiskReport``.

    Raises:
        ConfigError: if ``config`` is invalid.
        HeaderError: if ``header`` cannot be interpreted.
    """
    ensure_valid(config)
    now = now or datetime.now()

    columns = resolve_columns(header)
    records = classify_rows(rows, columns, now, show_progress=show_progress)
    buckets = aggregate_buckets(records)
    hc = active_headcount(records)
    return compute_risk(buckets, hc, config, now)


def compute_from_text(text: str, config: RiskConfig,
                      now: Optional[datetime] = None,
                      show_progress: bool = False) -> RiskReport:
    """Parse an export and compute its risk report.

    Raises:
        NotTabularDataError: if ``text`` is not a delimited table.
        ConfigError, HeaderError: as ``compute_from_rows``.
    """
    header, rows = read_table(text)
    return compute_from_rows(rows, header, config, now=now, show_progress=show_progress)


def read_export(file_path) -> str:
    """Read an export file as text (a UTF-8 BOM is stripped)."""
    with open(file_path, 'r', encoding='utf-8-sig', newline='') as f:
        return f.read()


# ============================================================================
# PIPELINE
# ============================================================================

class PickRiskPipeline:
    """
    Convenience wrapper around the stateless entry points.

    It owns the ``ConfigStore`` so callers follow the load-before-call,
    save-after-edit cycle, and it keeps the last report so a presentation
    toggle (show / hide Safe waves) can re-render without recomputing.

    Typical usage
    -------------
    ::

        pipe = PickRiskPipeline()
        report = pipe.run_file("picklists.csv")
        pipe.update_config(avg_pl_min="14")
        report = pipe.run_text(csv_text)
    """

    def __init__(self, store: Optional[ConfigStore] = None, show_progress: bool = False):
        self.store = store or ConfigStore()
        self.config = self.store.load()
        self.show_progress = show_progress
        self.last_report: Optional[RiskReport] = None
        self.file_path: Optional[Path] = None

    def update_config(self, avg_pl_min=None, shift_end=None,
                      show_safe: Optional[bool] = None) -> RiskConfig:
        """Apply user edits (coerced against the current values) and persist them."""
        self.config = self.store.apply_user_edits(
            avg_pl_min=avg_pl_min,
            shift_end=shift_end,
            show_safe=show_safe,
            current=self.config,
        )
        return self.config

    def run_text(self, text: str, now: Optional[datetime] = None) -> RiskReport:
        """Compute a report from export text and remember it."""
        start = time.time()
        report = compute_from_text(text, self.config, now=now, show_progress=self.show_progress)
        elapsed = time.time() - start
        logger.info(
            f"Computed risk for {report.summary.total_records} pick-lists "
            f"in {elapsed:.2f}s"
        )
        self.last_report = report
        return report

    def run_file(self, file_path, now: Optional[datetime] = None) -> RiskReport:
        """Read an export file and compute its report."""
        self.file_path = Path(file_path)
        logger.info(f"Loading export: {self.file_path.name}")
        return self.run_text(read_export(self.file_path), now=now)
