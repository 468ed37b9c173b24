"""
Pipeline module for Pick Risk.

Contains the orchestration of parse -> classify -> aggregate -> score.
"""

from .orchestrator import (
    PickRiskPipeline,
    compute_from_rows,
    compute_from_text,
    read_export,
)

__all__ = [
    'PickRiskPipeline',
    'compute_from_rows',
    'compute_from_text',
    'read_export',
]
