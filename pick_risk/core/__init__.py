"""
Core module for Pick Risk.

Contains configuration, the config store and base utilities.
"""

from pick_risk.core.config import (
    RiskConfig,
    Thresholds,
    ConfigStore,
    ConfigError,
    validate_config,
    ensure_valid,
    coerce_float,
    coerce_positive_float,
    coerce_bool,
)
from pick_risk.core.utils import to_text, normalize_key

__all__ = [
    # Config
    'RiskConfig',
    'Thresholds',
    'ConfigStore',
    'ConfigError',
    'validate_config',
    'ensure_valid',
    'coerce_float',
    'coerce_positive_float',
    'coerce_bool',
    # Utils
    'to_text',
    'normalize_key',
]
