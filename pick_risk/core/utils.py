"""
Utility functions for cell text handling.
"""

import pandas as pd


def to_text(value):
    """Coerce a cell value to a string ("" for None / NaN)"""
    if value is None:
        return ""
    if not isinstance(value, str) and pd.isna(value):
        return ""
    return str(value)


def normalize_key(value):
    """Lower-cased, trimmed text used for header and status matching"""
    return to_text(value).strip().lower()
