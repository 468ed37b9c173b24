"""
Ingest module for Pick Risk.

Contains the CSV scanner and stage-by time normalisation.
"""

from .csv_parser import (
    parse_csv,
    looks_tabular,
    read_table,
    cell,
    NotTabularDataError,
)
from .time_parser import (
    parse_clock,
    parse_instant,
    minutes_until,
    format_time_left,
    format_clock,
)

__all__ = [
    'parse_csv',
    'looks_tabular',
    'read_table',
    'cell',
    'NotTabularDataError',
    'parse_clock',
    'parse_instant',
    'minutes_until',
    'format_time_left',
    'format_clock',
]
