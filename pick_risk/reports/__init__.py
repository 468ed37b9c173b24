"""
Reports module for Pick Risk.

Contains the waves table, summary tiles and Excel output.
"""

from .report_generator import (
    generate_report,
    ExcelReportWriter,
    filter_display_buckets,
    empty_table_message,
    display_frame,
    summary_tiles,
    tier_colors,
    format_console_report,
    DISPLAY_COLUMNS,
    NO_FUTURE_WAVES,
    NO_AT_RISK_WAVES,
)

__all__ = [
    'generate_report',
    'ExcelReportWriter',
    'filter_display_buckets',
    'empty_table_message',
    'display_frame',
    'summary_tiles',
    'tier_colors',
    'format_console_report',
    'DISPLAY_COLUMNS',
    'NO_FUTURE_WAVES',
    'NO_AT_RISK_WAVES',
]
