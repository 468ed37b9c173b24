"""
Report rendering for Pick Risk.

Turns a ``RiskReport`` into the views the station team reads:

- the waves table (``display_frame``) with the Safe-wave toggle applied,
- the summary tiles shown above it,
- a plain-text rendering for the terminal,
- an Excel workbook with a Summary sheet and a colour-coded Waves sheet.

The engine itself never filters Safe waves; hiding them is a presentation
choice made here.
"""

import logging
from datetime import datetime
from typing import List, Sequence, Tuple

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill

from ..core.config import (
    DEFAULT_TIER_COLOR, INSTRUCTIONS_TEXT, REPORT_TITLE, TIER_COLORS
)
from ..ingest.time_parser import format_clock
from ..models.data_models import ComputedBucket, RiskReport, RiskTier

logger = logging.getLogger(__name__)

DISPLAY_COLUMNS = [
    'STAGE BY', 'Total Picklists', 'Lists Remaining', 'Not Assigned',
    'HC Need', 'TIME LEFT', 'Risk?',
]

NO_FUTURE_WAVES = "No future waves."
NO_AT_RISK_WAVES = "No at-risk waves (non-Safe, non-PAST, non-departed)."


# ============================================================================
# DISPLAY HELPERS
# ============================================================================

def filter_display_buckets(report: RiskReport, show_safe: bool) -> List[ComputedBucket]:
    """Future waves to show: all of them, or only the non-Safe ones."""
    if show_safe:
        return list(report.future_buckets)
    return report.at_risk_buckets


def empty_table_message(show_safe: bool) -> str:
    return NO_FUTURE_WAVES if show_safe else NO_AT_RISK_WAVES


def display_frame(report: RiskReport, show_safe: bool) -> pd.DataFrame:
    """The waves table as shown to the user."""
    rows = [
        [
            format_clock(b.deadline),
            b.totals.total,
            b.lists_remaining,
            b.totals.unassigned,
            b.headcount_need,
            b.time_left_display,
            b.risk_tier.value,
        ]
        for b in filter_display_buckets(report, show_safe)
    ]
    return pd.DataFrame(rows, columns=DISPLAY_COLUMNS)


def summary_tiles(report: RiskReport) -> List[Tuple[str, object]]:
    """Ordered (label, value) pairs for the summary strip."""
    s = report.summary
    return [
        ('TIME', s.now_time),
        ('Total', s.total_records),
        ('IP', s.in_progress_records),
        ('AVG', s.avg_pick_list_minutes),
        ('End', s.shift_end_display),
        ('HCNeed', s.max_headcount_need),
        ('Surplus', s.headcount_surplus),
    ]


def tier_colors(tier: RiskTier) -> Tuple[str, str]:
    """(background, foreground) hex colours for a tier chip."""
    return TIER_COLORS.get(tier.value, DEFAULT_TIER_COLOR)


def format_console_report(report: RiskReport, show_safe: bool) -> str:
    """Plain-text rendering of the summary and waves table."""
    tiles = "  ".join(f"{label}: {value}" for label, value in summary_tiles(report))
    lines = [REPORT_TITLE, tiles, ""]

    frame = display_frame(report, show_safe)
    if frame.empty:
        lines.append(empty_table_message(show_safe))
    else:
        lines.append(frame.to_string(index=False))
    return "\n".join(lines)


# ============================================================================
# EXCEL REPORT
# ============================================================================

class ExcelReportWriter:
    """
    Excel Report Writer for pick risk waves.

    Creates a two-sheet workbook:
    - Summary: the run-wide tiles and the instructions footer
    - Waves: the waves table with each row filled by its risk tier
    """

    def __init__(self, output_path):
        self.output_path = output_path
        self.wb = Workbook()

        self.header_font = Font(bold=True, size=12, color="FFFFFF")
        self.header_fill = PatternFill(start_color="0284C7", end_color="0284C7", fill_type="solid")
        self.title_font = Font(bold=True, size=16, color="0284C7")
        self.subtitle_font = Font(size=10, italic=True, color="666666")

    def _style_header_row(self, ws, row=1, start_col=1, end_col=None):
        """Apply header styling to a row."""
        if end_col is None:
            end_col = ws.max_column
        for col in range(start_col, end_col + 1):
            cell = ws.cell(row=row, column=col)
            cell.font = self.header_font
            cell.fill = self.header_fill
            cell.alignment = Alignment(horizontal='center', wrap_text=True)

    def write_summary(self, report: RiskReport):
        """Write the Summary sheet."""
        ws = self.wb.create_sheet("Summary", 0)
        ws.sheet_view.showGridLines = False

        ws['A1'] = REPORT_TITLE
        ws['A1'].font = self.title_font
        ws['A2'] = f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}"
        ws['A2'].font = self.subtitle_font

        ws.cell(row=4, column=1).value = "Metric"
        ws.cell(row=4, column=2).value = "Value"
        self._style_header_row(ws, row=4, end_col=2)

        for i, (label, value) in enumerate(summary_tiles(report), 5):
            ws.cell(row=i, column=1).value = label
            ws.cell(row=i, column=2).value = value

        surplus_row = 5 + len(summary_tiles(report)) - 1
        color = '166534' if report.summary.headcount_surplus >= 0 else 'B91C1C'
        ws.cell(row=surplus_row, column=2).font = Font(bold=True, color=color)

        ws.cell(row=surplus_row + 2, column=1).value = INSTRUCTIONS_TEXT
        ws.cell(row=surplus_row + 2, column=1).font = self.subtitle_font

        ws.column_dimensions['A'].width = 18
        ws.column_dimensions['B'].width = 14

    def write_waves(self, report: RiskReport, show_safe: bool):
        """Write the Waves sheet."""
        ws = self.wb.create_sheet("Waves", 1)
        for col_idx, name in enumerate(DISPLAY_COLUMNS, 1):
            ws.cell(row=1, column=col_idx).value = name
        self._style_header_row(ws)

        buckets = filter_display_buckets(report, show_safe)
        if not buckets:
            ws.cell(row=2, column=1).value = empty_table_message(show_safe)
            ws.column_dimensions['A'].width = 18
            return

        frame = display_frame(report, show_safe)
        for row_idx, (bucket, row) in enumerate(zip(buckets, frame.itertuples(index=False)), 2):
            bg, fg = tier_colors(bucket.risk_tier)
            fill = PatternFill(start_color=bg, end_color=bg, fill_type="solid")
            for col_idx, value in enumerate(row, 1):
                cell = ws.cell(row=row_idx, column=col_idx)
                cell.value = value.item() if hasattr(value, 'item') else value
                cell.fill = fill
            ws.cell(row=row_idx, column=len(DISPLAY_COLUMNS)).font = Font(bold=True, color=fg)

        for col_idx in range(1, len(DISPLAY_COLUMNS) + 1):
            ws.column_dimensions[self._get_column_letter(col_idx)].width = 16

    def _get_column_letter(self, col_idx):
        """Convert column index to Excel column letter (1=A, 27=AA, etc.)."""
        result = ""
        while col_idx > 0:
            col_idx, remainder = divmod(col_idx - 1, 26)
            result = chr(65 + remainder) + result
        return result

    def save(self):
        """Save the workbook."""
        if 'Sheet' in self.wb.sheetnames:
            del self.wb['Sheet']
        self.wb.save(self.output_path)
        logger.info(f"Report saved to {self.output_path}")


def generate_report(report: RiskReport, output_path, show_safe: bool = False) -> Sequence[str]:
    """
    Generate the Excel report.

    Args:
        report: Computed risk report.
        output_path: Path of the ``.xlsx`` file to write.
        show_safe: Include Safe waves in the Waves sheet.

    Returns:
        Names of the sheets written.
    """
    logger.info(f"[Report Generator] Creating report at {output_path}")
    writer = ExcelReportWriter(output_path)
    writer.write_summary(report)
    writer.write_waves(report, show_safe)
    writer.save()
    return list(writer.wb.sheetnames)
