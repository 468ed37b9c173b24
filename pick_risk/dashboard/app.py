"""
Streamlit dashboard for Pick Risk.

Upload a pick-list CSV export, tune the pace and shift-end inputs in the
sidebar, and read the waves table.  Sidebar edits are persisted through the
``ConfigStore`` so the next session starts from the same values.

Run with:
    streamlit run pick_risk/dashboard/app.py
    python run.py --dashboard
"""

import sys
from pathlib import Path

import pandas as pd
import streamlit as st

# Add project root to path so the page runs without an installed package
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from pick_risk.core.config import ConfigError, ConfigStore, INSTRUCTIONS_TEXT, REPORT_TITLE
from pick_risk.ingest.csv_parser import NotTabularDataError
from pick_risk.classification import HeaderError
from pick_risk.pipeline import compute_from_text
from pick_risk.reports import (
    display_frame, empty_table_message, filter_display_buckets,
    summary_tiles, tier_colors,
)


def get_dashboard_path() -> Path:
    """Get the path to this streamlit app file."""
    return Path(__file__)


def run_dashboard(port: int = 8501):
    """
    Launch the Streamlit dashboard.

    Args:
        port: Port to run on (default 8501)
    """
    import subprocess

    cmd = [
        sys.executable, "-m", "streamlit", "run",
        str(get_dashboard_path()),
        "--server.port", str(port),
        "--browser.gatherUsageStats", "false"
    ]
    subprocess.run(cmd)


# ============================================================================
# PAGE SECTIONS
# ============================================================================

def configure_page():
    """Configure Streamlit page settings."""
    st.set_page_config(
        page_title=REPORT_TITLE,
        page_icon="📦",
        layout="wide",
    )


def render_sidebar(store: ConfigStore):
    """Sidebar inputs; returns the (persisted) configuration."""
    config = store.load()
    st.sidebar.header("Settings")
    avg = st.sidebar.text_input("AVG PL MIN", value=str(config.avg_pick_list_minutes))
    shift_end = st.sidebar.text_input("End C1 (HH:MM)", value=config.shift_end_display)
    show_safe = st.sidebar.checkbox("Show Safe waves", value=config.show_safe_rows)

    if (avg != str(config.avg_pick_list_minutes)
            or shift_end != config.shift_end_display
            or show_safe != config.show_safe_rows):
        config = store.apply_user_edits(
            avg_pl_min=avg, shift_end=shift_end, show_safe=show_safe, current=config
        )
    return config


def render_summary(report):
    """Summary tiles above the table."""
    tiles = summary_tiles(report)
    cols = st.columns(len(tiles))
    for col, (label, value) in zip(cols, tiles):
        col.metric(label, value)
    if report.summary.headcount_surplus < 0:
        st.error(f"Headcount short by {-report.summary.headcount_surplus}")


def _style_waves(frame: pd.DataFrame, buckets):
    backgrounds = [tier_colors(b.risk_tier)[0] for b in buckets]

    def row_style(row):
        return [f"background-color: #{backgrounds[row.name]}"] * len(row)

    return frame.style.apply(row_style, axis=1)


def render_waves(report, show_safe: bool):
    """The waves table, colour-coded by tier."""
    buckets = filter_display_buckets(report, show_safe)
    if not buckets:
        st.info(empty_table_message(show_safe))
        return
    frame = display_frame(report, show_safe)
    st.dataframe(_style_waves(frame, buckets), hide_index=True, use_container_width=True)


def main():
    configure_page()
    st.title(REPORT_TITLE)

    store = ConfigStore()
    config = render_sidebar(store)

    uploaded = st.file_uploader("Pick-list export (CSV)", type=["csv"])
    if uploaded is None:
        st.caption(INSTRUCTIONS_TEXT)
        return

    text = uploaded.getvalue().decode('utf-8-sig', errors='replace')
    try:
        report = compute_from_text(text, config)
    except (NotTabularDataError, HeaderError, ConfigError) as e:
        st.error(str(e))
        return

    render_summary(report)
    render_waves(report, config.show_safe_rows)
    st.caption(INSTRUCTIONS_TEXT)


if __name__ == "__main__":
    main()
