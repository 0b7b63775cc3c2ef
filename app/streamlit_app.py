"""
app/streamlit_app.py

Read-only Streamlit dashboard for historical carbon intensity and
generation mix of a single Electricity Maps zone.

Responsibilities
----------------
- Let users choose a range (past 365 days or past 5 years) and a data
  source (mock or live API).
- Aggregate the records via `carbonmix.run.build_dashboard`.
- Display headline KPIs, an intensity chart, a stacked generation-mix
  chart, renewable/low-carbon shares and a latest-snapshot table.

Conventions
-----------
- Timestamps are handled in UTC.
- Axis labels show the year for the 5Y range and "Mon d" for 1Y.
- Source colours follow the Electricity Maps palette.

Notes
-----
- The live API's past-range endpoint needs a paid token; mock data is the
  default so the charts always render.
"""

import logging

import streamlit as st
from dotenv import load_dotenv

from carbonmix.charts import (
    format_date,
    intensity_chart,
    mix_chart,
    share_chart,
    source_columns,
    to_frame,
)
from carbonmix.client import DEFAULT_ZONE, FetchError
from carbonmix.run import build_dashboard

# Load .env locally so shells don't need to export env vars.
load_dotenv()

logger = logging.getLogger(__name__)

RANGES = {"Past 365 Days": "1Y", "Past 5 Years": "5Y"}


st.set_page_config(page_title="Carbon Intensity Dashboard", layout="wide")

zone = st.sidebar.text_input("Zone", value=DEFAULT_ZONE)
st.title(f"{zone} Energy Dashboard")
st.caption("Historical Carbon Intensity & Generation Mix")

# ---------------------------
# Controls
# ---------------------------
col1, col2 = st.columns([3, 1])
with col1:
    range_label = st.radio("Range", options=list(RANGES), horizontal=True)
    range_key = RANGES[range_label]
with col2:
    # Real API history beyond the recent window needs a paid subscription.
    use_mock = st.toggle("Use mock data", value=True)

try:
    with st.spinner("Loading..."):
        data = build_dashboard(range_key, use_mock=use_mock, zone=zone)
except FetchError as exc:
    logger.error("Retrieval failed: %s", exc)
    st.error("Failed to fetch data. Check the API token and zone, or switch to mock data.")
    st.stop()
except Exception:
    logger.exception("Unexpected error loading dashboard data")
    st.error("Internal error while loading data.")
    st.stop()

if data is None:
    st.info("No data available yet for the selected range.")
    st.stop()

df = to_frame(data.chart_rows())

# ---------------------------
# KPIs
# ---------------------------
latest = data.latest
kpis = st.columns(3)
with kpis[0]:
    st.metric("Avg Carbon Intensity (gCO₂eq/kWh)", f"{data.avg_intensity:,}")
with kpis[1]:
    st.metric("Current Renewable %", f"{latest.renewable_pct:.1f}")
with kpis[2]:
    st.metric("Current Low Carbon %", f"{latest.carbon_free_pct:.1f}")
    st.caption("(Incl. Nuclear)")

# ---------------------------
# Carbon intensity chart
# ---------------------------
st.subheader("Carbon Intensity History")
st.altair_chart(intensity_chart(df, range_key), use_container_width=True)

# ---------------------------
# Generation mix chart
# ---------------------------
sources = source_columns(df)
st.subheader("Generation Mix (MW)")
if sources:
    st.altair_chart(mix_chart(df, range_key), use_container_width=True)
else:
    st.info("No generation breakdown in the selected data.")

# ---------------------------
# Shares
# ---------------------------
st.subheader("Renewable & Low Carbon Share (%)")
st.altair_chart(share_chart(df, range_key), use_container_width=True)

# ---------------------------
# Snapshot table
# ---------------------------
st.subheader("Latest snapshot")
st.caption("Most recent records, limited to the last 10 points.")
snapshot = df.tail(10).copy()
snapshot.index = [format_date(ts, range_key) for ts in snapshot.index]
st.dataframe(snapshot)
