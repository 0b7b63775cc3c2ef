"""
carbonmix/charts.py

Chart builders for the Streamlit dashboard.

Responsibilities
----------------
- Hold the Electricity Maps technology palette as an immutable mapping.
- Turn `Aggregate.chart_rows()` into a UTC-indexed DataFrame.
- Build Altair charts whose time axis is labelled by range: the year for
  "5Y", "Mon d" for "1Y".

Notes
-----
- Source columns are discovered from the data, so sources outside the
  palette still chart (in `FALLBACK_COLOR`).
"""

from __future__ import annotations

from types import MappingProxyType

import altair as alt
import pandas as pd

# Official Electricity Maps technology colours.
TECH_COLORS = MappingProxyType(
    {
        "solar": "#f4c320",
        "wind": "#80b8ce",
        "hydro": "#4976a9",
        "nuclear": "#6aa84f",
        "biomass": "#166a57",
        "geothermal": "#9e1d1d",
        "coal": "#ac8c35",
        "gas": "#b4b4b4",
        "oil": "#856857",
        "unknown": "#cccccc",
        "battery_discharge": "#f0f0f0",
    }
)
FALLBACK_COLOR = "#cccccc"
INTENSITY_COLOR = "#f97316"

# d3 time formats for the x-axis, per range.
AXIS_FORMATS = {"1Y": "%b %-d", "5Y": "%Y"}

DERIVED_COLUMNS = {"carbonIntensity", "total", "renewablePct", "carbonFreePct"}
SHARE_LABELS = {"renewablePct": "Renewable", "carbonFreePct": "Low Carbon"}


def format_date(ts: pd.Timestamp, range_key: str) -> str:
    """Label for a timestamp: year for 5Y, "Mon d" otherwise."""
    if range_key == "5Y":
        return f"{ts:%Y}"
    return f"{ts:%b} {ts.day}"


def to_frame(rows: list[dict]) -> pd.DataFrame:
    """Build a DataFrame indexed by UTC `datetime` from chart rows.

    Rows whose timestamp cannot be parsed are dropped.
    """
    df = pd.DataFrame(rows)
    df["datetime"] = pd.to_datetime(df["datetime"], utc=True, errors="coerce")
    return df.dropna(subset=["datetime"]).set_index("datetime")


def source_columns(df: pd.DataFrame) -> list[str]:
    """Numeric per-source columns, excluding the derived fields."""
    return [
        c
        for c in df.columns
        if c not in DERIVED_COLUMNS and pd.api.types.is_numeric_dtype(df[c])
    ]


def time_axis(range_key: str) -> alt.X:
    return alt.X("datetime:T", title=None, axis=alt.Axis(format=AXIS_FORMATS[range_key]))


def intensity_chart(df: pd.DataFrame, range_key: str) -> alt.Chart:
    """Area chart of carbon intensity over time."""
    return (
        alt.Chart(df.reset_index()[["datetime", "carbonIntensity"]])
        .mark_area(color=INTENSITY_COLOR, opacity=0.3, line={"color": INTENSITY_COLOR})
        .encode(
            x=time_axis(range_key),
            y=alt.Y("carbonIntensity:Q", title="gCO₂eq/kWh"),
            tooltip=["datetime:T", "carbonIntensity:Q"],
        )
    )


def mix_chart(df: pd.DataFrame, range_key: str) -> alt.Chart:
    """Stacked bar chart of generation by source (MW)."""
    sources = source_columns(df)
    long = df.reset_index().melt(
        id_vars="datetime", value_vars=sources, var_name="source", value_name="MW"
    )
    palette = alt.Scale(
        domain=sources, range=[TECH_COLORS.get(s, FALLBACK_COLOR) for s in sources]
    )
    return (
        alt.Chart(long)
        .mark_bar()
        .encode(
            x=time_axis(range_key),
            y=alt.Y("MW:Q", stack="zero"),
            color=alt.Color("source:N", scale=palette),
            tooltip=["datetime:T", "source:N", "MW:Q"],
        )
    )


def share_chart(df: pd.DataFrame, range_key: str) -> alt.Chart:
    """Line chart of the renewable and low-carbon shares (%)."""
    long = (
        df.reset_index()[["datetime", *SHARE_LABELS]]
        .rename(columns=SHARE_LABELS)
        .melt(id_vars="datetime", var_name="share", value_name="pct")
    )
    palette = alt.Scale(
        domain=list(SHARE_LABELS.values()),
        range=[TECH_COLORS["wind"], TECH_COLORS["nuclear"]],
    )
    return (
        alt.Chart(long)
        .mark_line()
        .encode(
            x=time_axis(range_key),
            y=alt.Y("pct:Q", title="%", scale=alt.Scale(domain=[0, 100])),
            color=alt.Color("share:N", scale=palette),
        )
    )
