"""
Streamlit app for VitoEnergy.
Provides interactive visualization of heating energy data.
"""

import logging
from datetime import date, datetime, timedelta

import altair as alt
import pandas as pd
import pytz
import streamlit as st

from pyvitoenergy.aggregator import (
    RangeQuery,
    RangeScope,
    WindowSummary,
    activity_intervals,
    window_summary,
)
from pyvitoenergy.config import settings
from pyvitoenergy.daily import monthly_totals, records_to_frame
from pyvitoenergy.database import DatabaseService
from pyvitoenergy.decimation import DecimatedView, decimate
from pyvitoenergy.engine import DerivedSeries, derive_series
from pyvitoenergy.errors import PersistenceError
from pyvitoenergy.metrics import system_metrics
from pyvitoenergy.subsystems import SUBSYSTEMS

logger = logging.getLogger("VitoEnergy")

SUBSYSTEM_COLORS = {
    "solar": "rgba(255,191,0,0.8)",
    "gas": "rgba(255,0,0,0.8)",
    "house_heating": "rgba(0,191,255,0.8)",
}


def setup_page():
    """Configure Streamlit page settings"""
    st.set_page_config(
        page_title="VitoEnergy",
        page_icon="🔥",
        layout="wide",
        initial_sidebar_state="collapsed",
    )

    # Custom CSS
    st.markdown(
        """
    <style>
    .stApp {
        background-color: #2a2a2a;
    }
    .metric-label {
        font-size: 1.2rem;
        color: #CCCCCC;
        margin-bottom: 0.5rem;
    }
    .block-container {
        padding-top: 1rem;
        background-color: #1a1a1a;
        padding-bottom: 1rem;
    }
    </style>
    """,
        unsafe_allow_html=True,
    )


@st.cache_data(ttl=300)
def load_derived(days: int):
    """Load samples from the database and derive the full-resolution series.

    Cached, so zooming and marking reuse the same cumulative series.
    """
    db = DatabaseService()
    start = date.today() - timedelta(days=days - 1)
    samples = db.load_samples(start_date=start)
    return samples, derive_series(samples)


@st.cache_data(ttl=300)
def load_daily_records():
    return DatabaseService().get_daily_records()


def activity_bands(derived: DerivedSeries, window: RangeQuery) -> pd.DataFrame:
    """Background spans where a subsystem was active."""
    bands = []
    for subsystem in SUBSYSTEMS:
        for interval in activity_intervals(derived, subsystem, window):
            bands.append(
                {
                    "start": interval.start_time,
                    "end": interval.end_time + timedelta(minutes=1),
                    "Subsystem": subsystem.label,
                }
            )
    return pd.DataFrame(bands, columns=["start", "end", "Subsystem"])


def plot_power(view: DecimatedView, bands: pd.DataFrame, x_domain):
    """Power per subsystem (decimated) over activity background spans"""
    frame = view.frame
    chart_data = pd.DataFrame({"time": frame["time"]})
    for subsystem in SUBSYSTEMS:
        chart_data[subsystem.label] = frame[subsystem.power_column].to_numpy()
    chart_data = chart_data.melt(id_vars=["time"], var_name="Subsystem", value_name="Power")

    domain = [s.label for s in SUBSYSTEMS]
    colors = [SUBSYSTEM_COLORS[s.name] for s in SUBSYSTEMS]
    scale = alt.Scale(domain=domain, range=colors)

    lines = (
        alt.Chart(chart_data)
        .mark_line(strokeWidth=0.8)
        .encode(
            x=alt.X("time:T", title="Time", scale=alt.Scale(domain=x_domain)),
            y=alt.Y("Power:Q", title="Power (kW)"),
            color=alt.Color("Subsystem:N", scale=scale, legend=alt.Legend(orient="top", title=None)),
            tooltip=["time:T", "Subsystem:N", alt.Tooltip("Power:Q", format=".2f")],
        )
    )

    layers = []
    if not bands.empty:
        layers.append(
            alt.Chart(bands)
            .mark_rect(opacity=0.15)
            .encode(
                x="start:T",
                x2="end:T",
                color=alt.Color("Subsystem:N", scale=scale, legend=None),
                tooltip=alt.value(None),
            )
        )
    layers.append(lines)

    return (
        alt.layer(*layers)
        .properties(height=400, padding={"left": 30, "top": 30, "right": 30, "bottom": 30})
        .configure(
            background="#2d2d2d",
            axis=alt.AxisConfig(
                gridColor="#444444", gridOpacity=0.3, labelColor="white", titleColor="white"
            ),
        )
    )


def plot_energy(view: DecimatedView, x_domain):
    """Cumulative energy per subsystem"""
    frame = view.frame
    chart_data = pd.DataFrame({"time": frame["time"]})
    for subsystem in SUBSYSTEMS:
        chart_data[subsystem.label] = frame[subsystem.energy_column].to_numpy()
    chart_data = chart_data.melt(id_vars=["time"], var_name="Subsystem", value_name="Energy")

    return (
        alt.Chart(chart_data)
        .mark_line(strokeWidth=1.2, interpolate="step-after")
        .encode(
            x=alt.X("time:T", title="Time", scale=alt.Scale(domain=x_domain)),
            y=alt.Y("Energy:Q", title="Cumulative energy (kWh)"),
            color=alt.Color(
                "Subsystem:N",
                scale=alt.Scale(
                    domain=[s.label for s in SUBSYSTEMS],
                    range=[SUBSYSTEM_COLORS[s.name] for s in SUBSYSTEMS],
                ),
                legend=alt.Legend(orient="top", title=None),
            ),
            tooltip=["time:T", "Subsystem:N", alt.Tooltip("Energy:Q", format=".3f")],
        )
        .properties(height=300)
        .configure(background="#2d2d2d")
    )


def plot_monthly(records):
    monthly = monthly_totals(records)
    if monthly.empty:
        return None
    data = monthly.melt(
        id_vars=["month"],
        value_vars=["solar_energy_kwh", "gas_energy_kwh", "house_heating_energy_kwh"],
        var_name="Subsystem",
        value_name="Energy",
    )
    return (
        alt.Chart(data)
        .mark_bar()
        .encode(
            x=alt.X("month:N", title="Month"),
            y=alt.Y("Energy:Q", title="Energy (kWh)", stack="zero"),
            color=alt.Color("Subsystem:N", legend=alt.Legend(orient="top", title=None)),
            tooltip=["month:N", "Subsystem:N", alt.Tooltip("Energy:Q", format=".2f")],
        )
        .properties(height=300)
        .configure(background="#2d2d2d")
    )


def show_summary(summary: WindowSummary, title: str):
    """Legend totals for a window, always from the full-resolution series"""
    st.markdown(f'<div class="metric-label">{title}</div>', unsafe_allow_html=True)
    if summary.start_time is None:
        st.write("No data")
        return
    st.caption(f"{summary.start_time:%d.%m.%Y %H:%M} - {summary.end_time:%d.%m.%Y %H:%M}")
    columns = st.columns(len(SUBSYSTEMS) + 1)
    for column, subsystem in zip(columns, SUBSYSTEMS):
        stats = summary.stats[subsystem.name]
        column.metric(
            subsystem.label,
            f"{stats.energy_kwh:.2f} kWh",
            f"{stats.active_percent:.1f}% active",
            delta_color="off",
        )
    columns[-1].metric("Total", f"{summary.total_energy_kwh:.2f} kWh", str(summary.duration))


def to_datetime(value) -> datetime:
    return pd.Timestamp(value).to_pydatetime()


def main():
    """Main function for the Streamlit app"""
    setup_page()

    st.title("VitoEnergy")

    left_col, _, right_col = st.columns([3, 3, 1], vertical_alignment="center")
    with right_col:
        options = [1, 2, 3, 7, 14, 30]
        default = options.index(settings.default_days) if settings.default_days in options else 1
        days = st.selectbox("Time Range (days)", options, index=default)

    try:
        samples, derived = load_derived(days)
    except PersistenceError as e:
        logger.error(f"Failed to load data: {e}")
        st.error(f"Error loading data: {str(e)}")
        return

    if derived.empty:
        st.error("No data available for the selected time period.")
        return

    with left_col:
        last_update = datetime.now(pytz.timezone(settings.timezone)).strftime("%Y-%m-%d %H:%M:%S")
        st.markdown(
            f"""
                <p>Last refresh: {last_update}</p>
                <p>Last data point: {to_datetime(derived.times.iat[-1]):%Y-%m-%d %H:%M}</p>
            """,
            unsafe_allow_html=True,
        )

    metrics = system_metrics(samples)
    cards = st.columns(4)
    cards[0].metric("Burner starts", metrics.total_burner_starts)
    cards[1].metric("Avg collector temp", f"{metrics.avg_collector_temp:.1f}°C")
    cards[2].metric("Max DHW temp", f"{metrics.max_dhw_temp:.1f}°C")
    cards[3].metric("Avg water pressure", f"{metrics.avg_water_pressure:.2f} bar")

    show_summary(window_summary(derived, RangeQuery.full()), "Full range")

    times = [to_datetime(t) for t in derived.times]
    zoom = st.select_slider(
        "Visible window", options=times, value=(times[0], times[-1]),
        format_func=lambda t: t.strftime("%d.%m. %H:%M"),
    )
    zoom_window = RangeQuery.between(zoom[0], zoom[1], scope=RangeScope.ZOOM)
    show_summary(window_summary(derived, zoom_window), "Visible window")

    view = decimate(derived)
    x_domain = [min(zoom).isoformat(), max(zoom).isoformat()]

    st.subheader("Power")
    st.altair_chart(
        plot_power(view, activity_bands(derived, zoom_window), x_domain), use_container_width=True
    )

    st.subheader("Cumulative Energy")
    st.altair_chart(plot_energy(view, x_domain), use_container_width=True)

    st.subheader("Marked Period")
    mark = st.select_slider(
        "Mark period", options=times, value=(times[0], times[0]),
        format_func=lambda t: t.strftime("%d.%m. %H:%M"),
    )
    if mark[0] != mark[1]:
        show_summary(
            window_summary(derived, RangeQuery.between(mark[0], mark[1], scope=RangeScope.MARKED)),
            "Marked period",
        )

    st.subheader("Daily Energy")
    try:
        records = load_daily_records()
    except PersistenceError as e:
        st.error(f"Error loading daily records: {str(e)}")
        return
    monthly_chart = plot_monthly(records)
    if monthly_chart:
        st.altair_chart(monthly_chart, use_container_width=True)
    st.dataframe(records_to_frame(records), use_container_width=True)


if __name__ == "__main__":
    main()
