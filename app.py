"""
Delivery Station — Interactive Dashboard

Run with:  streamlit run app.py
"""

import sys
from datetime import timedelta
from pathlib import Path

import streamlit as st
import plotly.graph_objects as go
import plotly.express as px
import pandas as pd

sys.path.insert(0, str(Path(__file__).resolve().parent))

from station_dashboard.config import ALIASES_FILE, EXPORT_DIR, HISTORY_FILE, MONTH_LABELS, STATION_NAME
from station_dashboard.loaders import load_aliases, load_history, save_aliases, save_history
from station_dashboard.simulator import generate_aliases, generate_history
from station_dashboard.identity import (
    AliasCycleError,
    AliasStore,
    known_names,
    relabel_history,
    remove_worker,
)
from station_dashboard.dashboard import (
    filter_report,
    get_advanced_report,
    get_available_years,
    get_overview,
    get_standup,
    get_worker_directory,
    get_worker_history,
    search_tracking,
)
from station_dashboard.exports import export_filename, rollup_to_frame, write_report_workbook
from station_dashboard.kpis import classify_rate, goal_calculation
from station_dashboard.ranking import assign_badges

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="Delivery Station Dashboard",
    page_icon="🚚",
    layout="wide",
    initial_sidebar_state="expanded",
)

BAND_COLORS = {
    "excellent": "#007185",
    "good": "#10B981",
    "average": "#F59E0B",
    "poor": "#EF4444",
    "grey": "#95a5a6",
}


# ---------------------------------------------------------------------------
# Data loading (cached)
# ---------------------------------------------------------------------------
@st.cache_data
def load_all_data():
    history = load_history(HISTORY_FILE)
    aliases = load_aliases(ALIASES_FILE)
    if not history:
        history = generate_history("2026-01-01", 120, with_shipments=True)
        aliases = generate_aliases()
    return history, aliases


if "history" not in st.session_state:
    history, aliases = load_all_data()
    st.session_state["history"] = history
    st.session_state["aliases"] = AliasStore(aliases)

history = st.session_state["history"]
alias_store: AliasStore = st.session_state["aliases"]
aliases = dict(alias_store.snapshot())

# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
st.sidebar.title(f"Delivery Station {STATION_NAME}")
st.sidebar.markdown("Performance Reporting Dashboard")
st.sidebar.divider()

page = st.sidebar.radio(
    "Navigate",
    ["Overview", "Stand-up", "Advanced Report", "Worker Detail", "Tracking Search", "Aliases"],
)

st.sidebar.divider()
st.sidebar.caption(f"{len(history)} days of history loaded")


# ---------------------------------------------------------------------------
# Helper: metric card
# ---------------------------------------------------------------------------
def rate_card(label: str, value: str, rate: float | None = None, delta: float | None = None):
    band = classify_rate(rate)
    color = BAND_COLORS.get(band, BAND_COLORS["grey"])
    delta_html = ""
    if delta is not None:
        arrow, delta_color = ("&#9650;", "#10B981") if delta >= 0 else ("&#9660;", "#EF4444")
        delta_html = (
            f'<div style="font-size: 12px; color: {delta_color};">'
            f"{arrow} {abs(delta):.1f}% vs previous period</div>"
        )
    st.markdown(
        f"""
        <div style="background: linear-gradient(135deg, {color}22, {color}11);
                    border-left: 4px solid {color};
                    border-radius: 8px; padding: 16px; margin-bottom: 8px;">
            <div style="font-size: 13px; color: #888; font-weight: 600; text-transform: uppercase;">{label}</div>
            <div style="font-size: 28px; font-weight: 700; color: #222; margin: 4px 0;">{value}</div>
            {delta_html}
        </div>
        """,
        unsafe_allow_html=True,
    )


def leaderboard_table(aggregates) -> pd.DataFrame:
    df = rollup_to_frame(aggregates)
    if df.empty:
        return df
    order = [a.name for a in aggregates]
    return df.set_index("name").loc[order].reset_index()


def trend_chart(trend: pd.DataFrame, title: str):
    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=trend["date"], y=trend["volume"],
        name="Volume", marker_color="#3498db", yaxis="y",
    ))
    fig.add_trace(go.Scatter(
        x=trend["date"], y=trend["rate"],
        name="Success %", mode="lines+markers",
        line=dict(color="#FF9900", width=2), yaxis="y2",
    ))
    fig.update_layout(
        title=title,
        height=400,
        yaxis=dict(title="Shipments"),
        yaxis2=dict(title="Success %", overlaying="y", side="right", range=[0, 105]),
        plot_bgcolor="rgba(0,0,0,0)",
        margin=dict(l=10, r=10, t=40, b=40),
    )
    st.plotly_chart(fig, use_container_width=True)


# ===========================================================================
# PAGE: Overview
# ===========================================================================
if page == "Overview":
    st.title("Overview")

    if not history:
        st.warning("No history available.")
        st.stop()

    last_day = history[-1].date
    col1, col2, col3 = st.columns(3)
    with col1:
        start = st.date_input("From", last_day - timedelta(days=30))
    with col2:
        end = st.date_input("To", last_day)
    with col3:
        search = st.text_input("Search worker")

    overview = get_overview(history, start, end, aliases, search)
    stats = overview["stats"]
    deltas = overview["deltas"]

    cols = st.columns(4)
    with cols[0]:
        rate_card("Total Volume", f"{stats['total_volume']:,}", delta=deltas.get("total_volume"))
    with cols[1]:
        rate_card("Delivered", f"{stats['total_delivered']:,}", delta=deltas.get("total_delivered"))
    with cols[2]:
        rate_card("Success Rate", f"{stats['overall_rate']:.1f}%", stats["overall_rate"],
                  delta=deltas.get("overall_rate"))
    with cols[3]:
        rate_card("Active Workers", f"{stats['active_workers']} / {stats['total_days']} days")

    if not overview["trend"].empty:
        trend_chart(overview["trend"], "Daily Volume & Success Rate")

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Top Performers")
        st.dataframe(leaderboard_table(overview["top"]), use_container_width=True, hide_index=True)
    with col2:
        st.subheader("Needs Attention")
        st.dataframe(leaderboard_table(overview["low"]), use_container_width=True, hide_index=True)

    st.subheader("All Workers")
    st.dataframe(leaderboard_table(overview["workers"]), use_container_width=True, hide_index=True)


# ===========================================================================
# PAGE: Stand-up
# ===========================================================================
elif page == "Stand-up":
    st.title("Stand-up")

    if not history:
        st.warning("No history available.")
        st.stop()

    last_day = history[-1].date
    col1, col2 = st.columns(2)
    with col1:
        start = st.date_input("From", last_day - timedelta(days=6), key="standup_from")
    with col2:
        end = st.date_input("To", last_day, key="standup_to")

    target = st.radio("Target rate", [90, 95, 98, 100], index=1, horizontal=True)
    standup = get_standup(history, start, end, aliases, target)

    st.subheader("Improvement Opportunities")
    if standup["opportunities"]:
        st.dataframe(leaderboard_table(standup["opportunities"]), use_container_width=True, hide_index=True)
    else:
        st.success("Everyone with real volume is above the cut-off.")

    st.subheader("Goal Calculator")
    candidates = standup["candidates"]
    if not candidates:
        st.info("No worker below the target has pending shipments.")
    else:
        agent = st.selectbox(
            "Worker", candidates,
            format_func=lambda a: f"{a.name} ({a.success_rate:.0f}%)",
        )
        pending = standup["pending"].get(agent.name, 0)
        calc = goal_calculation(agent, target, pending)
        if calc.possible:
            st.success(f"Convert {calc.needed} of {pending} pending shipments to reach {target}%.")
        else:
            st.error(f"{target}% is out of reach. Best possible rate: {calc.max_rate:.1f}%")


# ===========================================================================
# PAGE: Advanced Report
# ===========================================================================
elif page == "Advanced Report":
    st.title("Advanced Report")

    years = get_available_years(history)
    if not years:
        st.warning("No history available.")
        st.stop()

    col1, col2, col3 = st.columns(3)
    with col1:
        report_type = st.selectbox("Report type", ["monthly", "yearly", "custom"])
    with col2:
        year = st.selectbox("Year", years)
    with col3:
        month = st.selectbox("Month", range(1, 13), format_func=lambda m: MONTH_LABELS[m - 1],
                             index=history[-1].date.month - 1)

    start = end = None
    if report_type == "custom":
        col1, col2 = st.columns(2)
        with col1:
            start = st.date_input("From", history[0].date)
        with col2:
            end = st.date_input("To", history[-1].date)

    report = get_advanced_report(history, report_type, year, month, start, end, aliases)
    st.caption(report["title"])
    stats = report["stats"]

    cols = st.columns(4)
    with cols[0]:
        rate_card("Success Rate", f"{stats['overall_rate']:.1f}%", stats["overall_rate"])
    with cols[1]:
        rate_card("Avg Daily Volume", f"{stats['avg_daily_volume']:,}")
    with cols[2]:
        busiest = stats["busiest_day"]
        rate_card("Busiest Day", busiest.date.isoformat() if busiest else "N/A")
    with cols[3]:
        rate_card("Best Weekday", stats["best_weekday"] or "N/A")

    # Podium
    if report["podium"]:
        st.subheader("Podium")
        cols = st.columns(3)
        for i, agg in enumerate(report["podium"]):
            with cols[i]:
                badges = ", ".join(assign_badges(agg)) or "—"
                rate_card(f"#{i + 1} {agg.name}", f"{agg.success_rate:.1f}%", agg.success_rate)
                st.caption(f"{agg.total} shipments · badges: {badges}")

    st.subheader("Top 10 (volume-weighted)")
    st.dataframe(leaderboard_table(report["top10"]), use_container_width=True, hide_index=True)

    if not report["trend"].empty:
        trend_chart(report["trend"], "Trend")

    # Period matrix
    pivot = report["pivot"]
    st.subheader(f"Performance Matrix ({pivot.mode.value})")
    if pivot.skipped_records:
        st.info(f"{pivot.skipped_records} records fell outside the matrix layout.")
    matrix = pivot.to_frame()
    block_cols = ["name"]
    for spec in pivot.layout.blocks:
        block_cols += [f"{spec.label}_total", f"{spec.label}_rate"]
    block_cols += ["total", "delivered", "rate"]
    st.dataframe(matrix[block_cols], use_container_width=True, hide_index=True)

    heat = matrix[matrix["name"] != pivot.grand_total.name].set_index("name")
    slot_cols = [f"{label}_total" for label in pivot.layout.slot_labels]
    if not heat.empty:
        fig = px.imshow(
            heat[slot_cols].rename(columns=lambda c: c.replace("_total", "")),
            aspect="auto",
            color_continuous_scale="Blues",
            labels=dict(x="Slot", y="Worker", color="Shipments"),
        )
        fig.update_layout(height=max(300, 28 * len(heat)))
        st.plotly_chart(fig, use_container_width=True)

    # Filtered table
    st.subheader("Full Report")
    col1, col2, col3 = st.columns(3)
    with col1:
        adv_search = st.text_input("Search", key="adv_search")
    with col2:
        min_vol = st.number_input("Min volume", min_value=0, value=0)
    with col3:
        rate_range = st.slider("Success rate range", 0.0, 100.0, (0.0, 100.0))
    filtered = filter_report(report["report"], adv_search, min_vol, *rate_range)
    st.dataframe(leaderboard_table(filtered), use_container_width=True, hide_index=True)

    if st.button("Export workbook"):
        path = EXPORT_DIR / export_filename(report["title"], pivot)
        write_report_workbook(path, report["report"], pivot)
        st.success(f"Exported {path.name}")


# ===========================================================================
# PAGE: Worker Detail
# ===========================================================================
elif page == "Worker Detail":
    st.title("Worker Detail")

    directory = get_worker_directory(history, aliases)
    if directory.empty:
        st.warning("No workers in history.")
        st.stop()

    name = st.selectbox("Worker", directory["name"].tolist())
    detail = get_worker_history(history, name, aliases)
    hist = detail["history"]

    cols = st.columns(4)
    counts = detail["status_counts"]
    for col, status in zip(cols, ["delivered", "failed", "ofd", "rto"]):
        with col:
            st.metric(status.upper(), f"{counts[status]:,}")

    if not hist.empty:
        fig = go.Figure()
        fig.add_trace(go.Bar(x=hist["date"], y=hist["delivered"], name="Delivered", marker_color="#10B981"))
        fig.add_trace(go.Bar(x=hist["date"], y=hist["failed"], name="Not delivered", marker_color="#EF4444"))
        fig.update_layout(barmode="stack", height=350, plot_bgcolor="rgba(0,0,0,0)")
        st.plotly_chart(fig, use_container_width=True)
        st.dataframe(hist, use_container_width=True, hide_index=True)


# ===========================================================================
# PAGE: Tracking Search
# ===========================================================================
elif page == "Tracking Search":
    st.title("Tracking Search")

    col1, col2 = st.columns([3, 1])
    with col1:
        query = st.text_input("Tracking id or note")
    with col2:
        status = st.selectbox("Status", ["all", "delivered", "failed", "ofd", "rto"])

    if query:
        matches = search_tracking(history, query, aliases, None if status == "all" else status)
        st.caption(f"{len(matches)} shipments found")
        st.dataframe(matches, use_container_width=True, hide_index=True)


# ===========================================================================
# PAGE: Aliases
# ===========================================================================
elif page == "Aliases":
    st.title("Worker Aliases")

    directory = get_worker_directory(history, aliases)
    st.dataframe(directory, use_container_width=True, hide_index=True)
    names = known_names(history, aliases)

    st.subheader("Rename / merge")
    col1, col2 = st.columns(2)
    with col1:
        old_name = st.selectbox("Current name", names)
    with col2:
        new_name = st.text_input("New name")
    rewrite = st.checkbox("Also rewrite stored history", value=True)

    if st.button("Apply") and old_name and new_name:
        try:
            updated = alias_store.rename(old_name, new_name)
        except AliasCycleError as exc:
            st.error(str(exc))
        else:
            save_aliases(updated, ALIASES_FILE)
            if rewrite:
                st.session_state["history"] = relabel_history(history, old_name, new_name)
                save_history(st.session_state["history"], HISTORY_FILE)
            st.success(f"{old_name} now resolves to {new_name.strip().upper()}")
            st.rerun()

    st.subheader("Remove worker")
    doomed = st.selectbox("Worker to remove", names, key="remove_worker")
    if st.button("Remove from all history") and doomed:
        st.session_state["history"] = remove_worker(history, doomed, aliases)
        save_history(st.session_state["history"], HISTORY_FILE)
        st.rerun()

    if aliases:
        st.subheader("Current alias map")
        st.dataframe(
            pd.DataFrame(sorted(aliases.items()), columns=["raw name", "canonical"]),
            use_container_width=True, hide_index=True,
        )
