import asyncio
from typing import Any, Dict, List, Optional

import altair as alt
import pandas as pd
import streamlit as st

from monitoring.config import get_settings
from monitoring.data import ALERTS, ISSUES, MISALIGNMENT, load_all
from monitoring.metrics_alerts import build_alert_charts, compute_alerts
from monitoring.metrics_issues import build_issue_charts, compute_issues
from monitoring.metrics_misalignment import build_misalignment_charts, compute_misalignment
from monitoring.summary import summarize_source

alt.data_transformers.disable_max_rows()
# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;margin: 8px 0;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


def render_page_header(title: str, breadcrumb: str, export_df: Optional[pd.DataFrame] = None, export_name: str = "export.csv"):
    inject_base_styles()
    c1, c2 = st.columns([8, 2])
    with c1:
        st.markdown(
            f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
            unsafe_allow_html=True,
        )
    with c2:
        btn_cols = st.columns(2)
        if btn_cols[0].button("Refresh"):
            st.rerun()
        if export_df is not None and not export_df.empty:
            btn_cols[1].download_button(
                "Export CSV",
                data=export_df.to_csv(index=False).encode("utf-8"),
                file_name=export_name,
                mime="text/csv",
            )


def card_title(text: str):
    st.markdown(f"<div class='card-title'>{text}</div>", unsafe_allow_html=True)


def latest_month(payload: Dict[str, Any], field: str):
    monthly: List[Dict[str, Any]] = payload.get("monthlyData") or []
    if not monthly:
        return "0", "N/A"
    last = monthly[-1]
    return f"{last.get(field, 0):,}", last.get("month", "N/A")


# ---------- Sections ----------
def render_count_tiles(payload: Dict[str, Any], total_label: str, total_help: str, unit: str, clients_label: str):
    month_value, month_label = latest_month(payload, "total")
    cols = st.columns(4)
    cols[0].metric(total_label, f"{payload['totalCount']:,}", help=total_help)
    cols[1].metric("Monthly Average", f"{payload['avgPerMonth']:.1f}", help=f"{unit} per month")
    cols[2].metric(clients_label, f"{payload['uniqueClients']:,}")
    cols[3].metric("Latest Month", month_value, help=month_label)


def render_client_table(payload: Dict[str, Any]):
    df = pd.DataFrame.from_records(payload.get("clientBreakdown", []), columns=["client", "count", "percentage"])
    df = df.rename(columns={"client": "Client Name", "count": "Count", "percentage": "%"})
    st.dataframe(df, hide_index=True, use_container_width=True, height=380)


def render_alerts(payload: Dict[str, Any]):
    render_count_tiles(payload, "Total Alerts", "Excluding No L2 alerts", "Alerts", "Active Clients")
    charts = build_alert_charts(payload)
    left, right = st.columns(2)
    with left:
        card_title("Monthly Alert Trends")
        if "monthly_trend" in charts:
            st.altair_chart(charts["monthly_trend"], use_container_width=True)
        else:
            st.info("No alerts in range.")
    with right:
        card_title("All Clients Alert Distribution")
        if "client_distribution" in charts:
            st.altair_chart(charts["client_distribution"], use_container_width=True)
        render_client_table(payload)


def render_misalignment(payload: Dict[str, Any]):
    render_count_tiles(payload, "Total Misalignments", "Cumulative count", "Misalignments", "Affected Clients")
    charts = build_misalignment_charts(payload)
    card_title("Monthly Misalignment Trends & Client Distribution")
    left, right = st.columns(2)
    with left:
        st.markdown("**Monthly Trends**")
        if "monthly_trend" in charts:
            st.altair_chart(charts["monthly_trend"], use_container_width=True)
        else:
            st.info("No misalignments in range.")
    with right:
        st.markdown("**All Clients Distribution**")
        render_client_table(payload)


def render_issues(payload: Dict[str, Any]):
    cols = st.columns(5)
    cols[0].metric("Total Raised", f"{payload['totalRaised']:,}", help="Issues raised")
    cols[1].metric("Total Resolved", f"{payload['totalResolved']:,}", help="Issues resolved")
    cols[2].metric("Avg Resolution", f"{payload['avgResolutionTime']:.1f}h", help="Hours to resolve")
    cols[3].metric("Fastest Resolution", f"{payload['minResolutionTime']:.1f}h", help="Minimum time")
    cols[4].metric("Slowest Resolution", f"{payload['maxResolutionTime']:.1f}h", help="Maximum time")

    charts = build_issue_charts(payload)
    left, right = st.columns(2)
    with left:
        card_title("Monthly Issues Overview")
        if "raised_vs_resolved" in charts:
            st.altair_chart(charts["raised_vs_resolved"], use_container_width=True)
    with right:
        card_title("Average Resolution Time by Month")
        if "avg_resolution_time" in charts:
            st.altair_chart(charts["avg_resolution_time"], use_container_width=True)

    card_title("Client Performance Breakdown")
    table = pd.DataFrame.from_records(
        payload.get("clientBreakdown", []),
        columns=["client", "raised", "resolved", "avgTime", "minTime", "maxTime", "medianTime"],
    ).rename(
        columns={
            "client": "Client",
            "raised": "Raised",
            "resolved": "Resolved",
            "avgTime": "Avg Time (h)",
            "minTime": "Min Time (h)",
            "maxTime": "Max Time (h)",
            "medianTime": "Median Time (h)",
        }
    )
    st.dataframe(table, hide_index=True, use_container_width=True)


# ---------- UI setup ----------
st.set_page_config(page_title="Monitoring Dashboard", layout="wide")
inject_base_styles()
st.title("Monitoring Dashboard")
st.caption("Comprehensive analytics and insights")

settings = get_settings()

with st.sidebar:
    st.markdown("### Navigate")
    nav_choice = st.radio("Navigate", ["Alert Tracking", "Misalignment", "Issues Management"], index=0)

with st.spinner("Loading Dashboard..."):
    fetched = asyncio.run(load_all(settings))

SECTIONS = {
    "Alert Tracking": (
        ALERTS,
        lambda rows: compute_alerts(rows, no_alerts_marker=settings.no_alerts_marker),
        render_alerts,
        "Monitoring / Alerts",
    ),
    "Misalignment": (MISALIGNMENT, compute_misalignment, render_misalignment, "Monitoring / Misalignment"),
    "Issues Management": (
        ISSUES,
        lambda rows: compute_issues(rows, category=settings.issue_category),
        render_issues,
        "Monitoring / Issues",
    ),
}

source, compute, render, breadcrumb = SECTIONS[nav_choice]
payload, error = summarize_source(source, fetched[source.name], compute)
export_df = pd.DataFrame(payload["clientBreakdown"]) if payload else None
render_page_header(nav_choice, breadcrumb, export_df, f"{source.name}_clients.csv")
if error:
    st.error(error)
else:
    render(payload)
