from __future__ import annotations

from typing import Any, Dict, List, Sequence

import altair as alt

from monitoring.buckets import ClientBucket, Grouping, MonthBucket, MonthKey
from monitoring.charts import COLORS, month_order, records_frame, to_vega_spec
from monitoring.data import ALERTS, require_rows
from monitoring.filters import alert_frame
from monitoring.summary import count_summary

NO_ALERTS_MARKER = "No L2 alerts found"


def build_alert_charts(payload: Dict[str, Any]) -> Dict[str, alt.Chart]:
    monthly: List[Dict[str, Any]] = payload.get("monthlyData", [])
    breakdown: List[Dict[str, Any]] = payload.get("clientBreakdown", [])
    charts: Dict[str, alt.Chart] = {}
    if monthly:
        long_df = records_frame(monthly).melt(
            id_vars="month", value_vars=["total", "clients"], var_name="metric", value_name="value"
        )
        long_df["metric"] = long_df["metric"].map({"total": "Total Alerts", "clients": "Active Clients"})
        charts["monthly_trend"] = (
            alt.Chart(long_df)
            .mark_bar()
            .encode(
                x=alt.X("month:N", title="Month", sort=month_order(monthly)),
                xOffset="metric:N",
                y=alt.Y("value:Q", title=None, axis=alt.Axis(gridDash=[3, 3])),
                color=alt.Color(
                    "metric:N",
                    title=None,
                    scale=alt.Scale(domain=["Total Alerts", "Active Clients"], range=["#3B82F6", "#10B981"]),
                ),
                tooltip=["month", "metric", alt.Tooltip("value:Q", format=",")],
            )
            .properties(height=300)
        )
    if breakdown:
        charts["client_distribution"] = (
            alt.Chart(records_frame(breakdown))
            .mark_arc(outerRadius=120)
            .encode(
                theta=alt.Theta("count:Q"),
                color=alt.Color("client:N", title="Client", scale=alt.Scale(range=COLORS)),
                tooltip=["client", "count", alt.Tooltip("percentage:Q", format=".1f", title="%")],
            )
            .properties(height=400)
        )
    return charts


def compute_alerts(
    rows: Sequence[Sequence[str]],
    *,
    no_alerts_marker: str = NO_ALERTS_MARKER,
    include_charts: bool = False,
) -> Dict[str, Any]:
    require_rows(rows, ALERTS)
    frame = alert_frame(rows, no_alerts_marker=no_alerts_marker)

    monthly: Grouping[MonthKey, MonthBucket] = Grouping(MonthBucket)
    clients: Grouping[str, ClientBucket] = Grouping(ClientBucket)
    for row in frame.itertuples(index=False):
        monthly.bucket(MonthKey.from_timestamp(row.date)).add(row.client)
        clients.bucket(row.client).add()

    payload = count_summary(monthly, clients)
    if include_charts:
        payload["charts"] = {name: to_vega_spec(chart) for name, chart in build_alert_charts(payload).items()}
    return payload
