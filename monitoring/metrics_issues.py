from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import altair as alt
import pandas as pd

from monitoring.buckets import Grouping, IssueBucket, MonthKey
from monitoring.charts import month_order, records_frame, to_vega_spec
from monitoring.data import ISSUES, require_rows
from monitoring.filters import issue_frame
from monitoring.schema import IssueColumns
from monitoring.summary import issue_summary

ISSUE_CATEGORY = "historical video request"


def resolution_hours(raised: pd.Timestamp, resolved: Optional[pd.Timestamp]) -> Optional[float]:
    """Elapsed hours from raised to resolved, or None when unresolved or resolved before raised."""
    if resolved is None or pd.isna(resolved) or pd.isna(raised):
        return None
    hours = (resolved - raised).total_seconds() / 3600
    if hours < 0:
        return None
    return hours


def build_issue_charts(payload: Dict[str, Any]) -> Dict[str, alt.Chart]:
    monthly: List[Dict[str, Any]] = payload.get("monthlyData", [])
    if not monthly:
        return {}
    order = month_order(monthly)
    df = records_frame(monthly)
    long_df = df.melt(id_vars="month", value_vars=["raised", "resolved"], var_name="status", value_name="issues")
    long_df["status"] = long_df["status"].str.title()
    hover = alt.selection_point(fields=["status"], on="mouseover", empty="all")
    raised_resolved = (
        alt.Chart(long_df)
        .mark_line(point={"filled": True}, interpolate="monotone")
        .encode(
            x=alt.X("month:N", title="Month", sort=order),
            y=alt.Y("issues:Q", title="Issues", axis=alt.Axis(gridDash=[3, 3])),
            color=alt.Color(
                "status:N", title=None, scale=alt.Scale(domain=["Raised", "Resolved"], range=["#EF4444", "#10B981"])
            ),
            opacity=alt.condition(hover, alt.value(1), alt.value(0.2)),
            tooltip=["month", "status", "issues"],
        )
        .add_params(hover)
        .properties(height=300)
    )
    avg_time = (
        alt.Chart(df)
        .mark_bar(color="#8B5CF6")
        .encode(
            x=alt.X("month:N", title="Month", sort=order),
            y=alt.Y("avgTime:Q", title="Avg Time (h)", axis=alt.Axis(gridDash=[3, 3])),
            tooltip=["month", alt.Tooltip("avgTime:Q", title="Avg Time (h)", format=".2f")],
        )
        .properties(height=300)
    )
    return {"raised_vs_resolved": raised_resolved, "avg_resolution_time": avg_time}


def compute_issues(
    rows: Sequence[Sequence[str]],
    *,
    category: str = ISSUE_CATEGORY,
    include_charts: bool = False,
) -> Dict[str, Any]:
    require_rows(rows, ISSUES)
    columns = IssueColumns.from_headers(rows[0])
    frame = issue_frame(rows, columns, category=category)

    monthly: Grouping[MonthKey, IssueBucket] = Grouping(IssueBucket)
    clients: Grouping[str, IssueBucket] = Grouping(IssueBucket)
    overall = IssueBucket()
    for row in frame.itertuples(index=False):
        targets = (monthly.bucket(MonthKey.from_timestamp(row.raised)), clients.bucket(row.client), overall)
        hours = resolution_hours(row.raised, row.resolved)
        for bucket in targets:
            bucket.record_raised()
            if hours is not None:
                bucket.record_resolved(hours)

    payload = issue_summary(monthly, clients, overall)
    if include_charts:
        payload["charts"] = {name: to_vega_spec(chart) for name, chart in build_issue_charts(payload).items()}
    return payload
