from __future__ import annotations

from typing import Any, Dict, List, Sequence, Set

import altair as alt

from monitoring.buckets import ClientBucket, Grouping, MonthBucket, MonthKey
from monitoring.charts import month_order, records_frame, to_vega_spec
from monitoring.data import MISALIGNMENT, require_rows
from monitoring.filters import misalignment_frame
from monitoring.schema import MisalignmentColumns
from monitoring.summary import count_summary


def build_misalignment_charts(payload: Dict[str, Any]) -> Dict[str, alt.Chart]:
    monthly: List[Dict[str, Any]] = payload.get("monthlyData", [])
    if not monthly:
        return {}
    area = (
        alt.Chart(records_frame(monthly))
        .mark_area(line={"color": "#F59E0B", "strokeWidth": 3}, color="#FEF3C7", interpolate="monotone")
        .encode(
            x=alt.X("month:N", title="Month", sort=month_order(monthly)),
            y=alt.Y("total:Q", title="Misalignments", axis=alt.Axis(gridDash=[3, 3])),
            tooltip=["month", alt.Tooltip("total:Q", format=","), alt.Tooltip("clients:Q", title="Clients")],
        )
        .properties(height=300)
    )
    return {"monthly_trend": area}


def compute_misalignment(rows: Sequence[Sequence[str]], *, include_charts: bool = False) -> Dict[str, Any]:
    """Sum the misalignment ``count`` column per month and per client."""
    require_rows(rows, MISALIGNMENT)
    columns = MisalignmentColumns.from_headers(rows[0])
    frame = misalignment_frame(rows, columns)

    monthly: Grouping[MonthKey, MonthBucket] = Grouping(MonthBucket)
    clients: Grouping[str, ClientBucket] = Grouping(ClientBucket)
    positive: Set[str] = set()
    for row in frame.itertuples(index=False):
        amount = int(row.amount)
        monthly.bucket(MonthKey.from_timestamp(row.date)).add(row.client, amount)
        clients.bucket(row.client).add(amount)
        if amount > 0:
            positive.add(row.client)

    payload = count_summary(monthly, clients, unique_clients=len(positive))
    if include_charts:
        payload["charts"] = {name: to_vega_spec(chart) for name, chart in build_misalignment_charts(payload).items()}
    return payload
