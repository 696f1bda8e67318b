from __future__ import annotations

from typing import Any, Dict, List

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()

COLORS = [
    "#0088FE", "#00C49F", "#FFBB28", "#FF8042", "#8884D8", "#82CA9D",
    "#FF6B6B", "#4ECDC4", "#45B7D1", "#96CEB4", "#FFEAA7", "#DDA0DD",
]


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def month_order(records: List[Dict[str, Any]]) -> List[str]:
    # Records arrive already sorted chronologically; keep that order on the x axis.
    return [r["month"] for r in records]


def records_frame(records: List[Dict[str, Any]]) -> pd.DataFrame:
    return pd.DataFrame.from_records(records)
