from __future__ import annotations

import logging
from typing import Sequence

import pandas as pd

from monitoring.data import cell_frame, parse_counts, parse_day_month_year, parse_timestamps
from monitoring.schema import AlertColumns, IssueColumns, MisalignmentColumns


logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "Unknown"


def _log_dropped(kind: str, before: int, after: int) -> None:
    if before != after:
        logger.debug("Dropped %d of %d %s rows", before - after, before, kind)


def alert_frame(
    rows: Sequence[Sequence[str]],
    *,
    no_alerts_marker: str,
    columns: AlertColumns = AlertColumns(),
) -> pd.DataFrame:
    """Valid alert rows with a parsed ``date`` and a ``client``.

    Rows missing a date, client or alert type, rows whose alert type is the
    "no alerts" marker, and rows whose date is not DD-MM-YYYY are dropped.
    """
    frame = cell_frame(rows, columns.as_dict())
    before = len(frame)
    present = (frame["date"] != "") & (frame["client"] != "") & (frame["alert_type"] != "")
    frame = frame[present & (frame["alert_type"] != no_alerts_marker.strip())].copy()
    frame["date"] = parse_day_month_year(frame["date"])
    frame = frame.dropna(subset=["date"])
    _log_dropped("alert", before, len(frame))
    return frame[["date", "client"]].reset_index(drop=True)


def misalignment_frame(rows: Sequence[Sequence[str]], columns: MisalignmentColumns) -> pd.DataFrame:
    """Misalignment rows with a parsed ``date``, a ``client`` and a non-zero ``amount``.

    Negative amounts are corrections and are kept.
    """
    frame = cell_frame(rows, columns.as_dict())
    before = len(frame)
    frame["count"] = parse_counts(frame["count"])
    keep = (frame["date"] != "") & (frame["client"] != "") & (frame["count"] != 0)
    frame = frame[keep].copy()
    frame["date"] = parse_day_month_year(frame["date"])
    frame = frame.dropna(subset=["date"])
    _log_dropped("misalignment", before, len(frame))
    return frame[["date", "client", "count"]].rename(columns={"count": "amount"}).reset_index(drop=True)


def issue_frame(rows: Sequence[Sequence[str]], columns: IssueColumns, *, category: str) -> pd.DataFrame:
    """Issue rows of the given sub-request category with a parseable raised timestamp.

    ``resolved`` stays NaT when absent or unparseable; a blank client becomes "Unknown".
    """
    frame = cell_frame(rows, columns.as_dict())
    before = len(frame)
    needle = category.strip().lower()
    in_category = frame["sub_request"].str.lower().str.contains(needle, regex=False)
    frame = frame[in_category & (frame["raised"] != "")].copy()
    frame["client"] = frame["client"].where(frame["client"] != "", UNKNOWN_CLIENT)
    frame["raised"] = parse_timestamps(frame["raised"])
    frame["resolved"] = parse_timestamps(frame["resolved"])
    frame = frame.dropna(subset=["raised"])
    _log_dropped("issue", before, len(frame))
    return frame[["raised", "resolved", "client"]].reset_index(drop=True)
