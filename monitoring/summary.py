from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from monitoring.buckets import ClientBucket, Grouping, IssueBucket, MonthBucket, MonthKey, sample_stats
from monitoring.data import SheetSource, round_half_up
from monitoring.errors import DashboardError


logger = logging.getLogger(__name__)


def percentage(part: float, whole: float) -> float:
    if not whole:
        return 0.0
    return round_half_up(part / whole * 100, 1)


def _hours(value: float) -> float:
    return round_half_up(value, 2)


# ---------------- Count sources (alerts, misalignment) ----------------
def client_breakdown(clients: Grouping[str, ClientBucket], total: int) -> List[Dict[str, Any]]:
    # Ties keep first-seen order.
    ranked = sorted(clients.items(), key=lambda kv: kv[1].total, reverse=True)
    return [
        {"client": name, "count": bucket.total, "percentage": percentage(bucket.total, total)}
        for name, bucket in ranked
    ]


def count_summary(
    monthly: Grouping[MonthKey, MonthBucket],
    clients: Grouping[str, ClientBucket],
    unique_clients: Optional[int] = None,
) -> Dict[str, Any]:
    """Monthly and per-client totals; ``unique_clients`` defaults to the number of client buckets."""
    monthly_data = [
        {"month": key.label, "total": bucket.total, "clients": len(bucket.clients)}
        for key, bucket in monthly.sorted_items()
    ]
    total = sum(bucket.total for _, bucket in clients.items())
    avg_per_month = total / len(monthly_data) if monthly_data else 0
    return {
        "monthlyData": monthly_data,
        "clientBreakdown": client_breakdown(clients, total),
        "totalCount": total,
        "avgPerMonth": round_half_up(avg_per_month, 1),
        "uniqueClients": len(clients) if unique_clients is None else unique_clients,
    }


# ---------------- Issues ----------------
def issue_month_records(monthly: Grouping[MonthKey, IssueBucket]) -> List[Dict[str, Any]]:
    records = []
    for key, bucket in monthly.sorted_items():
        stats = sample_stats(bucket.samples)
        records.append(
            {"month": key.label, "raised": bucket.raised, "resolved": bucket.resolved, "avgTime": _hours(stats["avg"])}
        )
    return records


def issue_client_records(clients: Grouping[str, IssueBucket]) -> List[Dict[str, Any]]:
    ranked = sorted(clients.items(), key=lambda kv: kv[1].raised, reverse=True)
    records = []
    for name, bucket in ranked:
        stats = sample_stats(bucket.samples)
        records.append(
            {
                "client": name,
                "raised": bucket.raised,
                "resolved": bucket.resolved,
                "avgTime": _hours(stats["avg"]),
                "minTime": _hours(stats["min"]),
                "maxTime": _hours(stats["max"]),
                "medianTime": _hours(stats["median"]),
            }
        )
    return records


def issue_summary(
    monthly: Grouping[MonthKey, IssueBucket], clients: Grouping[str, IssueBucket], overall: IssueBucket
) -> Dict[str, Any]:
    stats = sample_stats(overall.samples)
    return {
        "monthlyData": issue_month_records(monthly),
        "clientBreakdown": issue_client_records(clients),
        "totalRaised": overall.raised,
        "totalResolved": overall.resolved,
        "avgResolutionTime": _hours(stats["avg"]),
        "minResolutionTime": _hours(stats["min"]),
        "maxResolutionTime": _hours(stats["max"]),
        "medianResolutionTime": _hours(stats["median"]),
    }


# ---------------- Dashboard sections ----------------
def summarize_source(
    source: SheetSource,
    fetched: object,
    compute: Callable[[Sequence[Sequence[str]]], Dict[str, Any]],
) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    """Return ``(payload, None)``, or ``(None, message)`` when fetching or summarizing failed."""
    try:
        if isinstance(fetched, BaseException):
            raise fetched
        return compute(fetched), None
    except DashboardError as exc:
        logger.warning("%s section failed (%s): %s", source.name, exc.status_code, exc.details)
        return None, f"{exc.error} ({source.label}): {exc.details}"
    except Exception as exc:
        logger.exception("%s section failed", source.name)
        return None, f"{DashboardError.error} ({source.label}): {exc}"
