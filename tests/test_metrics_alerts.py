"""Tests for the alert aggregator."""

import pytest

from monitoring.errors import NoDataError
from monitoring.metrics_alerts import compute_alerts
from tests.conftest import ALERT_HEADER


class TestComputeAlerts:
    def test_monthly_and_client_breakdown(self, alert_rows):
        result = compute_alerts(alert_rows)
        assert result["monthlyData"] == [
            {"month": "Aug 2025", "total": 2, "clients": 1},
            {"month": "Sep 2025", "total": 1, "clients": 1},
        ]
        assert result["clientBreakdown"] == [
            {"client": "Acme", "count": 2, "percentage": 66.7},
            {"client": "Beta", "count": 1, "percentage": 33.3},
        ]
        assert result["totalCount"] == 3
        assert result["avgPerMonth"] == 1.5
        assert result["uniqueClients"] == 2
        assert "charts" not in result

    def test_no_alerts_marker_excluded(self, alert_rows):
        rows = alert_rows + [["20-08-2025", "Gamma", "No L2 alerts found"], ["21-10-2025", "Gamma", "No L2 alerts found"]]
        result = compute_alerts(rows)
        assert result["totalCount"] == 3
        assert [r["client"] for r in result["clientBreakdown"]] == ["Acme", "Beta"]
        assert [m["month"] for m in result["monthlyData"]] == ["Aug 2025", "Sep 2025"]

    def test_custom_marker(self):
        rows = [ALERT_HEADER, ["01-08-2025", "Acme", "none"], ["02-08-2025", "Acme", "Alert"]]
        assert compute_alerts(rows, no_alerts_marker="none")["totalCount"] == 1

    def test_rows_with_missing_cells_or_bad_dates_skipped(self, alert_rows):
        rows = alert_rows + [
            ["", "Acme", "Alert"],
            ["05-08-2025", "", "Alert"],
            ["05-08-2025", "Acme"],
            ["2025/08/05", "Acme", "Alert"],
            ["45-13-2025", "Acme", "Alert"],
        ]
        result = compute_alerts(rows)
        assert result["totalCount"] == 3
        assert sum(r["count"] for r in result["clientBreakdown"]) == result["totalCount"]

    def test_months_sorted_across_year_boundary(self):
        rows = [
            ALERT_HEADER,
            ["02-01-2025", "Acme", "Alert"],
            ["15-12-2024", "Beta", "Alert"],
            ["16-12-2024", "Acme", "Alert"],
        ]
        result = compute_alerts(rows)
        assert result["monthlyData"] == [
            {"month": "Dec 2024", "total": 2, "clients": 2},
            {"month": "Jan 2025", "total": 1, "clients": 1},
        ]

    def test_ties_keep_first_seen_order(self):
        rows = [ALERT_HEADER, ["01-08-2025", "Zeta", "A"], ["01-08-2025", "Acme", "A"]]
        result = compute_alerts(rows)
        assert [r["client"] for r in result["clientBreakdown"]] == ["Zeta", "Acme"]
        assert [r["percentage"] for r in result["clientBreakdown"]] == [50.0, 50.0]

    def test_percentages_sum_to_about_100(self):
        rows = [ALERT_HEADER] + [["01-08-2025", f"Client {i % 7}", "Alert"] for i in range(31)]
        result = compute_alerts(rows)
        assert abs(sum(r["percentage"] for r in result["clientBreakdown"]) - 100) <= 0.5

    def test_only_filtered_rows_gives_empty_summary(self):
        result = compute_alerts([ALERT_HEADER, ["01-08-2025", "Acme", "No L2 alerts found"]])
        assert result["monthlyData"] == []
        assert result["clientBreakdown"] == []
        assert result["totalCount"] == 0
        assert result["avgPerMonth"] == 0

    def test_header_only_raises_no_data(self):
        with pytest.raises(NoDataError):
            compute_alerts([ALERT_HEADER])
        with pytest.raises(NoDataError):
            compute_alerts([])

    def test_charts(self, alert_rows):
        charts = compute_alerts(alert_rows, include_charts=True)["charts"]
        assert set(charts) == {"monthly_trend", "client_distribution"}
        assert charts["client_distribution"]["mark"]["type"] == "arc"
