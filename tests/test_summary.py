"""Tests for dashboard section summarizing."""

from monitoring.data import MISALIGNMENT
from monitoring.errors import NoDataError, UpstreamFetchError
from monitoring.metrics_misalignment import compute_misalignment
from monitoring.summary import percentage, summarize_source


class TestPercentage:
    def test_zero_whole(self):
        assert percentage(3, 0) == 0.0

    def test_rounds_half_up(self):
        assert percentage(1, 8) == 12.5
        assert percentage(1, 3) == 33.3


class TestSummarizeSource:
    def test_payload(self, misalignment_rows):
        payload, error = summarize_source(MISALIGNMENT, misalignment_rows, compute_misalignment)
        assert error is None
        assert payload["totalCount"] == 12

    def test_fetch_failure(self):
        fetched = UpstreamFetchError("Failed to fetch Misalignment_Tracking!A:F: 403")
        payload, error = summarize_source(MISALIGNMENT, fetched, compute_misalignment)
        assert payload is None
        assert error == "Failed to fetch data (misalignment data): Failed to fetch Misalignment_Tracking!A:F: 403"

    def test_no_data(self):
        payload, error = summarize_source(MISALIGNMENT, [["Date", "Client", "Count"]], compute_misalignment)
        assert payload is None
        assert error.startswith(NoDataError.error)

    def test_unexpected_exception(self):
        def broken(rows):
            raise KeyError("total")

        payload, error = summarize_source(MISALIGNMENT, [["Date"]], broken)
        assert payload is None
        assert error == "Failed to fetch data (misalignment data): 'total'"

    def test_unexpected_fetch_exception(self):
        payload, error = summarize_source(MISALIGNMENT, RuntimeError("event loop closed"), compute_misalignment)
        assert payload is None
        assert error == "Failed to fetch data (misalignment data): event loop closed"
