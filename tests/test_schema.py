"""Tests for header schema mapping."""

import pytest

from monitoring.errors import MissingColumnsError
from monitoring.schema import ColumnRule, IssueColumns, MisalignmentColumns, resolve_columns


class TestColumnRule:
    def test_case_insensitive_substring(self):
        rule = ColumnRule("client", (("client",),))
        assert rule.matches("Client Name")
        assert rule.matches("  CLIENTS ")
        assert not rule.matches("Customer")

    def test_all_tokens_of_a_group_required(self):
        rule = ColumnRule("raised", (("timestamp", "raised"),))
        assert rule.matches("Timestamp (Raised)")
        assert not rule.matches("Timestamp")
        assert not rule.matches("Raised By")

    def test_any_group_may_match(self):
        rule = ColumnRule("sub_request", (("sub-request",), ("sub request",)))
        assert rule.matches("Sub-Request Type")
        assert rule.matches("Sub Request")

    def test_blank_header_never_matches(self):
        assert not ColumnRule("date", (("date",),)).matches("")
        assert not ColumnRule("date", (("date",),)).matches(None)


class TestResolveColumns:
    def test_first_match_wins(self):
        rules = [ColumnRule("date", (("date",),))]
        assert resolve_columns(["Start Date", "End Date"], rules) == {"date": 0}

    def test_optional_absent_is_none(self):
        rules = [ColumnRule("date", (("date",),)), ColumnRule("client", (("client",),), required=False)]
        assert resolve_columns(["Date"], rules) == {"date": 0, "client": None}

    def test_reports_every_missing_required_column(self):
        with pytest.raises(MissingColumnsError) as excinfo:
            MisalignmentColumns.from_headers(["Day", "Client", "Total"])
        assert excinfo.value.missing == ["date", "count"]
        assert excinfo.value.status_code == 400
        assert "date" in excinfo.value.details


class TestTypedColumns:
    def test_misalignment(self):
        cols = MisalignmentColumns.from_headers(["Client", "Remarks", "Date", "Misalignment Count"])
        assert (cols.date, cols.client, cols.count) == (2, 0, 3)

    def test_issues_with_optional_columns(self):
        cols = IssueColumns.from_headers(["Timestamp Raised", "Clients", "Sub-Request Type", "Timestamp Resolved"])
        assert cols == IssueColumns(sub_request=2, raised=0, resolved=3, client=1)

    def test_issues_without_optional_columns(self):
        cols = IssueColumns.from_headers(["Sub Request", "Timestamp Raised"])
        assert cols.resolved is None
        assert cols.client is None

    def test_issues_missing_raised(self):
        with pytest.raises(MissingColumnsError) as excinfo:
            IssueColumns.from_headers(["Sub-Request Type", "Clients"])
        assert excinfo.value.missing == ["raised"]
