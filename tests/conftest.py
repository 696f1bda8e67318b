from __future__ import annotations

import pytest

from monitoring.config import Settings


ALERT_HEADER = ["Date", "Client Name", "Alert Type", "Camera", "Remarks", "Owner"]
MISALIGNMENT_HEADER = ["Date", "Client", "Misalignment Count", "Remarks"]
ISSUE_HEADER = ["Timestamp Raised", "Clients", "Sub-Request Type", "Timestamp Resolved", "Notes"]


@pytest.fixture()
def alert_rows():
    return [
        ALERT_HEADER,
        ["10-08-2025", "Acme", "Alert"],
        ["15-08-2025", "Acme", "Alert"],
        ["01-09-2025", "Beta", "Alert"],
    ]


@pytest.fixture()
def misalignment_rows():
    return [
        MISALIGNMENT_HEADER,
        ["10-08-2025", "Acme", "5"],
        ["11-08-2025", "Beta", "3"],
        ["01-09-2025", "Acme", "2"],
        ["02-09-2025", "Beta", "0"],
        ["03-09-2025", "Gamma", "abc"],
        ["", "Acme", "4"],
        ["04-09-2025", "Beta", "2.9"],
    ]


@pytest.fixture()
def issue_rows():
    return [
        ISSUE_HEADER,
        ["2025-08-01 10:00:00", "Acme", "Historical Video Request", "2025-08-01 12:00:00"],
        ["2025-08-02 09:00:00", "Acme", "historical video request - urgent", "2025-08-02 13:00:00"],
        ["2025-08-03 08:00:00", "Beta", "Historical Video Request", ""],
        ["2025-09-01 00:00:00", "", "Historical Video Request", "2025-09-01 06:00:00"],
        ["2025-09-02 10:00:00", "Beta", "Live Feed Issue", "2025-09-02 11:00:00"],
        ["2025-09-05 10:00:00", "Acme", "Historical Video Request", "2025-09-05 09:00:00"],
        ["not a date", "Acme", "Historical Video Request", ""],
    ]


@pytest.fixture()
def settings():
    return Settings(google_sheets_api_key="test-key", tracking_sheet_id="tracking-sheet", issues_sheet_id="issues-sheet")
