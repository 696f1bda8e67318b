from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union
from urllib.parse import quote

import httpx
import pandas as pd

from monitoring.config import Settings
from monitoring.errors import NoDataError, UpstreamFetchError


logger = logging.getLogger(__name__)

SHEETS_VALUES_URL = "https://sheets.googleapis.com/v4/spreadsheets/{sheet_id}/values/{cell_range}"

Rows = List[List[str]]


@dataclass(frozen=True)
class SheetSource:
    name: str
    label: str
    sheet_field: str
    range_field: str

    def cell_range(self, settings: Settings) -> str:
        return getattr(settings, self.range_field)


ALERTS = SheetSource("alerts", "alerts", "tracking_sheet_id", "alerts_range")
MISALIGNMENT = SheetSource("misalignment", "misalignment data", "tracking_sheet_id", "misalignment_range")
ISSUES = SheetSource("issues", "issues data", "issues_sheet_id", "issues_range")

SOURCES: Dict[str, SheetSource] = {s.name: s for s in (ALERTS, MISALIGNMENT, ISSUES)}


# ---------------- Upstream fetch ----------------
def _as_cells(row: object) -> List[str]:
    if not isinstance(row, (list, tuple)):
        return []
    return ["" if cell is None else str(cell) for cell in row]


async def fetch_values(sheet_id: str, cell_range: str, *, api_key: str, client: httpx.AsyncClient) -> Rows:
    """Fetch a range from the Sheets values API as rows of strings.

    Trailing empty cells are omitted by the API, so rows may be ragged.
    A response without ``values`` yields an empty list.
    """
    url = SHEETS_VALUES_URL.format(sheet_id=quote(sheet_id, safe=""), cell_range=quote(cell_range, safe="!:"))
    try:
        resp = await client.get(url, params={"key": api_key})
    except httpx.HTTPError as exc:
        raise UpstreamFetchError(f"Failed to fetch {cell_range}: {exc}") from exc
    if not resp.is_success:
        raise UpstreamFetchError(f"Failed to fetch {cell_range}: {resp.status_code}")
    try:
        payload = resp.json()
    except ValueError as exc:
        raise UpstreamFetchError(f"Invalid JSON returned for {cell_range}") from exc

    values = payload.get("values") if isinstance(payload, dict) else None
    rows = [_as_cells(row) for row in (values or [])]
    logger.info("Fetched %d rows from %s", len(rows), cell_range)
    return rows


async def load_rows(source: SheetSource, settings: Settings, *, client: Optional[httpx.AsyncClient] = None) -> Rows:
    api_key, sheet_id = settings.sheet_credentials(source.sheet_field)
    cell_range = source.cell_range(settings)
    if client is not None:
        return await fetch_values(sheet_id, cell_range, api_key=api_key, client=client)
    async with httpx.AsyncClient(timeout=settings.request_timeout) as own_client:
        return await fetch_values(sheet_id, cell_range, api_key=api_key, client=own_client)


async def load_all(
    settings: Settings, sources: Optional[Iterable[SheetSource]] = None
) -> Dict[str, Union[Rows, Exception]]:
    """Fetch several sources concurrently; failures come back as exception values."""
    selected = list(sources or SOURCES.values())
    async with httpx.AsyncClient(timeout=settings.request_timeout) as client:
        results = await asyncio.gather(
            *(load_rows(source, settings, client=client) for source in selected),
            return_exceptions=True,
        )
    return {source.name: result for source, result in zip(selected, results)}


# ---------------- Row parsing helpers ----------------
def require_rows(rows: Sequence[Sequence[str]], source: SheetSource) -> None:
    if len(rows) < 2:
        raise NoDataError(f"No rows below the header in {source.label}")


def _cell(row: Sequence[str], index: Optional[int]) -> str:
    if index is None or index >= len(row):
        return ""
    value = row[index]
    return "" if value is None else str(value).strip()


def cell_frame(rows: Sequence[Sequence[str]], columns: Mapping[str, Optional[int]]) -> pd.DataFrame:
    """Project the body rows (header skipped) onto named string columns.

    Cells past the end of a ragged row, or columns mapped to ``None``, read as "".
    """
    records = [{name: _cell(row, idx) for name, idx in columns.items()} for row in rows[1:]]
    return pd.DataFrame.from_records(records, columns=list(columns))


def parse_day_month_year(values: pd.Series) -> pd.Series:
    """Parse DD-MM-YYYY strings; anything else becomes NaT."""
    return pd.to_datetime(values.astype(str), format="%d-%m-%Y", errors="coerce")


def parse_timestamps(values: pd.Series) -> pd.Series:
    """Lenient timestamp parsing (ISO, M/D/YYYY HH:MM:SS, ...), returned as naive UTC."""
    parsed = pd.to_datetime(values.astype(str), format="mixed", errors="coerce", utc=True)
    return parsed.dt.tz_convert(None)


COUNT_LIMIT = 2**53 - 1


def _leading_int(text: object) -> int:
    if not isinstance(text, str):
        return 0
    value = int(text)
    if abs(value) > COUNT_LIMIT:
        logger.warning("Count %s out of range, clipped to %d", text, COUNT_LIMIT)
        return COUNT_LIMIT if value > 0 else -COUNT_LIMIT
    return value


def parse_counts(values: pd.Series) -> pd.Series:
    """Leading signed integer of each cell ("5 units" -> 5, "2.9" -> 2, "-2" -> -2).

    Thousands separators are ignored, cells without leading digits read as 0 and
    magnitudes beyond ``COUNT_LIMIT`` are clipped.
    """
    cleaned = values.astype(str).str.replace(",", "", regex=False)
    digits = cleaned.str.extract(r"^\s*([+-]?\d+)", expand=False)
    return digits.map(_leading_int).astype("int64")


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))
