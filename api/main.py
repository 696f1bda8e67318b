from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Tuple, Union

import numpy as np
import pandas as pd
from fastapi import Depends, FastAPI, Query
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import CountSummary, ErrorResponse, IssueSummary, MetaSourcesResponse
from monitoring.config import Settings, get_settings
from monitoring.data import ALERTS, ISSUES, MISALIGNMENT, SOURCES, Rows, SheetSource, load_all, load_rows
from monitoring.errors import DashboardError
from monitoring.metrics_alerts import compute_alerts
from monitoring.metrics_issues import compute_issues
from monitoring.metrics_misalignment import compute_misalignment


app = FastAPI(title="Monitoring Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

ERROR_RESPONSES: Dict[Union[int, str], Dict[str, Any]] = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}

EXPORT_COLUMNS = {
    "alerts": ["client", "count", "percentage"],
    "misalignment": ["client", "count", "percentage"],
    "issues": ["client", "raised", "resolved", "avgTime", "minTime", "maxTime", "medianTime"],
}


def _json(data: object, status_code: int = 200) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            data,
            custom_encoder={
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        ),
    )


def _compute(source: SheetSource, rows: Rows, settings: Settings, *, include_charts: bool) -> Dict[str, Any]:
    if source is ALERTS:
        return compute_alerts(rows, no_alerts_marker=settings.no_alerts_marker, include_charts=include_charts)
    if source is MISALIGNMENT:
        return compute_misalignment(rows, include_charts=include_charts)
    return compute_issues(rows, category=settings.issue_category, include_charts=include_charts)


def _summarize(
    source: SheetSource,
    fetched: Union[Rows, BaseException],
    settings: Settings,
    *,
    include_charts: bool = False,
) -> Tuple[int, Dict[str, Any]]:
    try:
        if isinstance(fetched, BaseException):
            raise fetched
        return 200, _compute(source, fetched, settings, include_charts=include_charts)
    except DashboardError as exc:
        logger.warning("%s request failed (%s): %s", source.name, exc.status_code, exc.details)
        return exc.status_code, exc.to_dict()
    except Exception as exc:
        logger.exception("%s failed", source.name)
        return 500, {"error": DashboardError.error, "details": str(exc)}


async def _fetch(source: SheetSource, settings: Settings) -> Union[Rows, Exception]:
    try:
        return await load_rows(source, settings)
    except Exception as exc:
        return exc


async def _source_response(source: SheetSource, settings: Settings, include_charts: bool) -> JSONResponse:
    status, body = _summarize(source, await _fetch(source, settings), settings, include_charts=include_charts)
    return _json(body, status_code=status)


@app.get("/api/alerts", response_model=CountSummary, responses=ERROR_RESPONSES)
async def alerts(charts: bool = Query(default=False), settings: Settings = Depends(get_settings)):
    return await _source_response(ALERTS, settings, charts)


@app.get("/api/misalignment", response_model=CountSummary, responses=ERROR_RESPONSES)
async def misalignment(charts: bool = Query(default=False), settings: Settings = Depends(get_settings)):
    return await _source_response(MISALIGNMENT, settings, charts)


@app.get("/api/issues", response_model=IssueSummary, responses=ERROR_RESPONSES)
async def issues(charts: bool = Query(default=False), settings: Settings = Depends(get_settings)):
    return await _source_response(ISSUES, settings, charts)


@app.get("/api/overview")
async def overview(settings: Settings = Depends(get_settings)):
    """All three sources fetched concurrently; each section is a summary or an error object."""
    try:
        fetched = await load_all(settings)
    except Exception as exc:
        logger.exception("overview failed")
        return _json({"error": DashboardError.error, "details": str(exc)}, status_code=500)
    sections = {name: _summarize(SOURCES[name], result, settings)[1] for name, result in fetched.items()}
    return _json(sections)


@app.get("/api/export/{source}", responses=ERROR_RESPONSES)
async def export_source(source: str, settings: Settings = Depends(get_settings)):
    sheet = SOURCES.get(source)
    if sheet is None:
        return _json({"error": "Unknown source", "details": f"Expected one of: {', '.join(SOURCES)}"}, status_code=404)

    status, body = _summarize(sheet, await _fetch(sheet, settings), settings)
    if status != 200:
        return _json(body, status_code=status)

    export_df = pd.DataFrame.from_records(body["clientBreakdown"], columns=EXPORT_COLUMNS[source])
    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    filename = f"{source}_clients.csv"
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})


@app.get("/meta/sources", response_model=MetaSourcesResponse)
def meta_sources(settings: Settings = Depends(get_settings)):
    sources: List[Dict[str, Any]] = [
        {"name": s.name, "range": s.cell_range(settings), "configured": settings.is_configured(s.sheet_field)}
        for s in SOURCES.values()
    ]
    return _json({"sources": sources})
