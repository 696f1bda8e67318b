from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    error: str
    details: str


class MonthlyTotal(BaseModel):
    month: str
    total: int
    clients: int


class ClientShare(BaseModel):
    client: str
    count: int
    percentage: float


class CountSummary(BaseModel):
    monthlyData: List[MonthlyTotal]
    clientBreakdown: List[ClientShare]
    totalCount: int
    avgPerMonth: float
    uniqueClients: int
    charts: Optional[Dict[str, Any]] = None


class IssueMonth(BaseModel):
    month: str
    raised: int
    resolved: int
    avgTime: float


class IssueClient(BaseModel):
    client: str
    raised: int
    resolved: int
    avgTime: float
    minTime: float
    maxTime: float
    medianTime: float


class IssueSummary(BaseModel):
    monthlyData: List[IssueMonth]
    clientBreakdown: List[IssueClient]
    totalRaised: int
    totalResolved: int
    avgResolutionTime: float
    minResolutionTime: float
    maxResolutionTime: float
    medianResolutionTime: float
    charts: Optional[Dict[str, Any]] = None


class SourceInfo(BaseModel):
    name: str
    range: str
    configured: bool


class MetaSourcesResponse(BaseModel):
    sources: List[SourceInfo]
