"""Header schema mapping.

Sheets with named headers are resolved once into a typed column-index table;
a missing required column raises ``MissingColumnsError`` naming every absent
column instead of failing later on a bad index.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

from monitoring.errors import MissingColumnsError


@dataclass(frozen=True)
class ColumnRule:
    """A column is matched when its lower-cased header contains every token of any one group."""

    name: str
    token_groups: Tuple[Tuple[str, ...], ...]
    required: bool = True

    def matches(self, header: object) -> bool:
        text = str(header or "").strip().lower()
        if not text:
            return False
        return any(all(token in text for token in group) for group in self.token_groups)


def resolve_columns(headers: Sequence[object], rules: Sequence[ColumnRule]) -> Dict[str, Optional[int]]:
    """Map each rule to the first matching header position (``None`` when optional and absent)."""
    resolved: Dict[str, Optional[int]] = {}
    missing = []
    for rule in rules:
        index = next((i for i, header in enumerate(headers) if rule.matches(header)), None)
        if index is None and rule.required:
            missing.append(rule.name)
        resolved[rule.name] = index
    if missing:
        raise MissingColumnsError(missing, headers=[str(h) for h in headers])
    return resolved


@dataclass(frozen=True)
class AlertColumns:
    # Alert_Tracking is positional: Date | Client | Alert Type | ...
    date: int = 0
    client: int = 1
    alert_type: int = 2

    def as_dict(self) -> Dict[str, Optional[int]]:
        return {"date": self.date, "client": self.client, "alert_type": self.alert_type}


MISALIGNMENT_RULES = (
    ColumnRule("date", (("date",),)),
    ColumnRule("client", (("client",),)),
    ColumnRule("count", (("count",),)),
)


@dataclass(frozen=True)
class MisalignmentColumns:
    date: int
    client: int
    count: int

    @classmethod
    def from_headers(cls, headers: Sequence[object]) -> "MisalignmentColumns":
        found = resolve_columns(headers, MISALIGNMENT_RULES)
        return cls(date=found["date"], client=found["client"], count=found["count"])

    def as_dict(self) -> Dict[str, Optional[int]]:
        return {"date": self.date, "client": self.client, "count": self.count}


ISSUE_RULES = (
    ColumnRule("sub_request", (("sub-request",), ("sub request",))),
    ColumnRule("raised", (("timestamp", "raised"),)),
    ColumnRule("resolved", (("timestamp", "resolved"),), required=False),
    ColumnRule("client", (("client",),), required=False),
)


@dataclass(frozen=True)
class IssueColumns:
    sub_request: int
    raised: int
    resolved: Optional[int] = None
    client: Optional[int] = None

    @classmethod
    def from_headers(cls, headers: Sequence[object]) -> "IssueColumns":
        found = resolve_columns(headers, ISSUE_RULES)
        return cls(
            sub_request=found["sub_request"],
            raised=found["raised"],
            resolved=found["resolved"],
            client=found["client"],
        )

    def as_dict(self) -> Dict[str, Optional[int]]:
        return {
            "sub_request": self.sub_request,
            "raised": self.raised,
            "resolved": self.resolved,
            "client": self.client,
        }
