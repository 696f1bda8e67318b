"""Grouping accumulators shared by the aggregators.

A ``Grouping`` is an insertion-ordered map from key to accumulator; the
accumulator is created by the factory on first access. Month keys order by
``(year, month)`` so sorting never depends on the display label.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Generic, Hashable, Iterable, Iterator, List, Set, Tuple, TypeVar

import numpy as np
import pandas as pd


MONTH_ABBR = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

K = TypeVar("K", bound=Hashable)
B = TypeVar("B")


@dataclass(frozen=True, order=True)
class MonthKey:
    year: int
    month: int

    @classmethod
    def from_timestamp(cls, ts: pd.Timestamp) -> "MonthKey":
        return cls(year=int(ts.year), month=int(ts.month))

    @property
    def label(self) -> str:
        return f"{MONTH_ABBR[self.month - 1]} {self.year}"


@dataclass
class MonthBucket:
    total: int = 0
    clients: Set[str] = field(default_factory=set)

    def add(self, client: str, amount: int = 1) -> None:
        self.total += amount
        self.clients.add(client)


@dataclass
class ClientBucket:
    total: int = 0

    def add(self, amount: int = 1) -> None:
        self.total += amount


@dataclass
class IssueBucket:
    raised: int = 0
    resolved: int = 0
    samples: List[float] = field(default_factory=list)

    def record_raised(self) -> None:
        self.raised += 1

    def record_resolved(self, hours: float) -> None:
        self.resolved += 1
        self.samples.append(float(hours))


class Grouping(Generic[K, B]):
    def __init__(self, factory: Callable[[], B]):
        self._factory = factory
        self._buckets: Dict[K, B] = {}

    def bucket(self, key: K) -> B:
        if key not in self._buckets:
            self._buckets[key] = self._factory()
        return self._buckets[key]

    def items(self) -> Iterable[Tuple[K, B]]:
        return self._buckets.items()

    def sorted_items(self) -> List[Tuple[K, B]]:
        return sorted(self._buckets.items(), key=lambda kv: kv[0])

    def __contains__(self, key: object) -> bool:
        return key in self._buckets

    def __getitem__(self, key: K) -> B:
        return self._buckets[key]

    def __iter__(self) -> Iterator[K]:
        return iter(self._buckets)

    def __len__(self) -> int:
        return len(self._buckets)


# ---------------- Sample statistics ----------------
def median(values: Iterable[float]) -> float:
    """Midpoint median over a sorted copy; 0 for an empty list."""
    ordered = sorted(values)
    if not ordered:
        return 0.0
    mid = len(ordered) // 2
    if len(ordered) % 2:
        return float(ordered[mid])
    return (ordered[mid - 1] + ordered[mid]) / 2


def sample_stats(samples: List[float]) -> Dict[str, float]:
    if not samples:
        return {"avg": 0.0, "min": 0.0, "max": 0.0, "median": 0.0}
    arr = np.asarray(samples, dtype=float)
    return {
        "avg": float(arr.mean()),
        "min": float(arr.min()),
        "max": float(arr.max()),
        "median": median(samples),
    }
