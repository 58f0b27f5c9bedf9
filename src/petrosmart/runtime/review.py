from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Sequence

from petrosmart.stats import StatSnapshot


@dataclass(frozen=True, slots=True)
class ReviewReport:
    year: int
    cash_growth: float
    pollution_reduction: float
    renewable_growth: float
    approval_change: float
    refined_produced: float
    crude_produced: float
    knowledge_gained: float
    score: int
    grade: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def year_just_ended_for(snapshot: StatSnapshot) -> int:
    return snapshot.year - 1 if snapshot.month == 1 else snapshot.year


def grade_for_score(score: float) -> str:
    if score > 3000:
        return "S"
    if score > 1500:
        return "A"
    if score > 700:
        return "B"
    if score < 0:
        return "D"
    return "C"


def _start_of_year(history: Sequence[StatSnapshot], year: int, fallback: StatSnapshot) -> StatSnapshot:
    for snapshot in history:
        if snapshot.year == year and snapshot.month == 1:
            return snapshot
    return history[0] if history else fallback


def summarize(current: StatSnapshot, history: Sequence[StatSnapshot], year_just_ended: int) -> ReviewReport:
    """Scorecard comparing the first snapshot of ``year_just_ended`` to ``current``."""

    start = _start_of_year(history, year_just_ended, current)

    cash_growth = current.cash - start.cash
    pollution_reduction = start.pollution - current.pollution
    renewable_growth = current.renewable_capacity - start.renewable_capacity
    approval_change = current.approval - start.approval
    knowledge_gained = current.knowledge - start.knowledge

    raw = (
        cash_growth / 5000
        + renewable_growth * 50
        + approval_change * 10
        + knowledge_gained * 5
        + pollution_reduction * 20
    )
    score = math.floor(max(0.0, raw))

    return ReviewReport(
        year=year_just_ended,
        cash_growth=cash_growth,
        pollution_reduction=pollution_reduction,
        renewable_growth=renewable_growth,
        approval_change=approval_change,
        refined_produced=current.refined_products - start.refined_products,
        crude_produced=current.crude_oil - start.crude_oil,
        knowledge_gained=knowledge_gained,
        score=score,
        grade=grade_for_score(score),
    )


__all__ = ["ReviewReport", "grade_for_score", "summarize", "year_just_ended_for"]
