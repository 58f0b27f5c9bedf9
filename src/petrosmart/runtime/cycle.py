"""End-of-month rollover.

Applies the passive monthly effects, advances the calendar, picks the follow-up
phase and runs the termination check.  Only called when an applied action has
brought ``turns_remaining`` to exactly zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from petrosmart.config import DEFAULT_CONFIG, EngineConfig
from petrosmart.runtime.phases import GamePhase
from petrosmart.stats import APPROVAL_MAX, APPROVAL_MIN, StatSnapshot, clamp
from petrosmart.world.upgrades import REFINE, get_upgrade


@dataclass(frozen=True, slots=True)
class RolloverResult:
    snapshot: StatSnapshot
    phase: GamePhase
    year_boundary: bool
    # Event/Quiz the cadence rule selected for a month whose follow-up was
    # pre-empted by the yearly review.
    deferred: Optional[GamePhase] = None
    termination_reason: Optional[str] = None


def total_months(snapshot: StatSnapshot, config: EngineConfig = DEFAULT_CONFIG) -> int:
    return (snapshot.year - config.start_year) * config.months_per_year + snapshot.month


def cadence_follow_up(months: int, config: EngineConfig = DEFAULT_CONFIG) -> GamePhase:
    if config.event_every_months > 0 and months % config.event_every_months == 0:
        return GamePhase.EVENT
    if config.quiz_every_months > 0 and months % config.quiz_every_months == 0:
        return GamePhase.QUIZ
    return GamePhase.PLAYING


def approval_drift(snapshot: StatSnapshot, config: EngineConfig = DEFAULT_CONFIG) -> float:
    decay = get_upgrade(REFINE).coefficient("approval_decay")
    bonus = (snapshot.renewable_capacity / config.approval_capacity_divisor) * decay ** snapshot.level(REFINE)
    penalty = snapshot.pollution / config.approval_pollution_divisor
    return bonus - penalty


def termination_reason(snapshot: StatSnapshot, config: EngineConfig = DEFAULT_CONFIG) -> Optional[str]:
    if snapshot.pollution >= config.pollution_limit:
        return "pollution"
    if snapshot.approval <= config.approval_floor:
        return "approval"
    if snapshot.cash < config.bankruptcy_line:
        return "bankruptcy"
    return None


def rollover(snapshot: StatSnapshot, config: EngineConfig = DEFAULT_CONFIG) -> RolloverResult:
    drift = approval_drift(snapshot, config)
    cash = snapshot.cash + snapshot.renewable_capacity * config.subsidy_per_gw
    approval = clamp(snapshot.approval + drift, APPROVAL_MIN, APPROVAL_MAX)

    year_boundary = snapshot.month >= config.months_per_year
    month = snapshot.month + 1
    year = snapshot.year
    if month > config.months_per_year:
        month = 1
        year += 1

    nxt = snapshot.evolve(
        cash=cash,
        approval=approval,
        month=month,
        year=year,
        turns_remaining=config.turns_per_month,
    )

    scheduled = cadence_follow_up(total_months(nxt, config), config)
    deferred: Optional[GamePhase] = None
    if year_boundary:
        phase = GamePhase.YEARLY_REVIEW
        if scheduled is not GamePhase.PLAYING:
            deferred = scheduled
    else:
        phase = scheduled

    reason = termination_reason(nxt, config)
    if reason is not None:
        return RolloverResult(
            snapshot=nxt,
            phase=GamePhase.GAME_OVER,
            year_boundary=year_boundary,
            termination_reason=reason,
        )
    return RolloverResult(snapshot=nxt, phase=phase, year_boundary=year_boundary, deferred=deferred)


__all__ = [
    "RolloverResult",
    "approval_drift",
    "cadence_follow_up",
    "rollover",
    "termination_reason",
    "total_months",
]
