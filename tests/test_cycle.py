import pytest

from petrosmart.config import DEFAULT_CONFIG, EngineConfig
from petrosmart.runtime.cycle import (
    approval_drift,
    cadence_follow_up,
    rollover,
    termination_reason,
    total_months,
)
from petrosmart.runtime.phases import GamePhase
from petrosmart.stats import initial_snapshot
from petrosmart.world.upgrades import REFINE


def _end_of(month: int, year: int = 2024, **changes):
    return initial_snapshot().evolve(month=month, year=year, turns_remaining=0, **changes)


def test_rollover_applies_passive_effects():
    result = rollover(_end_of(1, renewable_capacity=10.0))
    snapshot = result.snapshot
    assert snapshot.cash == pytest.approx(1_050_000)
    assert snapshot.approval == pytest.approx(80 + 1.0 - 0.25)
    assert (snapshot.month, snapshot.year, snapshot.turns_remaining) == (2, 2024, 5)
    assert result.phase is GamePhase.PLAYING
    assert not result.year_boundary


def test_refine_level_dampens_approval_bonus():
    snapshot = _end_of(1, renewable_capacity=10.0).with_level(REFINE, 2)
    assert approval_drift(snapshot) == pytest.approx(0.95**2 - 0.25)


def test_cadence_prefers_event_over_quiz():
    assert cadence_follow_up(3) is GamePhase.QUIZ
    assert cadence_follow_up(4) is GamePhase.EVENT
    assert cadence_follow_up(12) is GamePhase.EVENT
    assert cadence_follow_up(5) is GamePhase.PLAYING


def test_rollover_schedules_follow_ups():
    assert rollover(_end_of(2)).phase is GamePhase.QUIZ
    assert rollover(_end_of(3)).phase is GamePhase.EVENT
    assert rollover(_end_of(11)).phase is GamePhase.EVENT
    assert rollover(_end_of(4)).phase is GamePhase.PLAYING


def test_year_boundary_opens_review():
    result = rollover(_end_of(12))
    assert result.year_boundary
    assert result.phase is GamePhase.YEARLY_REVIEW
    assert (result.snapshot.year, result.snapshot.month) == (2025, 1)
    assert total_months(result.snapshot) == 13
    assert result.deferred is None


def test_year_boundary_defers_scheduled_follow_up():
    config = EngineConfig(event_every_months=13)
    result = rollover(_end_of(12), config)
    assert result.phase is GamePhase.YEARLY_REVIEW
    assert result.deferred is GamePhase.EVENT


@pytest.mark.parametrize(
    "changes, reason",
    [
        ({"pollution": 100.0}, "pollution"),
        ({"approval": 0.2}, "approval"),
        ({"cash": -500_001.0}, "bankruptcy"),
    ],
)
def test_termination_conditions(changes, reason):
    result = rollover(_end_of(5, **changes))
    assert result.phase is GamePhase.GAME_OVER
    assert result.termination_reason == reason


def test_bankruptcy_line_is_strict():
    assert termination_reason(initial_snapshot().evolve(cash=-500_000.0)) is None
    assert rollover(_end_of(4, cash=-500_000.0)).phase is GamePhase.PLAYING


def test_game_over_overrides_review_and_deferral():
    config = EngineConfig(event_every_months=13)
    result = rollover(_end_of(12, pollution=150.0), config)
    assert result.phase is GamePhase.GAME_OVER
    assert result.year_boundary
    assert result.deferred is None


def test_total_months_counts_from_start_year():
    assert total_months(initial_snapshot(), DEFAULT_CONFIG) == 1
    assert total_months(initial_snapshot().evolve(year=2026, month=3)) == 27
