import pytest

from petrosmart.runtime.review import grade_for_score, summarize, year_just_ended_for
from petrosmart.stats import initial_snapshot


def test_year_just_ended_follows_january_rollover():
    assert year_just_ended_for(initial_snapshot().evolve(year=2025, month=1)) == 2024
    assert year_just_ended_for(initial_snapshot().evolve(year=2025, month=7)) == 2025


def test_score_and_grade_from_year_start():
    start = initial_snapshot()
    mid = start.evolve(month=6, cash=1_400_000)
    current = start.evolve(year=2025, month=1, cash=2_000_000, renewable_capacity=20, refined_products=9_000)
    report = summarize(current, [start, mid, current], 2024)
    assert report.year == 2024
    assert report.cash_growth == pytest.approx(1_000_000)
    assert report.renewable_growth == pytest.approx(20)
    assert report.refined_produced == pytest.approx(9_000)
    assert report.score == 1_200
    assert report.grade == "B"


def test_score_is_floored_at_zero():
    start = initial_snapshot()
    current = start.evolve(year=2025, month=1, cash=200_000, pollution=60, approval=40)
    report = summarize(current, [start, current], 2024)
    assert report.score == 0
    assert report.grade == "C"
    assert report.pollution_reduction == pytest.approx(-55)


def test_missing_year_start_falls_back_to_first_entry():
    first = initial_snapshot().evolve(month=3, cash=500_000)
    current = initial_snapshot().evolve(year=2025, month=1, cash=1_500_000)
    report = summarize(current, [first, current], 2024)
    assert report.cash_growth == pytest.approx(1_000_000)


def test_empty_history_compares_against_current():
    current = initial_snapshot()
    report = summarize(current, [], 2024)
    assert report.score == 0
    assert report.to_dict()["grade"] == "C"


@pytest.mark.parametrize(
    "score, grade",
    [(3001, "S"), (3000, "A"), (1501, "A"), (701, "B"), (700, "C"), (0, "C"), (-1, "D")],
)
def test_grade_boundaries(score, grade):
    assert grade_for_score(score) == grade
