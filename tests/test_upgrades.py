import pytest

from petrosmart.world.upgrades import (
    DRILL,
    REFINE,
    RENEWABLE,
    RESEARCH,
    UPGRADE_IDS,
    get_upgrade,
    normalize_levels,
    upgrade_catalog,
)


def test_catalog_covers_four_capabilities():
    assert UPGRADE_IDS == (DRILL, REFINE, RESEARCH, RENEWABLE)
    assert [spec.upgrade_id for spec in upgrade_catalog()] == list(UPGRADE_IDS)
    assert get_upgrade(DRILL).name["ID"] == "Mata Bor Turbo"


def test_first_tier_prices():
    assert get_upgrade(DRILL).cost_at(0) == 375_000
    assert get_upgrade(REFINE).cost_at(0) == 450_000
    assert get_upgrade(RESEARCH).cost_at(0) == 300_000
    assert get_upgrade(RENEWABLE).cost_at(0) == 600_000


def test_cost_curve_grows_geometrically():
    spec = get_upgrade(RESEARCH)
    costs = [spec.cost_at(level) for level in range(5)]
    assert costs == sorted(costs)
    assert costs[3] / costs[2] == pytest.approx(2.4, rel=1e-6)


def test_unknown_upgrade_raises():
    with pytest.raises(KeyError):
        get_upgrade("laserLevel")


def test_normalize_levels_repairs_input():
    levels = normalize_levels({DRILL: 2, REFINE: -1, RESEARCH: "x", "extra": 5})
    assert levels == {DRILL: 2, REFINE: 0, RESEARCH: 0, RENEWABLE: 0}
    assert normalize_levels(None) == {upgrade_id: 0 for upgrade_id in UPGRADE_IDS}
    assert normalize_levels({DRILL: float("inf")})[DRILL] == 0
