import pytest

from petrosmart.stats import Language, StatSnapshot, initial_snapshot
from petrosmart.world.upgrades import DRILL, UPGRADE_IDS


def test_initial_snapshot_matches_opening_position():
    snapshot = initial_snapshot()
    assert (snapshot.year, snapshot.month, snapshot.turns_remaining) == (2024, 1, 5)
    assert snapshot.cash == 1_000_000
    assert snapshot.pollution == 5
    assert snapshot.approval == 80
    assert snapshot.crude_oil == snapshot.refined_products == snapshot.knowledge == 0
    assert snapshot.renewable_capacity == 0
    assert dict(snapshot.upgrades) == {upgrade_id: 0 for upgrade_id in UPGRADE_IDS}
    assert snapshot.language is Language.EN


def test_approval_is_clamped_on_construction_and_evolve():
    snapshot = initial_snapshot()
    assert snapshot.evolve(approval=140).approval == 100
    assert snapshot.evolve(approval=-3).approval == 0
    assert StatSnapshot(year=2024, month=1, turns_remaining=5, cash=0, approval=250).approval == 100


def test_evolve_returns_new_value_and_floors_non_negative_fields():
    snapshot = initial_snapshot()
    changed = snapshot.evolve(crude_oil=-10, cash=-20)
    assert changed is not snapshot
    assert changed.crude_oil == 0
    assert changed.cash == -20
    assert snapshot.cash == 1_000_000


def test_upgrades_mapping_is_read_only_and_complete():
    snapshot = initial_snapshot().with_level(DRILL, 2)
    assert snapshot.level(DRILL) == 2
    with pytest.raises(TypeError):
        snapshot.upgrades[DRILL] = 9
    assert set(snapshot.upgrades) == set(UPGRADE_IDS)


def test_overlay_replaces_named_resources_only():
    snapshot = initial_snapshot()
    merged = snapshot.overlay({"cash": 1_250_000, "crudeOil": 4_000, "year": 1999, "turns_remaining": 0, "mood": 3})
    assert merged.cash == 1_250_000
    assert merged.crude_oil == 4_000
    assert merged.year == 2024
    assert merged.turns_remaining == 5
    assert merged.pollution == snapshot.pollution


def test_overlay_clamps_and_ignores_garbage():
    snapshot = initial_snapshot()
    merged = snapshot.overlay({"approval": 180, "pollution": -12, "knowledge": "lots", "cash": float("nan")})
    assert merged.approval == 100
    assert merged.pollution == 0
    assert merged.knowledge == 0
    assert merged.cash == 1_000_000
    assert snapshot.overlay(None) is snapshot
    assert snapshot.overlay({}) is snapshot


def test_to_dict_uses_wire_names():
    payload = initial_snapshot(language=Language.ID).to_dict()
    assert payload["turnsRemaining"] == 5
    assert payload["crudeOil"] == 0
    assert payload["renewableCapacity"] == 0
    assert payload["language"] == "ID"
    assert payload["upgrades"] == {upgrade_id: 0 for upgrade_id in UPGRADE_IDS}


def test_from_dict_falls_back_per_field():
    restored = StatSnapshot.from_dict(
        {
            "year": 2026,
            "month": 13,
            "turnsRemaining": 9,
            "cash": "broke",
            "crudeOil": -50,
            "approval": 55.5,
            "upgrades": {DRILL: "3", "bogusLevel": 4},
            "language": "klingon",
        }
    )
    assert restored.year == 2026
    assert restored.month == 1
    assert restored.turns_remaining == 5
    assert restored.cash == 1_000_000
    assert restored.crude_oil == 0
    assert restored.approval == pytest.approx(55.5)
    assert restored.level(DRILL) == 3
    assert "bogusLevel" not in restored.upgrades
    assert restored.language is Language.EN


def test_from_dict_non_mapping_yields_initial():
    assert StatSnapshot.from_dict(["nope"]) == initial_snapshot()


def test_signature_is_stable_and_sensitive():
    a = initial_snapshot()
    b = initial_snapshot()
    assert a.signature() == b.signature()
    assert a.signature() != a.evolve(cash=1).signature()


def test_language_parse_defaults():
    assert Language.parse("id") is Language.ID
    assert Language.parse(None) is Language.EN
    assert Language.parse("fr", Language.ID) is Language.ID
