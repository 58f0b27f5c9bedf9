import gzip

from petrosmart.config import EngineConfig
from petrosmart.runtime.content import EventDefinition
from petrosmart.runtime.persistence import (
    SAVE_SCHEMA_VERSION,
    FileSaveStore,
    MemorySaveStore,
    SaveGame,
    decode_save,
    encode_save,
    fresh_save,
    record_signature,
)
from petrosmart.runtime.phases import GamePhase
from petrosmart.stats import initial_snapshot
from petrosmart.world.upgrades import DRILL


def _sample_save() -> SaveGame:
    start = initial_snapshot()
    later = start.evolve(month=4, cash=1_234_000, crude_oil=20_000).with_level(DRILL, 2)
    return SaveGame(
        phase=GamePhase.EVENT,
        stats=later,
        history=(start, later),
        unlocked=("scholar",),
        current_event=EventDefinition(title="Leak", description="d", impact={"pollution": 9.0}),
    )


def test_encode_decode_round_trip():
    save = _sample_save()
    record = encode_save(save)
    assert record["schemaVersion"] == SAVE_SCHEMA_VERSION
    assert record["phase"] == "EVENT"
    restored = decode_save(record)
    assert restored.stats == save.stats
    assert restored.history == save.history
    assert restored.unlocked == ("scholar",)
    assert restored.phase is GamePhase.EVENT
    assert restored.current_event.title == "Leak"


def test_absent_or_malformed_record_is_fresh():
    assert decode_save(None).stats == initial_snapshot()
    assert decode_save("garbage").phase is GamePhase.PLAYING
    assert decode_save({"schemaVersion": SAVE_SCHEMA_VERSION}).history == (initial_snapshot(),)


def test_fresh_save_uses_config():
    save = fresh_save(EngineConfig(initial_cash=42.0))
    assert save.stats.cash == 42.0
    assert save.history == (save.stats,)


def test_corrupt_fields_recover_individually():
    record = encode_save(_sample_save())
    record["stats"]["cash"] = "NaN-ish"
    record["stats"]["month"] = 0
    record["history"] = "not-a-list"
    record["unlockedAchievements"] = ["scholar", "not_a_real_one"]
    record["currentEvent"] = {"title": "missing description"}
    record["deferredFollowUp"] = "YEARLY_REVIEW"
    restored = decode_save(record)
    assert restored.stats.cash == 1_000_000
    assert restored.stats.month == 1
    assert restored.stats.crude_oil == 20_000
    assert restored.stats.level(DRILL) == 2
    assert restored.history == (initial_snapshot(),)
    assert restored.unlocked == ("scholar",)
    assert restored.current_event is None
    assert restored.phase is GamePhase.PLAYING
    assert restored.deferred is None


def test_memory_store_holds_one_record():
    store = MemorySaveStore()
    assert store.load() is None
    record = encode_save(_sample_save())
    digest = store.save(record)
    assert digest == record_signature(record)
    assert store.load() == record
    store.clear()
    assert store.load() is None


def test_file_store_gzip_round_trip(tmp_path):
    store = FileSaveStore(tmp_path / "saves" / "current.json.gz")
    record = encode_save(_sample_save())
    store.save(record)
    with gzip.open(store.path, "rb") as fp:
        assert fp.read(1) == b"{"
    assert store.load() == record
    store.clear()
    assert not store.path.exists()
    assert store.load() is None


def test_file_store_ignores_corrupt_file(tmp_path):
    path = tmp_path / "current.json"
    path.write_text("{not json", encoding="utf-8")
    assert FileSaveStore(path).load() is None
    assert decode_save(FileSaveStore(path).load()).stats == initial_snapshot()
