"""Save-game records for the single "current game" slot.

The engine only produces and consumes plain dictionaries; the stores below are
convenience transports.  Decoding never raises: an absent or malformed record
yields a fresh game, and each corrupt field falls back to its initial value on
its own.
"""

from __future__ import annotations

import gzip
import json
import logging
from dataclasses import dataclass
from hashlib import sha256
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from petrosmart.config import DEFAULT_CONFIG, EngineConfig
from petrosmart.runtime.achievements import ACHIEVEMENT_IDS
from petrosmart.runtime.content import EventDefinition, QuizDefinition
from petrosmart.runtime.phases import GamePhase
from petrosmart.stats import StatSnapshot, initial_snapshot

logger = logging.getLogger(__name__)

SAVE_SCHEMA_VERSION = "petrosmart_save_v1"


@dataclass(slots=True)
class SaveGame:
    phase: GamePhase
    stats: StatSnapshot
    history: Tuple[StatSnapshot, ...]
    unlocked: Tuple[str, ...] = ()
    current_event: Optional[EventDefinition] = None
    current_quiz: Optional[QuizDefinition] = None
    deferred: Optional[GamePhase] = None


def fresh_save(config: EngineConfig = DEFAULT_CONFIG) -> SaveGame:
    stats = initial_snapshot(config)
    return SaveGame(phase=GamePhase.PLAYING, stats=stats, history=(stats,))


def encode_save(save: SaveGame) -> Dict[str, Any]:
    return {
        "schemaVersion": SAVE_SCHEMA_VERSION,
        "phase": save.phase.value,
        "stats": save.stats.to_dict(),
        "history": [snapshot.to_dict() for snapshot in save.history],
        "unlockedAchievements": list(save.unlocked),
        "currentEvent": save.current_event.to_dict() if save.current_event else None,
        "currentQuiz": save.current_quiz.to_dict() if save.current_quiz else None,
        "deferredFollowUp": save.deferred.value if save.deferred else None,
    }


def decode_save(record: object, config: EngineConfig = DEFAULT_CONFIG) -> SaveGame:
    if not isinstance(record, Mapping) or "stats" not in record:
        return fresh_save(config)

    stats = StatSnapshot.from_dict(record.get("stats"), config=config)

    raw_history = record.get("history")
    if isinstance(raw_history, (list, tuple)) and raw_history:
        history = tuple(StatSnapshot.from_dict(entry, config=config) for entry in raw_history)
    else:
        history = (initial_snapshot(config),)

    raw_unlocked = record.get("unlockedAchievements")
    unlocked: Tuple[str, ...] = ()
    if isinstance(raw_unlocked, (list, tuple)):
        known = set(str(item) for item in raw_unlocked)
        unlocked = tuple(achievement_id for achievement_id in ACHIEVEMENT_IDS if achievement_id in known)

    phase = GamePhase.parse(record.get("phase")) or GamePhase.PLAYING
    current_event = _decode_optional(EventDefinition.from_dict, record.get("currentEvent"))
    current_quiz = _decode_optional(QuizDefinition.from_dict, record.get("currentQuiz"))
    # A modal phase without its content cannot be resolved; resume into play.
    if phase is GamePhase.EVENT and current_event is None:
        phase = GamePhase.PLAYING
    if phase is GamePhase.QUIZ and current_quiz is None:
        phase = GamePhase.PLAYING

    deferred = GamePhase.parse(record.get("deferredFollowUp"))
    if deferred not in (GamePhase.EVENT, GamePhase.QUIZ):
        deferred = None

    return SaveGame(
        phase=phase,
        stats=stats,
        history=history,
        unlocked=unlocked,
        current_event=current_event,
        current_quiz=current_quiz,
        deferred=deferred,
    )


def _decode_optional(parser, payload: object):
    if payload is None:
        return None
    try:
        return parser(payload)
    except (TypeError, ValueError) as exc:
        logger.warning("Discarding malformed saved content: %s", exc)
        return None


def _canonical_dumps(data: Mapping[str, Any]) -> str:
    return json.dumps(data, sort_keys=True, separators=(",", ":"))


def record_signature(record: Mapping[str, Any]) -> str:
    return sha256(_canonical_dumps(record).encode("utf-8")).hexdigest()


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


class SaveStore:
    """Holds at most one record: the current game."""

    def save(self, record: Mapping[str, Any]) -> str:
        raise NotImplementedError

    def load(self) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class MemorySaveStore(SaveStore):
    def __init__(self, record: Optional[Mapping[str, Any]] = None) -> None:
        self._payload: Optional[str] = _canonical_dumps(record) if record is not None else None

    def save(self, record: Mapping[str, Any]) -> str:
        self._payload = _canonical_dumps(record)
        return sha256(self._payload.encode("utf-8")).hexdigest()

    def load(self) -> Optional[Dict[str, Any]]:
        if self._payload is None:
            return None
        return json.loads(self._payload)

    def clear(self) -> None:
        self._payload = None


class FileSaveStore(SaveStore):
    """JSON file store; paths ending in ``gz`` are gzip-compressed."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    @property
    def _gzip(self) -> bool:
        return self.path.suffix.endswith("gz")

    def save(self, record: Mapping[str, Any]) -> str:
        payload = _canonical_dumps(record).encode("utf-8")
        digest = sha256(payload).hexdigest()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if self._gzip:
            with gzip.open(self.path, "wb") as fp:
                fp.write(payload)
        else:
            with open(self.path, "wb") as fp:
                fp.write(payload)
        return digest

    def load(self) -> Optional[Dict[str, Any]]:
        if not self.path.exists():
            return None
        try:
            if self._gzip:
                with gzip.open(self.path, "rb") as fp:
                    raw = fp.read()
            else:
                with open(self.path, "rb") as fp:
                    raw = fp.read()
            data = json.loads(raw.decode("utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable save at %s: %s", self.path, exc)
            return None
        return data if isinstance(data, dict) else None

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()


__all__ = [
    "FileSaveStore",
    "MemorySaveStore",
    "SAVE_SCHEMA_VERSION",
    "SaveGame",
    "SaveStore",
    "decode_save",
    "encode_save",
    "fresh_save",
    "record_signature",
]
