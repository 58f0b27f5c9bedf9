"""PetroSmart progression engine public façade."""

from .config import DEFAULT_CONFIG, EngineConfig, parse_overrides
from .playbook.runner import PlaybookReport, run_playbook
from .runtime import (
    ActionKind,
    ActionResult,
    EventDefinition,
    FileSaveStore,
    GamePhase,
    GameSession,
    HistoryLedger,
    MemorySaveStore,
    QuizDefinition,
    ReviewReport,
    StaticContentProvider,
)
from .stats import Language, StatSnapshot, initial_snapshot
from .world.upgrades import upgrade_catalog

__all__ = [
    "ActionKind",
    "ActionResult",
    "DEFAULT_CONFIG",
    "EngineConfig",
    "EventDefinition",
    "FileSaveStore",
    "GamePhase",
    "GameSession",
    "HistoryLedger",
    "Language",
    "MemorySaveStore",
    "PlaybookReport",
    "QuizDefinition",
    "ReviewReport",
    "StatSnapshot",
    "StaticContentProvider",
    "initial_snapshot",
    "parse_overrides",
    "run_playbook",
    "upgrade_catalog",
]
