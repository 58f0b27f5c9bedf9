"""Runtime pieces of the progression engine: turn resolution, monthly cycle, session."""

from .achievements import ACHIEVEMENT_IDS, AchievementSpec, achievement_catalog, evaluate_achievements
from .actions import ActionKind, ActionResult, purchase_upgrade, resolve_action
from .content import (
    ContentProvider,
    EventChoice,
    EventDefinition,
    QuizDefinition,
    QuizDifficulty,
    StaticContentProvider,
    select_quiz_difficulty,
)
from .cycle import RolloverResult, rollover
from .history import HistoryLedger
from .persistence import FileSaveStore, MemorySaveStore, decode_save, encode_save
from .phases import GamePhase
from .review import ReviewReport, summarize
from .session import ContentRequest, GameSession

__all__ = [
    "ACHIEVEMENT_IDS",
    "AchievementSpec",
    "ActionKind",
    "ActionResult",
    "ContentProvider",
    "ContentRequest",
    "EventChoice",
    "EventDefinition",
    "FileSaveStore",
    "GamePhase",
    "GameSession",
    "HistoryLedger",
    "MemorySaveStore",
    "QuizDefinition",
    "QuizDifficulty",
    "ReviewReport",
    "RolloverResult",
    "StaticContentProvider",
    "achievement_catalog",
    "decode_save",
    "encode_save",
    "evaluate_achievements",
    "purchase_upgrade",
    "resolve_action",
    "rollover",
    "select_quiz_difficulty",
    "summarize",
]
