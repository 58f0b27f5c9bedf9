from __future__ import annotations

from enum import Enum


class GamePhase(str, Enum):
    MENU = "MENU"
    PLAYING = "PLAYING"
    EVENT = "EVENT"
    QUIZ = "QUIZ"
    YEARLY_REVIEW = "YEARLY_REVIEW"
    GAME_OVER = "GAMEOVER"

    @classmethod
    def parse(cls, value: object) -> "GamePhase | None":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            return None


__all__ = ["GamePhase"]
