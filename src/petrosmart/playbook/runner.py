"""Scripted playthroughs.

Regression suites and notebooks can drive a session through a fixed list of
steps and inspect the resulting report instead of wiring the phase machine by
hand.  Modal phases are resolved automatically: events take their first choice
(or the base impact when they offer none), quizzes are answered according to
``answer_correctly`` and yearly reviews are acknowledged after being recorded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence, Tuple

from petrosmart.config import DEFAULT_CONFIG, EngineConfig
from petrosmart.runtime.content import ContentProvider, StaticContentProvider
from petrosmart.runtime.phases import GamePhase
from petrosmart.runtime.review import ReviewReport
from petrosmart.runtime.session import GameSession
from petrosmart.stats import StatSnapshot

UPGRADE_PREFIX = "upgrade:"


@dataclass(slots=True)
class PlaybookReport:
    final: StatSnapshot
    phase: GamePhase
    ledger_size: int
    unlocked: Tuple[str, ...]
    reviews: List[ReviewReport] = field(default_factory=list)
    trace: List[str] = field(default_factory=list)


def _settle(session: GameSession, report: PlaybookReport, *, answer_correctly: bool) -> None:
    while True:
        phase = session.phase
        if phase is GamePhase.EVENT:
            event = session.current_event
            choice = 0 if event.choices else None
            session.resolve_event(choice)
            report.trace.append(f"event:{event.title}")
        elif phase is GamePhase.QUIZ:
            quiz = session.current_quiz
            option = quiz.correct_index if answer_correctly else (quiz.correct_index + 1) % len(quiz.options)
            correct = session.answer_quiz(option)
            report.trace.append(f"quiz:{'correct' if correct else 'wrong'}")
        elif phase is GamePhase.YEARLY_REVIEW:
            review = session.last_review or session.yearly_review()
            report.reviews.append(review)
            report.trace.append(f"review:{review.year}:{review.grade}")
            session.acknowledge_review()
        else:
            return


def run_playbook(
    steps: Sequence[str],
    *,
    config: Optional[EngineConfig] = None,
    overrides: Optional[Mapping[str, object]] = None,
    provider: Optional[ContentProvider] = None,
    answer_correctly: bool = True,
) -> PlaybookReport:
    if config is not None and overrides:
        raise ValueError("Pass either 'config' or 'overrides', not both")
    if config is None:
        config = DEFAULT_CONFIG.with_overrides(overrides or {})

    session = GameSession(config, provider=provider or StaticContentProvider())
    session.new_game()
    report = PlaybookReport(
        final=session.stats,
        phase=session.phase,
        ledger_size=len(session.ledger),
        unlocked=(),
    )

    for step in steps:
        if session.phase is GamePhase.GAME_OVER:
            break
        token = step.strip()
        if token.lower().startswith(UPGRADE_PREFIX):
            result = session.purchase_upgrade(token[len(UPGRADE_PREFIX) :])
        else:
            result = session.perform(token)
        report.trace.append(f"{token}:{'ok' if result.applied else result.effect_label}")
        _settle(session, report, answer_correctly=answer_correctly)

    report.final = session.stats
    report.phase = session.phase
    report.ledger_size = len(session.ledger)
    report.unlocked = session.unlocked_ids
    return report


__all__ = ["PlaybookReport", "run_playbook"]
