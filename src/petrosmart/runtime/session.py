"""Game session controller.

The session owns the authoritative snapshot, the current phase, the ledger and
the unlock set, and is the only thing that mutates them.  Every public mutator
runs to completion under the session lock, so a host that drives the engine
from several threads still sees serialized read-modify-write updates.

Event and quiz content is requested through a token-stamped
:class:`ContentRequest`.  With a synchronous provider the request is issued and
fulfilled inside the same call; a host that fetches content remotely leaves
``provider`` unset, reads :attr:`GameSession.pending_request` and later calls
:meth:`GameSession.deliver_event` / :meth:`GameSession.deliver_quiz` with the
token.  Restart, exit and cancellation bump the token so late responses are
dropped.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from petrosmart.config import DEFAULT_CONFIG, EngineConfig
from petrosmart.runtime.achievements import ACHIEVEMENT_IDS, evaluate_achievements
from petrosmart.runtime.actions import ActionKind, ActionResult, purchase_upgrade, resolve_action
from petrosmart.runtime.content import (
    ContentProvider,
    EventDefinition,
    QuizDefinition,
    QuizDifficulty,
    select_quiz_difficulty,
)
from petrosmart.runtime.cycle import rollover
from petrosmart.runtime.history import HistoryLedger
from petrosmart.runtime.persistence import (
    SaveGame,
    SaveStore,
    decode_save,
    encode_save,
    fresh_save,
    record_signature,
)
from petrosmart.runtime.phases import GamePhase
from petrosmart.runtime.review import ReviewReport, summarize, year_just_ended_for
from petrosmart.runtime.telemetry import ensure_event_ring, ensure_metrics, record_event
from petrosmart.stats import APPROVAL_MAX, Language, StatSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ContentRequest:
    token: int
    kind: GamePhase
    snapshot: StatSnapshot
    language: Language
    difficulty: Optional[QuizDifficulty] = None


class GameSession:
    """Single play session: the sole mutator of engine state."""

    def __init__(
        self,
        config: EngineConfig | None = None,
        *,
        provider: ContentProvider | None = None,
        store: SaveStore | None = None,
    ) -> None:
        self.config = config or DEFAULT_CONFIG
        self.provider = provider
        self.store = store
        self.metrics = ensure_metrics(self)
        self.event_ring = ensure_event_ring(self)
        self._lock = threading.RLock()
        self._request_token = 0
        self._last_saved: Optional[Dict[str, Any]] = None
        self.newly_unlocked: Tuple[str, ...] = ()
        self.last_review: Optional[ReviewReport] = None
        self._load(fresh_save(self.config))
        self.phase = GamePhase.MENU

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def history(self) -> Tuple[StatSnapshot, ...]:
        return self.ledger.entries

    @property
    def unlocked_ids(self) -> Tuple[str, ...]:
        return tuple(achievement_id for achievement_id in ACHIEVEMENT_IDS if achievement_id in self.unlocked)

    @property
    def request_token(self) -> int:
        return self._request_token

    def accepts_actions(self) -> bool:
        return (
            self.phase is GamePhase.PLAYING
            and self.pending_request is None
            and self.stats.turns_remaining > 0
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def new_game(self, *, language: Language | str | None = None) -> None:
        with self._lock:
            self._invalidate_requests()
            self._load(fresh_save(self.config))
            if language is not None:
                self.stats = self.stats.evolve(language=Language.parse(language))
                self.ledger = HistoryLedger((self.stats,))
            self.phase = GamePhase.PLAYING
            self.metrics.inc("sessions.started")
            record_event(self, {"type": "NEW_GAME"})

    def resume(self, record: Mapping[str, Any] | None = None) -> bool:
        """Load ``record`` (or the store's current game) as-is.

        Returns ``False`` when nothing usable was found; the session then starts
        from fresh initial state instead.
        """

        with self._lock:
            if record is None and self.store is not None:
                record = self.store.load()
            found = isinstance(record, Mapping) and "stats" in record
            save = decode_save(record, self.config)
            self._invalidate_requests()
            self._load(save)
            if self.phase is GamePhase.MENU:
                self.phase = GamePhase.PLAYING
            self._last_saved = encode_save(save) if found else None
            self.metrics.inc("sessions.resumed")
            record_event(self, {"type": "RESUME", "found": found, "phase": self.phase.value})
            # Saved after the last turn of a month but before it was closed.
            if self.phase is GamePhase.PLAYING and self.stats.turns_remaining == 0:
                self._rollover()
            return found

    def save(self) -> Dict[str, Any]:
        with self._lock:
            record = encode_save(self._to_save())
            digest = self.store.save(record) if self.store is not None else record_signature(record)
            self.metrics.set_gauge("save.signature", digest)
            self._last_saved = record
            self.metrics.inc("sessions.saved")
            return record

    def restart(self) -> None:
        """Clear the session to initial values and return to the menu."""

        with self._lock:
            self._invalidate_requests()
            self._load(fresh_save(self.config))
            self.phase = GamePhase.MENU
            record_event(self, {"type": "RESTART"})

    def exit(self) -> None:
        """Return to the menu, discarding everything since the last save."""

        with self._lock:
            self._invalidate_requests()
            if self._last_saved is not None:
                self._load(decode_save(self._last_saved, self.config))
            else:
                self._load(fresh_save(self.config))
            self.phase = GamePhase.MENU
            record_event(self, {"type": "EXIT"})

    def acknowledge_game_over(self) -> bool:
        with self._lock:
            if self.phase is not GamePhase.GAME_OVER:
                return False
            self.phase = GamePhase.MENU
            return True

    # ------------------------------------------------------------------
    # Turn actions
    # ------------------------------------------------------------------
    def perform(self, kind: ActionKind | str) -> ActionResult:
        """Resolve one action.

        The returned result carries the end-of-turn snapshot; when the action
        closes the month, :attr:`stats` already holds the rolled-over snapshot.
        """

        kind = ActionKind.parse(kind)
        with self._lock:
            self.newly_unlocked = ()
            if not self.accepts_actions():
                self.metrics.inc("actions.rejected")
                return ActionResult(snapshot=self.stats, applied=False, effect_label=f"not accepting actions ({self.phase.value})")
            result = resolve_action(self.stats, kind)
            if not result.applied:
                self.metrics.inc("actions.rejected")
                return result
            self.metrics.inc("actions.applied")
            self.metrics.inc(f"actions.{kind.value.lower()}")
            record_event(
                self,
                {
                    "type": "ACTION",
                    "action": kind.value,
                    "effect": result.effect_label,
                    "year": result.snapshot.year,
                    "month": result.snapshot.month,
                },
            )
            if result.snapshot.turns_remaining == 0:
                self._rollover((result.snapshot,))
            else:
                self._commit(result.snapshot)
            return result

    def purchase_upgrade(self, upgrade_id: str) -> ActionResult:
        with self._lock:
            self.newly_unlocked = ()
            if self.phase is not GamePhase.PLAYING or self.pending_request is not None:
                return ActionResult(snapshot=self.stats, applied=False, effect_label=f"not accepting purchases ({self.phase.value})")
            result = purchase_upgrade(self.stats, upgrade_id)
            if result.applied:
                self._commit(result.snapshot)
                self.metrics.inc("upgrades.purchased")
                record_event(self, {"type": "UPGRADE", "upgrade": upgrade_id, "effect": result.effect_label})
            return result

    def set_language(self, language: Language | str) -> None:
        with self._lock:
            parsed = Language.parse(language, self.stats.language)
            if parsed is self.stats.language:
                return
            self.newly_unlocked = ()
            self._commit(self.stats.evolve(language=parsed))

    # ------------------------------------------------------------------
    # Follow-up phases
    # ------------------------------------------------------------------
    def resolve_event(self, choice_index: int | None = None) -> bool:
        with self._lock:
            if self.phase is not GamePhase.EVENT or self.current_event is None:
                return False
            impact = self.current_event.impact_for(choice_index)
            self.newly_unlocked = ()
            self._commit(self.stats.overlay(impact))
            record_event(self, {"type": "EVENT_RESOLVED", "title": self.current_event.title, "choice": choice_index})
            self.current_event = None
            self.phase = GamePhase.PLAYING
            return True

    def answer_quiz(self, option_index: int) -> bool:
        """Answer the open quiz; returns whether the answer was correct."""

        with self._lock:
            if self.phase is not GamePhase.QUIZ or self.current_quiz is None:
                return False
            correct = self.current_quiz.is_correct(option_index)
            self.resolve_quiz(correct)
            return correct

    def resolve_quiz(self, correct: bool) -> bool:
        with self._lock:
            if self.phase is not GamePhase.QUIZ:
                return False
            self.newly_unlocked = ()
            if correct:
                cfg = self.config
                self._commit(
                    self.stats.evolve(
                        knowledge=self.stats.knowledge + cfg.quiz_reward_knowledge,
                        cash=self.stats.cash + cfg.quiz_reward_cash,
                        approval=min(APPROVAL_MAX, self.stats.approval + cfg.quiz_reward_approval),
                    )
                )
            self.metrics.inc("quizzes.correct" if correct else "quizzes.incorrect")
            record_event(self, {"type": "QUIZ_RESOLVED", "correct": bool(correct)})
            self.current_quiz = None
            self.phase = GamePhase.PLAYING
            return True

    def yearly_review(self) -> ReviewReport:
        with self._lock:
            return summarize(self.stats, self.ledger.entries, year_just_ended_for(self.stats))

    def acknowledge_review(self) -> bool:
        with self._lock:
            if self.phase is not GamePhase.YEARLY_REVIEW:
                return False
            self.phase = GamePhase.PLAYING
            deferred, self.deferred = self.deferred, None
            if deferred is not None:
                self._request_follow_up(deferred)
            return True

    # ------------------------------------------------------------------
    # Content requests
    # ------------------------------------------------------------------
    def deliver_event(self, token: int, event: EventDefinition | Mapping[str, Any]) -> bool:
        with self._lock:
            if not self._is_current(token, GamePhase.EVENT):
                return False
            if not isinstance(event, EventDefinition):
                try:
                    event = EventDefinition.from_dict(event)
                except (TypeError, ValueError) as exc:
                    self.fail_request(token, exc)
                    return False
            self.pending_request = None
            self.current_event = event
            self.phase = GamePhase.EVENT
            return True

    def deliver_quiz(self, token: int, quiz: QuizDefinition | Mapping[str, Any]) -> bool:
        with self._lock:
            if not self._is_current(token, GamePhase.QUIZ):
                return False
            if not isinstance(quiz, QuizDefinition):
                try:
                    quiz = QuizDefinition.from_dict(quiz, difficulty=self.pending_request.difficulty)
                except (TypeError, ValueError) as exc:
                    self.fail_request(token, exc)
                    return False
            self.pending_request = None
            self.current_quiz = quiz
            self.phase = GamePhase.QUIZ
            return True

    def fail_request(self, token: int, error: BaseException | str) -> bool:
        """Abandon the pending request; the session stays in play."""

        with self._lock:
            request = self.pending_request
            if request is None or request.token != token:
                return False
            logger.warning("Content request %d (%s) failed: %s", token, request.kind.value, error)
            self.metrics.inc("content.failed")
            self.pending_request = None
            self.phase = GamePhase.PLAYING
            return True

    def cancel_pending_request(self) -> bool:
        with self._lock:
            if self.pending_request is None:
                return False
            self._invalidate_requests()
            self.metrics.inc("content.cancelled")
            return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _load(self, save: SaveGame) -> None:
        self.stats = save.stats
        self.ledger = HistoryLedger(save.history)
        self.unlocked: set[str] = set(save.unlocked)
        self.current_event = save.current_event
        self.current_quiz = save.current_quiz
        self.deferred = save.deferred
        self.pending_request: Optional[ContentRequest] = None
        self.last_review = None
        self.newly_unlocked = ()
        self.phase = save.phase

    def _to_save(self) -> SaveGame:
        return SaveGame(
            phase=self.phase,
            stats=self.stats,
            history=self.ledger.entries,
            unlocked=self.unlocked_ids,
            current_event=self.current_event,
            current_quiz=self.current_quiz,
            deferred=self.deferred,
        )

    def _commit(self, *snapshots: StatSnapshot) -> None:
        """Publish ``snapshots`` to the ledger in one swap, then check milestones on each."""

        self.stats = snapshots[-1]
        self.ledger.extend(snapshots)
        for snapshot in snapshots:
            self._unlock(evaluate_achievements(snapshot, self.unlocked), snapshot)

    def _unlock(self, achievement_ids: Iterable[str], snapshot: StatSnapshot) -> None:
        for achievement_id in achievement_ids:
            self.unlocked.add(achievement_id)
            self.newly_unlocked = self.newly_unlocked + (achievement_id,)
            self.metrics.inc("achievements.unlocked")
            record_event(
                self,
                {"type": "ACHIEVEMENT", "id": achievement_id, "year": snapshot.year, "month": snapshot.month},
            )

    def _rollover(self, closing: Tuple[StatSnapshot, ...] = ()) -> None:
        """Close the month.

        ``closing`` holds the end-of-month snapshot when it has not been
        committed yet; it is published together with the rolled-over one.
        """

        result = rollover(closing[-1] if closing else self.stats, self.config)
        self._commit(*closing, result.snapshot)
        self.metrics.inc("rollovers")
        self.metrics.set_gauge("calendar", f"{result.snapshot.year}-{result.snapshot.month:02d}")
        record_event(self, {"type": "ROLLOVER", "phase": result.phase.value})

        if result.phase is GamePhase.GAME_OVER:
            logger.info(
                "Game over in %d-%02d: %s",
                result.snapshot.year,
                result.snapshot.month,
                result.termination_reason,
            )
            self.deferred = None
            self.phase = GamePhase.GAME_OVER
        elif result.phase is GamePhase.YEARLY_REVIEW:
            self.last_review = summarize(self.stats, self.ledger.entries, year_just_ended_for(self.stats))
            self.deferred = result.deferred
            self.phase = GamePhase.YEARLY_REVIEW
        elif result.phase in (GamePhase.EVENT, GamePhase.QUIZ):
            self._request_follow_up(result.phase)
        else:
            self.phase = GamePhase.PLAYING

    def _request_follow_up(self, kind: GamePhase) -> None:
        self.phase = GamePhase.PLAYING
        self._request_token += 1
        token = self._request_token
        difficulty = select_quiz_difficulty(self.stats.knowledge) if kind is GamePhase.QUIZ else None
        self.pending_request = ContentRequest(
            token=token,
            kind=kind,
            snapshot=self.stats,
            language=self.stats.language,
            difficulty=difficulty,
        )
        if self.provider is None:
            return
        try:
            if kind is GamePhase.EVENT:
                content = self.provider.next_event(self.stats, self.stats.language)
            else:
                content = self.provider.next_quiz(difficulty, self.stats.language)
        except Exception as exc:
            self.fail_request(token, exc)
            return
        if kind is GamePhase.EVENT:
            self.deliver_event(token, content)
        else:
            self.deliver_quiz(token, content)

    def _is_current(self, token: int, kind: GamePhase) -> bool:
        request = self.pending_request
        if request is None or request.token != token or request.kind is not kind:
            logger.debug("Discarding stale %s content for token %d", kind.value, token)
            self.metrics.inc("content.stale")
            return False
        return True

    def _invalidate_requests(self) -> None:
        self._request_token += 1
        self.pending_request = None


__all__ = ["ContentRequest", "GameSession"]
