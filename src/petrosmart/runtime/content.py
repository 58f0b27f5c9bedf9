"""World events and knowledge quizzes.

The engine never interprets content beyond the ``impact`` mappings: resolving
an event overlays the chosen impact onto the current snapshot.  Providers
receive the snapshot they are generating for, so catalogue entries written as
deltas are materialised into absolute overlay values at selection time.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from petrosmart.stats import RESOURCE_FIELDS, Language, StatSnapshot

QUIZ_OPTION_COUNT = 4

HARD_KNOWLEDGE: float = 120.0
MEDIUM_KNOWLEDGE: float = 40.0


class QuizDifficulty(str, Enum):
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


def select_quiz_difficulty(knowledge: float) -> QuizDifficulty:
    if knowledge >= HARD_KNOWLEDGE:
        return QuizDifficulty.HARD
    if knowledge >= MEDIUM_KNOWLEDGE:
        return QuizDifficulty.MEDIUM
    return QuizDifficulty.EASY


# ---------------------------------------------------------------------------
# Payload schemas
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PayloadSchema:
    """Minimal structural schema for validating content dictionaries."""

    required: Mapping[str, tuple[type, ...]]
    optional: Mapping[str, tuple[type, ...]] = field(default_factory=dict)

    def validate(self, payload: object) -> None:
        if not isinstance(payload, Mapping):
            raise ValueError(f"Expected a mapping, received {type(payload)!r}")
        missing = [key for key in self.required if key not in payload]
        if missing:
            raise ValueError(f"Missing required fields: {missing}")
        for key, expected in self.required.items():
            if not isinstance(payload[key], expected):
                raise TypeError(f"Field '{key}' has type {type(payload[key])!r}, expected {expected!r}")
        for key, expected in self.optional.items():
            if key in payload and payload[key] is not None and not isinstance(payload[key], expected):
                raise TypeError(f"Field '{key}' has type {type(payload[key])!r}, expected {expected!r}")


EVENT_SCHEMA = PayloadSchema(
    required={"title": (str,), "description": (str,)},
    optional={"impact": (dict, Mapping), "options": (list, tuple)},
)

QUIZ_SCHEMA = PayloadSchema(
    required={
        "question": (str,),
        "options": (list, tuple),
        "correctIndex": (int, float),
    },
    optional={"explanation": (str,), "difficulty": (str,)},
)


def _impact_from_wire(raw: object) -> Mapping[str, float]:
    """Accept both ``{"stat": name, "value": n}`` and partial-stats mappings."""

    if not isinstance(raw, Mapping):
        return MappingProxyType({})
    if "stat" in raw and "value" in raw:
        raw = {str(raw["stat"]): raw["value"]}
    return MappingProxyType(
        {str(key): value for key, value in raw.items() if isinstance(value, (int, float)) and not isinstance(value, bool)}
    )


# ---------------------------------------------------------------------------
# Definitions
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class EventChoice:
    label: str
    impact: Mapping[str, float]


@dataclass(frozen=True, slots=True)
class EventDefinition:
    title: str
    description: str
    impact: Mapping[str, float] = field(default_factory=dict)
    choices: Tuple[EventChoice, ...] = ()

    def impact_for(self, choice_index: Optional[int] = None) -> Mapping[str, float]:
        if choice_index is None:
            return self.impact
        if not 0 <= choice_index < len(self.choices):
            raise IndexError(f"Event '{self.title}' has no choice {choice_index}")
        return self.choices[choice_index].impact

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "title": self.title,
            "description": self.description,
            "impact": dict(self.impact),
        }
        if self.choices:
            payload["options"] = [{"label": choice.label, "impact": dict(choice.impact)} for choice in self.choices]
        return payload

    @classmethod
    def from_dict(cls, payload: object) -> "EventDefinition":
        EVENT_SCHEMA.validate(payload)
        choices = []
        for option in payload.get("options") or ():
            if not isinstance(option, Mapping) or not isinstance(option.get("label"), str):
                raise ValueError(f"Malformed event option: {option!r}")
            choices.append(EventChoice(label=option["label"], impact=_impact_from_wire(option.get("impact"))))
        return cls(
            title=payload["title"],
            description=payload["description"],
            impact=_impact_from_wire(payload.get("impact")),
            choices=tuple(choices),
        )


@dataclass(frozen=True, slots=True)
class QuizDefinition:
    question: str
    options: Tuple[str, ...]
    correct_index: int
    explanation: str = ""
    difficulty: QuizDifficulty = QuizDifficulty.EASY

    def __post_init__(self) -> None:
        if len(self.options) != QUIZ_OPTION_COUNT:
            raise ValueError(f"Quiz needs {QUIZ_OPTION_COUNT} options, received {len(self.options)}")
        if not 0 <= self.correct_index < QUIZ_OPTION_COUNT:
            raise ValueError(f"correct_index {self.correct_index} out of range")

    def is_correct(self, option_index: int) -> bool:
        return option_index == self.correct_index

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question": self.question,
            "options": list(self.options),
            "correctIndex": self.correct_index,
            "explanation": self.explanation,
            "difficulty": self.difficulty.value,
        }

    @classmethod
    def from_dict(cls, payload: object, *, difficulty: QuizDifficulty = QuizDifficulty.EASY) -> "QuizDefinition":
        QUIZ_SCHEMA.validate(payload)
        raw_index = payload["correctIndex"]
        if isinstance(raw_index, bool) or (isinstance(raw_index, float) and not raw_index.is_integer()):
            raise ValueError(f"correctIndex must be a whole number, received {raw_index!r}")
        raw_difficulty = str(payload.get("difficulty") or "").upper()
        if raw_difficulty in QuizDifficulty.__members__:
            difficulty = QuizDifficulty[raw_difficulty]
        return cls(
            question=payload["question"],
            options=tuple(str(option) for option in payload["options"]),
            correct_index=int(raw_index),
            explanation=str(payload.get("explanation") or ""),
            difficulty=difficulty,
        )


# ---------------------------------------------------------------------------
# Providers
# ---------------------------------------------------------------------------


class ContentProvider:
    """Source of events and quizzes.  Implementations may raise on failure."""

    def next_event(self, snapshot: StatSnapshot, language: Language) -> EventDefinition:
        raise NotImplementedError

    def next_quiz(self, difficulty: QuizDifficulty, language: Language) -> QuizDefinition:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class EventTemplate:
    """Catalogue event whose impacts are deltas against the live snapshot."""

    title: str
    description: str
    delta: Mapping[str, float]
    choices: Tuple[Tuple[str, Mapping[str, float]], ...] = ()

    def materialise(self, snapshot: StatSnapshot) -> EventDefinition:
        return EventDefinition(
            title=self.title,
            description=self.description,
            impact=_absolute(snapshot, self.delta),
            choices=tuple(EventChoice(label=label, impact=_absolute(snapshot, delta)) for label, delta in self.choices),
        )


def _absolute(snapshot: StatSnapshot, delta: Mapping[str, float]) -> Mapping[str, float]:
    values: Dict[str, float] = {}
    for name, change in delta.items():
        if name not in RESOURCE_FIELDS:
            raise KeyError(f"Unknown stat '{name}' in event template")
        values[name] = getattr(snapshot, name) + change
    return MappingProxyType(values)


DEFAULT_EVENTS: Tuple[EventTemplate, ...] = (
    EventTemplate(
        title="Pipeline Leak Reported",
        description="Satellite imagery shows a slow leak along a coastal pipeline.",
        delta={"pollution": 4.0},
        choices=(
            ("Fund a full cleanup", {"cash": -150_000.0, "approval": 4.0}),
            ("Issue a press statement", {"approval": -6.0, "pollution": 4.0}),
        ),
    ),
    EventTemplate(
        title="Carbon Tax Debate",
        description="Parliament is debating a levy on refinery emissions.",
        delta={"cash": -100_000.0},
        choices=(
            ("Support the levy", {"cash": -200_000.0, "approval": 6.0}),
            ("Lobby against it", {"cash": -50_000.0, "approval": -8.0}),
        ),
    ),
    EventTemplate(
        title="Oil Price Spike",
        description="Supply disruptions abroad push crude prices to a yearly high.",
        delta={"cash": 250_000.0},
        choices=(
            ("Sell reserves now", {"cash": 400_000.0, "crude_oil": -20_000.0}),
            ("Hold inventory", {"approval": 2.0}),
        ),
    ),
    EventTemplate(
        title="Green Energy Grant",
        description="A government programme offers matching funds for wind and solar.",
        delta={"cash": 150_000.0},
        choices=(
            ("Apply with a solar farm", {"renewable_capacity": 2.0, "approval": 3.0}),
            ("Decline the paperwork", {}),
        ),
    ),
    EventTemplate(
        title="Community Protest",
        description="Residents near the refinery protest air quality.",
        delta={"approval": -5.0},
    ),
)


def _quiz(question: str, options: Sequence[str], correct: int, explanation: str, difficulty: QuizDifficulty) -> QuizDefinition:
    return QuizDefinition(
        question=question,
        options=tuple(options),
        correct_index=correct,
        explanation=explanation,
        difficulty=difficulty,
    )


DEFAULT_QUIZZES: Mapping[QuizDifficulty, Tuple[QuizDefinition, ...]] = MappingProxyType(
    {
        QuizDifficulty.EASY: (
            _quiz(
                "Crude oil forms mainly from the remains of what?",
                ("Volcanic rock", "Ancient marine organisms", "Meteorites", "Tree sap"),
                1,
                "Plankton and algae buried under sediment were cooked by heat and pressure over millions of years.",
                QuizDifficulty.EASY,
            ),
            _quiz(
                "Which unit is commonly used to measure crude oil volume?",
                ("Barrel", "Bushel", "Gallon drum", "Cord"),
                0,
                "One barrel is 42 US gallons.",
                QuizDifficulty.EASY,
            ),
        ),
        QuizDifficulty.MEDIUM: (
            _quiz(
                "What process separates crude oil into fractions by boiling point?",
                ("Cracking", "Fractional distillation", "Polymerisation", "Electrolysis"),
                1,
                "Distillation columns split crude into gases, naphtha, kerosene, diesel and residue.",
                QuizDifficulty.MEDIUM,
            ),
            _quiz(
                "Which gas is the main component of natural gas?",
                ("Ethane", "Propane", "Methane", "Butane"),
                2,
                "Methane typically makes up 70-90% of natural gas.",
                QuizDifficulty.MEDIUM,
            ),
        ),
        QuizDifficulty.HARD: (
            _quiz(
                "Catalytic cracking mainly converts heavy fractions into what?",
                ("Asphalt", "Lighter, higher-value products such as gasoline", "Crude oil", "Sulfur"),
                1,
                "Zeolite catalysts break long hydrocarbon chains into shorter ones.",
                QuizDifficulty.HARD,
            ),
            _quiz(
                "API gravity above 31.1 degrees classifies crude as what?",
                ("Heavy", "Extra heavy", "Medium", "Light"),
                3,
                "Light crudes float higher on water and yield more gasoline per barrel.",
                QuizDifficulty.HARD,
            ),
        ),
    }
)


class StaticContentProvider(ContentProvider):
    """Deterministic selection from built-in catalogues, keyed by calendar month."""

    def __init__(
        self,
        *,
        seed: int = 0,
        events: Sequence[EventTemplate] = DEFAULT_EVENTS,
        quizzes: Mapping[QuizDifficulty, Sequence[QuizDefinition]] = DEFAULT_QUIZZES,
    ) -> None:
        self.seed = seed
        self.events = tuple(events)
        self.quizzes = {difficulty: tuple(items) for difficulty, items in quizzes.items()}
        self._quiz_draws = 0

    def _rng(self, *parts: Any) -> random.Random:
        return random.Random("|".join(str(part) for part in (self.seed, *parts)))

    def next_event(self, snapshot: StatSnapshot, language: Language) -> EventDefinition:
        if not self.events:
            raise LookupError("No events configured")
        template = self._rng("event", snapshot.year, snapshot.month).choice(self.events)
        return template.materialise(snapshot)

    def next_quiz(self, difficulty: QuizDifficulty, language: Language) -> QuizDefinition:
        pool = self.quizzes.get(difficulty) or ()
        if not pool:
            raise LookupError(f"No quizzes configured for {difficulty.value}")
        self._quiz_draws += 1
        return self._rng("quiz", difficulty.value, self._quiz_draws).choice(pool)


__all__ = [
    "ContentProvider",
    "DEFAULT_EVENTS",
    "DEFAULT_QUIZZES",
    "EventChoice",
    "EventDefinition",
    "EventTemplate",
    "PayloadSchema",
    "QuizDefinition",
    "QuizDifficulty",
    "StaticContentProvider",
    "select_quiz_difficulty",
]
