import pytest

from petrosmart.runtime.content import (
    DEFAULT_EVENTS,
    EventDefinition,
    EventTemplate,
    QuizDefinition,
    QuizDifficulty,
    StaticContentProvider,
    select_quiz_difficulty,
)
from petrosmart.stats import Language, initial_snapshot


@pytest.mark.parametrize(
    "knowledge, difficulty",
    [(0, QuizDifficulty.EASY), (39.9, QuizDifficulty.EASY), (40, QuizDifficulty.MEDIUM), (120, QuizDifficulty.HARD)],
)
def test_quiz_difficulty_policy(knowledge, difficulty):
    assert select_quiz_difficulty(knowledge) is difficulty


def test_event_from_wire_stat_value_shape():
    event = EventDefinition.from_dict(
        {
            "title": "Refinery Fire",
            "description": "A unit caught fire overnight.",
            "impact": {"stat": "approval", "value": 60},
            "options": [
                {"label": "Compensate residents", "impact": {"cash": 700_000, "approval": 70}},
                {"label": "Say nothing", "impact": {"stat": "approval", "value": 50}},
            ],
        }
    )
    assert dict(event.impact_for()) == {"approval": 60}
    assert dict(event.impact_for(0)) == {"cash": 700_000, "approval": 70}
    assert event.choices[1].label == "Say nothing"
    with pytest.raises(IndexError):
        event.impact_for(5)


def test_event_payload_validation():
    with pytest.raises(ValueError):
        EventDefinition.from_dict({"title": "No description"})
    with pytest.raises(TypeError):
        EventDefinition.from_dict({"title": 3, "description": "bad title"})
    with pytest.raises(ValueError):
        EventDefinition.from_dict({"title": "t", "description": "d", "options": ["not a mapping"]})


def test_event_dict_round_trip():
    event = DEFAULT_EVENTS[0].materialise(initial_snapshot())
    assert EventDefinition.from_dict(event.to_dict()) == event


def test_quiz_parsing_and_answer_check():
    quiz = QuizDefinition.from_dict(
        {"question": "Q?", "options": ["a", "b", "c", "d"], "correctIndex": 2, "explanation": "c"},
        difficulty=QuizDifficulty.MEDIUM,
    )
    assert quiz.difficulty is QuizDifficulty.MEDIUM
    assert quiz.is_correct(2)
    assert not quiz.is_correct(0)
    assert QuizDefinition.from_dict(quiz.to_dict()) == quiz


def test_quiz_rejects_bad_shapes():
    with pytest.raises(ValueError):
        QuizDefinition.from_dict({"question": "Q?", "options": ["a", "b"], "correctIndex": 0})
    with pytest.raises(ValueError):
        QuizDefinition.from_dict({"question": "Q?", "options": ["a", "b", "c", "d"], "correctIndex": 4})


def test_template_materialises_absolute_values():
    snapshot = initial_snapshot()
    template = EventTemplate(
        title="Windfall",
        description="d",
        delta={"cash": 100_000.0},
        choices=(("Invest", {"renewable_capacity": 2.0}),),
    )
    event = template.materialise(snapshot)
    assert dict(event.impact) == {"cash": 1_100_000.0}
    assert dict(event.impact_for(0)) == {"renewable_capacity": 2.0}
    with pytest.raises(KeyError):
        EventTemplate(title="t", description="d", delta={"year": 1}).materialise(snapshot)


def test_static_provider_is_deterministic():
    snapshot = initial_snapshot().evolve(month=5)
    first = StaticContentProvider(seed=7).next_event(snapshot, Language.EN)
    second = StaticContentProvider(seed=7).next_event(snapshot, Language.EN)
    assert first == second
    quiz_a = StaticContentProvider(seed=7).next_quiz(QuizDifficulty.HARD, Language.EN)
    quiz_b = StaticContentProvider(seed=7).next_quiz(QuizDifficulty.HARD, Language.EN)
    assert quiz_a == quiz_b
    assert quiz_a.difficulty is QuizDifficulty.HARD


def test_static_provider_empty_pools_raise():
    provider = StaticContentProvider(events=(), quizzes={})
    with pytest.raises(LookupError):
        provider.next_event(initial_snapshot(), Language.EN)
    with pytest.raises(LookupError):
        provider.next_quiz(QuizDifficulty.EASY, Language.EN)


def test_quiz_accepts_whole_number_float_index():
    quiz = QuizDefinition.from_dict({"question": "Q?", "options": ["a", "b", "c", "d"], "correctIndex": 1.0})
    assert quiz.correct_index == 1
    assert isinstance(quiz.correct_index, int)
    for bad in (1.5, True, float("nan")):
        with pytest.raises(ValueError):
            QuizDefinition.from_dict({"question": "Q?", "options": ["a", "b", "c", "d"], "correctIndex": bad})
