"""Player actions and their resolution.

Each action kind is registered as an :class:`ActionDefinition` pairing a
resource gate with an executor.  Resolution is a pure function of the incoming
snapshot: a failed gate returns the very same snapshot object with
``applied=False`` so the caller can tell a no-op apart from a spent turn.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Tuple

from petrosmart.stats import StatSnapshot
from petrosmart.world.upgrades import DRILL, REFINE, RENEWABLE, RESEARCH, get_upgrade

DRILL_BASE_COST: float = 100_000.0
DRILL_BASE_YIELD: float = 50_000.0
DRILL_BASE_POLLUTION: float = 2.0

REFINE_CRUDE_INPUT: float = 10_000.0
REFINE_OUTPUT: float = 9_000.0
REFINE_BASE_REVENUE: float = 150_000.0
REFINE_BASE_POLLUTION: float = 3.0

RESEARCH_COST: float = 50_000.0
RESEARCH_BASE_KNOWLEDGE: float = 10.0

RENEWABLE_BASE_COST: float = 200_000.0
RENEWABLE_BASE_CAPACITY: float = 5.0
RENEWABLE_MIN_CAPACITY: float = 0.1
RENEWABLE_POLLUTION_RELIEF: float = 5.0


class ActionKind(str, Enum):
    DRILL = "DRILL"
    REFINE = "REFINE"
    RESEARCH = "RESEARCH"
    BUILD_RENEWABLE = "RENEWABLE"
    SKIP_TURN = "SKIP_TURN"

    @classmethod
    def parse(cls, value: "ActionKind | str") -> "ActionKind":
        if isinstance(value, ActionKind):
            return value
        key = str(value).strip().upper()
        aliases = {"SKIP": cls.SKIP_TURN, "BUILD_RENEWABLE": cls.BUILD_RENEWABLE}
        if key in aliases:
            return aliases[key]
        try:
            return cls(key)
        except ValueError as exc:
            raise ValueError(f"Unknown action '{value}'") from exc


@dataclass(frozen=True, slots=True)
class ActionResult:
    snapshot: StatSnapshot
    applied: bool
    effect_label: str = ""


Precondition = Callable[[StatSnapshot], bool]
Executor = Callable[[StatSnapshot], Tuple[StatSnapshot, str]]


@dataclass(frozen=True, slots=True)
class ActionDefinition:
    kind: ActionKind
    precondition: Precondition
    executor: Executor


# ---------------------------------------------------------------------------
# Formulas
# ---------------------------------------------------------------------------


def drill_cost(snapshot: StatSnapshot) -> float:
    research = get_upgrade(RESEARCH)
    return DRILL_BASE_COST * (1 + research.coefficient("drill_cost") * snapshot.level(RESEARCH))


def renewable_cost(snapshot: StatSnapshot) -> float:
    renewable = get_upgrade(RENEWABLE)
    return RENEWABLE_BASE_COST + renewable.coefficient("build_cost") * snapshot.level(RENEWABLE)


def renewable_gain(snapshot: StatSnapshot) -> float:
    renewable = get_upgrade(RENEWABLE)
    drill = get_upgrade(DRILL)
    base = RENEWABLE_BASE_CAPACITY + renewable.coefficient("capacity") * snapshot.level(RENEWABLE)
    penalty = 1 - drill.coefficient("renewable_penalty") * snapshot.level(DRILL)
    return max(RENEWABLE_MIN_CAPACITY, base * penalty)


def _drill(snapshot: StatSnapshot) -> Tuple[StatSnapshot, str]:
    spec = get_upgrade(DRILL)
    level = snapshot.level(DRILL)
    cost = drill_cost(snapshot)
    crude = DRILL_BASE_YIELD + spec.coefficient("crude_yield") * level
    pollution = DRILL_BASE_POLLUTION + spec.coefficient("pollution") * level
    nxt = snapshot.evolve(
        cash=snapshot.cash - cost,
        crude_oil=snapshot.crude_oil + crude,
        pollution=snapshot.pollution + pollution,
    )
    return nxt, f"+{crude:,.0f} bbl crude, -${cost:,.0f}, +{pollution:g} pollution"


def _refine(snapshot: StatSnapshot) -> Tuple[StatSnapshot, str]:
    spec = get_upgrade(REFINE)
    level = snapshot.level(REFINE)
    revenue = REFINE_BASE_REVENUE + spec.coefficient("revenue") * level
    pollution = REFINE_BASE_POLLUTION + spec.coefficient("pollution") * level
    nxt = snapshot.evolve(
        crude_oil=snapshot.crude_oil - REFINE_CRUDE_INPUT,
        refined_products=snapshot.refined_products + REFINE_OUTPUT,
        cash=snapshot.cash + revenue,
        pollution=snapshot.pollution + pollution,
    )
    return nxt, f"+{REFINE_OUTPUT:,.0f} refined, +${revenue:,.0f}, +{pollution:g} pollution"


def _research(snapshot: StatSnapshot) -> Tuple[StatSnapshot, str]:
    spec = get_upgrade(RESEARCH)
    gained = RESEARCH_BASE_KNOWLEDGE + spec.coefficient("knowledge") * snapshot.level(RESEARCH)
    nxt = snapshot.evolve(
        cash=snapshot.cash - RESEARCH_COST,
        knowledge=snapshot.knowledge + gained,
    )
    return nxt, f"+{gained:g} knowledge, -${RESEARCH_COST:,.0f}"


def _build_renewable(snapshot: StatSnapshot) -> Tuple[StatSnapshot, str]:
    cost = renewable_cost(snapshot)
    gain = renewable_gain(snapshot)
    nxt = snapshot.evolve(
        cash=snapshot.cash - cost,
        renewable_capacity=snapshot.renewable_capacity + gain,
        pollution=max(0.0, snapshot.pollution - RENEWABLE_POLLUTION_RELIEF),
    )
    return nxt, f"+{gain:g} GW renewable, -${cost:,.0f}, -{RENEWABLE_POLLUTION_RELIEF:g} pollution"


def _skip(snapshot: StatSnapshot) -> Tuple[StatSnapshot, str]:
    return snapshot, "turn skipped"


ACTION_DEFINITIONS: Dict[ActionKind, ActionDefinition] = {
    definition.kind: definition
    for definition in (
        ActionDefinition(ActionKind.DRILL, lambda s: s.cash >= drill_cost(s), _drill),
        ActionDefinition(ActionKind.REFINE, lambda s: s.crude_oil >= REFINE_CRUDE_INPUT, _refine),
        ActionDefinition(ActionKind.RESEARCH, lambda s: s.cash >= RESEARCH_COST, _research),
        ActionDefinition(ActionKind.BUILD_RENEWABLE, lambda s: s.cash >= renewable_cost(s), _build_renewable),
        ActionDefinition(ActionKind.SKIP_TURN, lambda s: True, _skip),
    )
}


def resolve_action(snapshot: StatSnapshot, kind: ActionKind | str) -> ActionResult:
    definition = ACTION_DEFINITIONS[ActionKind.parse(kind)]
    if snapshot.turns_remaining <= 0:
        return ActionResult(snapshot=snapshot, applied=False, effect_label="no turns remaining")
    if not definition.precondition(snapshot):
        return ActionResult(snapshot=snapshot, applied=False, effect_label="insufficient resources")
    nxt, label = definition.executor(snapshot)
    nxt = nxt.evolve(turns_remaining=snapshot.turns_remaining - 1)
    return ActionResult(snapshot=nxt, applied=True, effect_label=label)


# ---------------------------------------------------------------------------
# Upgrade purchases
# ---------------------------------------------------------------------------


def upgrade_cost(snapshot: StatSnapshot, upgrade_id: str) -> int:
    return get_upgrade(upgrade_id).cost_at(snapshot.level(upgrade_id))


def purchase_upgrade(snapshot: StatSnapshot, upgrade_id: str) -> ActionResult:
    """Buy the next tier of ``upgrade_id``.  Purchases do not consume a turn."""

    spec = get_upgrade(upgrade_id)
    level = snapshot.level(upgrade_id)
    cost = spec.cost_at(level)
    if snapshot.cash < cost:
        return ActionResult(snapshot=snapshot, applied=False, effect_label="insufficient resources")
    nxt = snapshot.with_level(upgrade_id, level + 1).evolve(cash=snapshot.cash - cost)
    return ActionResult(
        snapshot=nxt,
        applied=True,
        effect_label=f"{spec.name['EN']} level {level + 1}, -${cost:,}",
    )


__all__ = [
    "ACTION_DEFINITIONS",
    "ActionDefinition",
    "ActionKind",
    "ActionResult",
    "drill_cost",
    "purchase_upgrade",
    "renewable_cost",
    "renewable_gain",
    "resolve_action",
    "upgrade_cost",
]
