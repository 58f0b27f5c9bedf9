"""Company state value object.

A :class:`StatSnapshot` is a complete, immutable record of the company at one
instant.  The ledger keeps every superseded snapshot, so nothing here may be
mutated after construction: every change goes through :meth:`StatSnapshot.evolve`
which returns a fresh value.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from hashlib import sha256
from types import MappingProxyType
from typing import Any, Dict, Mapping

from petrosmart.config import DEFAULT_CONFIG, EngineConfig
from petrosmart.world.upgrades import UPGRADE_IDS, normalize_levels

APPROVAL_MIN: float = 0.0
APPROVAL_MAX: float = 100.0


class Language(str, Enum):
    EN = "EN"
    ID = "ID"

    @classmethod
    def parse(cls, value: object, default: "Language | None" = None) -> "Language":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            return default if default is not None else cls.EN


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


# Wire name -> attribute name.  The persisted record and content impacts use
# the camelCase names; Python callers may use either spelling.
_WIRE_FIELDS: Mapping[str, str] = MappingProxyType(
    {
        "year": "year",
        "month": "month",
        "turnsRemaining": "turns_remaining",
        "cash": "cash",
        "crudeOil": "crude_oil",
        "refinedProducts": "refined_products",
        "pollution": "pollution",
        "approval": "approval",
        "knowledge": "knowledge",
        "renewableCapacity": "renewable_capacity",
    }
)

# Fields an event impact may overlay.  Calendar, turn counter, upgrades and
# language belong to the engine.
RESOURCE_FIELDS: tuple[str, ...] = (
    "cash",
    "crude_oil",
    "refined_products",
    "pollution",
    "approval",
    "knowledge",
    "renewable_capacity",
)

_NON_NEGATIVE: frozenset[str] = frozenset(
    {"crude_oil", "refined_products", "knowledge", "renewable_capacity"}
)


@dataclass(frozen=True, slots=True)
class StatSnapshot:
    year: int
    month: int
    turns_remaining: int
    cash: float
    crude_oil: float = 0.0
    refined_products: float = 0.0
    pollution: float = 0.0
    approval: float = 0.0
    knowledge: float = 0.0
    renewable_capacity: float = 0.0
    upgrades: Mapping[str, int] = field(default_factory=dict)
    language: Language = Language.EN

    def __post_init__(self) -> None:
        object.__setattr__(self, "upgrades", MappingProxyType(normalize_levels(self.upgrades)))
        object.__setattr__(self, "approval", clamp(float(self.approval), APPROVAL_MIN, APPROVAL_MAX))

    def level(self, upgrade_id: str) -> int:
        return int(self.upgrades[upgrade_id])

    def evolve(self, **changes: Any) -> "StatSnapshot":
        """Return a copy with ``changes`` applied; approval is re-clamped."""

        for name in _NON_NEGATIVE.intersection(changes):
            changes[name] = max(0.0, float(changes[name]))
        return replace(self, **changes)

    def with_level(self, upgrade_id: str, level: int) -> "StatSnapshot":
        levels = dict(self.upgrades)
        levels[upgrade_id] = max(0, int(level))
        return self.evolve(upgrades=levels)

    def overlay(self, impact: Mapping[str, object] | None) -> "StatSnapshot":
        """Shallow partial merge of an external impact onto the resource fields.

        Keys may use either the wire (camelCase) or attribute spelling.  Keys
        outside :data:`RESOURCE_FIELDS` and non-numeric values are ignored; the
        values replace the current ones rather than adding to them.
        """

        if not isinstance(impact, Mapping):
            return self
        changes: Dict[str, float] = {}
        for key, value in impact.items():
            name = _WIRE_FIELDS.get(str(key), str(key))
            if name not in RESOURCE_FIELDS:
                continue
            number = _finite_number(value)
            if number is None:
                continue
            if name == "pollution":
                number = max(0.0, number)
            changes[name] = number
        if not changes:
            return self
        return self.evolve(**changes)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {wire: getattr(self, attr) for wire, attr in _WIRE_FIELDS.items()}
        payload["upgrades"] = {key: int(self.upgrades[key]) for key in UPGRADE_IDS}
        payload["language"] = self.language.value
        return payload

    @classmethod
    def from_dict(cls, data: object, *, config: EngineConfig = DEFAULT_CONFIG) -> "StatSnapshot":
        """Rebuild a snapshot, replacing missing or corrupt fields with initial values."""

        base = initial_snapshot(config)
        if not isinstance(data, Mapping):
            return base
        values: Dict[str, Any] = {}
        for wire, attr in _WIRE_FIELDS.items():
            raw = data.get(wire, data.get(attr))
            number = _finite_number(raw)
            if number is None:
                continue
            values[attr] = number

        year = int(values.get("year", base.year))
        month = int(values.get("month", base.month))
        turns = int(values.get("turns_remaining", base.turns_remaining))
        if year < config.start_year:
            year = base.year
        if not 1 <= month <= config.months_per_year:
            month = base.month
        if not 0 <= turns <= config.turns_per_month:
            turns = base.turns_remaining

        resources = {
            name: values.get(name, getattr(base, name))
            for name in RESOURCE_FIELDS
        }
        for name in _NON_NEGATIVE:
            if resources[name] < 0:
                resources[name] = getattr(base, name)

        return cls(
            year=year,
            month=month,
            turns_remaining=turns,
            upgrades=normalize_levels(data.get("upgrades")),
            language=Language.parse(data.get("language"), base.language),
            **resources,
        )

    def signature(self) -> str:
        payload = json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))
        return sha256(payload.encode("utf-8")).hexdigest()


def _finite_number(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = float(value)
    if not math.isfinite(number):
        return None
    return number


def initial_snapshot(config: EngineConfig = DEFAULT_CONFIG, *, language: Language = Language.EN) -> StatSnapshot:
    return StatSnapshot(
        year=config.start_year,
        month=1,
        turns_remaining=config.turns_per_month,
        cash=config.initial_cash,
        pollution=config.initial_pollution,
        approval=config.initial_approval,
        language=language,
    )


__all__ = [
    "APPROVAL_MAX",
    "APPROVAL_MIN",
    "Language",
    "RESOURCE_FIELDS",
    "StatSnapshot",
    "clamp",
    "initial_snapshot",
]
