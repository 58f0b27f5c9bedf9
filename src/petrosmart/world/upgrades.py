"""Upgrade catalog: purchasable capability tiers and their cost curve."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

DRILL = "drillLevel"
REFINE = "refineLevel"
RESEARCH = "researchLevel"
RENEWABLE = "renewableLevel"

PURCHASE_MULTIPLIER: float = 1.5


@dataclass(frozen=True, slots=True)
class UpgradeSpec:
    upgrade_id: str
    name: Mapping[str, str]
    base_cost: float
    growth_rate: float
    coefficients: Mapping[str, float] = field(default_factory=dict)

    def cost_at(self, level: int) -> int:
        """Price of buying the next tier when currently at ``level``."""

        return math.floor(self.base_cost * PURCHASE_MULTIPLIER * self.growth_rate ** max(0, int(level)))

    def coefficient(self, key: str) -> float:
        return float(self.coefficients[key])


def _spec(
    *,
    upgrade_id: str,
    name_en: str,
    name_id: str,
    base_cost: float,
    growth_rate: float = 2.4,
    coefficients: Mapping[str, float] | None = None,
) -> UpgradeSpec:
    return UpgradeSpec(
        upgrade_id=upgrade_id,
        name=MappingProxyType({"EN": name_en, "ID": name_id}),
        base_cost=float(base_cost),
        growth_rate=float(growth_rate),
        coefficients=MappingProxyType(dict(coefficients or {})),
    )


_CATALOG: tuple[UpgradeSpec, ...] = (
    _spec(
        upgrade_id=DRILL,
        name_en="Turbo Drills",
        name_id="Mata Bor Turbo",
        base_cost=250_000,
        coefficients={
            "crude_yield": 15_000.0,
            "pollution": 1.0,
            "renewable_penalty": 0.1,
        },
    ),
    _spec(
        upgrade_id=REFINE,
        name_en="Nano-Catalysts",
        name_id="Katalis-Nano",
        base_cost=300_000,
        coefficients={
            "revenue": 50_000.0,
            "pollution": 2.0,
            "approval_decay": 0.95,
        },
    ),
    _spec(
        upgrade_id=RESEARCH,
        name_en="AI Lab Cluster",
        name_id="Klaster Lab AI",
        base_cost=200_000,
        coefficients={
            "knowledge": 5.0,
            "drill_cost": 0.15,
        },
    ),
    _spec(
        upgrade_id=RENEWABLE,
        name_en="Smart Grid 2.0",
        name_id="Grid Pintar 2.0",
        base_cost=400_000,
        coefficients={
            "capacity": 2.0,
            "build_cost": 50_000.0,
        },
    ),
)

_BY_ID: Mapping[str, UpgradeSpec] = MappingProxyType({spec.upgrade_id: spec for spec in _CATALOG})

UPGRADE_IDS: tuple[str, ...] = tuple(spec.upgrade_id for spec in _CATALOG)


def upgrade_catalog() -> tuple[UpgradeSpec, ...]:
    return _CATALOG


def get_upgrade(upgrade_id: str) -> UpgradeSpec:
    try:
        return _BY_ID[upgrade_id]
    except KeyError as exc:
        raise KeyError(f"Unknown upgrade '{upgrade_id}'") from exc


def empty_levels() -> dict[str, int]:
    return {upgrade_id: 0 for upgrade_id in UPGRADE_IDS}


def normalize_levels(levels: object) -> dict[str, int]:
    """Return one non-negative integer level per catalog id.

    Unknown ids are dropped and missing or malformed levels become 0, so a
    partially corrupt save still yields a complete mapping.
    """

    raw = levels if isinstance(levels, Mapping) else {}
    normalized = empty_levels()
    for upgrade_id in UPGRADE_IDS:
        value = raw.get(upgrade_id, 0)
        try:
            normalized[upgrade_id] = max(0, int(value))
        except (TypeError, ValueError, OverflowError):
            normalized[upgrade_id] = 0
    return normalized


__all__ = [
    "DRILL",
    "PURCHASE_MULTIPLIER",
    "REFINE",
    "RENEWABLE",
    "RESEARCH",
    "UPGRADE_IDS",
    "UpgradeSpec",
    "empty_levels",
    "get_upgrade",
    "normalize_levels",
    "upgrade_catalog",
]
