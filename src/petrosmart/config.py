"""Engine tunables.

Everything the progression engine treats as a constant lives here so tests and
tooling can run variants (shorter event cadence, harsher bankruptcy line, ...)
without touching the formulas.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Dict, Mapping, Sequence


@dataclass(frozen=True, slots=True)
class EngineConfig:
    start_year: int = 2024
    turns_per_month: int = 5
    months_per_year: int = 12

    initial_cash: float = 1_000_000.0
    initial_pollution: float = 5.0
    initial_approval: float = 80.0

    subsidy_per_gw: float = 5_000.0
    approval_capacity_divisor: float = 10.0
    approval_pollution_divisor: float = 20.0

    event_every_months: int = 4
    quiz_every_months: int = 3

    pollution_limit: float = 100.0
    approval_floor: float = 0.0
    bankruptcy_line: float = -500_000.0

    quiz_reward_knowledge: float = 20.0
    quiz_reward_cash: float = 100_000.0
    quiz_reward_approval: float = 5.0

    def with_overrides(self, overrides: Mapping[str, object]) -> "EngineConfig":
        known = {field.name for field in fields(self)}
        changes: Dict[str, object] = {}
        for key, value in overrides.items():
            if key not in known:
                raise ValueError(f"EngineConfig has no field '{key}'")
            current = getattr(self, key)
            if isinstance(value, str):
                value = _coerce_value(value)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"EngineConfig field '{key}' needs a number, received {value!r}")
            if isinstance(current, int):
                if isinstance(value, float) and not value.is_integer():
                    raise ValueError(f"EngineConfig field '{key}' needs a whole number, received {value!r}")
                value = int(value)
            else:
                value = float(value)
            changes[key] = value
        return replace(self, **changes)


def parse_overrides(pairs: Sequence[str]) -> Dict[str, object]:
    overrides: Dict[str, object] = {}
    for pair in pairs:
        if "=" not in pair:
            raise ValueError(f"Overrides must be of the form key=value, received '{pair}'")
        key, raw_value = pair.split("=", 1)
        overrides[key.strip()] = _coerce_value(raw_value.strip())
    return overrides


def _coerce_value(raw: str) -> object:
    for cast in (int, float):
        try:
            return cast(raw)
        except ValueError:
            continue
    lowered = raw.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    return raw


DEFAULT_CONFIG = EngineConfig()


__all__ = ["DEFAULT_CONFIG", "EngineConfig", "parse_overrides"]
