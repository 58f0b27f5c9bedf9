"""Milestone catalog and evaluator.

Milestones are declarative records holding a pure predicate over a
:class:`StatSnapshot`.  Evaluation is a plain scan of the catalog; unlocking is
tracked by the caller as a monotonic set of ids.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import AbstractSet, Callable, Iterable, Mapping

from petrosmart.stats import Language, StatSnapshot
from petrosmart.world.upgrades import DRILL

Predicate = Callable[[StatSnapshot], bool]


@dataclass(frozen=True, slots=True)
class AchievementSpec:
    achievement_id: str
    title: Mapping[str, str]
    description: Mapping[str, str]
    icon: str
    predicate: Predicate

    def title_for(self, language: Language) -> str:
        return self.title.get(language.value, self.title["EN"])

    def description_for(self, language: Language) -> str:
        return self.description.get(language.value, self.description["EN"])


def _spec(
    *,
    achievement_id: str,
    title: tuple[str, str],
    description: tuple[str, str],
    icon: str,
    predicate: Predicate,
) -> AchievementSpec:
    return AchievementSpec(
        achievement_id=achievement_id,
        title=MappingProxyType({"EN": title[0], "ID": title[1]}),
        description=MappingProxyType({"EN": description[0], "ID": description[1]}),
        icon=icon,
        predicate=predicate,
    )


def _all_upgrades_at_least(level: int) -> Predicate:
    return lambda s: all(value >= level for value in s.upgrades.values())


_CATALOG: tuple[AchievementSpec, ...] = (
    _spec(
        achievement_id="industrial_titan",
        title=("Industrial Titan", "Raja Industri"),
        description=(
            "Reach $10,000,000 in liquid cash reserves",
            "Capai cadangan kas cair senilai $10.000.000",
        ),
        icon="diamond",
        predicate=lambda s: s.cash >= 10_000_000,
    ),
    _spec(
        achievement_id="renewable_pioneer",
        title=("Renewable Pioneer", "Pelopor Terbarukan"),
        description=(
            "Deploy 20 GW of renewable capacity to lead the energy transition",
            "Operasikan 20 GW kapasitas terbarukan untuk memimpin transisi energi",
        ),
        icon="wind",
        predicate=lambda s: s.renewable_capacity >= 20,
    ),
    _spec(
        achievement_id="sustainability_giant",
        title=("Sustainability Giant", "Raksasa Keberlanjutan"),
        description=(
            "Reach 50 GW of renewable energy capacity",
            "Capai 50 GW kapasitas energi terbarukan",
        ),
        icon="recycle",
        predicate=lambda s: s.renewable_capacity >= 50,
    ),
    _spec(
        achievement_id="efficiency_master",
        title=("Efficiency Master", "Empu Efisiensi"),
        description=(
            "Optimize operations to produce 200,000 units of refined products",
            "Optimalkan operasi untuk memproduksi 200.000 unit produk olahan",
        ),
        icon="bolt",
        predicate=lambda s: s.refined_products >= 200_000,
    ),
    _spec(
        achievement_id="public_favorite",
        title=("Public Favorite", "Favorit Publik"),
        description=(
            "Earn a legendary 95% approval rating through corporate responsibility",
            "Raih 95% tingkat persetujuan publik melalui tanggung jawab korporat",
        ),
        icon="star",
        predicate=lambda s: s.approval >= 95,
    ),
    _spec(
        achievement_id="net_zero_hero",
        title=("Net Zero Hero", "Pahlawan Net-Zero"),
        description=(
            "50+ GW Renewable capacity with under 5% pollution",
            "50+ GW energi hijau dengan polusi di bawah 5%",
        ),
        icon="globe",
        predicate=lambda s: s.renewable_capacity >= 50 and s.pollution <= 5,
    ),
    _spec(
        achievement_id="green_monarch",
        title=("Green Monarch", "Penguasa Hijau"),
        description=(
            "Reach a massive 100 GW of renewable capacity",
            "Raih kapasitas energi hijau masif sebesar 100 GW",
        ),
        icon="crown",
        predicate=lambda s: s.renewable_capacity >= 100,
    ),
    _spec(
        achievement_id="eco_industrialist",
        title=("Eco-Industrialist", "Industrialis Eko"),
        description=(
            "10+ GW renewables and achieve exactly 0% pollution",
            "10+ GW energi hijau dan capai polusi tepat 0%",
        ),
        icon="seedling",
        predicate=lambda s: s.renewable_capacity >= 10 and s.pollution == 0,
    ),
    _spec(
        achievement_id="scholar",
        title=("Petro-Scholar", "Pakar Perminyakan"),
        description=(
            "Reach 100 points of industrial knowledge",
            "Raih 100 poin wawasan industri",
        ),
        icon="books",
        predicate=lambda s: s.knowledge >= 100,
    ),
    _spec(
        achievement_id="tech_visionary",
        title=("Tech Visionary", "Visioner Teknologi"),
        description=(
            "All industrial systems upgraded to Level 3+",
            "Tingkatkan semua sistem industri ke Level 3+",
        ),
        icon="tools",
        predicate=_all_upgrades_at_least(3),
    ),
    _spec(
        achievement_id="master_strategist",
        title=("Master Strategist", "Ahli Strategi"),
        description=(
            "Guide your company successfully until the year 2035",
            "Pimpin perusahaan Anda dengan sukses hingga tahun 2035",
        ),
        icon="chess",
        predicate=lambda s: s.year >= 2035,
    ),
    _spec(
        achievement_id="tech_demigod",
        title=("Tech Demigod", "Semi-Dewa Teknologi"),
        description=(
            "All industrial systems upgraded to Level 5+",
            "Tingkatkan semua sistem industri ke Level 5+",
        ),
        icon="dna",
        predicate=_all_upgrades_at_least(5),
    ),
    _spec(
        achievement_id="treasury_overlord",
        title=("Treasury Overlord", "Penguasa Perbendaharaan"),
        description=(
            "Reach a legendary fortune of $100,000,000",
            "Raih kekayaan legendaris senilai $100.000.000",
        ),
        icon="bank",
        predicate=lambda s: s.cash >= 100_000_000,
    ),
    _spec(
        achievement_id="pure_skies",
        title=("Pure Skies", "Langit Murni"),
        description=(
            "Produce 100,000 units of refined products with 0% pollution",
            "Produksi 100.000 unit produk olahan dengan polusi 0%",
        ),
        icon="cloud",
        predicate=lambda s: s.refined_products >= 100_000 and s.pollution == 0,
    ),
    _spec(
        achievement_id="deep_well_master",
        title=("Deep Well Master", "Empu Sumur Dalam"),
        description=(
            "Upgrade Turbo Drills to Level 8",
            "Tingkatkan Mata Bor Turbo ke Level 8",
        ),
        icon="hole",
        predicate=lambda s: s.level(DRILL) >= 8,
    ),
    _spec(
        achievement_id="infinite_intellect",
        title=("Infinite Intellect", "Intelek Tak Terbatas"),
        description=(
            "Reach 500 points of industrial knowledge",
            "Raih 500 poin wawasan industri",
        ),
        icon="brain",
        predicate=lambda s: s.knowledge >= 500,
    ),
)

ACHIEVEMENT_IDS: tuple[str, ...] = tuple(spec.achievement_id for spec in _CATALOG)


def achievement_catalog() -> tuple[AchievementSpec, ...]:
    return _CATALOG


def get_achievement(achievement_id: str) -> AchievementSpec:
    for spec in _CATALOG:
        if spec.achievement_id == achievement_id:
            return spec
    raise KeyError(f"Unknown achievement '{achievement_id}'")


def evaluate_achievements(
    snapshot: StatSnapshot,
    unlocked: AbstractSet[str] | Iterable[str] = frozenset(),
    *,
    catalog: Iterable[AchievementSpec] | None = None,
) -> tuple[str, ...]:
    """Return ids whose predicate newly holds, in catalog order.

    ``unlocked`` is only read.  Callers union the result into their own set.
    """

    already = unlocked if isinstance(unlocked, AbstractSet) else frozenset(unlocked)
    newly: list[str] = []
    for spec in catalog if catalog is not None else _CATALOG:
        if spec.achievement_id in already:
            continue
        if spec.predicate(snapshot):
            newly.append(spec.achievement_id)
    return tuple(newly)


__all__ = [
    "ACHIEVEMENT_IDS",
    "AchievementSpec",
    "achievement_catalog",
    "evaluate_achievements",
    "get_achievement",
]
