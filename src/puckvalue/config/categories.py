"""Static stat category table for skaters and goalies."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, Literal, Mapping, Optional, Tuple

Role = Literal["skater", "goalie"]
Bucket = Literal["primary", "supporting", "grind", "goalie"]


@dataclass(frozen=True)
class CategoryDefinition:
    code: str
    label: str
    role: Optional[Role]
    weight: Optional[float]
    invert: bool = False
    bucket: Bucket = "primary"
    aliases: Tuple[str, ...] = ()


def _skater(code: str, label: str, weight: float, bucket: Bucket, *aliases: str) -> CategoryDefinition:
    return CategoryDefinition(
        code=code,
        label=label,
        role="skater",
        weight=weight,
        bucket=bucket,
        aliases=(label, *aliases),
    )


def _goalie(code: str, label: str, *aliases: str, invert: bool = False) -> CategoryDefinition:
    return CategoryDefinition(
        code=code,
        label=label,
        role="goalie",
        weight=1.0,
        invert=invert,
        bucket="goalie",
        aliases=(label, *aliases),
    )


_CATEGORIES: Dict[str, CategoryDefinition] = {
    definition.code: definition
    for definition in (
        _skater("G", "Goals", 1.5, "primary"),
        _skater("A", "Assists", 1.3, "primary"),
        _skater("P", "Points", 0.7, "primary"),
        _skater("PPP", "Powerplay Points", 1.2, "primary", "Power Play Points"),
        _skater("SOG", "Shots on Goal", 1.3, "primary", "Shots"),
        _skater("PM", "Plus/Minus", 1.0, "supporting", "+/-"),
        _skater("SHP", "Shorthanded Points", 1.0, "supporting", "Short Handed Points"),
        _skater("GWG", "Game-Winning Goals", 1.0, "supporting", "Game Winning Goals"),
        _skater("PIM", "Penalty Minutes", 0.7, "grind"),
        _skater("FW", "Faceoffs Won", 0.7, "grind", "FOW"),
        _skater("HIT", "Hits", 0.6, "grind"),
        _skater("BLK", "Blocks", 0.6, "grind", "Blocked Shots"),
        _goalie("W", "Wins"),
        _goalie("GAA", "Goals Against Average", invert=True),
        _goalie("SV", "Saves"),
        _goalie("SVPCT", "Save Percentage", "Save %", "SV%"),
        _goalie("SHO", "Shutouts"),
    )
}

# Non-scoring stats the engine reads for goalie volume and decisions.
AUXILIARY_STATS: Mapping[str, Tuple[str, ...]] = {
    "GS": ("Games Started",),
    "GP": ("Games Played",),
    "L": ("Losses",),
    "OTL": ("Overtime Losses", "OT Losses"),
}

SKATER_CATEGORIES: Tuple[str, ...] = tuple(
    code for code, definition in _CATEGORIES.items() if definition.role == "skater"
)
GOALIE_CATEGORIES: Tuple[str, ...] = tuple(
    code for code, definition in _CATEGORIES.items() if definition.role == "goalie"
)

# Team dashboards track ten skater categories, not the full scoring twelve.
TEAM_SKATER_CATEGORIES: Tuple[str, ...] = ("G", "A", "P", "PPP", "SOG", "PM", "PIM", "HIT", "BLK", "FW")
TEAM_CATEGORIES: Tuple[str, ...] = TEAM_SKATER_CATEGORIES + GOALIE_CATEGORIES


def _stat_token(value: str) -> str:
    return re.sub(r"[^a-z0-9%+/-]", "", value.lower())


def _build_alias_lookup() -> dict[str, str]:
    lookup: dict[str, str] = {}
    for code, definition in _CATEGORIES.items():
        for variant in (code, *definition.aliases):
            lookup.setdefault(_stat_token(variant), code)
    for code, variants in AUXILIARY_STATS.items():
        for variant in (code, *variants):
            lookup.setdefault(_stat_token(variant), code)
    return lookup


STAT_ALIAS_LOOKUP = _build_alias_lookup()


def iter_categories(role: Optional[str] = None) -> Iterable[CategoryDefinition]:
    """Return configured categories, optionally limited to one role."""

    if role is None:
        return _CATEGORIES.values()
    return [definition for definition in _CATEGORIES.values() if definition.role == role]


def get_category(code: str) -> CategoryDefinition:
    """Fetch a category definition, raising KeyError if missing."""

    key = code.upper()
    if key not in _CATEGORIES:
        raise KeyError(f"No category configured for code={code!r}")
    return _CATEGORIES[key]


def resolve_stat_code(name: str) -> Optional[str]:
    """Map a provider stat name (or a code) onto its canonical code."""

    token = _stat_token(name)
    if not token:
        return None
    return STAT_ALIAS_LOOKUP.get(token)


def default_definitions() -> Dict[str, CategoryDefinition]:
    """Return a mutable copy of the category table keyed by code."""

    return dict(_CATEGORIES)
