"""
Module: utility_engines.meter_kind
Responsibility:
    Canonical meter categories and the heuristic that derives one from a
    free-text meter name plus a coarse individual/communal tag.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - ``classify_meter_kind`` is total: every (name, type) pair maps to
      exactly one ``MeterKind``; unmatched names fall back to the
      type-specific electricity kind.
    - Matching is case-insensitive and tried in priority order so specific
      terms (cold/hot water) win over generic ones. Lithuanian stems match
      as substrings to cover inflected forms; English terms match whole
      words only, so "photo" never reads as "hot".

Failure modes:
    - ValueError when the type tag is neither individual nor communal.

Usage:
    The classifier is an import/migration helper. A meter record stores its
    ``MeterKind`` explicitly once created; the billing path never
    re-derives it from the name.

    from utility_engines.meter_kind import MeterType, classify_meter_kind

    kind = classify_meter_kind("Šaltas vanduo", MeterType.INDIVIDUAL)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from utility_kernel.logging_config import get_logger

logger = get_logger("engines.meter_kind")


class MeterKind(str, Enum):
    """Canonical category of a utility meter."""

    WATER_COLD = "water_cold"
    WATER_HOT = "water_hot"
    ELECTRICITY_IND = "electricity_ind"
    GAS_IND = "gas_ind"
    HEATING = "heating"
    ELECTRICITY_SHARED = "electricity_shared"
    VENTILATION = "ventilation"
    ELEVATOR = "elevator"
    INTERNET = "internet"
    TRASH = "trash"
    CUSTOM = "custom"


class MeterType(str, Enum):
    """Whether a meter serves one apartment or the whole building."""

    INDIVIDUAL = "individual"
    COMMUNAL = "communal"

    @classmethod
    def _missing_(cls, value: object) -> MeterType | None:
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized == "shared":
                return cls.COMMUNAL
            for member in cls:
                if member.value == normalized:
                    return member
        return None


# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class _Terms:
    """Lithuanian stems match anywhere; English words match whole words only."""

    stems: tuple[str, ...]
    words: tuple[str, ...] = ()
    _pattern: re.Pattern[str] | None = field(
        init=False, repr=False, compare=False, default=None,
    )

    def __post_init__(self) -> None:
        if self.words:
            alternatives = "|".join(re.escape(w) for w in self.words)
            object.__setattr__(
                self, "_pattern", re.compile(rf"\b(?:{alternatives})s?\b"),
            )

    def found_in(self, name: str) -> bool:
        if any(stem in name for stem in self.stems):
            return True
        return self._pattern is not None and self._pattern.search(name) is not None


_WATER = _Terms(("vanduo",), ("water",))
_COLD = _Terms(("šaltas",), ("cold",))
_HOT = _Terms(("karštas",), ("hot",))
_ELECTRICITY = _Terms(("elektra",), ("electricity",))
_INDIVIDUAL = _Terms(("individuali",), ("individual",))
_SHARED = _Terms(("bendra",), ("shared", "common"))
_GAS = _Terms(("dujos",), ("gas",))
_HEATING = _Terms(("šildymas",), ("heating",))
_CUSTOM = _Terms(("kitas",), ("custom",))
_VENTILATION = _Terms(("vėdinimas",), ("ventilation",))
_ELEVATOR = _Terms(("liftas",), ("elevator", "lift"))
_INTERNET = _Terms(("internetas",), ("internet",))
_TRASH = _Terms(("šiukšlės", "šiukšlių"), ("trash", "garbage"))
_CLEANING = _Terms(("valymas",), ("cleaning",))


@dataclass(frozen=True)
class _Rule:
    """Name matches when every ``all_of`` group hits and ``none_of`` does not."""

    kind: MeterKind
    all_of: tuple[_Terms, ...]
    none_of: _Terms | None = None

    def matches(self, name: str) -> bool:
        if self.none_of is not None and self.none_of.found_in(name):
            return False
        return all(terms.found_in(name) for terms in self.all_of)


_INDIVIDUAL_RULES: tuple[_Rule, ...] = (
    _Rule(MeterKind.WATER_COLD, (_WATER, _COLD)),
    _Rule(MeterKind.WATER_HOT, (_WATER, _HOT)),
    _Rule(MeterKind.ELECTRICITY_IND, (_ELECTRICITY, _INDIVIDUAL)),
    _Rule(MeterKind.ELECTRICITY_IND, (_ELECTRICITY,), none_of=_SHARED),
    _Rule(MeterKind.GAS_IND, (_GAS,)),
    _Rule(MeterKind.HEATING, (_HEATING,)),
    _Rule(MeterKind.CUSTOM, (_CUSTOM,)),
)

_COMMUNAL_RULES: tuple[_Rule, ...] = (
    _Rule(MeterKind.ELECTRICITY_SHARED, (_ELECTRICITY, _SHARED)),
    _Rule(MeterKind.ELECTRICITY_SHARED, (_ELECTRICITY,), none_of=_INDIVIDUAL),
    _Rule(MeterKind.VENTILATION, (_VENTILATION,)),
    _Rule(MeterKind.ELEVATOR, (_ELEVATOR,)),
    _Rule(MeterKind.INTERNET, (_INTERNET,)),
    _Rule(MeterKind.TRASH, (_TRASH,)),
    _Rule(MeterKind.HEATING, (_HEATING,)),
    _Rule(MeterKind.TRASH, (_CLEANING,)),
)

_RULES: dict[MeterType, tuple[tuple[_Rule, ...], MeterKind]] = {
    MeterType.INDIVIDUAL: (_INDIVIDUAL_RULES, MeterKind.ELECTRICITY_IND),
    MeterType.COMMUNAL: (_COMMUNAL_RULES, MeterKind.ELECTRICITY_SHARED),
}


def classify_meter_kind(
    name: str,
    meter_type: MeterType | str,
    unit: str | None = None,
) -> MeterKind:
    """Map a free-text meter name and type tag to one canonical kind.

    ``unit`` is accepted so import records can be passed through as-is;
    it does not take part in matching.

    Raises:
        ValueError: if ``meter_type`` is not a known type tag.
    """
    meter_type = MeterType(meter_type)
    lowered = (name or "").lower()
    rules, fallback = _RULES[meter_type]

    for rule in rules:
        if rule.matches(lowered):
            return rule.kind

    logger.warning("meter_kind_fallback", extra={
        "meter_name": name,
        "meter_type": meter_type.value,
        "unit": unit,
        "fallback_kind": fallback.value,
    })
    return fallback
