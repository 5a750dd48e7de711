"""
merge/text_type.py: wybór i kolejność reguł według typu tekstu.

Profil typu tekstu dzieli identyfikatory reguł na trzy grupy:
  essential  reguły, których brak w zbiorze jest raportowany
  important  reguły sprawdzane zaraz po kluczowych
  optional   reszta reguł profilu

Typy bez profilu (academic) używają pierwszych DEFAULT_SELECTION pozycji
z PRIORITY_RULES. Reguły są dopasowywane po id.

Kluczowe API:
  rules_for_text_type(text_type)                   -> list[str]
  filter_rules_by_priority(rules, text_type, max)  -> list[StyleRule]
  reorganize_by_text_type(rules, text_type)        -> list[StyleRule]
  check_essential_rules(rules, text_type)          -> EssentialCheck
  text_type_report(rules, text_type, max)          -> dict (blok rules.json)
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Sequence

from data_model import StyleRule, TextType

DEFAULT_SELECTION = 10
DEFAULT_MAX_RULES = 20

# Kolejność według wpływu i trafności wykrywania
PRIORITY_RULES: tuple[str, ...] = (
    "PARAGRAPH_LENGTH_NEWS",           # maks. 4 zdania w akapicie
    "SENTENCE_COMPLEXITY_001",         # maks. 25 słów w zdaniu
    "PASSIVE_VOICE_001",               # < 10% strony biernej
    "LEAD_STRUCTURE",                  # 5W1H w pierwszym akapicie
    "ATTRIBUTION_REQUIRED",
    "AVOID_REDUNDANCY",
    "INVERTED_PYRAMID",
    "PARAGRAPH_TRANSITION",
    "ELPAIS_ATTRIBUTION",
    "TRANSPARENCY_ONE_IDEA",
    "TRANSPARENCY_WORD_ECONOMY",
    "SENTENCE_LENGTH",
    "TRANSPARENCY_SIMPLE_STRUCTURE",
    "OBJECTIVITY",
    "TIME_CLARITY",
    "TRANSPARENCY_CONCRETE_LANGUAGE",
    "SUBJECT_CLARITY",
    "TRANSPARENCY_AVOID_JARGON",
    "ELPAIS_HEADLINES",
    "TRANSPARENCY_LOGICAL_FLOW",
)


@dataclass(frozen=True, slots=True)
class TextTypeProfile:
    essential: tuple[str, ...]
    important: tuple[str, ...] = ()
    optional: tuple[str, ...] = ()

    @property
    def ordered(self) -> tuple[str, ...]:
        return self.essential + self.important + self.optional


TEXT_TYPE_PROFILES: dict[TextType, TextTypeProfile] = {
    TextType.NEWS: TextTypeProfile(
        essential=(
            "LEAD_STRUCTURE",
            "INVERTED_PYRAMID",
            "ATTRIBUTION_REQUIRED",
            "PARAGRAPH_LENGTH_NEWS",
            "SENTENCE_COMPLEXITY_001",
        ),
        important=("PASSIVE_VOICE_001", "OBJECTIVITY", "TIME_CLARITY", "ELPAIS_ATTRIBUTION"),
        optional=("AVOID_REDUNDANCY", "SUBJECT_CLARITY"),
    ),
    TextType.REPORT: TextTypeProfile(
        essential=(
            "ATTRIBUTION_REQUIRED",
            "PARAGRAPH_TRANSITION",
            "SENTENCE_COMPLEXITY_001",
            "TRANSPARENCY_ONE_IDEA",
        ),
        important=(
            "AVOID_REDUNDANCY",
            "TIME_CLARITY",
            "TRANSPARENCY_CONCRETE_LANGUAGE",
            "TRANSPARENCY_LOGICAL_FLOW",
        ),
        optional=("PASSIVE_VOICE_001", "TRANSPARENCY_WORD_ECONOMY"),
    ),
    TextType.CHRONICLE: TextTypeProfile(
        essential=(
            "PARAGRAPH_TRANSITION",
            "SENTENCE_COMPLEXITY_001",
            "TRANSPARENCY_ONE_IDEA",
            "TIME_CLARITY",
        ),
        important=("SUBJECT_CLARITY", "TRANSPARENCY_LOGICAL_FLOW", "AVOID_REDUNDANCY"),
        optional=("ATTRIBUTION_REQUIRED", "TRANSPARENCY_SIMPLE_STRUCTURE"),
    ),
    TextType.OPINION: TextTypeProfile(
        essential=(
            "PARAGRAPH_TRANSITION",
            "SENTENCE_COMPLEXITY_001",
            "TRANSPARENCY_ONE_IDEA",
            "SUBJECT_CLARITY",
        ),
        important=("AVOID_REDUNDANCY", "TRANSPARENCY_CONCRETE_LANGUAGE", "TRANSPARENCY_LOGICAL_FLOW"),
        optional=("TRANSPARENCY_WORD_ECONOMY", "TRANSPARENCY_SIMPLE_STRUCTURE"),
    ),
}


@dataclass(frozen=True, slots=True)
class EssentialCheck:
    text_type: str
    missing: tuple[str, ...]
    present: tuple[str, ...]

    @property
    def is_valid(self) -> bool:
        return not self.missing

    def to_dict(self) -> dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "missing": list(self.missing),
            "present": list(self.present),
        }


def profile_for(text_type: TextType | str) -> TextTypeProfile | None:
    return TEXT_TYPE_PROFILES.get(TextType(text_type))


def _require_profile(text_type: TextType | str) -> TextTypeProfile:
    profile = profile_for(text_type)
    if profile is None:
        raise ValueError(f"Brak profilu reguł dla typu tekstu: {text_type}")
    return profile


def rules_for_text_type(text_type: TextType | str) -> list[str]:
    """Identyfikatory reguł w kolejności ważności dla typu tekstu."""
    profile = profile_for(text_type)
    if profile is None:
        return list(PRIORITY_RULES[:DEFAULT_SELECTION])
    return list(profile.ordered)


def filter_rules_by_priority(
    rules: Sequence[StyleRule],
    text_type: TextType | str | None = None,
    max_rules: int = DEFAULT_MAX_RULES,
) -> list[StyleRule]:
    """
    Reguły znane z profilu typu tekstu (albo z PRIORITY_RULES, gdy text_type
    jest None), posortowane według pozycji w profilu, najwyżej max_rules.
    """
    relevant = rules_for_text_type(text_type) if text_type else list(PRIORITY_RULES)
    rank = {rule_id: i for i, rule_id in enumerate(relevant)}
    selected = sorted((r for r in rules if r.id in rank), key=lambda r: rank[r.id])
    return selected[:max_rules]


def reorganize_by_text_type(
    rules: Sequence[StyleRule],
    text_type: TextType | str,
) -> list[StyleRule]:
    """
    Nowa lista: reguły essential, important, optional w kolejności profilu,
    potem pozostałe w kolejności wejścia. Priorytet = pozycja (od 1).

    Raises:
        ValueError: typ tekstu bez profilu.
    """
    profile = _require_profile(text_type)
    remaining = list(rules)
    ordered: list[StyleRule] = []

    for rule_id in profile.ordered:
        for i, rule in enumerate(remaining):
            if rule.id == rule_id:
                ordered.append(remaining.pop(i))
                break
    ordered.extend(remaining)

    return [replace(rule, priority=position) for position, rule in enumerate(ordered, start=1)]


def check_essential_rules(
    rules: Sequence[StyleRule],
    text_type: TextType | str,
) -> EssentialCheck:
    """Raises ValueError dla typu tekstu bez profilu."""
    profile = _require_profile(text_type)
    ids = {r.id for r in rules}
    return EssentialCheck(
        text_type=str(TextType(text_type)),
        missing=tuple(rid for rid in profile.essential if rid not in ids),
        present=tuple(rid for rid in profile.essential if rid in ids),
    )


def text_type_report(
    rules: Sequence[StyleRule],
    text_type: TextType | str,
    max_rules: int = DEFAULT_MAX_RULES,
) -> dict[str, Any]:
    """Blok "text_type" raportu rules.json; essential = None dla typu bez profilu."""
    check = check_essential_rules(rules, text_type) if profile_for(text_type) else None
    return {
        "type": str(TextType(text_type)),
        "selected_rules": [r.id for r in filter_rules_by_priority(rules, text_type, max_rules)],
        "essential": check.to_dict() if check is not None else None,
    }
