"""merge/stats.py: statystyki zbioru reguł (kategorie, przedziały priorytetu, pewność)."""

from __future__ import annotations

from collections import Counter
from typing import Any, Sequence

from data_model import StyleRule

HIGH_CONFIDENCE = 0.8

# (etykieta, górna granica włącznie); ostatni przedział bez granicy
PRIORITY_RANGES: list[tuple[str, int | None]] = [
    ("High (1-5)",     5),
    ("Medium (6-10)",  10),
    ("Low (11-15)",    15),
    ("Very Low (16+)", None),
]


def priority_range(priority: int | None) -> str | None:
    if priority is None:
        return None
    for label, upper in PRIORITY_RANGES:
        if upper is None or priority <= upper:
            return label
    return None


def rule_statistics(rules: Sequence[StyleRule]) -> dict[str, Any]:
    """
    Zwraca:
      total, by_category, by_priority_range, average_confidence,
      high_confidence (liczba reguł z pewnością >= 0.8)
    """
    by_category = Counter(r.category for r in rules)
    by_range: dict[str, int] = {label: 0 for label, _ in PRIORITY_RANGES}
    for r in rules:
        label = priority_range(r.priority)
        if label is not None:
            by_range[label] += 1

    confidences = [r.confidence for r in rules if r.confidence is not None]
    average = sum(confidences) / len(confidences) if confidences else 0.0

    return {
        "total": len(rules),
        "by_category": dict(by_category),
        "by_priority_range": by_range,
        "average_confidence": round(average, 4),
        "high_confidence": sum(1 for c in confidences if c >= HIGH_CONFIDENCE),
    }
