"""
merge/merger.py: łączenie reguł z wielu dokumentów.

Etapy RuleMerger.merge():
  1. konkatenacja list wejściowych
  2. deduplikacja po sygnaturze (opcjonalnie); przy duplikacie wygrywa
     reguła ze źródła o niższym indeksie priorytetu, remis = pierwsza
  3. ważenie pewności indeksem priorytetu źródła (opcjonalnie)
  4. stabilne sortowanie rosnąco po priority

Listy wejściowe i reguły nie są modyfikowane (dataclasses.replace).
"""

from __future__ import annotations

import base64
import re
from dataclasses import dataclass, replace
from typing import Sequence

from rich.console import Console

from data_model import StyleRule

console = Console(stderr=True)

# indeks priorytetu źródła → współczynnik pewności
WEIGHTING_FACTORS = {0: 1.0, 1: 0.95, 2: 0.9, 3: 0.85, 4: 0.8}
DEFAULT_WEIGHTING_FACTOR = 0.75

_NON_WORD_RE   = re.compile(r"[^\w\s]")
_WHITESPACE_RE = re.compile(r"\s+")

SIGNATURE_DESCRIPTION_CHARS = 50


@dataclass(frozen=True, slots=True)
class MergeOptions:
    deduplication: bool = True
    confidence_weighting: bool = True
    source_priority: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Funkcje pomocnicze (publiczne, używane też w testach)
# ---------------------------------------------------------------------------

def normalize_text(text: str) -> str:
    """Małe litery, bez interpunkcji, pojedyncze spacje."""
    text = _NON_WORD_RE.sub("", text.lower())
    return _WHITESPACE_RE.sub(" ", text).strip()


def rule_signature(rule: StyleRule) -> str:
    """base64(category|subcategory|norm(name)|norm(description[:50]))."""
    key = "|".join((
        rule.category,
        rule.subcategory or "",
        normalize_text(rule.name),
        normalize_text(rule.description[:SIGNATURE_DESCRIPTION_CHARS]),
    ))
    return base64.b64encode(key.encode("utf-8")).decode("ascii")


def source_priority_index(publication: str, source_priority: Sequence[str]) -> int:
    """
    Pozycja pierwszego wpisu source_priority zawartego (bez rozróżniania
    wielkości liter) w publication; len(source_priority) gdy brak.
    """
    pub = publication.lower()
    for i, source in enumerate(source_priority):
        if source.lower() in pub:
            return i
    return len(source_priority)


def weighting_factor(index: int) -> float:
    return WEIGHTING_FACTORS.get(index, DEFAULT_WEIGHTING_FACTOR)


# ---------------------------------------------------------------------------
# RuleMerger
# ---------------------------------------------------------------------------

class RuleMerger:
    def merge(
        self,
        rule_lists: Sequence[Sequence[StyleRule]],
        options: MergeOptions = MergeOptions(),
    ) -> list[StyleRule]:
        rules = [rule for rules in rule_lists for rule in rules]
        console.print(f"[dim]Reguł przed scaleniem: {len(rules)}[/dim]")

        if options.deduplication:
            rules = self.deduplicate(rules, options.source_priority)
            console.print(f"[dim]Reguł po deduplikacji: {len(rules)}[/dim]")

        if options.confidence_weighting:
            rules = [self.weight(r, options.source_priority) for r in rules]

        # priority=None na końcu
        return sorted(rules, key=lambda r: (r.priority is None, r.priority or 0))

    def deduplicate(
        self,
        rules: Sequence[StyleRule],
        source_priority: Sequence[str],
    ) -> list[StyleRule]:
        kept: list[StyleRule] = []
        position: dict[str, int] = {}

        for rule in rules:
            sig = rule_signature(rule)
            if sig not in position:
                position[sig] = len(kept)
                kept.append(rule)
                continue

            existing = kept[position[sig]]
            if (source_priority_index(rule.source.publication, source_priority)
                    < source_priority_index(existing.source.publication, source_priority)):
                kept[position[sig]] = rule

        return kept

    def weight(self, rule: StyleRule, source_priority: Sequence[str]) -> StyleRule:
        """
        Nowa reguła z pewnością base * factor (maks. 1.0).

        base to raw_confidence, jeśli reguła była już ważona, więc ponowne
        ważenie nie obniża pewności dalej.
        """
        detection = rule.detection
        base = detection.raw_confidence if detection.raw_confidence is not None else detection.confidence
        if base is None:
            return rule

        factor = weighting_factor(source_priority_index(rule.source.publication, source_priority))
        return replace(
            rule,
            detection=replace(
                detection,
                confidence=min(base * factor, 1.0),
                raw_confidence=base,
            ),
        )
