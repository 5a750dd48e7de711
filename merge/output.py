"""
merge/output.py: wczytywanie wyników ekstrakcji i raport scalonych reguł.

Format data/rules.json:
  merged_at, sources[{name, document_id, extracted_at, rules_count}],
  validation_result, total_rules, rules_by_category,
  rules_by_priority (P<n>; reguły z priority=null pominięte),
  statistics, rules, text_type? {type, selected_rules, essential}
"""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Sequence

from rich.console import Console

from data_model import StyleRule, as_mapping, from_iso, to_iso
from extraction.atomic import write_json_atomic
from extraction.errors import NoUsableInputError
from merge.stats import rule_statistics
from validator import ValidationReport

console = Console(stderr=True)

# Klucze listy reguł w plikach wejściowych, w kolejności preferencji
_RULE_KEYS = ("allRules", "all_rules", "rules")


@dataclass(slots=True)
class LoadedSource:
    name: str
    document_id: str
    extracted_at: datetime | None
    rules: list[StyleRule]
    path: Path


def load_extraction_result(path: str | Path) -> LoadedSource:
    """
    Wczytuje plik wyniku ekstrakcji (<id>-toc-guided-rules.json lub starszy
    format z kluczem rules / all_rules).

    Raises:
        OSError, ValueError: plik nieczytelny, bez listy reguł albo z rekordem
                             reguły o złym kształcie.
    """
    p = Path(path)
    data = json.loads(p.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{p.name}: oczekiwano obiektu JSON")

    raw_rules = next((data[k] for k in _RULE_KEYS if isinstance(data.get(k), list)), None)
    if raw_rules is None:
        raise ValueError(f"{p.name}: brak listy reguł ({', '.join(_RULE_KEYS)})")

    source = as_mapping(data.get("source"), f"{p.name}: source")
    return LoadedSource(
        name=source.get("name") or p.stem,
        document_id=source.get("documentId") or source.get("document_id") or "",
        extracted_at=from_iso(source.get("extractedAt") or source.get("extracted_at")),
        rules=[StyleRule.from_dict(r) for r in raw_rules if isinstance(r, dict)],
        path=p,
    )


def load_sources(paths: Sequence[str | Path]) -> list[LoadedSource]:
    """
    Wczytuje wszystkie pliki; nieczytelne są pomijane z ostrzeżeniem.

    Raises:
        NoUsableInputError: żaden plik nie dał się wczytać.
    """
    sources: list[LoadedSource] = []
    for path in paths:
        try:
            src = load_extraction_result(path)
        except (OSError, ValueError) as exc:
            console.print(f"[yellow][warn] Pomijam {path}: {exc}[/yellow]")
            continue
        console.print(f"[dim]  {len(src.rules)} reguł z {src.name}[/dim]")
        sources.append(src)

    if not sources:
        raise NoUsableInputError("Brak plików z regułami. Uruchom najpierw `smn extract`.")
    return sources


def build_merged_output(
    sources: Sequence[LoadedSource],
    merged: Sequence[StyleRule],
    report: ValidationReport,
    now: datetime,
    text_type: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """text_type: blok z merge.text_type_report(); dołączany, gdy podany."""
    by_priority = Counter(f"P{r.priority}" for r in merged if r.priority is not None)
    output: dict[str, Any] = {
        "merged_at": to_iso(now),
        "sources": [
            {
                "name": s.name,
                "document_id": s.document_id,
                "extracted_at": to_iso(s.extracted_at),
                "rules_count": len(s.rules),
            }
            for s in sources
        ],
        "validation_result": report.to_dict(),
        "total_rules": len(merged),
        "rules_by_category": dict(Counter(r.category for r in merged)),
        "rules_by_priority": dict(by_priority),
        "statistics": rule_statistics(merged),
        "rules": [r.to_dict() for r in merged],
    }
    if text_type is not None:
        output["text_type"] = text_type
    return output
