"""
Struktury danych reguł stylu (StyleRule).

Format JSON (wynik ekstrakcji, plik rules.json):
  id, category, subcategory?, name, description, severity,
  detection {type, confidence, pattern?, rawConfidence?},
  examples {incorrect, correct, explanation?},
  source {publication, section?, sectionId?, subsectionId?, page?, url?, quote?},
  priority, autofix, created_at, updated_at

from_dict() jest tolerancyjne wobec braków: brakujące pola dostają puste wartości,
a ocenę kompletności zostawia walidatorowi (validator.RuleValidator).
Zły kształt (np. detection jako string) to ValueError.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any, TypeAlias

from .common import as_mapping, from_iso, to_iso

# ---------------------------------------------------------------------------
# Aliasy typów
# ---------------------------------------------------------------------------

# np. "T2_S3_RULE_004"
RuleId: TypeAlias = str


class Severity(StrEnum):
    ERROR      = "error"
    WARNING    = "warning"
    SUGGESTION = "suggestion"


class DetectionType(StrEnum):
    REGEX = "regex"
    NLP   = "nlp"
    AI    = "ai"


# ---------------------------------------------------------------------------
# Części reguły
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class Detection:
    """
    Sposób wykrywania naruszenia reguły.

    - type:           regex | nlp | ai (string, bo dane z pliku mogą być błędne)
    - confidence:     pewność 0..1 (None = brak w danych wejściowych)
    - pattern:        wzorzec / słowo kluczowe do wykrywania
    - raw_confidence: pewność przed ważeniem źródłem; ustawiane przez merger
    """
    type: str
    confidence: float | None
    pattern: str | None = None
    raw_confidence: float | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"type": self.type, "confidence": self.confidence}
        if self.pattern is not None:
            d["pattern"] = self.pattern
        if self.raw_confidence is not None:
            d["rawConfidence"] = self.raw_confidence
        return d

    @classmethod
    def from_dict(cls, d: Any) -> "Detection":
        d = as_mapping(d, "detection")
        return cls(
            type=str(d.get("type") or ""),
            confidence=_as_float(d.get("confidence")),
            pattern=d.get("pattern"),
            raw_confidence=_as_float(d.get("rawConfidence")),
        )


@dataclass(slots=True)
class RuleExamples:
    incorrect: str = ""
    correct: str = ""
    explanation: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "incorrect": self.incorrect,
            "correct": self.correct,
            "explanation": self.explanation,
        }

    @classmethod
    def from_dict(cls, d: Any) -> "RuleExamples":
        d = as_mapping(d, "examples")
        return cls(
            incorrect=str(d.get("incorrect") or ""),
            correct=str(d.get("correct") or ""),
            explanation=str(d.get("explanation") or ""),
        )


@dataclass(slots=True)
class RuleSource:
    """
    Pochodzenie reguły.

    - publication:   nazwa publikacji (klucz priorytetu źródeł w mergerze)
    - section:       tytuł sekcji ToC
    - section_id:    identyfikator sekcji ToC
    - subsection_id: identyfikator podsekcji ToC (jeśli dotyczy)
    """
    publication: str
    section: str | None = None
    section_id: str | None = None
    subsection_id: str | None = None
    page: int | None = None
    url: str | None = None
    quote: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"publication": self.publication}
        for key, value in (
            ("section", self.section),
            ("sectionId", self.section_id),
            ("subsectionId", self.subsection_id),
            ("page", self.page),
            ("url", self.url),
            ("quote", self.quote),
        ):
            if value is not None:
                d[key] = value
        return d

    @classmethod
    def from_dict(cls, d: Any) -> "RuleSource":
        d = as_mapping(d, "source")
        page = d.get("page")
        return cls(
            publication=str(d.get("publication") or ""),
            section=d.get("section"),
            section_id=d.get("sectionId"),
            subsection_id=d.get("subsectionId"),
            page=int(page) if isinstance(page, (int, float)) else None,
            url=d.get("url"),
            quote=d.get("quote"),
        )


# ---------------------------------------------------------------------------
# StyleRule
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class StyleRule:
    """
    Jedna reguła stylu / gramatyki z metadanymi wykrywania i pochodzenia.

    priority: 1-20 umownie, niższa = ważniejsza. To tylko kolejność
    doradcza, nie część tożsamości reguły.
    """
    id: RuleId
    category: str
    name: str
    description: str
    severity: str
    detection: Detection
    examples: RuleExamples
    source: RuleSource
    priority: int | None
    autofix: bool = False
    subcategory: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def confidence(self) -> float | None:
        return self.detection.confidence

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "category": self.category,
        }
        if self.subcategory is not None:
            d["subcategory"] = self.subcategory
        d.update({
            "name": self.name,
            "description": self.description,
            "severity": self.severity,
            "detection": self.detection.to_dict(),
            "examples": self.examples.to_dict(),
            "source": self.source.to_dict(),
            "priority": self.priority,
            "autofix": self.autofix,
            "created_at": to_iso(self.created_at),
            "updated_at": to_iso(self.updated_at),
        })
        return d

    @classmethod
    def from_dict(cls, d: Any) -> "StyleRule":
        """
        Raises:
            ValueError: rekord albo jego część (detection, examples, source)
                        nie jest obiektem JSON.
        """
        d = as_mapping(d, "reguła", optional=False)
        priority = d.get("priority")
        return cls(
            id=str(d.get("id") or ""),
            category=str(d.get("category") or ""),
            subcategory=d.get("subcategory") or None,
            name=str(d.get("name") or ""),
            description=str(d.get("description") or ""),
            severity=str(d.get("severity") or ""),
            detection=Detection.from_dict(d.get("detection")),
            examples=RuleExamples.from_dict(d.get("examples")),
            source=RuleSource.from_dict(d.get("source")),
            priority=priority if isinstance(priority, int) and not isinstance(priority, bool) else None,
            autofix=bool(d.get("autofix", False)),
            created_at=from_iso(d.get("created_at")),
            updated_at=from_iso(d.get("updated_at")),
        )


def _as_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None
