"""
Wyniki ekstrakcji: wpis cache (CachedExtraction) i wynik dokumentu
(ExtractionResult).

Format pliku wynikowego (data/extracted/<documentId>-toc-guided-rules.json):
  source          {name, documentId, extractedAt, totalPages,
                   sectionsProcessed, subsectionsProcessed}
  rulesBySection  {sectionId: {sectionTitle, pageRange, rules, subsections?}}
  allRules        [StyleRule...]
  statistics      {totalRulesExtracted, sectionStats[...]}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .common import PageRange, SectionId, as_list, as_mapping, from_iso, to_iso
from .rules import StyleRule


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class CachedExtraction:
    """
    Reguły wyekstrahowane z jednej sekcji, adresowane hashem treści.

    - section_hash: hash "title|content" sekcji
    - extracted_at: czas ekstrakcji (świeżość liczona od tego pola)
    - tokens_used:  szacunkowa liczba tokenów wywołania
    """
    section_hash: str
    rules: list[StyleRule]
    extracted_at: datetime
    tokens_used: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "sectionHash": self.section_hash,
            "rules": [r.to_dict() for r in self.rules],
            "extractedAt": to_iso(self.extracted_at),
            "tokensUsed": self.tokens_used,
        }

    @classmethod
    def from_dict(cls, d: Any) -> "CachedExtraction":
        """ValueError dla wpisu o złym kształcie lub bez extractedAt."""
        d = as_mapping(d, "wpis cache", optional=False)
        extracted_at = from_iso(d.get("extractedAt"))
        if extracted_at is None:
            raise ValueError("Wpis cache bez poprawnego extractedAt.")
        return cls(
            section_hash=str(d["sectionHash"]),
            rules=[StyleRule.from_dict(r) for r in as_list(d.get("rules"), "rules")],
            extracted_at=extracted_at,
            tokens_used=int(d.get("tokensUsed") or 0),
        )


# ---------------------------------------------------------------------------
# Wynik dokumentu
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class SubsectionRules:
    title: str
    page_range: PageRange
    rules: list[StyleRule] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "pageRange": self.page_range.to_dict(),
            "rules": [r.to_dict() for r in self.rules],
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "SubsectionRules":
        return cls(
            title=d.get("title", ""),
            page_range=PageRange.from_dict(d["pageRange"]),
            rules=[StyleRule.from_dict(r) for r in as_list(d.get("rules"), "rules")],
        )


@dataclass(slots=True)
class SectionRules:
    section_title: str
    page_range: PageRange
    rules: list[StyleRule] = field(default_factory=list)
    subsections: dict[SectionId, SubsectionRules] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "sectionTitle": self.section_title,
            "pageRange": self.page_range.to_dict(),
            "rules": [r.to_dict() for r in self.rules],
        }
        if self.subsections:
            d["subsections"] = {k: v.to_dict() for k, v in self.subsections.items()}
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "SectionRules":
        return cls(
            section_title=d.get("sectionTitle", ""),
            page_range=PageRange.from_dict(d["pageRange"]),
            rules=[StyleRule.from_dict(r) for r in as_list(d.get("rules"), "rules")],
            subsections={
                k: SubsectionRules.from_dict(v)
                for k, v in (d.get("subsections") or {}).items()
            },
        )


@dataclass(slots=True)
class SectionStat:
    section_id: SectionId
    title: str
    rules_count: int
    processing_time: float = 0.0    # sekundy

    def to_dict(self) -> dict[str, Any]:
        return {
            "sectionId": self.section_id,
            "title": self.title,
            "rulesCount": self.rules_count,
            "processingTime": round(self.processing_time, 3),
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "SectionStat":
        return cls(
            section_id=d["sectionId"],
            title=d.get("title", ""),
            rules_count=int(d.get("rulesCount", 0)),
            processing_time=float(d.get("processingTime", 0.0)),
        )


@dataclass(slots=True)
class ExtractionSource:
    name: str
    document_id: str
    extracted_at: datetime | None
    total_pages: int
    sections_processed: int
    subsections_processed: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "documentId": self.document_id,
            "extractedAt": to_iso(self.extracted_at),
            "totalPages": self.total_pages,
            "sectionsProcessed": self.sections_processed,
            "subsectionsProcessed": self.subsections_processed,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "ExtractionSource":
        return cls(
            name=d.get("name", ""),
            document_id=d.get("documentId", ""),
            extracted_at=from_iso(d.get("extractedAt")),
            total_pages=int(d.get("totalPages", 0)),
            sections_processed=int(d.get("sectionsProcessed", 0)),
            subsections_processed=int(d.get("subsectionsProcessed", 0)),
        )


@dataclass(slots=True)
class ExtractionResult:
    """Wynik ekstrakcji jednego dokumentu. Budowany raz na przebieg."""
    source: ExtractionSource
    rules_by_section: dict[SectionId, SectionRules]
    all_rules: list[StyleRule]
    section_stats: list[SectionStat]

    @property
    def total_rules_extracted(self) -> int:
        return len(self.all_rules)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source.to_dict(),
            "rulesBySection": {k: v.to_dict() for k, v in self.rules_by_section.items()},
            "allRules": [r.to_dict() for r in self.all_rules],
            "statistics": {
                "totalRulesExtracted": self.total_rules_extracted,
                "sectionStats": [s.to_dict() for s in self.section_stats],
            },
        }

    @classmethod
    def from_dict(cls, d: Any) -> "ExtractionResult":
        d = as_mapping(d, "wynik ekstrakcji", optional=False)
        stats = d.get("statistics") or {}
        return cls(
            source=ExtractionSource.from_dict(d.get("source") or {}),
            rules_by_section={
                k: SectionRules.from_dict(v)
                for k, v in (d.get("rulesBySection") or {}).items()
            },
            all_rules=[StyleRule.from_dict(r) for r in as_list(d.get("allRules"), "allRules")],
            section_stats=[SectionStat.from_dict(s) for s in stats.get("sectionStats", [])],
        )
