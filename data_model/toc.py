"""
Struktury konfiguracji spisu treści (ToC) dokumentu.

Konfiguracja jest czystymi danymi: opisuje rozdziały, podrozdziały, zakresy
stron i podpowiedzi ekstrakcji. Po wczytaniu jest niemodyfikowalna
(frozen dataclasses, krotki zamiast list).

Format pliku: toc-configs/<id>.json, schemat:
templates-schemas/toc-config.schema.json
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from .common import PageRange, SectionId

DEFAULT_PRIORITY = 5


class TextType(StrEnum):
    """Typ tekstu (kontekst analizy)."""
    NEWS      = "news"
    REPORT    = "report"
    CHRONICLE = "chronicle"
    OPINION   = "opinion"
    ACADEMIC  = "academic"


class DocumentType(StrEnum):
    """Rodzaj dokumentu źródłowego (wpływa na prompt systemowy)."""
    STYLE_GUIDE = "style-guide"
    PRINCIPLES  = "principles"


# ---------------------------------------------------------------------------
# Opcje
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class PageMapping:
    """
    Mapowanie numeracji książki na strony PDF.

    - book_pages_to_pdf_pages: ile stron książki przypada na stronę PDF
                               (np. 2 dla skanu rozkładówek)
    - page_offset:             przesunięcie dodawane po przeliczeniu
    """
    book_pages_to_pdf_pages: float | None = None
    page_offset: int | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "PageMapping":
        return cls(
            book_pages_to_pdf_pages=d.get("bookPagesToPdfPages"),
            page_offset=d.get("pageOffset"),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        if self.book_pages_to_pdf_pages is not None:
            d["bookPagesToPdfPages"] = self.book_pages_to_pdf_pages
        if self.page_offset is not None:
            d["pageOffset"] = self.page_offset
        return d


@dataclass(frozen=True, slots=True)
class TocExtractionOptions:
    """Globalne opcje ekstrakcji dla całego dokumentu."""
    min_words: int | None = None
    max_words: int | None = None
    confidence_threshold: float | None = None
    text_type: TextType | None = None
    page_mapping: PageMapping | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "TocExtractionOptions":
        pm = d.get("pageMapping")
        tt = d.get("textType")
        return cls(
            min_words=d.get("minWords"),
            max_words=d.get("maxWords"),
            confidence_threshold=d.get("confidenceThreshold"),
            text_type=TextType(tt) if tt else None,
            page_mapping=PageMapping.from_dict(pm) if pm else None,
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        if self.min_words is not None:
            d["minWords"] = self.min_words
        if self.max_words is not None:
            d["maxWords"] = self.max_words
        if self.confidence_threshold is not None:
            d["confidenceThreshold"] = self.confidence_threshold
        if self.text_type is not None:
            d["textType"] = str(self.text_type)
        if self.page_mapping is not None:
            d["pageMapping"] = self.page_mapping.to_dict()
        return d


@dataclass(frozen=True, slots=True)
class SectionExtractionOptions:
    """
    Opcje ekstrakcji dla pojedynczej sekcji.

    - priority:                1-10, wyższa = ważniejsza sekcja
    - max_sections_to_process: limit TextSection wysyłanych do modelu
    - focus_areas:             słowa kluczowe dołączane do promptu
    """
    priority: int | None = None
    max_sections_to_process: int | None = None
    focus_areas: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "SectionExtractionOptions":
        return cls(
            priority=d.get("priority"),
            max_sections_to_process=d.get("maxSectionsToProcess"),
            focus_areas=tuple(d.get("focusAreas") or ()),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        if self.priority is not None:
            d["priority"] = self.priority
        if self.max_sections_to_process is not None:
            d["maxSectionsToProcess"] = self.max_sections_to_process
        if self.focus_areas:
            d["focusAreas"] = list(self.focus_areas)
        return d


# ---------------------------------------------------------------------------
# Sekcje
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class TocSubsection:
    id: SectionId
    title: str
    page_range: PageRange
    skip: bool = False
    priority: int | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "TocSubsection":
        return cls(
            id=d["id"],
            title=d["title"],
            page_range=PageRange.from_dict(d["pageRange"]),
            skip=bool(d.get("skip", False)),
            priority=d.get("priority"),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "pageRange": self.page_range.to_dict(),
        }
        if self.skip:
            d["skip"] = True
        if self.priority is not None:
            d["priority"] = self.priority
        return d


@dataclass(frozen=True, slots=True)
class TocSection:
    """
    Rozdział dokumentu.

    Sekcja z podrozdziałami jest przetwarzana podrozdział po podrozdziale,
    sekcja bez nich jako jedna jednostka.
    """
    id: SectionId
    title: str
    page_range: PageRange
    subsections: tuple[TocSubsection, ...] = ()
    skip: bool = False
    extraction_options: SectionExtractionOptions | None = None

    @property
    def priority(self) -> int | None:
        return self.extraction_options.priority if self.extraction_options else None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "TocSection":
        eo = d.get("extractionOptions")
        return cls(
            id=d["id"],
            title=d["title"],
            page_range=PageRange.from_dict(d["pageRange"]),
            subsections=tuple(TocSubsection.from_dict(s) for s in d.get("subsections") or ()),
            skip=bool(d.get("skip", False)),
            extraction_options=SectionExtractionOptions.from_dict(eo) if eo else None,
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "pageRange": self.page_range.to_dict(),
        }
        if self.subsections:
            d["subsections"] = [s.to_dict() for s in self.subsections]
        if self.skip:
            d["skip"] = True
        if self.extraction_options is not None:
            d["extractionOptions"] = self.extraction_options.to_dict()
        return d


@dataclass(frozen=True, slots=True)
class TocConfiguration:
    """
    Konfiguracja ToC jednego dokumentu.

    - document_id:      identyfikator (klucz w toc-configs/documents.json)
    - name:             nazwa publikacji; trafia do source.publication reguł
    - sections:         rozdziały w kolejności dokumentu
    - skip_sections:    identyfikatory rozdziałów pomijanych w całości
    - language:         język dokumentu ("es" | "en"), wybiera szablony promptów
    - document_type:    rodzaj dokumentu (style-guide | principles)
    - header_patterns:  regexy żywej paginy / stopek do usunięcia z tekstu
    """
    document_id: str
    name: str
    sections: tuple[TocSection, ...]
    skip_sections: frozenset[str] = field(default_factory=frozenset)
    extraction_options: TocExtractionOptions = field(default_factory=TocExtractionOptions)
    language: str = "es"
    document_type: DocumentType = DocumentType.STYLE_GUIDE
    header_patterns: tuple[str, ...] = ()

    def is_skipped(self, section: TocSection) -> bool:
        return section.skip or section.id in self.skip_sections

    def find_section(self, section_id: str) -> TocSection | None:
        for s in self.sections:
            if s.id == section_id:
                return s
        return None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "TocConfiguration":
        return cls(
            document_id=d["documentId"],
            name=d["name"],
            sections=tuple(TocSection.from_dict(s) for s in d.get("sections", [])),
            skip_sections=frozenset(d.get("skipSections") or ()),
            extraction_options=TocExtractionOptions.from_dict(d.get("extractionOptions") or {}),
            language=d.get("language", "es"),
            document_type=DocumentType(d.get("documentType", DocumentType.STYLE_GUIDE)),
            header_patterns=tuple(d.get("headerPatterns") or ()),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "documentId": self.document_id,
            "name": self.name,
            "language": self.language,
            "documentType": str(self.document_type),
            "extractionOptions": self.extraction_options.to_dict(),
            "sections": [s.to_dict() for s in self.sections],
        }
        if self.skip_sections:
            d["skipSections"] = sorted(self.skip_sections)
        if self.header_patterns:
            d["headerPatterns"] = list(self.header_patterns)
        return d
