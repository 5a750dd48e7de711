"""
pdf/slicer.py: cięcie tekstu dokumentu na sekcje według konfiguracji ToC.

Architektura:
  document_text → linie → (dla każdej sekcji ToC)
  → map_page_range() → PageTextStrategy.slice_pages() → clean_section_text()
  → próg minimalnej treści → TextSection (level 1 lub 2)

Kluczowe funkcje publiczne:
  slice_document(document_text, total_pages, config, strategy) -> dict[SectionId, list[TextSection]]
"""

from __future__ import annotations

import re

from rich.console import Console

from data_model import (
    DEFAULT_PRIORITY,
    PageMapping,
    PageRange,
    SectionId,
    TextSection,
    TextSectionMetadata,
    TocConfiguration,
    TocSection,
    TocSubsection,
)
from pdf.page_mapping import (
    LinesPerPageStrategy,
    PageTextStrategy,
    estimate_lines_per_page,
    map_page_range,
)
from pdf.text_cleaner import (
    clean_section_text,
    collect_repeated_lines,
    compile_header_patterns,
)

console = Console(stderr=True)

# Minimalna długość oczyszczonego tekstu całej sekcji (sprawdzana przed
# podziałem na podsekcje).
MIN_SECTION_CHARS = 100

# Podsekcja musi mieć więcej niż tyle znaków.
MIN_SUBSECTION_CHARS = 50


# ---------------------------------------------------------------------------
# Publiczne API
# ---------------------------------------------------------------------------

def slice_document(
    document_text: str,
    total_pages: int,
    config: TocConfiguration,
    strategy: PageTextStrategy | None = None,
) -> dict[SectionId, list[TextSection]]:
    """
    Dzieli tekst dokumentu na TextSection zgodnie z konfiguracją ToC.

    Sekcje pominięte (skip / skipSections) nie pojawiają się w wyniku.
    Sekcja bez żadnej zachowanej TextSection jest pomijana i logowana.
    Wyjątek przy jednej sekcji nie przerywa cięcia pozostałych.

    Args:
        document_text: Pełny tekst dokumentu (z dekodera).
        total_pages:   Liczba stron PDF.
        config:        Konfiguracja ToC dokumentu.
        strategy:      Strategia wycinania stron (domyślnie LinesPerPageStrategy).

    Returns:
        Słownik section_id → lista TextSection, w kolejności z konfiguracji.
    """
    slicer = _Slicer(document_text, total_pages, config, strategy or LinesPerPageStrategy())
    result: dict[SectionId, list[TextSection]] = {}

    for section in config.sections:
        if config.is_skipped(section):
            console.print(f"[dim]  pomijam sekcję {section.id} ({section.title})[/dim]")
            continue

        try:
            text_sections = slicer.slice_section(section)
        except Exception as exc:
            console.print(f"[red]Błąd cięcia sekcji {section.id}:[/red] {exc}")
            continue

        if not text_sections:
            console.print(
                f"[yellow]  sekcja {section.id} ({section.title}): "
                f"za mało treści, pomijam[/yellow]"
            )
            continue

        result[section.id] = text_sections

    return result


# ---------------------------------------------------------------------------
# Wewnętrzna implementacja
# ---------------------------------------------------------------------------

class _Slicer:
    """Stan jednego przebiegu: linie dokumentu, wykryte nagłówki, mapowanie stron."""

    def __init__(
        self,
        document_text: str,
        total_pages: int,
        config: TocConfiguration,
        strategy: PageTextStrategy,
    ) -> None:
        self.lines = document_text.split("\n")
        self.total_pages = total_pages
        self.strategy = strategy
        self.mapping: PageMapping | None = config.extraction_options.page_mapping
        self.header_patterns: list[re.Pattern[str]] = compile_header_patterns(config.header_patterns)
        self.repeated_lines = collect_repeated_lines(
            self.lines,
            estimate_lines_per_page(len(self.lines), total_pages),
        )

    def slice_section(self, section: TocSection) -> list[TextSection]:
        section_text = self._text_for(section.page_range)
        if len(section_text) < MIN_SECTION_CHARS:
            return []

        if not section.subsections:
            return [
                TextSection(
                    title=section.title,
                    content=section_text,
                    level=1,
                    metadata=TextSectionMetadata(
                        section_id=section.id,
                        page_range=section.page_range,
                        priority=_effective_priority(section),
                        focus_areas=_focus_areas(section),
                    ),
                )
            ]

        kept: list[TextSection] = []
        for sub in section.subsections:
            if sub.skip:
                continue
            sub_text = self._text_for(sub.page_range)
            if len(sub_text) <= MIN_SUBSECTION_CHARS:
                console.print(f"[dim]  podsekcja {sub.id}: za mało treści[/dim]")
                continue
            kept.append(
                TextSection(
                    title=f"{section.title} - {sub.title}",
                    content=sub_text,
                    level=2,
                    metadata=TextSectionMetadata(
                        section_id=section.id,
                        subsection_id=sub.id,
                        page_range=sub.page_range,
                        priority=_effective_priority(section, sub),
                        focus_areas=_focus_areas(section),
                    ),
                )
            )
        return kept

    def _text_for(self, page_range: PageRange) -> str:
        start, end = map_page_range(page_range, self.mapping)
        raw = self.strategy.slice_pages(self.lines, self.total_pages, start, end)
        return clean_section_text(raw, self.repeated_lines, self.header_patterns)


def _effective_priority(section: TocSection, sub: TocSubsection | None = None) -> int:
    if sub is not None and sub.priority is not None:
        return sub.priority
    if section.priority is not None:
        return section.priority
    return DEFAULT_PRIORITY


def _focus_areas(section: TocSection) -> tuple[str, ...]:
    return section.extraction_options.focus_areas if section.extraction_options else ()
