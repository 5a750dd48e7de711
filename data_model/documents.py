"""
data_model/documents.py: zdekodowany dokument i sekcje tekstu (TextSection).

TextSection odpowiada jednej sekcji lub podsekcji z konfiguracji ToC po
wycięciu i oczyszczeniu tekstu. Jest efemeryczny: tworzy go slicer,
konsumuje ekstraktor reguł, nie jest zapisywany bezpośrednio.
"""

from __future__ import annotations

from dataclasses import dataclass

from .common import PageRange, SectionId


@dataclass(slots=True)
class DecodedDocument:
    """Wynik dekodera: pełny tekst dokumentu + liczba stron."""
    text: str
    numpages: int


@dataclass(frozen=True, slots=True)
class TextSectionMetadata:
    section_id: SectionId
    page_range: PageRange
    priority: int                   # efektywny priorytet (podsekcja → sekcja → 5)
    subsection_id: SectionId | None = None
    focus_areas: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class TextSection:
    title: str          # dla podsekcji: "<sekcja> - <podsekcja>"
    content: str        # oczyszczony plain text
    level: int          # 1 = sekcja, 2 = podsekcja
    metadata: TextSectionMetadata
