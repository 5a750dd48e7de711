"""
pdf/page_mapping.py: przeliczanie zakresów stron ToC na fragmenty tekstu.

Dekoder zwraca płaski tekst bez granic stron, więc granice są szacowane
(stała liczba linii na stronę). To przybliżenie: strategia jest wymienna
(PageTextStrategy), żeby dokładny ekstraktor granic stron mógł ją zastąpić
bez zmian w slicerze.

Publiczne API:
  map_page_range(page_range, mapping)  -> (start, end | None)
  estimate_lines_per_page(lines, pages) -> int
  LinesPerPageStrategy                 domyślna strategia
"""

from __future__ import annotations

import math
from typing import Protocol

from data_model import PageMapping, PageRange


def map_page_range(
    page_range: PageRange,
    mapping: PageMapping | None,
) -> tuple[int, int | None]:
    """
    Przelicza numerację z ToC (strony książki) na strony PDF.

      actual = floor(declared / ratio) + offset

    Bez końca zakresu przy aktywnym ratio: end = start + 1.
    Przykład: ratio=2, {37, 46} → (18, 23).
    """
    start = page_range.start
    end = page_range.end
    if mapping is None:
        return start, end

    ratio = mapping.book_pages_to_pdf_pages
    if ratio:
        start = math.floor(page_range.start / ratio)
        end = math.floor(page_range.end / ratio) if page_range.end is not None else start + 1

    if mapping.page_offset:
        start += mapping.page_offset
        if end is not None:
            end += mapping.page_offset

    return start, end


def estimate_lines_per_page(total_lines: int, total_pages: int) -> int:
    """floor(total_lines / total_pages), co najmniej 1."""
    if total_pages <= 0:
        return max(total_lines, 1)
    return max(total_lines // total_pages, 1)


class PageTextStrategy(Protocol):
    def slice_pages(
        self,
        lines: list[str],
        total_pages: int,
        start: int,
        end: int | None,
    ) -> str:
        """Zwraca surowy tekst stron start..end (1-based, włącznie)."""
        ...


class LinesPerPageStrategy:
    """
    Równomierny podział: lines_per_page = floor(len(lines) / total_pages).

    Zakres: lines[(start-1)*lpp : end*lpp], a bez końca
    lines[(start-1)*lpp : (start+1)*lpp].
    """

    def slice_pages(
        self,
        lines: list[str],
        total_pages: int,
        start: int,
        end: int | None,
    ) -> str:
        lpp = estimate_lines_per_page(len(lines), total_pages)
        start_line = max(0, (start - 1) * lpp)
        if end is not None:
            end_line = min(len(lines), end * lpp)
        else:
            end_line = min(len(lines), (start + 1) * lpp)
        return "\n".join(lines[start_line:end_line])
