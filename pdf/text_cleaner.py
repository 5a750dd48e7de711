"""
pdf/text_cleaner.py: oczyszczanie tekstu wyciętego z zakresu stron.

Co usuwamy:
  - Numery stron (linia złożona wyłącznie z cyfr)
  - Żywą paginę / stopki: wzorce z konfiguracji ToC (headerPatterns)
    oraz linie powtarzające się na co najmniej połowie stron dokumentu
  - Nadmiarowe puste linie (3+ \n → \n\n)
  - Nadmiarowe spacje i tabulatory w środku linii

Format wyjściowy: plain text z \n i \n\n.
"""

from __future__ import annotations

import re
from collections import defaultdict

# ---------------------------------------------------------------------------
# Stałe
# ---------------------------------------------------------------------------

# Minimalna liczba stron, na których linia musi się powtarzać,
# żeby uznać ją za nagłówek/stopkę.
_REPEAT_MIN_PAGES = 3

# Udział stron (0..1), na których linia musi wystąpić.
_REPEAT_MIN_SHARE = 0.5

# Dłuższe linie to treść, nie żywa pagina.
_REPEAT_MAX_LEN = 80

# Wzorzec dla samotnego numeru strony.
_PAGE_NUMBER_RE = re.compile(r"^\s*\d+\s*$")

# Trzy lub więcej przejść do nowej linii (z białymi znakami pomiędzy).
_BLANK_LINES_RE = re.compile(r"\n\s*\n\s*\n")

# Spacje / tabulatory.
_HSPACE_RE = re.compile(r"[ \t]+")


# ---------------------------------------------------------------------------
# Publiczne API
# ---------------------------------------------------------------------------

def collect_repeated_lines(lines: list[str], lines_per_page: int) -> set[str]:
    """
    Zbiera krótkie linie, które powtarzają się na wielu szacowanych stronach
    (co najmniej _REPEAT_MIN_PAGES i co najmniej połowa stron), czyli
    nagłówki/stopki do usunięcia.

    lines:          wszystkie linie dokumentu
    lines_per_page: szacowana liczba linii na stronę (z PageTextStrategy)
    """
    if lines_per_page <= 0 or not lines:
        return set()

    pages_count = max(1, -(-len(lines) // lines_per_page))
    text_page_count: dict[str, int] = defaultdict(int)

    for page_start in range(0, len(lines), lines_per_page):
        seen_on_page: set[str] = set()
        for line in lines[page_start:page_start + lines_per_page]:
            text = _normalize_line(line)
            if not text or len(text) > _REPEAT_MAX_LEN or _PAGE_NUMBER_RE.match(text):
                continue
            if text not in seen_on_page:
                seen_on_page.add(text)
                text_page_count[text] += 1

    threshold = max(_REPEAT_MIN_PAGES, pages_count * _REPEAT_MIN_SHARE)
    return {t for t, c in text_page_count.items() if c >= threshold}


def compile_header_patterns(patterns: tuple[str, ...] | list[str]) -> list[re.Pattern[str]]:
    """Kompiluje wzorce żywej paginy z konfiguracji (bez rozróżniania wielkości liter)."""
    return [re.compile(p, re.IGNORECASE) for p in patterns]


def clean_section_text(
    text: str,
    repeated_lines: set[str] | None = None,
    header_patterns: list[re.Pattern[str]] | None = None,
) -> str:
    """
    Oczyszcza surowy tekst sekcji.

    Zwraca oczyszczony tekst (może być pusty).
    """
    repeated_lines = repeated_lines or set()
    header_patterns = header_patterns or []

    text = _BLANK_LINES_RE.sub("\n\n", text)

    kept: list[str] = []
    for line in text.split("\n"):
        stripped = line.strip()
        if _PAGE_NUMBER_RE.match(line):
            kept.append("")
            continue
        if stripped and _normalize_line(stripped) in repeated_lines:
            kept.append("")
            continue
        if stripped and any(p.match(stripped) for p in header_patterns):
            kept.append("")
            continue
        kept.append(line)

    result = "\n".join(kept)
    result = _HSPACE_RE.sub(" ", result)
    # Usunięte linie mogły zostawić nowe ciągi pustych linii
    result = _BLANK_LINES_RE.sub("\n\n", result)
    return result.strip()


# ---------------------------------------------------------------------------
# Pomocnicze
# ---------------------------------------------------------------------------

def _normalize_line(line: str) -> str:
    return _HSPACE_RE.sub(" ", line).strip()
