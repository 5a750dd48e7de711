"""
pdf/decoder.py: dekodowanie PDF do płaskiego tekstu (PyMuPDF).

Tekst stron jest łączony znakiem nowej linii, bez znaczników granic
stron. Slicer szacuje granice przez PageTextStrategy.
"""

from __future__ import annotations

from pathlib import Path

import fitz  # PyMuPDF

from data_model import DecodedDocument
from extraction.errors import DocumentNotFoundError, DocumentUnreadableError


def decode_pdf(path: str | Path) -> DecodedDocument:
    """
    Odczytuje PDF i zwraca DecodedDocument(text, numpages).

    Raises:
        DocumentNotFoundError:   plik nie istnieje.
        DocumentUnreadableError: PyMuPDF nie potrafi otworzyć pliku.
    """
    p = Path(path)
    if not p.is_file():
        raise DocumentNotFoundError(f"Nie znaleziono pliku: {p}")

    try:
        doc = fitz.open(str(p))
    except (fitz.FileDataError, RuntimeError) as exc:
        raise DocumentUnreadableError(f"Nie można odczytać PDF {p}: {exc}") from exc

    try:
        pages = [page.get_text("text") for page in doc]
        return DecodedDocument(text="\n".join(pages), numpages=doc.page_count)
    finally:
        doc.close()
