"""
extraction/errors.py: wyjątki StyleMiner.

Poziomy błędów:
  dokument  DocumentNotFoundError, DocumentUnreadableError, UnknownDocumentError,
            TocConfigError: przerywają przebieg jednego dokumentu
  sekcja    RuleParseError: sekcja daje zero reguł, przetwarzanie trwa dalej
  merge     NoUsableInputError: brak jakichkolwiek danych wejściowych
"""

from __future__ import annotations


class StyleMinerError(Exception):
    """Bazowy wyjątek pakietu."""


class DocumentNotFoundError(StyleMinerError, FileNotFoundError):
    """Plik dokumentu nie istnieje."""


class DocumentUnreadableError(StyleMinerError):
    """Plik istnieje, ale dekoder nie potrafi go odczytać."""


class UnknownDocumentError(StyleMinerError, KeyError):
    """Brak konfiguracji ToC dla podanego identyfikatora dokumentu."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "Nieznany dokument."


class TocConfigError(StyleMinerError):
    """Plik konfiguracji ToC jest niepoprawny (JSON lub schemat)."""


class RuleParseError(StyleMinerError):
    """Odpowiedź modelu nie zawiera poprawnego obiektu JSON z tablicą rules."""


class NoUsableInputError(StyleMinerError):
    """Merge bez ani jednego wczytanego źródła reguł."""
