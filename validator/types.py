"""
validator/types.py: kody błędów i struktury raportu walidacji.

ValidationError: pojedynczy błąd z kodem, identyfikatorem reguły,
    ścieżką JSON Pointer i komunikatem.
ValidationReport: wynik walidacji: is_valid, errors, warnings, rules_count.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Stałe kody błędów blokujących (is_valid=False)."""

    # pola wymagane
    MISSING_ID          = "E_MISSING_ID"
    MISSING_NAME        = "E_MISSING_NAME"
    MISSING_CATEGORY    = "E_MISSING_CATEGORY"
    MISSING_PUBLICATION = "E_MISSING_PUBLICATION"

    # detection
    DETECTION_TYPE      = "E_DETECTION_TYPE"
    CONFIDENCE_RANGE    = "E_CONFIDENCE_RANGE"

    # zbiór reguł
    DUPLICATE_ID        = "E_DUPLICATE_ID"


@dataclass(slots=True)
class ValidationError:
    """
    Pojedynczy błąd walidacji.

    - code:    stały identyfikator klasy błędu (ErrorCode)
    - rule_id: id reguły (None gdy reguła nie ma id)
    - path:    JSON Pointer w zbiorze reguł, np. "/3/source/publication"
    - message: czytelny opis błędu
    - details: opcjonalny słownik z dodatkowymi danymi
    """

    code: ErrorCode
    rule_id: str | None
    path: str
    message: str
    details: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "code": str(self.code),
            "ruleId": self.rule_id,
            "path": self.path,
            "message": self.message,
        }
        if self.details:
            d["details"] = self.details
        return d


@dataclass(slots=True)
class ValidationReport:
    """
    Wynik walidacji zbioru reguł.

    - is_valid:    True gdy brak błędów (warnings nie wpływają)
    - errors:      lista błędów (ValidationError)
    - warnings:    lista komunikatów ostrzegawczych (str)
    - rules_count: liczba sprawdzonych reguł
    """

    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    rules_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": list(self.warnings),
            "rulesCount": self.rules_count,
        }
