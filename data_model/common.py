"""
Wspólne typy pierwotne używane przez toc, documents, rules i results.

Format JSON (klucze camelCase) jest zgodny z plikami wynikowymi
zapisywanymi przez ekstraktor i z konfiguracjami w toc-configs/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, TypeAlias

# ---------------------------------------------------------------------------
# Aliasy typów
# ---------------------------------------------------------------------------

# Identyfikator sekcji z konfiguracji ToC, np. "TITULO_II"
SectionId: TypeAlias = str


# ---------------------------------------------------------------------------
# PageRange
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class PageRange:
    """
    Zakres stron (1-based, włącznie).

    - start: pierwsza strona
    - end:   ostatnia strona; None = "do następnej strony" (heurystyka slicera)
    """
    start: int
    end: int | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"start": self.start}
        if self.end is not None:
            d["end"] = self.end
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "PageRange":
        end = d.get("end")
        return cls(start=int(d["start"]), end=int(end) if end is not None else None)

    def __str__(self) -> str:
        return f"{self.start}-{self.end if self.end is not None else '?'}"


# ---------------------------------------------------------------------------
# Czas
# ---------------------------------------------------------------------------

def utcnow() -> datetime:
    """Bieżący czas UTC (timezone-aware)."""
    return datetime.now(timezone.utc)


def to_iso(value: datetime | None) -> str | None:
    """datetime → ISO-8601 z sufiksem 'Z' (jak toISOString())."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def from_iso(value: Any) -> datetime | None:
    """ISO-8601 (również z 'Z') → datetime UTC. Niepoprawne wartości → None."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Walidacja kształtu danych wejściowych
# ---------------------------------------------------------------------------

def as_mapping(value: Any, what: str, *, optional: bool = True) -> dict[str, Any]:
    """
    Zwraca value jako dict; None → {} (gdy optional).

    Raises:
        ValueError: value nie jest obiektem JSON.
    """
    if value is None and optional:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{what}: oczekiwano obiektu JSON, jest {type(value).__name__}")
    return value


def as_list(value: Any, what: str) -> list[Any]:
    """Zwraca value jako listę; None → []. ValueError dla innych typów."""
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{what}: oczekiwano tablicy JSON, jest {type(value).__name__}")
    return value
