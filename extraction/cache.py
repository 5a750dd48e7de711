"""
extraction/cache.py: cache reguł adresowany hashem treści sekcji.

Wpis: <directory>/<hash>.json z CachedExtraction (sectionHash, rules,
extractedAt, tokensUsed). Wpis starszy niż max_age jest traktowany jak
nieistniejący i usuwany przy odczycie. Zapis przez plik tymczasowy
i os.replace, więc przerwany zapis nigdy nie jest odczytany jako poprawny.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Protocol

from rich.console import Console

from data_model import CachedExtraction, utcnow
from extraction.atomic import write_json_atomic

console = Console(stderr=True)

DEFAULT_MAX_AGE = timedelta(hours=24)


class RuleCache(Protocol):
    def get(self, section_hash: str) -> CachedExtraction | None: ...
    def put(self, entry: CachedExtraction) -> None: ...
    def delete(self, section_hash: str) -> None: ...
    def exists(self, section_hash: str) -> bool: ...


class FileRuleCache:
    """Cache w plikach JSON, jeden plik na hash."""

    def __init__(
        self,
        directory: str | Path,
        clock: Callable[[], datetime] = utcnow,
        max_age: timedelta = DEFAULT_MAX_AGE,
    ) -> None:
        self.directory = Path(directory)
        self.clock = clock
        self.max_age = max_age

    def _path(self, section_hash: str) -> Path:
        return self.directory / f"{section_hash}.json"

    def get(self, section_hash: str) -> CachedExtraction | None:
        """Zwraca świeży wpis albo None (brak, uszkodzony lub przeterminowany)."""
        path = self._path(section_hash)
        if not path.exists():
            return None

        try:
            entry = CachedExtraction.from_dict(json.loads(path.read_text(encoding="utf-8")))
        except OSError as exc:
            console.print(f"[yellow][warn] Nieczytelny wpis cache {path.name}: {exc}[/yellow]")
            return None
        except (ValueError, KeyError, TypeError) as exc:
            # uszkodzony wpis nie blokuje ponownej ekstrakcji sekcji
            console.print(f"[yellow][warn] Uszkodzony wpis cache {path.name}, usuwam: {exc}[/yellow]")
            self.delete(section_hash)
            return None

        if self.clock() - entry.extracted_at > self.max_age:
            self.delete(section_hash)
            return None
        return entry

    def put(self, entry: CachedExtraction) -> None:
        write_json_atomic(entry.to_dict(), self._path(entry.section_hash))

    def delete(self, section_hash: str) -> None:
        self._path(section_hash).unlink(missing_ok=True)

    def exists(self, section_hash: str) -> bool:
        return self._path(section_hash).exists()

    # ------------------------------------------------------------------
    # Utrzymanie (komenda `smn cache`)
    # ------------------------------------------------------------------

    def entries(self) -> list[Path]:
        if not self.directory.exists():
            return []
        return sorted(self.directory.glob("*.json"))

    def clear(self, stale_only: bool = False) -> int:
        """Usuwa wpisy (wszystkie albo tylko przeterminowane). Zwraca liczbę usuniętych."""
        removed = 0
        for path in self.entries():
            if stale_only:
                # get() usuwa przeterminowany wpis sam
                if self.get(path.stem) is None and not path.exists():
                    removed += 1
                continue
            path.unlink(missing_ok=True)
            removed += 1
        return removed
