"""
extraction/settings.py: konfiguracja przez zmienne środowiskowe.

Opcjonalnie plik .env w katalogu głównym projektu (python-dotenv):
  GEMINI_API_KEY=AIza...
  STYLEMINER_DATA_DIR=/srv/styleminer/data

Zmienne:
  GEMINI_API_KEY          klucz API (wymagany dla ekstrakcji)
  GEMINI_MODEL            identyfikator modelu (domyślnie gemini-2.5-flash)
  STYLEMINER_DATA_DIR     katalog danych: cache/ai-extractions, extracted/, rules.json
  STYLEMINER_ASSETS_DIR   katalog z plikami PDF
  DISABLE_AI_CACHE        "true" wyłącza cache reguł
  STYLEMINER_CALL_DELAY   odstęp (s) między wywołaniami modelu, domyślnie 0.2
"""

from __future__ import annotations

import os
import pathlib
from dataclasses import dataclass

from dotenv import load_dotenv

ROOT = pathlib.Path(__file__).resolve().parent.parent

DEFAULT_MODEL      = "gemini-2.5-flash"
DEFAULT_CALL_DELAY = 0.2

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True, slots=True)
class Settings:
    gemini_api_key: str | None
    gemini_model: str
    data_dir: pathlib.Path
    assets_dir: pathlib.Path
    cache_disabled: bool
    call_delay: float

    @property
    def cache_dir(self) -> pathlib.Path:
        return self.data_dir / "cache" / "ai-extractions"

    @property
    def extracted_dir(self) -> pathlib.Path:
        return self.data_dir / "extracted"

    @property
    def rules_path(self) -> pathlib.Path:
        return self.data_dir / "rules.json"


def load_settings(env_file: pathlib.Path | None = ROOT / ".env") -> Settings:
    """
    Wczytuje ustawienia ze środowiska (po załadowaniu .env, jeśli istnieje).

    Wartości z .env nie nadpisują zmiennych już ustawionych w środowisku.
    """
    if env_file is not None and env_file.exists():
        load_dotenv(env_file, override=False)

    return Settings(
        gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
        gemini_model=os.getenv("GEMINI_MODEL") or DEFAULT_MODEL,
        data_dir=pathlib.Path(os.getenv("STYLEMINER_DATA_DIR") or ROOT / "data"),
        assets_dir=pathlib.Path(os.getenv("STYLEMINER_ASSETS_DIR") or ROOT / "assets"),
        cache_disabled=_env_flag("DISABLE_AI_CACHE"),
        call_delay=_env_float("STYLEMINER_CALL_DELAY", DEFAULT_CALL_DELAY),
    )


def _env_flag(name: str) -> bool:
    return (os.getenv(name) or "").strip().lower() in _TRUE_VALUES


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default
