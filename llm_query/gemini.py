"""
llm_query/gemini.py: wywołanie Gemini API.

Zmienne środowiskowe:
  GEMINI_API_KEY   klucz API (wymagany)
  GEMINI_MODEL     identyfikator modelu (opcjonalny)

Opcjonalnie plik .env w katalogu głównym projektu:
  GEMINI_API_KEY=AIza...

Publiczne API:
  call_gemini(prompt, model, api_key, max_retries, system_prompt) -> str
  gemini_rule_model(model, api_key)   -> Callable[[system, user], str]
"""

from __future__ import annotations

import functools
import os
import pathlib
import re
import time
from typing import Callable, Protocol, cast

from dotenv import load_dotenv
from google import genai as _genai
from google.genai import errors as _genai_errors
from google.genai import types as _genai_types
from rich.console import Console

from extraction.throttle import DelayPolicy, ExponentialBackoff

load_dotenv(pathlib.Path(__file__).resolve().parent.parent / ".env", override=False)

console = Console(stderr=True)

DEFAULT_MODEL   = "gemini-2.5-flash"
DEFAULT_RETRIES = 3
_ENV_KEY        = "GEMINI_API_KEY"
_ENV_MODEL      = "GEMINI_MODEL"

# Oczekiwanie po 429 bez podpowiedzi z API: 10 s, 20 s, 40 s ...
RATE_LIMIT_BACKOFF = ExponentialBackoff(base=5.0, factor=2.0, max_seconds=120.0)

# Wzorzec do wyciągnięcia liczby sekund z komunikatu API (np. "retry in 18.8s")
_RETRY_DELAY_RE = re.compile(r"retry[^\d]*(\d+(?:\.\d+)?)\s*s", re.IGNORECASE)


@functools.lru_cache(maxsize=4)
def _get_client(api_key: str) -> "_genai.Client":
    """Zwraca (i cache'uje) klienta Gemini dla danego klucza API.

    Klient trzyma własną pulę HTTP; jeden klient na klucz.
    """
    return _genai.Client(api_key=api_key)


class _GeminiGenerateResponse(Protocol):
    text: str | None


class _GeminiModelsAPI(Protocol):
    def generate_content(
        self,
        *,
        model: str,
        contents: str,
        config: _genai_types.GenerateContentConfig | None = None,
    ) -> _GeminiGenerateResponse:
        ...


def _parse_retry_delay(error: Exception) -> float | None:
    """Wyciąga sugerowany czas oczekiwania z błędu 429, jeśli jest dostępny."""
    m = _RETRY_DELAY_RE.search(str(error))
    if m:
        return float(m.group(1))
    delay = getattr(error, "retry_delay", None)
    if delay is not None:
        return float(delay)
    return None


def _is_daily_quota(error: Exception) -> bool:
    """Zwraca True gdy to wyczerpany dzienny limit (retry nie pomoże)."""
    return "PerDay" in str(error)


def call_gemini(
    prompt: str,
    model: str = DEFAULT_MODEL,
    api_key: str | None = None,
    max_retries: int = DEFAULT_RETRIES,
    system_prompt: str | None = None,
    backoff: DelayPolicy = RATE_LIMIT_BACKOFF,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """
    Wysyła prompt do Gemini i zwraca odpowiedź jako string.

    Przy błędzie 429 (rate-limit) czeka czas sugerowany przez API (albo
    wskazany przez backoff) i ponawia próbę (do max_retries razy).
    Dzienny limit quota nie jest ponawiany.

    Args:
        prompt:        Prompt użytkownika (sekcja do analizy).
        model:         Identyfikator modelu.
        api_key:       Klucz API; jeśli None, odczytywany z GEMINI_API_KEY.
        max_retries:   Maks. liczba ponowień przy rate-limit.
        system_prompt: Instrukcja systemowa (rola + rodzaj dokumentu).
        backoff:       Polityka oczekiwania, gdy 429 nie podaje czasu.
        sleep:         Funkcja oczekiwania (podmieniana w testach).

    Returns:
        Tekst odpowiedzi modelu.

    Raises:
        ValueError:                   Brak klucza API.
        google.genai.errors.APIError: Nieodwracalny błąd API.
    """
    key = api_key or os.getenv(_ENV_KEY)
    if not key:
        raise ValueError(
            f"Brak klucza Gemini API. "
            f"Ustaw zmienną środowiskową {_ENV_KEY} lub przekaż api_key."
        )

    config = (
        _genai_types.GenerateContentConfig(system_instruction=system_prompt)
        if system_prompt else None
    )
    client  = _get_client(key)
    attempt = 0

    while True:
        try:
            models_api = cast(_GeminiModelsAPI, client.models)
            response = models_api.generate_content(model=model, contents=prompt, config=config)
            text = response.text
            if text is None:
                raise RuntimeError("Gemini zwrócił pustą odpowiedź tekstową.")
            return text

        except _genai_errors.ClientError as exc:
            if exc.code != 429:
                raise

            if _is_daily_quota(exc):
                raise RuntimeError(
                    f"Dzienny limit zapytań dla modelu {model} wyczerpany. "
                    f"Sprawdź plan i billing: https://ai.dev/rate-limit\n"
                    f"Szczegóły API: {exc}"
                ) from exc

            attempt += 1
            if attempt > max_retries:
                raise RuntimeError(
                    f"Rate-limit po {max_retries} próbach. Spróbuj później."
                ) from exc

            delay = _parse_retry_delay(exc) or backoff.delay(attempt, True)
            console.print(
                f"[yellow][warn] 429 rate-limit: czekam {delay:.0f}s "
                f"(próba {attempt}/{max_retries})...[/yellow]"
            )
            sleep(delay)


def gemini_rule_model(
    model: str | None = None,
    api_key: str | None = None,
) -> Callable[[str, str], str]:
    """
    Adapter (system_prompt, user_prompt) -> tekst odpowiedzi,
    zgodny z kontraktem modelu CachedRuleExtractor.
    """
    resolved = model or os.getenv(_ENV_MODEL) or DEFAULT_MODEL

    def _call(system_prompt: str, user_prompt: str) -> str:
        return call_gemini(
            user_prompt,
            model=resolved,
            api_key=api_key,
            system_prompt=system_prompt,
        )

    return _call
