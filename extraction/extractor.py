"""
extraction/extractor.py: ekstrakcja reguł z sekcji z cache i budżetem.

Przepływ dla jednej sekcji:
  hash(title|content) → cache (świeży wpis = bez wywołania modelu)
  → przycięcie treści do budżetu tokenów → prompt systemowy + prompt sekcji
  → CallQueue → model(system, user) → parse_rules_response() → cache

Błąd wywołania lub parsowania: zero reguł dla tej sekcji, partia trwa dalej,
wynik nie trafia do cache.

Kluczowe API:
  ExtractionOptions
  CachedRuleExtractor(model, cache, queue, clock).extract(sections, options)
  section_hash(section) -> str
  trim_content(content, max_tokens) -> (text, hard_cut)
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, TypeAlias

from rich.console import Console

from data_model import (
    CachedExtraction,
    DocumentType,
    StyleRule,
    TextSection,
    utcnow,
)
from extraction.cache import RuleCache
from extraction.throttle import CallQueue
from llm_query.prompt import build_section_prompt, build_system_prompt
from llm_query.rules import parse_rules_response

console = Console(stderr=True)

RuleModel: TypeAlias = Callable[[str, str], str]

CHARS_PER_TOKEN = 3
# Cięcie na końcu zdania tylko gdy zostaje co najmniej 70% okna.
SENTENCE_CUT_MIN_SHARE = 0.7
SENTENCE_TERMINATORS = ".!?"
# USD za token (15 USD / 1M tokenów)
COST_PER_TOKEN = 0.000015


@dataclass(frozen=True, slots=True)
class ExtractionOptions:
    max_sections_per_run: int = 50
    max_tokens_per_section: int = 15000
    document_type: DocumentType = DocumentType.STYLE_GUIDE
    language: str = "es"
    confidence_threshold: float = 0.6


@dataclass(slots=True)
class ExtractionStats:
    """Liczniki jednego wywołania extract()."""
    processed: int = 0
    cached: int = 0
    failed: int = 0
    truncated: int = 0
    skipped: int = 0        # poza max_sections_per_run
    rules: int = 0
    tokens_used: int = 0

    @property
    def estimated_cost(self) -> float:
        return self.tokens_used * COST_PER_TOKEN


def section_hash(section: TextSection) -> str:
    """sha256 z "title|content" (treść przed przycięciem)."""
    return hashlib.sha256(f"{section.title}|{section.content}".encode("utf-8")).hexdigest()


def trim_content(content: str, max_tokens: int) -> tuple[str, bool]:
    """
    Przycina treść do max_tokens * CHARS_PER_TOKEN znaków.

    Preferuje cięcie po ostatnim znaku końca zdania, jeśli leży on
    w ostatnich 30% okna; w przeciwnym razie twarde cięcie + "...".

    Returns:
        (tekst, hard_cut), hard_cut=True przy twardym cięciu.
    """
    max_chars = max_tokens * CHARS_PER_TOKEN
    if len(content) <= max_chars:
        return content, False

    trimmed = content[:max_chars]
    last_end = max(trimmed.rfind(ch) for ch in SENTENCE_TERMINATORS)
    if last_end > max_chars * SENTENCE_CUT_MIN_SHARE:
        return trimmed[:last_end + 1], False
    return f"{trimmed}...", True


def estimate_tokens(*texts: str) -> int:
    return sum(len(t) for t in texts) // CHARS_PER_TOKEN


class CachedRuleExtractor:
    """
    Zamienia TextSection na StyleRule.

    Args:
        model: (system_prompt, user_prompt) -> tekst odpowiedzi.
        cache: magazyn wpisów CachedExtraction; None = cache wyłączony.
        queue: kolejka wywołań z polityką odstępów.
        clock: źródło czasu (znaczniki reguł i wpisów cache).
    """

    def __init__(
        self,
        model: RuleModel,
        cache: RuleCache | None = None,
        queue: CallQueue | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.model = model
        self.cache = cache
        self.queue = queue or CallQueue()
        self.clock = clock
        self.stats = ExtractionStats()
        self.total_tokens_used = 0

    def extract(
        self,
        sections: list[TextSection],
        options: ExtractionOptions = ExtractionOptions(),
    ) -> list[StyleRule]:
        """
        Ekstrahuje reguły z co najwyżej options.max_sections_per_run sekcji.

        Nigdy nie przerywa partii z powodu błędu pojedynczej sekcji.
        """
        self.stats = ExtractionStats()
        to_process = sections[:options.max_sections_per_run]
        self.stats.skipped = len(sections) - len(to_process)

        console.print(
            f"[dim]Ekstrakcja AI: {len(to_process)}/{len(sections)} sekcji, "
            f"budżet {options.max_tokens_per_section} tokenów na sekcję[/dim]"
        )
        if self.cache is None:
            console.print("[dim]  cache wyłączony[/dim]")

        system_prompt = build_system_prompt(options.document_type, options.language)
        all_rules: list[StyleRule] = []

        for section in to_process:
            rules = self._extract_section(section, system_prompt, options)
            all_rules.extend(rules)

        self.stats.rules = len(all_rules)
        self.total_tokens_used += self.stats.tokens_used
        self._print_summary()
        return all_rules

    # ------------------------------------------------------------------
    # Jedna sekcja
    # ------------------------------------------------------------------

    def _extract_section(
        self,
        section: TextSection,
        system_prompt: str,
        options: ExtractionOptions,
    ) -> list[StyleRule]:
        key = section_hash(section)

        cached = self._cached(key)
        if cached is not None:
            console.print(f"[dim]  cache: {section.title}[/dim]")
            self.stats.cached += 1
            return list(cached.rules)

        content, hard_cut = trim_content(section.content, options.max_tokens_per_section)
        if hard_cut:
            self.stats.truncated += 1
            console.print(
                f"[yellow][warn] Sekcja przycięta bez granicy zdania: "
                f"{section.title} ({len(section.content)} → {len(content)} znaków)[/yellow]"
            )
        prompt_section = TextSection(
            title=section.title,
            content=content,
            level=section.level,
            metadata=section.metadata,
        )
        user_prompt = build_section_prompt(
            prompt_section, options.confidence_threshold, options.language,
        )

        console.print(f"  analizuję: {section.title} [dim]({len(content)} znaków)[/dim]")
        try:
            raw = self.queue.submit(lambda: self.model(system_prompt, user_prompt))
            tokens = estimate_tokens(system_prompt, user_prompt, raw)
            self.stats.tokens_used += tokens
            rules = parse_rules_response(
                raw, section, self.clock(), default_priority=section.metadata.priority,
            )
        except Exception as exc:
            self.stats.failed += 1
            console.print(f"[red]Błąd ekstrakcji sekcji {section.title!r}:[/red] {exc}")
            return []

        self.stats.processed += 1
        console.print(f"  [green]✓[/green] {len(rules)} reguł: {section.title}")

        if self.cache is not None:
            entry = CachedExtraction(
                section_hash=key,
                rules=rules,
                extracted_at=self.clock(),
                tokens_used=tokens,
            )
            try:
                self.cache.put(entry)
            except OSError as exc:
                console.print(f"[yellow][warn] Zapis cache nieudany ({key[:12]}): {exc}[/yellow]")

        return rules

    def _cached(self, key: str) -> CachedExtraction | None:
        """Wpis z cache; błąd odczytu = brak wpisu (sekcja idzie do modelu)."""
        if self.cache is None:
            return None
        try:
            return self.cache.get(key)
        except Exception as exc:
            console.print(f"[yellow][warn] Odczyt cache nieudany ({key[:12]}): {exc}[/yellow]")
            return None

    def _print_summary(self) -> None:
        s = self.stats
        console.print(
            f"[bold]Podsumowanie ekstrakcji AI:[/bold] "
            f"przetworzone {s.processed}, z cache {s.cached}, błędy {s.failed}, "
            f"reguły {s.rules}, szacowany koszt ${s.estimated_cost:.3f}"
        )
