"""Komenda: smn extract: ekstrakcja reguł stylu z dokumentów według ToC."""

from __future__ import annotations

import argparse
from pathlib import Path

from rich import box
from rich.console import Console
from rich.table import Table

from data_model import ExtractionResult
from extraction.cache import FileRuleCache
from extraction.errors import StyleMinerError
from extraction.extractor import CachedRuleExtractor
from extraction.orchestrator import TocGuidedExtractor, save_result
from extraction.registry import get_document_config, get_pdf_path, list_document_ids
from extraction.settings import load_settings
from extraction.throttle import CallQueue, FixedDelay
from llm_query import gemini_rule_model

console = Console()


def _print_summary(results: list[tuple[str, ExtractionResult, Path]], tokens: int) -> None:
    table = Table(box=box.SIMPLE_HEAD, show_header=True, header_style="bold white")
    table.add_column("Dokument",     style="cyan", no_wrap=True)
    table.add_column("Sekcje",       justify="right")
    table.add_column("Podsekcje",    justify="right")
    table.add_column("Reguły",       justify="right", style="green")
    table.add_column("Plik",         style="dim")

    for document_id, result, path in results:
        table.add_row(
            document_id,
            str(result.source.sections_processed),
            str(result.source.subsections_processed),
            str(result.total_rules_extracted),
            str(path),
        )

    console.print(table)
    console.print(f"[dim]Szacowane tokeny łącznie: {tokens}[/dim]")


def run(args: argparse.Namespace) -> None:
    settings = load_settings()

    if args.all and args.documents:
        console.print("[red]Podaj identyfikatory dokumentów albo --all, nie oba.[/red]")
        raise SystemExit(1)
    if args.pdf and (args.all or len(args.documents) != 1):
        console.print("[red]--pdf wymaga dokładnie jednego dokumentu.[/red]")
        raise SystemExit(1)

    try:
        document_ids = list_document_ids() if args.all else list(args.documents)
    except StyleMinerError as e:
        console.print(f"[red]Błąd rejestru:[/red] {e}")
        raise SystemExit(1)
    if not document_ids:
        console.print("[red]Nie podano dokumentów (lub użyj --all).[/red]")
        raise SystemExit(1)

    if not settings.gemini_api_key:
        console.print(
            "[red]Brak klucza API.[/red] Ustaw zmienną GEMINI_API_KEY "
            "albo dodaj ją do pliku .env."
        )
        raise SystemExit(1)

    cache = None if (args.no_cache or settings.cache_disabled) else FileRuleCache(settings.cache_dir)
    delay = settings.call_delay if args.delay is None else args.delay
    extractor = CachedRuleExtractor(
        model=gemini_rule_model(args.model or settings.gemini_model, settings.gemini_api_key),
        cache=cache,
        queue=CallQueue(FixedDelay(delay)),
    )
    toc = TocGuidedExtractor(extractor)
    out_dir = Path(args.out_dir) if args.out_dir else settings.extracted_dir

    done: list[tuple[str, ExtractionResult, Path]] = []
    failed: list[str] = []

    for document_id in document_ids:
        try:
            config = get_document_config(document_id)
            pdf_path = Path(args.pdf) if args.pdf else get_pdf_path(document_id, settings.assets_dir)
            result = toc.extract_pdf(config, pdf_path)
            path = save_result(result, out_dir)
        except (StyleMinerError, OSError) as e:
            console.print(f"[red]Błąd dokumentu {document_id}:[/red] {e}")
            failed.append(document_id)
            continue

        console.print(f"[green]Zapisano:[/green] {path}")
        done.append((document_id, result, path))

    if done:
        _print_summary(done, extractor.total_tokens_used)
    if failed:
        console.print(f"[red]Nieudane dokumenty:[/red] {', '.join(failed)}")
        raise SystemExit(1)
    console.print("[dim]Gotowe.[/dim]")


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "extract",
        help="Ekstrahuje reguły stylu z dokumentów (Gemini, cache).",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Dla każdego dokumentu: wczytuje konfigurację ToC, dekoduje PDF, tnie tekst
na sekcje i wysyła je do Gemini. Odpowiedzi są cache'owane po hashu treści
sekcji (data/cache/ai-extractions, ważność 24h), więc ponowne uruchomienie
nie płaci za niezmienione sekcje.

Wynik: <out-dir>/<dokument>-toc-guided-rules.json

Błąd jednego dokumentu (brak PDF, zła konfiguracja) nie przerywa pozostałych;
kod wyjścia jest wtedy 1.

Wymaga: GEMINI_API_KEY (zmienna środowiskowa lub .env)

Przykłady:
  smn extract el-pais
  smn extract --all
  smn extract el-pais --pdf ~/pdf/libro-de-estilo.pdf --no-cache
  smn extract on-writing-well --delay 1.5 --model gemini-2.5-pro
        """,
    )
    p.add_argument(
        "documents",
        nargs="*",
        metavar="DOKUMENT",
        help="Identyfikatory dokumentów z toc-configs/documents.json.",
    )
    p.add_argument(
        "--all",
        action="store_true",
        help="Przetwórz wszystkie dokumenty z rejestru.",
    )
    p.add_argument(
        "--pdf",
        default=None,
        metavar="PLIK",
        help="Ścieżka do PDF (tylko z jednym dokumentem).",
    )
    p.add_argument(
        "--out-dir",
        default=None,
        metavar="KATALOG",
        help="Katalog wyników (domyślnie: <STYLEMINER_DATA_DIR>/extracted).",
    )
    p.add_argument(
        "--no-cache",
        action="store_true",
        help="Nie czytaj i nie zapisuj cache ekstrakcji.",
    )
    p.add_argument(
        "--delay",
        type=float,
        default=None,
        metavar="S",
        help="Odstęp między wywołaniami modelu w sekundach (domyślnie 0.2).",
    )
    p.add_argument(
        "--model",
        default=None,
        help="Model Gemini (domyślnie GEMINI_MODEL lub gemini-2.5-flash).",
    )
    p.set_defaults(func=run)
