"""Komenda: smn merge: scala wyniki ekstrakcji w jeden zbiór reguł."""

from __future__ import annotations

import argparse
from pathlib import Path

from rich import box
from rich.console import Console
from rich.table import Table

from data_model import TextType, utcnow
from extraction.errors import NoUsableInputError, StyleMinerError
from extraction.orchestrator import RESULT_SUFFIX
from extraction.registry import get_document_config
from extraction.settings import load_settings
from merge import (
    MergeOptions,
    RuleMerger,
    build_merged_output,
    load_sources,
    profile_for,
    reorganize_by_text_type,
    text_type_report,
    write_json_atomic,
)
from merge.output import LoadedSource
from merge.text_type import DEFAULT_MAX_RULES
from validator import RuleValidator

console = Console()

# Kolejność zaufania do źródeł; dopasowanie po podciągu source.publication
DEFAULT_SOURCE_PRIORITY = ("El País", "Escritura Transparente", "On Writing Well")

_MAX_LISTED_ISSUES = 20


def _parse_priority(raw: str | None) -> tuple[str, ...]:
    if raw is None:
        return DEFAULT_SOURCE_PRIORITY
    return tuple(s.strip() for s in raw.split(",") if s.strip())


def _toc_text_type(sources: list[LoadedSource]) -> TextType | None:
    """
    Typ tekstu z konfiguracji ToC dokumentów źródłowych (extractionOptions.textType).
    Zwraca go tylko, gdy wszystkie znane dokumenty mają ten sam typ.
    """
    types: set[TextType] = set()
    for s in sources:
        if not s.document_id:
            continue
        try:
            config = get_document_config(s.document_id)
        except StyleMinerError:
            continue
        if config.extraction_options.text_type is not None:
            types.add(config.extraction_options.text_type)
    return types.pop() if len(types) == 1 else None


def _upsert(rules) -> None:
    from llm_query import upsert_rules
    from smn._db import get_connection

    try:
        conn = get_connection()
    except Exception as e:
        console.print(f"[red]Błąd połączenia z bazą:[/red] {e}")
        raise SystemExit(1)

    try:
        n = upsert_rules(conn, rules)
        conn.commit()
    except Exception as e:
        conn.rollback()
        console.print(f"[red]Błąd zapisu reguł do bazy:[/red] {e}")
        raise SystemExit(1)
    finally:
        conn.close()

    console.print(f"[green]Baza:[/green] zapisano {n} reguł (style_rule)")


def run(args: argparse.Namespace) -> None:
    settings = load_settings()

    if args.inputs:
        paths = [Path(p) for p in args.inputs]
    else:
        paths = sorted(settings.extracted_dir.glob(f"*{RESULT_SUFFIX}"))

    try:
        sources = load_sources(paths)
    except NoUsableInputError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)

    options = MergeOptions(
        deduplication=not args.no_dedup,
        confidence_weighting=not args.no_weighting,
        source_priority=_parse_priority(args.source_priority),
    )
    merged = RuleMerger().merge([s.rules for s in sources], options)

    text_type = TextType(args.text_type) if args.text_type else _toc_text_type(sources)
    if args.reorder:
        if text_type is not None and profile_for(text_type) is not None:
            merged = reorganize_by_text_type(merged, text_type)
        else:
            console.print(
                f"[yellow][warn] Pomijam --reorder: brak profilu reguł dla typu tekstu "
                f"{text_type or '(nieustalony)'}[/yellow]"
            )

    report = RuleValidator().validate(merged)
    type_block = text_type_report(merged, text_type, args.max_rules) if text_type else None

    output = build_merged_output(sources, merged, report, utcnow(), type_block)
    out_path = write_json_atomic(output, Path(args.out) if args.out else settings.rules_path)

    # --- Podsumowanie ----------------------------------------------------
    table = Table(box=box.SIMPLE_HEAD, show_header=True, header_style="bold white")
    table.add_column("Kategoria", style="cyan")
    table.add_column("Reguły",    justify="right")
    for category, n in sorted(output["rules_by_category"].items(), key=lambda kv: -kv[1]):
        table.add_row(category, str(n))
    console.print(table)

    stats = output["statistics"]
    console.print(
        f"[bold]Reguł:[/bold] {output['total_rules']}  "
        f"[dim]średnia pewność {stats['average_confidence']:.2f}, "
        f"wysoka pewność {stats['high_confidence']}[/dim]"
    )

    if type_block is not None:
        essential = type_block["essential"]
        if essential is None:
            console.print(f"[dim]Typ tekstu: {text_type} (bez profilu reguł kluczowych)[/dim]")
        elif essential["isValid"]:
            console.print(f"[green]Typ tekstu {text_type}:[/green] wszystkie reguły kluczowe obecne")
        else:
            console.print(
                f"[yellow]Typ tekstu {text_type}: brak reguł kluczowych:[/yellow] "
                f"{', '.join(essential['missing'])}"
            )

    if report.is_valid:
        console.print("[green]Walidacja: OK[/green]")
    else:
        console.print(f"[red]Walidacja: {len(report.errors)} błąd(ów)[/red]")
        for e in report.errors[:_MAX_LISTED_ISSUES]:
            console.print(f"  [yellow]{e.code}[/yellow] [cyan]{e.path}[/cyan] {e.message}")
    if report.warnings:
        console.print(f"[yellow]Ostrzeżenia: {len(report.warnings)}[/yellow]")
        for w in report.warnings[:_MAX_LISTED_ISSUES]:
            console.print(f"  [yellow]·[/yellow] {w}")

    console.print(f"[green]Zapisano:[/green] {out_path}")

    if args.db:
        _upsert(merged)


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "merge",
        help="Scala wyniki ekstrakcji w rules.json (opcjonalnie do bazy).",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=f"""
Wczytuje pliki *{RESULT_SUFFIX}, łączy reguły, usuwa duplikaty
(sygnatura: kategoria, podkategoria, nazwa, początek opisu), waży pewność
według kolejności źródeł i sortuje po priorytecie. Wynik jest walidowany,
a raport walidacji trafia do pliku wyjściowego.

Domyślna kolejność źródeł: {", ".join(DEFAULT_SOURCE_PRIORITY)}
Pliki nieczytelne są pomijane z ostrzeżeniem.

Typ tekstu (--text-type albo wspólny textType z konfiguracji ToC) dodaje do
wyniku blok text_type: reguły wybrane według profilu typu i kontrolę
obecności reguł kluczowych (essential).

Przykłady:
  smn merge
  smn merge data/extracted/el-pais-toc-guided-rules.json --out /tmp/rules.json
  smn merge --source-priority "On Writing Well,El País"
  smn merge --no-dedup --no-weighting
  smn merge --text-type news --reorder
  smn merge --db
        """,
    )
    p.add_argument(
        "inputs",
        nargs="*",
        metavar="PLIK",
        help=f"Pliki wyników (domyślnie: <data>/extracted/*{RESULT_SUFFIX}).",
    )
    p.add_argument(
        "--source-priority",
        default=None,
        metavar="LISTA",
        help="Kolejność źródeł, rozdzielona przecinkami (pierwsze = najbardziej zaufane).",
    )
    p.add_argument(
        "--no-dedup",
        action="store_true",
        help="Wyłącz deduplikację.",
    )
    p.add_argument(
        "--no-weighting",
        action="store_true",
        help="Wyłącz ważenie pewności według źródła.",
    )
    p.add_argument(
        "--out",
        default=None,
        metavar="PLIK",
        help="Plik wyjściowy (domyślnie: <STYLEMINER_DATA_DIR>/rules.json).",
    )
    p.add_argument(
        "--text-type",
        choices=[str(t) for t in TextType],
        default=None,
        help="Typ tekstu dla wyboru reguł (domyślnie: textType z konfiguracji ToC źródeł, jeśli wspólny).",
    )
    p.add_argument(
        "--reorder",
        action="store_true",
        help="Ułóż reguły według profilu typu tekstu i nadaj priorytety od 1.",
    )
    p.add_argument(
        "--max-rules",
        type=int,
        default=DEFAULT_MAX_RULES,
        metavar="N",
        help=f"Limit listy selected_rules w bloku text_type (domyślnie {DEFAULT_MAX_RULES}).",
    )
    p.add_argument(
        "--db",
        action="store_true",
        help="Zapisz scalone reguły do tabeli style_rule (PostgreSQL).",
    )
    p.set_defaults(func=run)
