"""Komenda: smn cache: przegląd i czyszczenie cache ekstrakcji AI."""

from __future__ import annotations

import argparse
import json

from rich import box
from rich.console import Console
from rich.table import Table

from data_model import from_iso
from extraction.cache import FileRuleCache
from extraction.settings import load_settings

console = Console()


def run(args: argparse.Namespace) -> None:
    settings = load_settings()
    cache = FileRuleCache(settings.cache_dir)

    if args.clear or args.stale:
        removed = cache.clear(stale_only=args.stale)
        label = "przeterminowanych " if args.stale else ""
        console.print(f"[green]Usunięto {removed} {label}wpisów[/green] [dim]({cache.directory})[/dim]")
        return

    entries = cache.entries()
    if not entries:
        console.print(f"[yellow]Cache jest pusty:[/yellow] {cache.directory}")
        return

    now = cache.clock()
    table = Table(box=box.SIMPLE_HEAD, show_header=True, header_style="bold white")
    table.add_column("Hash",       style="cyan", no_wrap=True)
    table.add_column("Reguły",     justify="right")
    table.add_column("Tokeny",     justify="right")
    table.add_column("Wiek",       justify="right")
    table.add_column("Stan")

    for path in entries:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            table.add_row(path.stem[:16], "", "", "", "[red]uszkodzony[/red]")
            continue

        extracted_at = from_iso(data.get("extractedAt"))
        if extracted_at is None:
            table.add_row(path.stem[:16], "", "", "", "[red]uszkodzony[/red]")
            continue

        age = now - extracted_at
        fresh = age <= cache.max_age
        table.add_row(
            path.stem[:16],
            str(len(data.get("rules") or [])),
            str(data.get("tokensUsed") or 0),
            f"{age.total_seconds() / 3600:.1f} h",
            "[green]świeży[/green]" if fresh else "[dim]przeterminowany[/dim]",
        )

    console.print(table)
    console.print(f"[dim]{len(entries)} wpisów w {cache.directory}[/dim]")


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "cache",
        help="Listuje lub czyści cache ekstrakcji AI.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Cache przechowuje reguły wyekstrahowane z sekcji, adresowane hashem
SHA-256 tytułu i treści sekcji. Wpisy starsze niż 24h są ignorowane
(i usuwane przy odczycie).

Przykłady:
  smn cache
  smn cache --stale
  smn cache --clear
        """,
    )
    group = p.add_mutually_exclusive_group()
    group.add_argument(
        "--clear",
        action="store_true",
        help="Usuń wszystkie wpisy.",
    )
    group.add_argument(
        "--stale",
        action="store_true",
        help="Usuń tylko przeterminowane wpisy.",
    )
    p.set_defaults(func=run)
