"""Komenda: smn tocs: listuje dokumenty z rejestru konfiguracji ToC."""

from __future__ import annotations

import argparse
import json

from rich import box
from rich.console import Console
from rich.table import Table

from extraction.errors import StyleMinerError
from extraction.registry import REGISTRY_PATH, get_document_config, get_pdf_path, list_document_ids
from extraction.settings import load_settings

console = Console()


def run(args: argparse.Namespace) -> None:
    settings = load_settings()

    try:
        ids = list_document_ids()
    except StyleMinerError as e:
        console.print(f"[red]Błąd rejestru:[/red] {e}")
        raise SystemExit(1)

    if not ids:
        console.print(f"[yellow]Rejestr jest pusty:[/yellow] {REGISTRY_PATH}")
        return

    if args.json:
        _print_json(ids)
        return

    table = Table(box=box.SIMPLE_HEAD, show_header=True, header_style="bold white")
    table.add_column("Dokument",   style="cyan", no_wrap=True)
    table.add_column("Nazwa")
    table.add_column("Język",      justify="center")
    table.add_column("Rodzaj",     style="dim")
    table.add_column("Sekcje",     justify="right")
    table.add_column("Pomijane",   justify="right", style="dim")
    table.add_column("PDF",        justify="center")

    broken = 0
    for document_id in ids:
        try:
            config = get_document_config(document_id)
        except StyleMinerError as e:
            broken += 1
            table.add_row(document_id, f"[red]{e}[/red]", "", "", "", "", "")
            continue

        skipped = sum(1 for s in config.sections if config.is_skipped(s))
        pdf = get_pdf_path(document_id, settings.assets_dir)
        table.add_row(
            document_id,
            config.name,
            config.language,
            str(config.document_type),
            str(len(config.sections) - skipped),
            str(skipped),
            "[green]✓[/green]" if pdf.exists() else "[red]brak[/red]",
        )

    console.print(table)
    console.print(f"[dim]Katalog PDF: {settings.assets_dir}[/dim]")
    if broken:
        raise SystemExit(1)


def _print_json(ids: list[str]) -> None:
    """Konfiguracje ToC jako tablica JSON na stdout; błędna konfiguracja = {documentId, error}."""
    configs = []
    broken = 0
    for document_id in ids:
        try:
            configs.append(get_document_config(document_id).to_dict())
        except StyleMinerError as e:
            broken += 1
            configs.append({"documentId": document_id, "error": str(e)})

    print(json.dumps(configs, ensure_ascii=False, indent=2))
    if broken:
        raise SystemExit(1)


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "tocs",
        help="Listuje dokumenty z rejestru konfiguracji ToC.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=f"""
Wczytuje toc-configs/documents.json i każdą konfigurację ToC (z walidacją
schematu). Pokazuje liczbę sekcji do przetworzenia i pomijanych oraz to,
czy plik PDF jest dostępny w katalogu STYLEMINER_ASSETS_DIR.

Rejestr: {REGISTRY_PATH}

Przykłady:
  smn tocs
  smn tocs --json
        """,
    )
    p.add_argument(
        "--json",
        action="store_true",
        help="Wypisz wczytane konfiguracje ToC jako JSON na stdout.",
    )
    p.set_defaults(func=run)
