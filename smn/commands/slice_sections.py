"""Komenda: smn slice: tnie PDF według ToC i pokazuje sekcje tekstu (bez wywołań AI)."""

from __future__ import annotations

import argparse
from pathlib import Path

from rich import box
from rich.console import Console
from rich.table import Table

from data_model import TextSection
from extraction.errors import StyleMinerError
from extraction.registry import get_document_config, get_pdf_path
from extraction.settings import load_settings
from pdf.decoder import decode_pdf
from pdf.slicer import slice_document

console = Console()

_PREVIEW_CHARS = 60


def _matches(ts: TextSection, wanted: str) -> bool:
    return wanted in (ts.metadata.section_id, ts.metadata.subsection_id)


def run(args: argparse.Namespace) -> None:
    settings = load_settings()

    try:
        config = get_document_config(args.document)
        pdf_path = Path(args.pdf) if args.pdf else get_pdf_path(args.document, settings.assets_dir)
        doc = decode_pdf(pdf_path)
    except StyleMinerError as e:
        console.print(f"[red]Błąd:[/red] {e}")
        raise SystemExit(1)

    sliced = slice_document(doc.text, doc.numpages, config)

    if args.show:
        shown = [ts for sections in sliced.values() for ts in sections if _matches(ts, args.show)]
        if not shown:
            console.print(f"[yellow]Brak sekcji tekstu dla:[/yellow] {args.show}")
            raise SystemExit(1)
        for ts in shown:
            console.rule(f"[bold]{ts.title}[/bold]  [dim]s. {ts.metadata.page_range}[/dim]")
            console.print(ts.content, markup=False, highlight=False)
        return

    table = Table(box=box.SIMPLE_HEAD, show_header=True, header_style="bold white")
    table.add_column("Sekcja",    style="cyan", no_wrap=True)
    table.add_column("Poz.",      justify="center")
    table.add_column("Tytuł")
    table.add_column("Strony",    justify="right")
    table.add_column("Prio",      justify="right")
    table.add_column("Znaki",     justify="right")
    table.add_column("Początek",  style="dim")

    total = 0
    for sections in sliced.values():
        for ts in sections:
            total += 1
            meta = ts.metadata
            preview = ts.content[:_PREVIEW_CHARS].replace("\n", " ")
            table.add_row(
                meta.subsection_id or meta.section_id,
                str(ts.level),
                ts.title,
                str(meta.page_range),
                str(meta.priority),
                str(len(ts.content)),
                preview,
            )

    console.print(table)
    console.print(
        f"[green]{config.name}:[/green] {len(sliced)} sekcji, {total} fragmentów tekstu "
        f"[dim](PDF {doc.numpages} stron)[/dim]"
    )


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "slice",
        help="Tnie PDF według ToC i pokazuje sekcje tekstu (bez AI).",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Dekoduje PDF dokumentu, mapuje zakresy stron ToC na tekst, czyści żywą
paginę i numery stron, a następnie wypisuje tabelę powstałych sekcji.
Przydatne do strojenia pageRange i pageMapping przed właściwą ekstrakcją.

Przykłady:
  smn slice el-pais
  smn slice escritura-transparente --pdf ~/pdf/escritura.pdf
  smn slice el-pais --show TITULO_II
        """,
    )
    p.add_argument(
        "document",
        metavar="DOKUMENT",
        help="Identyfikator dokumentu z toc-configs/documents.json.",
    )
    p.add_argument(
        "--pdf",
        default=None,
        metavar="PLIK",
        help="Ścieżka do PDF (domyślnie z rejestru i STYLEMINER_ASSETS_DIR).",
    )
    p.add_argument(
        "--show",
        default=None,
        metavar="ID",
        help="Wypisz pełny oczyszczony tekst sekcji lub podsekcji o tym id.",
    )
    p.set_defaults(func=run)
