"""Komenda: smn validate: walidacja pliku z regułami stylu."""

from __future__ import annotations

import argparse
import json
import pathlib

from rich import box
from rich.console import Console
from rich.table import Table

from data_model import StyleRule
from merge import load_extraction_result
from validator import RuleValidator

console = Console()


def _load_rules(path: pathlib.Path) -> list[StyleRule]:
    """Akceptuje rules.json, wynik ekstrakcji albo gołą tablicę reguł."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, list):
        return [StyleRule.from_dict(r) for r in data if isinstance(r, dict)]
    return load_extraction_result(path).rules


def run(args: argparse.Namespace) -> None:
    path = pathlib.Path(args.rules)
    if not path.exists():
        console.print(f"[red]Plik nie istnieje:[/red] {path}")
        raise SystemExit(1)

    try:
        rules = _load_rules(path)
    except (OSError, ValueError) as e:
        console.print(f"[red]Nie można wczytać reguł:[/red] {e}")
        raise SystemExit(1)

    report = RuleValidator().validate(rules)

    if args.json_output:
        print(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))
    elif report.is_valid:
        console.print(
            f"[green]OK[/green]  {report.rules_count} reguł, brak błędów."
        )
    else:
        console.print(
            f"[red]BŁĄD[/red]  {report.rules_count} reguł, "
            f"{len(report.errors)} błąd(ów)."
        )

        table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
        table.add_column("Kod",      style="yellow", no_wrap=True)
        table.add_column("Reguła",   style="cyan",   no_wrap=True)
        table.add_column("Ścieżka", style="dim",    no_wrap=True)
        table.add_column("Komunikat")

        for e in report.errors:
            table.add_row(str(e.code), e.rule_id or "-", e.path, e.message)

        console.print(table)

    if report.warnings and not args.json_output:
        console.print(f"[yellow]Ostrzeżenia ({len(report.warnings)}):[/yellow]")
        for w in report.warnings:
            console.print(f"  [yellow]·[/yellow] {w}")

    if args.strict and not report.is_valid:
        raise SystemExit(1)


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "validate",
        help="Waliduje plik z regułami (kompletność, unikalność id).",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Waliduje zbiór reguł stylu (etapy A-D):

  A  Pola wymagane     (id, name, category, source.publication)
  B  Detection         (type z dozwolonego zbioru, confidence w [0, 1])
  C  Ostrzeżenia       (opis, przykłady, priorytet 1-20, znaczniki czasu)
  D  Unikalność id

Plik może być wynikiem `smn merge` (rules.json), wynikiem `smn extract`
(*-toc-guided-rules.json) albo tablicą JSON reguł.

Przykłady:
  smn validate data/rules.json
  smn validate data/extracted/el-pais-toc-guided-rules.json --strict
  smn validate data/rules.json --json-output
        """,
    )
    p.add_argument(
        "rules",
        metavar="PLIK_REGUŁ",
        help="Ścieżka do pliku JSON z regułami.",
    )
    p.add_argument(
        "--strict",
        action="store_true",
        help="Kod wyjścia 1, gdy zbiór zawiera błędy.",
    )
    p.add_argument(
        "--json-output",
        action="store_true",
        help="Wypisz raport walidacji jako JSON na stdout.",
    )
    p.set_defaults(func=run)
