"""
smn: narzędzie CLI dla StyleMiner.

Użycie:
  smn <komenda> [opcje]

Komendy:
  tocs          Listuje dokumenty z rejestru konfiguracji ToC.
  slice         Tnie PDF według ToC i pokazuje powstałe sekcje tekstu.
  extract       Ekstrahuje reguły stylu z dokumentów (Gemini, cache).
  merge         Scala wyniki ekstrakcji w data/rules.json (opcjonalnie do bazy).
  validate      Waliduje plik z regułami (kompletność, unikalność id).
  cache         Listuje lub czyści cache ekstrakcji AI.
  apply-schema  Aplikuje db/schema.sql do bazy danych (idempotentne).
"""

from __future__ import annotations

import argparse
import sys

# Windows: terminal może używać cp1252; wymuszamy UTF-8, żeby znaki
# diakrytyczne w pomocy argparse i w treści reguł były wypisywane poprawnie.
if hasattr(sys.stdout, "reconfigure"):
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
if hasattr(sys.stderr, "reconfigure"):
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")

from smn.commands import tocs as cmd_tocs
from smn.commands import slice_sections as cmd_slice
from smn.commands import extract as cmd_extract
from smn.commands import merge as cmd_merge
from smn.commands import validate as cmd_validate
from smn.commands import cache as cmd_cache
from smn.commands import apply_schema as cmd_apply_schema


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="smn",
        description="StyleMiner: ekstrakcja reguł stylu z podręczników według spisu treści.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version", action="version", version="smn 0.1.0"
    )

    subparsers = parser.add_subparsers(
        title="komendy",
        metavar="<komenda>",
        dest="command",
    )
    subparsers.required = True

    cmd_tocs.add_parser(subparsers)
    cmd_slice.add_parser(subparsers)
    cmd_extract.add_parser(subparsers)
    cmd_merge.add_parser(subparsers)
    cmd_validate.add_parser(subparsers)
    cmd_cache.add_parser(subparsers)
    cmd_apply_schema.add_parser(subparsers)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
