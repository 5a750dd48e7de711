"""Komenda: smn apply-schema: aplikuje db/schema.sql do bazy danych."""

from __future__ import annotations

import argparse
import pathlib

from rich.console import Console

from smn._db import get_connection

console = Console()

ROOT        = pathlib.Path(__file__).resolve().parent.parent.parent
SCHEMA_PATH = ROOT / "db" / "schema.sql"


def split_statements(sql: str) -> list[str]:
    """
    Dzieli SQL na pojedyncze instrukcje, respektując bloki $$...$$
    (DO $$ BEGIN ... END $$ przy tworzeniu typu rule_severity).

    Instrukcja kończy się średnikiem na końcu linii (poza blokami $$).
    Linie komentarzy przed instrukcją zostają w jej treści.
    """
    stmts: list[str] = []
    buf:   list[str] = []
    in_dollar = False

    for line in sql.splitlines(keepends=True):
        buf.append(line)
        if line.count("$$") % 2 == 1:
            in_dollar = not in_dollar
        if not in_dollar and line.rstrip().endswith(";"):
            stmt = "".join(buf).strip()
            if stmt:
                stmts.append(stmt)
            buf = []

    remaining = "".join(buf).strip()
    # sam komentarz na końcu pliku nie jest instrukcją
    if any(ln.strip() and not ln.strip().startswith("--") for ln in remaining.splitlines()):
        stmts.append(remaining)

    return stmts


def run(args: argparse.Namespace) -> None:
    if not SCHEMA_PATH.exists():
        console.print(f"[red]Brak pliku schematu:[/red] {SCHEMA_PATH}")
        raise SystemExit(1)

    stmts = split_statements(SCHEMA_PATH.read_text(encoding="utf-8"))

    try:
        conn = get_connection()
    except Exception as e:
        console.print(f"[red]Błąd połączenia z bazą:[/red] {e}")
        raise SystemExit(1)

    # Instrukcja po instrukcji w autocommit: typ enum musi istnieć,
    # zanim użyje go CREATE TABLE.
    conn.autocommit = True
    try:
        with conn.cursor() as cur:
            for stmt in stmts:
                cur.execute(stmt)
    except Exception as e:
        console.print(f"[red]Błąd wykonania schematu:[/red] {e}")
        raise SystemExit(1)
    finally:
        conn.close()

    console.print(f"[green]Schemat zastosowany:[/green] {SCHEMA_PATH} ({len(stmts)} instrukcji)")


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "apply-schema",
        help="Aplikuje db/schema.sql do bazy danych (idempotentne).",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Wykonuje db/schema.sql przeciwko bazie PostgreSQL skonfigurowanej przez
STYLEMINER_DATABASE_URL albo PGHOST, PGPORT, PGDATABASE, PGUSER, PGPASSWORD.

Schemat tworzy typ rule_severity i tabelę style_rule, do której
`smn merge --db` zapisuje scalone reguły. Wszystkie instrukcje są
idempotentne (IF NOT EXISTS / EXCEPTION WHEN duplicate_object).

Przykład:
  smn apply-schema
        """,
    )
    p.set_defaults(func=run)
