"""
llm_query/rules.py: parsowanie odpowiedzi modelu na StyleRule i utrwalanie reguł.

Publiczne API:
  find_json_object(text)                                  -> str | None
  parse_rules_response(raw, section, now, default_priority) -> list[StyleRule]
  rule_from_payload(payload, section, now, default_priority) -> StyleRule | None
  upsert_rules(conn, rules)                               -> int
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from rich.console import Console

from data_model import (
    DEFAULT_PRIORITY,
    Detection,
    DetectionType,
    RuleExamples,
    RuleSource,
    Severity,
    StyleRule,
    TextSection,
)
from extraction.errors import RuleParseError

console = Console(stderr=True)

AI_PUBLICATION     = "AI Extracted"
DEFAULT_CATEGORY   = "style"
DEFAULT_SEVERITY   = Severity.WARNING
DEFAULT_CONFIDENCE = 0.8

_SEVERITIES = {s.value for s in Severity}


# ---------------------------------------------------------------------------
# Wyszukiwanie JSON w odpowiedzi
# ---------------------------------------------------------------------------

def find_json_object(text: str) -> str | None:
    """
    Zwraca pierwszy zbalansowany obiekt JSON ({...}) z tekstu.

    Nawiasy wewnątrz stringów (także z escape'ami) nie są liczone, więc
    odpowiedź opakowana w ```json ... ``` lub z komentarzem przed i po
    obiektem jest obsługiwana.
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return text[start:i + 1]
        # Niezamknięty obiekt od tej pozycji: spróbuj od następnego "{"
        start = text.find("{", start + 1)
    return None


# ---------------------------------------------------------------------------
# Parsowanie
# ---------------------------------------------------------------------------

def parse_rules_response(
    raw: str,
    section: TextSection,
    now: datetime,
    default_priority: int | None = None,
) -> list[StyleRule]:
    """
    Zamienia odpowiedź modelu na listę StyleRule.

    Rekordy bez id / name / description są pomijane (z ostrzeżeniem).

    Raises:
        RuleParseError: brak obiektu JSON, niepoprawny JSON albo brak tablicy "rules".
    """
    candidate = find_json_object(raw)
    if candidate is None:
        raise RuleParseError(f"Brak obiektu JSON w odpowiedzi dla sekcji: {section.title}")

    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as exc:
        raise RuleParseError(f"Niepoprawny JSON dla sekcji {section.title}: {exc}") from exc

    records = parsed.get("rules") if isinstance(parsed, dict) else None
    if not isinstance(records, list):
        raise RuleParseError(f"Brak tablicy 'rules' w odpowiedzi dla sekcji: {section.title}")

    rules: list[StyleRule] = []
    for payload in records:
        rule = rule_from_payload(payload, section, now, default_priority)
        if rule is None:
            console.print(f"[yellow][warn] Pomijam niekompletną regułę w sekcji: {section.title}[/yellow]")
            continue
        rules.append(rule)
    return rules


def rule_from_payload(
    payload: Any,
    section: TextSection,
    now: datetime,
    default_priority: int | None = None,
) -> StyleRule | None:
    """Buduje w pełni wypełnioną StyleRule z rekordu modelu; None gdy brak pól wymaganych."""
    if not isinstance(payload, dict):
        return None

    rule_id     = _text(payload.get("id"))
    name        = _text(payload.get("name"))
    description = _text(payload.get("description"))
    if not (rule_id and name and description):
        return None

    detection = payload.get("detection") if isinstance(payload.get("detection"), dict) else {}
    examples  = payload.get("examples") if isinstance(payload.get("examples"), dict) else {}

    severity = _text(payload.get("severity")).lower()
    if severity not in _SEVERITIES:
        severity = str(DEFAULT_SEVERITY)

    confidence = _number(payload.get("confidence"))
    if confidence is None:
        confidence = _number(detection.get("confidence"))
    if confidence is None:
        confidence = DEFAULT_CONFIDENCE
    confidence = min(max(confidence, 0.0), 1.0)

    priority = payload.get("priority")
    if not isinstance(priority, int) or isinstance(priority, bool):
        priority = default_priority if default_priority is not None else DEFAULT_PRIORITY

    pattern = _text(payload.get("detection_pattern")) or _text(detection.get("pattern")) or None

    return StyleRule(
        id=rule_id,
        category=_text(payload.get("category")) or DEFAULT_CATEGORY,
        subcategory=_text(payload.get("subcategory")) or None,
        name=name,
        description=description,
        severity=severity,
        detection=Detection(
            type=str(DetectionType.AI),
            confidence=confidence,
            pattern=pattern,
        ),
        examples=RuleExamples(
            incorrect=_text(examples.get("incorrect")),
            correct=_text(examples.get("correct")),
            explanation=_text(examples.get("explanation")),
        ),
        source=RuleSource(
            publication=AI_PUBLICATION,
            section=section.title,
            section_id=section.metadata.section_id,
            subsection_id=section.metadata.subsection_id,
        ),
        priority=priority,
        autofix=False,
        created_at=now,
        updated_at=now,
    )


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


# ---------------------------------------------------------------------------
# Utrwalanie
# ---------------------------------------------------------------------------

def upsert_rules(conn, rules: list[StyleRule]) -> int:
    """
    Wstawia reguły do tabeli style_rule.

    Logika konfliktu (PRIMARY KEY rule_id):
      - Nowy wiersz: wstawia wszystkie pola.
      - Istniejący wiersz: nadpisuje treść reguły i updated_at
        (ponowny merge aktualizuje reguły, created_at zostaje).

    Args:
        conn:  połączenie psycopg2 (otwarte, bez auto-commit)
        rules: reguły po merge

    Returns:
        Liczba wstawionych lub zaktualizowanych wierszy.
    """
    if not rules:
        return 0

    written = 0
    with conn.cursor() as cur:
        for r in rules:
            cur.execute(
                """
                INSERT INTO style_rule (
                    rule_id, category, subcategory, name, description,
                    severity, detection, examples, source, publication,
                    priority, autofix, created_at, updated_at
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s::jsonb, %s::jsonb, %s::jsonb,
                        %s, %s, %s, %s, %s)
                ON CONFLICT (rule_id) DO UPDATE SET
                    category    = EXCLUDED.category,
                    subcategory = EXCLUDED.subcategory,
                    name        = EXCLUDED.name,
                    description = EXCLUDED.description,
                    severity    = EXCLUDED.severity,
                    detection   = EXCLUDED.detection,
                    examples    = EXCLUDED.examples,
                    source      = EXCLUDED.source,
                    publication = EXCLUDED.publication,
                    priority    = EXCLUDED.priority,
                    autofix     = EXCLUDED.autofix,
                    updated_at  = EXCLUDED.updated_at
                """,
                (
                    r.id, r.category, r.subcategory, r.name, r.description,
                    r.severity,
                    json.dumps(r.detection.to_dict(), ensure_ascii=False),
                    json.dumps(r.examples.to_dict(), ensure_ascii=False),
                    json.dumps(r.source.to_dict(), ensure_ascii=False),
                    r.source.publication,
                    r.priority, r.autofix, r.created_at, r.updated_at,
                ),
            )
            written += cur.rowcount

    return written
