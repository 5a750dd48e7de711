"""
validator/rule_validator.py: walidator kompletności zbioru reguł stylu.

RuleValidator().validate(rules) -> ValidationReport

Etapy:
  A: pola wymagane       (id, name, category, source.publication)
  B: detection           (type z DetectionType, confidence w [0, 1])
  C: ostrzeżenia         (description, examples, priority 1-20, znaczniki czasu)
  D: unikalność id       (jeden błąd na zduplikowane id)

Walidator nie modyfikuje reguł i nie rzuca wyjątków.
"""

from __future__ import annotations

from collections import Counter
from typing import Sequence

from data_model import DetectionType, StyleRule

from .types import ErrorCode, ValidationError, ValidationReport

PRIORITY_MIN = 1
PRIORITY_MAX = 20

_DETECTION_TYPES = {t.value for t in DetectionType}


class RuleValidator:
    """
    Użycie:
        report = RuleValidator().validate(rules)
        if not report.is_valid:
            for e in report.errors:
                print(e.code, e.rule_id, e.message)
    """

    def validate(self, rules: Sequence[StyleRule]) -> ValidationReport:
        errors: list[ValidationError] = []
        warnings: list[str] = []

        for i, rule in enumerate(rules):
            self._stage_required(i, rule, errors)
            self._stage_detection(i, rule, errors)
            self._stage_warnings(rule, warnings)

        self._stage_unique_ids(rules, errors)

        return ValidationReport(
            is_valid=len(errors) == 0,
            errors=errors,
            warnings=warnings,
            rules_count=len(rules),
        )

    # ------------------------------------------------------------------
    # Stage A: pola wymagane
    # ------------------------------------------------------------------

    def _stage_required(self, i: int, rule: StyleRule, errors: list[ValidationError]) -> None:
        rid = rule.id or None
        label = _label(rule)

        if not rule.id:
            errors.append(ValidationError(
                code=ErrorCode.MISSING_ID,
                rule_id=None,
                path=f"/{i}/id",
                message=f"Reguła bez id: {rule.name or 'nieznana'}",
            ))
        if not rule.name:
            errors.append(ValidationError(
                code=ErrorCode.MISSING_NAME,
                rule_id=rid,
                path=f"/{i}/name",
                message=f"Reguła bez nazwy: {label}",
            ))
        if not rule.category:
            errors.append(ValidationError(
                code=ErrorCode.MISSING_CATEGORY,
                rule_id=rid,
                path=f"/{i}/category",
                message=f"Reguła bez kategorii: {label}",
            ))
        if not rule.source.publication:
            errors.append(ValidationError(
                code=ErrorCode.MISSING_PUBLICATION,
                rule_id=rid,
                path=f"/{i}/source/publication",
                message=f"Reguła bez source.publication: {label}",
            ))

    # ------------------------------------------------------------------
    # Stage B: detection
    # ------------------------------------------------------------------

    def _stage_detection(self, i: int, rule: StyleRule, errors: list[ValidationError]) -> None:
        rid = rule.id or None
        detection = rule.detection

        if detection.type not in _DETECTION_TYPES:
            errors.append(ValidationError(
                code=ErrorCode.DETECTION_TYPE,
                rule_id=rid,
                path=f"/{i}/detection/type",
                message=(
                    f"Brak lub niepoprawny detection.type ({detection.type or 'brak'}): "
                    f"{_label(rule)}"
                ),
                details={"allowed": sorted(_DETECTION_TYPES)},
            ))

        c = detection.confidence
        if c is None or not (0.0 <= c <= 1.0):
            errors.append(ValidationError(
                code=ErrorCode.CONFIDENCE_RANGE,
                rule_id=rid,
                path=f"/{i}/detection/confidence",
                message=f"Pewność poza zakresem [0, 1] ({c}): {_label(rule)}",
            ))

    # ------------------------------------------------------------------
    # Stage C: ostrzeżenia
    # ------------------------------------------------------------------

    def _stage_warnings(self, rule: StyleRule, warnings: list[str]) -> None:
        label = _label(rule)
        if not rule.description:
            warnings.append(f"Reguła bez opisu: {label}")
        if not rule.examples.incorrect or not rule.examples.correct:
            warnings.append(f"Reguła bez przykładów: {label}")
        if rule.priority is None or not (PRIORITY_MIN <= rule.priority <= PRIORITY_MAX):
            warnings.append(f"Niepoprawny priorytet ({rule.priority}): {label}")
        if rule.created_at is None or rule.updated_at is None:
            warnings.append(f"Reguła bez znaczników czasu: {label}")

    # ------------------------------------------------------------------
    # Stage D: unikalność id
    # ------------------------------------------------------------------

    def _stage_unique_ids(self, rules: Sequence[StyleRule], errors: list[ValidationError]) -> None:
        counts = Counter(r.id for r in rules if r.id)
        for rule_id, n in counts.items():
            if n < 2:
                continue
            errors.append(ValidationError(
                code=ErrorCode.DUPLICATE_ID,
                rule_id=rule_id,
                path="/",
                message=f"Zduplikowane id reguły ({n}x): {rule_id}",
                details={"count": n},
            ))


def _label(rule: StyleRule) -> str:
    return rule.id or rule.name or "nieznana"
