"""
validator: walidator kompletności i unikalności reguł stylu.

Interfejs publiczny:
    RuleValidator  główny walidator (etapy A-D)
    ValidationReport, ValidationError, ErrorCode  typy raportu

Typowe użycie:
    from validator import RuleValidator

    report = RuleValidator().validate(rules)
    if not report.is_valid:
        for e in report.errors:
            print(e.code, e.rule_id, e.message)
"""

from .types import ErrorCode, ValidationError, ValidationReport
from .rule_validator import RuleValidator

__all__ = [
    "ErrorCode",
    "ValidationError",
    "ValidationReport",
    "RuleValidator",
]
