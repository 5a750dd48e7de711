"""Tests for parsing model responses into style rules."""

import json

import pytest

from extraction.errors import RuleParseError
from llm_query.rules import AI_PUBLICATION, find_json_object, parse_rules_response, rule_from_payload


def payload(**overrides):
    record = {
        "id": "T1_RULE_001",
        "category": "grammar",
        "name": "Concordancia",
        "description": "El verbo concuerda con el sujeto.",
        "severity": "error",
        "examples": {"incorrect": "Los datos es", "correct": "Los datos son", "explanation": "número"},
        "confidence": 0.9,
        "priority": 2,
        "detection_pattern": "datos es",
    }
    record.update(overrides)
    return record


class TestFindJsonObject:
    """Tests for locating the JSON object in free-form replies."""

    def test_plain_object(self):
        """A bare JSON object is returned as is."""
        assert find_json_object('{"rules": []}') == '{"rules": []}'

    def test_fenced_with_prose(self):
        """The object is found inside a fenced block surrounded by prose."""
        raw = 'Aquí tienes:\n```json\n{"rules": [{"id": "a"}]}\n```\nSaludos.'
        assert json.loads(find_json_object(raw)) == {"rules": [{"id": "a"}]}

    def test_braces_inside_strings(self):
        """Braces and quotes inside strings do not end the object."""
        raw = '{"rules": [{"description": "usa {llaves} y \\"comillas\\" }"}]}'
        assert json.loads(find_json_object(raw))["rules"][0]["description"] == 'usa {llaves} y "comillas" }'

    def test_unbalanced_prefix_then_valid(self):
        """An unbalanced fragment before the object is skipped."""
        raw = 'nota { sin cerrar\n{"rules": []}'
        assert find_json_object(raw) == '{"rules": []}'

    def test_no_object(self):
        """Text without an object yields None."""
        assert find_json_object("sin json") is None


class TestParseRulesResponse:
    """Tests for parse_rules_response."""

    def test_full_record(self, make_section, fixed_now):
        """A complete record maps onto every StyleRule field."""
        section = make_section("Gramática", section_id="T1", subsection_id="T1_S2")
        [rule] = parse_rules_response(json.dumps({"rules": [payload()]}), section, fixed_now)

        assert rule.id == "T1_RULE_001"
        assert rule.severity == "error"
        assert rule.detection.type == "ai"
        assert rule.detection.confidence == 0.9
        assert rule.detection.pattern == "datos es"
        assert rule.priority == 2
        assert rule.autofix is False
        assert rule.source.publication == AI_PUBLICATION
        assert rule.source.section == "Gramática"
        assert rule.source.section_id == "T1"
        assert rule.source.subsection_id == "T1_S2"
        assert rule.created_at == rule.updated_at == fixed_now

    def test_incomplete_records_skipped(self, make_section, fixed_now):
        """Records missing required fields are dropped."""
        raw = json.dumps({"rules": [payload(), payload(id=""), payload(name=None), "texto"]})
        rules = parse_rules_response(raw, make_section(), fixed_now)
        assert len(rules) == 1

    def test_empty_rules_list(self, make_section, fixed_now):
        """An empty rules list is a valid reply."""
        assert parse_rules_response('{"rules": []}', make_section(), fixed_now) == []

    @pytest.mark.parametrize("raw", [
        "no hay json aquí",
        '{"rules": [unquoted]}',
        '{"section_summary": "sin reglas"}',
        '{"rules": "no es lista"}',
    ])
    def test_malformed_replies_raise(self, raw, make_section, fixed_now):
        """Replies without a usable rules object raise RuleParseError."""
        with pytest.raises(RuleParseError):
            parse_rules_response(raw, make_section(), fixed_now)


class TestRuleFromPayload:
    """Tests for field defaults and normalization."""

    def test_defaults(self, make_section, fixed_now):
        """Missing optional fields take their defaults."""
        record = {"id": "X", "name": "Nombre", "description": "Desc"}
        rule = rule_from_payload(record, make_section(), fixed_now, default_priority=7)

        assert rule.category == "style"
        assert rule.severity == "warning"
        assert rule.detection.confidence == 0.8
        assert rule.priority == 7
        assert rule.detection.pattern is None

    def test_priority_default_without_section_priority(self, make_section, fixed_now):
        """Priority defaults to 5 when the section has none."""
        rule = rule_from_payload(payload(priority="alta"), make_section(), fixed_now)
        assert rule.priority == 5

    def test_invalid_severity_becomes_warning(self, make_section, fixed_now):
        """Unknown severities become warnings."""
        rule = rule_from_payload(payload(severity="fatal"), make_section(), fixed_now)
        assert rule.severity == "warning"

    def test_confidence_from_detection_block(self, make_section, fixed_now):
        """Confidence and pattern are read from a nested detection block."""
        record = payload(detection={"confidence": 0.65, "pattern": "p"})
        del record["confidence"]
        del record["detection_pattern"]
        rule = rule_from_payload(record, make_section(), fixed_now)

        assert rule.detection.confidence == 0.65
        assert rule.detection.pattern == "p"

    def test_confidence_clamped(self, make_section, fixed_now):
        """Confidence is clamped to [0, 1]."""
        assert rule_from_payload(payload(confidence=1.7), make_section(), fixed_now).detection.confidence == 1.0
        assert rule_from_payload(payload(confidence=-2), make_section(), fixed_now).detection.confidence == 0.0
