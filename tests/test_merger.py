"""Tests for merging rules from multiple documents."""

import pytest

from merge import MergeOptions, RuleMerger, normalize_text, rule_signature, source_priority_index
from merge.merger import weighting_factor


class TestHelpers:
    """Tests for signature and priority helpers."""

    def test_normalize_text(self):
        """Normalization lowercases, drops punctuation and collapses spaces."""
        assert normalize_text("  Evita   la VOZ pasiva! ") == "evita la voz pasiva"

    def test_normalize_keeps_accented_letters(self):
        """Accented letters survive normalization."""
        assert normalize_text("Acentuación: ¿qué?") == "acentuación qué"

    def test_signature_ignores_case_and_punctuation(self, make_rule):
        """Signatures ignore case and punctuation in the name."""
        a = make_rule("R1", name="Avoid passive voice")
        b = make_rule("R2", name="avoid passive voice!")
        assert rule_signature(a) == rule_signature(b)

    def test_signature_uses_description_prefix_only(self, make_rule):
        """Only the first 50 characters of the description count."""
        prefix = "x" * 50
        a = make_rule("R1", description=prefix + " final uno")
        b = make_rule("R2", description=prefix + " final dos")
        assert rule_signature(a) == rule_signature(b)

    def test_signature_depends_on_subcategory(self, make_rule):
        """Different subcategories give different signatures."""
        assert rule_signature(make_rule(subcategory="a")) != rule_signature(make_rule(subcategory="b"))

    def test_source_priority_index_substring_match(self):
        """Publications match priority entries by case-insensitive substring."""
        priority = ["El País", "Escritura Transparente"]
        assert source_priority_index("Libro de estilo de EL PAÍS", priority) == 0
        assert source_priority_index("Escritura Transparente - Chapters 4-10", priority) == 1
        assert source_priority_index("On Writing Well", priority) == 2

    def test_weighting_factors(self):
        """Factors drop by 0.05 per position."""
        assert [weighting_factor(i) for i in range(6)] == [1.0, 0.95, 0.9, 0.85, 0.8, 0.75]


class TestRuleMerger:
    """Tests for RuleMerger.merge."""

    def test_duplicate_keeps_higher_priority_source(self, make_rule):
        """A duplicate from a more trusted source replaces the kept rule."""
        description = "Use the active voice whenever the subject performs the action clearly."
        from_b = make_rule("B1", name="Avoid passive voice", description=description, publication="doc-b")
        from_a = make_rule("A1", name="Avoid passive voice", description=description, publication="doc-a")

        merged = RuleMerger().merge(
            [[from_b], [from_a]],
            MergeOptions(confidence_weighting=False, source_priority=("doc-a", "doc-b")),
        )

        assert [r.id for r in merged] == ["A1"]

    def test_duplicate_tie_keeps_first(self, make_rule):
        """On equal source priority the first rule wins."""
        merged = RuleMerger().merge(
            [[make_rule("first")], [make_rule("second")]],
            MergeOptions(confidence_weighting=False),
        )
        assert [r.id for r in merged] == ["first"]

    def test_weighting_by_source_index(self, make_rule):
        """Confidence is scaled by the source factor and the raw value is kept."""
        rule = make_rule("R1", confidence=0.9, publication="doc-c")
        [weighted] = RuleMerger().merge(
            [[rule]],
            MergeOptions(source_priority=("doc-a", "doc-b", "doc-c")),
        )
        assert weighted.confidence == pytest.approx(0.81)
        assert weighted.detection.raw_confidence == 0.9

    def test_unlisted_source_gets_default_factor(self, make_rule):
        """Unlisted sources get the factor after the last listed one."""
        options = MergeOptions(source_priority=("a", "b", "c", "d", "e"))
        [weighted] = RuleMerger().merge([[make_rule(confidence=0.8, publication="otro")]], options)
        assert weighted.confidence == pytest.approx(0.6)

    def test_empty_source_priority_keeps_confidence(self, make_rule):
        """An empty priority list leaves confidence unchanged."""
        [weighted] = RuleMerger().merge([[make_rule(confidence=0.8, publication="otro")]])
        assert weighted.confidence == pytest.approx(0.8)

    def test_weighting_is_idempotent(self, make_rule):
        """Weighting a merged set again does not lower confidence."""
        options = MergeOptions(source_priority=("a", "b", "doc-c"))
        once = RuleMerger().merge([[make_rule(confidence=0.9, publication="doc-c")]], options)
        twice = RuleMerger().merge([once], options)
        assert twice[0].confidence == pytest.approx(once[0].confidence)

    def test_deduplication_is_idempotent(self, make_rule):
        """Deduplicating a merged set changes nothing."""
        rules = [make_rule("R1"), make_rule("R2"), make_rule("R3", name="Otra regla")]
        options = MergeOptions(confidence_weighting=False)
        once = RuleMerger().merge([rules], options)
        twice = RuleMerger().merge([once], options)
        assert [r.id for r in twice] == [r.id for r in once] == ["R1", "R3"]

    def test_sorted_by_priority_with_none_last(self, make_rule):
        """Rules are stably sorted by priority with missing priorities last."""
        rules = [
            make_rule("p7", name="a", priority=7),
            make_rule("none", name="b", priority=None),
            make_rule("p1", name="c", priority=1),
            make_rule("p7b", name="d", priority=7),
        ]
        merged = RuleMerger().merge([rules], MergeOptions(confidence_weighting=False))
        assert [r.id for r in merged] == ["p1", "p7", "p7b", "none"]

    def test_options_disable_both_stages(self, make_rule):
        """Disabled stages leave rules and confidence untouched."""
        rules = [make_rule("R1", confidence=0.5), make_rule("R2", confidence=0.5)]
        merged = RuleMerger().merge(
            [rules], MergeOptions(deduplication=False, confidence_weighting=False),
        )
        assert [r.id for r in merged] == ["R1", "R2"]
        assert all(r.confidence == 0.5 for r in merged)

    def test_missing_confidence_left_unweighted(self, make_rule):
        """Rules without confidence are not weighted."""
        [merged] = RuleMerger().merge([[make_rule(confidence=None)]])
        assert merged.confidence is None

    def test_inputs_not_mutated(self, make_rule):
        """Merging never modifies the input rules or lists."""
        rule = make_rule("R1", confidence=0.9, publication="x")
        rules = [rule, make_rule("R2")]
        RuleMerger().merge([rules], MergeOptions(source_priority=("y",)))

        assert rule.confidence == 0.9
        assert rule.detection.raw_confidence is None
        assert [r.id for r in rules] == ["R1", "R2"]

    def test_empty_input(self):
        """Merging nothing gives an empty list."""
        assert RuleMerger().merge([]) == []
