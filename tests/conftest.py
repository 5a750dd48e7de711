"""Pytest configuration and fixtures."""

from datetime import datetime, timezone

import pytest

from data_model import (
    Detection,
    PageRange,
    RuleExamples,
    RuleSource,
    StyleRule,
    TextSection,
    TextSectionMetadata,
    TocConfiguration,
)

FIXED_NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_now():
    """Fixed UTC timestamp used as clock in extraction tests."""
    return FIXED_NOW


@pytest.fixture
def clock(fixed_now):
    """Clock callable returning fixed_now."""
    return lambda: fixed_now


@pytest.fixture
def make_rule(fixed_now):
    """Factory for complete StyleRule instances; keyword arguments override fields."""

    def _make(
        rule_id="R1",
        *,
        category="style",
        subcategory=None,
        name="Voz activa",
        description="Prefiere la voz activa frente a la pasiva.",
        confidence=0.8,
        detection_type="ai",
        publication="El País",
        priority=5,
        examples=True,
        timestamps=True,
    ):
        return StyleRule(
            id=rule_id,
            category=category,
            subcategory=subcategory,
            name=name,
            description=description,
            severity="warning",
            detection=Detection(type=detection_type, confidence=confidence),
            examples=(
                RuleExamples(incorrect="Fue aprobado por el Gobierno.", correct="El Gobierno aprobó.")
                if examples else RuleExamples()
            ),
            source=RuleSource(publication=publication, section="Estilo"),
            priority=priority,
            created_at=fixed_now if timestamps else None,
            updated_at=fixed_now if timestamps else None,
        )

    return _make


@pytest.fixture
def make_section():
    """Factory for TextSection with sensible metadata defaults."""

    def _make(
        title="Estilo",
        content="El periodista debe escribir frases cortas. Evita la voz pasiva.",
        *,
        section_id="TITULO_I",
        subsection_id=None,
        priority=5,
        focus_areas=(),
        level=None,
    ):
        return TextSection(
            title=title,
            content=content,
            level=level if level is not None else (2 if subsection_id else 1),
            metadata=TextSectionMetadata(
                section_id=section_id,
                subsection_id=subsection_id,
                page_range=PageRange(1, 2),
                priority=priority,
                focus_areas=tuple(focus_areas),
            ),
        )

    return _make


@pytest.fixture
def make_config():
    """Factory for TocConfiguration from camelCase section dicts."""

    def _make(sections, **extra):
        data = {
            "documentId": extra.pop("documentId", "test-doc"),
            "name": extra.pop("name", "Manual de Prueba"),
            "sections": sections,
        }
        data.update(extra)
        return TocConfiguration.from_dict(data)

    return _make


@pytest.fixture
def paged_text():
    """
    Factory building a document of `pages` pages with `lines_per_page`
    unique lines each (no repeated headers unless added by the test).
    """

    def _make(pages=10, lines_per_page=5):
        lines = [
            f"Página {p} línea {i}: texto de ejemplo sobre el estilo periodístico."
            for p in range(1, pages + 1)
            for i in range(1, lines_per_page + 1)
        ]
        return "\n".join(lines)

    return _make
