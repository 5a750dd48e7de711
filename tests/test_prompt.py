"""Tests for prompt templates."""

from data_model import DocumentType
from llm_query.prompt import build_section_prompt, build_system_prompt


class TestBuildSystemPrompt:
    """Tests for build_system_prompt."""

    def test_spanish_style_guide(self):
        """Spanish style guides get the Spanish template with every placeholder filled."""
        prompt = build_system_prompt(DocumentType.STYLE_GUIDE, "es")
        assert "español" in prompt
        assert "{{" not in prompt

    def test_english_principles(self):
        """English principles books get the English principles template."""
        prompt = build_system_prompt("principles", "en")
        assert "writing principles" in prompt
        assert "English" in prompt

    def test_unknown_language_uses_spanish_template(self):
        """Languages without a template fall back to Spanish."""
        prompt = build_system_prompt(DocumentType.STYLE_GUIDE, "pt")
        assert prompt.startswith("Eres")
        assert "pt" in prompt


class TestBuildSectionPrompt:
    """Tests for build_section_prompt."""

    def test_placeholders_filled(self, make_section):
        """Title, content, focus areas, confidence and rule cap are substituted."""
        section = make_section("Titulares", "Texto de la sección.", focus_areas=("verbos", "longitud"))
        prompt = build_section_prompt(section, 0.6, "es", max_rules=12)

        assert '"Titulares"' in prompt
        assert "Texto de la sección." in prompt
        assert "Áreas de interés: verbos, longitud" in prompt
        assert ">= 0.6" in prompt
        assert "Máximo 12 reglas" in prompt
        assert "{{" not in prompt

    def test_no_focus_areas(self, make_section):
        """The focus areas line is dropped when there are none."""
        prompt = build_section_prompt(make_section(), 0.5, "en")
        assert "Focus areas" not in prompt
        assert "{{" not in prompt

    def test_content_placeholders_not_expanded(self, make_section):
        """Placeholders inside section text stay literal."""
        section = make_section("Plantillas", "Usa {{SECTION_TITLE}} en el texto.")
        prompt = build_section_prompt(section, 0.6)
        assert "Usa {{SECTION_TITLE}} en el texto." in prompt
