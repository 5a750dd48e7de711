"""
llm_query/prompt.py: budowanie promptów dla ekstraktora reguł stylu.

Szablony (templates-schemas/):
  prompt-system.<lang>.md    rola + rodzaj dokumentu + język
  prompt-section.<lang>.md   tytuł i treść sekcji, próg pewności, limit reguł

Funkcje publiczne:
  build_system_prompt(document_type, language)              -> str
  build_section_prompt(section, confidence_threshold, ...)  -> str
"""

from __future__ import annotations

import pathlib

from data_model import DocumentType, TextSection

ROOT          = pathlib.Path(__file__).resolve().parent.parent
TEMPLATES_DIR = ROOT / "templates-schemas"

MAX_RULES_PER_SECTION = 20

_SUPPORTED_LANGUAGES = ("es", "en")

_LANGUAGE_NAMES = {
    "es": {"es": "español", "en": "inglés"},
    "en": {"es": "Spanish", "en": "English"},
}

_DOCUMENT_TYPE_NAMES = {
    "es": {
        DocumentType.STYLE_GUIDE: "manual de estilo periodístico",
        DocumentType.PRINCIPLES:  "principios de escritura",
    },
    "en": {
        DocumentType.STYLE_GUIDE: "a journalistic style manual",
        DocumentType.PRINCIPLES:  "writing principles",
    },
}

_FOCUS_LABEL = {"es": "Áreas de interés", "en": "Focus areas"}


def _template_language(language: str) -> str:
    return language if language in _SUPPORTED_LANGUAGES else "es"


def _load_template(name: str, language: str) -> str:
    path = TEMPLATES_DIR / f"{name}.{_template_language(language)}.md"
    if not path.exists():
        raise FileNotFoundError(f"Brak pliku szablonu: {path}")
    return path.read_text(encoding="utf-8").strip()


def build_system_prompt(document_type: DocumentType | str, language: str = "es") -> str:
    """Prompt systemowy: rola redaktora, rodzaj dokumentu i jego język."""
    tl = _template_language(language)
    doc_type = DocumentType(document_type)
    return (
        _load_template("prompt-system", language)
        .replace("{{LANGUAGE}}",      _LANGUAGE_NAMES[tl].get(language, language))
        .replace("{{DOCUMENT_TYPE}}", _DOCUMENT_TYPE_NAMES[tl][doc_type])
    )


def build_section_prompt(
    section: TextSection,
    confidence_threshold: float,
    language: str = "es",
    max_rules: int = MAX_RULES_PER_SECTION,
) -> str:
    """
    Prompt dla jednej sekcji.

    Args:
        section:              Sekcja (treść już przycięta do budżetu tokenów).
        confidence_threshold: Minimalna pewność reguł zwracanych przez model.
        language:             Język szablonu ("es" | "en").
        max_rules:            Limit reguł na sekcję.
    """
    focus = ""
    if section.metadata.focus_areas:
        label = _FOCUS_LABEL[_template_language(language)]
        focus = f"{label}: {', '.join(section.metadata.focus_areas)}\n"

    return (
        _load_template("prompt-section", language)
        .replace("{{SECTION_TITLE}}",        section.title)
        .replace("{{FOCUS_AREAS}}",          focus)
        .replace("{{CONFIDENCE_THRESHOLD}}", f"{confidence_threshold:g}")
        .replace("{{MAX_RULES}}",            str(max_rules))
        .replace("{{CONTENT}}",              section.content)
    )
