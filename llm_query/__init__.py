"""
llm_query: prompty, integracja z Gemini i parsowanie reguł stylu.

Publiczne API:
  build_system_prompt(document_type, language)           -> str
  build_section_prompt(section, confidence_threshold)    -> str
  call_gemini(prompt, model, api_key, system_prompt=...) -> str
  gemini_rule_model(model, api_key)                      -> Callable[[str, str], str]
  parse_rules_response(raw, section, now)                -> list[StyleRule]
  upsert_rules(conn, rules)                              -> int
"""

from .prompt import (
    build_system_prompt,
    build_section_prompt,
    MAX_RULES_PER_SECTION,
    TEMPLATES_DIR,
)
from .gemini import call_gemini, gemini_rule_model, DEFAULT_MODEL
from .rules import (
    AI_PUBLICATION,
    find_json_object,
    parse_rules_response,
    rule_from_payload,
    upsert_rules,
)

__all__ = [
    "build_system_prompt",
    "build_section_prompt",
    "MAX_RULES_PER_SECTION",
    "TEMPLATES_DIR",
    "call_gemini",
    "gemini_rule_model",
    "DEFAULT_MODEL",
    "AI_PUBLICATION",
    "find_json_object",
    "parse_rules_response",
    "rule_from_payload",
    "upsert_rules",
]
