"""
merge: scalanie reguł z wielu dokumentów, wybór według typu tekstu,
statystyki i raport rules.json.

Typowe użycie:
    from merge import RuleMerger, MergeOptions, load_sources, build_merged_output
    from validator import RuleValidator

    sources = load_sources(paths)
    merged  = RuleMerger().merge([s.rules for s in sources],
                                 MergeOptions(source_priority=("El País",)))
    report  = RuleValidator().validate(merged)
"""

from .merger import (
    MergeOptions,
    RuleMerger,
    normalize_text,
    rule_signature,
    source_priority_index,
    weighting_factor,
)
from .stats import rule_statistics, priority_range
from .text_type import (
    PRIORITY_RULES,
    TEXT_TYPE_PROFILES,
    EssentialCheck,
    TextTypeProfile,
    check_essential_rules,
    filter_rules_by_priority,
    profile_for,
    reorganize_by_text_type,
    rules_for_text_type,
    text_type_report,
)
from .output import (
    LoadedSource,
    load_extraction_result,
    load_sources,
    build_merged_output,
    write_json_atomic,
)

__all__ = [
    "MergeOptions",
    "RuleMerger",
    "normalize_text",
    "rule_signature",
    "source_priority_index",
    "weighting_factor",
    "rule_statistics",
    "priority_range",
    "PRIORITY_RULES",
    "TEXT_TYPE_PROFILES",
    "EssentialCheck",
    "TextTypeProfile",
    "check_essential_rules",
    "filter_rules_by_priority",
    "profile_for",
    "reorganize_by_text_type",
    "rules_for_text_type",
    "text_type_report",
    "LoadedSource",
    "load_extraction_result",
    "load_sources",
    "build_merged_output",
    "write_json_atomic",
]
