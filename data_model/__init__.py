"""
data_model: struktury danych StyleMiner.

Użycie:
  from data_model import TocConfiguration, TextSection, StyleRule, ...

Moduły:
  common      PageRange, SectionId, pomocnicze funkcje czasu
  toc         TocConfiguration, TocSection, TocSubsection, opcje ekstrakcji
  documents   DecodedDocument, TextSection, TextSectionMetadata
  rules       StyleRule, Detection, RuleExamples, RuleSource, Severity, DetectionType
  results     CachedExtraction, ExtractionResult, SectionRules, SectionStat
"""

from .common import (
    SectionId,
    PageRange,
    utcnow,
    to_iso,
    from_iso,
    as_mapping,
    as_list,
)
from .toc import (
    DEFAULT_PRIORITY,
    TextType,
    DocumentType,
    PageMapping,
    TocExtractionOptions,
    SectionExtractionOptions,
    TocSubsection,
    TocSection,
    TocConfiguration,
)
from .documents import (
    DecodedDocument,
    TextSectionMetadata,
    TextSection,
)
from .rules import (
    RuleId,
    Severity,
    DetectionType,
    Detection,
    RuleExamples,
    RuleSource,
    StyleRule,
)
from .results import (
    CachedExtraction,
    SubsectionRules,
    SectionRules,
    SectionStat,
    ExtractionSource,
    ExtractionResult,
)

__all__ = [
    # common
    "SectionId",
    "PageRange",
    "utcnow",
    "to_iso",
    "from_iso",
    "as_mapping",
    "as_list",
    # toc
    "DEFAULT_PRIORITY",
    "TextType",
    "DocumentType",
    "PageMapping",
    "TocExtractionOptions",
    "SectionExtractionOptions",
    "TocSubsection",
    "TocSection",
    "TocConfiguration",
    # documents
    "DecodedDocument",
    "TextSectionMetadata",
    "TextSection",
    # rules
    "RuleId",
    "Severity",
    "DetectionType",
    "Detection",
    "RuleExamples",
    "RuleSource",
    "StyleRule",
    # results
    "CachedExtraction",
    "SubsectionRules",
    "SectionRules",
    "SectionStat",
    "ExtractionSource",
    "ExtractionResult",
]
