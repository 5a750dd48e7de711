"""
extraction/orchestrator.py: ekstrakcja reguł z całego dokumentu według ToC.

Architektura:
  config + tekst → slice_document() → {section_id: [TextSection]}
  → CachedRuleExtractor.extract() per sekcja → stemplowanie pochodzenia
  → ExtractionResult (rulesBySection, allRules, statistics)

Kluczowe API:
  TocGuidedExtractor(extractor).run(config, document_text, total_pages) -> ExtractionResult
  TocGuidedExtractor(extractor).extract_pdf(config, pdf_path)           -> ExtractionResult
  save_result(result, out_dir)                                          -> Path
"""

from __future__ import annotations

import time
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Callable

from rich.console import Console

from data_model import (
    DEFAULT_PRIORITY,
    ExtractionResult,
    ExtractionSource,
    SectionRules,
    SectionStat,
    StyleRule,
    SubsectionRules,
    TextSection,
    TocConfiguration,
    TocSection,
    utcnow,
)
from extraction.atomic import write_json_atomic
from extraction.extractor import CachedRuleExtractor, ExtractionOptions
from pdf.decoder import decode_pdf
from pdf.page_mapping import PageTextStrategy
from pdf.slicer import slice_document

console = Console(stderr=True)

DEFAULT_MAX_SECTIONS_PER_SECTION = 20
SECTION_MAX_TOKENS = 12000
DEFAULT_CONFIDENCE_THRESHOLD = 0.6

RESULT_SUFFIX = "-toc-guided-rules.json"


class TocGuidedExtractor:
    def __init__(
        self,
        extractor: CachedRuleExtractor,
        strategy: PageTextStrategy | None = None,
        clock: Callable[[], datetime] = utcnow,
        timer: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.extractor = extractor
        self.strategy = strategy
        self.clock = clock
        self.timer = timer

    def extract_pdf(self, config: TocConfiguration, pdf_path: str | Path) -> ExtractionResult:
        """Dekoduje PDF i uruchamia run(). Błędy dekodera przerywają dokument."""
        console.print(f"[bold]Ekstrakcja ToC:[/bold] {config.name} [dim]({pdf_path})[/dim]")
        doc = decode_pdf(pdf_path)
        console.print(f"[dim]  PDF: {doc.numpages} stron[/dim]")
        return self.run(config, doc.text, doc.numpages)

    def run(
        self,
        config: TocConfiguration,
        document_text: str,
        total_pages: int,
    ) -> ExtractionResult:
        sliced = slice_document(document_text, total_pages, config, self.strategy)

        rules_by_section: dict[str, SectionRules] = {}
        all_rules: list[StyleRule] = []
        stats: list[SectionStat] = []
        subsections_processed = 0

        for section_id, text_sections in sliced.items():
            section = config.find_section(section_id)
            if section is None:
                continue

            started = self.timer()
            rules = self._extract_section(config, section, text_sections)
            elapsed = self.timer() - started

            subsections_processed += sum(1 for ts in text_sections if ts.level == 2)
            all_rules.extend(rules)
            rules_by_section[section_id] = SectionRules(
                section_title=section.title,
                page_range=section.page_range,
                rules=rules,
                subsections=_group_by_subsection(section, text_sections, rules),
            )
            stats.append(SectionStat(
                section_id=section_id,
                title=section.title,
                rules_count=len(rules),
                processing_time=elapsed,
            ))

        result = ExtractionResult(
            source=ExtractionSource(
                name=config.name,
                document_id=config.document_id,
                extracted_at=self.clock(),
                total_pages=total_pages,
                sections_processed=len(sliced),
                subsections_processed=subsections_processed,
            ),
            rules_by_section=rules_by_section,
            all_rules=all_rules,
            section_stats=stats,
        )
        console.print(
            f"[green]Zakończono:[/green] {result.total_rules_extracted} reguł "
            f"z {len(sliced)} sekcji"
        )
        return result

    def _extract_section(
        self,
        config: TocConfiguration,
        section: TocSection,
        text_sections: list[TextSection],
    ) -> list[StyleRule]:
        console.print(
            f"[bold]{section.id}[/bold] {section.title} "
            f"[dim](strony {section.page_range}, {len(text_sections)} fragmentów)[/dim]"
        )
        try:
            rules = self.extractor.extract(text_sections, _section_options(config, section))
        except Exception as exc:
            console.print(f"[red]Błąd sekcji {section.id}:[/red] {exc}")
            return []

        return [_stamp(rule, config, section) for rule in rules]


def _section_options(config: TocConfiguration, section: TocSection) -> ExtractionOptions:
    eo = section.extraction_options
    threshold = config.extraction_options.confidence_threshold
    return ExtractionOptions(
        max_sections_per_run=(eo.max_sections_to_process if eo and eo.max_sections_to_process
                              else DEFAULT_MAX_SECTIONS_PER_SECTION),
        max_tokens_per_section=SECTION_MAX_TOKENS,
        document_type=config.document_type,
        language=config.language,
        confidence_threshold=threshold if threshold is not None else DEFAULT_CONFIDENCE_THRESHOLD,
    )


def _stamp(rule: StyleRule, config: TocConfiguration, section: TocSection) -> StyleRule:
    """Nowa reguła z pochodzeniem dokumentu i sekcji; wejście bez zmian."""
    return replace(
        rule,
        source=replace(
            rule.source,
            publication=config.name,
            section=section.title,
            section_id=section.id,
        ),
        priority=rule.priority or section.priority or DEFAULT_PRIORITY,
    )


def _group_by_subsection(
    section: TocSection,
    text_sections: list[TextSection],
    rules: list[StyleRule],
) -> dict[str, SubsectionRules]:
    grouped: dict[str, SubsectionRules] = {}
    titles = {sub.id: sub.title for sub in section.subsections}
    for ts in text_sections:
        sub_id = ts.metadata.subsection_id
        if ts.level != 2 or sub_id is None:
            continue
        grouped[sub_id] = SubsectionRules(
            title=titles.get(sub_id, ts.title),
            page_range=ts.metadata.page_range,
            rules=[r for r in rules if r.source.subsection_id == sub_id],
        )
    return grouped


# ---------------------------------------------------------------------------
# Zapis wyniku
# ---------------------------------------------------------------------------

def result_path(out_dir: str | Path, document_id: str) -> Path:
    return Path(out_dir) / f"{document_id}{RESULT_SUFFIX}"


def save_result(result: ExtractionResult, out_dir: str | Path) -> Path:
    """Zapisuje wynik do <out_dir>/<documentId>-toc-guided-rules.json (atomowo)."""
    return write_json_atomic(result.to_dict(), result_path(out_dir, result.source.document_id))
