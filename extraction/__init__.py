"""
extraction: cache, kolejka wywołań, ekstraktor reguł i orkiestrator ToC.

Moduły:
  errors        wyjątki pakietu
  settings      Settings ze zmiennych środowiskowych
  registry      rejestr dokumentów i konfiguracje ToC
  cache         RuleCache, FileRuleCache
  throttle      CallQueue, FixedDelay, ExponentialBackoff
  extractor     CachedRuleExtractor, ExtractionOptions
  orchestrator  TocGuidedExtractor, save_result

Podmoduły importuj bezpośrednio (pdf.decoder i llm_query.rules importują
extraction.errors).
"""
