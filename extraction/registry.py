"""
extraction/registry.py: rejestr dokumentów i wczytywanie konfiguracji ToC.

Pliki:
  toc-configs/documents.json   {documentId: {"config": "<plik>.json", "pdf": "<plik>.pdf"}}
  toc-configs/<id>.json        konfiguracja ToC (walidowana schematem JSON)
  templates-schemas/toc-config.schema.json

Publiczne API:
  list_document_ids()                 -> list[str]
  get_document_config(document_id)    -> TocConfiguration
  get_pdf_path(document_id, assets)   -> Path
  load_toc_config(path)               -> TocConfiguration
"""

from __future__ import annotations

import functools
import json
import pathlib
from typing import Any

import jsonschema

from data_model import TocConfiguration
from extraction.errors import TocConfigError, UnknownDocumentError

ROOT          = pathlib.Path(__file__).resolve().parent.parent
CONFIGS_DIR   = ROOT / "toc-configs"
REGISTRY_PATH = CONFIGS_DIR / "documents.json"
SCHEMA_PATH   = ROOT / "templates-schemas" / "toc-config.schema.json"


@functools.lru_cache(maxsize=1)
def _schema_validator() -> jsonschema.Draft202012Validator:
    schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
    return jsonschema.Draft202012Validator(schema)


def _read_json(path: pathlib.Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise TocConfigError(f"Brak pliku: {path}") from exc
    except json.JSONDecodeError as exc:
        raise TocConfigError(f"Niepoprawny JSON w {path.name}: {exc}") from exc


def load_toc_config(path: str | pathlib.Path) -> TocConfiguration:
    """
    Wczytuje i waliduje konfigurację ToC.

    Raises:
        TocConfigError: brak pliku, niepoprawny JSON, naruszenie schematu
                        albo zduplikowane identyfikatory sekcji.
    """
    p = pathlib.Path(path)
    data = _read_json(p)

    problems = []
    for e in _schema_validator().iter_errors(data):
        where = "/" + "/".join(str(x) for x in e.absolute_path) if e.absolute_path else "/"
        problems.append(f"{where}: {e.message}")
    if problems:
        raise TocConfigError(f"{p.name} narusza schemat:\n  " + "\n  ".join(problems))

    ids = [s["id"] for s in data["sections"]]
    dupes = sorted({i for i in ids if ids.count(i) > 1})
    if dupes:
        raise TocConfigError(f"{p.name}: zduplikowane id sekcji: {', '.join(dupes)}")

    return TocConfiguration.from_dict(data)


def _registry(registry_path: pathlib.Path = REGISTRY_PATH) -> dict[str, dict[str, str]]:
    data = _read_json(registry_path)
    if not isinstance(data, dict):
        raise TocConfigError(f"{registry_path.name}: oczekiwano obiektu JSON")
    return data


def list_document_ids(registry_path: pathlib.Path = REGISTRY_PATH) -> list[str]:
    return list(_registry(registry_path))


def _entry(document_id: str, registry_path: pathlib.Path) -> dict[str, str]:
    registry = _registry(registry_path)
    entry = registry.get(document_id)
    if entry is None:
        raise UnknownDocumentError(
            f"Brak konfiguracji dla dokumentu '{document_id}'. "
            f"Dostępne: {', '.join(registry) or '(brak)'}"
        )
    return entry


def get_document_config(
    document_id: str,
    registry_path: pathlib.Path = REGISTRY_PATH,
) -> TocConfiguration:
    """Raises UnknownDocumentError dla nieznanego identyfikatora."""
    entry = _entry(document_id, registry_path)
    return load_toc_config(registry_path.parent / entry["config"])


def get_pdf_path(
    document_id: str,
    assets_dir: str | pathlib.Path,
    registry_path: pathlib.Path = REGISTRY_PATH,
) -> pathlib.Path:
    entry = _entry(document_id, registry_path)
    return pathlib.Path(assets_dir) / entry["pdf"]
