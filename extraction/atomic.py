"""
extraction/atomic.py: atomowy zapis plików JSON.

Zapis do pliku tymczasowego w katalogu docelowym i os.replace; przerwany
zapis zostawia poprzednią wersję pliku. Pliki tymczasowe mają prefiks "."
i sufiks ".tmp", więc glob("*.json") ich nie widzi.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any


def write_json_atomic(payload: dict[str, Any], target: str | Path) -> Path:
    target = Path(target)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=target.parent, prefix=".", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
        os.replace(tmp, target)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
    return target
