from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .contracts import ExtractPdfResult


def serialize_extract_result(result: ExtractPdfResult) -> str:
    payload: dict[str, Any] = result.to_dict()
    return json.dumps(payload, ensure_ascii=False, sort_keys=True, indent=2) + "\n"


def write_fragments_manifest_json(*, result: ExtractPdfResult, out_manifest: Path) -> None:
    out_manifest.parent.mkdir(parents=True, exist_ok=True)
    out_manifest.write_text(serialize_extract_result(result), encoding="utf-8")
