from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from contracts.reveal import RevealResult


def serialize_reveal_result(result: RevealResult) -> str:
    payload: dict[str, Any] = result.to_dict()
    return (
        json.dumps(payload, ensure_ascii=False, sort_keys=True, separators=(",", ":"), indent=2)
        + "\n"
    )


def write_reveal_json_artifact(*, result: RevealResult, out_file: Path) -> None:
    out_file.parent.mkdir(parents=True, exist_ok=True)
    out_file.write_text(serialize_reveal_result(result), encoding="utf-8")
