from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from contracts.fragments import FragmentDocument

from .artifacts import write_reveal_json_artifact
from .config import RevealConfig
from .detect import run_reveal
from .matcher import load_patterns_file, normalize_patterns


def _build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="reveal-detect",
        description="Detect answer regions after marker patterns (fragments JSON -> regions JSON).",
    )
    p.add_argument("--input", required=True, type=Path, help="Path to a fragments manifest JSON artifact.")
    p.add_argument("--output", required=True, type=Path, help="Path to write the regions JSON artifact.")
    p.add_argument(
        "--pattern",
        action="append",
        default=[],
        help='Marker pattern, e.g. "answer:". Repeatable; order decides precedence.',
    )
    p.add_argument("--patterns-file", type=Path, default=None, help="One pattern per line (appended after --pattern).")
    p.add_argument("--start-pad-px", type=float, default=4.0)
    p.add_argument("--right-margin-ratio", type=float, default=0.92)
    p.add_argument("--column-tolerance-px", type=float, default=5.0)
    p.add_argument("--above-tolerance-k", type=float, default=0.3)
    p.add_argument("--prev-line-band-k", type=float, default=2.0)
    p.add_argument("--top-gap-k", type=float, default=0.3)
    p.add_argument("--continuation-k", type=float, default=1.5)
    p.add_argument("--region-pad-px", type=float, default=2.0)
    p.add_argument("--log-level", default="WARNING")
    return p


def main(argv: list[str] | None = None) -> int:
    args = _build_arg_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    raw_patterns = list(args.pattern)
    if args.patterns_file is not None:
        raw_patterns.extend(load_patterns_file(args.patterns_file))
    patterns = normalize_patterns(raw_patterns)

    raw = json.loads(args.input.read_text(encoding="utf-8"))
    document = FragmentDocument.from_dict(raw)

    cfg = RevealConfig(
        start_pad_px=args.start_pad_px,
        right_margin_ratio=args.right_margin_ratio,
        column_tolerance_px=args.column_tolerance_px,
        above_tolerance_k=args.above_tolerance_k,
        prev_line_band_k=args.prev_line_band_k,
        top_gap_k=args.top_gap_k,
        continuation_k=args.continuation_k,
        region_pad_px=args.region_pad_px,
    )

    result = run_reveal(document, patterns, cfg, source_fragments_relpath=str(args.input))
    write_reveal_json_artifact(result=result, out_file=args.output)

    summary = {
        "ok": result.ok,
        "pages": len(result.pages),
        "patterns": len(patterns),
        "matches": sum(len(p.matches) for p in result.pages),
        "regions": sum(len(p.regions) for p in result.pages),
    }
    print(json.dumps(summary, sort_keys=True, separators=(",", ":"), ensure_ascii=False))

    return 0 if result.ok else 2


if __name__ == "__main__":
    raise SystemExit(main())
