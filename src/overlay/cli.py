from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from contracts.fragments import FragmentDocument
from contracts.reveal import RevealResult

from .config import OverlayConfig
from .module import run_overlay


def _build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="reveal-overlay",
        description="Render click-to-reveal answer masks over page images (fragments + regions -> HTML).",
    )
    p.add_argument("--fragments", required=True, type=Path, help="Fragments manifest JSON artifact.")
    p.add_argument("--regions", required=True, type=Path, help="Regions JSON artifact.")
    p.add_argument("--out-dir", required=True, type=Path, help="Directory for reveal.html (and masked images).")
    p.add_argument(
        "--images-root",
        type=Path,
        default=None,
        help="Root that page image_relpath values are relative to. Default: the fragments manifest's directory.",
    )
    p.add_argument("--pad-px", type=float, default=4.0)
    p.add_argument("--mask-color", default="#2b2f36")
    p.add_argument("--title", default="Answer key")
    p.add_argument("--masked-images", action="store_true", help="Also write statically masked page PNGs.")
    p.add_argument("--log-level", default="WARNING")
    return p


def main(argv: list[str] | None = None) -> int:
    args = _build_arg_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    document = FragmentDocument.from_dict(json.loads(args.fragments.read_text(encoding="utf-8")))
    reveal = RevealResult.from_dict(json.loads(args.regions.read_text(encoding="utf-8")))

    cfg = OverlayConfig(
        pad_px=args.pad_px,
        mask_color=args.mask_color,
        render_masked_images=args.masked_images,
        title=args.title,
    )
    images_root = args.images_root if args.images_root is not None else args.fragments.parent

    result = run_overlay(document=document, reveal=reveal, images_root=images_root, out_dir=args.out_dir, config=cfg)

    summary = {
        "ok": result.ok,
        "html_file": None if result.html_file is None else str(result.html_file),
        "masked_images": len(result.masked_images),
        "warnings": len(result.warnings),
    }
    print(json.dumps(summary, sort_keys=True, separators=(",", ":"), ensure_ascii=False))

    return 0 if result.ok else 2


if __name__ == "__main__":
    raise SystemExit(main())
