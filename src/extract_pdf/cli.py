from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .artifacts import write_fragments_manifest_json
from .contracts import ExtractPdfConfig
from .module import run_extract_pdf_relpath


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="reveal-extract-pdf",
        description="Extract positioned text fragments (+ page images) from a PDF into a JSON manifest.",
    )
    p.add_argument("--data-root", required=True, type=Path, help="Resolved DATA_ROOT path.")
    p.add_argument("--pdf-relpath", required=True, help="PDF path relative to --data-root.")
    p.add_argument("--out-root", required=True, type=Path, help="Explicit output root for page images.")
    p.add_argument("--out-manifest", required=True, type=Path, help="Output fragments manifest JSON file.")
    p.add_argument("--scale", type=float, default=1.5, help="Viewport scale in pixels per PDF point.")
    p.add_argument(
        "--page-selection",
        default=None,
        help='Optional page selection like "1,3-5". Default: all pages.',
    )
    p.add_argument("--no-images", action="store_false", dest="render_images", default=True)
    p.add_argument(
        "--compute-source-sha256",
        action="store_true",
        help="Include SHA-256 of the source PDF for auditing.",
    )
    p.add_argument("--log-level", default="WARNING")
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    config = ExtractPdfConfig(
        data_root=args.data_root,
        out_root=args.out_root,
        scale=args.scale,
        page_selection=args.page_selection,
        render_images=args.render_images,
        compute_source_sha256=args.compute_source_sha256,
    )

    result = run_extract_pdf_relpath(config=config, pdf_relpath=args.pdf_relpath)
    write_fragments_manifest_json(result=result, out_manifest=args.out_manifest)

    return 0 if result.ok else 2


if __name__ == "__main__":
    raise SystemExit(main())
