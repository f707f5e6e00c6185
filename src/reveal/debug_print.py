from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

from contracts.fragments import FragmentDocument
from contracts.reveal import RevealResult

from .geometry import fragment_bbox


def _load_json(p: Path) -> dict[str, Any]:
    return json.loads(p.read_text(encoding="utf-8"))


def _bbox_str(b: Any) -> str:
    # b is contracts.fragments.BBox
    return f"({b.left:.1f},{b.top:.1f})-({b.right:.1f},{b.bottom:.1f})"


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog="reveal-debug-print")
    ap.add_argument("--fragments", required=True, type=Path, help="Fragments manifest JSON artifact.")
    ap.add_argument("--regions", required=True, type=Path, help="Regions JSON artifact.")
    ap.add_argument("--show-fragments", action="store_true", help="Also list every fragment with its bbox.")
    args = ap.parse_args(argv)

    document = FragmentDocument.from_dict(_load_json(args.fragments))
    reveal = RevealResult.from_dict(_load_json(args.regions))
    regions_by_page = reveal.regions_by_page()

    for page in document.pages:
        regions = regions_by_page.get(page.page_num, [])
        print(f"\n=== PAGE {page.page_num:03d} ===")
        print(f"fragments={len(page.fragments)} regions={len(regions)}")

        if args.show_fragments:
            print("\n-- FRAGMENTS (content order) --")
            for i, frag in enumerate(page.fragments):
                b = fragment_bbox(frag, page.viewport)
                where = "<not positionable>" if b is None else _bbox_str(b)
                print(f"  [{i:04d}] {where} text={frag.text!r}")

        print("\n-- REGIONS --")
        for r in regions:
            anchor = page.fragments[r.fragment_index].text.strip() if r.fragment_index < len(page.fragments) else "?"
            print(f"{r.region_id} bbox={_bbox_str(r.bbox)} pattern={r.pattern!r} :: {anchor}")

    skipped = reveal.meta.get("skipped_matches") or []
    if skipped:
        print("\n-- SKIPPED MATCHES --")
        for s in skipped:
            print(f"page={s.get('page_num')} fragment={s.get('fragment_index')} reason={s.get('reason')}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
