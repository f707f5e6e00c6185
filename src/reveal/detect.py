from __future__ import annotations

import logging
from typing import Any

from contracts.fragments import FragmentDocument, FragmentPage
from contracts.reveal import AnswerRegion, RevealPageResult, RevealResult

from .config import RevealConfig
from .geometry import fragment_bbox
from .matcher import find_pattern_matches
from .region_builder import build_answer_bbox

logger = logging.getLogger(__name__)

_REVEAL_VERSION = "answer_regions_v1"


def _fmt_region_id(page_num: int, idx: int) -> str:
    return f"p{page_num:03d}_a{idx:06d}"


def _detect_page(
    page: FragmentPage, patterns: list[str], config: RevealConfig
) -> tuple[RevealPageResult, list[dict[str, Any]]]:
    matches = find_pattern_matches(page.fragments, patterns)

    regions: list[AnswerRegion] = []
    skipped: list[dict[str, Any]] = []
    for m in matches:
        built = build_answer_bbox(
            page.fragments,
            m,
            viewport=page.viewport,
            patterns=patterns,
            config=config,
        )
        if built.bbox is None:
            logger.debug(
                "page %d: match at fragment %d skipped (%s)", page.page_num, m.fragment_index, built.skip_reason
            )
            skipped.append(
                {"page_num": page.page_num, "fragment_index": m.fragment_index, "reason": built.skip_reason}
            )
            continue
        regions.append(
            AnswerRegion(
                region_id=_fmt_region_id(page.page_num, len(regions)),
                page_num=page.page_num,
                fragment_index=m.fragment_index,
                pattern=m.pattern,
                bbox=built.bbox,
            )
        )

    return RevealPageResult(page_num=page.page_num, matches=matches, regions=regions), skipped


def detect_page_regions(
    page: FragmentPage, patterns: list[str], config: RevealConfig | None = None
) -> list[AnswerRegion]:
    """
    Answer regions for one page, in fragment order.

    Pure function of (fragments, patterns, viewport, config); regions are
    computed independently per match.
    """

    result, _ = _detect_page(page, patterns, config or RevealConfig())
    return result.regions


def run_reveal(
    document: FragmentDocument,
    patterns: list[str],
    config: RevealConfig,
    *,
    source_fragments_relpath: str | None = None,
) -> RevealResult:
    config.validate()

    errors: list[str] = []
    if not document.ok:
        errors.append("REVEAL_SOURCE_NOT_OK")

    meta: dict[str, Any] = {
        "stage": "reveal",
        "version": _REVEAL_VERSION,
        "reveal_config": config.to_dict(),
        "patterns": list(patterns),
        "counts": {},
        "skipped_matches": [],
    }

    pages: list[RevealPageResult] = []
    for page in document.pages:
        page_result, skipped = _detect_page(page, patterns, config)
        pages.append(page_result)
        meta["skipped_matches"].extend(skipped)

        positionable = sum(1 for f in page.fragments if fragment_bbox(f, page.viewport) is not None)
        meta["counts"][f"page_{page.page_num:03d}"] = {
            "fragments_in": len(page.fragments),
            "fragments_positionable": positionable,
            "matches": len(page_result.matches),
            "regions": len(page_result.regions),
        }
        logger.debug(
            "page %d: %d fragments, %d matches, %d regions",
            page.page_num,
            len(page.fragments),
            len(page_result.matches),
            len(page_result.regions),
        )

    meta["skipped_matches"] = sorted(
        meta["skipped_matches"],
        key=lambda d: (int(d["page_num"]), int(d["fragment_index"]), str(d["reason"])),
    )

    return RevealResult(
        ok=len(errors) == 0,
        errors=errors,
        meta=meta,
        pages=sorted(pages, key=lambda p: p.page_num),
        source_fragments_relpath=source_fragments_relpath,
        doc_id=document.doc_id,
    )
