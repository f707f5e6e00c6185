"""
Answer-region inference for a single pattern match.

A match yields no region in two cases, both reported as a skip reason
rather than raised: the anchor fragment cannot be positioned (zero width,
blank text, or a degenerate transform), or the interpolated answer start
already lies past the fixed right margin. Every other match yields exactly
one region with `left <= right` and `top <= bottom`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace

from contracts.fragments import BBox, TextFragment, Viewport
from contracts.reveal import PatternMatch

from .config import RevealConfig
from .geometry import fragment_bbox
from .matcher import contains_any_pattern

# Leading list markers used as stopping boundaries: "1. ", "12) ", "(a) ", "[b] ", "c. ".
_NUMBERED_LABEL_RE = re.compile(r"^\d+[.)]\s")
_LETTERED_LABEL_RE = re.compile(r"^[(\[]?[a-z][)\].]\s")

SKIP_ANCHOR_NOT_POSITIONABLE = "anchor_not_positionable"
SKIP_START_PAST_MARGIN = "answer_start_past_margin"


def is_section_label(text: str) -> bool:
    s = text.strip()
    return bool(_NUMBERED_LABEL_RE.match(s) or _LETTERED_LABEL_RE.match(s))


@dataclass(frozen=True, slots=True)
class RegionBuild:
    bbox: BBox | None
    skip_reason: str | None = None


@dataclass(frozen=True, slots=True)
class _UpwardScan:
    # Tracked line above the match (top/bottom), and whether the scan has terminated.
    line_top: float | None = None
    line_bottom: float | None = None
    done: bool = False


def _is_above(b: BBox, anchor: BBox, font_height: float, cfg: RevealConfig) -> bool:
    return anchor.top - b.bottom > cfg.above_tolerance_k * font_height


def _in_answer_column(b: BBox, answer_left: float, cfg: RevealConfig) -> bool:
    return b.left >= answer_left - cfg.column_tolerance_px


def _upward_step(
    acc: _UpwardScan,
    *,
    text: str,
    b: BBox,
    anchor: BBox,
    answer_left: float,
    font_height: float,
    cfg: RevealConfig,
) -> _UpwardScan:
    above = _is_above(b, anchor, font_height, cfg)
    if not above and not _in_answer_column(b, answer_left, cfg):
        return acc

    if above:
        if acc.line_top is None or acc.line_bottom is None:
            return _UpwardScan(line_top=b.top, line_bottom=b.bottom)
        if abs(b.top - acc.line_top) > cfg.prev_line_band_k * font_height:
            return replace(acc, done=True)
        # Wrapped line of the same block: the topmost one becomes the tracked line.
        if b.top < acc.line_top:
            return _UpwardScan(line_top=b.top, line_bottom=b.bottom)
        return acc

    if is_section_label(text):
        return replace(acc, line_bottom=b.bottom, done=True)
    return acc


def _scan_upward(
    fragments: list[TextFragment],
    *,
    match_index: int,
    viewport: Viewport,
    anchor: BBox,
    answer_left: float,
    cfg: RevealConfig,
) -> float | None:
    """
    Fold over the fragments preceding the match (nearest first).

    Returns the bottom edge of the boundary line above the answer, if any.
    """

    font_height = anchor.height()
    acc = _UpwardScan()
    for i in range(match_index - 1, -1, -1):
        frag = fragments[i]
        if frag.text.strip() == "":
            continue
        b = fragment_bbox(frag, viewport)
        if b is None:
            continue
        acc = _upward_step(
            acc,
            text=frag.text,
            b=b,
            anchor=anchor,
            answer_left=answer_left,
            font_height=font_height,
            cfg=cfg,
        )
        if acc.done:
            break
    return acc.line_bottom


def _ends_answer(text: str, b: BBox, *, anchor: BBox, patterns: list[str], cfg: RevealConfig) -> bool:
    if b.top > anchor.bottom + cfg.continuation_k * anchor.height():
        return True
    if is_section_label(text):
        return True
    return contains_any_pattern(text, patterns)


def _scan_downward(
    fragments: list[TextFragment],
    *,
    match_index: int,
    viewport: Viewport,
    anchor: BBox,
    answer_left: float,
    patterns: list[str],
    cfg: RevealConfig,
) -> float:
    answer_bottom = anchor.bottom
    for frag in fragments[match_index + 1 :]:
        if frag.text.strip() == "":
            continue
        b = fragment_bbox(frag, viewport)
        if b is None:
            continue
        if _ends_answer(frag.text, b, anchor=anchor, patterns=patterns, cfg=cfg):
            break
        if _in_answer_column(b, answer_left, cfg) and b.bottom > answer_bottom:
            answer_bottom = b.bottom
    return answer_bottom


def build_answer_bbox(
    fragments: list[TextFragment],
    match: PatternMatch,
    *,
    viewport: Viewport,
    patterns: list[str],
    config: RevealConfig,
) -> RegionBuild:
    """
    Infer the rectangle covering the answer that follows a marker.

    The answer starts just after the matched text (interpolated across the
    fragment width assuming uniform glyph widths), runs to a fixed right
    margin, starts below the nearest line/label above, and extends over
    continuation lines below until a label, another marker, or a large gap.
    """

    frag = fragments[match.fragment_index]
    anchor = fragment_bbox(frag, viewport)
    if anchor is None:
        return RegionBuild(bbox=None, skip_reason=SKIP_ANCHOR_NOT_POSITIONABLE)

    font_height = anchor.height()
    text_len = len(frag.text)
    ratio = (match.match_end / text_len) if text_len > 0 else 0.0
    answer_left = anchor.left + anchor.width() * ratio + config.start_pad_px
    right = viewport.width * config.right_margin_ratio
    if answer_left > right:
        return RegionBuild(bbox=None, skip_reason=SKIP_START_PAST_MARGIN)

    boundary_bottom = _scan_upward(
        fragments,
        match_index=match.fragment_index,
        viewport=viewport,
        anchor=anchor,
        answer_left=answer_left,
        cfg=config,
    )
    if boundary_bottom is not None:
        answer_top = boundary_bottom + config.top_gap_k * font_height
    else:
        answer_top = anchor.top - config.top_gap_k * font_height
    # A same-line label can sit lower than the match top; never start below the match.
    answer_top = min(answer_top, anchor.top)

    answer_bottom = _scan_downward(
        fragments,
        match_index=match.fragment_index,
        viewport=viewport,
        anchor=anchor,
        answer_left=answer_left,
        patterns=patterns,
        cfg=config,
    )

    pad = config.region_pad_px
    return RegionBuild(
        bbox=BBox(left=answer_left, top=answer_top - pad, right=right, bottom=answer_bottom + pad)
    )
