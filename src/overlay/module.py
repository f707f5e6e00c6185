from __future__ import annotations

import html
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from PIL import Image, ImageDraw

from contracts.fragments import BBox, FragmentDocument, FragmentPage
from contracts.reveal import AnswerRegion, RevealResult

from .config import OverlayConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class OverlayBox:
    region_id: str
    left: float
    top: float
    width: float
    height: float


@dataclass(frozen=True, slots=True)
class OverlayResult:
    ok: bool
    html_file: Path | None
    masked_images: list[Path] = field(default_factory=list)
    warnings: list[dict[str, Any]] = field(default_factory=list)


def overlay_boxes(regions: list[AnswerRegion], *, pad_px: float) -> list[OverlayBox]:
    out: list[OverlayBox] = []
    for r in regions:
        b = r.bbox.padded(pad_px)
        out.append(OverlayBox(region_id=r.region_id, left=b.left, top=b.top, width=b.width(), height=b.height()))
    return out


_PAGE_CSS = """
body { margin: 0; background: #525659; font-family: sans-serif; }
header { color: #fff; padding: 8px 16px; }
.page-wrapper { position: relative; margin: 16px auto; background: #fff; box-shadow: 0 2px 8px rgba(0,0,0,.4); }
.page-wrapper img { position: absolute; left: 0; top: 0; width: 100%; height: 100%; }
.reveal { position: absolute; border: 0; padding: 0; cursor: pointer; background: var(--mask); }
.reveal:hover { outline: 2px solid #f0c040; }
.reveal.revealed { background: transparent; outline: 1px dashed #f0c040; }
"""

_PAGE_JS = """
document.addEventListener("click", function (e) {
  var t = e.target;
  if (t.classList && t.classList.contains("reveal")) { t.classList.toggle("revealed"); }
});
"""


def _px(v: float) -> str:
    return f"{v:.2f}px"


def _render_page_html(page: FragmentPage, regions: list[AnswerRegion], *, image_src: str | None, cfg: OverlayConfig) -> str:
    vp = page.viewport
    parts = [
        f'<div class="page-wrapper" id="page-{page.page_num}" style="width:{_px(vp.width)};height:{_px(vp.height)}">'
    ]
    if image_src is not None:
        parts.append(f'<img src="{html.escape(image_src)}" alt="page {page.page_num}">')
    for box in overlay_boxes(regions, pad_px=cfg.pad_px):
        parts.append(
            f'<button class="reveal" type="button" data-region-id="{html.escape(box.region_id)}" '
            f'title="Click to reveal" '
            f'style="left:{_px(box.left)};top:{_px(box.top)};width:{_px(box.width)};height:{_px(box.height)}"></button>'
        )
    parts.append("</div>")
    return "".join(parts)


def render_reveal_html(
    pages: list[FragmentPage],
    regions_by_page: dict[int, list[AnswerRegion]],
    *,
    image_srcs: dict[int, str],
    config: OverlayConfig,
) -> str:
    """
    Self-contained viewer page: page images with one clickable mask per answer region.
    """

    body = "\n".join(
        _render_page_html(
            p,
            regions_by_page.get(p.page_num, []),
            image_src=image_srcs.get(p.page_num),
            cfg=config,
        )
        for p in pages
    )
    title = html.escape(config.title)
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n<head>\n<meta charset="utf-8">\n'
        f"<title>{title}</title>\n"
        f"<style>:root {{ --mask: {html.escape(config.mask_color)}; }}{_PAGE_CSS}</style>\n"
        "</head>\n<body>\n"
        f"<header>{title}</header>\n"
        f"{body}\n"
        f"<script>{_PAGE_JS}</script>\n"
        "</body>\n</html>\n"
    )


def mask_page_image(
    *,
    image_file: Path,
    regions: list[AnswerRegion],
    out_file: Path,
    viewport_width: float,
    pad_px: float,
    fill: str,
) -> Path:
    """
    Paint every region (plus pad) opaque on a copy of the page image.

    Region coordinates are viewport pixels; they are rescaled if the image
    was rendered at a slightly different pixel width.
    """

    with Image.open(image_file) as src:
        img = src.convert("RGB")

    k = (img.width / viewport_width) if viewport_width > 0 else 1.0
    draw = ImageDraw.Draw(img)
    for r in regions:
        b: BBox = r.bbox.padded(pad_px)
        draw.rectangle([b.left * k, b.top * k, b.right * k, b.bottom * k], fill=fill)

    out_file.parent.mkdir(parents=True, exist_ok=True)
    img.save(out_file, format="PNG")
    return out_file


def run_overlay(
    *,
    document: FragmentDocument,
    reveal: RevealResult,
    images_root: Path,
    out_dir: Path,
    config: OverlayConfig,
) -> OverlayResult:
    config.validate()
    out_dir.mkdir(parents=True, exist_ok=True)

    regions_by_page = reveal.regions_by_page()
    warnings: list[dict[str, Any]] = []
    image_srcs: dict[int, str] = {}
    masked: list[Path] = []

    for page in document.pages:
        if page.image_relpath is None:
            warnings.append({"code": "OVERLAY_PAGE_IMAGE_MISSING", "detail": {"page_num": page.page_num}})
            continue
        image_file = (images_root / page.image_relpath).resolve()
        if not image_file.exists():
            warnings.append(
                {
                    "code": "OVERLAY_PAGE_IMAGE_NOT_FOUND",
                    "detail": {"page_num": page.page_num, "image_relpath": page.image_relpath},
                }
            )
            continue
        image_srcs[page.page_num] = Path(os.path.relpath(image_file, out_dir.resolve())).as_posix()

        if config.render_masked_images:
            masked.append(
                mask_page_image(
                    image_file=image_file,
                    regions=regions_by_page.get(page.page_num, []),
                    out_file=out_dir / f"masked_page_{page.page_num:03d}.png",
                    viewport_width=page.viewport.width,
                    pad_px=config.pad_px,
                    fill=config.mask_color,
                )
            )

    for w in warnings:
        logger.warning("%s: %s", w["code"], w["detail"])

    html_file = out_dir / "reveal.html"
    html_file.write_text(
        render_reveal_html(document.pages, regions_by_page, image_srcs=image_srcs, config=config),
        encoding="utf-8",
    )

    return OverlayResult(ok=True, html_file=html_file, masked_images=masked, warnings=warnings)
