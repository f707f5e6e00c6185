from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from contracts.fragments import FragmentPage, TextFragment, Viewport

from .base import EngineRenderedPage, FragmentExtractionEngine

logger = logging.getLogger(__name__)


class Pypdfium2Engine(FragmentExtractionEngine):
    def backend_id(self) -> str:
        return "pypdfium2"

    def backend_version(self) -> str | None:
        try:
            import pypdfium2 as pdfium  # type: ignore

            return getattr(pdfium, "__version__", None)
        except ImportError:
            return None

    def _require_pdfium(self):
        try:
            import pypdfium2 as pdfium  # type: ignore

            return pdfium
        except ImportError as e:
            raise RuntimeError(
                "Missing dependency: pypdfium2 is required for PDF text extraction."
            ) from e

    def get_page_count(self, *, pdf_file: Path) -> int:
        pdfium = self._require_pdfium()
        doc = pdfium.PdfDocument(str(pdf_file))
        try:
            return len(doc)
        finally:
            doc.close()

    @staticmethod
    def _page_fragments(textpage: Any) -> list[TextFragment]:
        # One fragment per pdfium text rect: a run of characters on one line.
        # The transform places a unit glyph box of the rect's height at its
        # baseline-left corner, in PDF user space (y up).
        fragments: list[TextFragment] = []
        for i in range(textpage.count_rects()):
            left, bottom, right, top = textpage.get_rect(i)
            text = textpage.get_text_bounded(left=left, bottom=bottom, right=right, top=top)
            h = float(top - bottom)
            fragments.append(
                TextFragment(
                    text=text,
                    transform=(h, 0.0, 0.0, h, float(left), float(bottom)),
                    width=float(right - left),
                )
            )
        return fragments

    def extract_pages(self, *, pdf_file: Path, pages: list[int], scale: float) -> list[FragmentPage]:
        pdfium = self._require_pdfium()
        doc = pdfium.PdfDocument(str(pdf_file))
        try:
            page_count = len(doc)
            out: list[FragmentPage] = []
            for page_num in pages:
                if page_num < 1 or page_num > page_count:
                    raise ValueError(f"Page out of range: {page_num} (1..{page_count})")

                page = doc[page_num - 1]
                try:
                    width_pt, height_pt = page.get_size()
                    textpage = page.get_textpage()
                    try:
                        fragments = self._page_fragments(textpage)
                    finally:
                        textpage.close()
                finally:
                    page.close()
                logger.debug("page %d: %d fragments", page_num, len(fragments))

                out.append(
                    FragmentPage(
                        page_num=page_num,
                        viewport=Viewport.for_page(float(width_pt), float(height_pt), scale),
                        fragments=fragments,
                    )
                )
            return out
        finally:
            doc.close()

    def render_pages(
        self,
        *,
        pdf_file: Path,
        out_dir: Path,
        pages: list[int],
        scale: float,
    ) -> tuple[list[EngineRenderedPage], dict[str, Any]]:
        pdfium = self._require_pdfium()
        doc = pdfium.PdfDocument(str(pdf_file))
        out_dir.mkdir(parents=True, exist_ok=True)

        rendered: list[EngineRenderedPage] = []
        try:
            page_count = len(doc)
            for page_num in pages:
                if page_num < 1 or page_num > page_count:
                    raise ValueError(f"Page out of range: {page_num} (1..{page_count})")

                page = doc[page_num - 1]
                try:
                    bitmap = page.render(scale=scale)

                    # Convert to PIL and save deterministically.
                    pil_img = bitmap.to_pil().convert("RGB")
                    width_px, height_px = pil_img.size
                    out_file = out_dir / f"page_{page_num:03d}.png"
                    pil_img.save(out_file, format="PNG")
                finally:
                    page.close()

                rendered.append(
                    EngineRenderedPage(
                        page_num=page_num,
                        image_file=out_file,
                        width_px=int(width_px),
                        height_px=int(height_px),
                    )
                )
        finally:
            doc.close()

        render_params: dict[str, Any] = {
            "backend": self.backend_id(),
            "backend_version": self.backend_version(),
        }
        return rendered, render_params
