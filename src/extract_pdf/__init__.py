"""
Fragment extraction (PDF -> per-page positioned text fragments + viewport).

This package is the document decoder for answer-region detection:
- It emits text runs with affine placement, in content order, plus a viewport.
- It optionally renders page images at the viewport scale for overlays.
- It performs NO OCR, layout inference, or content filtering.
"""

from .contracts import ExtractEngineName, ExtractPdfConfig, ExtractPdfError, ExtractPdfResult
from .module import parse_page_selection, run_extract_pdf_relpath

__all__ = [
    "ExtractEngineName",
    "ExtractPdfConfig",
    "ExtractPdfError",
    "ExtractPdfResult",
    "parse_page_selection",
    "run_extract_pdf_relpath",
]
