from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from contracts.fragments import FragmentDocument, FragmentPage


class ExtractEngineName(str, Enum):
    """
    Text-extraction backend identifiers.
    """

    PYPDFIUM2 = "pypdfium2"


@dataclass(frozen=True, slots=True)
class ExtractPdfError:
    code: str
    message: str
    detail: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class ExtractPdfResult:
    # Deterministic identifier, stable for identical:
    # (source_pdf_relpath + scale + backend identifier + page selection)
    doc_id: str
    ok: bool
    engine: ExtractEngineName
    source_pdf_relpath: str
    extraction: dict[str, Any]
    pages: list[FragmentPage]
    errors: list[ExtractPdfError]
    meta: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {
            "doc_id": self.doc_id,
            "ok": self.ok,
            "engine": self.engine.value,
            "source_pdf_relpath": self.source_pdf_relpath,
            "extraction": dict(self.extraction),
            "pages": [p.to_dict() for p in self.pages],
            "errors": [asdict(e) for e in self.errors],
            "meta": dict(self.meta),
        }

    def to_fragment_document(self) -> FragmentDocument:
        return FragmentDocument(
            ok=self.ok,
            errors=[e.code for e in self.errors],
            meta=dict(self.meta),
            pages=list(self.pages),
            source_pdf_relpath=self.source_pdf_relpath,
            doc_id=self.doc_id,
        )


@dataclass(frozen=True, slots=True)
class ExtractPdfConfig:
    """
    Fragment extraction configuration.

    - `data_root` and `out_root` must be passed explicitly
    - no environment variable reads in this module
    - `scale` is the viewport scale (pixels per PDF point); page images, when
      rendered, use the same scale so image pixels equal viewport pixels
    """

    data_root: Path
    out_root: Path
    engine: ExtractEngineName = ExtractEngineName.PYPDFIUM2
    scale: float = 1.5
    page_selection: str | None = None  # e.g. "1,3-5"; None => all pages
    render_images: bool = True
    compute_source_sha256: bool = False

    def __post_init__(self) -> None:
        if self.scale <= 0:
            raise ValueError("scale must be > 0")
        if not isinstance(self.data_root, Path) or not isinstance(self.out_root, Path):
            raise TypeError("data_root and out_root must be pathlib.Path")
