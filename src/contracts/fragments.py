from __future__ import annotations

from dataclasses import dataclass
from typing import Any

Matrix = tuple[float, float, float, float, float, float]


def _matrix_from_list(raw: Any, *, field: str) -> Matrix:
    if not isinstance(raw, (list, tuple)) or len(raw) != 6:
        raise TypeError(f"{field} must be a list of 6 numbers")
    a, b, c, d, e, f = (float(x) for x in raw)
    return (a, b, c, d, e, f)


@dataclass(frozen=True, slots=True)
class BBox:
    """
    Page-pixel rectangle, y grows downward:
    - (left, top) is the top-left corner
    - (right, bottom) is the bottom-right corner
    """

    left: float
    top: float
    right: float
    bottom: float

    def width(self) -> float:
        return float(self.right - self.left)

    def height(self) -> float:
        return float(self.bottom - self.top)

    def padded(self, px: float) -> "BBox":
        return BBox(left=self.left - px, top=self.top - px, right=self.right + px, bottom=self.bottom + px)

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "BBox":
        return BBox(
            left=float(d["left"]),
            top=float(d["top"]),
            right=float(d["right"]),
            bottom=float(d["bottom"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"left": self.left, "top": self.top, "right": self.right, "bottom": self.bottom}


@dataclass(frozen=True, slots=True)
class TextFragment:
    """
    One positioned text run as produced by document text extraction.

    `transform` maps fragment-local space to page space; `width` is in unscaled
    text space. `text` is kept verbatim (leading/trailing whitespace included).
    """

    text: str
    transform: Matrix
    width: float

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "TextFragment":
        return TextFragment(
            text=str(d.get("text", "")),
            transform=_matrix_from_list(d["transform"], field="TextFragment.transform"),
            width=float(d["width"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "transform": list(self.transform), "width": self.width}


@dataclass(frozen=True, slots=True)
class Viewport:
    transform: Matrix
    scale: float
    width: float  # page width in pixels
    height: float  # page height in pixels

    @staticmethod
    def for_page(width_pt: float, height_pt: float, scale: float) -> "Viewport":
        """
        Unrotated viewport for a page of the given size in PDF points.

        PDF user space has y growing upward; the viewport flips it so that
        page-pixel y grows downward from the top edge.
        """

        return Viewport(
            transform=(scale, 0.0, 0.0, -scale, 0.0, height_pt * scale),
            scale=scale,
            width=width_pt * scale,
            height=height_pt * scale,
        )

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "Viewport":
        return Viewport(
            transform=_matrix_from_list(d["transform"], field="Viewport.transform"),
            scale=float(d["scale"]),
            width=float(d["width"]),
            height=float(d["height"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "transform": list(self.transform),
            "scale": self.scale,
            "width": self.width,
            "height": self.height,
        }


@dataclass(frozen=True, slots=True)
class FragmentPage:
    page_num: int  # 1-indexed
    viewport: Viewport
    fragments: list[TextFragment]  # content order as given by the extractor
    image_relpath: str | None = None  # rendered page image at viewport scale, if any

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "FragmentPage":
        frags_raw = d.get("fragments") or []
        if not isinstance(frags_raw, list):
            raise TypeError("FragmentPage.fragments must be a list")
        return FragmentPage(
            page_num=int(d["page_num"]),
            viewport=Viewport.from_dict(d["viewport"]),
            fragments=[TextFragment.from_dict(f) for f in frags_raw],
            image_relpath=(None if d.get("image_relpath") is None else str(d["image_relpath"])),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "page_num": self.page_num,
            "viewport": self.viewport.to_dict(),
            "fragments": [f.to_dict() for f in self.fragments],
            "image_relpath": self.image_relpath,
        }


@dataclass(frozen=True, slots=True)
class FragmentDocument:
    ok: bool
    errors: list[str]
    meta: dict[str, Any]
    pages: list[FragmentPage]
    source_pdf_relpath: str | None
    doc_id: str | None = None

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "FragmentDocument":
        pages_raw = d.get("pages") or []
        if not isinstance(pages_raw, list):
            raise TypeError("FragmentDocument.pages must be a list")

        # Stage A artifacts emit errors as {code, message, detail}; keep only the stable code.
        errors: list[str] = []
        for e in d.get("errors") or []:
            if isinstance(e, str):
                errors.append(e)
            elif isinstance(e, dict) and "code" in e:
                errors.append(str(e["code"]))
            else:
                raise TypeError("FragmentDocument.errors entries must be str or dict-with-code")

        return FragmentDocument(
            ok=bool(d.get("ok", False)),
            errors=errors,
            meta=dict(d.get("meta") or {}),
            pages=[FragmentPage.from_dict(p) for p in pages_raw],
            source_pdf_relpath=(None if d.get("source_pdf_relpath") is None else str(d["source_pdf_relpath"])),
            doc_id=(None if d.get("doc_id") is None else str(d["doc_id"])),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "ok": self.ok,
            "errors": list(self.errors),
            "meta": dict(self.meta),
            "pages": [p.to_dict() for p in self.pages],
            "source_pdf_relpath": self.source_pdf_relpath,
        }
        if self.doc_id is not None:
            out["doc_id"] = self.doc_id
        return out
