from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .fragments import BBox


@dataclass(frozen=True, slots=True)
class PatternMatch:
    fragment_index: int
    pattern: str
    match_end: int  # character offset just past the matched substring

    def to_dict(self) -> dict[str, Any]:
        return {"fragment_index": self.fragment_index, "pattern": self.pattern, "match_end": self.match_end}

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "PatternMatch":
        return PatternMatch(
            fragment_index=int(d["fragment_index"]),
            pattern=str(d["pattern"]),
            match_end=int(d["match_end"]),
        )


@dataclass(frozen=True, slots=True)
class AnswerRegion:
    region_id: str  # p{page_num:03d}_a{region_index:06d}
    page_num: int
    fragment_index: int
    pattern: str
    bbox: BBox

    def to_dict(self) -> dict[str, Any]:
        return {
            "region_id": self.region_id,
            "page_num": self.page_num,
            "fragment_index": self.fragment_index,
            "pattern": self.pattern,
            "bbox": self.bbox.to_dict(),
        }

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "AnswerRegion":
        return AnswerRegion(
            region_id=str(d["region_id"]),
            page_num=int(d["page_num"]),
            fragment_index=int(d["fragment_index"]),
            pattern=str(d["pattern"]),
            bbox=BBox.from_dict(d["bbox"]),
        )


@dataclass(frozen=True, slots=True)
class RevealPageResult:
    page_num: int
    matches: list[PatternMatch]
    regions: list[AnswerRegion]

    def to_dict(self) -> dict[str, Any]:
        return {
            "page_num": self.page_num,
            "matches": [m.to_dict() for m in self.matches],
            "regions": [r.to_dict() for r in self.regions],
        }

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "RevealPageResult":
        return RevealPageResult(
            page_num=int(d["page_num"]),
            matches=[PatternMatch.from_dict(x) for x in (d.get("matches") or [])],
            regions=[AnswerRegion.from_dict(x) for x in (d.get("regions") or [])],
        )


@dataclass(frozen=True, slots=True)
class RevealResult:
    ok: bool
    errors: list[str]
    meta: dict[str, Any]  # config echo, patterns, per-page counts, skipped matches
    pages: list[RevealPageResult]
    source_fragments_relpath: str | None
    doc_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "ok": self.ok,
            "errors": list(self.errors),
            "meta": dict(self.meta),
            "pages": [p.to_dict() for p in self.pages],
            "source_fragments_relpath": self.source_fragments_relpath,
        }
        if self.doc_id is not None:
            out["doc_id"] = self.doc_id
        return out

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "RevealResult":
        pages_raw = d.get("pages") or []
        return RevealResult(
            ok=bool(d.get("ok", False)),
            errors=[str(x) for x in (d.get("errors") or [])],
            meta=dict(d.get("meta") or {}),
            pages=[RevealPageResult.from_dict(p) for p in pages_raw],
            source_fragments_relpath=(
                None if d.get("source_fragments_relpath") is None else str(d["source_fragments_relpath"])
            ),
            doc_id=(None if d.get("doc_id") is None else str(d["doc_id"])),
        )

    def regions_by_page(self) -> dict[int, list[AnswerRegion]]:
        return {p.page_num: list(p.regions) for p in self.pages}
