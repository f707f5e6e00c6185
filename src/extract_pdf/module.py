from __future__ import annotations

import hashlib
import json
import logging
import re
from dataclasses import replace
from pathlib import Path
from typing import Any

from contracts.fragments import FragmentPage

from .contracts import ExtractEngineName, ExtractPdfConfig, ExtractPdfError, ExtractPdfResult
from .data_access import DataAccessError, resolve_under_data_root, sha256_file
from .engines import Pypdfium2Engine

logger = logging.getLogger(__name__)


def _safe_pdf_stem(pdf_relpath: str) -> str:
    """
    Deterministic, filesystem-safe stem for readability.
    """
    s = pdf_relpath.replace("\\", "/").split("/")[-1]
    if s.lower().endswith(".pdf"):
        s = s[: -len(".pdf")]
    s = re.sub(r"[^A-Za-z0-9._-]+", "_", s)
    s = re.sub(r"_+", "_", s).strip("_")
    return s or "pdf"


def _canonical_page_selection(selection: str | None) -> str:
    if selection is None:
        return "all"
    s = "".join(selection.split())
    return s if s != "" else "all"


def _compute_doc_id(*, source_pdf_relpath: str, scale: float, backend_id: str, page_selection: str | None) -> str:
    payload = {
        "source_pdf_relpath": source_pdf_relpath.replace("\\", "/"),
        "scale": scale,
        "backend": backend_id,
        "page_selection": _canonical_page_selection(page_selection),
    }
    s = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    digest = hashlib.sha256(s.encode("utf-8")).hexdigest()
    return f"{_safe_pdf_stem(source_pdf_relpath)}_{digest[:12]}"


def parse_page_selection(selection: str | None, *, page_count: int) -> list[int]:
    """
    Parse "1,3-5" into a sorted list of unique 1-indexed page numbers.
    None or blank => all pages.
    """

    if selection is None or selection.strip() == "":
        return list(range(1, page_count + 1))

    pages: set[int] = set()
    for part in selection.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            a_str, b_str = part.split("-", 1)
            a = int(a_str.strip())
            b = int(b_str.strip())
            if a <= 0 or b <= 0:
                raise ValueError("page numbers must be >= 1")
            if b < a:
                raise ValueError(f"invalid range: {part!r}")
            pages.update(range(a, b + 1))
        else:
            p = int(part)
            if p <= 0:
                raise ValueError("page numbers must be >= 1")
            pages.add(p)

    ordered = sorted(pages)
    if ordered and ordered[-1] > page_count:
        raise ValueError(f"page selection out of bounds (1..{page_count})")
    return ordered


def _get_engine(engine: ExtractEngineName):
    if engine == ExtractEngineName.PYPDFIUM2:
        return Pypdfium2Engine()
    raise ValueError(f"Unsupported extraction engine: {engine}")


def run_extract_pdf_relpath(*, config: ExtractPdfConfig, pdf_relpath: str) -> ExtractPdfResult:
    """
    Programmatic entrypoint for fragment extraction.

    Input: PDF relpath under `config.data_root`
    Output: JSON-ready manifest with per-page fragments + viewport, and (optionally)
    page images under `config.out_root/<doc_id>/` referenced relative to `out_root`.
    Failures are reported as coded errors on an `ok=False` result, never raised.
    """

    meta: dict[str, Any] = {}
    engine = _get_engine(config.engine)
    doc_id = _compute_doc_id(
        source_pdf_relpath=pdf_relpath,
        scale=config.scale,
        backend_id=engine.backend_id(),
        page_selection=config.page_selection,
    )
    extraction: dict[str, Any] = {
        "scale": config.scale,
        "backend": engine.backend_id(),
        "page_selection": _canonical_page_selection(config.page_selection),
        "render_images": config.render_images,
    }

    def _failed(code: str, message: str, detail: dict[str, Any]) -> ExtractPdfResult:
        logger.warning("extraction failed for %s: %s", pdf_relpath, code)
        return ExtractPdfResult(
            doc_id=doc_id,
            ok=False,
            engine=config.engine,
            source_pdf_relpath=pdf_relpath,
            extraction=extraction,
            pages=[],
            errors=[ExtractPdfError(code=code, message=message, detail=detail)],
            meta=meta,
        )

    if not pdf_relpath.lower().endswith(".pdf"):
        return _failed(
            "EXTRACT_INPUT_NOT_PDF",
            "Only PDFs are accepted (by .pdf extension)",
            {"pdf_relpath": pdf_relpath},
        )

    try:
        pdf_file = resolve_under_data_root(data_root=config.data_root, relpath=pdf_relpath)
    except DataAccessError as e:
        return _failed(
            "EXTRACT_DATA_ACCESS_ERROR",
            str(e),
            {"data_root": str(config.data_root), "relpath": pdf_relpath},
        )

    if not pdf_file.exists():
        return _failed("EXTRACT_INPUT_NOT_FOUND", "Input PDF not found", {"source_pdf_relpath": pdf_relpath})

    try:
        page_count = engine.get_page_count(pdf_file=pdf_file)
    except Exception as e:
        return _failed("EXTRACT_BACKEND_PAGECOUNT_FAILED", "Failed to read PDF page count", {"error": repr(e)})

    try:
        selected = parse_page_selection(config.page_selection, page_count=page_count)
    except ValueError as e:
        return _failed(
            "EXTRACT_BAD_PAGE_SELECTION",
            "Invalid page_selection",
            {"page_selection": config.page_selection, "error": str(e)},
        )

    try:
        pages: list[FragmentPage] = engine.extract_pages(pdf_file=pdf_file, pages=selected, scale=config.scale)
    except Exception as e:
        return _failed("EXTRACT_BACKEND_EXTRACT_FAILED", "PDF text extraction failed", {"error": repr(e)})

    if config.render_images:
        out_root = config.out_root.expanduser().resolve()
        try:
            rendered, backend_params = engine.render_pages(
                pdf_file=pdf_file,
                out_dir=out_root / doc_id,
                pages=selected,
                scale=config.scale,
            )
        except Exception as e:
            return _failed("EXTRACT_BACKEND_RENDER_FAILED", "PDF rendering failed", {"error": repr(e)})

        image_by_page = {rp.page_num: rp.image_file.resolve().relative_to(out_root).as_posix() for rp in rendered}
        pages = [replace(p, image_relpath=image_by_page.get(p.page_num)) for p in pages]
        extraction.update(backend_params)

    extraction["backend_version"] = engine.backend_version()

    if config.compute_source_sha256:
        try:
            extraction["source_sha256"] = sha256_file(pdf_file)
        except OSError as e:
            meta.setdefault("audit_warnings", []).append({"code": "EXTRACT_SOURCE_HASH_FAILED", "error": repr(e)})

    meta["counts"] = {f"page_{p.page_num:03d}": {"fragments": len(p.fragments)} for p in pages}

    return ExtractPdfResult(
        doc_id=doc_id,
        ok=True,
        engine=config.engine,
        source_pdf_relpath=pdf_relpath,
        extraction=extraction,
        pages=sorted(pages, key=lambda p: p.page_num),
        errors=[],
        meta=meta,
    )
