from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from contracts.fragments import FragmentDocument, FragmentPage, TextFragment, Viewport
from extract_pdf.artifacts import serialize_extract_result
from extract_pdf.contracts import ExtractPdfConfig, ExtractPdfResult
from extract_pdf.module import parse_page_selection, run_extract_pdf_relpath


class _FakeEnginePage:
    def __init__(self, page_num: int, image_file: Path, width_px: int, height_px: int) -> None:
        self.page_num = page_num
        self.image_file = image_file
        self.width_px = width_px
        self.height_px = height_px


class _FakeEngine:
    def backend_id(self) -> str:
        return "fake_backend"

    def backend_version(self) -> str | None:
        return "0"

    def get_page_count(self, *, pdf_file: Path) -> int:
        return 2

    def extract_pages(self, *, pdf_file: Path, pages: list[int], scale: float) -> list[FragmentPage]:
        out = []
        for p in pages:
            out.append(
                FragmentPage(
                    page_num=p,
                    viewport=Viewport.for_page(400.0, 600.0, scale),
                    fragments=[
                        TextFragment(text=f"{p}. Question", transform=(10.0, 0.0, 0.0, 10.0, 50.0, 520.0), width=80.0),
                        TextFragment(text="Answer: 42", transform=(10.0, 0.0, 0.0, 10.0, 50.0, 500.0), width=60.0),
                    ],
                )
            )
        return out

    def render_pages(self, *, pdf_file: Path, out_dir: Path, pages: list[int], scale: float):
        out_dir.mkdir(parents=True, exist_ok=True)
        rendered = []
        for p in pages:
            f = out_dir / f"page_{p:03d}.png"
            f.write_bytes(b"")  # materialize deterministically
            rendered.append(_FakeEnginePage(page_num=p, image_file=f, width_px=600, height_px=900))
        return rendered, {"backend": self.backend_id(), "backend_version": self.backend_version()}


class _ExplodingEngine(_FakeEngine):
    def extract_pages(self, *, pdf_file: Path, pages: list[int], scale: float) -> list[FragmentPage]:
        raise RuntimeError("corrupt xref")


class TestExtractManifestDeterminism(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.data_root = self.root / "data"
        self.data_root.mkdir()
        (self.data_root / "key.pdf").write_bytes(b"%PDF-FAKE%")
        self.out_root = self.root / "out"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _cfg(self, **kw) -> ExtractPdfConfig:
        return ExtractPdfConfig(data_root=self.data_root, out_root=self.out_root, **kw)

    def test_manifest_bytes_stable_across_runs(self) -> None:
        with patch("extract_pdf.module._get_engine", return_value=_FakeEngine()):
            r1: ExtractPdfResult = run_extract_pdf_relpath(config=self._cfg(), pdf_relpath="key.pdf")
            r2: ExtractPdfResult = run_extract_pdf_relpath(config=self._cfg(), pdf_relpath="key.pdf")

        self.assertTrue(r1.ok)
        b1 = serialize_extract_result(r1)
        self.assertEqual(b1, serialize_extract_result(r2))

        d = json.loads(b1)
        self.assertTrue(d["doc_id"].startswith("key_"))
        self.assertEqual([p["page_num"] for p in d["pages"]], [1, 2])
        self.assertEqual(d["pages"][0]["image_relpath"], f"{d['doc_id']}/page_001.png")
        self.assertTrue((self.out_root / d["pages"][0]["image_relpath"]).exists())
        self.assertEqual(d["pages"][0]["viewport"]["width"], 600.0)
        self.assertEqual(d["extraction"]["backend"], "fake_backend")
        self.assertEqual(d["meta"]["counts"]["page_002"], {"fragments": 2})

        # The manifest is directly consumable as the detection input contract.
        doc = FragmentDocument.from_dict(d)
        self.assertTrue(doc.ok)
        self.assertEqual(doc.doc_id, r1.doc_id)
        self.assertEqual(doc.pages[1].fragments[1].text, "Answer: 42")
        self.assertEqual(r1.to_fragment_document().pages, doc.pages)

    def test_doc_id_depends_on_scale_and_selection(self) -> None:
        with patch("extract_pdf.module._get_engine", return_value=_FakeEngine()):
            a = run_extract_pdf_relpath(config=self._cfg(render_images=False), pdf_relpath="key.pdf")
            b = run_extract_pdf_relpath(config=self._cfg(render_images=False, scale=2.0), pdf_relpath="key.pdf")
            c = run_extract_pdf_relpath(
                config=self._cfg(render_images=False, page_selection="2"), pdf_relpath="key.pdf"
            )
        self.assertEqual(len({a.doc_id, b.doc_id, c.doc_id}), 3)
        self.assertEqual([p.page_num for p in c.pages], [2])
        self.assertIsNone(a.pages[0].image_relpath)

    def test_failures_are_reported_as_coded_errors(self) -> None:
        with patch("extract_pdf.module._get_engine", return_value=_FakeEngine()):
            not_pdf = run_extract_pdf_relpath(config=self._cfg(), pdf_relpath="key.docx")
            traversal = run_extract_pdf_relpath(config=self._cfg(), pdf_relpath="../outside.pdf")
            missing = run_extract_pdf_relpath(config=self._cfg(), pdf_relpath="nope.pdf")
            bad_sel = run_extract_pdf_relpath(config=self._cfg(page_selection="5"), pdf_relpath="key.pdf")
        with patch("extract_pdf.module._get_engine", return_value=_ExplodingEngine()):
            exploded = run_extract_pdf_relpath(config=self._cfg(), pdf_relpath="key.pdf")

        for r, code in [
            (not_pdf, "EXTRACT_INPUT_NOT_PDF"),
            (traversal, "EXTRACT_DATA_ACCESS_ERROR"),
            (missing, "EXTRACT_INPUT_NOT_FOUND"),
            (bad_sel, "EXTRACT_BAD_PAGE_SELECTION"),
            (exploded, "EXTRACT_BACKEND_EXTRACT_FAILED"),
        ]:
            self.assertFalse(r.ok)
            self.assertEqual([e.code for e in r.errors], [code])
            self.assertEqual(r.pages, [])

    def test_invalid_config(self) -> None:
        with self.assertRaises(ValueError):
            self._cfg(scale=0)
        with self.assertRaises(TypeError):
            ExtractPdfConfig(data_root="data", out_root=self.out_root)  # type: ignore[arg-type]


class TestParsePageSelection(unittest.TestCase):
    def test_ranges_and_singles(self) -> None:
        self.assertEqual(parse_page_selection(None, page_count=3), [1, 2, 3])
        self.assertEqual(parse_page_selection("  ", page_count=2), [1, 2])
        self.assertEqual(parse_page_selection("3, 1-2,2", page_count=4), [1, 2, 3])

    def test_invalid(self) -> None:
        for sel in ["0", "3-1", "9", "x"]:
            with self.assertRaises(ValueError):
                parse_page_selection(sel, page_count=4)


if __name__ == "__main__":
    unittest.main()
