from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from contracts.fragments import FragmentDocument
from contracts.reveal import RevealResult
from reveal.artifacts import serialize_reveal_result
from reveal.cli import main as reveal_main
from reveal.config import RevealConfig
from reveal.detect import run_reveal


def _frag(text: str, left: float, top: float, width: float, height: float = 12.0) -> dict:
    return {"text": text, "transform": [height, 0, 0, height, left, top + height], "width": width}


def _doc_dict(ok: bool = True) -> dict:
    viewport = {"transform": [1, 0, 0, 1, 0, 0], "scale": 1.0, "width": 600.0, "height": 800.0}
    return {
        "doc_id": "key_abc123",
        "ok": ok,
        "errors": [] if ok else [{"code": "EXTRACT_BACKEND_EXTRACT_FAILED", "message": "x", "detail": None}],
        "meta": {},
        "source_pdf_relpath": "keys/key.pdf",
        "pages": [
            {
                "page_num": 2,
                "viewport": viewport,
                "image_relpath": None,
                "fragments": [
                    _frag("Answer: 7", 10, 50, 90),
                    _frag("   ", 10, 70, 90),
                ],
            },
            {
                "page_num": 1,
                "viewport": viewport,
                "image_relpath": None,
                "fragments": [
                    _frag("1. Algebra", 10, 20, 100),
                    _frag("Answer: x = 3", 10, 40, 130),
                    _frag("because 3 + 3 = 6", 100, 53, 140),
                    _frag("Answer: lost", 10, 90, 0),
                    _frag("Solution: y = 2", 10, 120, 150),
                ],
            },
        ],
    }


class TestRunReveal(unittest.TestCase):
    def test_result_bytes_stable_across_runs(self) -> None:
        document = FragmentDocument.from_dict(_doc_dict())
        cfg = RevealConfig()

        r1 = run_reveal(document, ["answer:", "solution:"], cfg, source_fragments_relpath="x.json")
        r2 = run_reveal(document, ["answer:", "solution:"], cfg, source_fragments_relpath="x.json")
        self.assertEqual(serialize_reveal_result(r1), serialize_reveal_result(r2))
        self.assertTrue(r1.ok)
        self.assertEqual(r1.doc_id, "key_abc123")

        d = json.loads(serialize_reveal_result(r1))
        # Pages are emitted in ascending page order regardless of input order.
        self.assertEqual([p["page_num"] for p in d["pages"]], [1, 2])

        page1 = d["pages"][0]
        self.assertEqual([m["fragment_index"] for m in page1["matches"]], [1, 3, 4])
        self.assertEqual([r["region_id"] for r in page1["regions"]], ["p001_a000000", "p001_a000001"])
        self.assertEqual([r["pattern"] for r in page1["regions"]], ["answer:", "solution:"])

        self.assertEqual(
            d["meta"]["skipped_matches"],
            [{"page_num": 1, "fragment_index": 3, "reason": "anchor_not_positionable"}],
        )
        self.assertEqual(
            d["meta"]["counts"]["page_001"],
            {"fragments_in": 5, "fragments_positionable": 4, "matches": 3, "regions": 2},
        )
        self.assertEqual(d["meta"]["counts"]["page_002"]["fragments_positionable"], 1)
        self.assertEqual(d["meta"]["reveal_config"]["right_margin_ratio"], 0.92)

        # Artifact round-trips through the contract.
        self.assertEqual(RevealResult.from_dict(d).to_dict(), r1.to_dict())

    def test_empty_pattern_list_is_not_an_error(self) -> None:
        document = FragmentDocument.from_dict(_doc_dict())
        r = run_reveal(document, [], RevealConfig())
        self.assertTrue(r.ok)
        self.assertEqual(sum(len(p.regions) for p in r.pages), 0)
        self.assertEqual(sum(len(p.matches) for p in r.pages), 0)

    def test_failed_source_propagates(self) -> None:
        document = FragmentDocument.from_dict(_doc_dict(ok=False))
        self.assertEqual(document.errors, ["EXTRACT_BACKEND_EXTRACT_FAILED"])
        r = run_reveal(document, ["answer:"], RevealConfig())
        self.assertFalse(r.ok)
        self.assertEqual(r.errors, ["REVEAL_SOURCE_NOT_OK"])

    def test_malformed_transform_is_rejected_at_parse_time(self) -> None:
        bad = _doc_dict()
        bad["pages"][0]["fragments"][0]["transform"] = [1, 0, 0]
        with self.assertRaises(TypeError):
            FragmentDocument.from_dict(bad)


class TestRevealCli(unittest.TestCase):
    def test_cli_writes_artifact_and_rereads_with_new_patterns(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            fragments_file = root / "fragments.json"
            fragments_file.write_text(json.dumps(_doc_dict()), encoding="utf-8")
            patterns_file = root / "patterns.txt"
            patterns_file.write_text("Solution:\n", encoding="utf-8")

            out1 = root / "out" / "regions_answer.json"
            rc = reveal_main(["--input", str(fragments_file), "--output", str(out1), "--pattern", " ANSWER: "])
            self.assertEqual(rc, 0)
            d1 = json.loads(out1.read_text(encoding="utf-8"))
            self.assertEqual(d1["meta"]["patterns"], ["answer:"])
            self.assertEqual(sum(len(p["regions"]) for p in d1["pages"]), 2)

            # Same fragments, different pattern source: detection simply re-runs.
            out2 = root / "out" / "regions_solution.json"
            rc = reveal_main(["--input", str(fragments_file), "--output", str(out2), "--patterns-file", str(patterns_file)])
            self.assertEqual(rc, 0)
            d2 = json.loads(out2.read_text(encoding="utf-8"))
            self.assertEqual(d2["meta"]["patterns"], ["solution:"])
            self.assertEqual(sum(len(p["regions"]) for p in d2["pages"]), 1)


if __name__ == "__main__":
    unittest.main()
