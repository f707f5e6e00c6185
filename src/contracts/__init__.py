"""
Canonical pipeline contracts.

These models are the schema boundary between stages:
- extract_pdf produces FragmentDocument (per-page fragments + viewport)
- reveal consumes it and produces RevealResult (matches + answer regions)
- overlay consumes both

Stage code should consume/produce these contract objects (not ad-hoc dicts).
"""

from .fragments import BBox, FragmentDocument, FragmentPage, Matrix, TextFragment, Viewport
from .reveal import AnswerRegion, PatternMatch, RevealPageResult, RevealResult

__all__ = [
    "AnswerRegion",
    "BBox",
    "FragmentDocument",
    "FragmentPage",
    "Matrix",
    "PatternMatch",
    "RevealPageResult",
    "RevealResult",
    "TextFragment",
    "Viewport",
]
