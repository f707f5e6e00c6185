"""
Answer-region detection over positioned text fragments.

- Matcher: first configured marker pattern per fragment (case-insensitive substring)
- RegionBuilder: rectangle covering the answer after each marker, inferred
  from fragment geometry only (line/label boundaries, wrapped continuation lines)

No OCR, no semantic document model, no hidden state across pages or calls.
"""

from .config import RevealConfig
from .detect import detect_page_regions, run_reveal
from .geometry import compose_transforms, fragment_bbox
from .matcher import find_pattern_matches, load_patterns_file, normalize_patterns
from .region_builder import build_answer_bbox, is_section_label

__all__ = [
    "RevealConfig",
    "build_answer_bbox",
    "compose_transforms",
    "detect_page_regions",
    "find_pattern_matches",
    "fragment_bbox",
    "is_section_label",
    "load_patterns_file",
    "normalize_patterns",
    "run_reveal",
]
