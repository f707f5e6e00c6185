from __future__ import annotations

from pathlib import Path
from typing import Iterable

from contracts.fragments import TextFragment
from contracts.reveal import PatternMatch


def normalize_patterns(raw: Iterable[str]) -> list[str]:
    """
    Trim + lowercase, drop empty entries and repeats; first-seen order is kept
    because list order decides which pattern wins within a fragment.
    """

    out: list[str] = []
    seen: set[str] = set()
    for p in raw:
        s = str(p).strip().lower()
        if s == "" or s in seen:
            continue
        seen.add(s)
        out.append(s)
    return out


def load_patterns_file(path: Path) -> list[str]:
    # One pattern per line; blank lines and `#` comments are ignored.
    lines = path.read_text(encoding="utf-8").splitlines()
    return normalize_patterns(ln for ln in lines if not ln.lstrip().startswith("#"))


def first_matching_pattern(text: str, patterns: list[str]) -> tuple[str, int] | None:
    lowered = text.lower()
    for p in patterns:
        pos = lowered.find(p)
        if pos >= 0:
            return p, pos + len(p)
    return None


def contains_any_pattern(text: str, patterns: list[str]) -> bool:
    return first_matching_pattern(text, patterns) is not None


def find_pattern_matches(fragments: list[TextFragment], patterns: list[str]) -> list[PatternMatch]:
    """
    At most one match per fragment: the first pattern (list order) found by
    case-insensitive substring search. Output is in fragment order.
    """

    if not patterns:
        return []

    matches: list[PatternMatch] = []
    for idx, frag in enumerate(fragments):
        hit = first_matching_pattern(frag.text, patterns)
        if hit is None:
            continue
        pattern, match_end = hit
        matches.append(PatternMatch(fragment_index=idx, pattern=pattern, match_end=match_end))
    return matches
