from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RevealConfig:
    """
    Answer-region detection thresholds.

    Values are empirically tuned against real answer-key documents; they are
    explicit constants (no time/randomness) and are echoed into result meta.
    Factors suffixed `_k` multiply the matched fragment's font height.
    """

    # Horizontal start: interpolated match end + pad to clear the marker glyphs.
    start_pad_px: float = 4.0
    # Right edge: fixed fraction of the viewport pixel width.
    right_margin_ratio: float = 0.92
    # Fragments left of (answer_left - column_tolerance_px) belong to another column/margin.
    column_tolerance_px: float = 5.0

    # Backward scan.
    above_tolerance_k: float = 0.3  # same-line jitter band
    prev_line_band_k: float = 2.0  # merge band for lines above the match
    top_gap_k: float = 0.3  # gap between the previous line/boundary and the answer top

    # Forward scan: continuation lines must start within this distance below the match.
    continuation_k: float = 1.5

    # Final region padding (ascenders/descenders).
    region_pad_px: float = 2.0

    def validate(self) -> None:
        if self.start_pad_px < 0:
            raise ValueError("start_pad_px must be >= 0")
        if not (0.0 < self.right_margin_ratio <= 1.0):
            raise ValueError("right_margin_ratio must be within (0, 1]")
        if self.column_tolerance_px < 0:
            raise ValueError("column_tolerance_px must be >= 0")
        if self.above_tolerance_k < 0:
            raise ValueError("above_tolerance_k must be >= 0")
        if self.prev_line_band_k <= 0:
            raise ValueError("prev_line_band_k must be > 0")
        if self.top_gap_k < 0:
            raise ValueError("top_gap_k must be >= 0")
        if self.continuation_k <= 0:
            raise ValueError("continuation_k must be > 0")
        if self.region_pad_px < 0:
            raise ValueError("region_pad_px must be >= 0")

    def __post_init__(self) -> None:
        self.validate()

    def to_dict(self) -> dict[str, float]:
        return {
            "start_pad_px": self.start_pad_px,
            "right_margin_ratio": self.right_margin_ratio,
            "column_tolerance_px": self.column_tolerance_px,
            "above_tolerance_k": self.above_tolerance_k,
            "prev_line_band_k": self.prev_line_band_k,
            "top_gap_k": self.top_gap_k,
            "continuation_k": self.continuation_k,
            "region_pad_px": self.region_pad_px,
        }
