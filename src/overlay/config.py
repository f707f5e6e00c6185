from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class OverlayConfig:
    # Outer pad around each answer region for the clickable/masked rectangle.
    pad_px: float = 4.0
    mask_color: str = "#2b2f36"
    render_masked_images: bool = False
    title: str = "Answer key"

    def validate(self) -> None:
        if self.pad_px < 0:
            raise ValueError("pad_px must be >= 0")
        if not self.mask_color:
            raise ValueError("mask_color must be non-empty")

    def __post_init__(self) -> None:
        self.validate()
