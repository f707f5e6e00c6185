"""
Presentation of detected answer regions.

- HTML viewer: one clickable mask per region that toggles a "revealed" state
- Masked page images: regions painted over (static handout)

No detection logic lives here; reveal state is not persisted.
"""

from .config import OverlayConfig
from .module import OverlayBox, OverlayResult, mask_page_image, overlay_boxes, render_reveal_html, run_overlay

__all__ = [
    "OverlayBox",
    "OverlayConfig",
    "OverlayResult",
    "mask_page_image",
    "overlay_boxes",
    "render_reveal_html",
    "run_overlay",
]
