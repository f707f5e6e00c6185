from __future__ import annotations

import math

from contracts.fragments import BBox, Matrix, TextFragment, Viewport


def compose_transforms(m1: Matrix, m2: Matrix) -> Matrix:
    """
    Affine composition `m1 . m2` for matrices in `[a b c d e f]` form
    (points are mapped by m2 first, then m1).
    """

    return (
        m1[0] * m2[0] + m1[2] * m2[1],
        m1[1] * m2[0] + m1[3] * m2[1],
        m1[0] * m2[2] + m1[2] * m2[3],
        m1[1] * m2[2] + m1[3] * m2[3],
        m1[0] * m2[4] + m1[2] * m2[5] + m1[4],
        m1[1] * m2[4] + m1[3] * m2[5] + m1[5],
    )


def fragment_bbox(fragment: TextFragment, viewport: Viewport) -> BBox | None:
    """
    Page-pixel bbox of a fragment, or None if it cannot be positioned.

    The magnitude of the composed vertical basis vector approximates glyph
    height; (e, f) is the baseline origin, so the top sits one font height above it.
    Degenerate transforms show up as a non-positive height/width and are
    treated like empty text.
    """

    if fragment.text.strip() == "":
        return None

    composed = compose_transforms(viewport.transform, fragment.transform)
    font_height = math.hypot(composed[2], composed[3])
    width = fragment.width * viewport.scale
    if width <= 0 or font_height <= 0:
        return None

    left = composed[4]
    top = composed[5] - font_height
    return BBox(left=left, top=top, right=left + width, bottom=top + font_height)
