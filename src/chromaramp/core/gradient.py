"""Procedural three-anchor gradient generator.

For pixel (x, y) with u = x / W and v = y / H:

    h   = blend(anchor1, anchor2, u)
    w   = blend(anchor1, anchor3, v)
    out = blend(h, w, 0.5)

Each pixel depends only on its own coordinates and the palette, so the whole
grid is evaluated at once.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from chromaramp.color.spaces import as_display_referred, as_scene_referred, blend, convert
from chromaramp.config import BLEND_MIDPOINT
from chromaramp.core.types import Color, ColorSpace, Context, Palette

logger = logging.getLogger(__name__)


def fit_range(x, imin: float, imax: float, omin: float, omax: float):
    """Linear remap a value in one range into another range (no clamping)."""
    return (omax - omin) * (x - imin) / (imax - imin) + omin


def uv_grid(width: int, height: int) -> tuple[np.ndarray, np.ndarray]:
    """Normalized (u, v) coordinates, each (H, W), values in [0, 1)."""
    x = np.arange(width, dtype=np.float64)
    y = np.arange(height, dtype=np.float64)
    xx, yy = np.meshgrid(x, y)  # xx varies along columns, yy along rows
    if width == 0 or height == 0:
        return xx, yy
    u = fit_range(xx, 0.0, float(width), 0.0, 1.0)
    v = fit_range(yy, 0.0, float(height), 0.0, 1.0)
    return u, v


def generate_gradient(
    width: int,
    height: int,
    palette: Optional[Palette] = None,
    blend_space: ColorSpace = ColorSpace.WORKING,
) -> Color:
    """Evaluate the gradient over a width x height grid.

    Args:
        width: Columns. Zero gives an empty result.
        height: Rows. Zero gives an empty result.
        palette: Anchors; pure red, green, blue if omitted.
        blend_space: WORKING blends the linear scene values directly.
            OKLAB blends display-referred anchors in Oklab and returns
            the result to the working space.

    Returns:
        (H, W, 3) working-space, scene-referred color.
    """
    if width < 0 or height < 0:
        raise ValueError(f"Invalid gradient dimensions: {width}x{height}")
    palette = palette or Palette.default()
    blend_space = ColorSpace(blend_space)

    anchors = palette.as_tuple()
    if blend_space is ColorSpace.OKLAB:
        anchors = tuple(convert(as_display_referred(a), ColorSpace.OKLAB) for a in anchors)
    elif blend_space is not ColorSpace.WORKING:
        raise ValueError(f"Unsupported blend space: {blend_space.value}")
    a1, a2, a3 = anchors

    u, v = uv_grid(width, height)
    horizontal = blend(a1, a2, u)
    vertical = blend(a1, a3, v)
    out = blend(horizontal, vertical, BLEND_MIDPOINT)

    if blend_space is ColorSpace.OKLAB:
        out = as_scene_referred(convert(out, ColorSpace.WORKING))

    logger.debug("Generated %dx%d gradient in %s", width, height, blend_space.value)
    return Color(out.values.reshape(height, width, 3), ColorSpace.WORKING, Context.SCENE)
