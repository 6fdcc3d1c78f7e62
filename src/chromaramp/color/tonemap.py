"""HDR -> SDR tonemapping for scene-referred working-space colors.

Curve: generalized Reinhard,

    f(x) = x / (1 + x^c)^(1/c)

with c = contrast. Slope is 1 at the origin so shadows stay nearly linear,
highlights are compressed toward 1.0 without a hard clip, and f is monotonic
non-decreasing for every c > 0. Larger c gives a harder knee.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from chromaramp.color.spaces import convert, to_display_bytes
from chromaramp.core.types import Color, ColorSpace, Context, TonemapParams
from chromaramp.errors import InvalidSpaceError


def compress(x: np.ndarray, contrast: float) -> np.ndarray:
    """Apply the compression curve to linear values (negatives floored at 0).

    Above 1.0 the curve is evaluated as 1 / (1 + x^-c)^(1/c), so huge inputs
    saturate at 1.0 instead of overflowing. +inf maps to 1.0.
    """
    x = np.maximum(np.asarray(x, dtype=np.float64), 0.0)
    lo = np.minimum(x, 1.0)
    hi = np.maximum(x, 1.0)
    with np.errstate(over="ignore"):
        low = lo / np.power(1.0 + np.power(lo, contrast), 1.0 / contrast)
        high = 1.0 / np.power(1.0 + np.power(hi, -contrast), 1.0 / contrast)
    return np.where(x <= 1.0, low, high)


def tonemap(color: Color, params: Optional[TonemapParams] = None) -> Color:
    """Map scene-referred working color to display-referred working color.

    Raises:
        InvalidSpaceError: If the input is not working space, scene-referred.
    """
    if color.space is not ColorSpace.WORKING or color.context is not Context.SCENE:
        raise InvalidSpaceError(
            f"tonemap needs working/scene input, got {color.space.value}/{color.context.value}"
        )
    params = params or TonemapParams()
    with np.errstate(over="ignore", invalid="ignore"):
        gain = np.exp2(params.exposure)
        exposed = np.where(color.values > 0.0, color.values * gain, 0.0)
    return Color(compress(exposed, params.contrast), ColorSpace.WORKING, Context.DISPLAY)


def tonemap_to_display(color: Color, params: Optional[TonemapParams] = None) -> Color:
    """Tonemap then encode as sRGB, ready for 8-bit output."""
    return convert(tonemap(color, params), ColorSpace.ENCODED_SRGB)


def tonemap_rgba(buffer: np.ndarray, params: Optional[TonemapParams] = None) -> np.ndarray:
    """Tonemap a scene RGBA buffer to display bytes.

    Args:
        buffer: (..., 4) float scene buffer, working space.
        params: Exposure/contrast options.

    Returns:
        (..., 4) uint8 array. Color channels go through the tonemapper,
        coverage is clamped to [0, 1] and scaled.
    """
    rgb = Color(buffer[..., :3], ColorSpace.WORKING, Context.SCENE)
    out = np.empty(buffer.shape, dtype=np.uint8)
    out[..., :3] = to_display_bytes(tonemap_to_display(rgb, params))
    out[..., 3] = np.rint(np.clip(buffer[..., 3], 0.0, 1.0) * 255.0).astype(np.uint8)
    return out
