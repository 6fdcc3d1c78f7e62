"""Color space model: tagged conversions between encoded sRGB, Oklab and ACEScg.

Every conversion is routed through linear sRGB (Rec.709 primaries, D65).
The working space is ACEScg (AP1 primaries, linear); it is the only space
allowed to hold scene-referred values, which are never clamped.
Encoded sRGB and Oklab are display-referred only, and the sRGB encoding step
bounds display values to [0, 1].
"""

from __future__ import annotations

import colour
import numpy as np

from chromaramp.core.types import Color, ColorSpace, Context, DISPLAY_ONLY_SPACES
from chromaramp.errors import InvalidSpaceError


# ---- Working space (ACEScg) ----

_SRGB = colour.RGB_COLOURSPACES["sRGB"]
_ACESCG = colour.RGB_COLOURSPACES["ACEScg"]

SRGB_TO_WORKING = np.asarray(
    colour.matrix_RGB_to_RGB(_SRGB, _ACESCG, chromatic_adaptation_transform="Bradford"),
    dtype=np.float64,
)
WORKING_TO_SRGB = np.linalg.inv(SRGB_TO_WORKING)

# Second row of RGB -> XYZ gives relative luminance weights
WORKING_LUMINANCE = np.asarray(_ACESCG.matrix_RGB_to_XYZ[1], dtype=np.float64)


# ---- sRGB transfer function (IEC 61966-2-1) ----

def srgb_decode(x: np.ndarray) -> np.ndarray:
    """Encoded sRGB to linear sRGB. Input is clamped to [0, 1]."""
    x = np.clip(x, 0.0, 1.0)
    return np.where(
        x <= 0.04045,
        x / 12.92,
        np.power((x + 0.055) / 1.055, 2.4),
    )


def srgb_encode(x: np.ndarray) -> np.ndarray:
    """Linear sRGB to encoded sRGB. Input is clamped to [0, 1]."""
    x = np.clip(x, 0.0, 1.0)
    return np.where(
        x <= 0.0031308,
        x * 12.92,
        1.055 * np.power(x, 1.0 / 2.4) - 0.055,
    )


# ---- Oklab (Ottosson 2020) ----

# sRGB and Oklab are both D65
_SRGB_TO_XYZ = np.asarray(_SRGB.matrix_RGB_to_XYZ, dtype=np.float64)
_XYZ_TO_SRGB = np.linalg.inv(_SRGB_TO_XYZ)


def linear_srgb_to_oklab(linear: np.ndarray) -> np.ndarray:
    """Linear sRGB to Oklab (L, a, b).

    colour-science applies a sign-preserving cube root, so out-of-gamut
    values stay invertible.
    """
    return np.asarray(colour.XYZ_to_Oklab(linear @ _SRGB_TO_XYZ.T), dtype=np.float64)


def oklab_to_linear_srgb(lab: np.ndarray) -> np.ndarray:
    """Oklab to linear sRGB."""
    return np.asarray(colour.Oklab_to_XYZ(lab), dtype=np.float64) @ _XYZ_TO_SRGB.T


# ---- Conversion graph ----

def _to_linear_srgb(color: Color) -> np.ndarray:
    if color.space is ColorSpace.ENCODED_SRGB:
        return srgb_decode(color.values)
    if color.space is ColorSpace.OKLAB:
        return oklab_to_linear_srgb(color.values)
    return color.values @ WORKING_TO_SRGB.T


def _from_linear_srgb(linear: np.ndarray, space: ColorSpace) -> np.ndarray:
    if space is ColorSpace.ENCODED_SRGB:
        return srgb_encode(linear)
    if space is ColorSpace.OKLAB:
        return linear_srgb_to_oklab(linear)
    return linear @ SRGB_TO_WORKING.T


def convert(color: Color, target: ColorSpace) -> Color:
    """Convert a color to another space, preserving its context.

    Raises:
        InvalidSpaceError: If a scene-referred color is sent to a
            display-only space. Tonemap it or call as_display_referred first.
    """
    target = ColorSpace(target)
    if target is color.space:
        return color
    if target in DISPLAY_ONLY_SPACES and color.context is not Context.DISPLAY:
        raise InvalidSpaceError(
            f"Cannot convert scene-referred {color.space.value} to {target.value}; "
            f"tonemap or re-tag as display-referred first"
        )
    values = _from_linear_srgb(_to_linear_srgb(color), target)
    return Color(values, target, color.context)


def blend(a: Color, b: Color, t) -> Color:
    """Linear interpolation ``a + (b - a) * t`` between same-tagged colors.

    ``t`` is a scalar or an array broadcastable against the colors' leading
    shape. Values outside [0, 1] extrapolate. t == 0 yields exactly ``a``
    and t == 1 yields exactly ``b``.
    """
    if not a.same_tag(b):
        raise InvalidSpaceError(
            f"Cannot blend {a.space.value}/{a.context.value} "
            f"with {b.space.value}/{b.context.value}"
        )
    t = np.asarray(t, dtype=np.float64)[..., np.newaxis]
    mixed = a.values + (b.values - a.values) * t
    start = np.broadcast_to(a.values, mixed.shape)
    end = np.broadcast_to(b.values, mixed.shape)
    mixed = np.where(t == 0.0, start, np.where(t == 1.0, end, mixed))
    return a.with_values(mixed)


def to_display_bytes(color: Color) -> np.ndarray:
    """Encoded sRGB display color to (..., 3) uint8 by rounding.

    Raises:
        InvalidSpaceError: If the color is not encoded sRGB, display-referred.
    """
    if color.space is not ColorSpace.ENCODED_SRGB or color.context is not Context.DISPLAY:
        raise InvalidSpaceError(
            f"to_display_bytes needs encoded_srgb/display, "
            f"got {color.space.value}/{color.context.value}"
        )
    return np.rint(np.clip(color.values, 0.0, 1.0) * 255.0).astype(np.uint8)


# ---- Context changes ----

def as_display_referred(color: Color) -> Color:
    """Direct display conversion: clamp working values to [0, 1], re-tag display."""
    if color.space is not ColorSpace.WORKING:
        raise InvalidSpaceError(
            f"Context changes are defined for the working space only, got {color.space.value}"
        )
    return Color(np.clip(color.values, 0.0, 1.0), ColorSpace.WORKING, Context.DISPLAY)


def as_scene_referred(color: Color) -> Color:
    """Re-tag working values as scene-referred. Values are unchanged."""
    if color.space is not ColorSpace.WORKING:
        raise InvalidSpaceError(
            f"Context changes are defined for the working space only, got {color.space.value}"
        )
    return Color(color.values, ColorSpace.WORKING, Context.SCENE)


def luminance(color: Color) -> np.ndarray:
    """Relative luminance (Y) of a working-space color."""
    if color.space is not ColorSpace.WORKING:
        raise InvalidSpaceError(f"luminance needs working space, got {color.space.value}")
    return color.values @ WORKING_LUMINANCE


# ---- Constructors ----

def srgb(r: float, g: float, b: float) -> Color:
    """Encoded sRGB display color from float components in [0, 1]."""
    return Color(np.array([r, g, b], dtype=np.float64), ColorSpace.ENCODED_SRGB, Context.DISPLAY)


def srgb_u8(r: int, g: int, b: int) -> Color:
    """Encoded sRGB display color from 8-bit components."""
    return srgb(r / 255.0, g / 255.0, b / 255.0)


def working(r: float, g: float, b: float, context: Context = Context.SCENE) -> Color:
    """Working-space (ACEScg) color, scene-referred by default."""
    return Color(np.array([r, g, b], dtype=np.float64), ColorSpace.WORKING, Context(context))


def working_from_srgb_u8(r: int, g: int, b: int) -> Color:
    """Scene-referred working color from an 8-bit encoded sRGB triple (e.g. a picker)."""
    return as_scene_referred(convert(srgb_u8(r, g, b), ColorSpace.WORKING))
