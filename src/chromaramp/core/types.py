"""Core data types and enums for ChromaRamp.

CRITICAL CONVENTION:
    Pixel buffers have shape (H, W, 4) indexed as buf[y, x, channel], channel
    order R, G, B, coverage. Flattened (row-major) length is always W * H * 4.
    Color values carry their (space, context) tag; the numbers alone mean
    nothing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional

import numpy as np

from chromaramp.config import (
    DEFAULT_ANCHORS,
    DEFAULT_AUTHOR,
    DEFAULT_COMMENT,
    DEFAULT_COMPRESSION,
    DEFAULT_CONTRAST,
    DEFAULT_EXPOSURE,
    DEFAULT_HEIGHT,
    DEFAULT_TOOL,
    DEFAULT_WIDTH,
)
from chromaramp.errors import InvalidSpaceError

if TYPE_CHECKING:
    from chromaramp.core.framebuffer import Framebuffer


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ColorSpace(str, Enum):
    """Color encodings known to the conversion model."""
    ENCODED_SRGB = "encoded_srgb"
    OKLAB = "oklab"
    WORKING = "working"  # ACEScg, linear AP1 primaries


class Context(str, Enum):
    """Referential context of a color value."""
    SCENE = "scene"
    DISPLAY = "display"


class BufferMode(str, Enum):
    """Storage mode of a framebuffer."""
    DISPLAY = "display"  # uint8, encoded sRGB
    SCENE = "scene"      # float32, scene-referred working space


DISPLAY_ONLY_SPACES = frozenset({ColorSpace.ENCODED_SRGB, ColorSpace.OKLAB})


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class Color:
    """One color or an array of colors sharing a (space, context) tag."""
    values: np.ndarray  # (..., 3)
    space: ColorSpace
    context: Context

    def __post_init__(self):
        self.values = np.array(self.values, dtype=np.float64)
        if self.values.ndim == 0 or self.values.shape[-1] != 3:
            raise ValueError(f"Color values must have shape (..., 3), got {self.values.shape}")
        if self.space in DISPLAY_ONLY_SPACES and self.context is not Context.DISPLAY:
            raise InvalidSpaceError(
                f"{self.space.value} colors are display-referred only, "
                f"got context {self.context.value}"
            )
        self.values.flags.writeable = False

    @property
    def shape(self) -> tuple[int, ...]:
        """Shape of the color array without the trailing channel axis."""
        return self.values.shape[:-1]

    def with_values(self, values: np.ndarray) -> Color:
        """New color with the same tag and different numbers."""
        return Color(values, self.space, self.context)

    def same_tag(self, other: Color) -> bool:
        return self.space is other.space and self.context is other.context


@dataclass(frozen=True)
class Palette:
    """Three gradient anchors, working space, scene-referred."""
    anchor1: Color
    anchor2: Color
    anchor3: Color

    def __post_init__(self):
        for name in ("anchor1", "anchor2", "anchor3"):
            c = getattr(self, name)
            if c.space is not ColorSpace.WORKING or c.context is not Context.SCENE:
                raise InvalidSpaceError(
                    f"Palette {name} must be working/scene, "
                    f"got {c.space.value}/{c.context.value}"
                )
            if c.shape != ():
                raise ValueError(f"Palette {name} must be a single color, got shape {c.shape}")

    @classmethod
    def from_working(cls, *triples) -> Palette:
        """Build from three linear working-space RGB triples."""
        if len(triples) != 3:
            raise ValueError(f"Palette needs 3 anchors, got {len(triples)}")
        anchors = [Color(np.asarray(t, dtype=np.float64), ColorSpace.WORKING, Context.SCENE)
                   for t in triples]
        return cls(*anchors)

    @classmethod
    def from_srgb_u8(cls, *triples) -> Palette:
        """Build from three 8-bit encoded sRGB triples (e.g. a color picker)."""
        from chromaramp.color.spaces import working_from_srgb_u8

        if len(triples) != 3:
            raise ValueError(f"Palette needs 3 anchors, got {len(triples)}")
        return cls(*(working_from_srgb_u8(*t) for t in triples))

    @classmethod
    def default(cls) -> Palette:
        """Pure red, green, blue in the working space."""
        return cls.from_working(*DEFAULT_ANCHORS)

    def as_tuple(self) -> tuple[Color, Color, Color]:
        return self.anchor1, self.anchor2, self.anchor3


@dataclass(frozen=True)
class TonemapParams:
    """Options for the HDR -> SDR compression curve."""
    exposure: float = DEFAULT_EXPOSURE  # stops, pre-scales input
    contrast: float = DEFAULT_CONTRAST  # shoulder steepness, > 0

    def __post_init__(self):
        if np.isnan(self.exposure):
            raise ValueError("Tonemap exposure must be a number, got NaN")
        if not self.contrast > 0.0:
            raise ValueError(f"Tonemap contrast must be > 0, got {self.contrast}")


@dataclass
class ImageAttributes:
    """Descriptive metadata stored alongside the image channels."""
    author: str = DEFAULT_AUTHOR
    tool: str = DEFAULT_TOOL
    comment: str = DEFAULT_COMMENT


@dataclass
class ImageDocument:
    """Named float channels of identical length plus descriptive attributes.

    Channel order is canonical (sorted by name, as OpenEXR stores them).
    """
    width: int
    height: int
    channels: dict[str, np.ndarray]
    attributes: ImageAttributes = field(default_factory=ImageAttributes)

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Invalid document dimensions: {self.width}x{self.height}")
        expected = self.width * self.height
        ordered = {}
        for name in sorted(self.channels):
            data = np.ascontiguousarray(self.channels[name], dtype=np.float32).ravel()
            if data.size != expected:
                raise ValueError(
                    f"Channel '{name}' has {data.size} samples, expected {expected}"
                )
            ordered[name] = data
        self.channels = ordered

    @property
    def channel_names(self) -> tuple[str, ...]:
        return tuple(self.channels)

    def channel_image(self, name: str) -> np.ndarray:
        """Channel reshaped to (H, W)."""
        return self.channels[name].reshape(self.height, self.width)


@dataclass
class GenerationConfig:
    """Configuration for one generation pass."""
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    palette: Palette = field(default_factory=Palette.default)
    mode: BufferMode = BufferMode.SCENE
    blend_space: ColorSpace = ColorSpace.WORKING
    tonemap: TonemapParams = field(default_factory=TonemapParams)

    # Output
    output_path: Optional[Path] = None    # EXR, scene mode only
    preview_path: Optional[Path] = None   # 8-bit PNG of present()
    compression: str = DEFAULT_COMPRESSION
    attributes: ImageAttributes = field(default_factory=ImageAttributes)


@dataclass
class GenerationResult:
    """Result from a generation pass."""
    framebuffer: Framebuffer
    presented: bytes
    output_path: Optional[Path] = None
    preview_path: Optional[Path] = None
    diagnostics: dict = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Progress callback type
# ---------------------------------------------------------------------------

ProgressCallback = Callable[[str, float, str], None]
"""Callback signature: (stage_name, fraction_complete, message)."""
