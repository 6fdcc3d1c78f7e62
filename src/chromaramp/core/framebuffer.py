"""Framebuffer: owns the pixel storage for one generation pass.

Two storage modes, fixed at construction:
    SCENE   -- (H, W, 4) float32, scene-referred ACEScg, unbounded.
               present() tonemaps to display bytes on every call.
    DISPLAY -- (H, W, 4) uint8, encoded sRGB. populate() applies the direct
               display conversion; present() passes the bytes through.

The stored buffer is written once per populate() and marked read-only.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from chromaramp.color.spaces import as_display_referred, convert, to_display_bytes
from chromaramp.color.tonemap import tonemap_rgba
from chromaramp.core.gradient import generate_gradient
from chromaramp.core.types import (
    BufferMode,
    ColorSpace,
    ImageAttributes,
    ImageDocument,
    Palette,
    TonemapParams,
)
from chromaramp.errors import InvalidSpaceError, UninitializedBufferError

logger = logging.getLogger(__name__)


class Framebuffer:
    """Pixel storage plus the populate/present operations."""

    def __init__(
        self,
        width: int,
        height: int,
        mode: BufferMode = BufferMode.SCENE,
        palette: Optional[Palette] = None,
        tonemap: Optional[TonemapParams] = None,
        blend_space: ColorSpace = ColorSpace.WORKING,
    ):
        self._check_dimensions(width, height)
        self.width = width
        self.height = height
        self.mode = BufferMode(mode)
        self.palette = palette or Palette.default()
        self.tonemap = tonemap or TonemapParams()
        self.blend_space = ColorSpace(blend_space)
        self._buffer: Optional[np.ndarray] = None

    @staticmethod
    def _check_dimensions(width: int, height: int) -> None:
        if width < 0 or height < 0:
            raise ValueError(f"Invalid framebuffer dimensions: {width}x{height}")

    @property
    def size(self) -> int:
        """Flat buffer length, width * height * 4."""
        return self.width * self.height * 4

    @property
    def is_populated(self) -> bool:
        return self._buffer is not None

    @property
    def buffer(self) -> np.ndarray:
        """The read-only (H, W, 4) storage."""
        if self._buffer is None:
            raise UninitializedBufferError("Framebuffer has not been populated")
        return self._buffer

    def resize(self, width: int, height: int) -> None:
        """Change dimensions. The buffer must be populated again."""
        self._check_dimensions(width, height)
        self.width = width
        self.height = height
        self._buffer = None
        logger.debug("Framebuffer resized to %dx%d", width, height)

    def populate(self) -> np.ndarray:
        """Run the gradient generator and store the result.

        Returns:
            The new read-only (H, W, 4) buffer.
        """
        color = generate_gradient(self.width, self.height, self.palette, self.blend_space)

        if self.mode is BufferMode.SCENE:
            buf = np.empty((self.height, self.width, 4), dtype=np.float32)
            buf[..., :3] = color.values
            buf[..., 3] = 1.0
        else:
            encoded = convert(as_display_referred(color), ColorSpace.ENCODED_SRGB)
            buf = np.empty((self.height, self.width, 4), dtype=np.uint8)
            buf[..., :3] = to_display_bytes(encoded)
            buf[..., 3] = 255

        buf.flags.writeable = False
        self._buffer = buf
        logger.debug(
            "Populated %s framebuffer %dx%d", self.mode.value, self.width, self.height
        )
        return buf

    def present(self) -> bytes:
        """Display-ready RGBA bytes, length width * height * 4.

        Scene buffers are tonemapped on every call; display buffers are
        returned as stored. The owned buffer is never modified.
        """
        buf = self.buffer
        if self.mode is BufferMode.SCENE:
            return tonemap_rgba(buf, self.tonemap).tobytes()
        return buf.tobytes()

    def to_document(self, attributes: Optional[ImageAttributes] = None) -> ImageDocument:
        """Build the EXR document from the scene buffer."""
        if self.mode is not BufferMode.SCENE:
            raise InvalidSpaceError("Only scene-referred framebuffers can be encoded as float images")
        from chromaramp.io.exr import encode_document

        return encode_document(self.buffer, self.width, self.height, attributes)
