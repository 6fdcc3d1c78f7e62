"""Image I/O helpers for 8-bit previews of the presentation buffer.

Previews are written with imageio v3. The float scene buffer never goes
through here; see chromaramp.io.exr.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import imageio.v3 as iio
import numpy as np

from chromaramp.config import MAX_IMAGE_DIMENSION, MAX_IMAGE_PIXELS, PREVIEW_EXTENSIONS
from chromaramp.errors import ImageDimensionError, ImageFormatError, ImageWriteError

logger = logging.getLogger(__name__)


def validate_output_path(filepath: str | Path) -> Path:
    """Validate an output file path.

    Args:
        filepath: Path to validate.

    Returns:
        Resolved Path object.

    Raises:
        FileNotFoundError: If parent directory does not exist.
        PermissionError: If the parent directory is not writable.
    """
    path = Path(filepath).resolve()

    if not path.parent.is_dir():
        raise FileNotFoundError(f"Output directory does not exist: {path.parent}")

    if not os.access(path.parent, os.W_OK):
        raise PermissionError(f"Cannot write to directory: {path.parent}")

    return path


def validate_dimensions(width: int, height: int) -> None:
    """Check image dimensions before memory allocation."""
    if width <= 0 or height <= 0:
        raise ImageDimensionError(f"Invalid image dimensions: {width}x{height}")
    if width > MAX_IMAGE_DIMENSION or height > MAX_IMAGE_DIMENSION:
        raise ImageDimensionError(
            f"Image dimension {max(width, height)} exceeds "
            f"maximum allowed {MAX_IMAGE_DIMENSION}"
        )
    if width * height > MAX_IMAGE_PIXELS:
        raise ImageDimensionError(
            f"Image has {width * height:,} pixels, exceeds "
            f"maximum allowed {MAX_IMAGE_PIXELS:,}"
        )


def save_preview(rgba: bytes, width: int, height: int, filepath: str | Path) -> Path:
    """Save presentation bytes (RGBA, 8-bit, encoded sRGB) as an image file.

    Returns:
        Resolved output path.

    Raises:
        ImageWriteError: On any failure, chained to the cause.
    """
    path = Path(filepath)
    if path.suffix.lower() not in PREVIEW_EXTENSIONS:
        raise ImageWriteError(
            f"Unsupported preview format: {path.suffix}. "
            f"Supported: {', '.join(sorted(PREVIEW_EXTENSIONS))}"
        )
    if len(rgba) != width * height * 4:
        raise ImageWriteError(
            f"Preview has {len(rgba)} bytes, expected {width * height * 4} for {width}x{height}"
        )

    try:
        validate_dimensions(width, height)
        path = validate_output_path(path)
        pixels = np.frombuffer(rgba, dtype=np.uint8).reshape(height, width, 4)
        iio.imwrite(str(path), pixels)
    except (OSError, ImageDimensionError) as e:
        raise ImageWriteError(f"Failed to write preview {path}: {e}") from e

    logger.info("Saved preview: %s (%dx%d)", path, width, height)
    return path


def load_preview(filepath: str | Path) -> np.ndarray:
    """Load an 8-bit preview as an (H, W, 4) uint8 array."""
    path = Path(filepath)
    if not path.is_file():
        raise FileNotFoundError(f"Input file not found: {path}")

    raw = iio.imread(str(path))
    if raw.dtype != np.uint8 or raw.ndim != 3 or raw.shape[2] not in (3, 4):
        raise ImageFormatError(f"Unsupported preview layout: {raw.shape} {raw.dtype}")
    if raw.shape[2] == 3:
        alpha = np.full(raw.shape[:2] + (1,), 255, dtype=np.uint8)
        raw = np.concatenate([raw, alpha], axis=2)
    return raw
