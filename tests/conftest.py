"""Shared fixtures for ChromaRamp tests."""

from __future__ import annotations

import numpy as np
import pytest

from chromaramp.core.types import (
    BufferMode,
    ImageAttributes,
    Palette,
)


@pytest.fixture
def rgb_palette():
    """Pure red, green, blue anchors in the working space."""
    return Palette.from_working((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0))


@pytest.fixture
def hdr_palette():
    """Anchors well above 1.0, exercising the tonemapper."""
    return Palette.from_working((4.0, 0.5, 0.1), (0.2, 8.0, 0.3), (0.1, 0.4, 16.0))


@pytest.fixture
def random_unit_colors():
    """Random (M, 3) float64 colors in [0, 1]."""
    rng = np.random.default_rng(42)
    return rng.random((500, 3))


@pytest.fixture
def scene_framebuffer(rgb_palette):
    """Small populated scene-mode framebuffer."""
    from chromaramp.core.framebuffer import Framebuffer

    fb = Framebuffer(8, 6, mode=BufferMode.SCENE, palette=rgb_palette)
    fb.populate()
    return fb


@pytest.fixture
def display_framebuffer(rgb_palette):
    """Small populated display-mode framebuffer."""
    from chromaramp.core.framebuffer import Framebuffer

    fb = Framebuffer(8, 6, mode=BufferMode.DISPLAY, palette=rgb_palette)
    fb.populate()
    return fb


@pytest.fixture
def attributes():
    """Metadata used by codec tests."""
    return ImageAttributes(author="Test Author", tool="ChromaRamp Tests", comment="unit test")


@pytest.fixture
def tmp_exr_path(tmp_path):
    """Temporary .exr output path."""
    return tmp_path / "test_output.exr"


@pytest.fixture
def tmp_png_path(tmp_path):
    """Temporary .png output path."""
    return tmp_path / "preview.png"
