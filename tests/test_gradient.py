"""Tests for the procedural gradient generator."""

from __future__ import annotations

import numpy as np
import pytest

from chromaramp.color.spaces import blend, working, working_from_srgb_u8
from chromaramp.core.gradient import fit_range, generate_gradient, uv_grid
from chromaramp.core.types import ColorSpace, Context, Palette
from chromaramp.errors import InvalidSpaceError


def _reference_pixel(palette, x, y, width, height):
    """Per-pixel evaluation of the gradient formula."""
    u = x / width
    v = y / height
    h = blend(palette.anchor1, palette.anchor2, u)
    w = blend(palette.anchor1, palette.anchor3, v)
    return blend(h, w, 0.5).values


class TestFitRange:
    """Tests for the linear remap helper."""

    def test_unit_remap(self):
        assert fit_range(50.0, 0.0, 200.0, 0.0, 1.0) == pytest.approx(0.25)

    def test_no_clamping(self):
        assert fit_range(300.0, 0.0, 200.0, 0.0, 1.0) == pytest.approx(1.5)
        assert fit_range(-100.0, 0.0, 200.0, 0.0, 1.0) == pytest.approx(-0.5)

    def test_arbitrary_ranges(self):
        assert fit_range(5.0, 0.0, 10.0, -1.0, 1.0) == pytest.approx(0.0)


class TestUVGrid:
    """Tests for normalized coordinates."""

    def test_shape_and_range(self):
        u, v = uv_grid(4, 3)
        assert u.shape == (3, 4)
        assert v.shape == (3, 4)
        assert u.min() == 0.0 and u.max() < 1.0
        assert v.min() == 0.0 and v.max() < 1.0

    def test_axes(self):
        """u varies along columns, v along rows."""
        u, v = uv_grid(4, 2)
        np.testing.assert_allclose(u[0], [0.0, 0.25, 0.5, 0.75])
        np.testing.assert_allclose(v[:, 0], [0.0, 0.5])


class TestGenerateGradient:
    """Tests for generate_gradient."""

    def test_two_by_two_scenario(self, rgb_palette):
        """Pure R/G/B anchors at u, v in {0, 0.5}."""
        out = generate_gradient(2, 2, rgb_palette)
        assert out.space is ColorSpace.WORKING
        assert out.context is Context.SCENE
        assert out.shape == (2, 2)

        np.testing.assert_allclose(out.values[0, 0], [1.0, 0.0, 0.0])
        np.testing.assert_allclose(out.values[0, 1], [0.75, 0.25, 0.0])
        np.testing.assert_allclose(out.values[1, 0], [0.75, 0.0, 0.25])
        np.testing.assert_allclose(out.values[1, 1], [0.5, 0.25, 0.25])

        pixels = {tuple(p) for p in out.values.reshape(-1, 3)}
        assert len(pixels) == 4

    def test_matches_per_pixel_reference(self, hdr_palette):
        """Vectorized output equals the per-pixel formula in either loop order."""
        width, height = 7, 5
        out = generate_gradient(width, height, hdr_palette)

        for x in range(width):
            for y in range(height):
                np.testing.assert_allclose(
                    out.values[y, x], _reference_pixel(hdr_palette, x, y, width, height),
                    rtol=0, atol=1e-12,
                )
        for y in range(height):
            for x in range(width):
                np.testing.assert_allclose(
                    out.values[y, x], _reference_pixel(hdr_palette, x, y, width, height),
                    rtol=0, atol=1e-12,
                )

    def test_deterministic(self, hdr_palette):
        a = generate_gradient(31, 17, hdr_palette)
        b = generate_gradient(31, 17, hdr_palette)
        np.testing.assert_array_equal(a.values, b.values)

    def test_scene_values_unbounded(self, hdr_palette):
        """Scene-referred output keeps values above 1.0."""
        out = generate_gradient(16, 16, hdr_palette)
        assert out.values.max() > 1.0

    def test_default_palette(self):
        out = generate_gradient(2, 2)
        np.testing.assert_allclose(out.values[0, 0], [1.0, 0.0, 0.0])

    @pytest.mark.parametrize("width,height", [(0, 5), (5, 0), (0, 0)])
    def test_zero_dimensions_empty(self, width, height):
        """Zero width or height yields an empty result, not an error."""
        out = generate_gradient(width, height)
        assert out.values.size == 0
        assert out.values.shape == (height, width, 3)

    def test_negative_dimensions_rejected(self):
        with pytest.raises(ValueError):
            generate_gradient(-1, 4)

    def test_oklab_blend_corner(self, rgb_palette):
        """Oklab blending still reproduces anchor1 at the origin."""
        out = generate_gradient(4, 4, rgb_palette, blend_space=ColorSpace.OKLAB)
        assert out.context is Context.SCENE
        assert out.space is ColorSpace.WORKING
        np.testing.assert_allclose(out.values[0, 0], [1.0, 0.0, 0.0], atol=1e-6)

    def test_oklab_differs_from_working(self, rgb_palette):
        lin = generate_gradient(4, 4, rgb_palette)
        lab = generate_gradient(4, 4, rgb_palette, blend_space=ColorSpace.OKLAB)
        assert not np.allclose(lin.values[1:, 1:], lab.values[1:, 1:])

    def test_unsupported_blend_space(self, rgb_palette):
        with pytest.raises(ValueError):
            generate_gradient(2, 2, rgb_palette, blend_space=ColorSpace.ENCODED_SRGB)


class TestPalette:
    """Tests for palette construction."""

    def test_anchors_immutable(self, rgb_palette):
        with pytest.raises(ValueError):
            rgb_palette.anchor1.values[1] = 0.5

    def test_from_srgb_u8_matches_picker_helper(self):
        p = Palette.from_srgb_u8((10, 200, 30), (0, 0, 0), (255, 255, 255))
        np.testing.assert_array_equal(p.anchor1.values, working_from_srgb_u8(10, 200, 30).values)

    def test_from_srgb_u8(self):
        p = Palette.from_srgb_u8((255, 0, 0), (0, 255, 0), (0, 0, 255))
        assert p.anchor1.context is Context.SCENE
        assert p.anchor1.space is ColorSpace.WORKING
        # sRGB red is inside AP1, so no negative components
        assert np.all(p.anchor1.values >= -1e-9)

    def test_rejects_display_anchor(self):
        with pytest.raises(InvalidSpaceError):
            Palette(
                working(1.0, 0.0, 0.0, Context.DISPLAY),
                working(0.0, 1.0, 0.0),
                working(0.0, 0.0, 1.0),
            )

    def test_needs_three(self):
        with pytest.raises(ValueError):
            Palette.from_working((1.0, 0.0, 0.0), (0.0, 1.0, 0.0))
