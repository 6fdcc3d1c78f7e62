"""Tests for Framebuffer populate/present semantics."""

from __future__ import annotations

import numpy as np
import pytest

from chromaramp.core.framebuffer import Framebuffer
from chromaramp.core.types import BufferMode, ColorSpace, TonemapParams
from chromaramp.errors import InvalidSpaceError, UninitializedBufferError


class TestLifecycle:
    """Tests for sequencing rules."""

    def test_present_before_populate(self):
        fb = Framebuffer(4, 4)
        with pytest.raises(UninitializedBufferError):
            fb.present()

    def test_buffer_before_populate(self):
        fb = Framebuffer(4, 4, mode=BufferMode.DISPLAY)
        assert not fb.is_populated
        with pytest.raises(UninitializedBufferError):
            fb.buffer

    def test_resize_invalidates(self, scene_framebuffer):
        scene_framebuffer.resize(3, 2)
        assert not scene_framebuffer.is_populated
        with pytest.raises(UninitializedBufferError):
            scene_framebuffer.present()
        scene_framebuffer.populate()
        assert scene_framebuffer.buffer.shape == (2, 3, 4)
        assert len(scene_framebuffer.present()) == 3 * 2 * 4

    def test_negative_dimensions(self):
        with pytest.raises(ValueError):
            Framebuffer(-2, 4)

    def test_repopulate_is_identical(self, hdr_palette):
        fb = Framebuffer(9, 7, palette=hdr_palette)
        first = fb.populate().copy()
        second = fb.populate()
        np.testing.assert_array_equal(first, second)


class TestSizeInvariant:
    """Buffer length is always width * height * 4."""

    @pytest.mark.parametrize("mode", [BufferMode.SCENE, BufferMode.DISPLAY])
    @pytest.mark.parametrize("width,height", [(1, 1), (2, 3), (17, 5), (64, 64)])
    def test_lengths(self, mode, width, height):
        fb = Framebuffer(width, height, mode=mode)
        buf = fb.populate()
        assert buf.size == width * height * 4
        assert fb.size == width * height * 4
        assert len(fb.present()) == width * height * 4

    def test_zero_size(self):
        fb = Framebuffer(0, 3)
        fb.populate()
        assert fb.present() == b""


class TestSceneMode:
    """Tests for the float scene buffer."""

    def test_dtype_and_coverage(self, scene_framebuffer):
        buf = scene_framebuffer.buffer
        assert buf.dtype == np.float32
        np.testing.assert_array_equal(buf[..., 3], 1.0)

    def test_buffer_read_only(self, scene_framebuffer):
        with pytest.raises(ValueError):
            scene_framebuffer.buffer[0, 0, 0] = 5.0

    def test_present_idempotent(self, hdr_palette):
        fb = Framebuffer(12, 8, palette=hdr_palette, tonemap=TonemapParams(exposure=1.0))
        fb.populate()
        before = fb.buffer.copy()
        a = fb.present()
        b = fb.present()
        assert a == b
        np.testing.assert_array_equal(fb.buffer, before)

    def test_keeps_hdr_values(self, hdr_palette):
        fb = Framebuffer(8, 8, palette=hdr_palette)
        assert fb.populate().max() > 1.0

    def test_present_is_opaque_rgba(self, scene_framebuffer):
        out = np.frombuffer(scene_framebuffer.present(), dtype=np.uint8).reshape(6, 8, 4)
        np.testing.assert_array_equal(out[..., 3], 255)

    def test_exposure_brightens(self, rgb_palette):
        dim = Framebuffer(4, 4, palette=rgb_palette, tonemap=TonemapParams(exposure=-2.0))
        bright = Framebuffer(4, 4, palette=rgb_palette, tonemap=TonemapParams(exposure=2.0))
        dim.populate()
        bright.populate()
        a = np.frombuffer(dim.present(), dtype=np.uint8).astype(int)
        b = np.frombuffer(bright.present(), dtype=np.uint8).astype(int)
        assert b.sum() > a.sum()

    def test_to_document(self, scene_framebuffer, attributes):
        doc = scene_framebuffer.to_document(attributes)
        assert doc.channel_names == ("B", "G", "R")
        assert doc.attributes.author == "Test Author"
        np.testing.assert_array_equal(
            doc.channel_image("R"), scene_framebuffer.buffer[..., 0]
        )

    def test_to_document_before_populate(self):
        with pytest.raises(UninitializedBufferError):
            Framebuffer(2, 2).to_document()


class TestDisplayMode:
    """Tests for the 8-bit display buffer."""

    def test_dtype(self, display_framebuffer):
        assert display_framebuffer.buffer.dtype == np.uint8

    def test_present_passthrough(self, display_framebuffer):
        assert display_framebuffer.present() == display_framebuffer.buffer.tobytes()

    def test_origin_is_red(self, display_framebuffer):
        """ACEScg red clamps to pure sRGB red on the direct path."""
        np.testing.assert_array_equal(display_framebuffer.buffer[0, 0], [255, 0, 0, 255])

    def test_no_document(self, display_framebuffer):
        with pytest.raises(InvalidSpaceError):
            display_framebuffer.to_document()

    def test_oklab_blend(self, rgb_palette):
        fb = Framebuffer(6, 6, mode=BufferMode.DISPLAY, palette=rgb_palette,
                         blend_space=ColorSpace.OKLAB)
        buf = fb.populate()
        assert buf.shape == (6, 6, 4)
        np.testing.assert_array_equal(buf[0, 0], [255, 0, 0, 255])
