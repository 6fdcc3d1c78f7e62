"""Tests for the typer CLI."""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from chromaramp import __version__
from chromaramp.cli.app import app, parse_anchor
from chromaramp.core.types import ColorSpace, Context

runner = CliRunner()


class TestParseAnchor:
    """Tests for anchor option parsing."""

    def test_float_triple(self):
        color = parse_anchor("4.0, 0.5,0")
        assert color.space is ColorSpace.WORKING
        assert color.context is Context.SCENE
        assert color.values.tolist() == [4.0, 0.5, 0.0]

    def test_hex(self):
        """'#ffffff' is encoded sRGB white, which is neutral in ACEScg."""
        color = parse_anchor("#ffffff")
        assert color.space is ColorSpace.WORKING
        assert color.values == pytest.approx([1.0, 1.0, 1.0], abs=1e-4)

    @pytest.mark.parametrize("text", ["#fff", "#gg0000", "1,2", "a,b,c"])
    def test_invalid(self, text):
        import typer
        with pytest.raises(typer.BadParameter):
            parse_anchor(text)


class TestCommands:
    """Tests for CLI commands."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_render_and_inspect(self, tmp_exr_path, tmp_png_path):
        result = runner.invoke(app, [
            "render", "-W", "8", "-H", "4",
            "--anchor1", "2,0,0", "--anchor2", "#00ff00",
            "--exposure", "0.5",
            "-o", str(tmp_exr_path), "-p", str(tmp_png_path),
            "--author", "CLI Tester",
        ])
        assert result.exit_code == 0, result.output
        assert tmp_exr_path.exists()
        assert tmp_png_path.exists()

        result = runner.invoke(app, ["inspect", str(tmp_exr_path)])
        assert result.exit_code == 0, result.output
        assert "8x4" in result.output
        assert "CLI Tester" in result.output

    def test_render_display_exr_fails(self, tmp_exr_path):
        result = runner.invoke(app, [
            "render", "-W", "4", "-H", "4", "--mode", "display", "-o", str(tmp_exr_path),
        ])
        assert result.exit_code == 1
        assert not tmp_exr_path.exists()

    def test_render_bad_anchor(self):
        result = runner.invoke(app, ["render", "--anchor1", "#12"])
        assert result.exit_code != 0

    def test_render_bad_mode(self):
        result = runner.invoke(app, ["render", "--mode", "film"])
        assert result.exit_code != 0

    def test_inspect_missing(self, tmp_path):
        result = runner.invoke(app, ["inspect", str(tmp_path / "none.exr")])
        assert result.exit_code == 1
