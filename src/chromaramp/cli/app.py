"""ChromaRamp CLI application.

Commands:
    render   - Generate a gradient, write it as OpenEXR and/or a PNG preview
    inspect  - Show size, attributes and channel statistics of an EXR file
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import numpy as np
import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TimeElapsedColumn
from rich.table import Table

from chromaramp import __version__
from chromaramp.color.spaces import working, working_from_srgb_u8
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
from chromaramp.core.types import (
    BufferMode,
    Color,
    ColorSpace,
    GenerationConfig,
    ImageAttributes,
    Palette,
    TonemapParams,
)
from chromaramp.errors import ChromaRampError

app = typer.Typer(
    name="chromaramp",
    help="Procedural HDR gradient generator with OpenEXR export.",
    no_args_is_help=True,
)
console = Console()

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)


def version_callback(value: bool):
    if value:
        console.print(f"ChromaRamp v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False, "--version", "-V", help="Show version and exit.",
        callback=version_callback, is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
):
    if verbose:
        logging.getLogger("chromaramp").setLevel(logging.DEBUG)


_STAGE_WEIGHTS = {
    "generate": 40,
    "present": 30,
    "export": 20,
    "preview": 10,
}


def parse_anchor(text: str) -> Color:
    """Parse '#rrggbb' (encoded sRGB) or 'r,g,b' (linear ACEScg floats)."""
    value = text.strip()
    if value.startswith("#"):
        digits = value[1:]
        if len(digits) != 6:
            raise typer.BadParameter(f"Hex colors need 6 digits, got '{text}'.")
        try:
            r, g, b = (int(digits[i:i + 2], 16) for i in (0, 2, 4))
        except ValueError:
            raise typer.BadParameter(f"Invalid hex color '{text}'.")
        return working_from_srgb_u8(r, g, b)

    parts = [p.strip() for p in value.split(",")]
    if len(parts) != 3:
        raise typer.BadParameter(f"Anchor must be '#rrggbb' or 'r,g,b', got '{text}'.")
    try:
        r, g, b = (float(p) for p in parts)
    except ValueError:
        raise typer.BadParameter(f"Invalid anchor components '{text}'.")
    return working(r, g, b)


def _default_anchor(index: int) -> str:
    return ",".join(f"{c:g}" for c in DEFAULT_ANCHORS[index])


@app.command()
def render(
    width: int = typer.Option(DEFAULT_WIDTH, "-W", "--width", min=1, help="Buffer width."),
    height: int = typer.Option(DEFAULT_HEIGHT, "-H", "--height", min=1, help="Buffer height."),
    mode: str = typer.Option("scene", "--mode", help="Buffer mode (scene, display)."),
    anchor1: str = typer.Option(_default_anchor(0), "--anchor1", help="Corner anchor."),
    anchor2: str = typer.Option(_default_anchor(1), "--anchor2", help="Horizontal anchor."),
    anchor3: str = typer.Option(_default_anchor(2), "--anchor3", help="Vertical anchor."),
    blend_space: str = typer.Option("working", "--blend-space", help="Blend space (working, oklab)."),
    exposure: float = typer.Option(DEFAULT_EXPOSURE, "--exposure", help="Tonemap exposure (stops)."),
    contrast: float = typer.Option(DEFAULT_CONTRAST, "--contrast", help="Tonemap contrast (> 0)."),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Output EXR path."),
    preview: Optional[Path] = typer.Option(None, "-p", "--preview", help="Output PNG preview path."),
    compression: str = typer.Option(DEFAULT_COMPRESSION, "--compression", help="EXR compression."),
    author: str = typer.Option(DEFAULT_AUTHOR, "--author", help="Author / owner metadata."),
    comment: str = typer.Option(DEFAULT_COMMENT, "--comment", help="Free-text comment metadata."),
):
    """Generate a gradient and write it to disk."""
    if mode not in {"scene", "display"}:
        raise typer.BadParameter("Mode must be one of: scene, display.")
    if blend_space not in {"working", "oklab"}:
        raise typer.BadParameter("Blend space must be one of: working, oklab.")
    if contrast <= 0:
        raise typer.BadParameter("Contrast must be > 0.")

    config = GenerationConfig(
        width=width,
        height=height,
        palette=Palette(parse_anchor(anchor1), parse_anchor(anchor2), parse_anchor(anchor3)),
        mode=BufferMode(mode),
        blend_space=ColorSpace(blend_space),
        tonemap=TonemapParams(exposure=exposure, contrast=contrast),
        output_path=output,
        preview_path=preview,
        compression=compression,
        attributes=ImageAttributes(author=author, tool=f"{DEFAULT_TOOL} {__version__}", comment=comment),
    )

    from chromaramp.pipeline.runner import run_generation

    console.print(f"\n[bold]ChromaRamp Render[/bold]")
    console.print(f"  Size:     {width}x{height}")
    console.print(f"  Mode:     {mode}")
    console.print(f"  Blend:    {blend_space}")
    console.print(f"  Tonemap:  exposure {exposure:+.2f}, contrast {contrast:.2f}")
    console.print()

    stages = list(_STAGE_WEIGHTS)
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Rendering...", total=100)

        def on_progress(stage: str, fraction: float, message: str):
            base = sum(_STAGE_WEIGHTS[s] for s in stages[:stages.index(stage)]) if stage in stages else 0
            pct = base + _STAGE_WEIGHTS.get(stage, 0) * fraction
            progress.update(task, completed=pct,
                            description=f"{stage}: {message}" if message else stage)

        try:
            result = run_generation(config, progress_callback=on_progress)
            progress.update(task, completed=100, description="Complete")
        except (ChromaRampError, OSError) as e:
            console.print(f"\n[red]Error:[/red] {e}")
            raise typer.Exit(code=1)

    console.print()
    _print_summary(result.diagnostics)

    if result.output_path:
        console.print(f"\n[green]EXR:[/green] {result.output_path}")
    if result.preview_path:
        console.print(f"[green]Preview:[/green] {result.preview_path}")

    total_time = result.diagnostics.get("total_time", 0)
    console.print(f"[dim]Total time: {total_time:.2f}s[/dim]\n")


@app.command()
def inspect(
    path: Path = typer.Argument(..., help="EXR file to inspect."),
):
    """Show size, metadata and channel statistics of an EXR file."""
    from chromaramp.io.exr import read_document

    try:
        document = read_document(path)
    except (ChromaRampError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    console.print(f"\n[bold]{path}[/bold]")
    console.print(f"  Size:     {document.width}x{document.height}")
    console.print(f"  Author:   {document.attributes.author}")
    console.print(f"  Tool:     {document.attributes.tool}")
    console.print(f"  Comment:  {document.attributes.comment}")
    console.print()

    table = Table(title="Channels", show_header=True, header_style="bold")
    table.add_column("Channel", style="cyan")
    table.add_column("Min", justify="right")
    table.add_column("Max", justify="right")
    table.add_column("Mean", justify="right")
    for name, data in document.channels.items():
        if data.size:
            table.add_row(name, f"{np.min(data):.6f}", f"{np.max(data):.6f}", f"{np.mean(data):.6f}")
        else:
            table.add_row(name, "-", "-", "-")
    console.print(table)
    console.print()


def _print_summary(diagnostics: dict):
    """Display generation diagnostics in a formatted table."""
    table = Table(title="Render Summary", show_header=True, header_style="bold")
    table.add_column("Item", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Image size", str(diagnostics.get("image_size", "")))
    table.add_row("Pixels", f"{diagnostics.get('total_pixels', 0):,}")
    table.add_row("Mode", str(diagnostics.get("mode", "")))
    table.add_row("Blend space", str(diagnostics.get("blend_space", "")))
    if "value_min" in diagnostics:
        table.add_row("Value range", f"{diagnostics['value_min']:.4f} .. {diagnostics['value_max']:.4f}")
    for stage in _STAGE_WEIGHTS:
        key = f"{stage}_time"
        if key in diagnostics:
            table.add_row(f"{stage.capitalize()} time", f"{diagnostics[key]:.3f}s")

    console.print(table)


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
