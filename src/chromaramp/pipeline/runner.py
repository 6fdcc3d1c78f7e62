"""Pipeline runner: one generation pass from configuration to files on disk.

This is the single entry point for the CLI and for any UI collaborator.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

import numpy as np

from chromaramp.core.framebuffer import Framebuffer
from chromaramp.core.types import (
    BufferMode,
    GenerationConfig,
    GenerationResult,
    ProgressCallback,
)
from chromaramp.errors import PipelineError
from chromaramp.io.exr import write_document
from chromaramp.io.image import save_preview

logger = logging.getLogger(__name__)


def _emit_progress(
    callback: Optional[ProgressCallback],
    stage: str,
    fraction: float,
    message: str = "",
) -> None:
    """Emit progress update if callback is provided."""
    if callback is not None:
        callback(stage, fraction, message)


def run_generation(
    config: GenerationConfig,
    progress_callback: Optional[ProgressCallback] = None,
) -> GenerationResult:
    """Run a complete generation pass.

    Stages:
        1. Generate: populate the framebuffer
        2. Present: tonemap (scene mode) to display bytes
        3. Export: write the scene buffer as OpenEXR (if output_path)
        4. Preview: write the display bytes as PNG (if preview_path)

    Args:
        config: Generation configuration.
        progress_callback: (stage_name, fraction, message) callback.

    Returns:
        GenerationResult with the framebuffer, bytes, paths and diagnostics.

    Raises:
        PipelineError: If EXR export is requested from a display buffer.
        ImageWriteError: If writing a file fails.
    """
    t_start = time.perf_counter()
    diagnostics = {}

    if config.output_path is not None and config.mode is not BufferMode.SCENE:
        raise PipelineError("EXR export needs a scene-referred buffer; use scene mode")

    # ---------------------------------------------------------------
    # Stage 1: Generate
    # ---------------------------------------------------------------
    _emit_progress(progress_callback, "generate", 0.0, "Generating gradient...")

    t0 = time.perf_counter()
    fb = Framebuffer(
        config.width,
        config.height,
        mode=config.mode,
        palette=config.palette,
        tonemap=config.tonemap,
        blend_space=config.blend_space,
    )
    buf = fb.populate()
    diagnostics["generate_time"] = time.perf_counter() - t0
    diagnostics["image_size"] = f"{config.width}x{config.height}"
    diagnostics["total_pixels"] = config.width * config.height
    diagnostics["mode"] = config.mode.value
    diagnostics["blend_space"] = config.blend_space.value
    if buf.size:
        diagnostics["value_min"] = float(np.min(buf[..., :3]))
        diagnostics["value_max"] = float(np.max(buf[..., :3]))

    _emit_progress(progress_callback, "generate", 1.0, "Gradient ready")
    logger.info("Generate: %.3fs", diagnostics["generate_time"])

    # ---------------------------------------------------------------
    # Stage 2: Present
    # ---------------------------------------------------------------
    _emit_progress(progress_callback, "present", 0.0, "Tonemapping...")

    t0 = time.perf_counter()
    presented = fb.present()
    diagnostics["present_time"] = time.perf_counter() - t0

    _emit_progress(progress_callback, "present", 1.0, f"{len(presented):,} bytes")
    logger.info("Present: %.3fs", diagnostics["present_time"])

    # ---------------------------------------------------------------
    # Stage 3: Export
    # ---------------------------------------------------------------
    output_path = None
    if config.output_path is not None:
        _emit_progress(progress_callback, "export", 0.0, "Writing EXR...")

        t0 = time.perf_counter()
        document = fb.to_document(config.attributes)
        output_path = write_document(document, config.output_path, config.compression)
        diagnostics["export_time"] = time.perf_counter() - t0

        _emit_progress(progress_callback, "export", 1.0, f"Saved: {output_path}")
        logger.info("Export: %.3fs -> %s", diagnostics["export_time"], output_path)

    # ---------------------------------------------------------------
    # Stage 4: Preview
    # ---------------------------------------------------------------
    preview_path = None
    if config.preview_path is not None:
        _emit_progress(progress_callback, "preview", 0.0, "Writing preview...")

        t0 = time.perf_counter()
        preview_path = save_preview(presented, config.width, config.height, config.preview_path)
        diagnostics["preview_time"] = time.perf_counter() - t0

        _emit_progress(progress_callback, "preview", 1.0, f"Saved: {preview_path}")

    total_time = time.perf_counter() - t_start
    diagnostics["total_time"] = total_time
    logger.info("Generation complete: %.3fs total", total_time)

    return GenerationResult(
        framebuffer=fb,
        presented=presented,
        output_path=output_path,
        preview_path=preview_path,
        diagnostics=diagnostics,
    )
