"""OpenEXR codec for scene-referred float buffers.

Documents hold one layer with 32-bit float channels R, G, B plus
descriptive attributes. Files are written through OpenImageIO:

    ImageDescription  -> EXR "comments"  (free-text comment)
    Artist            -> author / owner
    Software          -> generating tool

Compression defaults to ZIP, which is lossless, so channel values survive a
write/read round trip bit for bit.
"""

from __future__ import annotations

import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Optional

import numpy as np
import OpenImageIO as oiio

from chromaramp.config import (
    DEFAULT_COMPRESSION,
    EXR_CHANNELS,
    EXR_EXTENSIONS,
    LOSSLESS_COMPRESSIONS,
)
from chromaramp.core.types import ImageAttributes, ImageDocument
from chromaramp.errors import (
    ImageDimensionError,
    ImageFormatError,
    ImageWriteError,
    UninitializedBufferError,
)
from chromaramp.io.image import validate_dimensions, validate_output_path

logger = logging.getLogger(__name__)

_ATTR_COMMENT = "ImageDescription"
_ATTR_AUTHOR = "Artist"
_ATTR_TOOL = "Software"


def encode_document(
    buffer: Optional[np.ndarray],
    width: int,
    height: int,
    attributes: Optional[ImageAttributes] = None,
) -> ImageDocument:
    """Extract R, G, B float channels from a scene RGBA buffer.

    Coverage is dropped.

    Args:
        buffer: (H, W, 4) or flat (W * H * 4,) scene buffer.
        width: Buffer width.
        height: Buffer height.
        attributes: Metadata; defaults if omitted.

    Returns:
        ImageDocument with channels in canonical order.
    """
    if buffer is None:
        raise UninitializedBufferError("No scene buffer to encode; populate first")

    data = np.asarray(buffer, dtype=np.float32)
    expected = width * height * 4
    if data.size != expected:
        raise ValueError(
            f"Scene buffer has {data.size} values, expected {expected} for {width}x{height}"
        )
    data = data.reshape(height, width, 4)

    channels = {name: data[..., i].ravel() for i, name in enumerate(EXR_CHANNELS)}
    return ImageDocument(
        width=width,
        height=height,
        channels=channels,
        attributes=attributes if attributes is not None else ImageAttributes(),
    )


def _check_document(document: ImageDocument, path: Path, compression: str) -> None:
    """Reject configurations the writer cannot store."""
    if path.suffix.lower() not in EXR_EXTENSIONS:
        raise ImageWriteError(
            f"Unsupported output format: {path.suffix}. "
            f"Supported: {', '.join(sorted(EXR_EXTENSIONS))}"
        )
    if compression not in LOSSLESS_COMPRESSIONS:
        raise ImageWriteError(
            f"Unsupported compression: {compression}. "
            f"Supported: {', '.join(sorted(LOSSLESS_COMPRESSIONS))}"
        )
    if set(document.channel_names) != set(EXR_CHANNELS):
        raise ImageWriteError(
            f"Unsupported channel configuration: {document.channel_names}; "
            f"expected {EXR_CHANNELS}"
        )
    try:
        validate_dimensions(document.width, document.height)
    except ImageDimensionError as e:
        raise ImageWriteError(str(e)) from e


def _write_oiio(path: Path, document: ImageDocument, compression: str) -> None:
    """Write the document to path. The output handle is always closed."""
    pixels = np.stack(
        [document.channel_image(name) for name in EXR_CHANNELS], axis=-1
    ).astype(np.float32)

    spec = oiio.ImageSpec(document.width, document.height, len(EXR_CHANNELS), oiio.FLOAT)
    spec.channelnames = EXR_CHANNELS
    spec.attribute("compression", compression)
    spec.attribute(_ATTR_COMMENT, document.attributes.comment)
    spec.attribute(_ATTR_AUTHOR, document.attributes.author)
    spec.attribute(_ATTR_TOOL, document.attributes.tool)

    out = oiio.ImageOutput.create(str(path))
    if out is None:
        raise ImageWriteError(f"Cannot create output: {oiio.geterror()}")
    try:
        if not out.open(str(path), spec):
            raise ImageWriteError(f"Cannot open {path}: {out.geterror()}")
        if not out.write_image(pixels):
            raise ImageWriteError(f"Cannot write {path}: {out.geterror()}")
    finally:
        out.close()


def _target_mode(path: Path) -> int:
    """Permission bits for the output: kept from an existing file, else from the umask."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_document(
    document: ImageDocument,
    filepath: str | Path,
    compression: str = DEFAULT_COMPRESSION,
) -> Path:
    """Write a document as a single-layer float OpenEXR file.

    The image goes to a temporary sibling first and replaces the destination
    only once fully written, so a failure never leaves a readable file.

    Returns:
        Resolved output path.

    Raises:
        ImageWriteError: On any failure. The underlying cause is chained.
    """
    path = Path(filepath)
    _check_document(document, path, compression)

    try:
        path = validate_output_path(path)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.stem}.", suffix=path.suffix, dir=path.parent)
        os.close(fd)
    except OSError as e:
        raise ImageWriteError(f"Cannot write {path}: {e}") from e

    tmp = Path(tmp_name)
    try:
        _write_oiio(tmp, document, compression)
        os.chmod(tmp, _target_mode(path))
        os.replace(tmp, path)
    except ImageWriteError:
        tmp.unlink(missing_ok=True)
        raise
    except (OSError, RuntimeError) as e:
        tmp.unlink(missing_ok=True)
        raise ImageWriteError(f"Failed to write {path}: {e}") from e

    logger.info(
        "Saved EXR: %s (%dx%d, %s)", path, document.width, document.height, compression
    )
    return path


def read_document(filepath: str | Path) -> ImageDocument:
    """Read a float OpenEXR file back into a document.

    Raises:
        FileNotFoundError: If the file does not exist.
        ImageFormatError: If the file cannot be decoded.
    """
    path = Path(filepath).resolve()
    if not path.is_file():
        raise FileNotFoundError(f"Input file not found: {path}")

    inp = oiio.ImageInput.open(str(path))
    if inp is None:
        raise ImageFormatError(f"OIIO failed to open: {path}\n{oiio.geterror()}")

    try:
        spec = inp.spec()
        validate_dimensions(spec.width, spec.height)

        data = inp.read_image(oiio.FLOAT)
        if data is None:
            raise ImageFormatError(f"OIIO failed to read: {path}\n{inp.geterror()}")
        data = np.asarray(data, dtype=np.float32).reshape(spec.height, spec.width, spec.nchannels)

        names = list(spec.channelnames)
        if len(set(names)) != len(names):
            raise ImageFormatError(f"Duplicate channel names in {path}: {names}")
        channels = {name: data[..., i].ravel() for i, name in enumerate(names)}

        attributes = ImageAttributes(
            author=spec.get_string_attribute(_ATTR_AUTHOR, ""),
            tool=spec.get_string_attribute(_ATTR_TOOL, ""),
            comment=spec.get_string_attribute(_ATTR_COMMENT, ""),
        )
    finally:
        inp.close()

    logger.debug("Read EXR: %s (%dx%d, %s)", path, spec.width, spec.height, names)
    return ImageDocument(
        width=spec.width,
        height=spec.height,
        channels=channels,
        attributes=attributes,
    )
