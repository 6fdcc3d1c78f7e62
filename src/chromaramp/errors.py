"""Custom exception hierarchy for ChromaRamp."""


class ChromaRampError(Exception):
    """Base exception for all ChromaRamp errors."""


class ColorError(ChromaRampError):
    """Errors related to color values and their space tags."""


class InvalidSpaceError(ColorError):
    """Operation applied to a color in the wrong space or context."""


class FramebufferError(ChromaRampError):
    """Errors related to pixel buffer ownership and sequencing."""


class UninitializedBufferError(FramebufferError):
    """Buffer was read before populate() produced it."""


class ImageError(ChromaRampError):
    """Errors related to image reading or writing."""


class ImageFormatError(ImageError):
    """Unsupported or corrupted image file."""


class ImageDimensionError(ImageError):
    """Image dimensions exceed limits or are mismatched."""


class ImageWriteError(ImageError, OSError):
    """Writing an image to disk failed. The root cause is chained."""


class PipelineError(ChromaRampError):
    """Errors during pipeline execution."""
