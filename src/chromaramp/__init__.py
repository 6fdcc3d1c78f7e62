"""ChromaRamp: procedural HDR gradients, tonemapped previews, OpenEXR export."""

__version__ = "0.1.0"
