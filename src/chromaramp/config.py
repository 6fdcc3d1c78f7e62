"""Default configuration, constants, and limits for ChromaRamp."""

# --- Security limits ---
MAX_IMAGE_DIMENSION = 16384  # 16K pixels per side
MAX_IMAGE_PIXELS = 100_000_000  # 100 megapixels

# --- Allowed file extensions ---
EXR_EXTENSIONS = frozenset({".exr"})
PREVIEW_EXTENSIONS = frozenset({".png", ".tif", ".tiff"})

# --- Framebuffer defaults ---
DEFAULT_WIDTH = 200
DEFAULT_HEIGHT = 200

# --- Gradient ---
BLEND_MIDPOINT = 0.5  # Weight between horizontal and vertical blends
DEFAULT_ANCHORS = (
    (1.0, 0.0, 0.0),
    (0.0, 1.0, 0.0),
    (0.0, 0.0, 1.0),
)

# --- Tonemapping ---
DEFAULT_EXPOSURE = 0.0  # Stops
DEFAULT_CONTRAST = 1.0  # 1.0 = classic Reinhard shoulder

# --- EXR export ---
DEFAULT_COMPRESSION = "zip"
LOSSLESS_COMPRESSIONS = frozenset({"none", "zip", "zips", "piz", "rle"})
EXR_CHANNELS = ("R", "G", "B")
DEFAULT_AUTHOR = ""
DEFAULT_TOOL = "ChromaRamp"
DEFAULT_COMMENT = "Procedural gradient, scene-referred ACEScg"

# --- Numerical safety ---
ROUNDTRIP_TOLERANCE = 1e-5
