"""
Constants and configuration values for Wrap Studio.

This module centralizes all constant values, magic numbers, and
configuration settings used throughout the raster core.
"""

# Template segmentation
BRIGHTNESS_THRESHOLD = 200
LIGHT_VALUE = 255
LINE_VALUE = 0
OUTSIDE_VALUE = 127
INTERIOR_VALUE = 255
NOT_PAINTABLE_VALUE = 0
EDGE_ALPHA_DELTA = 50
LINE_MIN_INTENSITY = 180
LINE_MAX_INTENSITY = 255

# 3x3 weighted Gaussian used for edge smoothing (sum 16)
EDGE_SMOOTHING_KERNEL = (
    (1, 2, 1),
    (2, 4, 2),
    (1, 2, 1),
)
EDGE_SMOOTHING_KERNEL_SUM = 16

# Background colors
DEFAULT_BACKGROUND_COLOR = "#1a1a1a"
FALLBACK_BACKGROUND_RGB = (26, 26, 26)

# Text fill defaults
DEFAULT_FONT_SIZE = 40
DEFAULT_SPACING_X = 100
DEFAULT_SPACING_Y = 80
DEFAULT_TEXT_ROTATION = -15.0
TEXT_FILL_COLOR = (255, 255, 255, 230)
FONT_CANDIDATES = (
    "DejaVuSans-Bold.ttf",
    "Arial Bold.ttf",
    "arialbd.ttf",
    "LiberationSans-Bold.ttf",
    "Helvetica-Bold.ttf",
)
SAMPLING_CENTER = "center"
SAMPLING_FOOTPRINT = "footprint"

# Bucket fill
DEFAULT_FILL_TOLERANCE = 30
MAX_FILL_TOLERANCE = 255

# Color adjustment ranges
HUE_RANGE = (-180.0, 180.0)
ADJUSTMENT_RANGE = (-100.0, 100.0)
CONTRAST_PIVOT = 128

# Procedural patterns
DEFAULT_PATTERN_WIDTH = 800
DEFAULT_PATTERN_HEIGHT = 600
CATEGORY_ALL = "all"
PATTERN_CATEGORIES = (
    ("stripes", "Stripes"),
    ("gradient", "Gradients"),
    ("geometric", "Geometric"),
    ("texture", "Textures"),
    ("pattern", "Patterns"),
    ("camo", "Camouflage"),
    ("novelty", "Novelty"),
)

# Composition
DEFAULT_CANVAS_WIDTH = 800
DEFAULT_CANVAS_HEIGHT = 600
IMPORT_FIT_RATIO = 0.6
MAX_EXPORT_MULTIPLIER = 8
HISTORY_MAX_SIZE = 50
ORIGIN_CENTER = "center"
ORIGIN_LEFT_TOP = "left_top"

# Layer kinds
LAYER_KIND_OVERLAY = "overlay"
LAYER_KIND_IMAGE = "image"
LAYER_KIND_PATTERN = "pattern"
LAYER_KIND_TEXT_FILL = "text_fill"
LAYER_KIND_BUCKET_FILL = "bucket_fill"

# File naming
EXPORT_FILE_PREFIX = "wrap-design-"
DEFAULT_OUTPUT_FORMAT = "PNG"

# Node types
NODE_TYPE_TEMPLATE_MASK = "Template Mask"
NODE_TYPE_TEXT_FILL = "Text Fill"
NODE_TYPE_BUCKET_FILL = "Bucket Fill"
NODE_TYPE_COLOR_ADJUST = "Color Adjust"
NODE_TYPE_PATTERN = "Pattern"

# Supported file formats
SUPPORTED_STANDARD_IMAGES = {".png", ".jpg", ".jpeg", ".bmp", ".gif", ".tiff", ".webp"}
