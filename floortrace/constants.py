"""
FloorTrace - Master Constants Reference

Default values for every stage of the floor plan analysis pipeline.
Stage configuration dataclasses read their defaults from here.
"""

import math

# =============================================================================
# PREPROCESSING CONSTANTS
# =============================================================================

# Luminance weights (ITU-R BT.601)
GRAY_WEIGHT_R = 0.299
GRAY_WEIGHT_G = 0.587
GRAY_WEIGHT_B = 0.114

# Supported binarization methods
THRESHOLD_GLOBAL = "global"
THRESHOLD_OTSU = "otsu"
THRESHOLD_ADAPTIVE = "adaptive"
THRESHOLD_METHODS = (THRESHOLD_GLOBAL, THRESHOLD_OTSU, THRESHOLD_ADAPTIVE)

DEFAULT_THRESHOLD_METHOD = THRESHOLD_ADAPTIVE

# Pixels darker than this are ink (global method)
DEFAULT_GLOBAL_THRESHOLD = 128

# Adaptive threshold local window (odd) and subtracted constant
DEFAULT_ADAPTIVE_WINDOW = 15
DEFAULT_ADAPTIVE_C = 2
ADAPTIVE_GAUSSIAN = "gaussian"
ADAPTIVE_MEAN = "mean"

# Closing kernel used to bridge hairline gaps
DEFAULT_CLOSING_KERNEL = 3

# Connected components smaller than this are noise
DEFAULT_MIN_COMPONENT_SIZE = 50

# =============================================================================
# WALL LIKELIHOOD CONSTANTS
# =============================================================================

# Runs shorter than this are not considered walls (pixels)
LIKELIHOOD_MIN_WALL_LENGTH = 50

# Runs thicker than this are filled regions, not walls (pixels)
LIKELIHOOD_MAX_WALL_THICKNESS = 20

# Extent/thickness ratio that maps to a score of 1.0
LIKELIHOOD_RATIO_NORMALIZER = 10.0

# Gaussian smoothing of the likelihood map
LIKELIHOOD_BLUR_SIGMA = 2.0

# Square input size expected by neural wall classifiers
MODEL_INPUT_SIZE = 256

# =============================================================================
# LINE EXTRACTION CONSTANTS
# =============================================================================

# Default orientation tolerance (15 degrees)
ANGLE_TOLERANCE_RAD = math.pi / 12

LINE_MIN_LENGTH = 50
LINE_MIN_SCORE = 0.3
LINE_MAX_GAP = 10

# =============================================================================
# CONSOLIDATION CONSTANTS
# =============================================================================

MERGE_MAX_DISTANCE = 10
MERGE_MAX_GAP = 20
MERGE_ANGLE_TOLERANCE = 0.1

GAP_FILL_MAX_LENGTH = 100
GAP_FILL_ALIGNMENT_TOLERANCE = 10

# Morphological bridging kernel (separable closing)
BRIDGE_KERNEL_SIZE = 15

# Door and window openings
MAX_DOOR_WIDTH = 80
MAX_WINDOW_GAP = 60
GAP_ALIGNMENT_TOLERANCE = 15
BRIDGE_SEGMENT_SCORE = 0.5

CONSOLIDATE_MERGE = "merge"
CONSOLIDATE_BRIDGE = "bridge"
CONSOLIDATE_BOTH = "both"
CONSOLIDATION_MODES = (CONSOLIDATE_MERGE, CONSOLIDATE_BRIDGE, CONSOLIDATE_BOTH)

# =============================================================================
# POST-PROCESSING CONSTANTS
# =============================================================================

POST_MIN_LENGTH = 50
POST_MAX_LENGTH = math.inf
GRID_SIZE = 5
DUPLICATE_THRESHOLD = 10
CONNECTION_THRESHOLD = 20
MIN_WALL_SPACING = 50
MAX_WALL_SPACING = 500

# Exterior walls lie within this fraction of min(width, height) of an edge
EXTERIOR_EDGE_RATIO = 0.15

# =============================================================================
# WALL CLASSIFICATION CONSTANTS
# =============================================================================

# Minimum longer side of a connected component to count as a wall
COMPONENT_MIN_WALL_LENGTH = 100

# Fraction of a row/column that must be ink to extend a wall band
WALL_BAND_COVERAGE = 0.5

# Fallback wall thickness when it cannot be estimated (pixels)
DEFAULT_WALL_THICKNESS = 10

# =============================================================================
# PERIMETER CONSTANTS
# =============================================================================

PERIMETER_SIMPLIFY_TOLERANCE = 5

# Contour fallback
CONTOUR_CLOSING_KERNEL = 15
CONTOUR_EPSILON_RATIO = 0.01
RECTILINEAR_SNAP_DEGREES = 20

# Scan-line fallback
SCAN_MIN_LENGTH_RATIO = 0.05
SCAN_MAX_THICKNESS = 20
SCAN_MERGE_PADDING = 5

# Default rectangle margin (pixels)
DEFAULT_PERIMETER_MARGIN = 50


class PerimeterStrategy:
    """Perimeter fallback strategy names."""
    WALLS = "wall"
    CONTOUR = "contour"
    SCAN_LINES = "lines"
    DEFAULT = "default"


DEFAULT_PERIMETER_STRATEGIES = (
    PerimeterStrategy.WALLS,
    PerimeterStrategy.CONTOUR,
    PerimeterStrategy.SCAN_LINES,
    PerimeterStrategy.DEFAULT,
)

# =============================================================================
# CORNER DETECTION CONSTANTS
# =============================================================================

HARRIS_WINDOW_RADIUS = 3
HARRIS_K = 0.04
HARRIS_THRESHOLD = 1e6
CORNER_NMS_RADIUS = 10
MAX_CORNERS = 500

# =============================================================================
# ROOM BOX CONSTANTS
# =============================================================================

MIN_ROOM_SIZE = 50

# Flood fill is bounded to this share of the image area
FLOOD_FILL_CAP_RATIO = 0.25

MAX_ROOM_ASPECT_RATIO = 5.0

# Wall candidates kept per side in the wall-pair search
ROOM_CANDIDATES_PER_SIDE = 3

ROOM_FALLBACK_PADDING = 50


class RoomBoxMethod:
    """How a room box was found."""
    FLOOD_FILL = "flood_fill"
    WALL_PAIR = "wall_pair"
    FALLBACK = "fallback"


# =============================================================================
# SNAPPING CONSTANTS
# =============================================================================

SNAP_TO_LINE = 5
SNAP_TO_INTERSECTION = 15
SECONDARY_ALIGNMENT = 10

# =============================================================================
# UNIT CONSTANTS
# =============================================================================

INCHES_PER_FOOT = 12
