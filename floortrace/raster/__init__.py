# Raster (pixel buffer) processing module

from .preprocessor import (
    PreprocessConfig,
    PreprocessingResult,
    to_grayscale,
    global_threshold,
    compute_otsu_threshold,
    otsu_threshold,
    adaptive_threshold,
    dilate,
    erode,
    morphological_close,
    remove_small_components,
    binarize,
    preprocess_image,
)

from .likelihood import (
    WallClassifier,
    LikelihoodConfig,
    LikelihoodResult,
    ClassifierOutputError,
    run_lengths,
    classical_wall_likelihood,
    neural_wall_likelihood,
    estimate_wall_likelihood,
    estimate_wall_likelihood_async,
    compute_attraction_field,
)

from .centerline import (
    extract_skeleton,
    distance_transform,
    extract_wall_boundaries,
    estimate_wall_thickness,
)

from .corner_detector import (
    CornerConfig,
    harris_response,
    detect_corners,
)

from .contour_perimeter import (
    make_rectilinear,
    detect_contour_perimeter,
    default_perimeter,
)

from .room_box import (
    RoomBoxConfig,
    bounded_flood_fill,
    refine_room_box,
    flood_fill_room_box,
    wall_candidates,
    wall_pair_room_box,
    fallback_room_box,
)

__all__ = [
    # Preprocessor
    "PreprocessConfig",
    "PreprocessingResult",
    "to_grayscale",
    "global_threshold",
    "compute_otsu_threshold",
    "otsu_threshold",
    "adaptive_threshold",
    "dilate",
    "erode",
    "morphological_close",
    "remove_small_components",
    "binarize",
    "preprocess_image",
    # Likelihood
    "WallClassifier",
    "LikelihoodConfig",
    "LikelihoodResult",
    "ClassifierOutputError",
    "run_lengths",
    "classical_wall_likelihood",
    "neural_wall_likelihood",
    "estimate_wall_likelihood",
    "estimate_wall_likelihood_async",
    "compute_attraction_field",
    # Centerline
    "extract_skeleton",
    "distance_transform",
    "extract_wall_boundaries",
    "estimate_wall_thickness",
    # Corners
    "CornerConfig",
    "harris_response",
    "detect_corners",
    # Contour perimeter
    "make_rectilinear",
    "detect_contour_perimeter",
    "default_perimeter",
    # Room box
    "RoomBoxConfig",
    "bounded_flood_fill",
    "refine_room_box",
    "flood_fill_room_box",
    "wall_candidates",
    "wall_pair_room_box",
    "fallback_room_box",
]
