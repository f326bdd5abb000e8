"""Core package for line and corner detection."""

from .errors import PixfeatError, InvalidInputError, ParameterOutOfRangeError
from .image_loading import load_image
from .preprocessing import to_intensity, threshold_edges, canny_edges, as_edge_mask
from .extrema import ExtremaPolicy, find_local_extrema, percentile_threshold, suppress_close_points
from .line_detection import (
    Line,
    hough_accumulator,
    hough_lines,
    suppress_duplicate_lines,
    filter_axis_aligned,
    get_line_boundary_points,
)
from .corner_detection import (
    Corner,
    sobel_gradients,
    structure_tensor,
    harris_response,
    extract_corners,
    detect_corners,
    corner_distribution,
)
from .parameters import HoughParams, HarrisParams, update_params, save_parameters, load_parameters
