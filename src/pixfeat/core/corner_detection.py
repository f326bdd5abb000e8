"""Detect corners with the Harris response.

Every filter in one call uses the same border policy, ``"nearest"``
(replicate the edge pixels) unless ``border_mode="reflect"`` is given.
Intensities are scaled to [0, 1] before differentiation, and the default
``k`` of 0.04 is chosen for that scale. Raising ``k`` penalizes edge-like
structure more strongly.
"""

import logging
from dataclasses import dataclass

import numpy as np
from scipy import ndimage
from scipy.special import comb

from .errors import InvalidInputError, ParameterOutOfRangeError
from .extrema import (
    ExtremaPolicy,
    check_extrema_params,
    find_local_extrema,
    percentile_threshold,
    suppress_close_points,
)
from .preprocessing import to_intensity

logger = logging.getLogger(__name__)

BORDER_MODES = ("nearest", "reflect")

SOBEL_3_X = np.array([[-1, 0, 1],
                      [-2, 0, 2],
                      [-1, 0, 1]], dtype=float)

# Scaled by 1/16 so a unit ramp gives the same derivative as the 3x3 kernel.
SOBEL_5_X = np.outer([1, 4, 6, 4, 1], [-1, -2, 0, 2, 1]).astype(float) / 16.0

WINDOWS = ("gaussian", "box")


@dataclass(frozen=True)
class Corner:
    """A detected corner at column ``x`` and row ``y``."""

    x: int
    y: int
    response: float


def _check_kernel_size(kernel_size):
    if kernel_size not in (3, 5):
        raise ParameterOutOfRangeError(f"kernel_size must be 3 or 5, got {kernel_size!r}")


def _check_window(block_size, window):
    if not isinstance(block_size, (int, np.integer)) or block_size < 1 or block_size % 2 == 0:
        raise ParameterOutOfRangeError(f"block_size must be a positive odd integer, got {block_size!r}")
    if window not in WINDOWS:
        raise ParameterOutOfRangeError(f"window must be one of {WINDOWS}, got {window!r}")


def _check_border_mode(border_mode):
    if border_mode not in BORDER_MODES:
        raise ParameterOutOfRangeError(f"border_mode must be one of {BORDER_MODES}, got {border_mode!r}")


def _check_relative_threshold(relative_threshold):
    if not 0 < relative_threshold <= 1:
        raise ParameterOutOfRangeError(
            f"relative_threshold must lie in (0, 1], got {relative_threshold!r}"
        )


def _check_extract_params(
    relative_threshold, neighbourhood, erode_size, policy, min_distance, percentile, max_corners
):
    _check_relative_threshold(relative_threshold)
    erode_size, policy = check_extrema_params(neighbourhood, erode_size, policy)
    if min_distance < 0:
        raise ParameterOutOfRangeError(f"min_distance must be >= 0, got {min_distance!r}")
    if percentile is not None and not 0.0 <= percentile <= 1.0:
        raise ParameterOutOfRangeError(f"percentile must lie in [0, 1], got {percentile!r}")
    if max_corners is not None and max_corners < 1:
        raise ParameterOutOfRangeError(f"max_corners must be >= 1, got {max_corners!r}")
    return erode_size, policy


def sobel_gradients(image, kernel_size=3, border_mode="nearest"):
    """Return the horizontal and vertical derivatives ``(ix, iy)``."""
    _check_kernel_size(kernel_size)
    _check_border_mode(border_mode)
    img = to_intensity(image)
    kernel_x = SOBEL_3_X if kernel_size == 3 else SOBEL_5_X
    ix = ndimage.correlate(img, kernel_x, mode=border_mode)
    iy = ndimage.correlate(img, kernel_x.T, mode=border_mode)
    return ix, iy


def window_weights(block_size, window="gaussian"):
    """1D weights of the separable smoothing window.

    The gaussian window uses binomial coefficients, which match the fixed
    Gaussian kernels OpenCV uses for sizes up to 7.
    """
    _check_window(block_size, window)
    if window == "box":
        return np.ones(block_size)
    weights = comb(block_size - 1, np.arange(block_size))
    return weights / weights.sum()


def _smooth(values, weights, border_mode):
    out = ndimage.correlate1d(values, weights, axis=0, mode=border_mode)
    return ndimage.correlate1d(out, weights, axis=1, mode=border_mode)


def structure_tensor(ix, iy, block_size=5, window="gaussian", border_mode="nearest"):
    """Windowed sums of the gradient products, returned as ``(sxx, syy, sxy)``."""
    _check_border_mode(border_mode)
    weights = window_weights(block_size, window)
    sxx = _smooth(ix * ix, weights, border_mode)
    syy = _smooth(iy * iy, weights, border_mode)
    sxy = _smooth(ix * iy, weights, border_mode)
    return sxx, syy, sxy


def harris_response(image, block_size=5, kernel_size=3, k=0.04, window="gaussian",
                    border_mode="nearest"):
    """Compute the Harris response ``det(M) - k * trace(M)**2`` at every pixel."""
    _check_kernel_size(kernel_size)
    _check_window(block_size, window)
    _check_border_mode(border_mode)
    ix, iy = sobel_gradients(image, kernel_size, border_mode)
    sxx, syy, sxy = structure_tensor(ix, iy, block_size, window, border_mode)
    det = sxx * syy - sxy * sxy
    trace = sxx + syy
    response = det - k * trace * trace
    logger.debug(
        "Harris response range [%g, %g] for %s image", response.min(), response.max(), response.shape
    )
    return response


def extract_corners(
    response,
    relative_threshold=0.05,
    neighbourhood=7,
    erode_size=None,
    policy=ExtremaPolicy.MORPHOLOGICAL,
    min_distance=3.0,
    percentile=None,
    max_corners=None,
):
    """Reduce a Harris response field to discrete corner points.

    Args:
        response: 2D Harris response.
        relative_threshold: Corners must respond above this fraction of the
            strongest response.
        neighbourhood: Odd side length of the non-maximum suppression window.
        erode_size: Erosion window of the morphological policy.
        policy: An ``ExtremaPolicy`` or its name.
        min_distance: Corners closer than this to a stronger corner are
            dropped. 0 disables the check.
        percentile: If given, the threshold is raised to this percentile of
            the positive responses.
        max_corners: Keep at most this many of the strongest corners.

    Returns:
        List of ``Corner`` ordered by descending response.
    """
    erode_size, policy = _check_extract_params(
        relative_threshold, neighbourhood, erode_size, policy, min_distance, percentile, max_corners
    )
    response = np.asarray(response, dtype=float)
    if response.ndim != 2 or response.size == 0:
        raise InvalidInputError(f"expected a non-empty 2D response, got shape {response.shape}")
    peak = float(response.max())
    if peak <= 0:
        return []

    threshold = relative_threshold * peak
    if percentile is not None:
        threshold = max(threshold, percentile_threshold(response, percentile))
    positions = find_local_extrema(
        response,
        size=neighbourhood,
        threshold=threshold,
        policy=policy,
        erode_size=erode_size,
    )
    scores = response[positions[:, 0], positions[:, 1]]
    kept = suppress_close_points(positions, scores, min_distance)
    if max_corners is not None:
        kept = kept[:max_corners]
    corners = [
        Corner(x=int(positions[i, 1]), y=int(positions[i, 0]), response=float(scores[i]))
        for i in kept
    ]
    logger.debug("Kept %d of %d response peaks above %g", len(corners), len(positions), threshold)
    return corners


def detect_corners(
    image,
    block_size=5,
    kernel_size=3,
    k=0.04,
    window="gaussian",
    relative_threshold=0.05,
    neighbourhood=7,
    erode_size=None,
    policy=ExtremaPolicy.MORPHOLOGICAL,
    min_distance=3.0,
    percentile=None,
    max_corners=None,
    border_mode="nearest",
):
    """Run the Harris detector and return ``(response, corners)``.

    Every parameter is validated before the response field is computed.
    """
    _check_kernel_size(kernel_size)
    _check_window(block_size, window)
    _check_border_mode(border_mode)
    erode_size, policy = _check_extract_params(
        relative_threshold, neighbourhood, erode_size, policy, min_distance, percentile, max_corners
    )
    response = harris_response(image, block_size, kernel_size, k, window, border_mode)
    corners = extract_corners(
        response,
        relative_threshold,
        neighbourhood=neighbourhood,
        erode_size=erode_size,
        policy=policy,
        min_distance=min_distance,
        percentile=percentile,
        max_corners=max_corners,
    )
    return response, corners


def corner_distribution(corners, shape):
    """Count corners near each image side and in the centre.

    The side bands are a quarter of the half-size wide, as in a quick visual
    sanity check of where detections cluster.
    """
    height, width = shape[:2]
    mid_x = width // 2
    mid_y = height // 2
    counts = {"total": len(corners), "left": 0, "right": 0, "top": 0, "bottom": 0, "center": 0}
    for corner in corners:
        if corner.x < mid_x / 2:
            counts["left"] += 1
        elif corner.x > width - mid_x / 2:
            counts["right"] += 1
        if corner.y < mid_y / 2:
            counts["top"] += 1
        elif corner.y > height - mid_y / 2:
            counts["bottom"] += 1
        if mid_x / 2 < corner.x < width - mid_x / 2 and mid_y / 2 < corner.y < height - mid_y / 2:
            counts["center"] += 1
    return counts
