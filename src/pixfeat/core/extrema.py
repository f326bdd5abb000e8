"""Find local extrema in 2D fields."""

from enum import Enum

import numpy as np
from scipy import ndimage

from .errors import InvalidInputError, ParameterOutOfRangeError


class ExtremaPolicy(Enum):
    """How a position is compared against its neighbourhood.

    STRICT keeps a position unless some neighbour is strictly greater, so
    every cell of a flat-topped plateau survives.
    MORPHOLOGICAL keeps a position that equals the grey dilation of the field
    and is strictly greater than the grey erosion over a wider window. Flat
    regions never pass the erosion test.
    """

    STRICT = "strict"
    MORPHOLOGICAL = "morphological"


def _check_size(name, value):
    if not isinstance(value, (int, np.integer)) or value < 1 or value % 2 == 0:
        raise ParameterOutOfRangeError(f"{name} must be a positive odd integer, got {value!r}")


def check_extrema_params(size, erode_size=None, policy=ExtremaPolicy.STRICT):
    """Validate extractor settings and return ``(erode_size, policy)``."""
    try:
        policy = ExtremaPolicy(policy)
    except ValueError:
        names = ", ".join(p.value for p in ExtremaPolicy)
        raise ParameterOutOfRangeError(f"policy must be one of {names}, got {policy!r}") from None
    _check_size("size", size)
    if erode_size is None:
        erode_size = size + 2
    _check_size("erode_size", erode_size)
    return erode_size, policy


def _modes(ndim, wrap_axes):
    return tuple("wrap" if axis in wrap_axes else "constant" for axis in range(ndim))


def _neighbourhood_max(field, size, wrap_axes):
    # Cells outside a non-wrapping axis must never win the comparison.
    return ndimage.maximum_filter(
        field, size=size, mode=_modes(field.ndim, wrap_axes), cval=-np.inf
    )


def _neighbourhood_min(field, size, wrap_axes):
    return ndimage.minimum_filter(
        field, size=size, mode=_modes(field.ndim, wrap_axes), cval=np.inf
    )


def find_local_extrema(
    field,
    size=5,
    threshold=None,
    policy=ExtremaPolicy.STRICT,
    erode_size=None,
    wrap_axes=(),
    exclude_border=0,
):
    """Return the (row, col) positions of local maxima of a 2D field.

    Args:
        field: 2D array of scores.
        size: Odd side length of the square neighbourhood.
        threshold: Positions must be strictly greater than this value.
            ``None`` disables the gate.
        policy: An ``ExtremaPolicy``.
        erode_size: Odd side length of the erosion window used by the
            morphological policy. Defaults to ``size + 2``.
        wrap_axes: Axes along which the neighbourhood wraps around. Outside
            neighbours along the other axes are ignored.
        exclude_border: Number of cells along every edge that are never
            reported.

    Returns:
        ``(n, 2)`` integer array of positions in row-major order.
    """
    erode_size, policy = check_extrema_params(size, erode_size, policy)
    if exclude_border < 0:
        raise ParameterOutOfRangeError(f"exclude_border must be >= 0, got {exclude_border!r}")
    field = np.asarray(field)
    if field.ndim != 2 or field.size == 0:
        raise InvalidInputError(f"expected a non-empty 2D field, got shape {field.shape}")
    # Vote counts stay exact in float64 and the padding needs infinities.
    field = field.astype(np.float64)
    wrap_axes = tuple(wrap_axes)

    keep = field == _neighbourhood_max(field, size, wrap_axes)
    if policy is ExtremaPolicy.MORPHOLOGICAL:
        keep &= field > _neighbourhood_min(field, erode_size, wrap_axes)
    if threshold is not None:
        keep &= field > threshold
    if exclude_border:
        b = exclude_border
        keep[:b, :] = False
        keep[-b:, :] = False
        keep[:, :b] = False
        keep[:, -b:] = False
    return np.argwhere(keep)


def percentile_threshold(field, percentile=0.95):
    """Value at ``percentile`` of the strictly positive entries of ``field``.

    Returns 0.0 when no entry is positive.
    """
    if not 0.0 <= percentile <= 1.0:
        raise ParameterOutOfRangeError(f"percentile must lie in [0, 1], got {percentile!r}")
    field = np.asarray(field)
    values = np.sort(field[field > 0])
    if values.size == 0:
        return 0.0
    index = min(int(values.size * percentile), values.size - 1)
    return float(values[index])


def suppress_close_points(points, scores, min_distance):
    """Greedily keep the strongest points, dropping any closer than ``min_distance``.

    Ties in score are broken by position so the result is deterministic.
    Returns the indices of the kept points, strongest first.
    """
    points = np.asarray(points, dtype=float).reshape(-1, 2)
    scores = np.asarray(scores, dtype=float)
    order = sorted(range(len(points)), key=lambda i: (-scores[i], points[i][0], points[i][1]))
    kept = []
    for i in order:
        if min_distance > 0 and kept:
            dist = np.hypot(*(points[kept] - points[i]).T)
            if np.any(dist < min_distance):
                continue
        kept.append(i)
    return kept
