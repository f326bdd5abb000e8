"""Detect lines in edge masks with the Hough transform."""

import logging
import math
from dataclasses import dataclass

import numpy as np

from .errors import ParameterOutOfRangeError
from .extrema import ExtremaPolicy, find_local_extrema
from .preprocessing import as_edge_mask

logger = logging.getLogger(__name__)

PEAK_NEIGHBOURHOOD = 5


@dataclass(frozen=True)
class Line:
    """A line in normal form, ``x*cos(theta) + y*sin(theta) = rho``."""

    rho: float
    theta: float
    score: int


def _check_steps(rho_step, theta_step):
    if not rho_step > 0:
        raise ParameterOutOfRangeError(f"rho_step must be > 0, got {rho_step!r}")
    if not 0 < theta_step < math.pi:
        raise ParameterOutOfRangeError(f"theta_step must lie in (0, pi), got {theta_step!r}")


def _check_hough_params(rho_step, theta_step, vote_threshold, max_lines):
    _check_steps(rho_step, theta_step)
    if vote_threshold < 0:
        raise ParameterOutOfRangeError(f"vote_threshold must be >= 0, got {vote_threshold!r}")
    if max_lines < 1:
        raise ParameterOutOfRangeError(f"max_lines must be >= 1, got {max_lines!r}")


def hough_accumulator(edges, rho_step=1.0, theta_step=math.pi / 180):
    """Vote every edge pixel into (rho, theta) space.

    Returns:
        accumulator: int64 array indexed ``[rho_bin, theta_bin]``.
        rho_max: Image diagonal; rho bin ``r`` stands for ``r*rho_step - rho_max``.
    """
    _check_steps(rho_step, theta_step)
    mask = as_edge_mask(edges)
    height, width = mask.shape
    rho_max = math.sqrt(width * width + height * height)
    # Rounding first keeps pi / (pi/180) from landing on 181 bins.
    num_angles = math.ceil(round(math.pi / theta_step, 9))
    num_rhos = math.ceil(2 * rho_max / rho_step) + 1

    thetas = np.arange(num_angles) * theta_step
    cos_t = np.cos(thetas)
    sin_t = np.sin(thetas)

    accumulator = np.zeros((num_rhos, num_angles), dtype=np.int64)
    ys, xs = np.nonzero(mask)
    angle_idx = np.arange(num_angles)
    # One row of rho values per edge pixel; chunked to bound memory.
    for start in range(0, len(xs), 4096):
        x = xs[start:start + 4096, None]
        y = ys[start:start + 4096, None]
        rho = x * cos_t + y * sin_t
        # rho + rho_max is never negative, so this rounds halves up.
        r = np.floor((rho + rho_max) / rho_step + 0.5).astype(np.int64)
        t = np.broadcast_to(angle_idx, r.shape)
        inside = (r >= 0) & (r < num_rhos)
        np.add.at(accumulator, (r[inside], t[inside]), 1)

    logger.debug(
        "Accumulated %d edge pixels into %dx%d bins", len(xs), num_rhos, num_angles
    )
    return accumulator, rho_max


def suppress_duplicate_lines(lines, rho_merge=15.0, theta_merge=0.15):
    """Drop lines that lie close to a stronger line already accepted.

    ``lines`` must be ordered by descending score. The angular difference is
    folded into [0, pi/2] before comparison.
    """
    accepted = []
    for line in lines:
        too_similar = False
        for other in accepted:
            rho_diff = abs(line.rho - other.rho)
            theta_diff = abs(line.theta - other.theta) % math.pi
            if theta_diff > math.pi / 2:
                theta_diff = math.pi - theta_diff
            if rho_diff < rho_merge and theta_diff < theta_merge:
                too_similar = True
                break
        if not too_similar:
            accepted.append(line)
    return accepted


def filter_axis_aligned(lines, tolerance=math.radians(15)):
    """Keep only lines within ``tolerance`` radians of horizontal or vertical."""
    kept = []
    for line in lines:
        theta = line.theta % math.pi
        off_axis = min(theta, abs(theta - math.pi / 2), math.pi - theta)
        if off_axis < tolerance:
            kept.append(line)
    return kept


def hough_lines(
    edges,
    rho_step=1.0,
    theta_step=math.pi / 180,
    vote_threshold=100,
    max_lines=20,
    rho_merge=15.0,
    theta_merge=0.15,
    axis_tolerance=None,
):
    """Find the dominant straight lines in an edge mask.

    Args:
        edges: 2D mask, nonzero pixels vote.
        rho_step: Distance resolution of the accumulator in pixels.
        theta_step: Angle resolution of the accumulator in radians.
        vote_threshold: A peak needs strictly more votes than this.
        max_lines: Number of strongest peaks kept before duplicate suppression.
        rho_merge: Distance below which two peaks count as the same line.
        theta_merge: Angle below which two peaks count as the same line.
        axis_tolerance: If given, drop lines further than this many radians
            from horizontal or vertical.

    Returns:
        List of ``Line`` ordered by descending score. Empty if nothing passes
        the threshold.
    """
    _check_hough_params(rho_step, theta_step, vote_threshold, max_lines)
    accumulator, rho_max = hough_accumulator(edges, rho_step, theta_step)
    if not accumulator.any():
        return []

    peaks = find_local_extrema(
        accumulator,
        size=PEAK_NEIGHBOURHOOD,
        threshold=vote_threshold,
        policy=ExtremaPolicy.STRICT,
        wrap_axes=(1,),
        exclude_border=1,
    )
    candidates = sorted(
        ((int(accumulator[r, t]), int(r), int(t)) for r, t in peaks), reverse=True
    )
    logger.debug("%d accumulator peaks above %d votes", len(candidates), vote_threshold)

    lines = [
        Line(rho=r * rho_step - rho_max, theta=t * theta_step, score=votes)
        for votes, r, t in candidates[:max_lines]
    ]
    lines = suppress_duplicate_lines(lines, rho_merge, theta_merge)
    if axis_tolerance is not None:
        lines = filter_axis_aligned(lines, axis_tolerance)
    logger.debug("Found %d lines with threshold %d", len(lines), vote_threshold)
    return lines


def get_line_boundary_points(rho, theta, width, height):
    """Get the two points where a line crosses the image rectangle."""
    a = np.cos(theta)
    b = np.sin(theta)
    points = []
    # Left x=0 and right x=width
    if abs(b) > 1e-6:
        for x in (0, width):
            y = (rho - x * a) / b
            if 0 <= y <= height:
                points.append((x, y))
    # Top y=0 and bottom y=height
    if abs(a) > 1e-6:
        for y in (0, height):
            x = (rho - y * b) / a
            if 0 <= x <= width and (x, y) not in points:
                points.append((x, y))
    return points[:2]
