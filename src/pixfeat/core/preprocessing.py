"""Convert pixel buffers into intensity fields and edge masks."""

import numpy as np
from skimage.color import rgb2gray
from skimage.feature import canny

from .errors import InvalidInputError, ParameterOutOfRangeError


def to_intensity(buffer, channel_order="rgb"):
    """Return a float intensity field in [0, 1] from a grayscale or colour buffer.

    Integer buffers are scaled by 255 and boolean buffers map to 0/1. Float
    buffers must already lie in [0, 1]; a float image in the 0-255 range
    raises ``InvalidInputError``. ``channel_order`` is ``"rgb"`` or ``"bgr"``
    and only matters for colour input.
    """
    if channel_order not in ("rgb", "bgr"):
        raise ParameterOutOfRangeError(f"unknown channel order {channel_order!r}")
    if buffer is None:
        raise InvalidInputError("no pixel buffer given")
    img = np.asarray(buffer)
    if img.size == 0 or 0 in img.shape:
        raise InvalidInputError(f"empty pixel buffer of shape {img.shape}")

    if img.dtype == bool:
        img = img.astype(float)
    elif np.issubdtype(img.dtype, np.integer):
        img = img.astype(float) / 255.0
    elif np.issubdtype(img.dtype, np.floating):
        img = img.astype(float)
    else:
        raise InvalidInputError(f"unsupported pixel type {img.dtype}")

    if np.isnan(img).any():
        raise InvalidInputError("pixel buffer contains NaN")
    if (img < 0).any():
        raise InvalidInputError("pixel buffer contains negative values")
    if (img > 1.0).any():
        raise InvalidInputError(
            f"pixel values must lie in [0, 1] after scaling, got maximum {img.max():g}"
        )

    if img.ndim == 3:
        if img.shape[2] == 1:
            img = img[:, :, 0]
        elif img.shape[2] in (3, 4):
            img = img[:, :, :3]
            if channel_order == "bgr":
                img = img[:, :, ::-1]
            # The luminance weights can round a white pixel just above 1.
            img = np.clip(rgb2gray(img), 0.0, 1.0)
        else:
            raise InvalidInputError(f"unsupported channel count {img.shape[2]}")
    elif img.ndim != 2:
        raise InvalidInputError(f"expected a 2D or 3D buffer, got {img.ndim} dimensions")

    return img


def threshold_edges(intensity, threshold=0.5):
    """Mark pixels brighter than ``threshold`` as edge pixels."""
    return to_intensity(intensity) > threshold


def canny_edges(intensity, sigma=1.0):
    """Detect edges with the Canny detector."""
    if sigma <= 0:
        raise ParameterOutOfRangeError(f"sigma must be > 0, got {sigma!r}")
    return canny(to_intensity(intensity), sigma=sigma)


def as_edge_mask(edges):
    """Validate an edge buffer and return it as a boolean mask."""
    if edges is None:
        raise InvalidInputError("no edge mask given")
    mask = np.asarray(edges)
    if mask.ndim != 2:
        raise InvalidInputError(f"edge mask must be 2D, got shape {mask.shape}")
    if mask.size == 0:
        raise InvalidInputError(f"empty edge mask of shape {mask.shape}")
    return mask > 0
