"""Load images from disk."""

import numpy as np
from PIL import Image

from .errors import InvalidInputError


def load_image(image_path, grayscale=False):
    """Load an image file as a numpy array, RGB or single channel."""
    img = Image.open(image_path)
    img = img.convert('L' if grayscale else 'RGB')
    img_array = np.array(img)
    if img_array.size == 0:
        raise InvalidInputError(f"{image_path} decoded to an empty image")
    return img_array
