"""
Pixel grid input handling.

The pipeline works on numpy arrays. Host image types that are not arrays can
still be passed in as long as they expose ``width``, ``height`` and
``pixel(x, y)``.
"""

from typing import Any, Protocol, Sequence, Union, runtime_checkable

import cv2
import numpy as np

from .errors import InvalidImage


@runtime_checkable
class PixelGrid(Protocol):
    """Minimal capability a host image type has to provide"""

    width: int
    height: int

    def pixel(self, x: int, y: int) -> Union[int, Sequence[int]]:
        ...


class ArrayPixelGrid:
    """
    PixelGrid over a numpy array (H x W or H x W x C).

    Args:
        array: Image data, row-major
    """

    def __init__(self, array: np.ndarray):
        self.array = array
        self.height, self.width = array.shape[:2]

    def pixel(self, x: int, y: int):
        return self.array[y, x]


def to_array(image: Any) -> np.ndarray:
    """
    Convert supported image inputs to a numpy array.

    Args:
        image: numpy array, ArrayPixelGrid or any PixelGrid implementation

    Returns:
        Image as numpy array (H x W or H x W x C)

    Raises:
        InvalidImage: input is missing, zero-sized or has an unsupported shape
    """
    if image is None:
        raise InvalidImage("Image is missing")

    if isinstance(image, ArrayPixelGrid):
        array = image.array
    elif isinstance(image, np.ndarray):
        array = image
    elif isinstance(image, PixelGrid):
        width, height = int(image.width), int(image.height)
        if width <= 0 or height <= 0:
            raise InvalidImage(f"Image has zero size: {width}x{height}")
        array = np.array([[image.pixel(x, y) for x in range(width)] for y in range(height)])
        if np.issubdtype(array.dtype, np.integer) and array.min(initial=0) >= 0:
            # Narrowest unsigned type holding the values, so 16-bit hosts stay 16-bit
            array = array.astype(np.min_scalar_type(int(array.max(initial=0))))
    else:
        raise InvalidImage(f"Unsupported image type: {type(image).__name__}")

    if array.size == 0 or array.ndim not in (2, 3):
        raise InvalidImage(f"Image has unsupported shape: {array.shape}")
    if array.shape[0] == 0 or array.shape[1] == 0:
        raise InvalidImage(f"Image has zero size: {array.shape}")

    return array


def to_gray(image: np.ndarray) -> np.ndarray:
    """
    Convert an image with 1, 3 (BGR) or 4 (BGRA) channels to 8-bit grayscale.
    """
    if image.dtype != np.uint8:
        image = _to_uint8(image)

    if image.ndim == 2:
        return image

    channels = image.shape[2]
    if channels == 1:
        return image[:, :, 0]
    if channels == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    if channels == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)

    raise InvalidImage(f"Unsupported number of channels: {channels}")


def _to_uint8(image: np.ndarray) -> np.ndarray:
    # Integer types are scaled by their range, floats in [0, 1] by 255,
    # other floats are clipped to [0, 255]
    data = image.astype(np.float64)
    if np.issubdtype(image.dtype, np.integer):
        data = np.clip(data, 0, None) * (255.0 / np.iinfo(image.dtype).max)
    elif data.max(initial=0.0) <= 1.0:
        data = data * 255.0
    return np.clip(np.round(data), 0, 255).astype(np.uint8)
