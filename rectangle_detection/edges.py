"""
Edge map construction: grayscale -> blur -> Canny -> dilation.
"""

import logging

import cv2
import numpy as np

from .errors import InvalidImage
from .pixel_grid import to_gray

logger = logging.getLogger(__name__)


def build_edge_map(
    image: np.ndarray,
    blur_kernel: int = 3,
    canny_low: float = 50,
    canny_high: float = 150,
    dilate_kernel: int = 3,
    dilate_iterations: int = 1
) -> np.ndarray:
    """
    Build a binary edge mask from an image.

    Args:
        image: Input image (grayscale, BGR or BGRA)
        blur_kernel: Gaussian kernel size (odd), suppresses sensor noise
        canny_low: Lower Canny gradient threshold
        canny_high: Upper Canny gradient threshold
        dilate_kernel: Size of the rectangular dilation element
        dilate_iterations: Dilation iterations, bridges 1-2 px gaps in edges

    Returns:
        Binary mask (0/255) with the same width and height as the input
    """
    if image is None or image.size == 0:
        raise InvalidImage("Cannot build edge map of an empty image")
    if blur_kernel < 1 or blur_kernel % 2 == 0:
        raise ValueError(f"blur_kernel must be a positive odd number, got {blur_kernel}")

    gray = to_gray(image)

    blurred = cv2.GaussianBlur(gray, (blur_kernel, blur_kernel), 0)

    edges = cv2.Canny(blurred, canny_low, canny_high)

    kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (dilate_kernel, dilate_kernel))
    dilated = cv2.dilate(edges, kernel, iterations=dilate_iterations)

    logger.debug(
        "Edge map %dx%d: %d edge pixels",
        dilated.shape[1], dilated.shape[0], int(np.count_nonzero(dilated))
    )
    return dilated
