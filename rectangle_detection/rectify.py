"""
Perspective rectification of a detected quadrilateral.
"""

import logging
import math
from typing import Tuple

import cv2
import numpy as np

from common.geometry import Corners
from .errors import DegenerateGeometry
from .pixel_grid import to_array

logger = logging.getLogger(__name__)

INTERPOLATION = {
    'bilinear': cv2.INTER_LINEAR,
    'nearest': cv2.INTER_NEAREST,
}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def output_size(corners: Corners) -> Tuple[int, int]:
    """
    Size of the rectified image: the longer of each pair of opposite edges,
    rounded half up (2.5 px gives 3).

    Returns:
        (width, height)
    """
    tl, tr, br, bl = corners.points()

    width_top = tl.distance_to(tr)
    width_bottom = bl.distance_to(br)
    max_width = _round_half_up(max(width_top, width_bottom))

    height_left = tl.distance_to(bl)
    height_right = tr.distance_to(br)
    max_height = _round_half_up(max(height_left, height_right))

    return max_width, max_height


def compute_homography(corners: Corners) -> Tuple[np.ndarray, Tuple[int, int]]:
    """
    Homography taking TL, TR, BR, BL onto (0,0), (W,0), (W,H), (0,H).

    Raises:
        DegenerateGeometry: corners are not finite, collapse to zero width or
            height, or do not define an invertible transform
    """
    src = corners.as_array()
    if not np.isfinite(src).all():
        raise DegenerateGeometry("Corners contain non-finite coordinates")

    width, height = output_size(corners)
    if width == 0 or height == 0:
        raise DegenerateGeometry(f"Rectified size collapses to {width}x{height}")

    dst = np.array([
        [0, 0],
        [width, 0],
        [width, height],
        [0, height]
    ], dtype=np.float32)

    try:
        matrix = cv2.getPerspectiveTransform(src, dst)
    except cv2.error as e:
        raise DegenerateGeometry(f"Cannot compute perspective transform: {e}") from e

    if not np.isfinite(matrix).all() or abs(np.linalg.det(matrix)) < 1e-12:
        raise DegenerateGeometry("Perspective transform is singular")

    return matrix, (width, height)


def rectify(image, corners: Corners, interpolation: str = 'bilinear') -> np.ndarray:
    """
    Warp the quadrilateral given by corners into an upright rectangle.

    Args:
        image: Source image (numpy array or PixelGrid)
        corners: Ordered corners; swapping any two rotates or mirrors the output
        interpolation: 'bilinear' or 'nearest'

    Returns:
        New image of shape (height, width[, channels])
    """
    if interpolation not in INTERPOLATION:
        raise ValueError(f"Unknown interpolation: {interpolation}")

    source = to_array(image)
    matrix, (width, height) = compute_homography(corners)

    warped = cv2.warpPerspective(
        source,
        matrix,
        (width, height),
        flags=INTERPOLATION[interpolation],
        borderMode=cv2.BORDER_REPLICATE
    )

    logger.debug("Rectified %s to %dx%d", corners, width, height)
    return warped
