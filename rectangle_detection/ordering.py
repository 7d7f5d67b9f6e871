import numpy as np

from common.geometry import Corners, Size


def order_points(pts: np.ndarray) -> np.ndarray:
    """
    Order 4 points as top-left, top-right, bottom-right, bottom-left.

    Each corner is picked independently per axis instead of by angle sorting,
    which stays stable for near-degenerate shapes. Ties go to the point that
    comes first in the input.

    Args:
        pts: Array of 4 points, shape (4, 2) or (4, 1, 2)

    Returns:
        Ordered points, shape (4, 2), float64
    """
    pts = np.asarray(pts, dtype=np.float64).reshape(-1, 2)
    if pts.shape[0] != 4:
        raise ValueError(f"Expected 4 points, got {pts.shape[0]}")

    rect = np.zeros((4, 2), dtype=np.float64)

    # Top-left has the smallest x + y, bottom-right the largest
    s = pts.sum(axis=1)
    rect[0] = pts[np.argmin(s)]
    rect[2] = pts[np.argmax(s)]

    # Top-right has the smallest y - x, bottom-left the largest
    diff = np.diff(pts, axis=1).ravel()
    rect[1] = pts[np.argmin(diff)]
    rect[3] = pts[np.argmax(diff)]

    return rect


def order_corners(pts: np.ndarray, image_size: Size) -> Corners:
    """Canonical Corners value for 4 unordered points."""
    return Corners.from_array(order_points(pts), image_size)
