"""
Contour extraction from a binary edge mask.
"""

import logging
from dataclasses import dataclass
from typing import List

import cv2
import numpy as np

logger = logging.getLogger(__name__)

RETRIEVAL_MODES = {
    'tree': cv2.RETR_TREE,
    'external': cv2.RETR_EXTERNAL,
}


@dataclass
class Contour:
    """Closed boundary curve with its enclosed (shoelace) area"""
    points: np.ndarray
    area: float

    def perimeter(self) -> float:
        return cv2.arcLength(self.points, True)


def extract_contours(
    edge_mask: np.ndarray,
    min_area_ratio: float = 0.01,
    max_area_ratio: float = 0.8,
    mode: str = 'tree'
) -> List[Contour]:
    """
    Find closed contours in an edge mask and prune them by size.

    The upper bound drops the frame-sized outer contour, the lower bound
    drops noise specks.

    Args:
        edge_mask: Binary mask from build_edge_map
        min_area_ratio: Minimum contour area relative to image area
        max_area_ratio: Maximum contour area relative to image area
        mode: 'tree' (all nested contours) or 'external'

    Returns:
        Contours sorted by area, largest first
    """
    if mode not in RETRIEVAL_MODES:
        raise ValueError(f"Unknown contour retrieval mode: {mode}")

    h, w = edge_mask.shape[:2]
    image_area = float(w * h)

    found, _ = cv2.findContours(
        edge_mask,
        RETRIEVAL_MODES[mode],
        cv2.CHAIN_APPROX_SIMPLE
    )

    contours = []
    for points in found:
        area = cv2.contourArea(points)
        ratio = area / image_area
        if min_area_ratio <= ratio <= max_area_ratio:
            contours.append(Contour(points=points, area=float(area)))

    # Stable sort: equal areas keep the order findContours returned them in
    contours.sort(key=lambda c: c.area, reverse=True)

    logger.debug("Found %d contours, %d within area range", len(found), len(contours))
    return contours
