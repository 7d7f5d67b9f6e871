"""
Visualization of detected rectangles
"""

from typing import Optional, Sequence, Tuple

import cv2
import numpy as np

from common.geometry import Corners
from .scoring import ScoredCandidate

CORNER_LABELS = ("TL", "TR", "BR", "BL")


class RectangleVisualizer:
    """
    Class for drawing detected rectangles on a copy of the image.

    Draws a frame with a transparent fill, corner markers and labels.
    """

    def __init__(
        self,
        border_color: Tuple[int, int, int] = (255, 100, 0),  # Blue in BGR
        border_thickness: int = 3,
        overlay_color: Tuple[int, int, int] = (255, 200, 100),  # Light blue in BGR
        overlay_alpha: float = 0.3,
        secondary_color: Tuple[int, int, int] = (0, 200, 255)  # Orange in BGR
    ):
        """
        Initialize the visualizer.

        Args:
            border_color: Frame color of the best rectangle (BGR)
            border_thickness: Frame thickness in pixels
            overlay_color: Transparent overlay color (BGR)
            overlay_alpha: Overlay transparency (0.0 = transparent, 1.0 = opaque)
            secondary_color: Frame color of lower-ranked candidates (BGR)
        """
        self.border_color = border_color
        self.border_thickness = border_thickness
        self.overlay_color = overlay_color
        self.overlay_alpha = overlay_alpha
        self.secondary_color = secondary_color

    @staticmethod
    def _to_bgr(image: np.ndarray) -> np.ndarray:
        if image.ndim == 2:
            return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
        if image.shape[2] == 4:
            return cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)
        return image.copy()

    def _draw_text(self, image: np.ndarray, text: str, origin: Tuple[int, int], scale: float = 0.7):
        # White outline
        cv2.putText(image, text, origin, cv2.FONT_HERSHEY_SIMPLEX, scale, (255, 255, 255), 3, cv2.LINE_AA)
        # Black text
        cv2.putText(image, text, origin, cv2.FONT_HERSHEY_SIMPLEX, scale, (0, 0, 0), 1, cv2.LINE_AA)

    def _draw_quad(self, image: np.ndarray, corners: Corners, color: Tuple[int, int, int], labels: bool):
        pts = np.round(corners.as_array()).astype(np.int32)
        cv2.polylines(image, [pts], True, color, self.border_thickness, cv2.LINE_AA)

        for label, corner in zip(CORNER_LABELS, pts):
            cv2.circle(image, (int(corner[0]), int(corner[1])), radius=5, color=color, thickness=-1)
            if labels:
                self._draw_text(image, label, (int(corner[0]) + 8, int(corner[1]) - 8), 0.5)

    def visualize(
        self,
        image: np.ndarray,
        corners: Optional[Corners],
        score: Optional[float] = None,
        draw_overlay: bool = True
    ) -> np.ndarray:
        """
        Visualize a detected rectangle on the image.

        Args:
            image: Input image (BGR, BGRA or grayscale)
            corners: Detected corners (None returns an unmodified copy)
            score: Score to print in the top left corner
            draw_overlay: Whether to draw transparent fill

        Returns:
            BGR image with visualization
        """
        result = self._to_bgr(image)
        if corners is None:
            return result

        if draw_overlay:
            overlay = result.copy()
            pts = np.round(corners.as_array()).astype(np.int32)
            cv2.fillPoly(overlay, [pts], self.overlay_color)
            result = cv2.addWeighted(overlay, self.overlay_alpha, result, 1 - self.overlay_alpha, 0)

        self._draw_quad(result, corners, self.border_color, labels=True)

        if score is not None:
            self._draw_text(result, f"Score: {score:.3f}", (10, 30))

        return result

    def visualize_all(self, image: np.ndarray, ranked: Sequence[ScoredCandidate]) -> np.ndarray:
        """
        Draw every ranked candidate: the best one highlighted, the rest with
        their rank number.
        """
        if not ranked:
            return self._to_bgr(image)

        result = self.visualize(image, ranked[0].corners, ranked[0].score)

        for rank, scored in enumerate(ranked[1:], start=2):
            self._draw_quad(result, scored.corners, self.secondary_color, labels=False)
            centroid = scored.corners.centroid()
            self._draw_text(result, f"#{rank} {scored.score:.2f}", (int(centroid.x), int(centroid.y)), 0.5)

        return result
