"""
Rectangle detector for images using OpenCV
"""

import logging
from typing import List, Optional, Sequence

from common.geometry import Corners, Size
from .candidates import DEFAULT_EPSILONS, Candidate, generate_candidates
from .config import ScoringWeights, detector_kwargs_from_env
from .contours import extract_contours
from .edges import build_edge_map
from .pixel_grid import to_array
from .scoring import ScoredCandidate, rank, score_candidate, select_best

logger = logging.getLogger(__name__)


class RectangleDetector:
    """
    Class for document-like rectangle detection in images.

    Uses Canny edges and contour approximation to find quadrilaterals,
    then ranks them with an area-dominated score.
    """

    def __init__(
        self,
        blur_kernel: int = 3,
        canny_low: float = 50,
        canny_high: float = 150,
        min_area_ratio: float = 0.01,
        max_area_ratio: float = 0.8,
        max_contours: int = 30,
        epsilons: Sequence[float] = DEFAULT_EPSILONS,
        relax_area_ratio: float = 0.05,
        contour_mode: str = 'tree',
        weights: Optional[ScoringWeights] = None
    ):
        """
        Initialize the detector.

        Args:
            blur_kernel: Gaussian blur kernel size (odd)
            canny_low: Lower Canny threshold
            canny_high: Upper Canny threshold
            min_area_ratio: Minimum contour area relative to image area
            max_area_ratio: Maximum contour area relative to image area (drops the frame)
            max_contours: How many of the largest contours are approximated
            epsilons: Polygon approximation tolerances as ratio of perimeter, tightest first
            relax_area_ratio: Non-convex quads larger than this share of the image are kept
            contour_mode: 'tree' or 'external' contour retrieval
            weights: Scoring weights (defaults to ScoringWeights())
        """
        if canny_low > canny_high:
            raise ValueError("canny_low must not exceed canny_high")
        if not 0 <= min_area_ratio <= max_area_ratio:
            raise ValueError("Area ratios must satisfy 0 <= min_area_ratio <= max_area_ratio")

        self.blur_kernel = blur_kernel
        self.canny_low = canny_low
        self.canny_high = canny_high
        self.min_area_ratio = min_area_ratio
        self.max_area_ratio = max_area_ratio
        self.max_contours = max_contours
        self.epsilons = tuple(sorted(epsilons))
        self.relax_area_ratio = relax_area_ratio
        self.contour_mode = contour_mode
        self.weights = weights or ScoringWeights()

    @classmethod
    def from_env(cls, environ=None, **overrides) -> "RectangleDetector":
        """Create a detector configured from RECT_* environment variables."""
        kwargs = detector_kwargs_from_env(environ)
        kwargs.update(overrides)
        return cls(**kwargs)

    def find_candidates(self, image) -> List[Candidate]:
        """
        Run the pipeline up to validated (unscored) quadrilaterals.

        Args:
            image: Input image (numpy array or PixelGrid)

        Returns:
            Candidates in generation order (largest contour first)

        Raises:
            InvalidImage: image is missing or zero-sized
        """
        array = to_array(image)
        size = Size.of(array)

        edge_map = build_edge_map(
            array,
            blur_kernel=self.blur_kernel,
            canny_low=self.canny_low,
            canny_high=self.canny_high
        )

        contours = extract_contours(
            edge_map,
            min_area_ratio=self.min_area_ratio,
            max_area_ratio=self.max_area_ratio,
            mode=self.contour_mode
        )

        results = generate_candidates(
            contours,
            size,
            max_contours=self.max_contours,
            epsilons=self.epsilons,
            relax_area_ratio=self.relax_area_ratio
        )

        return [r.candidate for r in results if r.ok]

    def _score_all(self, image) -> List[ScoredCandidate]:
        return [score_candidate(c, self.weights) for c in self.find_candidates(image)]

    def detect(self, image) -> Optional[Corners]:
        """
        Detect the best rectangle in the image.

        Args:
            image: Input image (BGR, BGRA or grayscale)

        Returns:
            Corners ordered top-left, top-right, bottom-right, bottom-left,
            or None if no quadrilateral passed validation.
        """
        best = select_best(self._score_all(image))
        if best is None:
            logger.info("No rectangle detected")
            return None

        logger.info("Detected rectangle %s (score %.3f)", best.corners, best.score)
        return best.corners

    def detect_all(self, image) -> List[ScoredCandidate]:
        """
        Detect all rectangles in the image.

        Returns:
            Scored candidates sorted by score, best first (empty if none)
        """
        ranked = rank(self._score_all(image))
        logger.info("Detected %d rectangle candidate(s)", len(ranked))
        return ranked


_default_detector = None


def _get_default_detector() -> RectangleDetector:
    global _default_detector
    if _default_detector is None:
        _default_detector = RectangleDetector()
    return _default_detector


def detect_rectangle(image) -> Optional[Corners]:
    """Best rectangle with default parameters, or None."""
    return _get_default_detector().detect(image)


def detect_all_rectangles(image) -> List[ScoredCandidate]:
    """All rectangles with default parameters, best first."""
    return _get_default_detector().detect_all(image)
