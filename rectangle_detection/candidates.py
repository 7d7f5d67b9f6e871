"""
Quadrilateral candidate generation.

Every examined contour produces a CandidateResult: either a Candidate or the
reason it was skipped. One bad contour never stops the others.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np

from common.geometry import Corners, Size, polygon_area
from .contours import Contour
from .ordering import order_corners

logger = logging.getLogger(__name__)

DEFAULT_EPSILONS = (0.015, 0.02, 0.025, 0.03)


class SkipReason(Enum):
    """Why a contour produced no candidate"""
    NOT_QUADRILATERAL = "not_quadrilateral"
    DEGENERATE = "degenerate"
    NOT_CONVEX = "not_convex"
    SELF_INTERSECTING = "self_intersecting"
    APPROXIMATION_FAILED = "approximation_failed"


@dataclass
class Candidate:
    """
    A validated quadrilateral.

    area is the area of the 4-point polygon, contour_area the area of the
    contour it was approximated from.
    """
    corners: Corners
    area: float
    contour_area: float
    epsilon: float

    @property
    def image_size(self) -> Size:
        return self.corners.image_size


@dataclass
class CandidateResult:
    index: int
    candidate: Optional[Candidate] = None
    skip_reason: Optional[SkipReason] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.candidate is not None


def approximate_quad(
    points: np.ndarray,
    epsilons: Sequence[float] = DEFAULT_EPSILONS
) -> Optional[Tuple[np.ndarray, float]]:
    """
    Approximate a contour with a polygon, trying tolerances from tightest to
    loosest and stopping at the first one that gives exactly 4 vertices.

    Args:
        points: Contour points, shape (N, 1, 2)
        epsilons: Tolerances as fractions of the contour perimeter

    Returns:
        (quad of shape (4, 2), epsilon used) or None
    """
    peri = cv2.arcLength(points, True)

    for eps_mult in epsilons:
        approx = cv2.approxPolyDP(points, eps_mult * peri, True)
        logger.debug("epsilon=%.3f -> %d points", eps_mult, len(approx))
        if len(approx) == 4:
            return approx.reshape(4, 2).astype(np.float64), eps_mult

    return None


def _cross(o: np.ndarray, a: np.ndarray, b: np.ndarray) -> float:
    return float((a[0] - o[0]) * (b[1] - a[1]) - (a[1] - o[1]) * (b[0] - a[0]))


def turn_signs(quad: np.ndarray) -> List[int]:
    """Sign of the turn at every vertex triple; collinear triples give 0."""
    signs = []
    n = len(quad)
    for i in range(n):
        cross = _cross(quad[i], quad[(i + 1) % n], quad[(i + 2) % n])
        signs.append(0 if cross == 0 else (1 if cross > 0 else -1))
    return signs


def is_convex(quad: np.ndarray) -> bool:
    """All non-zero turns have the same rotational sign."""
    signs = {s for s in turn_signs(quad) if s != 0}
    return len(signs) == 1


def _orientation(a: np.ndarray, b: np.ndarray, c: np.ndarray) -> float:
    return float((b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0]))


def _segments_intersect(p1, p2, p3, p4) -> bool:
    # Proper crossings only; touching endpoints do not count
    d1 = _orientation(p3, p4, p1)
    d2 = _orientation(p3, p4, p2)
    d3 = _orientation(p1, p2, p3)
    d4 = _orientation(p1, p2, p4)
    return d1 * d2 < 0 and d3 * d4 < 0


def is_self_intersecting(quad: np.ndarray) -> bool:
    """A quadrilateral is self-intersecting when opposite edges cross."""
    q = np.asarray(quad, dtype=np.float64)
    return (
        _segments_intersect(q[0], q[1], q[2], q[3]) or
        _segments_intersect(q[1], q[2], q[3], q[0])
    )


def _is_degenerate(quad: np.ndarray) -> bool:
    if len(np.unique(quad, axis=0)) != 4:
        return True
    return all(s == 0 for s in turn_signs(quad))


def generate_candidate(
    contour: Contour,
    image_size: Size,
    index: int = 0,
    epsilons: Sequence[float] = DEFAULT_EPSILONS,
    relax_area_ratio: float = 0.05
) -> CandidateResult:
    """
    Turn one contour into a candidate or a skip result.

    Non-convex quads are still accepted when they cover more than
    relax_area_ratio of the image, as long as they are simple polygons.

    Args:
        contour: Contour to approximate
        image_size: Size of the image the contour was found in
        index: Position of the contour in the extraction order
        epsilons: Approximation tolerances (fractions of perimeter)
        relax_area_ratio: Area ratio above which non-convex quads are kept

    Returns:
        CandidateResult
    """
    try:
        found = approximate_quad(contour.points, epsilons)
    except cv2.error as e:
        logger.warning("Contour %d: approximation failed: %s", index, e)
        return CandidateResult(index, skip_reason=SkipReason.APPROXIMATION_FAILED, detail=str(e))

    if found is None:
        logger.debug("Contour %d: no quadrilateral at any tolerance", index)
        return CandidateResult(index, skip_reason=SkipReason.NOT_QUADRILATERAL)

    quad, eps_mult = found

    if _is_degenerate(quad):
        return CandidateResult(index, skip_reason=SkipReason.DEGENERATE)

    area = polygon_area(quad.tolist())

    if not is_convex(quad):
        area_ratio = area / float(image_size.area())
        if area_ratio <= relax_area_ratio:
            logger.debug("Contour %d: not convex (area ratio %.3f)", index, area_ratio)
            return CandidateResult(index, skip_reason=SkipReason.NOT_CONVEX)
        if is_self_intersecting(quad):
            return CandidateResult(index, skip_reason=SkipReason.SELF_INTERSECTING)
        logger.debug("Contour %d: accepting non-convex quad (area ratio %.3f)", index, area_ratio)

    corners = order_corners(quad, image_size)
    if len(set(corners.points())) != 4:
        # A reflex vertex is never picked by the per-axis ordering
        logger.debug("Contour %d: ordering collapses corners", index)
        return CandidateResult(index, skip_reason=SkipReason.DEGENERATE)

    candidate = Candidate(
        corners=corners,
        area=area,
        contour_area=contour.area,
        epsilon=eps_mult
    )
    return CandidateResult(index, candidate=candidate)


def generate_candidates(
    contours: Sequence[Contour],
    image_size: Size,
    max_contours: int = 30,
    epsilons: Sequence[float] = DEFAULT_EPSILONS,
    relax_area_ratio: float = 0.05
) -> List[CandidateResult]:
    """
    Run generate_candidate on the largest max_contours contours.

    Contours must already be sorted largest first.
    """
    results = []
    for index, contour in enumerate(contours[:max_contours]):
        results.append(generate_candidate(
            contour,
            image_size,
            index=index,
            epsilons=epsilons,
            relax_area_ratio=relax_area_ratio
        ))

    accepted = sum(1 for r in results if r.ok)
    logger.debug("Checked %d of %d contours, %d candidates", len(results), len(contours), accepted)
    return results
