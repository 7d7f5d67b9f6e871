"""
Rectangle scoring and candidate selection.

The score deliberately favors quadrilaterals that fill most of the frame over
geometrically perfect ones: the dominant document region is what gets cropped.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from common.geometry import Corners
from .candidates import Candidate
from .config import ScoringWeights

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoreBreakdown:
    area: float
    aspect: float
    edge: float
    position: float
    bonus: float
    area_ratio: float
    aspect_ratio: float


@dataclass
class ScoredCandidate:
    candidate: Candidate
    score: float
    breakdown: ScoreBreakdown

    @property
    def corners(self) -> Corners:
        return self.candidate.corners

    def to_dict(self):
        return self.corners.to_dict(score=self.score)


def area_score(area_ratio: float) -> float:
    """Banded area score, non-decreasing in area_ratio."""
    if area_ratio >= 0.2:
        return 1.0
    if area_ratio >= 0.1:
        return 0.8
    if area_ratio >= 0.05:
        return 0.4
    if area_ratio >= 0.02:
        return 0.1
    return 0.01


def aspect_score(aspect_ratio: float) -> float:
    """Very lenient aspect score, long strips still get 0.6."""
    if aspect_ratio <= 3.0:
        return 1.0
    if aspect_ratio <= 5.0:
        return 0.9
    if aspect_ratio <= 8.0:
        return 0.8
    if aspect_ratio <= 12.0:
        return 0.7
    return 0.6


def _consistency(a: float, b: float) -> float:
    longest = max(a, b)
    if longest <= 0:
        return 0.5
    return 1.0 - min(0.5, abs(a - b) / longest)


def score_corners(
    corners: Corners,
    area: float,
    weights: Optional[ScoringWeights] = None
) -> ScoreBreakdown:
    """
    Compute the sub-scores of an ordered quadrilateral.

    Args:
        corners: Ordered corners (TL, TR, BR, BL) with the source image size
        area: Polygon area of the quadrilateral
        weights: Only the bonus threshold/factor are used here

    Returns:
        ScoreBreakdown with every factor (unweighted) and the bonus
    """
    weights = weights or ScoringWeights()
    tl, tr, br, bl = corners.points()
    size = corners.image_size

    top_width = tl.distance_to(tr)
    bottom_width = bl.distance_to(br)
    left_height = tl.distance_to(bl)
    right_height = tr.distance_to(br)

    # 1. Area, dominant factor
    image_area = float(size.area())
    area_ratio = area / image_area

    # 2. Shape, extremely lenient
    avg_width = (top_width + bottom_width) / 2.0
    avg_height = (left_height + right_height) / 2.0
    shortest = min(avg_width, avg_height)
    aspect_ratio = max(avg_width, avg_height) / shortest if shortest > 0 else math.inf

    # 3. Opposite edges, tolerates perspective skew
    edge = (_consistency(top_width, bottom_width) + _consistency(left_height, right_height)) / 2.0

    # 4. Distance of centroid from the image centre
    center = size.center()
    max_distance = math.hypot(center.x, center.y)
    position = 1.0 - corners.centroid().distance_to(center) / max_distance

    bonus = max(0.0, area_ratio - weights.bonus_threshold) * weights.bonus_factor

    return ScoreBreakdown(
        area=area_score(area_ratio),
        aspect=aspect_score(aspect_ratio),
        edge=edge,
        position=position,
        bonus=bonus,
        area_ratio=area_ratio,
        aspect_ratio=aspect_ratio
    )


def score_candidate(candidate: Candidate, weights: Optional[ScoringWeights] = None) -> ScoredCandidate:
    weights = weights or ScoringWeights()
    b = score_corners(candidate.corners, candidate.area, weights)

    total = (
        b.area * weights.area +
        b.aspect * weights.aspect +
        b.edge * weights.edge +
        b.position * weights.position +
        b.bonus
    )

    logger.debug(
        "Score breakdown: area=%.2f (ratio=%.3f), aspect=%.2f (ratio=%.2f), edge=%.3f, "
        "position=%.3f, bonus=%.3f, total=%.3f",
        b.area, b.area_ratio, b.aspect, b.aspect_ratio, b.edge, b.position, b.bonus, total
    )
    return ScoredCandidate(candidate=candidate, score=total, breakdown=b)


def select_best(scored: Sequence[ScoredCandidate]) -> Optional[ScoredCandidate]:
    """Highest score; the earliest candidate wins ties. None when empty."""
    if not scored:
        return None
    return max(scored, key=lambda s: s.score)


def rank(scored: Sequence[ScoredCandidate]) -> List[ScoredCandidate]:
    """All candidates by descending score, ties keep generation order."""
    return sorted(scored, key=lambda s: s.score, reverse=True)
