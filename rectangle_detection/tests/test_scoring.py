"""
Tests for rectangle scoring and selection
"""

import math

import numpy as np
import pytest

from common.geometry import Corners, Size
from rectangle_detection.candidates import Candidate
from rectangle_detection.config import ScoringWeights
from rectangle_detection.scoring import (
    ScoredCandidate,
    area_score,
    aspect_score,
    rank,
    score_candidate,
    score_corners,
    select_best,
)


def _candidate(pts, image_size=Size(100, 100)) -> Candidate:
    corners = Corners.from_array(np.array(pts, dtype=np.float64), image_size)
    area = 0.0
    for i in range(4):
        x1, y1 = pts[i]
        x2, y2 = pts[(i + 1) % 4]
        area += x1 * y2 - x2 * y1
    return Candidate(corners=corners, area=abs(area) / 2.0, contour_area=abs(area) / 2.0, epsilon=0.015)


def _scored(score: float, tag: int) -> ScoredCandidate:
    candidate = _candidate([(tag, 0), (tag + 10, 0), (tag + 10, 10), (tag, 10)])
    return ScoredCandidate(candidate=candidate, score=score, breakdown=None)


CENTERED = [(25, 25), (75, 25), (75, 75), (25, 75)]


class TestBands:

    @pytest.mark.parametrize("ratio, expected", [
        (0.0, 0.01),
        (0.019, 0.01),
        (0.02, 0.1),
        (0.05, 0.4),
        (0.1, 0.8),
        (0.2, 1.0),
        (0.8, 1.0),
    ])
    def test_area_bands(self, ratio, expected):
        assert area_score(ratio) == expected

    def test_area_score_monotonic(self):
        ratios = np.linspace(0.0, 1.0, 201)
        scores = [area_score(r) for r in ratios]
        assert scores == sorted(scores)

    @pytest.mark.parametrize("ratio, expected", [
        (1.0, 1.0),
        (3.0, 1.0),
        (4.0, 0.9),
        (8.0, 0.8),
        (12.0, 0.7),
        (50.0, 0.6),
        (math.inf, 0.6),
    ])
    def test_aspect_bands(self, ratio, expected):
        assert aspect_score(ratio) == expected


class TestScoreCandidate:

    def test_centered_square(self):
        """Centered quarter-area square: every factor maxed plus the bonus"""
        scored = score_candidate(_candidate(CENTERED))
        b = scored.breakdown

        assert b.area_ratio == pytest.approx(0.25)
        assert b.area == 1.0
        assert b.aspect == 1.0
        assert b.edge == pytest.approx(1.0)
        assert b.position == pytest.approx(1.0)
        assert b.bonus == pytest.approx(0.2)
        assert scored.score == pytest.approx(1.2)

    def test_small_offcenter_scores_lower(self):
        small = score_candidate(_candidate([(0, 0), (10, 0), (10, 10), (0, 10)]))
        large = score_candidate(_candidate(CENTERED))

        assert small.breakdown.bonus == 0.0
        assert small.breakdown.position < 1.0
        assert small.score < large.score

    def test_custom_weights(self):
        weights = ScoringWeights(area=0.5, aspect=0.0, edge=0.0, position=0.0, bonus_factor=0.0)
        scored = score_candidate(_candidate(CENTERED), weights)
        assert scored.score == pytest.approx(0.5)

    def test_elongated_strip(self):
        strip = _candidate([(0, 45), (100, 45), (100, 50), (0, 50)])
        b = score_corners(strip.corners, strip.area)

        assert b.aspect_ratio == pytest.approx(20.0)
        assert b.aspect == 0.6

    def test_perspective_edges(self):
        trapezoid = _candidate([(40, 10), (60, 10), (90, 90), (10, 90)])
        b = score_corners(trapezoid.corners, trapezoid.area)

        # top 20 vs bottom 80 is capped at a 0.5 penalty
        assert 0.5 < b.edge < 1.0

    def test_to_dict_includes_score(self):
        scored = score_candidate(_candidate(CENTERED))
        data = scored.to_dict()

        assert data["topLeft"] == {"x": 25.0, "y": 25.0}
        assert data["score"] == pytest.approx(1.2)


class TestSelection:

    def test_select_best_empty(self):
        assert select_best([]) is None

    def test_select_best_highest(self):
        scored = [_scored(0.3, 0), _scored(0.9, 1), _scored(0.5, 2)]
        assert select_best(scored) is scored[1]

    def test_select_best_tie_keeps_first(self):
        scored = [_scored(0.5, 0), _scored(0.9, 1), _scored(0.9, 2)]
        assert select_best(scored) is scored[1]

    def test_rank_descending_and_stable(self):
        scored = [_scored(0.5, 0), _scored(0.9, 1), _scored(0.5, 2), _scored(0.7, 3)]
        ranked = rank(scored)

        assert [s.score for s in ranked] == [0.9, 0.7, 0.5, 0.5]
        assert ranked[2] is scored[0]
        assert ranked[3] is scored[2]

    def test_rank_empty(self):
        assert rank([]) == []
