"""
Tests for quadrilateral candidate generation
"""

import cv2
import numpy as np
import pytest

from common.geometry import Size
from rectangle_detection.candidates import (
    SkipReason,
    approximate_quad,
    generate_candidate,
    generate_candidates,
    is_convex,
    is_self_intersecting,
)
from rectangle_detection.contours import Contour

IMAGE_SIZE = Size(400, 400)


def _contour(points, dtype=np.int32) -> Contour:
    pts = np.array(points, dtype=dtype).reshape(-1, 1, 2)
    area = cv2.contourArea(pts) if dtype in (np.int32, np.float32) else 0.0
    return Contour(points=pts, area=float(area))


def _dense_square(x0, y0, side, step=5):
    """Square boundary sampled every few pixels, like a traced contour."""
    pts = []
    for x in range(x0, x0 + side, step):
        pts.append((x, y0))
    for y in range(y0, y0 + side, step):
        pts.append((x0 + side, y))
    for x in range(x0 + side, x0, -step):
        pts.append((x, y0 + side))
    for y in range(y0 + side, y0, -step):
        pts.append((x0, y))
    return pts


PENTAGON = [(200, 80), (314, 163), (271, 297), (129, 297), (86, 163)]
SMALL_DART = [(100, 100), (200, 140), (100, 180), (130, 140)]
LARGE_DART = [(20, 20), (380, 200), (20, 380), (150, 200)]
LARGE_BOWTIE = [(20, 20), (380, 380), (380, 100), (20, 380)]


class TestApproximation:

    def test_dense_square_approximates_to_four_points(self):
        contour = _contour(_dense_square(100, 100, 200))
        found = approximate_quad(contour.points)

        assert found is not None
        quad, eps = found
        assert quad.shape == (4, 2)
        assert eps == 0.015

    def test_pentagon_never_approximates_to_four_points(self):
        contour = _contour(PENTAGON)
        assert approximate_quad(contour.points) is None

    def test_first_matching_tolerance_is_used(self):
        contour = _contour(_dense_square(100, 100, 200))
        _, eps = approximate_quad(contour.points, epsilons=(0.02, 0.03))
        assert eps == 0.02


class TestConvexity:

    def test_square_is_convex(self):
        square = np.array([(0, 0), (10, 0), (10, 10), (0, 10)], dtype=np.float64)
        assert is_convex(square)
        assert not is_self_intersecting(square)

    def test_dart_is_not_convex(self):
        assert not is_convex(np.array(SMALL_DART, dtype=np.float64))
        assert not is_self_intersecting(np.array(SMALL_DART, dtype=np.float64))

    def test_bowtie_is_self_intersecting(self):
        bowtie = np.array(LARGE_BOWTIE, dtype=np.float64)
        assert not is_convex(bowtie)
        assert is_self_intersecting(bowtie)


class TestGenerateCandidate:

    def test_square_accepted(self):
        contour = _contour(_dense_square(100, 100, 200))
        result = generate_candidate(contour, IMAGE_SIZE)

        assert result.ok
        candidate = result.candidate
        assert candidate.image_size == IMAGE_SIZE
        assert candidate.area == pytest.approx(200 * 200)
        assert candidate.contour_area == contour.area
        assert candidate.corners.top_left.x == pytest.approx(100)
        assert candidate.corners.top_left.y == pytest.approx(100)
        assert candidate.corners.bottom_right.x == pytest.approx(300)
        assert candidate.corners.bottom_right.y == pytest.approx(300)

    def test_pentagon_skipped(self):
        result = generate_candidate(_contour(PENTAGON), IMAGE_SIZE)

        assert not result.ok
        assert result.candidate is None
        assert result.skip_reason == SkipReason.NOT_QUADRILATERAL

    def test_small_non_convex_rejected(self):
        result = generate_candidate(_contour(SMALL_DART), IMAGE_SIZE)
        assert result.skip_reason == SkipReason.NOT_CONVEX

    def test_large_non_convex_passes_relaxation_but_collapses(self):
        """Large darts pass the area relaxation, but ordering would repeat a corner"""
        result = generate_candidate(_contour(LARGE_DART), IMAGE_SIZE)

        assert not result.ok
        assert result.skip_reason == SkipReason.DEGENERATE

    def test_accepted_corners_are_distinct(self):
        contours = [_contour(_dense_square(100, 100, 200)), _contour(LARGE_DART), _contour(SMALL_DART)]
        results = generate_candidates(contours, IMAGE_SIZE)

        accepted = [r.candidate for r in results if r.ok]
        assert len(accepted) == 1
        for candidate in accepted:
            assert len(set(candidate.corners.points())) == 4

    def test_relaxation_threshold_is_configurable(self):
        result = generate_candidate(_contour(LARGE_DART), IMAGE_SIZE, relax_area_ratio=0.5)
        assert result.skip_reason == SkipReason.NOT_CONVEX

    def test_large_self_intersecting_rejected(self):
        result = generate_candidate(_contour(LARGE_BOWTIE), IMAGE_SIZE)
        assert result.skip_reason == SkipReason.SELF_INTERSECTING

    def test_opencv_failure_becomes_skip(self):
        # float64 points are rejected by cv2.arcLength
        contour = _contour(_dense_square(100, 100, 200), dtype=np.float64)
        result = generate_candidate(contour, IMAGE_SIZE, index=7)

        assert not result.ok
        assert result.index == 7
        assert result.skip_reason == SkipReason.APPROXIMATION_FAILED
        assert result.detail


class TestGenerateCandidates:

    def test_bad_contour_does_not_abort_others(self):
        bad = _contour(_dense_square(100, 100, 200), dtype=np.float64)
        good = _contour(_dense_square(50, 50, 300))

        results = generate_candidates([bad, _contour(PENTAGON), good], IMAGE_SIZE)

        assert [r.index for r in results] == [0, 1, 2]
        assert results[0].skip_reason == SkipReason.APPROXIMATION_FAILED
        assert results[1].skip_reason == SkipReason.NOT_QUADRILATERAL
        assert results[2].ok

    def test_only_top_contours_examined(self):
        contours = [_contour(_dense_square(10 + i, 10 + i, 100)) for i in range(35)]
        results = generate_candidates(contours, IMAGE_SIZE)
        assert len(results) == 30

    def test_fewer_contours_than_limit(self):
        contours = [_contour(_dense_square(10, 10, 100))]
        assert len(generate_candidates(contours, IMAGE_SIZE, max_contours=30)) == 1
