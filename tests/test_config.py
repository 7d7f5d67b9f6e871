import pytest

from rectangle_detection.config import ScoringWeights, detector_kwargs_from_env, weights_from_env


class TestClass:
    def test_default_weights(self):
        weights = ScoringWeights()
        assert (weights.area, weights.aspect, weights.edge, weights.position) == (0.8, 0.1, 0.05, 0.05)
        assert weights.bonus_threshold == 0.15
        assert weights.bonus_factor == 2.0

    def test_empty_environment(self):
        assert detector_kwargs_from_env({}) == {}
        assert weights_from_env({}) == ScoringWeights()

    def test_detector_values(self):
        kwargs = detector_kwargs_from_env({
            "RECT_BLUR_KERNEL": "5",
            "RECT_CANNY_HIGH": "120",
            "RECT_CONTOUR_MODE": "external",
        })
        assert kwargs == {"blur_kernel": 5, "canny_high": 120.0, "contour_mode": "external"}

    def test_blank_values_ignored(self):
        assert detector_kwargs_from_env({"RECT_MAX_CONTOURS": "  "}) == {}

    def test_weights(self):
        weights = weights_from_env({"RECT_WEIGHT_POSITION": "0.2", "RECT_BONUS_FACTOR": "0"})
        assert weights.position == 0.2
        assert weights.bonus_factor == 0.0
        assert weights.area == 0.8

    def test_weights_passed_to_detector(self):
        kwargs = detector_kwargs_from_env({"RECT_BONUS_THRESHOLD": "0.3"})
        assert kwargs["weights"].bonus_threshold == 0.3

    def test_invalid_value(self):
        with pytest.raises(ValueError, match="RECT_MAX_CONTOURS"):
            detector_kwargs_from_env({"RECT_MAX_CONTOURS": "many"})
