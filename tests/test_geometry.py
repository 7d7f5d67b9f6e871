import numpy as np
import pytest

from common.geometry import Corners, Point2D, Size, polygon_area


class TestClass:
    def test_point_distance(self):
        assert Point2D(0, 0).distance_to(Point2D(3, 4)) == 5.0

    def test_size_area(self):
        assert Size(10, 20).area() == 200

    def test_size_center(self):
        assert Size(10, 20).center() == Point2D(5.0, 10.0)

    def test_size_of_image(self):
        assert Size.of(np.zeros((20, 30, 3), dtype=np.uint8)) == Size(30, 20)

    def test_full_frame(self):
        corners = Corners.full_frame(Size(640, 480))
        assert corners.top_left == Point2D(0, 0)
        assert corners.top_right == Point2D(640, 0)
        assert corners.bottom_right == Point2D(640, 480)
        assert corners.bottom_left == Point2D(0, 480)

    def test_as_array_order(self):
        corners = Corners.full_frame(Size(4, 2))
        arr = corners.as_array()
        assert arr.dtype == np.float32
        assert arr.tolist() == [[0, 0], [4, 0], [4, 2], [0, 2]]

    def test_centroid(self):
        assert Corners.full_frame(Size(4, 2)).centroid() == Point2D(2.0, 1.0)

    def test_to_dict(self):
        data = Corners.full_frame(Size(4, 2)).to_dict()
        assert list(data) == ["topLeft", "topRight", "bottomRight", "bottomLeft"]
        assert data["bottomRight"] == {"x": 4.0, "y": 2.0}
        assert "score" not in data

    def test_to_dict_with_score(self):
        assert Corners.full_frame(Size(4, 2)).to_dict(score=0.5)["score"] == 0.5

    def test_from_dict(self):
        corners = Corners.full_frame(Size(4, 2))
        assert Corners.from_dict(corners.to_dict(score=0.9), Size(4, 2)) == corners

    def test_from_dict_missing_key(self):
        data = Corners.full_frame(Size(4, 2)).to_dict()
        del data["topLeft"]
        with pytest.raises(ValueError):
            Corners.from_dict(data, Size(4, 2))

    def test_from_dict_not_a_point(self):
        data = Corners.full_frame(Size(4, 2)).to_dict()
        data["topLeft"] = [0, 0]
        with pytest.raises(ValueError):
            Corners.from_dict(data, Size(4, 2))

    def test_corners_are_values(self):
        a = Corners.full_frame(Size(4, 2))
        b = Corners.full_frame(Size(4, 2))
        assert a == b and hash(a) == hash(b)

    def test_polygon_area(self):
        assert polygon_area([(0, 0), (4, 0), (4, 2), (0, 2)]) == 8.0

    def test_polygon_area_orientation(self):
        assert polygon_area([(0, 2), (4, 2), (4, 0), (0, 0)]) == 8.0

    def test_polygon_area_degenerate(self):
        assert polygon_area([(0, 0), (1, 1)]) == 0.0
