"""
Geometry value types shared by the detector and the service layer.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class Point2D:
    x: float
    y: float

    def __str__(self) -> str:
        return f"Point2D({self.x:.1f}, {self.y:.1f})"

    def distance_to(self, other: "Point2D") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Size:
    width: int
    height: int

    def __str__(self) -> str:
        return f"Size({self.width}, {self.height})"

    def area(self) -> int:
        """
        Calculate the area of the image.

        Returns:
        - int: width * height
        """
        return self.width * self.height

    def center(self) -> Point2D:
        return Point2D(self.width / 2.0, self.height / 2.0)

    @classmethod
    def of(cls, image: np.ndarray) -> "Size":
        h, w = image.shape[:2]
        return cls(int(w), int(h))


@dataclass(frozen=True)
class Corners:
    """
    Four corners of a quadrilateral in image coordinates (pixels), ordered
    clockwise: top-left, top-right, bottom-right, bottom-left.

    The order is load-bearing: the rectifier maps the corners onto the output
    rectangle in exactly this order.
    """
    top_left: Point2D
    top_right: Point2D
    bottom_right: Point2D
    bottom_left: Point2D
    image_size: Size

    _KEYS = ("topLeft", "topRight", "bottomRight", "bottomLeft")

    def __str__(self) -> str:
        pts = ", ".join(str(p) for p in self.points())
        return f"Corners({pts}, {self.image_size})"

    def points(self) -> List[Point2D]:
        return [self.top_left, self.top_right, self.bottom_right, self.bottom_left]

    def as_array(self) -> np.ndarray:
        """Corners as a (4, 2) float32 array in TL, TR, BR, BL order."""
        return np.array([[p.x, p.y] for p in self.points()], dtype=np.float32)

    def centroid(self) -> Point2D:
        pts = self.points()
        return Point2D(sum(p.x for p in pts) / 4.0, sum(p.y for p in pts) / 4.0)

    def to_dict(self, score: Optional[float] = None) -> Dict:
        """
        Structural form used on the wire:
        {topLeft:{x,y}, topRight:{x,y}, bottomRight:{x,y}, bottomLeft:{x,y}[, score]}
        """
        data = {key: p.to_dict() for key, p in zip(self._KEYS, self.points())}
        if score is not None:
            data["score"] = float(score)
        return data

    @classmethod
    def from_dict(cls, data: Dict, image_size: Size) -> "Corners":
        try:
            pts = [Point2D(float(data[key]["x"]), float(data[key]["y"])) for key in cls._KEYS]
        except (KeyError, TypeError) as e:
            raise ValueError(f"Invalid corners: {e}") from e
        return cls(*pts, image_size=image_size)

    @classmethod
    def from_array(cls, pts: np.ndarray, image_size: Size) -> "Corners":
        """Build from a (4, 2) array that is already in TL, TR, BR, BL order."""
        pts = np.asarray(pts, dtype=np.float64).reshape(4, 2)
        return cls(*[Point2D(float(x), float(y)) for x, y in pts], image_size=image_size)

    @classmethod
    def full_frame(cls, image_size: Size) -> "Corners":
        """Corners covering the whole image, used when nothing was detected."""
        w, h = float(image_size.width), float(image_size.height)
        return cls(Point2D(0.0, 0.0), Point2D(w, 0.0), Point2D(w, h), Point2D(0.0, h), image_size=image_size)


def polygon_area(points: List[Tuple[float, float]]) -> float:
    """Shoelace area of a closed polygon (absolute value)."""
    if len(points) < 3:
        return 0.0

    area = 0.0
    for i in range(len(points)):
        x1, y1 = points[i]
        x2, y2 = points[(i + 1) % len(points)]
        area += x1 * y2 - x2 * y1
    return abs(area) / 2.0
