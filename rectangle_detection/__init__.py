"""
Rectangle Detection Module

Finds the four corners of a document-like rectangle in a photograph and
rectifies the photograph to that rectangle.
"""

from common.geometry import Corners, Point2D, Size
from .backend import Backend, BackendState
from .config import ScoringWeights
from .detector import RectangleDetector, detect_all_rectangles, detect_rectangle
from .errors import DegenerateGeometry, InvalidImage, NotReady, RectangleDetectionError
from .pixel_grid import ArrayPixelGrid, PixelGrid
from .rectify import rectify
from .scoring import ScoredCandidate
from .visualizer import RectangleVisualizer

__all__ = [
    'Corners', 'Point2D', 'Size',
    'Backend', 'BackendState',
    'ScoringWeights',
    'RectangleDetector', 'detect_rectangle', 'detect_all_rectangles',
    'RectangleDetectionError', 'InvalidImage', 'NotReady', 'DegenerateGeometry',
    'PixelGrid', 'ArrayPixelGrid',
    'rectify',
    'ScoredCandidate',
    'RectangleVisualizer',
]
