"""
Shared value types.
"""

from .geometry import Point2D, Size, Corners, polygon_area

__all__ = ['Point2D', 'Size', 'Corners', 'polygon_area']
