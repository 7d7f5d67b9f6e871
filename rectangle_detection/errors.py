"""
Errors raised by the rectangle detection pipeline.

"No rectangle found" is not an error: detection returns None or an empty list.
"""


class RectangleDetectionError(Exception):
    """Base class for all pipeline errors"""


class InvalidImage(RectangleDetectionError, ValueError):
    """Input image is empty, zero-sized or could not be read"""


class NotReady(RectangleDetectionError):
    """The vision backend has not been initialized yet"""


class DegenerateGeometry(RectangleDetectionError, ValueError):
    """Corners collapse to a zero-sized or non-invertible region"""
