"""
Method call dispatch.

Method names and error codes are the ones the mobile plugin channel uses, so
clients can talk to this service the same way they talk to the plugin.
"""

import logging
import platform
from typing import Any, Dict, Optional

from common.geometry import Corners, Size
from rectangle_detection.backend import Backend
from rectangle_detection.detector import RectangleDetector
from rectangle_detection.errors import DegenerateGeometry, InvalidImage, NotReady
from rectangle_detection.rectify import rectify

from .codec import decode_image, encode_image

logger = logging.getLogger(__name__)

OPENCV_NOT_INITIALIZED = "OPENCV_NOT_INITIALIZED"
INVALID_ARGUMENT = "INVALID_ARGUMENT"
INVALID_IMAGE = "INVALID_IMAGE"
DEGENERATE_GEOMETRY = "DEGENERATE_GEOMETRY"
DETECTION_ERROR = "DETECTION_ERROR"
NOT_IMPLEMENTED = "NOT_IMPLEMENTED"

HTTP_STATUS = {
    OPENCV_NOT_INITIALIZED: 503,
    INVALID_ARGUMENT: 400,
    INVALID_IMAGE: 400,
    DEGENERATE_GEOMETRY: 400,
    DETECTION_ERROR: 500,
    NOT_IMPLEMENTED: 404,
}


class MethodCallError(Exception):
    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    @property
    def status(self) -> int:
        return HTTP_STATUS.get(self.code, 500)

    def to_dict(self) -> Dict[str, str]:
        return {"code": self.code, "message": self.message}


def _require_image(arguments: Dict[str, Any]):
    data = arguments.get("imageData")
    if data is None:
        raise MethodCallError(INVALID_ARGUMENT, "imageData is required")
    try:
        return decode_image(data)
    except InvalidImage as e:
        raise MethodCallError(INVALID_IMAGE, str(e)) from e


def _require_backend(backend: Backend):
    try:
        backend.require_ready()
    except NotReady as e:
        raise MethodCallError(OPENCV_NOT_INITIALIZED, "OpenCV is not initialized") from e


def get_platform_version(arguments, detector, backend) -> str:
    return f"{platform.system()} {platform.release()}"


def detect_rectangle(arguments, detector: RectangleDetector, backend: Backend) -> Optional[Dict]:
    _require_backend(backend)
    image = _require_image(arguments)

    try:
        corners = detector.detect(image)
    except InvalidImage as e:
        raise MethodCallError(INVALID_IMAGE, str(e)) from e
    except Exception as e:
        logger.exception("Error detecting rectangle")
        raise MethodCallError(DETECTION_ERROR, f"Failed to detect rectangle: {e}") from e

    if corners is None:
        if arguments.get("fullImageFallback"):
            return Corners.full_frame(Size.of(image)).to_dict()
        return None

    return corners.to_dict()


def detect_all_rectangles(arguments, detector: RectangleDetector, backend: Backend) -> list:
    _require_backend(backend)
    image = _require_image(arguments)

    try:
        ranked = detector.detect_all(image)
    except InvalidImage as e:
        raise MethodCallError(INVALID_IMAGE, str(e)) from e
    except Exception as e:
        logger.exception("Error detecting rectangles")
        raise MethodCallError(DETECTION_ERROR, f"Failed to detect rectangles: {e}") from e

    return [scored.to_dict() for scored in ranked]


def rectify_image(arguments, detector: RectangleDetector, backend: Backend) -> bytes:
    _require_backend(backend)
    image = _require_image(arguments)

    raw_corners = arguments.get("corners")
    if raw_corners is None:
        raise MethodCallError(INVALID_ARGUMENT, "corners is required")
    try:
        corners = Corners.from_dict(raw_corners, Size.of(image))
    except ValueError as e:
        raise MethodCallError(INVALID_ARGUMENT, str(e)) from e

    try:
        rectified = rectify(image, corners)
    except DegenerateGeometry as e:
        raise MethodCallError(DEGENERATE_GEOMETRY, str(e)) from e

    return encode_image(rectified, ".png")


METHODS = {
    "getPlatformVersion": get_platform_version,
    "detectRectangle": detect_rectangle,
    "detectAllRectangles": detect_all_rectangles,
    "rectifyImage": rectify_image,
}


def handle_method_call(method: str, arguments: Optional[Dict[str, Any]], detector: RectangleDetector, backend: Backend):
    """
    Run a named method call.

    Args:
        method: Method name, e.g. "detectRectangle"
        arguments: Method arguments ("imageData" bytes, "corners" dict, ...)
        detector: Detector to run
        backend: Backend gate checked before any image work

    Returns:
        Marshalled result (dict, list, str, bytes or None)

    Raises:
        MethodCallError: with one of the codes above
    """
    handler = METHODS.get(method)
    if handler is None:
        raise MethodCallError(NOT_IMPLEMENTED, f"Method not implemented: {method}")

    logger.debug("Method call %s", method)
    return handler(arguments or {}, detector, backend)
