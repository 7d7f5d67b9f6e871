import cv2
import numpy as np

from rectangle_detection.errors import InvalidImage


def decode_image(data: bytes) -> np.ndarray:
    """
    Decode an encoded image (PNG, JPEG, ...) into a BGR(A) array.

    Raises:
        InvalidImage: data is empty or not a decodable image
    """
    if not data:
        raise InvalidImage("Image data is empty")

    buffer = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED)
    if image is None or image.size == 0:
        raise InvalidImage("Failed to decode image")

    return image


def encode_image(image: np.ndarray, ext: str = ".png") -> bytes:
    ok, buffer = cv2.imencode(ext, image)
    if not ok:
        raise ValueError(f"Failed to encode image as {ext}")
    return buffer.tobytes()
