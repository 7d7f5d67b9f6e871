import io
import json
import logging
import os
from typing import Optional

from flask import Flask, Response, jsonify, request, send_file
from flask_cors import CORS
from flasgger import Swagger, swag_from

from rectangle_detection.backend import Backend
from rectangle_detection.detector import RectangleDetector

from .dispatch import INVALID_ARGUMENT, MethodCallError, handle_method_call

logger = logging.getLogger(__name__)

SWAGGER_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "swagger")

MEGABYTE = (2 ** 10) ** 2

swagger_config = {
    "headers": [],
    "specs_route": "/docs/",
    "static_url_path": "/flasgger_static",
    "specs": [
        {
            "endpoint": 'apispec_1',
            "route": '/docs-json',
            "rule_filter": lambda rule: True,  # all in
            "model_filter": lambda tag: True,  # all in
        }
    ],
}


def _swagger(name: str):
    return swag_from(os.path.join(SWAGGER_DIR, name))


def _image_bytes() -> Optional[bytes]:
    file = request.files.get('file') or request.files.get('imageData')
    if file is not None:
        return file.read()
    data = request.get_data()
    return data or None


def _arguments() -> dict:
    """Collect method call arguments from a multipart (or raw body) request."""
    arguments = {"imageData": _image_bytes()}

    raw_corners = request.form.get('corners') or request.args.get('corners')
    if raw_corners:
        try:
            arguments["corners"] = json.loads(raw_corners)
        except ValueError as e:
            raise MethodCallError(INVALID_ARGUMENT, f"corners is not valid JSON: {e}") from e

    fallback = request.form.get('fullImageFallback') or request.args.get('fullImageFallback', default="false")
    arguments["fullImageFallback"] = str(fallback).lower() == "true"
    return arguments


def create_app(detector: Optional[RectangleDetector] = None, backend: Optional[Backend] = None) -> Flask:
    """
    Build the Flask application.

    Args:
        detector: Detector to serve (defaults to RectangleDetector.from_env())
        backend: Backend gate; when not given a new one is created and
            initialized on a background thread

    Returns:
        Flask app
    """
    app = Flask(__name__)

    # Enable CORS for all routes
    CORS(app)

    app.config['MAX_CONTENT_LENGTH'] = int(os.getenv("MAX_IMAGE_MB", 50)) * MEGABYTE

    Swagger(app, config=swagger_config, merge=True)

    if detector is None:
        detector = RectangleDetector.from_env()

    if backend is None:
        backend = Backend()

        def on_initialized(success: bool):
            if success:
                logger.info("OpenCV initialization completed successfully")
            else:
                logger.error("OpenCV initialization failed")

        backend.initialize(on_initialized, background=True)

    app.extensions['rectangle_detector'] = detector
    app.extensions['rectangle_backend'] = backend

    def call(method: str, arguments: dict):
        return handle_method_call(method, arguments, detector, backend)

    @app.errorhandler(MethodCallError)
    def method_call_error(e: MethodCallError):
        return jsonify(e.to_dict()), e.status

    @app.route('/is-available', methods=['GET'])
    @_swagger("is-available.yml")
    def is_available():
        return jsonify(isAvailable=backend.is_ready(), state=backend.state.value), 200

    @app.route('/platform-version', methods=['GET'])
    @_swagger("platform-version.yml")
    def platform_version():
        return jsonify(version=call("getPlatformVersion", {})), 200

    @app.route('/detect-rectangle', methods=['POST'])
    @_swagger("detect-rectangle.yml")
    def detect_rectangle():
        return jsonify(call("detectRectangle", _arguments())), 200

    @app.route('/detect-all-rectangles', methods=['POST'])
    @_swagger("detect-all-rectangles.yml")
    def detect_all_rectangles():
        return jsonify(call("detectAllRectangles", _arguments())), 200

    @app.route('/rectify', methods=['POST'])
    @_swagger("rectify.yml")
    def rectify():
        png = call("rectifyImage", _arguments())
        return send_file(io.BytesIO(png), mimetype='image/png', download_name='rectified.png')

    @app.route('/method/<name>', methods=['POST'])
    @_swagger("method.yml")
    def method(name: str):
        result = call(name, _arguments())
        if isinstance(result, bytes):
            return Response(result, mimetype='image/png')
        return jsonify(result), 200

    return app
