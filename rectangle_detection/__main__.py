#!/usr/bin/env python3
"""
CLI interface for the rectangle detection module.

Usage:
    python -m rectangle_detection -i photo.jpg
    python -m rectangle_detection -i photo.jpg -o overlay.png --rectify crop.png
    python -m rectangle_detection -i photo.jpg --all --json
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path

import cv2
from dotenv import load_dotenv

from common.geometry import Corners, Size
from .backend import Backend
from .detector import RectangleDetector
from .errors import RectangleDetectionError
from .rectify import rectify
from .visualizer import RectangleVisualizer


def parse_args(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description='Detect a document-like rectangle in a photo',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:

  # Print the best rectangle
  python -m rectangle_detection -i photo.jpg

  # Save an overlay and the rectified crop
  python -m rectangle_detection -i photo.jpg -o overlay.png --rectify crop.png

  # All candidates as JSON
  python -m rectangle_detection -i photo.jpg --all --json

Detector parameters can be tuned with RECT_* environment variables (or .env).
        """
    )

    parser.add_argument(
        '-i', '--input',
        required=True,
        help='Input image'
    )

    parser.add_argument(
        '-o', '--output',
        help='Write an overlay with the detected rectangle(s) to this file'
    )

    parser.add_argument(
        '--all',
        action='store_true',
        help='Report all candidates, best first'
    )

    parser.add_argument(
        '--rectify',
        metavar='PATH',
        help='Write the rectified crop of the best rectangle to this file'
    )

    parser.add_argument(
        '--full-image-fallback',
        action='store_true',
        help='Use the whole image when no rectangle is found'
    )

    parser.add_argument(
        '--json',
        action='store_true',
        help='Print results as JSON'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Debug logging'
    )

    return parser.parse_args(argv)


def main(argv=None):
    """Main CLI function"""
    load_dotenv()
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else os.getenv("LOG_LEVEL", "WARNING"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    backend = Backend()
    backend.initialize()
    if not backend.is_ready():
        print(f"❌ Error: OpenCV backend failed to initialize: {backend.error}")
        sys.exit(1)

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"❌ Error: Input file not found: {input_path}")
        sys.exit(1)

    image = cv2.imread(str(input_path), cv2.IMREAD_UNCHANGED)
    if image is None:
        print(f"❌ Error: Failed to load image: {input_path}")
        sys.exit(1)

    detector = RectangleDetector.from_env()
    visualizer = RectangleVisualizer()

    try:
        ranked = detector.detect_all(image)
    except RectangleDetectionError as e:
        print(f"❌ Error during detection: {e}")
        sys.exit(1)

    best = ranked[0] if ranked else None
    corners = best.corners if best else None
    if corners is None and args.full_image_fallback:
        corners = Corners.full_frame(Size.of(image))

    if args.json:
        if args.all:
            payload = [s.to_dict() for s in ranked]
        else:
            payload = corners.to_dict(score=best.score if best else None) if corners else None
        print(json.dumps(payload, indent=2))
    else:
        print(f"📄 {input_path.name}: {image.shape[1]}x{image.shape[0]} px")
        if not ranked:
            print("✗ No rectangle detected")
        shown = ranked if args.all else ranked[:1]
        for i, scored in enumerate(shown, 1):
            c = scored.corners
            print(f"  #{i} score={scored.score:.3f}  TL={c.top_left} TR={c.top_right} "
                  f"BR={c.bottom_right} BL={c.bottom_left}")
        if best is None and corners is not None:
            print("  Using full image")

    if args.output:
        if args.all:
            overlay = visualizer.visualize_all(image, ranked)
        else:
            overlay = visualizer.visualize(image, corners, best.score if best else None)
        cv2.imwrite(args.output, overlay)
        if not args.json:
            print(f"✅ Overlay saved: {args.output}")

    if args.rectify:
        if corners is None:
            print("❌ Error: Nothing to rectify")
            sys.exit(1)
        try:
            cropped = rectify(image, corners)
        except RectangleDetectionError as e:
            print(f"❌ Error during rectification: {e}")
            sys.exit(1)
        cv2.imwrite(args.rectify, cropped)
        if not args.json:
            print(f"✅ Rectified image saved: {args.rectify}")


if __name__ == '__main__':
    main()
