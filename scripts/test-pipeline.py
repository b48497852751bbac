#!/usr/bin/env python3
"""
Pipeline test utility: run the contour pipeline on an image or a camera
frame and print the rectangle that would be published.
"""

import os
import sys
import argparse
import cv2

# Add src to path for testing before installation
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from ball_vision.capture import VideoCapture
from ball_vision.config import load_config
from ball_vision.geometry import BoundingBox
from ball_vision.pipeline import ContourPipeline


def main():
    parser = argparse.ArgumentParser(description='Run the contour pipeline once')
    parser.add_argument('-c', '--config', default=None, help='Path to configuration file')
    parser.add_argument('-i', '--image', default=None, help='Image to process instead of the camera')
    parser.add_argument('-o', '--output', default='pipeline_result.jpg', help='Annotated output image')
    args = parser.parse_args()

    config = load_config(args.config)

    if args.image:
        frame = cv2.imread(args.image)
        if frame is None:
            print(f"✗ Could not read image: {args.image}")
            return 1
    else:
        capture = VideoCapture(config.camera)
        if not capture.open():
            print(f"✗ Failed to open camera: {capture.get_error()}")
            return 1
        frame = capture.allocate_frame()
        ok = capture.grab_frame(frame)
        capture.release()
        if not ok:
            print(f"✗ Failed to grab frame: {capture.get_error()}")
            return 1

    pipeline = ContourPipeline(config.pipeline)
    pipeline.process(frame)

    print(f"Contours found:    {len(pipeline.find_contours_output)}")
    print(f"Contours kept:     {len(pipeline.filter_contours_output)}")

    if not pipeline.filter_contours_output:
        print("No detection")
        return 0

    box = BoundingBox.from_contour(pipeline.filter_contours_output[0])
    print(f"{config.telemetry.key} = {box}")

    cv2.rectangle(frame, box.tl(), box.br(), config.annotation.color, config.annotation.thickness)
    cv2.imwrite(args.output, frame)
    print(f"✓ Annotated frame saved to: {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
