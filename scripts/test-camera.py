#!/usr/bin/env python3
"""
Camera test utility to verify camera connectivity and frame grabbing.
"""

import os
import sys
import cv2

# Add src to path for testing before installation
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from ball_vision.capture import VideoCapture
from ball_vision.config import CameraConfig


def test_camera(device_path="/dev/video0"):
    """
    Test camera connectivity and capture into a reusable buffer.

    Args:
        device_path: Path to video device
    """
    print("=" * 70)
    print("Ball Vision - Camera Test Utility")
    print("=" * 70)
    print()

    print(f"[1/3] Checking if device exists: {device_path}")
    if os.path.exists(device_path):
        print(f"  ✓ Device found: {device_path}")
    else:
        print(f"  ✗ Device not found: {device_path}")
        print("  Available video devices:")
        for i in range(10):
            dev = f"/dev/video{i}"
            if os.path.exists(dev):
                print(f"    - {dev}")
        return False
    print()

    print("[2/3] Opening camera...")
    capture = VideoCapture(CameraConfig(device=device_path))
    if not capture.open():
        print(f"  ✗ Failed to open camera: {capture.get_error()}")
        return False
    print("  ✓ Camera opened successfully")
    print()

    print("[3/3] Grabbing test frames into one buffer...")
    frame = capture.allocate_frame()
    for i in range(5):
        if not capture.grab_frame(frame):
            print(f"  ✗ Grab {i + 1} failed: {capture.get_error()}")
            capture.release()
            return False
    print(f"  ✓ {capture.frame_count} frames grabbed, shape {frame.shape}")

    output_path = "test_frame.jpg"
    cv2.imwrite(output_path, frame)
    print(f"  ✓ Test frame saved to: {output_path}")
    print()

    capture.release()

    print("✓ All tests passed successfully!")
    return True


if __name__ == "__main__":
    device = "/dev/video0"
    if len(sys.argv) > 1:
        device = sys.argv[1]

    success = test_camera(device)
    sys.exit(0 if success else 1)
