"""
Geometry types shared by the vision loop and the telemetry publisher.
"""

import cv2
import numpy as np
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned rectangle in frame pixel coordinates."""
    x: int
    y: int
    width: int
    height: int

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError(
                f"BoundingBox dimensions must be non-negative, got {self.width}x{self.height}"
            )

    @classmethod
    def from_contour(cls, contour: np.ndarray) -> "BoundingBox":
        """
        Compute the minimal upright rectangle enclosing a contour.

        Args:
            contour: Point set as returned by cv2.findContours, shape (N, 1, 2)

        Returns:
            BoundingBox around every point of the contour
        """
        x, y, w, h = cv2.boundingRect(np.asarray(contour))
        return cls(int(x), int(y), int(w), int(h))

    def tl(self) -> Tuple[int, int]:
        """Top-left corner."""
        return (self.x, self.y)

    def br(self) -> Tuple[int, int]:
        """Bottom-right corner (exclusive)."""
        return (self.x + self.width, self.y + self.height)

    def __str__(self) -> str:
        # Same text form OpenCV uses for cv::Rect
        return f"{{{self.x}, {self.y}, {self.width}x{self.height}}}"
