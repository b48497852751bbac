"""
Camera frame source using OpenCV with V4L2 backend.
"""

import cv2
import time
import logging
import numpy as np
from typing import Optional
from .config import CameraConfig


logger = logging.getLogger(__name__)


class VideoCapture:
    """
    Frame source that grabs camera frames into caller-owned buffers.
    """

    def __init__(self, config: CameraConfig):
        """
        Initialize video capture.

        Args:
            config: Camera configuration
        """
        self.config = config
        self.cap: Optional[cv2.VideoCapture] = None
        self.is_opened = False
        self.frame_count = 0
        self._error = ""

    def open(self) -> bool:
        """
        Open video capture device.

        Returns:
            True if successful, False otherwise
        """
        try:
            logger.info(f"Opening video device: {self.config.device}")

            # Detect if source is a video file or camera device
            is_video_file = self.config.device.endswith(('.mp4', '.avi', '.mkv', '.mov', '.webm'))

            if is_video_file:
                logger.info(f"Detected video file: {self.config.device}")
                self.cap = cv2.VideoCapture(self.config.device)
            else:
                self.cap = cv2.VideoCapture(self.config.device, cv2.CAP_V4L2)

            if not self.cap.isOpened():
                self._error = f"failed to open {self.config.device}"
                logger.error(f"Failed to open {self.config.device}")
                return False

            self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.config.width)
            self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config.height)
            self.cap.set(cv2.CAP_PROP_FPS, self.config.fps)

            actual_width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
            actual_height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
            actual_fps = int(self.cap.get(cv2.CAP_PROP_FPS))

            logger.info(
                f"Camera opened: {actual_width}x{actual_height} @ {actual_fps} FPS"
            )

            self._error = ""
            self.is_opened = True
            return True

        except cv2.error as e:
            self._error = str(e)
            logger.error(f"Error opening camera: {e}")
            self.is_opened = False
            return False

    def allocate_frame(self) -> np.ndarray:
        """
        Allocate a frame buffer sized for the configured resolution.

        Returns:
            Zeroed BGR buffer suitable for grab_frame
        """
        return np.zeros((self.config.height, self.config.width, 3), dtype=np.uint8)

    def grab_frame(self, frame: np.ndarray) -> bool:
        """
        Grab the next frame into an existing buffer.

        The buffer is written in place when the camera's frame has the same
        shape. A frame of a different shape is resized into it. A closed
        camera is reopened first, waiting reconnect_interval seconds.

        Args:
            frame: Destination BGR buffer

        Returns:
            True if a frame was written, False otherwise (see get_error)
        """
        if not self.is_opened or self.cap is None:
            self._error = "camera not opened"
            if not self.reconnect(self.config.reconnect_interval):
                return False

        try:
            ret, image = self.cap.read(frame)
        except cv2.error as e:
            self._error = str(e)
            self.is_opened = False
            return False

        if not ret or image is None or image.size == 0:
            self._error = f"no frame available from {self.config.device}"
            # Reopened on the next grab
            self.is_opened = False
            return False

        if image.shape != frame.shape:
            # Camera ignored the requested resolution
            frame[...] = cv2.resize(image, (frame.shape[1], frame.shape[0]))
        elif not np.shares_memory(image, frame):
            np.copyto(frame, image)

        self.frame_count += 1
        self._error = ""
        return True

    def get_error(self) -> str:
        """Text of the last grab or open failure."""
        return self._error

    def release(self):
        """Release video capture resources."""
        if self.cap is not None:
            logger.info("Releasing video capture")
            self.cap.release()
            self.cap = None
        self.is_opened = False

    def reconnect(self, retry_interval: float = 5.0) -> bool:
        """
        Try to reconnect to camera.

        Args:
            retry_interval: Seconds to wait before reopening

        Returns:
            True if reconnected successfully
        """
        logger.info(f"Attempting to reconnect to {self.config.device}...")

        self.release()

        time.sleep(retry_interval)

        return self.open()

    def __del__(self):
        """Cleanup on deletion."""
        self.release()
