"""
Contour detection pipeline and the runner that feeds it camera frames.
"""

import cv2
import time
import logging
import threading
import numpy as np
from typing import Callable, List, Optional
from .config import PipelineConfig


logger = logging.getLogger(__name__)


class DetectionPipeline:
    """Interface for a pipeline that finds candidate regions in a frame."""

    def process(self, frame: np.ndarray) -> None:
        """Run the pipeline on a BGR frame, replacing the previous output."""
        raise NotImplementedError

    @property
    def filter_contours_output(self) -> List[np.ndarray]:
        """Contours that survived filtering, in detection order."""
        raise NotImplementedError


class ContourPipeline(DetectionPipeline):
    """Blur, HSV threshold, find contours, filter contours."""

    def __init__(self, config: PipelineConfig):
        self.config = config
        self.hsv_threshold_output: Optional[np.ndarray] = None
        self.find_contours_output: List[np.ndarray] = []
        self._filter_contours_output: List[np.ndarray] = []

    @property
    def filter_contours_output(self) -> List[np.ndarray]:
        return self._filter_contours_output

    def process(self, frame: np.ndarray) -> None:
        blurred = self._blur(frame)
        self.hsv_threshold_output = self._hsv_threshold(blurred)
        self.find_contours_output = self._find_contours(self.hsv_threshold_output)
        self._filter_contours_output = self._filter_contours(self.find_contours_output)

    def _blur(self, frame: np.ndarray) -> np.ndarray:
        radius = self.config.blur_radius
        if radius <= 0:
            return frame
        ksize = int(2 * round(radius) + 1)
        return cv2.blur(frame, (ksize, ksize))

    def _hsv_threshold(self, frame: np.ndarray) -> np.ndarray:
        hsv = cv2.cvtColor(frame, cv2.COLOR_BGR2HSV)
        lower = (self.config.hsv_hue[0], self.config.hsv_saturation[0], self.config.hsv_value[0])
        upper = (self.config.hsv_hue[1], self.config.hsv_saturation[1], self.config.hsv_value[1])
        return cv2.inRange(hsv, lower, upper)

    def _find_contours(self, mask: np.ndarray) -> List[np.ndarray]:
        contours, _ = cv2.findContours(mask, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
        return list(contours)

    def _filter_contours(self, contours: List[np.ndarray]) -> List[np.ndarray]:
        """Keep contours within the configured size and solidity bounds, preserving order."""
        cfg = self.config
        output = []
        for contour in contours:
            _, _, w, h = cv2.boundingRect(contour)
            if w < cfg.min_width or w > cfg.max_width:
                continue
            if h < cfg.min_height or h > cfg.max_height:
                continue
            area = cv2.contourArea(contour)
            if area < cfg.min_area:
                continue
            if cv2.arcLength(contour, True) < cfg.min_perimeter:
                continue
            hull_area = cv2.contourArea(cv2.convexHull(contour))
            solid = 100 * area / hull_area if hull_area > 0 else 0.0
            if solid < cfg.solidity[0] or solid > cfg.solidity[1]:
                continue
            output.append(contour)
        return output


class VisionRunner:
    """
    Grabs frames from a frame source, runs the pipeline on them and hands
    the pipeline to a listener after each run.
    """

    def __init__(self, frame_source, pipeline: DetectionPipeline,
                 listener: Callable[[DetectionPipeline], None],
                 grab_retry_delay: float = 0.1):
        """
        Args:
            frame_source: Object with grab_frame(buffer) and get_error()
            pipeline: Pipeline to run on each frame
            listener: Called with the pipeline after every successful run
            grab_retry_delay: Seconds to wait after a failed grab
        """
        self.frame_source = frame_source
        self.pipeline = pipeline
        self.listener = listener
        self.grab_retry_delay = grab_retry_delay
        self.frame = frame_source.allocate_frame()
        self.enabled = True

    def run_once(self) -> None:
        """Run the pipeline a single time on the next available frame."""
        if not self.frame_source.grab_frame(self.frame):
            logger.warning(f"Pipeline frame grab failed: {self.frame_source.get_error()}")
            time.sleep(self.grab_retry_delay)
            return

        self.pipeline.process(self.frame)
        self.listener(self.pipeline)

    def run_forever(self) -> None:
        """Run the pipeline until stop() is called."""
        while self.enabled:
            self.run_once()

    def stop(self) -> None:
        """Stop run_forever after the current cycle."""
        self.enabled = False


class VisionThread(threading.Thread):
    """
    Thread running a VisionRunner loop.

    An exception escaping the pipeline ends the thread unless
    restart_on_failure is set, in which case it is logged and the loop
    resumes after restart_delay seconds.
    """

    def __init__(self, frame_source, pipeline: DetectionPipeline,
                 listener: Callable[[DetectionPipeline], None],
                 restart_on_failure: bool = False, restart_delay: float = 1.0,
                 grab_retry_delay: float = 0.1):
        super().__init__(name="VisionThread")
        self.runner = VisionRunner(frame_source, pipeline, listener,
                                   grab_retry_delay=grab_retry_delay)
        self.restart_on_failure = restart_on_failure
        self.restart_delay = restart_delay
        self.restart_count = 0

    def run(self) -> None:
        if not self.restart_on_failure:
            self.runner.run_forever()
            return

        while self.runner.enabled:
            try:
                self.runner.run_forever()
            except Exception:
                self.restart_count += 1
                logger.exception(
                    f"Vision loop failed, restarting in {self.restart_delay:.1f}s "
                    f"(restart #{self.restart_count})"
                )
                time.sleep(self.restart_delay)

    def stop(self) -> None:
        self.runner.stop()
