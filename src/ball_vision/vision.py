"""
Vision application: consumes pipeline output, annotates the output stream
and publishes the detected position.
"""

import cv2
import logging
from typing import Tuple
from .geometry import BoundingBox
from .pipeline import DetectionPipeline, VisionThread
from .telemetry import TelemetryPublisher


logger = logging.getLogger(__name__)


class VisionApplication:
    """
    Draws a rectangle around the first detected object on the output
    stream and publishes its position as telemetry.
    """

    def __init__(self, frame_source, output_stream, telemetry: TelemetryPublisher,
                 pipeline: DetectionPipeline,
                 rectangle_color: Tuple[int, int, int] = (255, 0, 255),
                 rectangle_thickness: int = 4,
                 restart_on_failure: bool = False,
                 restart_delay: float = 1.0,
                 grab_retry_delay: float = 0.1):
        """
        Args:
            frame_source: Object with allocate_frame(), grab_frame(buffer) and get_error()
            output_stream: Video sink with put_frame(frame)
            telemetry: Publisher for the detected position
            pipeline: Detection pipeline run on the vision thread
            rectangle_color: BGR color of the drawn rectangle
            rectangle_thickness: Border thickness of the drawn rectangle
            restart_on_failure: Restart the vision loop after a pipeline error
            restart_delay: Seconds to wait before such a restart
            grab_retry_delay: Seconds to wait after a failed pipeline frame grab
        """
        self.frame_source = frame_source
        self.output_stream = output_stream
        self.telemetry = telemetry
        self.pipeline = pipeline
        self.rectangle_color = rectangle_color
        self.rectangle_thickness = rectangle_thickness
        self.restart_on_failure = restart_on_failure
        self.restart_delay = restart_delay
        self.grab_retry_delay = grab_retry_delay

        # Reused for every annotated frame
        self.frame = frame_source.allocate_frame()
        self.vision_thread = None

    def start(self) -> VisionThread:
        """
        Start the daemon thread that runs the pipeline and listens for its output.

        The thread is never joined. It does not keep the process alive and
        nothing is flushed when the process exits.
        """
        self.vision_thread = VisionThread(
            self.frame_source,
            self.pipeline,
            self._on_pipeline_output,
            restart_on_failure=self.restart_on_failure,
            restart_delay=self.restart_delay,
            grab_retry_delay=self.grab_retry_delay,
        )
        self.vision_thread.daemon = True
        self.vision_thread.start()
        logger.info("Vision thread started")
        return self.vision_thread

    def _on_pipeline_output(self, pipeline: DetectionPipeline) -> None:
        contours = pipeline.filter_contours_output
        if not contours:
            return

        # First contour in pipeline order, no ranking
        rect = BoundingBox.from_contour(contours[0])
        self.draw_rect_on_object(rect)

    def draw_rect_on_object(self, rect: BoundingBox) -> None:
        """
        Grab a fresh frame, draw rect on it, publish rect and send the frame
        to the output stream.

        Args:
            rect: Rectangle around the detected object
        """
        if not self.frame_source.grab_frame(self.frame):
            logger.error(f"error grabbing frame '{self.frame_source.get_error()}'")
            return

        top_left = rect.tl()
        bottom_right = rect.br()
        x, y = top_left
        width = bottom_right[0] - x
        height = bottom_right[1] - y

        # Logged every detected frame, noisy at INFO
        logger.info(f"draw rect at ({x}, {y}) with dimensions ({width:f}, {height:f})")

        self.telemetry.publish(rect)

        cv2.rectangle(self.frame, top_left, bottom_right,
                      self.rectangle_color, self.rectangle_thickness)

        self.output_stream.put_frame(self.frame)
