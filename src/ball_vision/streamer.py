"""
Flask-based MJPEG streaming server for the annotated camera feed.
"""

import cv2
import time
import logging
import threading
import numpy as np
from typing import Optional
from flask import Flask, Response, jsonify
from .config import StreamConfig


logger = logging.getLogger(__name__)


class MJPEGStreamer:
    """
    Output video sink serving the latest frame as an MJPEG stream.
    """

    def __init__(self, config: StreamConfig):
        """
        Initialize MJPEG streamer.

        Args:
            config: Stream configuration
        """
        self.config = config
        self.app = Flask(__name__)
        self.app.logger.setLevel(logging.WARNING)

        # HTTP handlers read the frame from other threads
        self.current_frame: Optional[np.ndarray] = None
        self.frame_lock = threading.Lock()
        self.total_frames = 0
        self.start_time = time.time()

        self._setup_routes()

        self.server_thread: Optional[threading.Thread] = None
        self.is_running = False

    def _setup_routes(self):
        """Setup Flask routes."""

        @self.app.route('/')
        def index():
            """Serve a minimal viewer page."""
            return """
            <!DOCTYPE html>
            <html>
            <head><title>Ball Vision</title></head>
            <body>
                <h1>Ball Vision</h1>
                <img src="/stream" style="max-width: 100%;">
            </body>
            </html>
            """

        @self.app.route('/stream')
        def stream():
            """MJPEG stream endpoint."""
            return Response(
                self._generate_frames(),
                mimetype='multipart/x-mixed-replace; boundary=frame'
            )

        @self.app.route('/health')
        def health():
            """Health check endpoint."""
            with self.frame_lock:
                return jsonify({
                    'status': 'running',
                    'uptime': int(time.time() - self.start_time),
                    'total_frames': self.total_frames
                })

    def encode_frame(self) -> Optional[bytes]:
        """
        Encode the current frame as JPEG.

        Returns:
            JPEG bytes, or None if no frame has been put yet
        """
        with self.frame_lock:
            if self.current_frame is None:
                return None
            ret, buffer = cv2.imencode(
                '.jpg',
                self.current_frame,
                [cv2.IMWRITE_JPEG_QUALITY, self.config.jpeg_quality]
            )
        if not ret:
            return None
        return buffer.tobytes()

    def _generate_frames(self):
        """
        Generator for MJPEG frames.

        Yields:
            MJPEG frame data
        """
        while True:
            frame_bytes = self.encode_frame()
            if frame_bytes is not None:
                yield (b'--frame\r\n'
                       b'Content-Type: image/jpeg\r\n\r\n' + frame_bytes + b'\r\n')

            # Small delay to prevent busy waiting
            time.sleep(0.01)

    def put_frame(self, frame: np.ndarray):
        """
        Publish a frame to stream clients.

        The frame is copied, so the caller may keep drawing into its buffer.

        Args:
            frame: New frame (BGR format)
        """
        with self.frame_lock:
            self.current_frame = frame.copy()
            self.total_frames += 1

    def start(self):
        """Start the streaming server in a separate thread."""
        if self.is_running:
            logger.warning("Streamer already running")
            return

        logger.info(f"Starting MJPEG server on {self.config.host}:{self.config.port}")

        def run_server():
            self.app.run(
                host=self.config.host,
                port=self.config.port,
                threaded=True,
                debug=False,
                use_reloader=False
            )

        self.server_thread = threading.Thread(target=run_server, daemon=True)
        self.server_thread.start()
        self.is_running = True

        logger.info("MJPEG server started")

    def stop(self):
        """Stop the streaming server."""
        self.is_running = False
        logger.info("MJPEG server stopped")
