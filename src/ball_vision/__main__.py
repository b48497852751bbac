"""
Main entry point for the Ball Vision service.
"""

import sys
import time
import signal
import logging
import argparse

from . import __version__
from .config import load_config
from .capture import VideoCapture
from .pipeline import ContourPipeline
from .streamer import MJPEGStreamer
from .telemetry import RedisTelemetryStore, TelemetryPublisher
from .vision import VisionApplication


# Global shutdown flag
shutdown_flag = False


def signal_handler(signum, frame):
    """Handle shutdown signals."""
    global shutdown_flag
    logger.info(f"Received signal {signum}, shutting down...")
    shutdown_flag = True


def setup_logging(level: str = "INFO"):
    """
    Setup logging configuration.

    Args:
        level: Logging level
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


# Module-level logger (initialized after setup_logging is called)
logger = logging.getLogger(__name__)


def main(argv=None):
    """Wire the components together and idle until a shutdown signal."""
    global logger, shutdown_flag

    parser = argparse.ArgumentParser(description='Ball Vision Service')
    parser.add_argument(
        '-c', '--config',
        default='/etc/ball-vision/config.yaml',
        help='Path to configuration file'
    )
    parser.add_argument(
        '-d', '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except RuntimeError as e:
        print(f"ERROR: Failed to load configuration: {e}", file=sys.stderr)
        return 1

    log_level = "DEBUG" if args.debug else config.logging.level
    setup_logging(log_level)
    logger = logging.getLogger(__name__)

    logger.info("=" * 70)
    logger.info(f"Ball Vision v{__version__}")
    logger.info("=" * 70)

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    video_capture = None
    streamer = None
    store = None

    try:
        logger.info("Initializing video capture...")
        video_capture = VideoCapture(config.camera)
        if not video_capture.open():
            logger.error("Failed to open camera initially, will retry...")

        logger.info("Initializing MJPEG streamer...")
        streamer = MJPEGStreamer(config.stream)
        streamer.start()

        logger.info(
            f"Publishing telemetry to redis://{config.telemetry.host}:"
            f"{config.telemetry.port}/{config.telemetry.db} key '{config.telemetry.key}'"
        )
        store = RedisTelemetryStore(config.telemetry)
        telemetry = TelemetryPublisher(store, config.telemetry.key)

        app = VisionApplication(
            video_capture,
            streamer,
            telemetry,
            ContourPipeline(config.pipeline),
            rectangle_color=config.annotation.color,
            rectangle_thickness=config.annotation.thickness,
            restart_on_failure=config.vision.restart_on_failure,
            restart_delay=config.vision.restart_delay,
            grab_retry_delay=config.vision.grab_retry_delay,
        )
        app.start()

        logger.info(f"Stream available at http://<your-ip>:{config.stream.port}/")

        # The vision thread is a daemon, the main thread keeps the process alive
        while not shutdown_flag:
            time.sleep(0.5)

    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1

    finally:
        logger.info("Cleaning up...")

        if video_capture is not None:
            video_capture.release()

        if streamer is not None:
            streamer.stop()

        if store is not None:
            store.close()

        logger.info("Shutdown complete")

    return 0


if __name__ == '__main__':
    sys.exit(main())
