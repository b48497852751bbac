"""
Ball Vision

Finds a colored object in a live camera feed, draws a rectangle around it on
an MJPEG stream and publishes its position to a Redis telemetry key.
"""

__version__ = "1.0.0"
__license__ = "MIT"
