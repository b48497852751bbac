"""
Configuration management using Pydantic for validation and type checking.
"""

import os
import yaml
from pathlib import Path
from typing import Optional, Tuple
from pydantic import BaseModel, Field, field_validator, model_validator


class CameraConfig(BaseModel):
    """Camera capture configuration."""
    device: str = Field(default="/dev/video0", description="Video device path or file")
    width: int = Field(default=320, ge=160, le=3840, description="Capture width")
    height: int = Field(default=240, ge=120, le=2160, description="Capture height")
    fps: int = Field(default=30, ge=1, le=60, description="Capture FPS")
    reconnect_interval: float = Field(
        default=5.0, ge=0.0, description="Seconds to wait before reopening a lost camera"
    )


class PipelineConfig(BaseModel):
    """Contour detection pipeline configuration."""
    blur_radius: float = Field(default=0.0, ge=0.0, description="Box blur radius, 0 disables")
    hsv_hue: Tuple[float, float] = Field(default=(20.0, 40.0), description="Hue range (0-180)")
    hsv_saturation: Tuple[float, float] = Field(default=(100.0, 255.0), description="Saturation range")
    hsv_value: Tuple[float, float] = Field(default=(100.0, 255.0), description="Value range")
    min_area: float = Field(default=100.0, ge=0.0, description="Minimum contour area")
    min_perimeter: float = Field(default=0.0, ge=0.0, description="Minimum contour perimeter")
    min_width: float = Field(default=0.0, ge=0.0, description="Minimum bounding width")
    max_width: float = Field(default=1000.0, ge=0.0, description="Maximum bounding width")
    min_height: float = Field(default=0.0, ge=0.0, description="Minimum bounding height")
    max_height: float = Field(default=1000.0, ge=0.0, description="Maximum bounding height")
    solidity: Tuple[float, float] = Field(default=(0.0, 100.0), description="Solidity range in percent")

    @field_validator("hsv_hue", "hsv_saturation", "hsv_value", "solidity")
    @classmethod
    def validate_range(cls, v: Tuple[float, float]) -> Tuple[float, float]:
        """Validate that a (low, high) range is ordered."""
        low, high = v
        if low > high:
            raise ValueError(f"Invalid range {v}: low must not exceed high")
        return v


class AnnotationConfig(BaseModel):
    """Rectangle annotation configuration."""
    color: Tuple[int, int, int] = Field(default=(255, 0, 255), description="Rectangle color (BGR)")
    thickness: int = Field(default=4, ge=1, le=32, description="Rectangle border thickness")

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: Tuple[int, int, int]) -> Tuple[int, int, int]:
        """Validate color channels."""
        if any(c < 0 or c > 255 for c in v):
            raise ValueError("Color channels must be within 0-255")
        return v


class StreamConfig(BaseModel):
    """Streaming server configuration."""
    host: str = Field(default="0.0.0.0", description="Server bind address")
    port: int = Field(default=1181, ge=1024, le=65535, description="Server port")
    jpeg_quality: int = Field(
        default=80, ge=1, le=100, description="JPEG compression quality"
    )


class TelemetryConfig(BaseModel):
    """Telemetry store configuration."""
    host: str = Field(default="localhost", description="Redis host")
    port: int = Field(default=6379, ge=1, le=65535, description="Redis port")
    db: int = Field(default=0, ge=0, description="Redis database index")
    key: str = Field(default="BallPosition", min_length=1, description="Key the position is written to")
    socket_timeout: float = Field(default=0.5, gt=0.0, description="Socket timeout in seconds")


class VisionConfig(BaseModel):
    """Vision thread configuration."""
    restart_on_failure: bool = Field(
        default=False, description="Restart the vision loop after a pipeline failure"
    )
    restart_delay: float = Field(
        default=1.0, ge=0.0, description="Seconds to wait before restarting the loop"
    )
    grab_retry_delay: float = Field(
        default=0.1, ge=0.0, description="Seconds to wait after a failed pipeline frame grab"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(default="INFO", description="Logging level")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate logging level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Invalid logging level. Must be one of {valid_levels}")
        return v


class Config(BaseModel):
    """Main configuration class."""
    camera: CameraConfig = Field(default_factory=CameraConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    annotation: AnnotationConfig = Field(default_factory=AnnotationConfig)
    stream: StreamConfig = Field(default_factory=StreamConfig)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)
    vision: VisionConfig = Field(default_factory=VisionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def check_pipeline_bounds(self) -> "Config":
        if self.pipeline.min_width > self.pipeline.max_width:
            raise ValueError("pipeline.min_width must not exceed pipeline.max_width")
        if self.pipeline.min_height > self.pipeline.max_height:
            raise ValueError("pipeline.min_height must not exceed pipeline.max_height")
        return self


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from YAML file with sensible defaults.

    Args:
        config_path: Path to configuration file. If None, uses default location.

    Returns:
        Config object with loaded settings.
    """
    if config_path is None:
        config_path = "/etc/ball-vision/config.yaml"

    # If config file doesn't exist, use defaults
    if not os.path.exists(config_path):
        return Config()

    try:
        with open(config_path, 'r') as f:
            config_dict = yaml.safe_load(f)

        # Handle empty file
        if config_dict is None:
            return Config()

        return Config(**config_dict)
    except Exception as e:
        raise RuntimeError(f"Failed to load configuration from {config_path}: {e}")


def save_example_config(output_path: str) -> None:
    """
    Save an example configuration file with comments.

    Args:
        output_path: Where to save the example config.
    """
    example_yaml = """# Camera settings
camera:
  device: "/dev/video0"  # V4L2 device path or video file
  width: 320             # Capture width in pixels
  height: 240            # Capture height in pixels
  fps: 30                # Frames per second
  reconnect_interval: 5.0 # Seconds to wait before reopening a lost camera

# Contour pipeline settings
pipeline:
  blur_radius: 0.0                 # Box blur radius, 0 disables blurring
  hsv_hue: [20.0, 40.0]            # Hue range (OpenCV scale 0-180)
  hsv_saturation: [100.0, 255.0]   # Saturation range
  hsv_value: [100.0, 255.0]        # Value range
  min_area: 100.0                  # Drop contours smaller than this
  min_perimeter: 0.0
  min_width: 0.0
  max_width: 1000.0
  min_height: 0.0
  max_height: 1000.0
  solidity: [0.0, 100.0]           # Solidity range in percent

# Rectangle drawn on the output stream
annotation:
  color: [255, 0, 255]  # BGR
  thickness: 4

# Streaming settings
stream:
  host: "0.0.0.0"      # Bind to all interfaces
  port: 1181           # HTTP server port
  jpeg_quality: 80     # JPEG compression quality (1-100)

# Telemetry store (Redis)
telemetry:
  host: "localhost"
  port: 6379
  db: 0
  key: "BallPosition"  # Overwritten with the latest rectangle
  socket_timeout: 0.5

# Vision thread
vision:
  restart_on_failure: false  # Restart the loop after a pipeline error
  restart_delay: 1.0
  grab_retry_delay: 0.1      # Wait after a failed pipeline frame grab

# Logging
logging:
  level: "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
"""

    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w') as f:
        f.write(example_yaml)
