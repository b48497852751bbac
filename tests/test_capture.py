import cv2
import numpy as np

from ball_vision.capture import VideoCapture
from ball_vision.config import CameraConfig


class FakeCap:
    """Stands in for cv2.VideoCapture."""

    def __init__(self, frames):
        self.frames = list(frames)
        self.released = False

    def read(self, image=None):
        frame = self.frames.pop(0) if self.frames else None
        if frame is None:
            return False, None
        if image is not None and image.shape == frame.shape:
            image[...] = frame
            return True, image
        return True, frame

    def release(self):
        self.released = True


def make_capture(frames):
    capture = VideoCapture(CameraConfig(width=160, height=120))
    capture.cap = FakeCap(frames)
    capture.is_opened = True
    return capture


def test_allocate_frame_matches_config():
    capture = VideoCapture(CameraConfig(width=160, height=120))

    frame = capture.allocate_frame()

    assert frame.shape == (120, 160, 3)
    assert frame.dtype == np.uint8


def test_grab_frame_writes_in_place():
    capture = make_capture([np.full((120, 160, 3), 7, dtype=np.uint8)])
    buffer = capture.allocate_frame()

    assert capture.grab_frame(buffer)
    assert buffer[0, 0, 0] == 7
    assert capture.frame_count == 1
    assert capture.get_error() == ""


def test_grab_frame_resizes_mismatched_frame():
    capture = make_capture([np.full((240, 320, 3), 9, dtype=np.uint8)])
    buffer = capture.allocate_frame()

    assert capture.grab_frame(buffer)
    assert buffer.shape == (120, 160, 3)
    assert buffer[60, 80, 0] == 9


def test_grab_frame_failure_sets_error():
    capture = make_capture([None])
    buffer = capture.allocate_frame()

    assert not capture.grab_frame(buffer)
    assert "no frame available" in capture.get_error()
    assert capture.frame_count == 0
    assert not capture.is_opened


def test_grab_frame_when_closed_waits_and_retries(monkeypatch):
    sleeps = []
    monkeypatch.setattr("ball_vision.capture.time.sleep", sleeps.append)
    capture = VideoCapture(CameraConfig(reconnect_interval=2.5))
    monkeypatch.setattr(capture, "open", lambda: False)

    assert not capture.grab_frame(capture.allocate_frame())
    assert capture.get_error() == "camera not opened"
    assert sleeps == [2.5]


def test_grab_frame_reconnects_lost_camera(monkeypatch):
    monkeypatch.setattr("ball_vision.capture.time.sleep", lambda s: None)
    capture = make_capture([None])
    lost_cap = capture.cap
    buffer = capture.allocate_frame()

    def reopen():
        capture.cap = FakeCap([np.full((120, 160, 3), 5, dtype=np.uint8)])
        capture.is_opened = True
        return True

    monkeypatch.setattr(capture, "open", reopen)

    assert not capture.grab_frame(buffer)
    assert capture.grab_frame(buffer)
    assert lost_cap.released
    assert buffer[0, 0, 0] == 5
    assert capture.is_opened


def test_reconnect_releases_then_reopens(monkeypatch):
    sleeps = []
    monkeypatch.setattr("ball_vision.capture.time.sleep", sleeps.append)
    capture = make_capture([])
    old_cap = capture.cap
    monkeypatch.setattr(capture, "open", lambda: True)

    assert capture.reconnect(retry_interval=0.5)
    assert old_cap.released
    assert sleeps == [0.5]


def test_grab_frame_opencv_error():
    capture = make_capture([])

    def broken_read(image=None):
        raise cv2.error("device lost")

    capture.cap.read = broken_read

    assert not capture.grab_frame(capture.allocate_frame())
    assert "device lost" in capture.get_error()


def test_release():
    capture = make_capture([])
    cap = capture.cap

    capture.release()

    assert cap.released
    assert not capture.is_opened
    assert capture.cap is None
