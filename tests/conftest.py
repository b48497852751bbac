import numpy as np
import pytest


class FakeFrameSource:
    """Frame source returning scripted grab results."""

    def __init__(self, results=None, shape=(120, 160, 3), error="timed out"):
        self.results = list(results) if results is not None else []
        self.shape = shape
        self.error = error
        self.grabs = 0

    def allocate_frame(self):
        return np.zeros(self.shape, dtype=np.uint8)

    def grab_frame(self, frame):
        self.grabs += 1
        ok = self.results.pop(0) if self.results else True
        if ok:
            frame[...] = 0
        return ok

    def get_error(self):
        return self.error


class FakePipeline:
    """Pipeline yielding a scripted contour list per process() call."""

    def __init__(self, outputs=None):
        self.outputs = list(outputs) if outputs is not None else []
        self.filter_contours_output = []
        self.calls = 0

    def process(self, frame):
        self.calls += 1
        self.filter_contours_output = self.outputs.pop(0) if self.outputs else []


class FakeSink:
    def __init__(self):
        self.frames = []

    def put_frame(self, frame):
        self.frames.append(frame.copy())


class FakeStore:
    def __init__(self):
        self.values = {}
        self.writes = []

    def set_string(self, key, value):
        self.values[key] = value
        self.writes.append((key, value))


def rect_contour(x1, y1, x2, y2):
    """Contour whose corners are (x1, y1) and (x2, y2), both inclusive."""
    return np.array([[[x1, y1]], [[x2, y1]], [[x2, y2]], [[x1, y2]]], dtype=np.int32)


@pytest.fixture
def frame_source():
    return FakeFrameSource()


@pytest.fixture
def sink():
    return FakeSink()


@pytest.fixture
def store():
    return FakeStore()
