import time

import numpy as np
import pytest

from turret_vision.api.lifespan.health_registry import get_health_registry
from turret_vision.schemas.motion import PipelineConfig

SIZE = 500


def blank_frame(value=0, size=SIZE):
    return np.full((size, size, 3), value, dtype=np.uint8)


def with_square(frame, x, y, w, h, value=255):
    out = frame.copy()
    out[y:y + h, x:x + w] = value
    return out


class ScriptedCapture:
    """Capture source that replays a fixed list of frames, then fails."""

    def __init__(self, frames):
        self.frames = list(frames)
        self.reads = 0
        self.release_calls = 0

    def read(self, image=None):
        if self.reads >= len(self.frames):
            return False, None
        frame = self.frames[self.reads]
        self.reads += 1
        return True, frame.copy()

    def release(self):
        self.release_calls += 1


class EndlessCapture(ScriptedCapture):
    """Cycles through its frames forever, pacing reads like a camera."""

    def __init__(self, frames, delay=0.002):
        super().__init__(frames)
        self.delay = delay

    def read(self, image=None):
        time.sleep(self.delay)
        frame = self.frames[self.reads % len(self.frames)]
        self.reads += 1
        return True, frame.copy()


class RecordingHandler:
    def __init__(self):
        self.regions = []

    def __call__(self, region):
        self.regions.append(region)


class RecordingStreamer:
    """Keeps every call; ``images`` holds the arrays exactly as passed."""

    def __init__(self):
        self.calls = []
        self.images = []

    def _record(self, kind, img):
        self.calls.append(kind)
        self.images.append(img)

    def stream_frame(self, img):
        self._record("frame", img)

    def stream_delta(self, img):
        self._record("delta", img)

    def stream_thresh(self, img):
        self._record("thresh", img)


@pytest.fixture
def exact_config():
    """No blur, no dilation, no mirroring: regions match drawn shapes exactly."""
    return PipelineConfig(blur_kernel=1, dilation_kernel=1, mirror=False)


@pytest.fixture
def handler():
    return RecordingHandler()


@pytest.fixture
def streamer():
    return RecordingStreamer()


@pytest.fixture(autouse=True)
def clean_health_registry():
    get_health_registry().clear()
    yield
    get_health_registry().clear()
