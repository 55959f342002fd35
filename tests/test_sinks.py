import cv2
import numpy as np

from turret_vision.schemas.motion import MotionRegion
from turret_vision.vision.sinks import MotionLog, NullStreamer, WindowStreamer

from .conftest import RecordingHandler


def test_motion_log_records_and_forwards():
    downstream = RecordingHandler()
    log = MotionLog(downstream)
    region = MotionRegion(x=1, y=2, width=3, height=4)

    assert log.snapshot()["last_region"] is None

    log(region)

    assert downstream.regions == [region]
    assert log.last_region == region
    assert log.detections == 1
    snapshot = log.snapshot()
    assert snapshot["last_region"] == {"x": 1, "y": 2, "width": 3, "height": 4}
    assert snapshot["last_seen"] is not None


def test_null_streamer_accepts_images():
    streamer = NullStreamer()
    img = np.zeros((10, 10), dtype=np.uint8)
    streamer.stream_frame(img)
    streamer.stream_delta(img)
    streamer.stream_thresh(img)


def test_window_streamer(monkeypatch):
    shown, destroyed, pumped = [], [], []
    monkeypatch.setattr(cv2, "namedWindow", lambda name, flags: None)
    monkeypatch.setattr(cv2, "resizeWindow", lambda name, w, h: None)
    monkeypatch.setattr(cv2, "imshow", lambda name, img: shown.append(name))
    monkeypatch.setattr(cv2, "waitKey", lambda delay: pumped.append(delay))
    monkeypatch.setattr(cv2, "destroyWindow", lambda name: destroyed.append(name))

    streamer = WindowStreamer(320, 240)
    img = np.zeros((10, 10), dtype=np.uint8)
    for _ in range(2):
        streamer.stream_frame(img)
        streamer.stream_delta(img)
        streamer.stream_thresh(img)
    streamer.close()

    assert shown == ["frame", "delta", "threshold"] * 2
    assert pumped == [1, 1]
    assert sorted(destroyed) == ["delta", "frame", "threshold"]
