import signal

from turret_vision import cli
from turret_vision.core import container
from turret_vision.core.exceptions import CaptureDeviceException
from turret_vision.vision.detector import MotionDetector

from .conftest import ScriptedCapture, blank_frame


def test_parser_defaults():
    args = cli.build_parser().parse_args(["detect"])
    assert args.device == 0
    assert args.area == 7000.0
    assert args.mirror is True


def test_parser_flags():
    args = cli.build_parser().parse_args(["detect", "--device", "2", "--area", "500", "--no-mirror"])
    assert (args.device, args.area, args.mirror) == (2, 500.0, False)


def test_detect_runs_until_source_ends(monkeypatch):
    capture = ScriptedCapture([blank_frame()] * 3)
    built = {}
    installed = []

    def fake_build_detector(streamer=None, device_id=None, min_area=None, **overrides):
        built.update(device_id=device_id, min_area=min_area, **overrides)
        return MotionDetector(device_id, min_area, streamer=streamer,
                              capture_factory=lambda _: capture)

    monkeypatch.setattr(container, "build_detector", fake_build_detector)
    monkeypatch.setattr(signal, "signal", lambda signum, handler: installed.append(signum))

    assert cli.main(["detect", "--area", "250", "--no-mirror"]) == 0
    assert built == {"device_id": 0, "min_area": 250.0, "mirror": False}
    assert set(installed) == {signal.SIGINT, signal.SIGTERM}
    assert capture.release_calls == 1


def test_detect_reports_unopenable_device(monkeypatch):
    def fake_build_detector(**kwargs):
        raise CaptureDeviceException(kwargs["device_id"])

    monkeypatch.setattr(container, "build_detector", fake_build_detector)

    assert cli.main(["detect", "--device", "9"]) == 1


def test_parser_log_level():
    parser = cli.build_parser()
    assert parser.parse_args(["detect"]).log_level is None
    assert parser.parse_args(["--log-level", "DEBUG", "serve"]).log_level == "DEBUG"
