"""
turret_vision/cli.py
Command line entry point.

    turret-vision detect --device 0 --area 7000 --window
    turret-vision serve --port 8001
"""

import argparse
import signal
import sys
from typing import Optional, Sequence

from .core.config import settings
from .core.exceptions import TurretVisionException
from .core.logging import setup_logging, get_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="turret-vision",
        description="Motion detection for a tracking turret",
    )
    parser.add_argument("--log-level", default=None,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="override LOG_LEVEL from the environment")
    sub = parser.add_subparsers(dest="command", required=True)

    detect = sub.add_parser("detect", help="run the detection loop in the foreground")
    detect.add_argument("-d", "--device", type=int, default=settings.CAMERA_DEVICE,
                        help="device ID for the camera")
    detect.add_argument("-a", "--area", type=float, default=settings.MOTION_MIN_AREA,
                        help="base area for motion detection")
    detect.add_argument("-w", "--window", action="store_true", default=settings.STREAM_WINDOWS,
                        help="show frame, delta and threshold windows")
    detect.add_argument("--no-mirror", dest="mirror", action="store_false",
                        default=settings.MIRROR_FRAMES,
                        help="do not flip frames horizontally")

    serve = sub.add_parser("serve", help="run the HTTP service")
    serve.add_argument("--host", default=settings.API_HOST)
    serve.add_argument("--port", type=int, default=settings.API_PORT)

    return parser


def run_detect(args: argparse.Namespace) -> int:
    from .core.container import build_detector, build_streamer

    logger = get_logger("cli")
    streamer = build_streamer(windows=args.window)

    try:
        detector = build_detector(
            streamer=streamer,
            device_id=args.device,
            min_area=args.area,
            mirror=args.mirror,
        )
    except TurretVisionException as e:
        logger.error("detector_start_failed", **e.to_dict())
        return 1

    def _on_signal(signum, frame):
        logger.info("signal_received", signal=signal.Signals(signum).name)
        detector.stop()

    signal.signal(signal.SIGINT, _on_signal)
    signal.signal(signal.SIGTERM, _on_signal)

    try:
        reason = detector.run()
    finally:
        close = getattr(streamer, "close", None)
        if close is not None:
            close()

    logger.info("detector_exited", reason=reason.value)
    return 0


def run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    get_logger("cli").info("starting_server", host=args.host, port=args.port)
    uvicorn.run(
        "turret_vision.api.main:app",
        host=args.host,
        port=args.port,
        log_level=(args.log_level or settings.LOG_LEVEL).lower(),
    )
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level)

    if args.command == "detect":
        return run_detect(args)
    return run_serve(args)


if __name__ == "__main__":
    sys.exit(main())
