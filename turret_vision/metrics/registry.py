"""
turret_vision/metrics/registry.py
Central Prometheus metrics registry for the detector.
"""

from prometheus_client import (
    CollectorRegistry, Counter, Gauge, Histogram, generate_latest
)

# Global registry instance
REGISTRY = CollectorRegistry(auto_describe=True)

# =============================
# Metric definitions
# =============================
FRAMES_PROCESSED = Counter(
    "turret_frames_processed_total",
    "Total number of frames run through the motion pipeline",
    ["device"],
    registry=REGISTRY,
)

MOTION_DETECTIONS = Counter(
    "turret_motion_detections_total",
    "Total number of cycles that produced a motion region",
    ["device"],
    registry=REGISTRY,
)

CYCLE_LATENCY = Histogram(
    "turret_cycle_latency_seconds",
    "Read-to-dispatch latency of one detection cycle (seconds)",
    ["device"],
    buckets=(0.005, 0.01, 0.02, 0.05, 0.1, 0.25, 0.5, 1),
    registry=REGISTRY,
)

DETECTOR_RUNNING = Gauge(
    "turret_detector_running_state",
    "1 while the detection loop is running, else 0",
    ["device"],
    registry=REGISTRY,
)

RELEASE_FAILURES = Counter(
    "turret_release_failures_total",
    "Resources that failed to release on detector shutdown",
    ["resource"],
    registry=REGISTRY,
)

# =============================
# Updater helpers
# =============================

def track_cycle(device: int, latency: float, detected: bool):
    """Record one processed frame and its latency."""
    FRAMES_PROCESSED.labels(device=str(device)).inc()
    CYCLE_LATENCY.labels(device=str(device)).observe(latency)
    if detected:
        MOTION_DETECTIONS.labels(device=str(device)).inc()


def mark_detector_running(device: int, running: bool):
    """Set loop state gauge."""
    DETECTOR_RUNNING.labels(device=str(device)).set(1 if running else 0)


def track_release_failure(resource: str):
    RELEASE_FAILURES.labels(resource=resource).inc()


def render_prometheus_metrics():
    """Return text for Prometheus scrape endpoint."""
    return generate_latest(REGISTRY)
