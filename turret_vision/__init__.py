"""Motion detection for a tracking turret."""

__version__ = "1.0.0"
