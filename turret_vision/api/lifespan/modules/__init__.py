"""Concrete component implementations."""
from .detector import DetectorComponent

__all__ = ["DetectorComponent"]
