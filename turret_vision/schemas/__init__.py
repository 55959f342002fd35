from .motion import MotionRegion, PipelineConfig, CycleResult

__all__ = ["MotionRegion", "PipelineConfig", "CycleResult"]
