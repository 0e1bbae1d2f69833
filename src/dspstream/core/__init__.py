"""Core stream container, operators and pipeline runner."""

from .stream import Stream, Region, StartTime
from .stage import Stage, FunctionStage
from .operators import combine, multiply, add, crop
from .pipeline import Pipeline, FrameResult

__all__ = [
    "Stream",
    "Region",
    "StartTime",
    "Stage",
    "FunctionStage",
    "combine",
    "multiply",
    "add",
    "crop",
    "Pipeline",
    "FrameResult",
]
