"""N-dimensional numeric streams for signal processing pipelines.

A Stream holds a flat input and output buffer shaped by an append-only list
of dimensions. Streams combine elementwise, crop to a region of interest, and
compose into trees that a Pipeline runs stage by stage.
"""

from . import errors
from .config import StreamConfig, default_config, load_config
from .core import (
    Stream,
    Region,
    StartTime,
    Stage,
    FunctionStage,
    combine,
    multiply,
    add,
    crop,
    Pipeline,
    FrameResult,
)
from .errors import (
    StreamError,
    AllocationError,
    InvalidShapeError,
    BoundsError,
    BufferBindError,
    StreamClosedError,
    ConfigError,
)
from .sources import StreamSource, SyntheticStreamSource, ObsPyStreamSource
from .utils import configure_logging, print_stream_info, print_pipeline_stats

__version__ = "0.1.0"

__all__ = [
    "errors",
    "StreamConfig",
    "default_config",
    "load_config",
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
    "StreamError",
    "AllocationError",
    "InvalidShapeError",
    "BoundsError",
    "BufferBindError",
    "StreamClosedError",
    "ConfigError",
    "StreamSource",
    "SyntheticStreamSource",
    "ObsPyStreamSource",
    "configure_logging",
    "print_stream_info",
    "print_pipeline_stats",
]
