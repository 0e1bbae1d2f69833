"""
Processing stages bound to a stream.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional


class Stage(ABC):
    """Abstract base class for a pipeline stage.

    A stage is invoked with the stream it is bound to and, during
    per-dimension execution, the index of the dimension being processed.
    """

    @abstractmethod
    def process(self, stream, dimension: Optional[int] = None) -> Any:
        """Process a stream.

        Args:
            stream: Stream the stage is bound to
            dimension: Dimension index during per-dimension execution, else None

        Returns:
            Stage-defined result
        """
        pass


class FunctionStage(Stage):
    """Stage wrapping a plain callable ``func(stream, dimension)``."""

    def __init__(self, func: Callable[..., Any], name: Optional[str] = None):
        if not callable(func):
            raise TypeError(f"Stage function must be callable, got {type(func).__name__}")
        self.func = func
        self.name = name or getattr(func, "__name__", type(func).__name__)

    def process(self, stream, dimension: Optional[int] = None) -> Any:
        return self.func(stream, dimension)

    def __repr__(self) -> str:
        return f"FunctionStage({self.name})"


def as_stage(obj) -> Optional[Stage]:
    """Coerce None, a Stage, or a callable into a Stage."""
    if obj is None or isinstance(obj, Stage):
        return obj
    return FunctionStage(obj)


__all__ = ["Stage", "FunctionStage", "as_stage"]
