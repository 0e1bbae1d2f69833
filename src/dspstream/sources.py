"""
Frame sources feeding stream input buffers.
"""

import numpy as np
from abc import ABC, abstractmethod
from typing import Iterator, Optional, Sequence, Tuple

from .core.stream import Stream

try:
    from obspy import Stream as ObsPyStream
    OBSPY_AVAILABLE = True
except ImportError:
    OBSPY_AVAILABLE = False


class StreamSource(ABC):
    """Abstract base class for frame sources.

    Frames are C-contiguous float64 arrays that can be bound to a stream's
    input with ``Stream.bind_input``. A frame of shape ``(h, w)`` binds to a
    stream of sizes ``(w, h)``: the last frame axis varies fastest.
    """

    @abstractmethod
    def __iter__(self) -> Iterator[Tuple[np.ndarray, float]]:
        """Iterate over frames.

        Yields:
            (frame, timestamp): Frame data and timestamp of its first sample
        """
        pass

    @abstractmethod
    def get_sampling_rate(self) -> float:
        """Get source sampling rate."""
        pass

    @abstractmethod
    def frame_shape(self) -> Tuple[int, ...]:
        """Shape of the frames this source yields."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close source and cleanup resources."""
        pass

    def make_stream(self, name: Optional[str] = None) -> Stream:
        """Create a stream shaped to receive this source's frames."""
        stream = Stream.from_shape(*reversed(self.frame_shape()), name=name)
        stream.samplerate = self.get_sampling_rate()
        return stream


class SyntheticStreamSource(StreamSource):
    """Synthetic frame source for testing.

    Generates Gaussian noise frames, either 1-D sample chunks or N-D images.
    """

    def __init__(
        self,
        shape: Sequence[int] = (40,),
        sampling_rate: float = 40.0,
        noise_level: float = 1.0,
        n_frames: Optional[int] = None,
        seed: int = 42
    ):
        """Initialize synthetic source.

        Args:
            shape: Frame shape, e.g. ``(n_samples,)`` or ``(height, width)``
            sampling_rate: Frames per second for N-D frames, samples per
                second for 1-D chunks
            noise_level: Standard deviation of the noise
            n_frames: Number of frames to yield (default: unbounded)
            seed: Random seed for reproducible noise
        """
        self.shape = tuple(int(s) for s in shape)
        if not self.shape or any(s < 1 for s in self.shape):
            raise ValueError(f"Invalid frame shape: {shape}")
        self.sampling_rate = sampling_rate
        self.noise_level = noise_level
        self.n_frames = n_frames

        self.current_time = 0.0
        self.is_closed = False

        # Random state for reproducible noise
        self.rng = np.random.RandomState(seed)

    def __iter__(self) -> Iterator[Tuple[np.ndarray, float]]:
        """Generate synthetic frames."""
        count = 0
        while not self.is_closed:
            if self.n_frames is not None and count >= self.n_frames:
                break
            frame = self.rng.normal(0, self.noise_level, self.shape).astype(np.float64)
            yield frame, self.current_time

            # 1-D chunks advance by their sample count, images by one frame
            step = self.shape[0] if len(self.shape) == 1 else 1
            self.current_time += step / self.sampling_rate
            count += 1

    def get_sampling_rate(self) -> float:
        """Get sampling rate."""
        return self.sampling_rate

    def frame_shape(self) -> Tuple[int, ...]:
        return self.shape

    def close(self) -> None:
        """Close source."""
        self.is_closed = True


class ObsPyStreamSource(StreamSource):
    """1-D time-series source from ObsPy Stream/Trace objects.

    Chunks an existing trace into fixed-length 1-D frames for streams with a
    single sample dimension; image frames come from other sources. The final
    chunk is dropped when shorter than the others so every frame fits the
    same stream. Frames may be views of the trace data.
    """

    def __init__(
        self,
        stream_or_trace,
        chunk_duration: float = 1.0,
        start_time: Optional[float] = None
    ):
        """Initialize ObsPy source.

        Args:
            stream_or_trace: ObsPy Stream or Trace object
            chunk_duration: Duration of each frame in seconds
            start_time: Override start time (for testing)
        """
        if not OBSPY_AVAILABLE:
            raise ImportError("ObsPy required for ObsPyStreamSource")

        if isinstance(stream_or_trace, ObsPyStream):
            if len(stream_or_trace) == 0:
                raise ValueError("Empty stream provided")
            self.trace = stream_or_trace[0]  # Use first trace
        else:
            self.trace = stream_or_trace

        self.sampling_rate = float(self.trace.stats.sampling_rate)
        self.chunk_samples = int(chunk_duration * self.sampling_rate)
        if self.chunk_samples < 1:
            raise ValueError(f"chunk_duration {chunk_duration}s is shorter than one sample")

        if start_time is not None:
            self.start_time = start_time
        else:
            self.start_time = float(self.trace.stats.starttime.timestamp)

        self.current_pos = 0
        self.is_closed = False

    def __iter__(self) -> Iterator[Tuple[np.ndarray, float]]:
        """Iterate over frames."""
        data = self.trace.data
        while not self.is_closed and self.current_pos + self.chunk_samples <= len(data):
            end_pos = self.current_pos + self.chunk_samples
            frame = np.ascontiguousarray(data[self.current_pos:end_pos], dtype=np.float64)
            timestamp = self.start_time + self.current_pos / self.sampling_rate
            yield frame, timestamp
            self.current_pos = end_pos

    def get_sampling_rate(self) -> float:
        """Get stream sampling rate."""
        return self.sampling_rate

    def frame_shape(self) -> Tuple[int, ...]:
        return (self.chunk_samples,)

    def close(self) -> None:
        """Close source."""
        self.is_closed = True

    def reset(self) -> None:
        """Reset source to beginning."""
        self.current_pos = 0
        self.is_closed = False


__all__ = ["StreamSource", "SyntheticStreamSource", "ObsPyStreamSource", "OBSPY_AVAILABLE"]
