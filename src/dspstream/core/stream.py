"""
N-dimensional numeric stream with dual input/output staging buffers.
"""

import logging
import math
import weakref
from dataclasses import dataclass
from typing import Any, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from ..config import StreamConfig, load_config
from ..errors import (
    AllocationError,
    BoundsError,
    BufferBindError,
    InvalidShapeError,
    StreamClosedError,
    StreamError,
)
from . import indexing
from .stage import Stage, as_stage

logger = logging.getLogger(__name__)


class Region(NamedTuple):
    """Sub-range ``start .. start + length - 1`` along one dimension."""
    start: int
    length: int


class StartTime(NamedTuple):
    """Capture timestamp split into whole seconds and nanoseconds."""
    seconds: int = 0
    nanoseconds: int = 0

    @classmethod
    def from_float(cls, timestamp: float) -> "StartTime":
        seconds = math.floor(timestamp)
        nanoseconds = int(round((timestamp - seconds) * 1e9))
        if nanoseconds >= 1_000_000_000:
            seconds += 1
            nanoseconds -= 1_000_000_000
        return cls(int(seconds), nanoseconds)

    def to_float(self) -> float:
        return self.seconds + self.nanoseconds / 1e9


@dataclass
class Dimension:
    """Shape record for one axis: extent, current coordinate and ROI."""
    size: int
    pos: int
    roi: Region


class Stream:
    """N-dimensional numeric buffer plus its processing context.

    A new stream has no dimensions and holds a single element. It is grown by
    ``add_dim``, which is the only operation that changes the shape. Both
    staging buffers are flat numpy arrays of ``len`` elements laid out with
    dimension 0 varying fastest.

    Children are held through weak references and the parent link is weak as
    well: a stream never keeps another stream alive.

    Example:
        >>> frame = Stream(name="frame")
        >>> frame.add_dim(640)
        >>> frame.add_dim(480)
        >>> frame.len
        307200
    """

    def __init__(self, name: Optional[str] = None, config: Optional[StreamConfig] = None):
        """Initialize an empty stream.

        Args:
            name: Optional label used in logs and pipeline results
            config: Buffer configuration (default: ``StreamConfig()``)
        """
        self.name = name
        self.config = load_config(config)
        self._dtype = self.config.numpy_dtype

        # Shape
        self._dims: List[Dimension] = []
        self._len = 1
        self._index = 0

        # Staging buffers and their ownership
        self._input = np.zeros(1, dtype=self._dtype)
        self._output = np.zeros(1, dtype=self._dtype)
        self._input_owned = True
        self._output_owned = True

        # Opaque payload
        self._location = np.zeros(3, dtype=np.float64)
        self._target = np.zeros(3, dtype=np.float64)
        self.wavelength = 0.0
        self.samplerate = 0.0
        self._start_time = StartTime()

        # Composition
        self._children: List[weakref.ref] = []
        self._parent: Optional[weakref.ref] = None
        self._stage: Optional[Stage] = None
        self.current_dimension: Optional[int] = None

        self._closed = False

    @classmethod
    def from_shape(cls, *sizes: int, name: Optional[str] = None,
                   config: Optional[StreamConfig] = None) -> "Stream":
        """Create a stream and append one dimension per extent."""
        stream = cls(name=name, config=config)
        for size in sizes:
            stream.add_dim(size)
        return stream

    @classmethod
    def from_array(cls, data: np.ndarray, name: Optional[str] = None,
                   config: Optional[StreamConfig] = None) -> "Stream":
        """Create a stream whose input holds a copy of ``data``.

        Axis ``d`` of ``data`` becomes dimension ``d`` of the stream, so
        ``stream.view()[i, j]`` equals ``data[i, j]``.
        """
        data = np.asarray(data)
        stream = cls.from_shape(*data.shape, name=name, config=config)
        stream._input[:] = data.ravel(order="F")
        return stream

    # ------------------------------------------------------------------
    # Shape
    # ------------------------------------------------------------------

    @property
    def dims(self) -> int:
        return len(self._dims)

    @property
    def sizes(self) -> Tuple[int, ...]:
        return tuple(d.size for d in self._dims)

    @property
    def len(self) -> int:
        return self._len

    def __len__(self) -> int:
        return self._len

    @property
    def strides(self) -> Tuple[int, ...]:
        return indexing.strides(self.sizes)

    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    def add_dim(self, size: int) -> None:
        """Append a dimension of the given extent.

        Both buffers grow to the new length. Their existing content is kept
        as a prefix and the new tail is zero-filled.

        Args:
            size: Extent of the new dimension, at least 1

        Raises:
            InvalidShapeError: If ``size`` is not an integer >= 1
            AllocationError: If the buffers cannot grow to the new length
        """
        self._require_open()
        if isinstance(size, bool) or not isinstance(size, (int, np.integer)):
            raise InvalidShapeError(f"Dimension size must be an integer, got {size!r}")
        size = int(size)
        if size < 1:
            raise InvalidShapeError(f"Dimension size must be >= 1, got {size}")

        new_len = self._len * size
        limit = self.config.max_elements
        if limit is not None and new_len > limit:
            raise AllocationError(
                f"Stream length {new_len} exceeds max_elements={limit}"
            )

        # Allocate both before committing so a failure leaves the stream intact
        new_input = self._grow(self._input, new_len)
        new_output = self._grow(self._output, new_len)

        self._dims.append(Dimension(size=size, pos=0, roi=Region(0, size)))
        self._len = new_len
        self._input, self._output = new_input, new_output
        self._input_owned = self._output_owned = True
        logger.debug("%r: appended dimension %d, len=%d", self, size, new_len)

    def _allocate(self, length: int) -> np.ndarray:
        try:
            return np.zeros(length, dtype=self._dtype)
        except (MemoryError, ValueError) as exc:
            raise AllocationError(
                f"Cannot allocate {length} elements of {self._dtype}"
            ) from exc

    def _grow(self, buffer: np.ndarray, length: int) -> np.ndarray:
        grown = self._allocate(length)
        grown[:buffer.size] = buffer
        return grown

    # ------------------------------------------------------------------
    # Buffers
    # ------------------------------------------------------------------

    @property
    def input(self) -> np.ndarray:
        self._require_open()
        return self._input

    @property
    def output(self) -> np.ndarray:
        self._require_open()
        return self._output

    @property
    def input_owned(self) -> bool:
        return self._input_owned

    @property
    def output_owned(self) -> bool:
        return self._output_owned

    def view(self, which: str = "input") -> np.ndarray:
        """Buffer as an N-D array indexed ``[pos0, pos1, ...]``.

        The returned array shares memory with the buffer.
        """
        buffer = self._buffer(which)
        if self.dims == 0:
            return buffer.reshape(())
        return buffer.reshape(self.sizes, order="F")

    def _buffer(self, which: str) -> np.ndarray:
        if which == "input":
            return self.input
        if which == "output":
            return self.output
        raise ValueError(f"Unknown buffer: {which!r} (expected 'input' or 'output')")

    def bind_input(self, buffer) -> np.ndarray:
        """Use an external buffer as the input buffer without copying.

        Args:
            buffer: C-contiguous array of the stream dtype holding ``len``
                elements. On a stream without dimensions, a buffer of n > 1
                elements first appends a dimension of extent n.

        Returns:
            The flat array now bound as input
        """
        return self._bind("input", buffer)

    def bind_output(self, buffer) -> np.ndarray:
        """Use an external buffer as the output buffer without copying."""
        return self._bind("output", buffer)

    def _bind(self, which: str, buffer) -> np.ndarray:
        self._require_open()
        array = np.asarray(buffer)
        if array.dtype != self._dtype:
            raise BufferBindError(
                f"Buffer dtype {array.dtype} does not match stream dtype {self._dtype}"
            )
        if not array.flags.c_contiguous:
            raise BufferBindError("Buffer must be C-contiguous to bind without a copy")
        flat = array.reshape(-1)

        if self.dims == 0 and flat.size > 1:
            self.add_dim(flat.size)
        elif flat.size != self._len:
            raise BufferBindError(
                f"Buffer holds {flat.size} elements, stream length is {self._len}"
            )

        if which == "input":
            self._input, self._input_owned = flat, False
        else:
            self._output, self._output_owned = flat, False
        logger.debug("%r: bound external %s buffer of %d elements", self, which, flat.size)
        return flat

    def own_output(self) -> np.ndarray:
        """Replace a borrowed output buffer with an owned, zeroed one.

        The borrowed buffer is forgotten and no longer written to. An owned
        output is returned as is.
        """
        self._require_open()
        if not self._output_owned:
            self._output = self._allocate(self._len)
            self._output_owned = True
        return self._output

    def swap_buffers(self) -> None:
        """Exchange input and output without copying."""
        self._require_open()
        self._input, self._output = self._output, self._input
        self._input_owned, self._output_owned = self._output_owned, self._input_owned

    # ------------------------------------------------------------------
    # Coordinates
    # ------------------------------------------------------------------

    @property
    def index(self) -> int:
        return self._index

    @index.setter
    def index(self, value: int) -> None:
        value = int(value)
        if not 0 <= value < self._len:
            raise BoundsError(f"Index {value} outside [0, {self._len})")
        self._index = value

    @property
    def position(self) -> Tuple[int, ...]:
        return tuple(d.pos for d in self._dims)

    @position.setter
    def position(self, pos: Sequence[int]) -> None:
        pos = [int(p) for p in pos]
        if len(pos) != self.dims:
            raise InvalidShapeError(
                f"Position has {len(pos)} coordinates, stream has {self.dims} dimensions"
            )
        for dim, (coord, record) in enumerate(zip(pos, self._dims)):
            if not 0 <= coord < record.size:
                raise BoundsError(
                    f"Coordinate {coord} outside [0, {record.size}) on dimension {dim}"
                )
        for coord, record in zip(pos, self._dims):
            record.pos = coord

    def decompose(self) -> Tuple[int, ...]:
        """Recompute ``position`` from ``index``."""
        self._require_open()
        pos = indexing.decompose(self._index, self.sizes)
        for coord, record in zip(pos, self._dims):
            record.pos = coord
        return pos

    def compose(self) -> int:
        """Recompute ``index`` from ``position``."""
        self._require_open()
        self._index = indexing.compose(self.position, self.sizes)
        return self._index

    # ------------------------------------------------------------------
    # Region of interest
    # ------------------------------------------------------------------

    @property
    def roi(self) -> Tuple[Region, ...]:
        return tuple(d.roi for d in self._dims)

    @roi.setter
    def roi(self, regions: Sequence[Tuple[int, int]]) -> None:
        regions = [Region(int(start), int(length)) for start, length in regions]
        if len(regions) != self.dims:
            raise InvalidShapeError(
                f"ROI has {len(regions)} regions, stream has {self.dims} dimensions"
            )
        for dim, region in enumerate(regions):
            self._check_region(dim, region)
        for record, region in zip(self._dims, regions):
            record.roi = region

    def set_roi(self, dim: int, start: int, length: int) -> None:
        """Set the region of interest along one dimension."""
        if not 0 <= dim < self.dims:
            raise BoundsError(f"Dimension {dim} outside [0, {self.dims})")
        region = Region(int(start), int(length))
        self._check_region(dim, region)
        self._dims[dim].roi = region

    def _check_region(self, dim: int, region: Region) -> None:
        size = self._dims[dim].size
        if region.start < 0 or region.length < 1 or region.start + region.length > size:
            raise BoundsError(
                f"ROI {tuple(region)} does not fit dimension {dim} of extent {size}"
            )

    # ------------------------------------------------------------------
    # Payload
    # ------------------------------------------------------------------

    @property
    def location(self) -> np.ndarray:
        return self._location

    @location.setter
    def location(self, value) -> None:
        self._location[:] = _vector3(value, "location")

    @property
    def target(self) -> np.ndarray:
        return self._target

    @target.setter
    def target(self, value) -> None:
        self._target[:] = _vector3(value, "target")

    @property
    def start_time(self) -> StartTime:
        return self._start_time

    @start_time.setter
    def start_time(self, value) -> None:
        if isinstance(value, StartTime):
            self._start_time = value
        elif isinstance(value, tuple):
            self._start_time = StartTime(*value)
        else:
            self._start_time = StartTime.from_float(float(value))

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    @property
    def parent(self) -> Optional["Stream"]:
        return self._parent() if self._parent is not None else None

    @property
    def children(self) -> List["Stream"]:
        """Live children in insertion order."""
        self._children = [ref for ref in self._children if ref() is not None]
        return [ref() for ref in self._children]

    def add_child(self, child: "Stream") -> None:
        """Record ``child`` as a member of this stream.

        The child is not owned: whoever created it keeps it alive and closes
        it. A child already attached elsewhere is moved here.
        """
        self._require_open()
        child._require_open()
        node = self
        while node is not None:
            if node is child:
                raise StreamError(f"Adding {child!r} under {self!r} would create a cycle")
            node = node.parent

        current = child.parent
        if current is self:
            return
        if current is not None:
            current.remove_child(child)
        self._children.append(weakref.ref(child))
        child._parent = weakref.ref(self)

    def remove_child(self, child: "Stream") -> None:
        self._children = [
            ref for ref in self._children
            if ref() is not None and ref() is not child
        ]
        if child.parent is self:
            child._parent = None

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    @property
    def stage(self) -> Optional[Stage]:
        return self._stage

    @stage.setter
    def stage(self, value) -> None:
        self._stage = as_stage(value)

    def execute(self) -> Any:
        """Run the bound stage once and return its result."""
        self._require_open()
        if self._stage is None:
            raise StreamError(f"No stage bound to {self!r}")
        return self._stage.process(self, None)

    def execute_per_dimension(self) -> Optional[List[Any]]:
        """Run the bound stage once per dimension, in dimension order.

        Returns:
            One result per dimension, or None if the stream has no dimensions
        """
        self._require_open()
        if self.dims == 0:
            logger.debug("%r: no dimensions, nothing to execute", self)
            return None
        if self._stage is None:
            raise StreamError(f"No stage bound to {self!r}")

        results = []
        try:
            for dim in range(self.dims):
                self.current_dimension = dim
                results.append(self._stage.process(self, dim))
        finally:
            self.current_dimension = None
        return results

    # ------------------------------------------------------------------
    # Operators
    # ------------------------------------------------------------------

    def multiply(self, other: "Stream") -> int:
        from .operators import multiply
        return multiply(self, other)

    def sum(self, other: "Stream") -> int:
        from .operators import add
        return add(self, other)

    def crop(self) -> Optional["Stream"]:
        from .operators import crop
        return crop(self)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def duplicate(self) -> "Stream":
        """Clone shape, ROI, payload and buffer contents into a new stream.

        The clone owns its buffers. Children, parent and stage are not copied.
        """
        self._require_open()
        dest = Stream(name=self.name, config=self.config)
        for size in self.sizes:
            dest.add_dim(size)
        for src, dst in zip(self._dims, dest._dims):
            dst.roi = src.roi
        dest.wavelength = self.wavelength
        dest.samplerate = self.samplerate
        dest.start_time = self.start_time
        dest.location = self.location
        dest.target = self.target
        dest._input[:] = self._input
        dest._output[:] = self._output
        return dest

    __copy__ = duplicate

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release buffers, shape and links. Safe to call more than once.

        Owned buffers are dropped; borrowed buffers are only forgotten and
        remain valid for their owner. Children are detached, not closed.
        """
        if self._closed:
            return
        parent = self.parent
        if parent is not None:
            parent.remove_child(self)
        for child in self.children:
            child._parent = None

        borrowed = [name for name, owned in (("input", self._input_owned),
                                             ("output", self._output_owned)) if not owned]
        if borrowed:
            logger.debug("%r: releasing borrowed %s buffer(s)", self, "/".join(borrowed))
        self._input = None
        self._output = None
        self._dims = []
        self._children = []
        self._stage = None
        self._len = 1
        self._index = 0
        self._closed = True

    def __enter__(self) -> "Stream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _require_open(self) -> None:
        if self._closed:
            raise StreamClosedError(f"{self!r} is closed")

    def __repr__(self) -> str:
        label = f"{self.name!r}, " if self.name else ""
        state = ", closed" if self._closed else ""
        return f"Stream({label}sizes={self.sizes}{state})"


def _vector3(value, label: str) -> np.ndarray:
    vector = np.asarray(value, dtype=np.float64)
    if vector.shape != (3,):
        raise InvalidShapeError(f"{label} must have 3 elements, got shape {vector.shape}")
    return vector


__all__ = ["Stream", "Region", "StartTime", "Dimension"]
