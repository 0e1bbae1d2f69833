"""
Elementwise combination and region-of-interest cropping.

Both operations walk buffers with ``indexing.region_offsets`` so they share
one multi-dimensional ordering with ``Stream.compose``/``Stream.decompose``.
"""

import logging
from typing import Callable, Optional

import numpy as np

from ..errors import BoundsError
from . import indexing
from .stream import Stream

logger = logging.getLogger(__name__)


def combine(a: Stream, b: Stream, op: Callable[[np.ndarray, np.ndarray], np.ndarray]) -> int:
    """Combine the input buffers of two streams into both output buffers.

    The walk covers the first ``k = min(a.dims, b.dims)`` dimensions, with
    extent ``min(a.sizes[d], b.sizes[d])`` along each; higher dimensions of
    either stream stay at coordinate 0. Each walked element pair is combined
    with ``op`` and the result is written to ``a.output`` and ``b.output`` at
    that pair's own offsets. Every other output element is left as is.

    Args:
        a: First operand, its output is updated in place
        b: Second operand, its output is updated in place
        op: Binary ufunc-like callable applied elementwise

    Returns:
        Number of element pairs written (0 when either stream has no dimensions)

    Raises:
        StreamClosedError: If either stream is closed
    """
    a._require_open()
    b._require_open()
    common = min(a.dims, b.dims)
    if common == 0:
        logger.debug("combine(%r, %r): no common dimensions", a, b)
        return 0

    extents = [min(sa, sb) for sa, sb in zip(a.sizes[:common], b.sizes[:common])]
    origin = [0] * common
    x = indexing.region_offsets(a.sizes, origin, extents)
    y = indexing.region_offsets(b.sizes, origin, extents)

    result = op(a.input[x], b.input[y])
    a.output[x] = result
    b.output[y] = result
    return int(x.size)


def multiply(a: Stream, b: Stream) -> int:
    """Elementwise product of two streams, see ``combine``."""
    return combine(a, b, np.multiply)


def add(a: Stream, b: Stream) -> int:
    """Elementwise sum of two streams, see ``combine``."""
    return combine(a, b, np.add)


def crop(stream: Stream) -> Optional[Stream]:
    """Extract the ROI of a stream into a new stream.

    The new stream has one dimension per source dimension, of extent
    ``roi[d].length``, and receives the matching sub-volume of both buffers
    together with the source payload (wavelength, samplerate, start time,
    location, target). The source is not modified.

    Args:
        stream: Source stream

    Returns:
        Cropped stream, or None if the source has no dimensions

    Raises:
        BoundsError: If any region falls outside its dimension
        StreamClosedError: If the stream is closed
    """
    stream._require_open()
    if stream.dims == 0:
        return None

    regions = stream.roi
    for dim, (region, size) in enumerate(zip(regions, stream.sizes)):
        if region.start < 0 or region.length < 1 or region.start + region.length > size:
            raise BoundsError(
                f"ROI {tuple(region)} does not fit dimension {dim} of extent {size}"
            )

    starts = [r.start for r in regions]
    extents = [r.length for r in regions]
    offsets = indexing.region_offsets(stream.sizes, starts, extents)

    result = Stream.from_shape(*extents, name=stream.name, config=stream.config)
    result.input[:] = stream.input[offsets]
    result.output[:] = stream.output[offsets]
    result.wavelength = stream.wavelength
    result.samplerate = stream.samplerate
    result.start_time = stream.start_time
    result.location = stream.location
    result.target = stream.target
    return result


__all__ = ["combine", "multiply", "add", "crop"]
