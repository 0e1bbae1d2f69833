"""
Row-major index math shared by every dimension-aware operation.

Dimension 0 varies fastest: its stride is 1 and the stride of dimension d is
the product of the extents of all lower dimensions.
"""

import numpy as np
from typing import Sequence, Tuple


def strides(sizes: Sequence[int]) -> Tuple[int, ...]:
    """Per-dimension strides for the given extents."""
    result = []
    step = 1
    for size in sizes:
        result.append(step)
        step *= size
    return tuple(result)


def decompose(index: int, sizes: Sequence[int]) -> Tuple[int, ...]:
    """Linear offset to multi-index."""
    pos = []
    step = 1
    for size in sizes:
        pos.append((index // step) % size)
        step *= size
    return tuple(pos)


def compose(pos: Sequence[int], sizes: Sequence[int]) -> int:
    """Multi-index to linear offset."""
    index = 0
    step = 1
    for coord, size in zip(pos, sizes):
        index += coord * step
        step *= size
    return index


def region_offsets(
    sizes: Sequence[int],
    starts: Sequence[int],
    extents: Sequence[int],
) -> np.ndarray:
    """Linear offsets of every element of a box, in row-major walk order.

    The box covers ``starts[d] .. starts[d] + extents[d] - 1`` along each of the
    first ``len(extents)`` dimensions; any higher dimension is held at
    coordinate 0. The i-th returned offset is the element that sits at linear
    index i of a stream shaped like ``extents``.

    Args:
        sizes: Extents of the stream being walked
        starts: Box origin, one entry per walked dimension
        extents: Box extents, one entry per walked dimension

    Returns:
        1-D int64 array of length ``product(extents)``
    """
    if len(starts) != len(extents) or len(extents) > len(sizes):
        raise ValueError("starts and extents must cover a prefix of sizes")

    offsets = np.zeros(1, dtype=np.int64)
    for start, extent, stride in zip(starts, extents, strides(sizes)):
        axis = (start + np.arange(extent, dtype=np.int64)) * stride
        # Existing offsets vary fastest, so they go on the inner axis.
        offsets = (axis[:, None] + offsets[None, :]).ravel()
    return offsets


__all__ = ["strides", "decompose", "compose", "region_offsets"]
