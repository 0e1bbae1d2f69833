"""Shared fixtures for dspstream tests."""

import numpy as np
import pytest

from dspstream import Stream


@pytest.fixture
def image_4x4():
    """4x4 stream with input 0..15 and output 100..115."""
    stream = Stream.from_shape(4, 4, name="image")
    stream.input[:] = np.arange(16, dtype=np.float64)
    stream.output[:] = np.arange(100, 116, dtype=np.float64)
    return stream


@pytest.fixture
def cube():
    """3x4x5 stream with input 0..59."""
    stream = Stream.from_shape(3, 4, 5, name="cube")
    stream.input[:] = np.arange(60, dtype=np.float64)
    return stream


@pytest.fixture
def recorder():
    """Stage callable that records every (dimension, current_dimension) call."""
    class _Recorder:
        def __init__(self):
            self.calls = []

        def __call__(self, stream, dimension):
            self.calls.append((dimension, stream.current_dimension))
            return dimension

    return _Recorder()
