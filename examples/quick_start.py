#!/usr/bin/env python
"""
Quick Start Guide for dspstream
===============================

This example walks through shaping, combining, cropping and running streams.
Run this from the project root: python examples/quick_start.py
"""

import numpy as np
import sys
from pathlib import Path

# Add dspstream to path if running as script
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dspstream import (
    Pipeline,
    Stream,
    SyntheticStreamSource,
    crop,
    multiply,
    print_pipeline_stats,
    print_stream_info,
)


def example_1_shape():
    """Example 1: Build a 2-D stream and convert coordinates."""
    print("\n" + "=" * 60)
    print("Example 1: Shape and Coordinates")
    print("=" * 60 + "\n")

    frame = Stream(name="frame")
    frame.add_dim(8)   # width
    frame.add_dim(6)   # height
    print(f"✓ Stream created: sizes={frame.sizes}, len={frame.len}")

    frame.index = 27
    print(f"  index 27 -> position {frame.decompose()}")
    frame.position = (2, 4)
    print(f"  position (2, 4) -> index {frame.compose()}")

    print_stream_info(frame)


def example_2_combine():
    """Example 2: Multiply two streams of different lengths."""
    print("\n" + "=" * 60)
    print("Example 2: Elementwise Combination")
    print("=" * 60 + "\n")

    signal = Stream.from_array(np.arange(1.0, 5.0), name="signal")
    window = Stream.from_array(np.hanning(6), name="window")

    written = multiply(signal, window)
    print(f"✓ {written} pairs written")
    print(f"  signal.output = {np.round(signal.output, 3)}")
    print(f"  window.output = {np.round(window.output, 3)}")


def example_3_crop():
    """Example 3: Crop a region of interest."""
    print("\n" + "=" * 60)
    print("Example 3: Region of Interest")
    print("=" * 60 + "\n")

    image = Stream.from_array(np.arange(16.0).reshape(4, 4), name="image")
    image.set_roi(0, 1, 2)
    image.set_roi(1, 1, 2)

    tile = crop(image)
    print(f"✓ Cropped {image.sizes} -> {tile.sizes}")
    print(tile.view())


def example_4_pipeline():
    """Example 4: Run a stage tree over synthetic frames."""
    print("\n" + "=" * 60)
    print("Example 4: Pipeline")
    print("=" * 60 + "\n")

    source = SyntheticStreamSource(shape=(32,), sampling_rate=40.0, n_frames=5)
    raw = source.make_stream(name="raw")
    energy = Stream(name="energy")
    raw.add_child(energy)

    def rectify(stream, dimension):
        np.abs(stream.input, out=stream.output)
        return float(stream.output.max())

    def total(stream, dimension):
        return float(raw.input.sum())

    raw.stage = rectify
    energy.stage = total

    pipeline = Pipeline(raw)
    for frame in pipeline.feed(source):
        print(f"  t={frame.timestamp:.2f}s peak={frame.results['raw']:.3f} "
              f"energy={frame.results['energy']:.3f}")

    print_pipeline_stats(pipeline.get_stats())


if __name__ == "__main__":
    example_1_shape()
    example_2_combine()
    example_3_crop()
    example_4_pipeline()
