"""Logging setup and table printers for dspstream."""
import logging
from typing import Union

from rich.console import Console
from rich.table import Table

from .config import StreamConfig


def configure_logging(level: Union[str, int, StreamConfig] = "WARNING") -> logging.Logger:
    """Set the level of the package logger.

    Args:
        level: Level name or number, or a StreamConfig whose ``log_level`` is used

    Returns:
        The ``dspstream`` logger
    """
    if isinstance(level, StreamConfig):
        level = level.log_level
    if isinstance(level, str):
        level = level.upper()
    logger = logging.getLogger("dspstream")
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        logger.addHandler(handler)
    return logger


def _format_value(value):
    if isinstance(value, float):
        if 0 < abs(value) < 0.01:
            return f"{value:.6f}"
        elif abs(value) > 100:
            return f"{value:.2f}"
        return f"{value:.4f}"
    return str(value)


def print_stream_info(stream, title=None, console=None):
    """Pretty print shape, ROI and payload of a stream.

    Args:
        stream: Stream to describe
        title: title for the table (default: stream repr)
        console: rich Console to print to (default: a new stdout console)
    """
    console = console or Console()
    table = Table(title=title or repr(stream), show_header=True, header_style="bold magenta")
    table.add_column("Dimension", style="cyan", no_wrap=True)
    table.add_column("Size", style="green")
    table.add_column("Stride", style="green")
    table.add_column("Position", style="green")
    table.add_column("ROI", style="green")

    for dim, (size, stride, pos, roi) in enumerate(
        zip(stream.sizes, stream.strides, stream.position, stream.roi)
    ):
        table.add_row(str(dim), str(size), str(stride), str(pos), f"{roi.start}+{roi.length}")

    console.print(table)
    console.print(
        f"len={stream.len} index={stream.index} "
        f"samplerate={_format_value(float(stream.samplerate))} "
        f"wavelength={_format_value(float(stream.wavelength))} "
        f"start_time={stream.start_time.to_float():.9f} "
        f"children={len(stream.children)}"
    )


def print_pipeline_stats(stats, title="Pipeline Statistics", console=None):
    """Pretty print pipeline statistics.

    Args:
        stats: dict of statistic name -> value
        title: title for the table
        console: rich Console to print to (default: a new stdout console)
    """
    console = console or Console()
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Statistic", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")

    for key, value in stats.items():
        table.add_row(key.replace('_', ' ').title(), _format_value(value))

    console.print(table)


__all__ = ["configure_logging", "print_stream_info", "print_pipeline_stats"]
