"""
Synchronous pipeline runner over a tree of streams.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

from ..config import StreamConfig, load_config
from .stream import Stream

logger = logging.getLogger(__name__)


@dataclass
class FrameResult:
    """Results of one pipeline pass over a source frame."""
    timestamp: float          # Timestamp of the frame's first sample
    results: Dict[str, Any]   # Stage result per stream key


class Pipeline:
    """Runs the stages of a stream tree in pre-order.

    The root is processed first, then each child subtree in insertion order.
    Streams without a bound stage are skipped. After a stage runs, the
    stream's buffers are swapped (when ``swap_after_stage`` is set) so its
    output becomes the input seen by the next pass.

    Example:
        >>> root = Stream.from_shape(8, name="raw")
        >>> root.stage = lambda stream, dim: float(stream.input.sum())
        >>> Pipeline(root).run()
        {'raw': 0.0}
    """

    def __init__(self, root: Stream, config: Optional[StreamConfig] = None):
        """Initialize pipeline.

        Args:
            root: Root of the stream tree
            config: Runner configuration (default: the root's configuration)
        """
        self.root = root
        self.config = load_config(config) if config is not None else root.config

        # Statistics
        self.stats = {
            'streams_executed': 0,
            'stages_skipped': 0,
            'frames_processed': 0,
            'processing_errors': 0
        }

    def walk(self) -> List[Stream]:
        """Streams of the tree in execution order."""
        order = []
        pending = [self.root]
        while pending:
            stream = pending.pop()
            order.append(stream)
            pending.extend(reversed(stream.children))
        return order

    @staticmethod
    def _key(stream: Stream, position: int, taken) -> str:
        if not stream.name:
            return f"stream_{position}"
        if stream.name in taken:
            # Crops and duplicates inherit their source name
            return f"{stream.name}_{position}"
        return stream.name

    def run(self) -> Dict[str, Any]:
        """Execute every stage once.

        Returns:
            Stage result keyed by stream name. Unnamed streams use
            ``stream_<n>`` and repeated names use ``<name>_<n>``, n being the
            position in the walk
        """
        results = {}
        for position, stream in enumerate(self.walk()):
            if stream.stage is None:
                self.stats['stages_skipped'] += 1
                continue

            key = self._key(stream, position, results)
            try:
                if self.config.per_dimension:
                    results[key] = stream.execute_per_dimension()
                else:
                    results[key] = stream.execute()
            except Exception:
                self.stats['processing_errors'] += 1
                if self.config.fail_fast:
                    raise
                logger.warning("Stage of %r failed, continuing", stream, exc_info=True)
                continue

            if self.config.swap_after_stage:
                stream.swap_buffers()
            self.stats['streams_executed'] += 1
        return results

    def feed(self, source, max_frames: Optional[int] = None) -> Iterator[FrameResult]:
        """Run the pipeline once per frame of a source.

        Each frame is bound as the root's input buffer without a copy. Once
        the tree has run, a frame that the swap moved into the root's output
        is released so later passes never write into source memory.

        Args:
            source: StreamSource yielding ``(frame, timestamp)`` pairs
            max_frames: Stop after this many frames (default: exhaust source)

        Yields:
            FrameResult for each processed frame
        """
        for count, (frame, timestamp) in enumerate(source):
            if max_frames is not None and count >= max_frames:
                break
            self.root.own_output()
            self.root.bind_input(frame)
            self.root.start_time = timestamp
            results = self.run()
            self.root.own_output()
            self.stats['frames_processed'] += 1
            yield FrameResult(timestamp=timestamp, results=results)

    def get_stats(self) -> dict:
        """Get processing statistics."""
        stats = self.stats.copy()
        stats['tree_size'] = len(self.walk())
        return stats


__all__ = ["Pipeline", "FrameResult"]
