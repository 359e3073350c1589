import logging
import time
from contextlib import contextmanager
from typing import Generator

_logger = logging.getLogger(__name__)


class Stopwatch:
    """Elapsed wall-clock seconds of a ``timer`` block, set when it exits."""

    def __init__(self):
        self.elapsed = 0.0


@contextmanager
def timer(name: str) -> Generator[Stopwatch, None, None]:
    """Time a block of code, log the duration and expose it to the caller."""
    watch = Stopwatch()
    start = time.perf_counter()
    try:
        yield watch
    finally:
        watch.elapsed = time.perf_counter() - start
        _logger.info(f"⏱️  {name}: {watch.elapsed:.2f}s")
