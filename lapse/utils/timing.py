# lapse/utils/timing.py
"""
Timing utilities for corpus loading and join phases.
"""
import time
from typing import Any, Dict, List, Optional
from ..logging_config import get_logger

logger = get_logger('timing')


class Timer:
    """
    Context manager for timing a block.

    Usage:
        with Timer("Join paragraphs"):
            ...
    """

    def __init__(self, name: str, log_level: str = "DEBUG"):
        self.name = name
        self.log_level = log_level.lower()
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.end_time = time.perf_counter()
        elapsed = self.end_time - self.start_time

        if exc_type is not None:
            logger.error(f"FAILED: {self.name} (after {elapsed:.3f}s) - {exc_type.__name__}: {exc_val}")
        else:
            getattr(logger, self.log_level, logger.debug)(f"DONE: {self.name} ({elapsed:.3f}s)")

        return False

    @property
    def elapsed(self) -> float:
        """Elapsed time in seconds (running total while inside the block)."""
        if self.start_time is None:
            return 0.0
        end = self.end_time if self.end_time is not None else time.perf_counter()
        return end - self.start_time


class PhaseTimer:
    """
    Timer for multi-phase operations such as loading a corpus.

    Usage:
        timer = PhaseTimer("Load corpus")
        timer.checkpoint("Read tables")
        timer.checkpoint("Join")
        timer.finish()
    """

    def __init__(self, operation_name: str):
        self.operation_name = operation_name
        self.start_time = time.perf_counter()
        self.last_checkpoint = self.start_time
        self.checkpoints: List[Dict[str, Any]] = []
        logger.debug(f"BEGIN: {operation_name}")

    def checkpoint(self, phase_name: str) -> float:
        """Record the end of *phase_name*; returns seconds since the previous checkpoint."""
        now = time.perf_counter()
        elapsed_since_last = now - self.last_checkpoint

        self.checkpoints.append({
            'name': phase_name,
            'elapsed_since_last': elapsed_since_last,
            'elapsed_total': now - self.start_time,
        })
        logger.debug(
            f"CHECKPOINT: {self.operation_name} -> {phase_name} (+{elapsed_since_last:.3f}s)"
        )

        self.last_checkpoint = now
        return elapsed_since_last

    def finish(self) -> Dict[str, Any]:
        """Log the total and return the timing breakdown."""
        total_time = time.perf_counter() - self.start_time
        logger.info(f"FINISH: {self.operation_name} ({total_time:.3f}s)")
        return {
            'operation': self.operation_name,
            'total_time': total_time,
            'checkpoints': self.checkpoints,
        }
