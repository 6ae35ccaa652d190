"""Pacing between outbound calls.

Every fixed delay in the pipeline goes through a Pacer so runs can be
tested without wall-clock waits.
"""

from __future__ import annotations

import logging
import time
from typing import Protocol

logger = logging.getLogger(__name__)


class Pacer(Protocol):
    """Anything that can wait for a number of seconds."""

    def wait(self, seconds: float) -> None: ...


class SleepPacer:
    """Pacer that blocks the calling thread."""

    def wait(self, seconds: float) -> None:
        if seconds <= 0:
            return
        logger.debug(f"Pacing: sleeping {seconds:.2f}s")
        time.sleep(seconds)


class NullPacer:
    """Pacer that records requested waits without sleeping."""

    def __init__(self) -> None:
        self.waits: list[float] = []

    def wait(self, seconds: float) -> None:
        self.waits.append(seconds)

    @property
    def total_seconds(self) -> float:
        return sum(self.waits)
