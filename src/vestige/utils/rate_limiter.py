"""
Fixed-window request throttle.

After every ``batch_size`` dispatched fetches the caller is paused for a fixed
delay. The window does not adapt to server feedback or latency.
"""

from __future__ import annotations

import time
from typing import Callable


class FixedWindowLimiter:
    def __init__(self, batch_size: int = 3, delay_secs: float = 1.0,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Args:
            batch_size: fetches allowed per window (K)
            delay_secs: pause applied once a window is full
            sleep: blocking sleep function, replaceable in tests
        """
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.batch_size = batch_size
        self.delay_secs = delay_secs
        self.sleep = sleep
        self.dispatched = 0
        self.pauses = 0

    def record_dispatch(self):
        """Count one dispatched fetch and pause when the window is full."""
        self.dispatched += 1
        if self.dispatched % self.batch_size == 0 and self.delay_secs > 0:
            self.pauses += 1
            self.sleep(self.delay_secs)
