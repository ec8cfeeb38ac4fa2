"""Time helpers"""

import time


def current_time_millis() -> int:
    """Milliseconds since the epoch"""
    return time.time_ns() // 1_000_000
