"""
Time-ordered 128-bit identifiers.

Layout (big-endian, 32 hex digits rendered as 8-4-4-4-12 groups):

    | 48 bits: Unix time in milliseconds | 80 bits: random |

Identifiers sort by creation time. Within one process they are strictly
increasing: when the clock has not moved past the previous identifier the
previous value is incremented instead of drawing new randomness.
"""

from __future__ import annotations

import secrets
import threading
import time

_RANDOM_BITS = 80


class _MonotonicState:
    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.last = 0


_STATE = _MonotonicState()


def _format(value: int) -> str:
    digits = f"{value:032x}"
    return f"{digits[:8]}-{digits[8:12]}-{digits[12:16]}-{digits[16:20]}-{digits[20:]}"


def next_time_ordered_id() -> str:
    """Return the next time-ordered identifier, e.g. '0192f3a1-7c4e-5b1d-9e0f-3a6c8d2e4b71'."""
    millis = time.time_ns() // 1_000_000
    candidate = (millis << _RANDOM_BITS) | secrets.randbits(_RANDOM_BITS)
    with _STATE.lock:
        if candidate <= _STATE.last:
            candidate = _STATE.last + 1
        _STATE.last = candidate
    return _format(candidate)
