"""Timestamp-based identifiers.

Ids are ``<prefix>-<milliseconds>``. Two ids requested within the same
millisecond get consecutive values, so ids from one factory never collide.
"""

from __future__ import annotations

import time
from collections.abc import Callable


class IdFactory:
    """Issues strictly increasing millisecond stamps.

    Args:
        clock: Returns the current time in seconds. Defaults to time.time.

    Example:
        >>> ids = IdFactory(clock=lambda: 1700000000.0)
        >>> ids.new_id("vps"), ids.new_id("vps")
        ('vps-1700000000000', 'vps-1700000000001')
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._last = 0

    def next_stamp(self) -> int:
        stamp = int(self._clock() * 1000)
        if stamp <= self._last:
            stamp = self._last + 1
        self._last = stamp
        return stamp

    def new_id(self, prefix: str) -> str:
        return f"{prefix}-{self.next_stamp()}"


default_ids = IdFactory()
