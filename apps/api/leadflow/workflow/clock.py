from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from zoneinfo import ZoneInfo

Clock = Callable[[], datetime]


def local_clock(tz_name: str) -> Clock:
    """Wall-clock time in ``tz_name`` as a naive datetime; xlsx cells carry no tz."""
    zone = ZoneInfo(tz_name)

    def now() -> datetime:
        return datetime.now(zone).replace(tzinfo=None, microsecond=0)

    return now
