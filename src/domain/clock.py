"""Time source abstraction.

Orders never read the wall clock themselves: a ``Clock`` is handed to
the order when it is created and reused for every later transition.
"""

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """Render *moment* as ``YYYY-MM-DD HH:MM:SS``; aware values in UTC."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime(TIMESTAMP_FORMAT)
