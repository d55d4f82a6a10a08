"""
Time window partitioning for date-bounded feed queries.
Splits a logical search range into contiguous windows so that each upstream
request stays under the feed's per-request item cap.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)


class TimeRange(str, Enum):
    """Supported search ranges."""
    DAY = "1d"
    THREE_DAYS = "3d"
    WEEK = "7d"
    MONTH = "30d"
    YEAR = "1y"

    @classmethod
    def parse(cls, token: Optional[str]) -> Optional["TimeRange"]:
        """Return the range for a token such as ``"7d"``, or None if unknown."""
        if isinstance(token, cls):
            return token
        if not token:
            return None
        try:
            return cls(str(token).strip().lower())
        except ValueError:
            return None


# range -> (length in days, partition count)
PARTITION_POLICY: Dict[TimeRange, Tuple[int, int]] = {
    TimeRange.DAY: (1, 1),
    TimeRange.THREE_DAYS: (3, 2),
    TimeRange.WEEK: (7, 2),
    TimeRange.MONTH: (30, 3),
    TimeRange.YEAR: (365, 6),
}

FALLBACK_POLICY = PARTITION_POLICY[TimeRange.DAY]


@dataclass(frozen=True)
class TimeWindow:
    """
    A date-bounded slice of a search range.

    ``end`` is None for the most recent window, which is queried with an
    ``after:`` clause only.
    """
    start: Optional[date]
    end: Optional[date] = None

    @property
    def is_open_ended(self) -> bool:
        return self.end is None

    def to_query_clause(self) -> str:
        """Render the window as upstream search operators."""
        parts = []
        if self.start is not None:
            parts.append(f"after:{self.start.isoformat()}")
        if self.end is not None:
            parts.append(f"before:{self.end.isoformat()}")
        return " ".join(parts)


def partition_policy(time_range: Union[TimeRange, str, None]) -> Tuple[int, int]:
    """Return ``(days, partitions)`` for a range, falling back to a single day."""
    parsed = TimeRange.parse(time_range)
    if parsed is None:
        logger.warning(f"Unrecognized time range {time_range!r}; using a single 1-day window")
        return FALLBACK_POLICY
    return PARTITION_POLICY[parsed]


def partition_time_range(
    time_range: Union[TimeRange, str, None],
    now: Optional[datetime] = None
) -> List[TimeWindow]:
    """
    Compute the query windows for a time range.

    Args:
        time_range: One of the supported range tokens
        now: Reference instant, defaults to the current UTC time

    Returns:
        Contiguous windows ordered from most recent to oldest
    """
    days, count = partition_policy(time_range)
    width = math.ceil(days / count)

    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    today = now.date()

    windows = []
    for index in range(count):
        start = today - timedelta(days=width * (index + 1))
        end = None if index == 0 else today - timedelta(days=width * index)
        windows.append(TimeWindow(start=start, end=end))

    return windows


def build_query(topic: str, window: Optional[TimeWindow] = None) -> str:
    """Append the window's date operators to the topic text."""
    topic = topic.strip()
    if window is None:
        return topic
    clause = window.to_query_clause()
    return f"{topic} {clause}" if clause else topic
