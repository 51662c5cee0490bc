from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import date, datetime, time, timedelta, tzinfo

from tzlocal import get_localzone

from .duration import now_ms
from .models import ActivityInstance, Completed

DEFAULT_DAY_START_HOUR = 4


def logical_date(timestamp_ms: int, tz: tzinfo, start_hour: int = DEFAULT_DAY_START_HOUR) -> date:
    """Return the calendar date of the logical day containing the timestamp.

    Local times before ``start_hour`` still belong to the previous day, so late-night work is not
    split off at midnight.
    """
    local = datetime.fromtimestamp(timestamp_ms // 1000, tz)
    if local.hour < start_hour:
        return local.date() - timedelta(days=1)
    return local.date()


def boundary_for_date(day_value: date, tz: tzinfo, start_hour: int = DEFAULT_DAY_START_HOUR) -> int:
    boundary_local = datetime.combine(day_value, time(hour=start_hour), tzinfo=tz)
    return int(boundary_local.timestamp()) * 1000


def get_sorted_instances(instances: Iterable[ActivityInstance]) -> list[ActivityInstance]:
    # Incomplete first, then most recently touched; sorted() keeps ties in their given order.
    return sorted(instances, key=lambda item: (item.completed, -item.last_active_at))


class DayBoundaryClassifier:
    def __init__(
        self,
        tz: tzinfo | None = None,
        start_hour: int = DEFAULT_DAY_START_HOUR,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.tz = tz or get_localzone()
        self.start_hour = start_hour
        self.clock = clock

    def get_current_day_boundary(self) -> int:
        today = logical_date(self.clock(), self.tz, self.start_hour)
        return boundary_for_date(today, self.tz, self.start_hour)

    def is_current_day(self, timestamp_ms: int) -> bool:
        return timestamp_ms >= self.get_current_day_boundary()

    def logical_day_key(self, timestamp_ms: int | None = None) -> str:
        current = timestamp_ms if timestamp_ms is not None else self.clock()
        return logical_date(current, self.tz, self.start_hour).isoformat()

    def day_bounds(self, day_key: str) -> tuple[int, int]:
        day_value = date.fromisoformat(day_key)
        start = boundary_for_date(day_value, self.tz, self.start_hour)
        end = boundary_for_date(day_value + timedelta(days=1), self.tz, self.start_hour)
        return start, end

    def current_day_instances(self, instances: Iterable[ActivityInstance]) -> list[ActivityInstance]:
        boundary = self.get_current_day_boundary()
        return [
            item
            for item in instances
            if not isinstance(item.completion, Completed) or item.completion.at >= boundary
        ]

    def can_restart(self, instance: ActivityInstance) -> bool:
        completion = instance.completion
        return isinstance(completion, Completed) and completion.at >= self.get_current_day_boundary()
