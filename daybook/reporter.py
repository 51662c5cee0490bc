from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable

from .archive import ActivityLogArchive
from .day_boundary import DayBoundaryClassifier
from .duration import format_duration
from .instances import ActivityInstanceService
from .models import ActivityLog, ActivityStats


def build_activity_stats(logs: Iterable[ActivityLog]) -> list[ActivityStats]:
    """Aggregate finalized logs per activity, largest total first."""
    grouped: dict[str, list[ActivityLog]] = defaultdict(list)
    for log in logs:
        # Unfinished logs carry no meaningful duration yet.
        if log.end_time is None:
            continue
        grouped[log.activity_id].append(log)

    stats = []
    for activity_id, items in grouped.items():
        total = sum(item.duration for item in items)
        stats.append(
            ActivityStats(
                activity_id=activity_id,
                total_duration=total,
                session_count=len(items),
                average_duration=total // len(items),
                last_session_date=max(item.start_time for item in items),
            )
        )

    stats.sort(key=lambda item: (-item.total_duration, item.activity_id))
    return stats


class Reporter:
    def __init__(
        self,
        archive: ActivityLogArchive,
        classifier: DayBoundaryClassifier,
        instances: ActivityInstanceService | None = None,
    ) -> None:
        self.archive = archive
        self.classifier = classifier
        self.instances = instances

    async def build_stats_for_day(self, day_key: str) -> list[ActivityStats]:
        start, end = self.classifier.day_bounds(day_key)
        logs = [log for log in await self.archive.list_logs() if start <= log.start_time < end]
        return build_activity_stats(logs)

    async def display_name(self, activity_id: str) -> str:
        instance = None
        if self.instances is not None:
            instance = await self.instances.get_instance(activity_id)
        # Fall back to the raw id once an instance has been deleted.
        return instance.title if instance else f"Activity {activity_id}"

    def build_report_content(self, day_key: str, rows: list[tuple[str, ActivityStats]]) -> str:
        header = f"Daily Activity - {day_key}"

        if not rows:
            return f"{header}\nNo tracked activity for {day_key}."

        lines = [
            f"- {name}: {format_duration(item.total_duration)} ({item.session_count} sessions)"
            for name, item in rows
        ]
        total = sum(item.total_duration for _, item in rows)
        lines.append(f"Total: {format_duration(total)}")
        return "\n".join([header, *lines])

    async def build_report(self, day_key: str | None = None) -> str:
        target_day = day_key or self.classifier.logical_day_key()
        stats = await self.build_stats_for_day(target_day)
        rows = [(await self.display_name(item.activity_id), item) for item in stats]
        return self.build_report_content(target_day, rows)
