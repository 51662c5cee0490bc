from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class OpenPause:
    """A pause that has not been resumed yet; only ever the trailing interval of a log."""

    paused_at: int

    def close(self, resumed_at: int) -> ClosedPause:
        return ClosedPause(paused_at=self.paused_at, resumed_at=resumed_at)


@dataclass(frozen=True, slots=True)
class ClosedPause:
    paused_at: int
    resumed_at: int


PauseInterval = OpenPause | ClosedPause


@dataclass(frozen=True, slots=True)
class ActivityLog:
    """One timed session against an activity. Timestamps are epoch milliseconds."""

    id: str
    activity_id: str
    start_time: int
    end_time: int | None = None
    duration: int = 0
    pause_intervals: tuple[PauseInterval, ...] = ()
    notes: str | None = None

    @property
    def is_paused(self) -> bool:
        return bool(self.pause_intervals) and isinstance(self.pause_intervals[-1], OpenPause)

    def paused(self, paused_at: int) -> ActivityLog:
        if self.is_paused:
            return self
        return replace(self, pause_intervals=self.pause_intervals + (OpenPause(paused_at),))

    def resumed(self, resumed_at: int) -> ActivityLog:
        trailing = self.pause_intervals[-1] if self.pause_intervals else None
        if not isinstance(trailing, OpenPause):
            return self
        return replace(self, pause_intervals=self.pause_intervals[:-1] + (trailing.close(resumed_at),))


@dataclass(frozen=True, slots=True)
class Session:
    current_log: ActivityLog
    paused_activity_stack: tuple[ActivityLog, ...] = ()

    @property
    def is_paused(self) -> bool:
        return self.current_log.is_paused


@dataclass(frozen=True, slots=True)
class Incomplete:
    pass


@dataclass(frozen=True, slots=True)
class Completed:
    at: int


Completion = Incomplete | Completed


@dataclass(frozen=True, slots=True)
class ActivityInstance:
    id: str
    title: str
    type_id: str
    last_active_at: int
    created_at: int
    completion: Completion = Incomplete()
    description: str | None = None

    @property
    def completed(self) -> bool:
        return isinstance(self.completion, Completed)

    @property
    def completed_at(self) -> int | None:
        if isinstance(self.completion, Completed):
            return self.completion.at
        return None


@dataclass(frozen=True, slots=True)
class ActivityStats:
    activity_id: str
    total_duration: int
    session_count: int
    average_duration: int
    last_session_date: int
