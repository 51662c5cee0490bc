"""Wire records persisted in the store.

Field names and nesting follow the camelCase JSON shape already written by earlier clients, so
records round-trip without migration.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .models import (
    ActivityInstance,
    ActivityLog,
    ClosedPause,
    Completed,
    Completion,
    Incomplete,
    OpenPause,
    PauseInterval,
    Session,
)


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class PauseIntervalRecord(WireModel):
    paused_at: int
    resumed_at: int | None = None


class ActivityLogRecord(WireModel):
    id: str
    activity_id: str
    start_time: int
    end_time: int | None = None
    duration: int = 0
    pause_intervals: list[PauseIntervalRecord] = Field(default_factory=list)
    notes: str | None = None


class SessionRecord(WireModel):
    current_log: ActivityLogRecord
    is_paused: bool = False
    paused_activity_stack: list[ActivityLogRecord] = Field(default_factory=list)


class ActivityInstanceRecord(WireModel):
    id: str
    title: str
    description: str | None = None
    type_id: str
    completed: bool = False
    completed_at: int | None = None
    last_active_at: int
    created_at: int


def _pause_from_record(record: PauseIntervalRecord) -> PauseInterval:
    if record.resumed_at is None:
        return OpenPause(paused_at=record.paused_at)
    return ClosedPause(paused_at=record.paused_at, resumed_at=record.resumed_at)


def _pause_to_record(interval: PauseInterval) -> PauseIntervalRecord:
    if isinstance(interval, OpenPause):
        return PauseIntervalRecord(paused_at=interval.paused_at)
    return PauseIntervalRecord(paused_at=interval.paused_at, resumed_at=interval.resumed_at)


def _log_from_record(record: ActivityLogRecord) -> ActivityLog:
    return ActivityLog(
        id=record.id,
        activity_id=record.activity_id,
        start_time=record.start_time,
        end_time=record.end_time,
        duration=record.duration,
        pause_intervals=tuple(_pause_from_record(item) for item in record.pause_intervals),
        notes=record.notes,
    )


def _log_to_record(log: ActivityLog) -> ActivityLogRecord:
    return ActivityLogRecord(
        id=log.id,
        activity_id=log.activity_id,
        start_time=log.start_time,
        end_time=log.end_time,
        duration=log.duration,
        pause_intervals=[_pause_to_record(item) for item in log.pause_intervals],
        notes=log.notes,
    )


def log_from_wire(data: Any) -> ActivityLog:
    return _log_from_record(ActivityLogRecord.model_validate(data))


def log_to_wire(log: ActivityLog) -> dict[str, Any]:
    return _log_to_record(log).to_wire()


def session_from_wire(data: Any) -> Session:
    # isPaused is derived from the trailing pause interval rather than trusted from storage.
    record = SessionRecord.model_validate(data)
    return Session(
        current_log=_log_from_record(record.current_log),
        paused_activity_stack=tuple(_log_from_record(item) for item in record.paused_activity_stack),
    )


def session_to_wire(session: Session) -> dict[str, Any]:
    return SessionRecord(
        current_log=_log_to_record(session.current_log),
        is_paused=session.is_paused,
        paused_activity_stack=[_log_to_record(item) for item in session.paused_activity_stack],
    ).to_wire()


def instance_from_wire(data: Any) -> ActivityInstance:
    record = ActivityInstanceRecord.model_validate(data)
    completion: Completion = Incomplete()
    if record.completed:
        # A completed record without a timestamp predates every logical day.
        completion = Completed(at=record.completed_at if record.completed_at is not None else 0)
    return ActivityInstance(
        id=record.id,
        title=record.title,
        description=record.description,
        type_id=record.type_id,
        completion=completion,
        last_active_at=record.last_active_at,
        created_at=record.created_at,
    )


def instance_to_wire(instance: ActivityInstance) -> dict[str, Any]:
    return ActivityInstanceRecord(
        id=instance.id,
        title=instance.title,
        description=instance.description,
        type_id=instance.type_id,
        completed=instance.completed,
        completed_at=instance.completed_at,
        last_active_at=instance.last_active_at,
        created_at=instance.created_at,
    ).to_wire()
