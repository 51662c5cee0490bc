from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import replace
from typing import TYPE_CHECKING

from .archive import ActivityLogArchive
from .duration import calculate_accumulated_duration, now_ms
from .errors import InvalidStackIndexError
from .models import ActivityLog, Session
from .schemas import session_from_wire, session_to_wire
from .store import SessionStore

if TYPE_CHECKING:
    from .instances import ActivityInstanceService

SESSION_NAMESPACE = "activity-session"
SESSION_KEY = "current"


def new_record_id() -> str:
    return uuid.uuid4().hex


class ActivitySessionEngine:
    """Owns the single live session record and its stack of suspended logs.

    Every operation reads the stored session, builds the complete next state in memory and writes
    it back with one store call, so a failed write leaves the previous record in place.
    """

    def __init__(
        self,
        store: SessionStore,
        archive: ActivityLogArchive | None = None,
        *,
        instances: ActivityInstanceService | None = None,
        clock: Callable[[], int] = now_ms,
        logger: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self.archive = archive or ActivityLogArchive(store)
        self.instances = instances
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)
        self.session: Session | None = None
        self.loading = True

    async def load(self) -> Session | None:
        return await self._read_session()

    def elapsed(self, now: int | None = None) -> int:
        if self.session is None:
            return 0
        return calculate_accumulated_duration(self.session.current_log, now if now is not None else self.clock())

    def suspend_current(self, session: Session, now: int) -> ActivityLog:
        """Open a pause on the current log unless it is already paused."""
        return session.current_log.paused(now)

    async def start(self, activity_id: str) -> Session:
        session = await self._read_session()
        return await self._begin(session, activity_id)

    async def switch_activity(self, activity_id: str) -> Session:
        session = await self._read_session()
        if session is None:
            self.logger.debug("No session to switch from; starting %s", activity_id)
        return await self._begin(session, activity_id)

    async def pause(self) -> Session | None:
        session = await self._read_session()
        if session is None or session.is_paused:
            self.logger.debug("Ignoring pause: no running session")
            return session

        updated = replace(session, current_log=self.suspend_current(session, self.clock()))
        await self._write_session(updated)
        self.logger.info("Paused log %s", updated.current_log.id)
        return updated

    async def resume(self) -> Session | None:
        session = await self._read_session()
        if session is None or not session.is_paused:
            self.logger.debug("Ignoring resume: no paused session")
            return session

        now = self.clock()
        updated = replace(session, current_log=session.current_log.resumed(now))
        await self._write_session(updated)
        self.logger.info("Resumed log %s", updated.current_log.id)
        await self._touch(updated.current_log.activity_id, now)
        return updated

    async def stop(self) -> ActivityLog | None:
        session = await self._read_session()
        if session is None:
            self.logger.debug("Ignoring stop: no session")
            return None

        now = self.clock()
        final_log = replace(
            session.current_log,
            end_time=now,
            duration=calculate_accumulated_duration(session.current_log, now),
        )

        await self.archive.append(final_log)
        await self.store.remove(SESSION_NAMESPACE, SESSION_KEY)
        self.session = None

        if session.paused_activity_stack:
            self.logger.info("Discarded %d stacked logs", len(session.paused_activity_stack))
        self.logger.info("Stopped log %s: duration=%sms", final_log.id, final_log.duration)
        return final_log

    async def resume_from_stack(self, index: int | None = None) -> Session | None:
        session = await self._read_session()
        if session is None:
            if index is not None:
                raise InvalidStackIndexError()
            self.logger.debug("Ignoring resume from stack: no session")
            return None

        stack = session.paused_activity_stack
        if index is None:
            if not stack:
                self.logger.debug("Ignoring resume from stack: stack is empty")
                return session
            index = len(stack) - 1
        elif index < 0 or index >= len(stack):
            raise InvalidStackIndexError()

        now = self.clock()
        target = stack[index]
        remaining = stack[:index] + stack[index + 1 :]

        updated = Session(
            current_log=target.resumed(now),
            paused_activity_stack=remaining + (self.suspend_current(session, now),),
        )
        await self._write_session(updated)
        self.logger.info("Resumed log %s from stack position %d", target.id, index)
        await self._touch(target.activity_id, now)
        return updated

    async def _begin(self, session: Session | None, activity_id: str) -> Session:
        now = self.clock()
        stack: tuple[ActivityLog, ...] = ()
        if session is not None:
            stack = session.paused_activity_stack + (self.suspend_current(session, now),)

        new_log = ActivityLog(id=new_record_id(), activity_id=activity_id, start_time=now)
        updated = Session(current_log=new_log, paused_activity_stack=stack)
        await self._write_session(updated)
        self.logger.info("Started log %s for activity %s (stack depth %d)", new_log.id, activity_id, len(stack))
        await self._touch(activity_id, now)
        return updated

    async def _touch(self, activity_id: str, now: int) -> None:
        if self.instances is None:
            return
        await self.instances.touch_instance(activity_id, now=now, missing_ok=True)

    async def _read_session(self) -> Session | None:
        data = await self.store.get(SESSION_NAMESPACE, SESSION_KEY)
        self.session = session_from_wire(data) if data is not None else None
        self.loading = False
        return self.session

    async def _write_session(self, session: Session) -> None:
        await self.store.set(SESSION_NAMESPACE, SESSION_KEY, session_to_wire(session))
        self.session = session
