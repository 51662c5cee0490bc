from __future__ import annotations

import logging
from dataclasses import replace

from .errors import RecordNotFoundError
from .models import ActivityLog
from .schemas import log_from_wire, log_to_wire
from .store import SessionStore

ACTIVITY_LOG_NAMESPACE = "activity-log"
ACTIVITY_LOGS_NAMESPACE = "activity-logs"
ALL_KEY = "all"

_UNSET = object()


class ActivityLogArchive:
    """Finalized logs, indexed globally and per activity."""

    def __init__(self, store: SessionStore, logger: logging.Logger | None = None) -> None:
        self.store = store
        self.logger = logger or logging.getLogger(__name__)

    async def append(self, log: ActivityLog) -> None:
        await self.store.set(ACTIVITY_LOG_NAMESPACE, log.id, log_to_wire(log))
        await self._add_to_index(ALL_KEY, log.id)
        await self._add_to_index(log.activity_id, log.id)
        self.logger.debug("Archived log %s for activity %s", log.id, log.activity_id)

    async def get_log(self, log_id: str) -> ActivityLog | None:
        data = await self.store.get(ACTIVITY_LOG_NAMESPACE, log_id)
        if data is None:
            return None
        return log_from_wire(data)

    async def list_log_ids(self, activity_id: str | None = None) -> list[str]:
        ids = await self.store.get(ACTIVITY_LOGS_NAMESPACE, activity_id or ALL_KEY)
        return list(ids or [])

    async def list_logs(self, activity_id: str | None = None) -> list[ActivityLog]:
        logs: list[ActivityLog] = []
        for log_id in await self.list_log_ids(activity_id):
            log = await self.get_log(log_id)
            # Index entries can outlive their record if a delete was interrupted.
            if log is None:
                self.logger.debug("Skipping dangling log id %s", log_id)
                continue
            logs.append(log)
        return logs

    async def update_log(self, log_id: str, *, notes: object = _UNSET) -> ActivityLog:
        existing = await self.get_log(log_id)
        if existing is None:
            raise RecordNotFoundError("Activity log")

        updated = existing
        if notes is not _UNSET:
            updated = replace(updated, notes=notes)

        await self.store.set(ACTIVITY_LOG_NAMESPACE, log_id, log_to_wire(updated))
        return updated

    async def delete_log(self, log_id: str) -> None:
        existing = await self.get_log(log_id)
        await self.store.remove(ACTIVITY_LOG_NAMESPACE, log_id)
        await self._remove_from_index(ALL_KEY, log_id)
        if existing is not None:
            await self._remove_from_index(existing.activity_id, log_id)

    async def _add_to_index(self, index_key: str, log_id: str) -> None:
        # Re-read the list right before writing so appends are never lost to a stale copy.
        ids = await self.list_log_ids(index_key)
        if log_id in ids:
            return
        await self.store.set(ACTIVITY_LOGS_NAMESPACE, index_key, [*ids, log_id])

    async def _remove_from_index(self, index_key: str, log_id: str) -> None:
        ids = await self.list_log_ids(index_key)
        if log_id not in ids:
            return
        await self.store.set(ACTIVITY_LOGS_NAMESPACE, index_key, [item for item in ids if item != log_id])
