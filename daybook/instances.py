from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterable
from dataclasses import replace

from .day_boundary import DayBoundaryClassifier, get_sorted_instances
from .duration import now_ms
from .errors import InstanceNotCompletedError, PreviousDayRestartError, RecordNotFoundError
from .models import ActivityInstance, Completed, Incomplete
from .schemas import instance_from_wire, instance_to_wire
from .store import SessionStore

ACTIVITY_INSTANCE_NAMESPACE = "activity-instance"
ACTIVITY_INSTANCES_NAMESPACE = "activity-instances"
ALL_KEY = "all"

_UNSET = object()


class ActivityInstanceService:
    def __init__(
        self,
        store: SessionStore,
        classifier: DayBoundaryClassifier | None = None,
        *,
        clock: Callable[[], int] = now_ms,
        logger: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self.clock = clock
        self.classifier = classifier or DayBoundaryClassifier(clock=clock)
        self.logger = logger or logging.getLogger(__name__)

    async def create_instance(
        self,
        title: str,
        type_id: str,
        *,
        description: str | None = None,
    ) -> ActivityInstance:
        now = self.clock()
        instance = ActivityInstance(
            id=uuid.uuid4().hex,
            title=title,
            description=description,
            type_id=type_id,
            last_active_at=now,
            created_at=now,
        )
        await self._save(instance)

        ids = await self._list_ids()
        await self.store.set(ACTIVITY_INSTANCES_NAMESPACE, ALL_KEY, [*ids, instance.id])
        self.logger.info("Created instance %s (%s)", instance.id, title)
        return instance

    async def get_instance(self, instance_id: str) -> ActivityInstance | None:
        data = await self.store.get(ACTIVITY_INSTANCE_NAMESPACE, instance_id)
        if data is None:
            return None
        return instance_from_wire(data)

    async def list_instances(self) -> list[ActivityInstance]:
        instances: list[ActivityInstance] = []
        for instance_id in await self._list_ids():
            instance = await self.get_instance(instance_id)
            if instance is not None:
                instances.append(instance)
        return instances

    async def update_instance(
        self,
        instance_id: str,
        *,
        title: object = _UNSET,
        description: object = _UNSET,
        type_id: object = _UNSET,
    ) -> ActivityInstance:
        existing = await self._require(instance_id)

        changes: dict[str, object] = {}
        if title is not _UNSET:
            changes["title"] = title
        if description is not _UNSET:
            changes["description"] = description
        if type_id is not _UNSET:
            changes["type_id"] = type_id

        updated = replace(existing, **changes)
        await self._save(updated)
        return updated

    async def delete_instance(self, instance_id: str) -> None:
        await self.store.remove(ACTIVITY_INSTANCE_NAMESPACE, instance_id)
        ids = await self._list_ids()
        await self.store.set(ACTIVITY_INSTANCES_NAMESPACE, ALL_KEY, [item for item in ids if item != instance_id])
        self.logger.info("Deleted instance %s", instance_id)

    async def complete_instance(self, instance_id: str) -> ActivityInstance:
        existing = await self._require(instance_id)
        if existing.completed:
            return existing
        updated = replace(existing, completion=Completed(at=self.clock()))
        await self._save(updated)
        return updated

    async def uncomplete_instance(self, instance_id: str) -> ActivityInstance:
        existing = await self._require(instance_id)
        if not existing.completed:
            return existing
        updated = replace(existing, completion=Incomplete())
        await self._save(updated)
        return updated

    async def restart_instance(self, instance_id: str) -> ActivityInstance:
        existing = await self._require(instance_id)
        if not existing.completed:
            raise InstanceNotCompletedError()
        if not self.classifier.can_restart(existing):
            raise PreviousDayRestartError()

        updated = replace(existing, completion=Incomplete())
        await self._save(updated)
        self.logger.info("Restarted instance %s", instance_id)
        return updated

    async def touch_instance(
        self,
        instance_id: str,
        *,
        now: int | None = None,
        missing_ok: bool = False,
    ) -> ActivityInstance | None:
        existing = await self.get_instance(instance_id)
        if existing is None:
            if missing_ok:
                self.logger.debug("Ignoring touch for unknown instance %s", instance_id)
                return None
            raise RecordNotFoundError("Activity instance")

        updated = replace(existing, last_active_at=now if now is not None else self.clock())
        await self._save(updated)
        return updated

    async def current_day_instances(self) -> list[ActivityInstance]:
        return self.classifier.current_day_instances(await self.list_instances())

    def get_sorted_instances(self, instances: Iterable[ActivityInstance]) -> list[ActivityInstance]:
        return get_sorted_instances(instances)

    async def _require(self, instance_id: str) -> ActivityInstance:
        existing = await self.get_instance(instance_id)
        if existing is None:
            raise RecordNotFoundError("Activity instance")
        return existing

    async def _save(self, instance: ActivityInstance) -> None:
        await self.store.set(ACTIVITY_INSTANCE_NAMESPACE, instance.id, instance_to_wire(instance))

    async def _list_ids(self) -> list[str]:
        ids = await self.store.get(ACTIVITY_INSTANCES_NAMESPACE, ALL_KEY)
        return list(ids or [])
