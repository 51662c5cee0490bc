from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

from dotenv import load_dotenv

from .archive import ActivityLogArchive
from .config import Config, load_config
from .day_boundary import DayBoundaryClassifier
from .duration import format_duration, now_ms
from .engine import ActivitySessionEngine
from .instances import ActivityInstanceService
from .reporter import Reporter
from .store import SessionStore, SqliteStore


@dataclass(slots=True)
class Daybook:
    store: SessionStore
    classifier: DayBoundaryClassifier
    archive: ActivityLogArchive
    instances: ActivityInstanceService
    engine: ActivitySessionEngine
    reporter: Reporter


def build_daybook(config: Config, store: SessionStore, clock: Callable[[], int] = now_ms) -> Daybook:
    classifier = DayBoundaryClassifier(tz=config.timezone, start_hour=config.day_start_hour, clock=clock)
    archive = ActivityLogArchive(store)
    instances = ActivityInstanceService(store, classifier, clock=clock)
    engine = ActivitySessionEngine(store, archive, instances=instances, clock=clock)
    reporter = Reporter(archive, classifier, instances)
    return Daybook(
        store=store,
        classifier=classifier,
        archive=archive,
        instances=instances,
        engine=engine,
        reporter=reporter,
    )


async def describe_status(daybook: Daybook) -> list[str]:
    session = await daybook.engine.load()
    lines = [f"Logical day: {daybook.classifier.logical_day_key()}"]

    if session is None:
        lines.append("No active session")
        return lines

    state = "paused" if session.is_paused else "running"
    lines.append(
        f"Current activity: {session.current_log.activity_id} ({state}, {format_duration(daybook.engine.elapsed())})"
    )
    lines.append(f"Suspended activities: {len(session.paused_activity_stack)}")
    return lines


async def run_status(config: Config) -> list[str]:
    store = SqliteStore(config.db_path)
    store.initialize()
    try:
        daybook = build_daybook(config, store)
        lines = await describe_status(daybook)
        lines.append(await daybook.reporter.build_report())
        return lines
    finally:
        store.close()


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def main() -> None:
    load_dotenv()
    config = load_config()
    configure_logging(config.log_level)

    logger = logging.getLogger("daybook")
    for line in asyncio.run(run_status(config)):
        logger.info("%s", line)


if __name__ == "__main__":
    main()
