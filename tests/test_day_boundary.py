from datetime import date, datetime
from zoneinfo import ZoneInfo

from daybook.day_boundary import (
    DayBoundaryClassifier,
    boundary_for_date,
    get_sorted_instances,
    logical_date,
)
from daybook.models import ActivityInstance, Completed, Incomplete

BERLIN = ZoneInfo("Europe/Berlin")


def local_ms(tz, *parts: int) -> int:
    return int(datetime(*parts, tzinfo=tz).timestamp()) * 1000


def classifier_at(tz, *parts: int) -> DayBoundaryClassifier:
    now = local_ms(tz, *parts)
    return DayBoundaryClassifier(tz=tz, clock=lambda: now)


def make_instance(instance_id: str, last_active_at: int, completed_at: int | None = None) -> ActivityInstance:
    return ActivityInstance(
        id=instance_id,
        title=instance_id,
        type_id="work",
        last_active_at=last_active_at,
        created_at=0,
        completion=Completed(at=completed_at) if completed_at is not None else Incomplete(),
    )


def test_boundary_before_four_am_is_previous_day() -> None:
    classifier = classifier_at(BERLIN, 2026, 1, 23, 3, 59, 59)

    assert classifier.get_current_day_boundary() == local_ms(BERLIN, 2026, 1, 22, 4, 0, 0)


def test_boundary_at_four_am_is_inclusive() -> None:
    classifier = classifier_at(BERLIN, 2026, 1, 23, 4, 0, 0)

    assert classifier.get_current_day_boundary() == local_ms(BERLIN, 2026, 1, 23, 4, 0, 0)
    assert classifier.is_current_day(local_ms(BERLIN, 2026, 1, 23, 4, 0, 0)) is True
    assert classifier.is_current_day(local_ms(BERLIN, 2026, 1, 23, 3, 59, 59)) is False


def test_late_night_belongs_to_previous_logical_day() -> None:
    classifier = classifier_at(BERLIN, 2026, 1, 24, 1, 30, 0)

    assert classifier.logical_day_key() == "2026-01-23"
    assert classifier.logical_day_key(local_ms(BERLIN, 2026, 1, 24, 4, 0, 0)) == "2026-01-24"


def test_boundary_respects_dst_transition() -> None:
    new_york = ZoneInfo("America/New_York")
    # Clocks jump from 02:00 to 03:00 on 2026-03-08.
    now = local_ms(new_york, 2026, 3, 8, 3, 30, 0)

    assert logical_date(now, new_york) == date(2026, 3, 7)
    assert boundary_for_date(date(2026, 3, 8), new_york) - boundary_for_date(date(2026, 3, 7), new_york) == 23 * 3600 * 1000


def test_custom_start_hour() -> None:
    now = local_ms(BERLIN, 2026, 1, 23, 5, 0, 0)
    classifier = DayBoundaryClassifier(tz=BERLIN, start_hour=6, clock=lambda: now)

    assert classifier.get_current_day_boundary() == local_ms(BERLIN, 2026, 1, 22, 6, 0, 0)


def test_day_bounds_cover_one_logical_day() -> None:
    classifier = classifier_at(BERLIN, 2026, 1, 23, 12, 0, 0)

    start, end = classifier.day_bounds("2026-01-23")

    assert start == local_ms(BERLIN, 2026, 1, 23, 4, 0, 0)
    assert end == local_ms(BERLIN, 2026, 1, 24, 4, 0, 0)


def test_current_day_instances_keep_incomplete_and_today_completed() -> None:
    classifier = classifier_at(BERLIN, 2026, 1, 23, 9, 0, 0)
    incomplete = make_instance("open", local_ms(BERLIN, 2026, 1, 10, 9, 0, 0))
    today = make_instance("today", 0, completed_at=local_ms(BERLIN, 2026, 1, 23, 4, 30, 0))
    last_night = make_instance("late", 0, completed_at=local_ms(BERLIN, 2026, 1, 23, 2, 0, 0))

    assert classifier.current_day_instances([incomplete, today, last_night]) == [incomplete, today]
    assert classifier.can_restart(today) is True
    assert classifier.can_restart(last_night) is False
    assert classifier.can_restart(incomplete) is False


def test_sorted_instances_put_incomplete_first_then_recent() -> None:
    completed_newer = make_instance("completed-newer", 300, completed_at=300)
    incomplete = make_instance("incomplete", 100)
    completed_older = make_instance("completed-older", 200, completed_at=200)

    result = get_sorted_instances([completed_newer, incomplete, completed_older])

    assert result == [incomplete, completed_newer, completed_older]


def test_sorted_instances_order_each_group_by_last_active() -> None:
    first = make_instance("a", 100)
    second = make_instance("b", 500)
    tied = make_instance("c", 500)

    assert [item.id for item in get_sorted_instances([first, second, tied])] == ["b", "c", "a"]


def test_default_zone_uses_host_rules_across_dst_change(monkeypatch) -> None:
    new_york = ZoneInfo("America/New_York")
    monkeypatch.setattr("daybook.day_boundary.get_localzone", lambda: new_york)
    # 03:00 EST on 2026-11-01, after clocks fell back from EDT at 02:00.
    now = local_ms(new_york, 2026, 11, 1, 3, 0, 0)

    classifier = DayBoundaryClassifier(clock=lambda: now)

    assert classifier.tz is new_york
    assert classifier.get_current_day_boundary() == local_ms(new_york, 2026, 10, 31, 4, 0, 0) == 1_793_433_600_000


def test_default_zone_keeps_early_completion_restartable(monkeypatch) -> None:
    new_york = ZoneInfo("America/New_York")
    monkeypatch.setattr("daybook.day_boundary.get_localzone", lambda: new_york)
    now = local_ms(new_york, 2026, 11, 1, 3, 0, 0)
    classifier = DayBoundaryClassifier(clock=lambda: now)
    early = make_instance("early", 0, completed_at=local_ms(new_york, 2026, 10, 31, 4, 30, 0))
    before = make_instance("before", 0, completed_at=local_ms(new_york, 2026, 10, 31, 3, 59, 59))

    assert classifier.current_day_instances([early, before]) == [early]
    assert classifier.can_restart(early) is True
    assert classifier.can_restart(before) is False
