from daybook.duration import calculate_accumulated_duration, format_duration
from daybook.models import ActivityLog, ClosedPause, OpenPause


def test_format_duration_hh_mm_ss() -> None:
    assert format_duration(0) == "00:00:00"
    assert format_duration(3_661_999) == "01:01:01"
    assert format_duration(100 * 3600 * 1000) == "100:00:00"
    assert format_duration(-5_000) == "00:00:00"


def test_duration_subtracts_closed_pauses() -> None:
    log = ActivityLog(
        id="log-1",
        activity_id="a",
        start_time=1_000,
        pause_intervals=(
            ClosedPause(paused_at=2_000, resumed_at=3_000),
            ClosedPause(paused_at=5_000, resumed_at=5_500),
        ),
    )

    assert calculate_accumulated_duration(log, now=11_000) == 10_000 - 1_000 - 500


def test_open_pause_freezes_duration() -> None:
    log = ActivityLog(
        id="log-1",
        activity_id="a",
        start_time=0,
        pause_intervals=(ClosedPause(paused_at=1_000, resumed_at=2_000), OpenPause(paused_at=4_000)),
    )

    values = [calculate_accumulated_duration(log, now=now) for now in (4_000, 9_000, 60_000)]

    assert values == [3_000, 3_000, 3_000]


def test_duration_is_non_decreasing_while_running() -> None:
    log = ActivityLog(id="log-1", activity_id="a", start_time=0, pause_intervals=(ClosedPause(1_000, 2_000),))

    values = [calculate_accumulated_duration(log, now=now) for now in range(2_000, 10_000, 750)]

    assert values == sorted(values)
    assert values[0] == 1_000


def test_duration_never_negative() -> None:
    log = ActivityLog(id="log-1", activity_id="a", start_time=10_000)

    assert calculate_accumulated_duration(log, now=5_000) == 0


def test_log_pause_helpers_are_idempotent() -> None:
    log = ActivityLog(id="log-1", activity_id="a", start_time=0)

    assert log.resumed(10) is log
    paused = log.paused(10)
    assert paused.paused(20) is paused
    assert paused.resumed(30).pause_intervals == (ClosedPause(paused_at=10, resumed_at=30),)
