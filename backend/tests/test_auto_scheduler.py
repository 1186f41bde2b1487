import pytest

from focus_engine.auto_scheduler import AutoScheduler, batch_order, build_reason
from focus_engine.errors import NoSlotAvailable
from focus_engine.models import (
    CandidateSlot, Category, Priority, ProductivityProfile, TaskRequest,
)


@pytest.fixture
def scheduler(settings) -> AutoScheduler:
    return AutoScheduler(settings)


@pytest.fixture
def peak_nine() -> ProductivityProfile:
    return ProductivityProfile(peak_hours=[9], total_blocks=20, completed_blocks=18)


def test_task_request_defaults() -> None:
    task = TaskRequest(title="Inbox zero")

    assert task.duration_minutes == 25
    assert task.category == Category.WORK
    assert task.priority == Priority.MEDIUM


def test_longer_task_gets_peak_hour_first(scheduler, peak_nine, today, assert_no_overlap) -> None:
    tasks = [
        TaskRequest(title="Email", category=Category.WORK, duration_minutes=30),
        TaskRequest(title="Report", category=Category.WORK, duration_minutes=60),
    ]

    result = scheduler.schedule_many(tasks, today, [], peak_nine)

    assert [s.title for s in result.placed] == ["Report", "Email"]
    report, email = result.placed
    assert (report.hour, report.start_minute) == (9, 0)
    assert (email.hour, email.start_minute) == (10, 0)
    assert result.unplaced == []
    assert_no_overlap([
        (s.hour * 60 + s.start_minute, s.hour * 60 + s.start_minute + s.duration_minutes)
        for s in result.placed
    ])


def test_batch_is_deterministic(scheduler, peak_nine, make_block, today) -> None:
    existing = [make_block(hour=10, duration=90), make_block(hour=15, duration=30, category=Category.MEETING)]
    tasks = [
        TaskRequest(title="Deep dive", duration_minutes=90),
        TaskRequest(title="Stretch", category=Category.EXERCISE, duration_minutes=20),
        TaskRequest(title="Course", category=Category.LEARNING, duration_minutes=45),
        TaskRequest(title="Pause", category=Category.BREAK, duration_minutes=15),
    ]

    first = scheduler.schedule_many(tasks, today, existing, peak_nine)
    second = scheduler.schedule_many(tasks, today, existing, peak_nine)

    assert first == second


def test_batch_never_overlaps_existing_or_itself(scheduler, make_block, today, assert_no_overlap) -> None:
    existing = [
        make_block(hour=8, duration=60),
        make_block(hour=12, duration=45, category=Category.MEETING),
        make_block(hour=17, duration=120, category=Category.PERSONAL),
    ]
    tasks = [TaskRequest(title=f"Task {i}", duration_minutes=d) for i, d in enumerate([90, 60, 45, 30, 25, 25, 15])]

    result = scheduler.schedule_many(tasks, today, existing)

    assert len(result.placed) == len(tasks)
    intervals = [(b.start, b.end) for b in existing]
    intervals += [(s.to_block().start, s.to_block().end) for s in result.placed]
    assert_no_overlap(intervals)


def test_unplaceable_tasks_are_reported_not_raised(scheduler, make_block, today) -> None:
    existing = [
        make_block(hour=6, duration=600),
        make_block(hour=17, duration=300, category=Category.MEETING),
    ]
    first = TaskRequest(title="First", duration_minutes=45)
    second = TaskRequest(title="Second", duration_minutes=45)
    too_long = TaskRequest(title="Too long", duration_minutes=120)

    result = scheduler.schedule_many([first, second, too_long], today, existing)

    assert [s.title for s in result.placed] == ["First"]
    assert result.unplaced == [too_long, second]
    assert not result.success


def test_priority_breaks_duration_ties() -> None:
    low = TaskRequest(title="low", duration_minutes=30, priority=Priority.LOW)
    high = TaskRequest(title="high", duration_minutes=30, priority=Priority.HIGH)
    long = TaskRequest(title="long", duration_minutes=60, priority=Priority.LOW)
    medium = TaskRequest(title="medium", duration_minutes=30)

    assert [t.title for t in batch_order([low, high, long, medium])] == ["long", "high", "medium", "low"]


def test_schedule_one_raises_when_day_is_full(scheduler, make_block, today) -> None:
    existing = [
        make_block(hour=6, duration=120),
        make_block(hour=10, duration=240, category=Category.MEETING),
        make_block(hour=16, duration=240),
    ]
    task = TaskRequest(title="Workshop", duration_minutes=180)

    with pytest.raises(NoSlotAvailable) as exc_info:
        scheduler.schedule_one(task, today, existing)

    assert exc_info.value.duration_minutes == 180
    assert exc_info.value.target_date == today
    assert "longest free gap is 120 minutes" in str(exc_info.value)


def test_schedule_one_returns_alternatives(scheduler, peak_nine, today, settings) -> None:
    suggestion = scheduler.schedule_one(TaskRequest(title="Plan", duration_minutes=50), today, [], peak_nine)

    assert (suggestion.hour, suggestion.start_minute) == (9, 0)
    assert 0 < len(suggestion.alternatives) <= settings.alternatives_count
    assert all(a.score <= suggestion.score for a in suggestion.alternatives)
    assert 0.0 <= suggestion.confidence <= 1.0
    assert "peak focus hour (09:00)" in suggestion.reason


def test_break_reason_mentions_recovery(scheduler, make_block, today) -> None:
    existing = [make_block(hour=9, duration=60)]

    suggestion = scheduler.schedule_one(
        TaskRequest(title="Walk", category=Category.BREAK, duration_minutes=15), today, existing
    )

    assert (suggestion.hour, suggestion.start_minute) == (10, 0)
    assert suggestion.reason.startswith("Placed after existing work blocks to allow recovery time")


def test_fallback_reason_without_heuristics() -> None:
    slot = CandidateSlot(start=360, duration_minutes=30, gap_start=360, gap_end=1320, score=50)
    task = TaskRequest(title="Read", category=Category.LEARNING, duration_minutes=30)

    assert build_reason(slot, task) == "First available slot that fits your 30 minute learning task."


def test_nearly_full_day_has_no_three_hour_slot(scheduler, make_block, today) -> None:
    # 14.5 of the 16 window hours are booked, leaving three 30-minute gaps
    existing = [
        make_block(hour=6, duration=120),
        make_block(hour=8, minute=30, duration=330, category=Category.MEETING),
        make_block(hour=14, minute=30, duration=270),
        make_block(hour=19, minute=30, duration=150, category=Category.PERSONAL),
    ]
    busy = sum(b.duration_minutes for b in existing)
    assert busy == 870

    with pytest.raises(NoSlotAvailable) as exc_info:
        scheduler.schedule_one(TaskRequest(title="Workshop", duration_minutes=180), today, existing)

    assert "longest free gap is 30 minutes" in str(exc_info.value)


def test_high_priority_task_goes_to_the_morning(scheduler, today) -> None:
    urgent = TaskRequest(title="Taxes", category=Category.UNCATEGORIZED, duration_minutes=30, priority=Priority.HIGH)
    routine = TaskRequest(title="Taxes", category=Category.UNCATEGORIZED, duration_minutes=30)

    assert scheduler.schedule_one(routine, today, []).hour == 6
    suggestion = scheduler.schedule_one(urgent, today, [])
    assert (suggestion.hour, suggestion.start_minute) == (9, 0)
    assert suggestion.reason == "Keeps high-priority work in your morning hours."
