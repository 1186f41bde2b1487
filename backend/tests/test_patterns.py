from focus_engine.models import Category, TimeBlock
from focus_engine.patterns import PatternAnalyzer, analyze


def test_empty_history_yields_zero_profile(today, settings) -> None:
    profile = analyze([], 30, today=today, settings=settings)

    assert profile.completion_rate == 0
    assert profile.peak_hours == []
    assert profile.category_distribution == {}
    assert profile.current_streak == 0
    assert profile.longest_streak == 0
    assert profile.total_blocks == 0
    assert profile.meeting_cluster_start is None


def test_completion_rate_rounds_and_ignores_blocks_outside_window(make_block, days_ago, today, settings) -> None:
    history = [
        make_block(day=days_ago(1), completed=True),
        make_block(day=days_ago(2), completed=True),
        make_block(day=days_ago(3), completed=False),
        make_block(day=days_ago(40), completed=False),
        make_block(day=days_ago(-1), completed=False),
    ]

    profile = analyze(history, 30, today=today, settings=settings)

    assert profile.total_blocks == 3
    assert profile.completed_blocks == 2
    assert profile.completion_rate == 67


def test_completion_rate_half_rounds_up(make_block, today, settings) -> None:
    history = [make_block(completed=True)] + [make_block(completed=False)] * 7

    assert analyze(history, 30, today=today, settings=settings).completion_rate == 13


def test_completion_rate_stays_in_bounds(make_block, days_ago, today, settings) -> None:
    for completed_count in range(0, 6):
        history = [make_block(day=days_ago(i), completed=i < completed_count) for i in range(5)]
        rate = analyze(history, 30, today=today, settings=settings).completion_rate
        assert 0 <= rate <= 100


def test_peak_hours_rank_by_completed_density(make_block, today, settings) -> None:
    history = (
        [make_block(hour=9)] * 3
        + [make_block(hour=14)] * 4
        + [make_block(hour=10)]
        + [make_block(hour=16, completed=False)] * 5
    )

    profile = analyze(history, 30, today=today, settings=settings)

    assert profile.peak_hours == [14, 9, 10]
    assert 16 not in profile.peak_hours
    assert profile.hourly_completions == {9: 3, 10: 1, 14: 4}


def test_peak_hour_ties_keep_earlier_hour(make_block, today, settings) -> None:
    history = [make_block(hour=15)] * 2 + [make_block(hour=8)] * 2

    assert analyze(history, 30, today=today, settings=settings).peak_hours == [8, 15]


def test_streak_stops_at_first_gap(make_block, days_ago, today, settings) -> None:
    history = [
        make_block(day=days_ago(0)),
        make_block(day=days_ago(1)),
        make_block(day=days_ago(1), hour=14),
        make_block(day=days_ago(2)),
        make_block(day=days_ago(4)),
        make_block(day=days_ago(5)),
    ]

    profile = analyze(history, 30, today=today, settings=settings)

    assert profile.current_streak == 3
    assert profile.longest_streak == 3


def test_streak_survives_missing_today(make_block, days_ago, today, settings) -> None:
    history = [make_block(day=days_ago(1)), make_block(day=days_ago(2))]

    assert analyze(history, 30, today=today, settings=settings).current_streak == 2


def test_streak_broken_two_days_ago(make_block, days_ago, today, settings) -> None:
    history = [make_block(day=days_ago(2)), make_block(day=days_ago(3))]

    profile = analyze(history, 30, today=today, settings=settings)

    assert profile.current_streak == 0
    assert profile.longest_streak == 2


def test_incomplete_blocks_do_not_count_towards_streak(make_block, days_ago, today, settings) -> None:
    history = [make_block(day=days_ago(0), completed=False), make_block(day=days_ago(1))]

    assert analyze(history, 30, today=today, settings=settings).current_streak == 1


def test_longest_streak_spans_whole_history(make_block, days_ago, today, settings) -> None:
    earlier_run = [make_block(day=days_ago(n)) for n in range(60, 65)]
    recent_run = [make_block(day=days_ago(0)), make_block(day=days_ago(1))]

    profile = analyze(earlier_run + recent_run, 30, today=today, settings=settings)

    assert profile.current_streak == 2
    assert profile.longest_streak == 5


def test_missing_category_gets_its_own_bucket(make_block, today, settings) -> None:
    history = [
        make_block(category=Category.WORK),
        make_block(category=Category.MEETING),
        make_block(category=Category.WORK),
        TimeBlock(date=today, hour=11, category=None),
        TimeBlock(date=today, hour=12, category="gardening"),
    ]

    profile = analyze(history, 30, today=today, settings=settings)

    assert profile.category_distribution == {"work": 2, "meeting": 1, "uncategorized": 2}


def test_meeting_clustering_detected(make_block, days_ago, today, settings) -> None:
    history = [
        make_block(day=days_ago(1), hour=14, duration=30, category=Category.MEETING),
        make_block(day=days_ago(1), hour=15, duration=30, category=Category.MEETING),
        make_block(day=days_ago(1), hour=9, duration=45, category=Category.MEETING),
        make_block(day=days_ago(2), hour=14, duration=30, category=Category.MEETING),
        make_block(day=days_ago(2), hour=15, duration=60, category=Category.MEETING),
    ]

    profile = analyze(history, 30, today=today, settings=settings)

    assert profile.meeting_cluster_start == 14
    assert profile.meetings_per_day == 3
    assert profile.typical_meeting_minutes == 30


def test_scattered_meetings_are_not_clustered(make_block, days_ago, today, settings) -> None:
    history = [
        make_block(day=days_ago(1), hour=8, category=Category.MEETING),
        make_block(day=days_ago(2), hour=12, category=Category.MEETING),
        make_block(day=days_ago(3), hour=17, category=Category.MEETING),
    ]

    profile = analyze(history, 30, today=today, settings=settings)

    assert profile.meeting_cluster_start is None
    assert profile.meetings_per_day == 1


def test_supplementary_statistics(make_block, days_ago, today, settings) -> None:
    # TODAY is a Wednesday
    history = [
        make_block(day=days_ago(0), duration=30),
        make_block(day=days_ago(0), duration=60),
        make_block(day=days_ago(1), duration=45),
    ]

    profile = analyze(history, 7, today=today, settings=settings)

    assert profile.avg_session_minutes == 45
    assert profile.best_days == ["Wed", "Tue"]
    assert profile.window_days == 7
    assert profile.avg_blocks_per_day == 0.4


def test_calculate_confidence_grows_with_samples() -> None:
    assert PatternAnalyzer.calculate_confidence(0) == 0.3
    small = PatternAnalyzer.calculate_confidence(5)
    large = PatternAnalyzer.calculate_confidence(100)
    assert 0.3 < small < large <= 0.95
