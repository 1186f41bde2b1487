"""
Focus Scheduling Engine - Productivity Pattern Analysis
Reduces a user's block history into a ProductivityProfile used for adaptive recommendations
"""

import logging
import math
import statistics
from collections import Counter
from datetime import date, timedelta
from typing import Optional, List, Dict, Iterable, Tuple

from .config import ScheduleConfig, get_schedule_config
from .models import Category, ProductivityProfile, TimeBlock

logger = logging.getLogger(__name__)


WEEKDAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def round_half_up(value: float) -> int:
    """Round .5 away from zero instead of to the nearest even number."""
    return int(math.floor(value + 0.5))


# ============================================
# PATTERN ANALYZER
# ============================================

class PatternAnalyzer:
    """Analyzes productivity patterns from historical time blocks"""

    def __init__(self, settings: Optional[ScheduleConfig] = None):
        self.settings = settings or get_schedule_config()

    @staticmethod
    def calculate_confidence(samples: int, base_confidence: float = 0.5) -> float:
        """Calculate confidence score based on sample size"""
        # Confidence increases logarithmically with samples
        # 5 samples: ~0.6, 20 samples: ~0.76, 50 samples: ~0.84, 100+: ~0.9
        if samples <= 0:
            return 0.3
        confidence = base_confidence + (0.4 * math.log10(samples + 1) / 2)
        return round(min(0.95, confidence), 3)

    @staticmethod
    def window_bounds(window_days: int, today: date) -> Tuple[date, date]:
        """Inclusive (first, last) days of the trailing window ending today."""
        window_days = max(1, window_days)
        return today - timedelta(days=window_days - 1), today

    def analyze(
        self,
        history: Iterable[TimeBlock],
        window_days: int,
        today: Optional[date] = None,
    ) -> ProductivityProfile:
        """Build a profile from raw history. Total: any input yields a valid profile."""
        today = today or date.today()
        window_days = max(1, window_days)
        first_day, last_day = self.window_bounds(window_days, today)

        history = list(history)
        in_window = [b for b in history if first_day <= b.date <= last_day]
        completed = [b for b in in_window if b.completed]

        total = len(in_window)
        completion_rate = round_half_up(100 * len(completed) / total) if total else 0

        hourly = self.hourly_completions(completed)
        current_streak, longest_streak = self.streaks(history, today)
        cluster_start, meetings_per_day, meeting_minutes = self.meeting_clustering(in_window)

        profile = ProductivityProfile(
            completion_rate=completion_rate,
            peak_hours=self.rank_peak_hours(hourly, self.settings.peak_hours_count),
            category_distribution=self.category_distribution(in_window),
            current_streak=current_streak,
            longest_streak=longest_streak,
            window_days=window_days,
            total_blocks=total,
            completed_blocks=len(completed),
            avg_blocks_per_day=round(total / window_days, 1),
            hourly_completions=hourly,
            avg_session_minutes=self.average_session_minutes(completed),
            best_days=self.best_days(completed),
            meeting_cluster_start=cluster_start,
            meetings_per_day=meetings_per_day,
            typical_meeting_minutes=meeting_minutes,
        )

        logger.debug(
            "Analyzed %d blocks over %d days: completion=%d%% peaks=%s streak=%d/%d",
            total, window_days, completion_rate, profile.peak_hours,
            current_streak, longest_streak,
        )
        return profile

    # ----------------------------------------
    # Individual statistics
    # ----------------------------------------

    @staticmethod
    def hourly_completions(completed: List[TimeBlock]) -> Dict[int, int]:
        counts = Counter(b.hour for b in completed)
        return dict(sorted(counts.items()))

    @staticmethod
    def rank_peak_hours(hourly: Dict[int, int], limit: int) -> List[int]:
        """Hours by completed-block count descending; ties keep the earlier hour."""
        ranked = sorted(
            (hour for hour, count in hourly.items() if count > 0),
            key=lambda hour: (-hourly[hour], hour),
        )
        return ranked[:limit]

    @staticmethod
    def category_distribution(blocks: List[TimeBlock]) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for block in blocks:
            key = block.category.value if block.category else Category.UNCATEGORIZED.value
            counts[key] = counts.get(key, 0) + 1
        return counts

    @staticmethod
    def streaks(history: List[TimeBlock], today: date) -> Tuple[int, int]:
        """(current, longest) runs of consecutive days with a completed block."""
        days = sorted({b.date for b in history if b.completed and b.date <= today}, reverse=True)
        if not days:
            return 0, 0

        current = 0
        if days[0] in (today, today - timedelta(days=1)):
            current = 1
            for previous, day in zip(days, days[1:]):
                if previous - day != timedelta(days=1):
                    break
                current += 1

        longest = run = 1
        for previous, day in zip(days, days[1:]):
            if previous - day == timedelta(days=1):
                run += 1
                longest = max(longest, run)
            else:
                run = 1

        return current, max(longest, current)

    @staticmethod
    def average_session_minutes(completed: List[TimeBlock]) -> int:
        if not completed:
            return 25
        return round_half_up(statistics.mean(b.duration_minutes for b in completed))

    @staticmethod
    def best_days(completed: List[TimeBlock], limit: int = 2) -> List[str]:
        counts = Counter(b.date.weekday() for b in completed)
        ranked = sorted(counts, key=lambda weekday: (-counts[weekday], weekday))
        return [WEEKDAY_NAMES[weekday] for weekday in ranked[:limit]]

    def meeting_clustering(self, blocks: List[TimeBlock]) -> Tuple[Optional[int], int, int]:
        """
        Detect whether historical meetings bunch up in one band of the day.

        Returns:
            (cluster start hour or None, meetings per meeting day, typical meeting minutes)
        """
        meetings = [b for b in blocks if b.category == Category.MEETING]
        if not meetings:
            return None, 0, 30

        typical_minutes = int(statistics.median(b.duration_minutes for b in meetings))
        meeting_days = len({b.date for b in meetings})
        per_day = max(1, min(3, round_half_up(len(meetings) / meeting_days)))

        if len(meetings) < self.settings.meeting_cluster_min_samples:
            return None, per_day, typical_minutes

        span = self.settings.meeting_cluster_span_hours
        hours = Counter(b.hour for b in meetings)
        best_start, best_count = None, 0
        for start in range(0, 24 - span + 1):
            count = sum(hours.get(h, 0) for h in range(start, start + span))
            if count > best_count:
                best_start, best_count = start, count

        if best_count / len(meetings) < self.settings.meeting_cluster_ratio:
            return None, per_day, typical_minutes

        # Start the cluster at the first band hour that actually had a meeting
        cluster_start = min(h for h in hours if best_start <= h < best_start + span)
        return cluster_start, per_day, typical_minutes


def analyze(
    history: Iterable[TimeBlock],
    window_days: int,
    today: Optional[date] = None,
    settings: Optional[ScheduleConfig] = None,
) -> ProductivityProfile:
    """Module-level shortcut for PatternAnalyzer(settings).analyze(...)."""
    return PatternAnalyzer(settings).analyze(history, window_days, today=today)
