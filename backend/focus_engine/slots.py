"""
Focus Scheduling Engine - Slot Finder
Gap analysis over a day's existing blocks and heuristic ranking of candidate start times
"""

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Optional, List, Dict, Tuple, Iterable

from .config import ScheduleConfig, get_schedule_config, format_minutes
from .models import CandidateSlot, Category, Priority, ProductivityProfile, TimeBlock

logger = logging.getLogger(__name__)


# ============================================
# CATEGORY PREFERENCES
# ============================================

@dataclass(frozen=True)
class CategoryPreference:
    band: Optional[Tuple[int, int]]   # preferred [start_hour, end_hour) when no profile signal
    band_label: Optional[str]
    peak_affinity: float              # weight of historical peak hours for this category
    default_minutes: int


CATEGORY_PREFERENCES: Dict[Category, CategoryPreference] = {
    Category.WORK: CategoryPreference((8, 12), "morning", 1.0, 50),
    Category.MEETING: CategoryPreference((11, 15), "midday", 0.6, 30),
    Category.BREAK: CategoryPreference(None, None, 0.0, 15),
    Category.PERSONAL: CategoryPreference((17, 21), "evening", 0.5, 30),
    Category.LEARNING: CategoryPreference(None, None, 1.0, 45),   # flexible
    Category.EXERCISE: CategoryPreference((17, 21), "evening", 0.5, 45),
    Category.UNCATEGORIZED: CategoryPreference(None, None, 0.5, 25),
}

# Typical energy by hour of day; hours outside the map count as low
ENERGY_LEVELS: Dict[int, str] = {
    6: "low", 7: "rising", 8: "medium", 9: "high", 10: "peak", 11: "peak",
    12: "medium", 13: "low", 14: "rising", 15: "high", 16: "high",
    17: "medium", 18: "medium", 19: "low", 20: "low",
}

TASK_ENERGY_NEEDS: Dict[Category, Tuple[str, ...]] = {
    Category.WORK: ("high", "peak"),
    Category.MEETING: ("medium", "high"),
    Category.BREAK: ("low", "medium"),
    Category.PERSONAL: ("medium",),
    Category.LEARNING: ("high", "peak"),
    Category.EXERCISE: ("medium", "rising"),
}

PRIORITY_MORNING_HOURS = (9, 11)   # inclusive
LUNCH_HOURS = (12, 13)             # inclusive


def energy_level(hour: int) -> str:
    return ENERGY_LEVELS.get(hour, "low")

# Blocks a break can recover from
FOCUS_CATEGORIES = (Category.WORK, Category.LEARNING)

# Scoring weights (0-100 scale)
BASE_SCORE = 50.0
PEAK_WEIGHT = 40.0
PEAK_RADIUS_MINUTES = 4 * 60
PEAK_RANK_DECAY = 0.15
BAND_WEIGHT = 25.0
BAND_FALLOFF_MINUTES = 6 * 60
RECOVERY_WEIGHT = 35.0
PREP_WEIGHT = 15.0
SHORT_GAP_WEIGHT = 10.0
FRAGMENT_PENALTY = 15.0
ENERGY_WEIGHT = 8.0
PRIORITY_WEIGHT = 10.0
LUNCH_PENALTY = 10.0


@dataclass(frozen=True)
class Gap:
    start: int
    end: int

    @property
    def duration(self) -> int:
        return self.end - self.start


# ============================================
# GAP ANALYSIS
# ============================================

def occupied_intervals(
    existing: Iterable[TimeBlock],
    target_date: date,
    day_start: int,
    day_end: int,
) -> List[Tuple[int, int]]:
    """Merged, start-ordered busy intervals of target_date clipped to the window."""
    return merge_intervals(
        [(b.start, b.end) for b in existing if b.date == target_date],
        day_start,
        day_end,
    )


def merge_intervals(intervals: Iterable[Tuple[int, int]], day_start: int, day_end: int) -> List[Tuple[int, int]]:
    """Clip (start, end) pairs to the window and merge overlapping or touching ones."""
    clipped = sorted(
        (max(start, day_start), min(end, day_end))
        for start, end in intervals
        if max(start, day_start) < min(end, day_end)
    )
    merged: List[Tuple[int, int]] = []
    for start, end in clipped:
        if merged and start <= merged[-1][1]:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged


def free_gaps(intervals: List[Tuple[int, int]], day_start: int, day_end: int) -> List[Gap]:
    """Complement of the busy intervals inside [day_start, day_end)."""
    gaps = []
    current = day_start
    for start, end in intervals:
        if start > current:
            gaps.append(Gap(current, start))
        current = max(current, end)
    if current < day_end:
        gaps.append(Gap(current, day_end))
    return gaps


# ============================================
# SLOT FINDER
# ============================================

class SlotFinder:
    """Ranks free start times for a task of a given length and category."""

    def __init__(self, settings: Optional[ScheduleConfig] = None):
        self.settings = settings or get_schedule_config()

    def find_slots(
        self,
        existing: Iterable[TimeBlock],
        target_date: date,
        duration_minutes: int,
        category: Category,
        profile: Optional[ProductivityProfile] = None,
        priority: Priority = Priority.MEDIUM,
    ) -> List[CandidateSlot]:
        """
        Candidate slots on target_date, best first (ties: earlier start).

        Returns an empty list when no gap in the day window can hold the task.
        """
        if duration_minutes <= 0:
            raise ValueError(f"duration_minutes must be positive, got {duration_minutes}")

        existing = [b for b in existing if b.date == target_date]
        day_start, day_end = self.settings.day_start_minute, self.settings.day_end_minute
        busy = occupied_intervals(existing, target_date, day_start, day_end)
        gaps = [g for g in free_gaps(busy, day_start, day_end) if g.duration >= duration_minutes]

        if not gaps:
            logger.info(
                "No %d-minute gap on %s (%d busy intervals)",
                duration_minutes, target_date, len(busy),
            )
            return []

        preference = CATEGORY_PREFERENCES.get(category, CATEGORY_PREFERENCES[Category.UNCATEGORIZED])
        peaks = self._peak_hours_for(preference, profile)
        focus_ends = {b.end for b in existing if b.category in FOCUS_CATEGORIES}
        focus_starts = {b.start for b in existing if b.category in FOCUS_CATEGORIES}

        candidates = []
        for gap in gaps:
            for start in self._candidate_starts(gap, duration_minutes):
                candidates.append(self._score(
                    start, duration_minutes, gap, category, priority, preference, peaks,
                    focus_ends, focus_starts,
                ))

        candidates.sort(key=lambda c: (-c.score, c.start))
        return candidates

    # ----------------------------------------
    # Candidate generation and scoring
    # ----------------------------------------

    @staticmethod
    def _candidate_starts(gap: Gap, duration: int) -> List[int]:
        latest = gap.end - duration
        starts = {gap.start, latest}
        for hour in range(math.ceil(gap.start / 60), latest // 60 + 1):
            starts.add(hour * 60)
        return sorted(s for s in starts if gap.start <= s <= latest)

    @staticmethod
    def _peak_hours_for(
        preference: CategoryPreference,
        profile: Optional[ProductivityProfile],
    ) -> List[int]:
        if profile is None or preference.peak_affinity <= 0:
            return []
        return list(profile.peak_hours)

    def _score(
        self,
        start: int,
        duration: int,
        gap: Gap,
        category: Category,
        priority: Priority,
        preference: CategoryPreference,
        peaks: List[int],
        focus_ends: set,
        focus_starts: set,
    ) -> CandidateSlot:
        score = BASE_SCORE
        heuristics: List[str] = []
        matched_peak = None

        if peaks:
            # (a) proximity to historical peak hours, earlier ranks weigh more
            best, best_peak, best_distance = 0.0, None, None
            for rank, peak in enumerate(peaks):
                distance = abs(start - peak * 60)
                proximity = max(0.0, 1 - distance / PEAK_RADIUS_MINUTES)
                weighted = proximity * max(0.0, 1 - PEAK_RANK_DECAY * rank)
                if weighted > best:
                    best, best_peak, best_distance = weighted, peak, distance
            score += PEAK_WEIGHT * preference.peak_affinity * best
            if best_peak is not None and best_distance < 60:
                matched_peak = best_peak
                heuristics.append(f"matches your historical peak focus hour ({best_peak:02d}:00)")
            elif best_peak is not None:
                heuristics.append(f"close to your peak focus hour ({best_peak:02d}:00)")
        elif preference.band is not None:
            # (b) category band when there is no profile signal
            band_start, band_end = preference.band[0] * 60, preference.band[1] * 60
            if band_start <= start < band_end:
                score += BAND_WEIGHT
                heuristics.append(f"optimal {preference.band_label} time for {category.value}")
            else:
                distance = band_start - start if start < band_start else start - band_end + 1
                score += BAND_WEIGHT * max(0.0, 1 - distance / BAND_FALLOFF_MINUTES)

        hour = start // 60
        level = energy_level(hour)
        if level in TASK_ENERGY_NEEDS.get(category, ()):
            score += ENERGY_WEIGHT
            heuristics.append(f"{level} energy period suited to {category.value}")

        if priority == Priority.HIGH and PRIORITY_MORNING_HOURS[0] <= hour <= PRIORITY_MORNING_HOURS[1]:
            score += PRIORITY_WEIGHT
            heuristics.append("keeps high-priority work in your morning hours")

        if category == Category.WORK and LUNCH_HOURS[0] <= hour <= LUNCH_HOURS[1]:
            score -= LUNCH_PENALTY

        if category == Category.BREAK:
            if start in focus_ends:
                score += RECOVERY_WEIGHT
                heuristics.append("placed after existing work blocks to allow recovery time")
            elif start + duration in focus_starts:
                score += PREP_WEIGHT
                heuristics.append("recharges you right before your next work block")
            if gap.duration <= 2 * duration:
                score += SHORT_GAP_WEIGHT
                heuristics.append("fills a short gap without breaking up longer free time")

        # (c) fragmentation: leftovers too small to use
        min_usable = self.settings.min_usable_gap_minutes
        leftovers = (start - gap.start, gap.end - (start + duration))
        fragments = sum(1 for left in leftovers if 0 < left < min_usable)
        score -= FRAGMENT_PENALTY * fragments

        return CandidateSlot(
            start=start,
            duration_minutes=duration,
            gap_start=gap.start,
            gap_end=gap.end,
            score=round(max(0.0, min(100.0, score)), 2),
            matched_peak_hour=matched_peak,
            heuristics=heuristics,
        )


def find_slots(
    existing: Iterable[TimeBlock],
    target_date: date,
    duration_minutes: int,
    category: Category,
    profile: Optional[ProductivityProfile] = None,
    settings: Optional[ScheduleConfig] = None,
    priority: Priority = Priority.MEDIUM,
) -> List[CandidateSlot]:
    """Module-level shortcut for SlotFinder(settings).find_slots(...)."""
    return SlotFinder(settings).find_slots(
        existing, target_date, duration_minutes, category, profile, priority
    )


def describe_gaps(existing: Iterable[TimeBlock], target_date: date, settings: Optional[ScheduleConfig] = None) -> List[Dict]:
    """Free gaps of a day as HH:MM dicts, for display and logging."""
    settings = settings or get_schedule_config()
    busy = occupied_intervals(existing, target_date, settings.day_start_minute, settings.day_end_minute)
    return [
        {
            "start": format_minutes(gap.start),
            "end": format_minutes(gap.end),
            "duration_mins": gap.duration,
        }
        for gap in free_gaps(busy, settings.day_start_minute, settings.day_end_minute)
    ]
