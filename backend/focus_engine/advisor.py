"""
Focus Scheduling Engine - Day Advisor
Deterministic advice about a day that is already (partly) planned
"""

import logging
from datetime import date
from typing import Optional, List, Iterable

from .config import ScheduleConfig, get_schedule_config, format_minutes
from .models import (
    AdviceKind, Advisory, Category, DayOptimization, Priority, ProductivityProfile, TimeBlock,
)
from .slots import Gap, describe_gaps, free_gaps, occupied_intervals

logger = logging.getLogger(__name__)


class ScheduleAdvisor:
    """Looks at a day's blocks and free gaps and suggests improvements. Never moves anything."""

    def __init__(self, settings: Optional[ScheduleConfig] = None):
        self.settings = settings or get_schedule_config()

    def advise(
        self,
        target_date: date,
        existing: Iterable[TimeBlock],
        profile: Optional[ProductivityProfile] = None,
    ) -> DayOptimization:
        settings = self.settings
        blocks = sorted((b for b in existing if b.date == target_date), key=lambda b: b.start)
        busy = occupied_intervals(blocks, target_date, settings.day_start_minute, settings.day_end_minute)
        gaps = free_gaps(busy, settings.day_start_minute, settings.day_end_minute)

        advisories = []
        for check in (self.unused_peak_hours, self.deep_work_window, self.back_to_back_sessions):
            advisory = check(blocks, gaps, profile)
            if advisory is not None:
                advisories.append(advisory)

        logger.info(
            "Advice for %s: %s", target_date, [a.kind.value for a in advisories] or "none"
        )
        return DayOptimization(
            date=target_date,
            advisories=advisories,
            free_gaps=describe_gaps(blocks, target_date, settings),
        )

    # ----------------------------------------
    # Checks
    # ----------------------------------------

    def unused_peak_hours(
        self,
        blocks: List[TimeBlock],
        gaps: List[Gap],
        profile: Optional[ProductivityProfile],
    ) -> Optional[Advisory]:
        """Nothing is planned in any peak hour although one of them is still free."""
        if profile is None or not profile.peak_hours:
            return None
        peaks = profile.peak_hours
        if any(b.hour in peaks for b in blocks):
            return None

        min_usable = self.settings.min_usable_gap_minutes
        if not any(g.start <= p * 60 and p * 60 + min_usable <= g.end for p in peaks for g in gaps):
            return None

        hours = ", ".join(f"{hour:02d}:00" for hour in peaks)
        return Advisory(
            kind=AdviceKind.PEAK_HOURS,
            message=f"Your peak productivity hours are {hours}. Consider scheduling important tasks then.",
            priority=Priority.HIGH,
        )

    def deep_work_window(
        self,
        blocks: List[TimeBlock],
        gaps: List[Gap],
        profile: Optional[ProductivityProfile],
    ) -> Optional[Advisory]:
        window = next((g for g in gaps if g.duration > self.settings.deep_work_window_minutes), None)
        if window is None:
            return None
        return Advisory(
            kind=AdviceKind.DEEP_WORK,
            message=(
                f"You have {window.duration} minutes free starting at "
                f"{format_minutes(window.start)}. Great for deep work!"
            ),
        )

    def back_to_back_sessions(
        self,
        blocks: List[TimeBlock],
        gaps: List[Gap],
        profile: Optional[ProductivityProfile],
    ) -> Optional[Advisory]:
        """Sessions that start less than a break's length after the previous one ends."""
        sessions = [b for b in blocks if b.category != Category.BREAK]
        count = sum(
            1 for previous, current in zip(sessions, sessions[1:])
            if current.start - previous.end < self.settings.break_minutes
        )
        if count < self.settings.back_to_back_threshold:
            return None
        return Advisory(
            kind=AdviceKind.BREAK_NEEDED,
            message=(
                f"You have {count} back-to-back sessions. "
                "Remember to take breaks for better focus!"
            ),
        )
