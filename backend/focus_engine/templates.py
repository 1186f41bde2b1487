"""
Focus Scheduling Engine - Day Template Generator
Composes a full-day plan from independent rules applied in order to a growing block list
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Optional, List, Tuple, Iterable

from .config import ScheduleConfig, get_schedule_config, format_minutes
from .models import Category, DayTemplate, ProductivityProfile, TemplateBlock, TimeBlock
from .slots import FOCUS_CATEGORIES, free_gaps, merge_intervals

logger = logging.getLogger(__name__)


@dataclass
class TemplateContext:
    """Everything a rule may look at. Rules never touch the existing blocks."""
    target_date: date
    settings: ScheduleConfig
    profile: Optional[ProductivityProfile]
    based_on_patterns: bool
    existing: List[Tuple[int, int]] = field(default_factory=list)
    # Room kept free for the break after each long focus block
    reserved: List[Tuple[int, int]] = field(default_factory=list)

    @property
    def peak_hours(self) -> List[int]:
        if self.based_on_patterns and self.profile is not None:
            return self.profile.peak_hours
        return []


TemplateRule = Callable[[List[TemplateBlock], TemplateContext], List[TemplateBlock]]


# ============================================
# PLACEMENT HELPER
# ============================================

def place_near(
    blocks: List[TemplateBlock],
    ctx: TemplateContext,
    preferred_start: int,
    duration: int,
    not_before: Optional[int] = None,
    not_after: Optional[int] = None,
    release: Optional[Tuple[int, int]] = None,
) -> Optional[int]:
    """
    Free start closest to preferred_start (ties: earlier) that overlaps neither
    the existing blocks nor blocks already in the template.

    Reserved break room counts as busy, except the ``release`` interval.
    """
    settings = ctx.settings
    busy = merge_intervals(
        ctx.existing
        + [(b.start, b.end) for b in blocks]
        + [r for r in ctx.reserved if r != release],
        settings.day_start_minute,
        settings.day_end_minute,
    )
    best: Optional[int] = None
    for gap in free_gaps(busy, settings.day_start_minute, settings.day_end_minute):
        lowest = gap.start if not_before is None else max(gap.start, not_before)
        highest = gap.end - duration if not_after is None else min(gap.end - duration, not_after)
        if lowest > highest:
            continue
        start = min(max(preferred_start, lowest), highest)
        if best is None or abs(start - preferred_start) < abs(best - preferred_start):
            best = start
    return best


def make_block(title: str, category: Category, start: int, duration: int, reason: str) -> TemplateBlock:
    return TemplateBlock(
        title=title,
        category=category,
        hour=start // 60,
        start_minute=start % 60,
        duration_minutes=duration,
        reason=reason,
    )


def needs_break(category: Category, duration: int, settings: ScheduleConfig) -> bool:
    return category in FOCUS_CATEGORIES and duration > settings.long_block_minutes


def _add(blocks, ctx, title, category, preferred, duration, reason, **bounds) -> List[TemplateBlock]:
    recovery = ctx.settings.break_minutes if needs_break(category, duration, ctx.settings) else 0
    start = place_near(blocks, ctx, preferred, duration + recovery, **bounds) if recovery else None
    reserve = start is not None
    if start is None:
        start = place_near(blocks, ctx, preferred, duration, **bounds)
    if start is None:
        logger.debug("Template: no room for '%s' (%d min) on %s", title, duration, ctx.target_date)
        return blocks
    if reserve:
        ctx.reserved.append((start + duration, start + duration + recovery))
    return blocks + [make_block(title, category, start, duration, reason)]


# ============================================
# RULES
# ============================================

def anchor_deep_work(blocks: List[TemplateBlock], ctx: TemplateContext) -> List[TemplateBlock]:
    """One deep-work block at the top peak hour, or the default morning anchor."""
    if ctx.peak_hours:
        hour = ctx.peak_hours[0]
        reason = f"Your peak productivity time ({hour:02d}:00)"
    else:
        hour = ctx.settings.default_anchor_hour
        reason = "Morning deep work while energy is high"
    return _add(blocks, ctx, "Deep Work Block", Category.WORK, hour * 60,
                ctx.settings.deep_work_minutes, reason)


def secondary_focus(blocks: List[TemplateBlock], ctx: TemplateContext) -> List[TemplateBlock]:
    """A shorter focus session at a second, distinct peak or two hours after the anchor."""
    anchor = next((b for b in blocks if b.title == "Deep Work Block"), None)
    anchor_hour = anchor.hour if anchor else ctx.settings.default_anchor_hour

    second_peak = next((p for p in ctx.peak_hours[1:] if abs(p - anchor_hour) >= 2), None)
    if second_peak is not None:
        return _add(blocks, ctx, "Afternoon Focus" if second_peak >= 12 else "Focus Session",
                    Category.WORK, second_peak * 60, ctx.settings.focus_session_minutes,
                    f"Second productivity peak ({second_peak:02d}:00)")
    return _add(blocks, ctx, "Focus Session", Category.WORK, (anchor_hour + 2) * 60,
                ctx.settings.focus_session_minutes, "Continue momentum")


def lunch_break(blocks: List[TemplateBlock], ctx: TemplateContext) -> List[TemplateBlock]:
    return _add(blocks, ctx, "Lunch Break", Category.BREAK, ctx.settings.lunch_hour * 60,
                ctx.settings.lunch_minutes, "Rest and refuel")


def breaks_after_long_blocks(blocks: List[TemplateBlock], ctx: TemplateContext) -> List[TemplateBlock]:
    """Short break right after every work/learning block longer than the threshold."""
    settings = ctx.settings
    long_blocks = sorted(
        (b for b in blocks if needs_break(b.category, b.duration_minutes, settings)),
        key=lambda b: b.start,
    )
    for block in long_blocks:
        if any(b.category == Category.BREAK and b.start == block.end for b in blocks):
            continue
        room = (block.end, block.end + settings.break_minutes)
        blocks = _add(blocks, ctx, "Short Break", Category.BREAK, block.end, settings.break_minutes,
                      f"Recharge after {block.duration_minutes} minutes of focus",
                      not_before=block.end, not_after=block.end + 2 * settings.break_minutes,
                      release=room)
        if room in ctx.reserved:
            ctx.reserved.remove(room)
    return blocks


def cluster_meetings(blocks: List[TemplateBlock], ctx: TemplateContext) -> List[TemplateBlock]:
    """Back-to-back meeting blocks where meetings historically cluster."""
    profile = ctx.profile
    if not ctx.based_on_patterns or profile is None or profile.meeting_cluster_start is None:
        return _add(blocks, ctx, "Collaboration Time", Category.MEETING,
                    ctx.settings.collaboration_hour * 60, 60, "Good time for meetings")

    cluster_start = profile.meeting_cluster_start
    duration = profile.typical_meeting_minutes
    reason = f"Your meetings usually cluster around {cluster_start:02d}:00"
    preferred = cluster_start * 60
    for index in range(max(1, profile.meetings_per_day)):
        before = len(blocks)
        blocks = _add(blocks, ctx, f"Meeting Block {index + 1}", Category.MEETING,
                      preferred, duration, reason,
                      not_before=None if index == 0 else preferred)
        if len(blocks) == before:
            break
        preferred = blocks[-1].end
    return blocks


def end_of_day_review(blocks: List[TemplateBlock], ctx: TemplateContext) -> List[TemplateBlock]:
    settings = ctx.settings
    preferred = settings.work_day_end_hour * 60 - settings.review_minutes
    return _add(blocks, ctx, "Daily Review & Planning", Category.PERSONAL, preferred,
                settings.review_minutes, "Review progress and plan tomorrow")


DEFAULT_RULES: List[TemplateRule] = [
    anchor_deep_work,
    secondary_focus,
    breaks_after_long_blocks,
    lunch_break,
    cluster_meetings,
    end_of_day_review,
]


# ============================================
# GENERATOR
# ============================================

class TemplateGenerator:
    """Runs the rule pipeline; falls back to the structural skeleton without history."""

    def __init__(self, settings: Optional[ScheduleConfig] = None, rules: Optional[List[TemplateRule]] = None):
        self.settings = settings or get_schedule_config()
        self.rules = list(rules) if rules is not None else list(DEFAULT_RULES)

    def generate(
        self,
        target_date: date,
        profile: Optional[ProductivityProfile] = None,
        existing: Iterable[TimeBlock] = (),
    ) -> DayTemplate:
        based_on_patterns = (
            profile is not None and profile.has_pattern_signal(self.settings.min_history_blocks)
        )
        ctx = TemplateContext(
            target_date=target_date,
            settings=self.settings,
            profile=profile,
            based_on_patterns=based_on_patterns,
            existing=[(b.start, b.end) for b in existing if b.date == target_date],
        )

        blocks: List[TemplateBlock] = []
        for rule in self.rules:
            blocks = rule(blocks, ctx)

        blocks.sort(key=lambda b: b.start)
        logger.info(
            "Template for %s: %d blocks (%s), first at %s",
            target_date, len(blocks), "patterns" if based_on_patterns else "generic",
            format_minutes(blocks[0].start) if blocks else "-",
        )
        return DayTemplate(date=target_date, blocks=blocks, based_on_patterns=based_on_patterns)
