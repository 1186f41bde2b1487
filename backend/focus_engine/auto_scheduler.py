"""
Focus Scheduling Engine - Auto-Scheduler
Single-task placement and sequential greedy batch placement over a cumulative occupied set
"""

import logging
from datetime import date
from typing import Optional, List, Iterable

from .config import ScheduleConfig, get_schedule_config
from .errors import NoSlotAvailable
from .models import (
    BatchScheduleResult, CandidateSlot, PRIORITY_ORDER, ProductivityProfile,
    ScheduleSuggestion, TaskRequest, TimeBlock,
)
from .patterns import PatternAnalyzer
from .slots import SlotFinder, describe_gaps

logger = logging.getLogger(__name__)


def build_reason(slot: CandidateSlot, task: TaskRequest) -> str:
    """Deterministic, human-readable justification for a placement."""
    if slot.heuristics:
        first, *rest = slot.heuristics
        text = first[0].upper() + first[1:]
        if rest:
            text += " and " + " and ".join(rest)
        return text + "."
    return f"First available slot that fits your {task.duration_minutes} minute {task.category.value} task."


def batch_order(tasks: List[TaskRequest]) -> List[TaskRequest]:
    """Longest first, then higher priority, then request order."""
    indexed = list(enumerate(tasks))
    indexed.sort(key=lambda item: (
        -item[1].duration_minutes,
        PRIORITY_ORDER[item[1].priority],
        item[0],
    ))
    return [task for _, task in indexed]


class AutoScheduler:
    """Places tasks into a day using the slot finder; never mutates its inputs."""

    def __init__(self, settings: Optional[ScheduleConfig] = None):
        self.settings = settings or get_schedule_config()
        self.slot_finder = SlotFinder(self.settings)

    def confidence(self, slot: CandidateSlot, profile: Optional[ProductivityProfile]) -> float:
        """Slot score scaled by how much history backs a peak-hour match."""
        fit = slot.score / 100
        if slot.matched_peak_hour is not None and profile is not None:
            fit *= 0.5 + 0.5 * PatternAnalyzer.calculate_confidence(profile.completed_blocks)
        return round(max(0.0, min(1.0, fit)), 2)

    def _suggestion(
        self,
        task: TaskRequest,
        target_date: date,
        slot: CandidateSlot,
        profile: Optional[ProductivityProfile],
        alternatives: Optional[List[CandidateSlot]] = None,
    ) -> ScheduleSuggestion:
        return ScheduleSuggestion(
            title=task.title,
            date=target_date,
            hour=slot.hour,
            start_minute=slot.minute,
            duration_minutes=task.duration_minutes,
            category=task.category,
            reason=build_reason(slot, task),
            confidence=self.confidence(slot, profile),
            score=slot.score,
            alternatives=alternatives or [],
        )

    def schedule_one(
        self,
        task: TaskRequest,
        target_date: date,
        existing: Iterable[TimeBlock],
        profile: Optional[ProductivityProfile] = None,
    ) -> ScheduleSuggestion:
        """
        Best slot for a single task.

        Raises:
            NoSlotAvailable: no free gap in the window fits the task
        """
        existing = list(existing)
        candidates = self.slot_finder.find_slots(
            existing, target_date, task.duration_minutes, task.category, profile, task.priority
        )
        if not candidates:
            gaps = describe_gaps(existing, target_date, self.settings)
            longest = max((g["duration_mins"] for g in gaps), default=0)
            raise NoSlotAvailable(
                task.title, target_date, task.duration_minutes,
                detail=(
                    f"No free {task.duration_minutes}-minute slot for '{task.title}' on "
                    f"{target_date.isoformat()}; longest free gap is {longest} minutes"
                ),
            )

        best = candidates[0]
        alternatives = candidates[1:1 + self.settings.alternatives_count]
        logger.info(
            "Placed '%s' (%s, %d min) at %s score=%.1f",
            task.title, task.category.value, task.duration_minutes, best.label, best.score,
        )
        return self._suggestion(task, target_date, best, profile, alternatives)

    def schedule_many(
        self,
        tasks: List[TaskRequest],
        target_date: date,
        existing: Iterable[TimeBlock],
        profile: Optional[ProductivityProfile] = None,
    ) -> BatchScheduleResult:
        """
        Greedy sequential placement.

        Each placement joins the occupied set before the next task is considered,
        so suggestions never overlap each other or the existing blocks. Tasks that
        do not fit are reported in ``unplaced`` and the batch carries on.
        """
        occupied = [b for b in existing if b.date == target_date]
        result = BatchScheduleResult()

        for task in batch_order(tasks):
            candidates = self.slot_finder.find_slots(
                occupied, target_date, task.duration_minutes, task.category, profile, task.priority
            )
            if not candidates:
                logger.warning(
                    "Could not place '%s' (%d min) on %s", task.title, task.duration_minutes, target_date
                )
                result.unplaced.append(task)
                continue

            suggestion = self._suggestion(task, target_date, candidates[0], profile)
            result.placed.append(suggestion)
            occupied.append(suggestion.to_block())

        logger.info(
            "Batch on %s: %d placed, %d unplaced", target_date, len(result.placed), len(result.unplaced)
        )
        return result
