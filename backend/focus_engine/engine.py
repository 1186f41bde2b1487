"""
Focus Scheduling Engine - Facade
Async entry points used by the UI/API layer: profiles, placement and day templates
"""

import asyncio
import logging
from datetime import date, timedelta
from typing import Callable, List, Optional, Tuple

from .advisor import ScheduleAdvisor
from .ai_client import ReasonPhraser
from .auto_scheduler import AutoScheduler
from .config import ScheduleConfig, get_schedule_config
from .history import HistorySource
from .models import (
    BatchScheduleResult, Category, DayOptimization, DayTemplate, ProductivityProfile,
    ScheduleSuggestion, TaskRequest, TimeBlock,
)
from .patterns import PatternAnalyzer
from .slots import CATEGORY_PREFERENCES
from .templates import TemplateGenerator

logger = logging.getLogger(__name__)


class SchedulingEngine:
    """
    Stateless orchestration over an external history source.

    Every call fetches what it needs, computes its answer and keeps nothing, so
    one instance can serve concurrent requests for any number of users.
    """

    def __init__(
        self,
        history: HistorySource,
        phraser: Optional[ReasonPhraser] = None,
        settings: Optional[ScheduleConfig] = None,
        clock: Callable[[], date] = date.today,
    ):
        self.history = history
        self.phraser = phraser
        self.settings = settings or get_schedule_config()
        self.clock = clock
        self.analyzer = PatternAnalyzer(self.settings)
        self.scheduler = AutoScheduler(self.settings)
        self.templates = TemplateGenerator(self.settings)
        self.advisor = ScheduleAdvisor(self.settings)

    # ============================================
    # CONTEXT LOADING
    # ============================================

    async def get_profile(self, user_id: str, window_days: Optional[int] = None) -> ProductivityProfile:
        """Productivity profile over the trailing window ending today."""
        if window_days is None:
            window_days = self.settings.history_window_days
        window_days = max(1, window_days)
        today = self.clock()
        lookback = max(window_days, self.settings.streak_lookback_days)
        history = await self.history.get_blocks(user_id, today - timedelta(days=lookback - 1), today)
        return self.analyzer.analyze(history, window_days, today=today)

    async def _day_blocks(self, user_id: str, target_date: date) -> List[TimeBlock]:
        return await self.history.get_blocks(user_id, target_date, target_date)

    async def _context(self, user_id: str, target_date: date) -> Tuple[List[TimeBlock], ProductivityProfile]:
        existing, profile = await asyncio.gather(
            self._day_blocks(user_id, target_date),
            self.get_profile(user_id),
        )
        return existing, profile

    def _scheduling_profile(self, profile: ProductivityProfile) -> Optional[ProductivityProfile]:
        """Profiles without enough history carry no placement signal."""
        if profile.has_pattern_signal(self.settings.min_history_blocks):
            return profile
        return None

    async def _phrase(self, suggestion: ScheduleSuggestion) -> ScheduleSuggestion:
        if self.phraser is None:
            return suggestion
        reason = await self.phraser.phrase(suggestion.reason)
        return suggestion.model_copy(update={"reason": reason})

    # ============================================
    # SCHEDULING
    # ============================================

    async def schedule_one(
        self,
        user_id: str,
        task: TaskRequest,
        target_date: Optional[date] = None,
    ) -> ScheduleSuggestion:
        """
        Best slot for one task.

        Raises:
            NoSlotAvailable: nothing in the day window fits the task
        """
        target_date = target_date or self.clock()
        existing, profile = await self._context(user_id, target_date)
        suggestion = self.scheduler.schedule_one(
            task, target_date, existing, self._scheduling_profile(profile)
        )
        return await self._phrase(suggestion)

    async def schedule_many(
        self,
        user_id: str,
        tasks: List[TaskRequest],
        target_date: Optional[date] = None,
    ) -> BatchScheduleResult:
        """Greedy batch placement; unplaceable tasks are reported, not raised."""
        target_date = target_date or self.clock()
        existing, profile = await self._context(user_id, target_date)
        result = self.scheduler.schedule_many(
            tasks, target_date, existing, self._scheduling_profile(profile)
        )
        if self.phraser is not None and result.placed:
            placed = await asyncio.gather(*(self._phrase(s) for s in result.placed))
            result = result.model_copy(update={"placed": list(placed)})
        return result

    async def suggest_for_category(
        self,
        user_id: str,
        category: Category,
        target_date: Optional[date] = None,
    ) -> ScheduleSuggestion:
        """Place a block of the category's default length."""
        preference = CATEGORY_PREFERENCES.get(category, CATEGORY_PREFERENCES[Category.UNCATEGORIZED])
        task = TaskRequest(
            title=category.value.capitalize(),
            category=category,
            duration_minutes=preference.default_minutes,
        )
        return await self.schedule_one(user_id, task, target_date)

    # ============================================
    # TEMPLATES
    # ============================================

    async def generate_template(self, user_id: str, target_date: Optional[date] = None) -> DayTemplate:
        target_date = target_date or self.clock()
        existing, profile = await self._context(user_id, target_date)
        template = self.templates.generate(target_date, profile, existing)
        if self.phraser is None:
            return template

        reasons = await asyncio.gather(*(self.phraser.phrase(b.reason) for b in template.blocks))
        blocks = [b.model_copy(update={"reason": r}) for b, r in zip(template.blocks, reasons)]
        return template.model_copy(update={"blocks": blocks})

    # ============================================
    # ADVICE
    # ============================================

    async def optimize_day(self, user_id: str, target_date: Optional[date] = None) -> DayOptimization:
        """Advisories for a planned day; existing blocks are never moved."""
        target_date = target_date or self.clock()
        existing, profile = await self._context(user_id, target_date)
        return self.advisor.advise(target_date, existing, self._scheduling_profile(profile))
