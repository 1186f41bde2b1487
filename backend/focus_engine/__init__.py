"""
Focus Scheduling Engine
Adaptive slot recommendations, auto-placement and day templates for the Focus time-blocking app
"""

from .models import (
    # Enums
    Category,
    Priority,
    # Records
    TimeBlock,
    TaskRequest,
    # Results
    ProductivityProfile,
    CandidateSlot,
    ScheduleSuggestion,
    BatchScheduleResult,
    TemplateBlock,
    DayTemplate,
    Advisory,
    DayOptimization,
)

from .errors import (
    SchedulingError,
    NoSlotAvailable,
    ExternalServiceTimeout,
)

from .patterns import PatternAnalyzer, analyze
from .slots import SlotFinder, find_slots
from .auto_scheduler import AutoScheduler
from .templates import TemplateGenerator, DEFAULT_RULES
from .advisor import ScheduleAdvisor
from .history import HistorySource, InMemoryHistorySource, PostgresHistorySource
from .ai_client import AIClient, ReasonPhraser
from .engine import SchedulingEngine

__all__ = [
    "Category",
    "Priority",
    "TimeBlock",
    "TaskRequest",
    "ProductivityProfile",
    "CandidateSlot",
    "ScheduleSuggestion",
    "BatchScheduleResult",
    "TemplateBlock",
    "DayTemplate",
    "Advisory",
    "DayOptimization",
    "SchedulingError",
    "NoSlotAvailable",
    "ExternalServiceTimeout",
    "PatternAnalyzer",
    "analyze",
    "SlotFinder",
    "find_slots",
    "AutoScheduler",
    "TemplateGenerator",
    "DEFAULT_RULES",
    "ScheduleAdvisor",
    "HistorySource",
    "InMemoryHistorySource",
    "PostgresHistorySource",
    "AIClient",
    "ReasonPhraser",
    "SchedulingEngine",
]
