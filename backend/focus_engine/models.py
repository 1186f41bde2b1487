"""
Focus Scheduling Engine - Pydantic Models (v2 syntax)
"""

from datetime import date as Date
from enum import Enum
from typing import Any, Optional, List, Dict
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import format_minutes, get_schedule_config


# ============================================
# ENUMS
# ============================================

class Category(str, Enum):
    WORK = "work"
    MEETING = "meeting"
    BREAK = "break"
    PERSONAL = "personal"
    LEARNING = "learning"
    EXERCISE = "exercise"
    # Missing or unrecognised category in stored history
    UNCATEGORIZED = "uncategorized"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


PRIORITY_ORDER = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


# ============================================
# TIME BLOCK MODELS
# ============================================

class TimeBlock(BaseModel):
    """A scheduled or completed activity on a single calendar day."""
    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    date: Date
    hour: int = Field(ge=0, le=23)
    start_minute: int = Field(default=0, ge=0, le=59)
    duration_minutes: int = Field(default=25, gt=0)
    category: Category = Category.UNCATEGORIZED
    completed: bool = False
    title: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value):
        return None if value is None else str(value)

    @field_validator("category", mode="before")
    @classmethod
    def _bucket_unknown_category(cls, value):
        if isinstance(value, Category):
            return value
        try:
            return Category(value)
        except ValueError:
            return Category.UNCATEGORIZED

    @property
    def start(self) -> int:
        """Start as minutes since midnight."""
        return self.hour * 60 + self.start_minute

    @property
    def end(self) -> int:
        """Exclusive end as minutes since midnight."""
        return self.start + self.duration_minutes

    def overlaps(self, other: "TimeBlock") -> bool:
        return self.date == other.date and self.start < other.end and other.start < self.end


# ============================================
# PROFILE MODELS
# ============================================

class ProductivityProfile(BaseModel):
    """Statistics derived from a user's history; recomputed per request."""
    completion_rate: int = Field(default=0, ge=0, le=100)
    peak_hours: List[int] = Field(default_factory=list)
    category_distribution: Dict[str, int] = Field(default_factory=dict)
    current_streak: int = 0
    longest_streak: int = 0

    window_days: int = 30
    total_blocks: int = 0
    completed_blocks: int = 0
    avg_blocks_per_day: float = 0.0
    hourly_completions: Dict[int, int] = Field(default_factory=dict)
    avg_session_minutes: int = 25
    best_days: List[str] = Field(default_factory=list)
    meeting_cluster_start: Optional[int] = Field(
        default=None, description="First hour of the band historical meetings cluster in"
    )
    meetings_per_day: int = 0
    typical_meeting_minutes: int = 30

    def has_pattern_signal(self, min_blocks: int) -> bool:
        """Whether there is enough history to trust the profile."""
        return self.total_blocks >= min_blocks and bool(self.peak_hours)


# ============================================
# SCHEDULING MODELS
# ============================================

class TaskRequest(BaseModel):
    title: str
    category: Category = Category.WORK
    duration_minutes: int = Field(default_factory=lambda: get_schedule_config().default_task_minutes, gt=0)
    priority: Priority = Priority.MEDIUM


class CandidateSlot(BaseModel):
    """A start position inside a free gap, with its heuristic score."""
    start: int
    duration_minutes: int
    gap_start: int
    gap_end: int
    score: float
    matched_peak_hour: Optional[int] = None
    heuristics: List[str] = Field(default_factory=list)

    @property
    def end(self) -> int:
        return self.start + self.duration_minutes

    @property
    def hour(self) -> int:
        return self.start // 60

    @property
    def minute(self) -> int:
        return self.start % 60

    @property
    def label(self) -> str:
        return f"{format_minutes(self.start)}-{format_minutes(self.end)}"


class ScheduleSuggestion(BaseModel):
    title: str
    date: Date
    hour: int
    start_minute: int
    duration_minutes: int
    category: Category
    reason: str
    confidence: float = Field(ge=0.0, le=1.0)
    score: float = 0.0
    alternatives: List[CandidateSlot] = Field(default_factory=list)

    def to_block(self) -> TimeBlock:
        """Proposed block, used to grow the occupied set within one call."""
        return TimeBlock(
            date=self.date,
            hour=self.hour,
            start_minute=self.start_minute,
            duration_minutes=self.duration_minutes,
            category=self.category,
            title=self.title,
        )


class BatchScheduleResult(BaseModel):
    placed: List[ScheduleSuggestion] = Field(default_factory=list)
    unplaced: List[TaskRequest] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.unplaced


# ============================================
# TEMPLATE MODELS
# ============================================

class TemplateBlock(BaseModel):
    title: str
    category: Category
    hour: int = Field(ge=0, le=23)
    start_minute: int = Field(default=0, ge=0, le=59)
    duration_minutes: int = Field(gt=0)
    reason: str

    @property
    def start(self) -> int:
        return self.hour * 60 + self.start_minute

    @property
    def end(self) -> int:
        return self.start + self.duration_minutes


class DayTemplate(BaseModel):
    date: Date
    blocks: List[TemplateBlock] = Field(default_factory=list)
    based_on_patterns: bool = False


# ============================================
# ADVISORY MODELS
# ============================================

class AdviceKind(str, Enum):
    PEAK_HOURS = "peak-hours"
    DEEP_WORK = "deep-work"
    BREAK_NEEDED = "break-needed"


class Advisory(BaseModel):
    kind: AdviceKind
    message: str
    priority: Priority = Priority.MEDIUM


class DayOptimization(BaseModel):
    """Read-only advice about an already planned day."""
    date: Date
    advisories: List[Advisory] = Field(default_factory=list)
    free_gaps: List[Dict[str, Any]] = Field(default_factory=list)


# ============================================
# API REQUEST / RESPONSE MODELS
# ============================================

class ScheduleRequest(BaseModel):
    task: TaskRequest
    date: Optional[Date] = None


class BatchScheduleRequest(BaseModel):
    tasks: List[TaskRequest]
    date: Optional[Date] = None


class HealthStatus(BaseModel):
    status: str = "healthy"
    version: str = "1.0.0"
    history_source: str = "memory"
    phrasing: str = "disabled"
