"""
Focus Scheduling Engine - Configuration Management
Supports .env files and runtime configuration for AI phrasing, scheduling heuristics and storage.
"""

from typing import Dict, Any
from pydantic_settings import BaseSettings
from pydantic import Field
from functools import lru_cache


# ============================================
# AI / LLM CONFIGURATION
# ============================================

class AIConfig(BaseSettings):
    """
    AI/LLM Configuration for the optional reason-phrasing pass.
    Supports OpenAI, Ollama, and any OpenAI-compatible API.
    """
    api_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL for OpenAI-compatible API (e.g., OpenAI, Ollama, local LLMs)"
    )
    api_key: str = Field(
        default="",
        description="API key for the LLM provider"
    )
    model_name: str = Field(
        default="gpt-4o-mini",
        description="Model name to use for chat completions"
    )
    temperature: float = Field(
        default=0.3,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for rewritten text"
    )
    max_tokens: int = Field(
        default=200,
        ge=16,
        le=2000,
        description="Maximum tokens in rewritten text"
    )
    rewrite_enabled: bool = Field(
        default=False,
        description="Rewrite deterministic suggestion reasons with the LLM"
    )
    rewrite_timeout_seconds: float = Field(
        default=3.0,
        gt=0.0,
        le=30.0,
        description="Hard deadline for a single rewrite call"
    )

    model_config = {
        "env_prefix": "AI_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore"
    }


# ============================================
# SCHEDULE CONFIGURATION
# ============================================

class ScheduleConfig(BaseSettings):
    """Day window and heuristic tuning for slot finding and templates."""

    # Day window
    day_start_hour: int = Field(
        default=6,
        ge=0,
        le=23,
        description="First hour available for scheduling"
    )
    day_end_hour: int = Field(
        default=22,
        ge=1,
        le=24,
        description="Hour at which the scheduling window closes"
    )
    work_day_end_hour: int = Field(
        default=18,
        ge=1,
        le=24,
        description="End of the working day (anchors the review block)"
    )

    # Slot finding
    min_usable_gap_minutes: int = Field(
        default=15,
        ge=0,
        le=120,
        description="Leftover gaps shorter than this count as fragmentation"
    )
    default_task_minutes: int = Field(
        default=25,
        ge=5,
        le=240,
        description="Duration used when a task does not specify one"
    )
    alternatives_count: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Runner-up slots returned with a single suggestion"
    )

    # History analysis
    history_window_days: int = Field(
        default=30,
        ge=1,
        le=365,
        description="Trailing window analysed for productivity profiles"
    )
    streak_lookback_days: int = Field(
        default=365,
        ge=1,
        le=3650,
        description="History fetched for streak calculation (longest streak spans this range)"
    )
    min_history_blocks: int = Field(
        default=10,
        ge=0,
        le=1000,
        description="Blocks required before templates are based on patterns"
    )
    peak_hours_count: int = Field(
        default=3,
        ge=1,
        le=24,
        description="Number of ranked peak hours exposed in a profile"
    )
    meeting_cluster_span_hours: int = Field(
        default=3,
        ge=1,
        le=12,
        description="Width of the band meetings must fall into to count as clustered"
    )
    meeting_cluster_ratio: float = Field(
        default=0.6,
        gt=0.0,
        le=1.0,
        description="Share of meetings inside the band required for clustering"
    )
    meeting_cluster_min_samples: int = Field(
        default=3,
        ge=1,
        le=100,
        description="Minimum historical meetings before clustering is detected"
    )

    # Template structure
    default_anchor_hour: int = Field(
        default=9,
        ge=0,
        le=23,
        description="Deep work anchor when no peak hour is known"
    )
    deep_work_minutes: int = Field(
        default=90,
        ge=30,
        le=240,
        description="Length of the anchored deep work block"
    )
    focus_session_minutes: int = Field(
        default=50,
        ge=15,
        le=180,
        description="Length of the secondary focus session"
    )
    long_block_minutes: int = Field(
        default=60,
        ge=15,
        le=240,
        description="Work/learning blocks longer than this get a break after them"
    )
    break_minutes: int = Field(
        default=15,
        ge=5,
        le=60,
        description="Length of template breaks"
    )
    lunch_hour: int = Field(
        default=12,
        ge=0,
        le=23,
        description="Preferred lunch start hour"
    )
    lunch_minutes: int = Field(
        default=60,
        ge=15,
        le=120,
        description="Lunch break length"
    )
    collaboration_hour: int = Field(
        default=14,
        ge=0,
        le=23,
        description="Generic collaboration block hour when meetings are not clustered"
    )
    review_minutes: int = Field(
        default=15,
        ge=5,
        le=60,
        description="End-of-day review length"
    )
    deep_work_window_minutes: int = Field(
        default=120,
        ge=30,
        le=480,
        description="Free stretch longer than this is flagged as a deep-work opportunity"
    )
    back_to_back_threshold: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Back-to-back sessions in a day before a break reminder"
    )

    model_config = {
        "env_prefix": "SCHEDULE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore"
    }

    @property
    def day_start_minute(self) -> int:
        return self.day_start_hour * 60

    @property
    def day_end_minute(self) -> int:
        return self.day_end_hour * 60


# ============================================
# DATABASE CONFIGURATION
# ============================================

class DatabaseConfig(BaseSettings):
    """History store connection settings."""

    url: str = Field(
        default="",
        description="PostgreSQL URL; empty disables the Postgres history source"
    )
    min_pool_size: int = Field(default=2, ge=1, le=50)
    max_pool_size: int = Field(default=10, ge=1, le=100)

    model_config = {
        "env_prefix": "DATABASE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore"
    }


# ============================================
# HELPER FUNCTIONS
# ============================================

def format_minutes(minutes: int) -> str:
    """Format minutes since midnight as HH:MM."""
    minutes = minutes % (24 * 60)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


# ============================================
# CACHED CONFIGURATION INSTANCES
# ============================================

@lru_cache()
def get_ai_config() -> AIConfig:
    """Get cached AI configuration instance."""
    return AIConfig()


@lru_cache()
def get_schedule_config() -> ScheduleConfig:
    """Get cached schedule configuration instance."""
    return ScheduleConfig()


@lru_cache()
def get_database_config() -> DatabaseConfig:
    """Get cached database configuration instance."""
    return DatabaseConfig()


def reload_config():
    """Clear configuration cache and reload from environment."""
    get_ai_config.cache_clear()
    get_schedule_config.cache_clear()
    get_database_config.cache_clear()


# ============================================
# CONFIGURATION SUMMARY
# ============================================

def get_config_summary() -> Dict[str, Any]:
    """
    Get a summary of all configuration values.
    Useful for debugging and settings display.
    """
    ai = get_ai_config()
    schedule = get_schedule_config()
    database = get_database_config()

    return {
        "ai": {
            "base_url": ai.api_base_url,
            "model": ai.model_name,
            "has_key": bool(ai.api_key),
            "rewrite_enabled": ai.rewrite_enabled,
            "rewrite_timeout_seconds": ai.rewrite_timeout_seconds,
        },
        "schedule": {
            "window": f"{schedule.day_start_hour:02d}:00 - {schedule.day_end_hour:02d}:00",
            "history_window_days": schedule.history_window_days,
            "min_history_blocks": schedule.min_history_blocks,
            "peak_hours_count": schedule.peak_hours_count,
            "deep_work_minutes": schedule.deep_work_minutes,
            "min_usable_gap_minutes": schedule.min_usable_gap_minutes,
        },
        "database": {
            "configured": bool(database.url),
            "pool": f"{database.min_pool_size}-{database.max_pool_size}",
        },
    }
