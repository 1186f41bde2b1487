"""
Focus Scheduling Engine - OpenAI-Compatible AI Client
Optional rewriting of deterministic suggestion text. Never used for placement decisions.
"""

import asyncio
import logging
import time
from functools import wraps
from typing import List, Dict, Any, Optional, Callable

from openai import OpenAI, APIError, APIConnectionError, RateLimitError

from .config import get_ai_config, AIConfig
from .errors import ExternalServiceTimeout

logger = logging.getLogger(__name__)


REWRITE_SYSTEM_PROMPT = (
    "You rewrite short scheduling explanations for a focus-timer app. "
    "Keep every time, number and fact unchanged, stay under 25 words, "
    "and reply with the rewritten sentence only."
)


# ============================================
# RETRY DECORATOR
# ============================================

def retry_on_error(max_retries: int = 3, delay: float = 1.0):
    """
    Decorator to retry API calls on transient errors.

    Args:
        max_retries: Maximum number of retry attempts
        delay: Initial delay between retries (exponential backoff)
    """
    def decorator(func: Callable):
        @wraps(func)
        def wrapper(*args, **kwargs):
            last_error = None
            for attempt in range(max_retries):
                try:
                    return func(*args, **kwargs)
                except RateLimitError as e:
                    last_error = e
                    wait_time = delay * (2 ** attempt)
                    logger.warning(f"Rate limited, waiting {wait_time}s before retry {attempt + 1}/{max_retries}")
                    time.sleep(wait_time)
                except APIConnectionError as e:
                    last_error = e
                    wait_time = delay * (2 ** attempt)
                    logger.warning(f"Connection error, waiting {wait_time}s before retry {attempt + 1}/{max_retries}")
                    time.sleep(wait_time)
                except APIError:
                    # Don't retry on other API errors (e.g., invalid model, auth errors)
                    raise
            raise last_error
        return wrapper
    return decorator


# ============================================
# AI CLIENT
# ============================================

class AIClient:
    """
    OpenAI-compatible AI client.

    Supports:
    - OpenAI
    - Ollama (local LLMs like Llama 3)
    - Any OpenAI-compatible API endpoint

    Usage:
        client = AIClient()  # Uses config from .env
        text = client.rewrite("Matches your historical peak focus hour (09:00).")
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        config: Optional[AIConfig] = None
    ):
        cfg = config or get_ai_config()

        self.base_url = base_url or cfg.api_base_url
        self.api_key = api_key or cfg.api_key
        self.model = model or cfg.model_name
        self.default_temperature = cfg.temperature
        self.default_max_tokens = cfg.max_tokens

        # Client-side timeout mirrors the phrasing deadline
        self._client = OpenAI(
            base_url=self.base_url,
            api_key=self.api_key or "dummy-key",  # Some local LLMs don't require keys
            timeout=cfg.rewrite_timeout_seconds,
            max_retries=0,
        )

        logger.info(f"AIClient initialized: base_url={self.base_url}, model={self.model}")

    @retry_on_error(max_retries=2, delay=0.5)
    def chat(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Send a chat completion request.

        Returns:
            Response dict with content, finish_reason and usage
        """
        response = self._client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=self.default_temperature if temperature is None else temperature,
            max_tokens=max_tokens or self.default_max_tokens,
        )

        choice = response.choices[0]
        return {
            "content": choice.message.content,
            "finish_reason": choice.finish_reason,
            "usage": {
                "prompt_tokens": response.usage.prompt_tokens if response.usage else 0,
                "completion_tokens": response.usage.completion_tokens if response.usage else 0,
                "total_tokens": response.usage.total_tokens if response.usage else 0,
            }
        }

    def rewrite(self, text: str) -> str:
        """Rephrase one deterministic explanation."""
        response = self.chat([
            {"role": "system", "content": REWRITE_SYSTEM_PROMPT},
            {"role": "user", "content": text},
        ])
        return (response["content"] or "").strip()


# ============================================
# REASON PHRASER
# ============================================

class ReasonPhraser:
    """
    Failure-isolated decorator around AIClient.rewrite.

    Every call runs in a worker thread under a hard deadline. On timeout or any
    error the original text is returned unchanged.
    """

    def __init__(self, client: Optional[Any] = None, timeout_seconds: Optional[float] = None):
        self.client = client
        if timeout_seconds is None:
            timeout_seconds = get_ai_config().rewrite_timeout_seconds
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_config(cls, config: Optional[AIConfig] = None) -> Optional["ReasonPhraser"]:
        """Phraser backed by a real client, or None when rewriting is disabled."""
        cfg = config or get_ai_config()
        if not cfg.rewrite_enabled:
            return None
        return cls(AIClient(config=cfg), cfg.rewrite_timeout_seconds)

    async def _rewrite(self, text: str) -> str:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.client.rewrite, text),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise ExternalServiceTimeout(
                f"rewrite exceeded {self.timeout_seconds}s"
            ) from e

    async def phrase(self, text: str) -> str:
        if self.client is None or not text:
            return text
        try:
            rewritten = await self._rewrite(text)
        except ExternalServiceTimeout as e:
            logger.warning(f"Reason rewrite timed out, keeping original text: {e}")
            return text
        except Exception as e:
            logger.warning(f"Reason rewrite failed, keeping original text: {e}")
            return text
        return rewritten or text
