import pytest

import focus_engine.ai_client as ai_client
from focus_engine.ai_client import ReasonPhraser
from focus_engine.config import AIConfig


class EchoClient:
    def rewrite(self, text: str) -> str:
        return f"{text}!"


class EmptyClient:
    def rewrite(self, text: str) -> str:
        return ""


def _config_must_not_be_read():
    raise AssertionError("AI config read despite an explicit timeout")


def test_explicit_timeout_skips_config(monkeypatch) -> None:
    monkeypatch.setattr(ai_client, "get_ai_config", _config_must_not_be_read)

    phraser = ReasonPhraser(EchoClient(), timeout_seconds=0.5)

    assert phraser.timeout_seconds == 0.5


def test_default_timeout_comes_from_config(monkeypatch) -> None:
    monkeypatch.setattr(ai_client, "get_ai_config", lambda: AIConfig(_env_file=None, rewrite_timeout_seconds=1.5))

    assert ReasonPhraser(EchoClient()).timeout_seconds == 1.5


def test_disabled_rewriting_builds_no_phraser() -> None:
    assert ReasonPhraser.from_config(AIConfig(_env_file=None, rewrite_enabled=False)) is None


@pytest.mark.asyncio
async def test_phrase_uses_client_output() -> None:
    assert await ReasonPhraser(EchoClient(), 1.0).phrase("Fits your morning") == "Fits your morning!"


@pytest.mark.asyncio
async def test_empty_rewrite_keeps_original() -> None:
    assert await ReasonPhraser(EmptyClient(), 1.0).phrase("Fits your morning") == "Fits your morning"


@pytest.mark.asyncio
async def test_no_client_is_a_passthrough() -> None:
    assert await ReasonPhraser(None, 1.0).phrase("Fits your morning") == "Fits your morning"
