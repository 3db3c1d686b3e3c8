import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from rfp_slides.core.config import Settings
from rfp_slides.core.errors import GenerationTimeout, GenerationUnavailable
from rfp_slides.models.gemini import GeminiGenerationClient, build_genai_client, strip_thinking


def _fake_genai_client(**generate_kwargs) -> MagicMock:
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(**generate_kwargs)
    return client


class TestStripThinking:
    def test_removes_reasoning_block(self):
        assert strip_thinking("<think>plan the deck</think>\n[{}]") == "[{}]"

    def test_plain_text_unchanged(self):
        assert strip_thinking("  [1, 2]  ") == "[1, 2]"


class TestGeminiGenerationClient:
    @pytest.mark.asyncio
    async def test_returns_response_text(self):
        client = _fake_genai_client(return_value=SimpleNamespace(text='[{"slideNumber": 1}]'))
        generator = GeminiGenerationClient(client=client, model="gemini-test", temperature=0.7, max_output_tokens=3000)

        assert await generator.complete("prompt") == '[{"slideNumber": 1}]'

        kwargs = client.aio.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-test"
        assert kwargs["contents"] == "prompt"
        assert kwargs["config"].temperature == 0.7
        assert kwargs["config"].max_output_tokens == 3000

    @pytest.mark.asyncio
    async def test_timeout(self):
        async def slow(**kwargs):
            await asyncio.sleep(1)

        generator = GeminiGenerationClient(client=_fake_genai_client(side_effect=slow), timeout_seconds=0.01)

        with pytest.raises(GenerationTimeout) as exc_info:
            await generator.complete("prompt")
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_transport_error(self):
        client = _fake_genai_client(side_effect=httpx.ConnectError("connection refused"))
        generator = GeminiGenerationClient(client=client)

        with pytest.raises(GenerationUnavailable) as exc_info:
            await generator.complete("prompt")
        assert "connection refused" in exc_info.value.details

    @pytest.mark.asyncio
    async def test_empty_response(self):
        generator = GeminiGenerationClient(client=_fake_genai_client(return_value=SimpleNamespace(text=None)))

        with pytest.raises(GenerationUnavailable):
            await generator.complete("prompt")

    @pytest.mark.asyncio
    async def test_unconfigured_client(self):
        settings = Settings()
        settings.gemini_api_key = None
        settings.google_credentials_file = None
        generator = GeminiGenerationClient()
        generator._settings = settings

        with pytest.raises(GenerationUnavailable) as exc_info:
            await generator.complete("prompt")
        assert exc_info.value.error == "Language model not configured"


def test_build_client_requires_credentials():
    settings = Settings()
    settings.gemini_api_key = None
    settings.google_credentials_file = None

    with pytest.raises(ValueError):
        build_genai_client(settings)
