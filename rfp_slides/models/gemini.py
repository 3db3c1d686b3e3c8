import asyncio
import logging
import re
from typing import Any, Dict, Optional, Protocol

import httpx
from google import genai
from google.auth.exceptions import GoogleAuthError
from google.genai import errors as genai_errors
from google.genai.types import GenerateContentConfig, HttpOptions
from google.oauth2.service_account import Credentials

from rfp_slides.core.config import Settings, get_settings
from rfp_slides.core.errors import GenerationTimeout, GenerationUnavailable
from rfp_slides.core.prompts import SLIDE_DESIGNER_SYSTEM_PROMPT

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]

TRANSPORT_ERRORS = (genai_errors.APIError, GoogleAuthError, httpx.HTTPError)


class GenerationClient(Protocol):
    async def complete(self, prompt: str) -> str: ...


def strip_thinking(text: str) -> str:
    """Drop a leading reasoning block ending in </think>."""
    return re.sub(r'^.*?</think>\s*', '', text, flags=re.DOTALL).strip()


def build_genai_client(settings: Settings) -> genai.Client:
    """
    Create a google-genai client.

    Uses a Gemini API key when GEMINI_API_KEY is set, otherwise Vertex AI with
    the service account file in GOOGLE_APPLICATION_CREDENTIALS.
    """
    if settings.gemini_api_key:
        return genai.Client(api_key=settings.gemini_api_key)

    if not settings.google_credentials_file:
        raise ValueError(
            "Set GEMINI_API_KEY, or GOOGLE_APPLICATION_CREDENTIALS to the path of your service account JSON file"
        )

    credentials = Credentials.from_service_account_file(settings.google_credentials_file, scopes=SCOPES)
    return genai.Client(
        vertexai=True,
        project=settings.google_cloud_project,
        location=settings.google_cloud_location,
        credentials=credentials,
        http_options=HttpOptions(api_version="v1"),
    )


class GeminiGenerationClient:
    """
    Single-shot text completion against a Gemini model.

    Failures are not retried; they surface as GenerationUnavailable or
    GenerationTimeout.
    """

    def __init__(
        self,
        client: Optional[genai.Client] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_output_tokens: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
        system: str = SLIDE_DESIGNER_SYSTEM_PROMPT,
        extra_config: Optional[Dict[str, Any]] = None,
    ):
        settings = get_settings()
        self._client = client
        self._settings = settings
        self.model = model or settings.gemini_model
        self.temperature = settings.generation_temperature if temperature is None else temperature
        self.max_output_tokens = max_output_tokens or settings.generation_max_output_tokens
        self.timeout_seconds = settings.generation_timeout_seconds if timeout_seconds is None else timeout_seconds
        self.system = system
        self.extra_config = extra_config or {}

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            self._client = build_genai_client(self._settings)
        return self._client

    def _config(self) -> GenerateContentConfig:
        config_params = {
            "system_instruction": [self.system] if self.system else None,
            "temperature": self.temperature,
            "max_output_tokens": self.max_output_tokens,
        }
        config_params.update(self.extra_config)
        return GenerateContentConfig(**config_params)

    async def complete(self, prompt: str) -> str:
        """
        Generate a completion for the prompt.

        Args:
            prompt: Full user prompt

        Returns:
            Raw response text (reasoning block stripped)

        Raises:
            GenerationTimeout: The call exceeded the configured bound
            GenerationUnavailable: Transport, auth or empty-response failure
        """
        try:
            client = self.client
        except (ValueError, OSError, GoogleAuthError) as e:
            raise GenerationUnavailable("Language model not configured", str(e)) from e

        call = client.aio.models.generate_content(
            model=self.model,
            contents=prompt,
            config=self._config(),
        )

        try:
            if self.timeout_seconds:
                response = await asyncio.wait_for(call, timeout=self.timeout_seconds)
            else:
                response = await call
        except asyncio.TimeoutError as e:
            logger.error(f"Generation timed out after {self.timeout_seconds}s (model: {self.model})")
            raise GenerationTimeout(
                "Language model did not respond in time", f"timeout after {self.timeout_seconds}s"
            ) from e
        except TRANSPORT_ERRORS as e:
            logger.error(f"Generation call failed: {e}")
            raise GenerationUnavailable("Language model unavailable", str(e)) from e

        if not response.text:
            raise GenerationUnavailable("Language model returned an empty response")

        return strip_thinking(response.text)
