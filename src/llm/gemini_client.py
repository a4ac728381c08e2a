"""Gemini client for the cloud backend.

Uses the google-generativeai SDK. Each call is a single
``generate_content_async`` request; attachments are sent inline with
their MIME type. There is no retry here: failures surface as
UpstreamError.
"""

import asyncio
import base64
import logging
import os
from typing import Any

import google.generativeai as genai

from .base import (
    BackendKind,
    BaseLLMClient,
    GenerationOptions,
    GenerationRequest,
    MediaPart,
    ModelDescriptor,
)
from .errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)


DEFAULT_MODEL = "gemini-2.0-flash"


class GeminiClient(BaseLLMClient):
    """Google Gemini client for text, image and audio prompts.

    Attributes:
        model: Model name to use (default: gemini-2.0-flash)
    """

    backend = BackendKind.CLOUD

    def __init__(self, api_key: str | None = None, model: str = DEFAULT_MODEL) -> None:
        """Initialize Gemini client.

        Args:
            api_key: Gemini API key (or set GEMINI_API_KEY env var)
            model: Model name to use
        """
        api_key = api_key or os.getenv("GEMINI_API_KEY")
        if not api_key:
            raise ConfigurationError(
                "Gemini API key required. Set GEMINI_API_KEY env var or pass api_key."
            )

        super().__init__(model=model)
        genai.configure(api_key=api_key)
        self._model = genai.GenerativeModel(model)

        logger.info(f"Gemini client initialized with model: {model}")

    @staticmethod
    def _to_blob(part: MediaPart) -> dict[str, Any]:
        return {"mime_type": part.mime_type, "data": base64.b64decode(part.data)}

    async def _generate_content(
        self,
        contents: list[Any],
        options: GenerationOptions | None,
    ) -> str:
        kwargs: dict[str, Any] = {}
        if options is not None:
            kwargs["generation_config"] = options.to_dict()

        try:
            response = await self._model.generate_content_async(contents, **kwargs)
            text = response.text
        except Exception as e:
            logger.error(f"Gemini API error ({self.model}): {e}")
            raise UpstreamError(
                f"Gemini request failed for model {self.model}: {e}",
                backend=self.backend_name,
                model=self.model,
            ) from e

        if not text:
            raise UpstreamError(
                f"Empty response from Gemini (model={self.model})",
                backend=self.backend_name,
                model=self.model,
            )
        return text

    async def generate(self, request: GenerationRequest) -> str:
        """Generate text for a prompt with optional inline images/audio.

        Raises:
            UpstreamError: If the SDK call fails or returns no text
        """
        contents: list[Any] = [request.prompt]
        contents.extend(self._to_blob(part) for part in request.parts)
        return await self._generate_content(contents, request.options)

    async def generate_with_audio(
        self,
        prompt: str,
        audio: MediaPart,
        options: GenerationOptions | None = None,
    ) -> str:
        """Generate text for a prompt with one inline audio clip."""
        return await self._generate_content([prompt, self._to_blob(audio)], options)

    async def list_models(self) -> list[ModelDescriptor]:
        # Model discovery is a local-backend feature.
        return []

    async def health_check(self) -> bool:
        """Check that the API key can see the configured model."""
        try:
            await asyncio.to_thread(genai.get_model, f"models/{self.model}")
            return True
        except Exception as e:
            logger.warning(f"Health check failed for Gemini model {self.model}: {e}")
            return False
