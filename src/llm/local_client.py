"""Local LLM Client for an Ollama server.

Speaks Ollama's native HTTP API:
- POST {endpoint}/api/generate  (text, or text + base64 images)
- GET  {endpoint}/api/tags      (model discovery / health check)

Vision support is not advertised by the server, so it is inferred from
the model name by a ``VisionCapabilityDetector``. Image requests against
a non-vision model are rejected before any network call. Audio is never
accepted by this backend.
"""

import logging
import os
from typing import Any

import httpx

from .base import (
    BackendKind,
    BaseLLMClient,
    GenerationOptions,
    GenerationRequest,
    MediaKind,
    ModelDescriptor,
)
from .capabilities import VisionCapabilityDetector
from .errors import UnsupportedOperationError, UpstreamError

logger = logging.getLogger(__name__)


DEFAULT_ENDPOINT = "http://localhost:11434"
DEFAULT_MODEL = "llama3.2"

TEXT_OPTIONS = GenerationOptions(temperature=0.7, top_p=0.9)
VISION_OPTIONS = GenerationOptions(temperature=0.4, top_p=0.9)


class OllamaClient(BaseLLMClient):
    """LLM Client for a local Ollama server.

    Example usage:
        client = OllamaClient(model="llava")
        text = await client.generate(GenerationRequest(prompt="Hello"))

        # Shared connection pool (or a mock transport in tests)
        client = OllamaClient(http_client=httpx.AsyncClient())
    """

    backend = BackendKind.LOCAL

    def __init__(
        self,
        model: str | None = None,
        endpoint: str | None = None,
        vision_detector: VisionCapabilityDetector | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize Ollama client.

        Args:
            model: Model name (uses OLLAMA_MODEL or llama3.2 if not specified)
            endpoint: Server URL (uses OLLAMA_URL or localhost:11434 if not specified)
            vision_detector: Strategy deciding which models accept images
            http_client: Optional shared httpx.AsyncClient
        """
        super().__init__(model=model or os.getenv("OLLAMA_MODEL") or DEFAULT_MODEL)
        self.endpoint = (endpoint or os.getenv("OLLAMA_URL") or DEFAULT_ENDPOINT).rstrip("/")
        self.vision_detector = vision_detector or VisionCapabilityDetector()
        self._http_client = http_client

        logger.info(f"OllamaClient initialized: model={self.model}, endpoint={self.endpoint}")

    def supports(self, kind: MediaKind) -> bool:
        if kind == MediaKind.AUDIO:
            return False
        return self.vision_detector.supports_vision(self.model)

    def ensure_supports(self, kind: MediaKind) -> None:
        if kind == MediaKind.AUDIO:
            raise UnsupportedOperationError(
                "Audio analysis is only supported by the Gemini backend. "
                "Switch off Ollama or supply a Gemini API key.",
                backend=self.backend_name,
                model=self.model,
            )
        if not self.supports(kind):
            raise UnsupportedOperationError(
                f"Current Ollama model ({self.model}) does not support image understanding. "
                f"Switch to a vision-capable model such as "
                f"{self.vision_detector.describe_alternatives()}.",
                backend=self.backend_name,
                model=self.model,
            )

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = f"{self.endpoint}{path}"
        if self._http_client is not None:
            return await self._http_client.request(method, url, **kwargs)
        async with httpx.AsyncClient(timeout=None) as client:
            return await client.request(method, url, **kwargs)

    async def generate(self, request: GenerationRequest) -> str:
        """Generate a completion via /api/generate.

        Args:
            request: Prompt with optional image attachments

        Returns:
            Generated text

        Raises:
            UnsupportedOperationError: If the request carries audio, or images
                for a model without vision support
            UpstreamError: If the server is unreachable or returns an error
        """
        if request.audio:
            self.ensure_supports(MediaKind.AUDIO)
        images = request.images
        if images:
            self.ensure_supports(MediaKind.IMAGE)

        options = request.options or (VISION_OPTIONS if images else TEXT_OPTIONS)
        model = self.model
        payload: dict[str, Any] = {
            "model": model,
            "prompt": request.prompt,
            "stream": False,
            "options": options.to_dict(),
        }
        if images:
            payload["images"] = [part.data for part in images]

        try:
            response = await self._request("POST", "/api/generate", json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Error calling Ollama at {self.endpoint}: {e}")
            raise UpstreamError(
                f"Failed to connect to Ollama: {e}. "
                f"Make sure Ollama is running on {self.endpoint}",
                backend=self.backend_name,
                model=model,
                endpoint=self.endpoint,
            ) from e

        if response.is_error:
            kind = "vision API" if images else "API"
            raise UpstreamError(
                f"Ollama {kind} error: {response.status_code} {response.reason_phrase} "
                f"(model={model}, endpoint={self.endpoint})",
                backend=self.backend_name,
                model=model,
                endpoint=self.endpoint,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(
                f"Ollama returned a non-JSON body from {self.endpoint}",
                backend=self.backend_name,
                model=model,
                endpoint=self.endpoint,
            ) from e

        if not isinstance(data, dict) or not isinstance(data.get("response", ""), str):
            raise UpstreamError(
                f"Ollama returned an unexpected body from {self.endpoint}/api/generate "
                f"(model={model})",
                backend=self.backend_name,
                model=model,
                endpoint=self.endpoint,
            )

        text = data.get("response")
        if images and not text:
            raise UpstreamError(
                f"Ollama vision API returned an empty response (model={model})",
                backend=self.backend_name,
                model=model,
                endpoint=self.endpoint,
            )
        return text or ""

    async def list_models(self) -> list[ModelDescriptor]:
        """Fetch the server's model list via /api/tags.

        Raises:
            UpstreamError: If the list cannot be fetched
        """
        try:
            response = await self._request("GET", "/api/tags")
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise UpstreamError(
                f"Failed to fetch models from Ollama at {self.endpoint}: {e}",
                backend=self.backend_name,
                model=self.model,
                endpoint=self.endpoint,
            ) from e

        models = (data.get("models") or []) if isinstance(data, dict) else None
        if not isinstance(models, list) or not all(isinstance(m, dict) for m in models):
            raise UpstreamError(
                f"Ollama returned an unexpected body from {self.endpoint}/api/tags",
                backend=self.backend_name,
                model=self.model,
                endpoint=self.endpoint,
            )

        return [ModelDescriptor.from_dict(m) for m in models]

    async def health_check(self) -> bool:
        """Check if the Ollama server is running and accessible.

        Returns:
            True if server is healthy, False otherwise
        """
        try:
            response = await self._request("GET", "/api/tags")
            return response.is_success
        except httpx.HTTPError as e:
            logger.warning(f"Health check failed for Ollama at {self.endpoint}: {e}")
            return False

    def unavailable_message(self) -> str:
        return f"Ollama not available at {self.endpoint}"
