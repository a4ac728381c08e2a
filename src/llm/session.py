"""Provider session: one uniform interface over the Ollama and Gemini backends.

The session holds the active backend and routes every operation to it.
Capability gates (audio on Ollama, images on a non-vision Ollama model)
run before any encoding or network call. Structured operations go through
the response normalizer and raise MalformedResponseError on bad output.

Usage:
    session = LLMSession(use_local=True, local_model="llava")
    await session.wait_ready()
    problem = await session.extract_structured_from_images(["shot.png"])
    solution = await session.generate_solution(problem)

Backend switches are serialized by an internal lock. Each operation
captures the active client when it starts, so a switch never changes
the backend under an in-flight call. Operations on the local backend
first wait for any pending model auto-selection.

The session does not own a caller-supplied ``http_client``; closing it
stays with the caller.
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx

from . import prompts
from .base import (
    AudioCapableClient,
    BackendKind,
    BaseLLMClient,
    ConnectionStatus,
    GenerationRequest,
    GenerationResult,
    MediaKind,
    MediaPart,
    ModelDescriptor,
)
from .capabilities import VisionCapabilityDetector
from .encoder import encode_file, encode_files, from_base64
from .errors import ConfigurationError, LLMError, UnsupportedOperationError
from .gemini_client import DEFAULT_MODEL as DEFAULT_CLOUD_MODEL
from .gemini_client import GeminiClient
from .local_client import DEFAULT_ENDPOINT, DEFAULT_MODEL as DEFAULT_LOCAL_MODEL
from .local_client import OllamaClient
from .normalizer import parse_json_object

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionState:
    """Immutable snapshot of the session's backend selection."""

    backend: BackendKind
    model: str
    endpoint: str | None
    has_cloud_client: bool


class LLMSession:
    """Routes assistant operations to the active LLM backend.

    Either ``api_key`` or ``use_local=True`` is required. When both are
    given the local backend is active and the cloud client is kept for a
    later ``switch_to_cloud()``.
    """

    def __init__(
        self,
        api_key: str | None = None,
        use_local: bool = False,
        local_model: str | None = None,
        local_endpoint: str | None = None,
        cloud_model: str = DEFAULT_CLOUD_MODEL,
        vision_detector: VisionCapabilityDetector | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            api_key: Gemini API key
            use_local: Use the local Ollama backend
            local_model: Ollama model name (auto-selected if unavailable)
            local_endpoint: Ollama server URL
            cloud_model: Gemini model name
            vision_detector: Strategy for Ollama vision capability
            http_client: Optional shared httpx.AsyncClient for Ollama

        Raises:
            ConfigurationError: If neither api_key nor use_local is supplied
        """
        if not use_local and not api_key:
            raise ConfigurationError("Either provide Gemini API key or enable Ollama mode")

        self._cloud_model = cloud_model
        self._vision_detector = vision_detector or VisionCapabilityDetector()
        self._http_client = http_client
        self._switch_lock = asyncio.Lock()
        self._autoselect_task: asyncio.Task[bool] | None = None
        self._autoselect_pending = False
        self._ready: bool | None = None

        self._cloud: GeminiClient | None = None
        if api_key:
            self._cloud = GeminiClient(api_key=api_key, model=cloud_model)

        self._local = OllamaClient(
            model=local_model or DEFAULT_LOCAL_MODEL,
            endpoint=local_endpoint or DEFAULT_ENDPOINT,
            vision_detector=self._vision_detector,
            http_client=http_client,
        )

        if use_local:
            self._backend = BackendKind.LOCAL
            logger.info(f"Using Ollama with model: {self._local.model}")
            self._schedule_autoselect()
        else:
            self._backend = BackendKind.CLOUD
            self._ready = True
            logger.info("Using Google Gemini")

    # --- State ---

    @property
    def provider(self) -> str:
        return self._backend.value

    @property
    def is_using_local(self) -> bool:
        return self._backend == BackendKind.LOCAL

    @property
    def current_model(self) -> str:
        if self._backend == BackendKind.LOCAL:
            return self._local.model
        return self._cloud.model if self._cloud else self._cloud_model

    @property
    def endpoint(self) -> str | None:
        return self._local.endpoint if self._backend == BackendKind.LOCAL else None

    @property
    def state(self) -> SessionState:
        return SessionState(
            backend=self._backend,
            model=self.current_model,
            endpoint=self.endpoint,
            has_cloud_client=self._cloud is not None,
        )

    @property
    def is_ready(self) -> bool | None:
        """True once the model is confirmed, False if auto-selection failed, None while pending."""
        return self._ready

    def _active_client(self) -> BaseLLMClient:
        if self._backend == BackendKind.LOCAL:
            return self._local
        if self._cloud is None:
            raise ConfigurationError(
                "Gemini model is not initialized. Provide a Gemini API key or enable Ollama mode."
            )
        return self._cloud

    async def _ready_client(self) -> BaseLLMClient:
        """Active client, after any pending local auto-selection has settled."""
        if self._backend == BackendKind.LOCAL:
            await self.wait_ready()
        return self._active_client()

    # --- Local model auto-selection ---

    def _schedule_autoselect(self) -> None:
        self._ready = None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop yet; started by wait_ready() or the first local operation.
            self._autoselect_pending = True
            return
        self._autoselect_pending = False
        self._autoselect_task = loop.create_task(self._run_autoselect(self._local))

    def _cancel_autoselect(self) -> None:
        self._autoselect_pending = False
        if self._autoselect_task is not None and not self._autoselect_task.done():
            self._autoselect_task.cancel()
        self._autoselect_task = None

    async def _run_autoselect(self, client: OllamaClient) -> bool:
        ready = await auto_select_model(client)
        if client is self._local:
            self._ready = ready
        return ready

    async def wait_ready(self) -> bool:
        """Wait for local model auto-selection to settle.

        Returns:
            True if the active model answered a test prompt
        """
        if self._autoselect_pending:
            self._autoselect_pending = False
            self._autoselect_task = asyncio.get_running_loop().create_task(
                self._run_autoselect(self._local)
            )
        task = self._autoselect_task
        if task is not None:
            try:
                await asyncio.shield(task)
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise
                # Superseded by a switch.
        return bool(self._ready)

    # --- Text ---

    async def chat(self, message: str) -> str:
        """Single-turn completion on the active backend."""
        client = await self._ready_client()
        try:
            return await client.generate(GenerationRequest(prompt=message))
        except LLMError as e:
            logger.error(f"Error in chat ({client.backend_name}): {e}")
            raise

    async def generate_solution(self, problem_info: Any) -> dict[str, Any]:
        """Ask for a ``solution`` object for previously extracted problem info."""
        client = await self._ready_client()
        logger.info("Calling LLM for solution...")
        text = await client.generate(
            GenerationRequest(prompt=prompts.build_solution_prompt(problem_info))
        )
        parsed = parse_json_object(text)
        logger.debug(f"Parsed LLM response: {parsed}")
        return parsed

    # --- Images ---

    async def _generate_with_images(
        self,
        client: BaseLLMClient,
        prompt: str,
        image_paths: list[str | Path],
    ) -> str:
        client.ensure_supports(MediaKind.IMAGE)
        images = await encode_files(image_paths, MediaKind.IMAGE)
        return await client.generate(GenerationRequest(prompt=prompt, parts=images))

    async def extract_structured_from_images(self, image_paths: list[str | Path]) -> dict[str, Any]:
        """Extract problem_statement/context/suggested_responses/reasoning from screenshots.

        Raises:
            UnsupportedOperationError: If the active Ollama model has no vision support
            UpstreamError: If the backend call fails
            MalformedResponseError: If the output is not a JSON object
        """
        client = await self._ready_client()
        try:
            text = await self._generate_with_images(client, prompts.EXTRACTION_PROMPT, image_paths)
            return parse_json_object(text)
        except LLMError as e:
            logger.error(f"Error extracting problem from images: {e}")
            raise

    async def debug_with_images(
        self,
        problem_info: Any,
        current_answer: str,
        image_paths: list[str | Path],
    ) -> dict[str, Any]:
        """Revise a previous answer using new debug screenshots."""
        client = await self._ready_client()
        prompt = prompts.build_debug_prompt(problem_info, current_answer)
        try:
            text = await self._generate_with_images(client, prompt, image_paths)
            parsed = parse_json_object(text)
        except LLMError as e:
            logger.error(f"Error debugging solution with images: {e}")
            raise
        logger.debug(f"Parsed debug LLM response: {parsed}")
        return parsed

    async def describe_image(self, image_path: str | Path) -> GenerationResult:
        """Short free-text description of one image."""
        client = await self._ready_client()
        text = await self._generate_with_images(
            client, prompts.IMAGE_DESCRIPTION_PROMPT, [image_path]
        )
        return GenerationResult(text=text.strip())

    # --- Audio ---

    def _audio_client(self) -> AudioCapableClient:
        client = self._active_client()
        if not isinstance(client, AudioCapableClient):
            raise UnsupportedOperationError(
                "Audio analysis is currently only supported when using Gemini. "
                "Switch off Ollama or supply a Gemini API key.",
                backend=client.backend_name,
                model=client.model,
            )
        return client

    async def _describe_audio_part(self, client: AudioCapableClient, audio: MediaPart) -> GenerationResult:
        text = await client.generate_with_audio(prompts.AUDIO_DESCRIPTION_PROMPT, audio)
        return GenerationResult(text=text)

    async def describe_audio(self, audio_path: str | Path) -> GenerationResult:
        """Describe an audio file (sent as audio/mp3). Gemini only."""
        client = self._audio_client()
        audio = await encode_file(audio_path, MediaKind.AUDIO)
        return await self._describe_audio_part(client, audio)

    async def describe_audio_base64(self, data: str, mime_type: str) -> GenerationResult:
        """Describe a base64-encoded audio clip. Gemini only."""
        client = self._audio_client()
        return await self._describe_audio_part(client, from_base64(data, mime_type))

    # --- Discovery and health ---

    async def list_available_models(self) -> list[ModelDescriptor]:
        """List local models; empty on the cloud backend or on any failure."""
        if self._backend != BackendKind.LOCAL:
            return []
        try:
            return await self._local.list_models()
        except LLMError as e:
            logger.error(f"Error fetching Ollama models: {e}")
            return []

    async def test_connection(self) -> ConnectionStatus:
        """Round-trip a test prompt to the active backend. Never raises."""
        try:
            client = await self._ready_client()
            if not await client.health_check():
                return ConnectionStatus(False, client.unavailable_message())
            text = await client.generate(GenerationRequest(prompt=prompts.HEALTH_CHECK_PROMPT))
            if not text:
                return ConnectionStatus(False, f"Empty response from {client.backend_name}")
            return ConnectionStatus(True)
        except Exception as e:
            return ConnectionStatus(False, str(e))

    # --- Switching ---

    async def switch_to_local(self, model: str | None = None, endpoint: str | None = None) -> None:
        """Activate the Ollama backend, auto-selecting a model if none is given."""
        async with self._switch_lock:
            self._cancel_autoselect()
            self._local = OllamaClient(
                model=model or self._local.model,
                endpoint=endpoint or self._local.endpoint,
                vision_detector=self._vision_detector,
                http_client=self._http_client,
            )
            self._backend = BackendKind.LOCAL
            if model:
                self._ready = True
            else:
                self._ready = None
                self._ready = await auto_select_model(self._local)
            logger.info(f"Switched to Ollama: {self._local.model} at {self._local.endpoint}")

    async def switch_to_cloud(self, api_key: str | None = None) -> None:
        """Activate the Gemini backend.

        Raises:
            ConfigurationError: If no api_key is given and no Gemini client exists
        """
        async with self._switch_lock:
            if api_key:
                self._cloud = GeminiClient(api_key=api_key, model=self._cloud_model)
            if self._cloud is None:
                raise ConfigurationError(
                    "No Gemini API key provided and no existing model instance"
                )
            self._cancel_autoselect()
            self._backend = BackendKind.CLOUD
            self._ready = True
            logger.info("Switched to Gemini")

    # --- Lifecycle ---

    async def aclose(self) -> None:
        """Stop any pending auto-selection. A caller-supplied http_client is left open."""
        self._cancel_autoselect()

    async def __aenter__(self) -> "LLMSession":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()


async def _confirm_model(client: OllamaClient) -> None:
    await client.generate(GenerationRequest(prompt=prompts.HEALTH_CHECK_PROMPT))


async def auto_select_model(client: OllamaClient) -> bool:
    """Pick a model the Ollama server actually has and confirm it responds.

    If the configured model is missing, the first model the server lists is
    adopted. Any failure is logged and retried exactly once with the first
    model of a fresh list. Never raises.

    Returns:
        True if a model answered the confirmation prompt
    """
    try:
        models = [m.name for m in await client.list_models()]
        if not models:
            logger.warning("No Ollama models found")
            return False

        if client.model not in models:
            client.model = models[0]
            logger.info(f"Auto-selected first available model: {client.model}")

        await _confirm_model(client)
        logger.info(f"Successfully initialized with model: {client.model}")
        return True
    except LLMError as e:
        logger.error(f"Failed to initialize Ollama model: {e}")

    try:
        models = [m.name for m in await client.list_models()]
        if not models:
            logger.warning("Fallback found no Ollama models")
            return False
        client.model = models[0]
        logger.info(f"Fallback to: {client.model}")
        await _confirm_model(client)
        return True
    except LLMError as e:
        logger.error(f"Fallback also failed: {e}")
        return False
