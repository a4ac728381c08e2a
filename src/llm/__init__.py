"""LLM provider layer.

One session interface over two backends:
    Gemini (cloud, google-generativeai) and Ollama (local HTTP server)

Quick Start:
    from src.llm import create_session

    session = create_session(use_local=True)
    await session.wait_ready()
    print(await session.chat("Hello"))

    session = create_session(api_key="...")
    result = await session.describe_audio("clip.mp3")
"""

from .base import (
    AudioCapableClient,
    BackendKind,
    BaseLLMClient,
    ConnectionStatus,
    GenerationOptions,
    GenerationRequest,
    GenerationResult,
    MediaKind,
    MediaPart,
    ModelDescriptor,
)
from .capabilities import VisionCapabilityDetector
from .config import AssistantConfig
from .errors import (
    ConfigurationError,
    LLMError,
    MalformedResponseError,
    UnsupportedOperationError,
    UpstreamError,
)
from .factory import create_session
from .gemini_client import GeminiClient
from .local_client import OllamaClient
from .normalizer import parse_json_object, parse_json_response, strip_code_fence
from .session import LLMSession, SessionState, auto_select_model

__all__ = [
    # Types
    "BackendKind",
    "MediaKind",
    "MediaPart",
    "GenerationOptions",
    "GenerationRequest",
    "GenerationResult",
    "ModelDescriptor",
    "ConnectionStatus",
    # Backends
    "BaseLLMClient",
    "AudioCapableClient",
    "OllamaClient",
    "GeminiClient",
    "VisionCapabilityDetector",
    # Session
    "LLMSession",
    "SessionState",
    "auto_select_model",
    "AssistantConfig",
    "create_session",
    # Normalization
    "strip_code_fence",
    "parse_json_response",
    "parse_json_object",
    # Errors
    "LLMError",
    "ConfigurationError",
    "UpstreamError",
    "UnsupportedOperationError",
    "MalformedResponseError",
]
