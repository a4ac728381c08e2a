"""Base LLM Client interface and shared request/response types."""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from .errors import UnsupportedOperationError

logger = logging.getLogger(__name__)


class BackendKind(Enum):
    """Supported LLM backends."""

    LOCAL = "ollama"
    CLOUD = "gemini"


class MediaKind(Enum):
    """Kinds of media that can be attached to a request."""

    IMAGE = "image"
    AUDIO = "audio"


@dataclass(frozen=True)
class GenerationOptions:
    """Sampling parameters forwarded to the backend."""

    temperature: float = 0.7
    top_p: float = 0.9

    def to_dict(self) -> dict[str, float]:
        return {"temperature": self.temperature, "top_p": self.top_p}


@dataclass(frozen=True)
class MediaPart:
    """Base64-encoded attachment tagged with its media kind."""

    data: str
    mime_type: str
    kind: MediaKind


@dataclass(frozen=True)
class GenerationRequest:
    """Prompt plus zero or more encoded attachments."""

    prompt: str
    parts: tuple[MediaPart, ...] = ()
    options: GenerationOptions | None = None

    @property
    def images(self) -> tuple[MediaPart, ...]:
        return tuple(p for p in self.parts if p.kind == MediaKind.IMAGE)

    @property
    def audio(self) -> tuple[MediaPart, ...]:
        return tuple(p for p in self.parts if p.kind == MediaKind.AUDIO)


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class GenerationResult:
    """Free-text result stamped with completion time (epoch ms).

    Structured operations return the parsed dict directly.
    """

    text: str
    timestamp: int = field(default_factory=_now_ms)

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "timestamp": self.timestamp}


@dataclass(frozen=True)
class ModelDescriptor:
    """A model available on the local server."""

    name: str
    size: int | None = None
    modified_at: str | None = None
    digest: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ModelDescriptor":
        return cls(
            name=data.get("name", ""),
            size=data.get("size"),
            modified_at=data.get("modified_at"),
            digest=data.get("digest"),
        )


@dataclass
class ConnectionStatus:
    """Outcome of a connectivity round-trip."""

    success: bool
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"success": self.success}
        if self.error is not None:
            result["error"] = self.error
        return result


class BaseLLMClient(ABC):
    """Abstract base class for LLM backends.

    Both backends implement one capability contract: text generation,
    image-attached generation, model listing and a health check. Audio is
    an optional capability expressed by ``AudioCapableClient``.
    """

    backend: BackendKind

    def __init__(self, model: str) -> None:
        """Initialize LLM client.

        Args:
            model: Model name to use
        """
        self.model = model

    @property
    def backend_name(self) -> str:
        return self.backend.value

    def supports(self, kind: MediaKind) -> bool:
        """Whether the current model accepts attachments of ``kind``."""
        return True

    def ensure_supports(self, kind: MediaKind) -> None:
        """Raise UnsupportedOperationError if ``kind`` cannot be attached."""
        if not self.supports(kind):
            raise UnsupportedOperationError(
                f"{self.backend_name} model '{self.model}' does not support {kind.value} input",
                backend=self.backend_name,
                model=self.model,
            )

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> str:
        """Generate text for a prompt and its attachments.

        Args:
            request: Prompt, attachments and optional sampling options

        Returns:
            Raw generated text
        """
        pass

    @abstractmethod
    async def list_models(self) -> list[ModelDescriptor]:
        """List models the backend can serve."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check whether the backend is reachable."""
        pass

    def unavailable_message(self) -> str:
        """Human-readable cause used when health_check() fails."""
        return f"{self.backend_name} model {self.model} not available"


@runtime_checkable
class AudioCapableClient(Protocol):
    """Backends that can describe audio clips."""

    async def generate_with_audio(
        self,
        prompt: str,
        audio: MediaPart,
        options: GenerationOptions | None = None,
    ) -> str:
        ...
