"""Client-side vision capability detection.

Ollama does not advertise which models accept images, so capability is
inferred from the model name. The hint list is data, not code: pass
extra hints or subclass ``VisionCapabilityDetector`` to teach it about
new model families.
"""

from collections.abc import Iterable

DEFAULT_VISION_HINTS: tuple[str, ...] = (
    "vision",
    "llava",
    "moondream",
    "pixtral",
    "minicpm",
    "gpt4o",
    "flux",
    "reka",
)

SUGGESTED_VISION_MODELS: tuple[str, ...] = (
    "llama3.2-vision",
    "llava",
    "gemma2:vision",
)


class VisionCapabilityDetector:
    """Decides whether a model name belongs to a vision-capable family."""

    def __init__(
        self,
        hints: Iterable[str] = DEFAULT_VISION_HINTS,
        suggestions: Iterable[str] = SUGGESTED_VISION_MODELS,
    ) -> None:
        self.hints = tuple(h.lower() for h in hints)
        self.suggestions = tuple(suggestions)

    def supports_vision(self, model: str) -> bool:
        name = model.lower()
        return any(hint in name for hint in self.hints)

    def with_hints(self, *extra: str) -> "VisionCapabilityDetector":
        """Return a detector that also matches ``extra`` hints."""
        return type(self)(hints=self.hints + extra, suggestions=self.suggestions)

    def describe_alternatives(self) -> str:
        return ", ".join(self.suggestions)
