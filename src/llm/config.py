"""Assistant configuration loader.

Loads backend settings from a YAML file and applies environment variable
overrides on top:

    GEMINI_API_KEY  cloud credential
    GEMINI_MODEL    cloud model name
    USE_OLLAMA      "true"/"1"/"yes" selects the local backend
    OLLAMA_MODEL    default local model name
    OLLAMA_URL      local endpoint URL
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml

from .gemini_client import DEFAULT_MODEL as DEFAULT_CLOUD_MODEL
from .local_client import DEFAULT_ENDPOINT, DEFAULT_MODEL as DEFAULT_LOCAL_MODEL

logger = logging.getLogger(__name__)

# Default config file path
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "configs" / "assistant_config.yaml"

_TRUTHY = {"1", "true", "yes", "on"}


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML file and return as dictionary."""
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


@dataclass(frozen=True)
class AssistantConfig:
    """Backend selection for an LLMSession."""

    api_key: str | None = None
    use_local: bool = False
    local_model: str = DEFAULT_LOCAL_MODEL
    local_endpoint: str = DEFAULT_ENDPOINT
    cloud_model: str = DEFAULT_CLOUD_MODEL

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AssistantConfig:
        """Create AssistantConfig from the ``gemini``/``ollama`` sections of a dict."""
        gemini = data.get("gemini") or {}
        ollama = data.get("ollama") or {}
        return cls(
            api_key=gemini.get("api_key"),
            use_local=_as_bool(ollama.get("enabled", False)),
            local_model=ollama.get("model", DEFAULT_LOCAL_MODEL),
            local_endpoint=ollama.get("url", DEFAULT_ENDPOINT),
            cloud_model=gemini.get("model", DEFAULT_CLOUD_MODEL),
        )

    def with_env(self, environ: dict[str, str] | None = None) -> AssistantConfig:
        """Return a copy with environment variable overrides applied."""
        env = os.environ if environ is None else environ
        overrides: dict[str, Any] = {}
        if env.get("GEMINI_API_KEY"):
            overrides["api_key"] = env["GEMINI_API_KEY"]
        if env.get("GEMINI_MODEL"):
            overrides["cloud_model"] = env["GEMINI_MODEL"]
        if env.get("USE_OLLAMA"):
            overrides["use_local"] = _as_bool(env["USE_OLLAMA"])
        if env.get("OLLAMA_MODEL"):
            overrides["local_model"] = env["OLLAMA_MODEL"]
        if env.get("OLLAMA_URL"):
            overrides["local_endpoint"] = env["OLLAMA_URL"]
        return replace(self, **overrides)

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> AssistantConfig:
        """Load configuration from YAML file plus environment overrides.

        Args:
            config_path: Path to config file. If None, uses ASSISTANT_CONFIG_PATH
                         or the default path. A missing default file is not an error.

        Raises:
            FileNotFoundError: If an explicitly given config file does not exist
        """
        explicit = config_path is not None or os.getenv("ASSISTANT_CONFIG_PATH") is not None
        path = Path(config_path or os.getenv("ASSISTANT_CONFIG_PATH") or DEFAULT_CONFIG_PATH)

        if path.exists():
            logger.info(f"Loading assistant config from: {path}")
            config = cls.from_dict(_load_yaml(path))
        elif explicit:
            raise FileNotFoundError(f"Config file not found: {path}")
        else:
            logger.debug(f"No config file at {path}, using defaults")
            config = cls()

        return config.with_env()
