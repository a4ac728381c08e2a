"""Factory for creating LLM sessions.

This module builds an LLMSession from configuration or environment
variables.

Usage:
    # From configs/assistant_config.yaml + environment
    session = create_session()

    # Explicit local backend
    session = create_session(use_local=True, local_model="llava")

    # Explicit cloud backend
    session = create_session(api_key="...")
"""

import logging
from pathlib import Path
from typing import Any

from .config import AssistantConfig
from .session import LLMSession

logger = logging.getLogger(__name__)


def create_session(
    config: AssistantConfig | None = None,
    config_path: str | Path | None = None,
    **overrides: Any,
) -> LLMSession:
    """Create an LLMSession.

    Args:
        config: Pre-built configuration. If not given, it is loaded from
                ``config_path`` (or the default path) and the environment.
        config_path: YAML config file to load when ``config`` is None
        **overrides: Keyword arguments overriding the config. Common options:
                  - api_key: Gemini API key
                  - use_local: Enable the Ollama backend
                  - local_model: Ollama model name
                  - local_endpoint: Ollama URL
                  - cloud_model: Gemini model name
                  - vision_detector / http_client: passed to LLMSession

    Returns:
        An LLMSession instance

    Raises:
        ConfigurationError: If neither a Gemini key nor Ollama is configured
    """
    if config is None:
        config = AssistantConfig.load(config_path)

    kwargs: dict[str, Any] = {
        "api_key": config.api_key,
        "use_local": config.use_local,
        "local_model": config.local_model,
        "local_endpoint": config.local_endpoint,
        "cloud_model": config.cloud_model,
    }
    kwargs.update({k: v for k, v in overrides.items() if v is not None})

    logger.info(f"Creating session: provider={'ollama' if kwargs['use_local'] else 'gemini'}")
    return LLMSession(**kwargs)
