"""
Environment-driven settings for the voice agent service.

Settings are read once at startup. Every field can also be passed to
the constructor directly, which is how tests build them.

Environment:
    LLM_PROVIDER            openai | anthropic | ollama (default: openai)
    LLM_MODEL               Model name (falls back to OPENAI_MODEL, then a
                            per-provider default)
    OPENAI_API_KEY          Required when LLM_PROVIDER=openai
    ANTHROPIC_API_KEY       Required when LLM_PROVIDER=anthropic
    OLLAMA_BASE_URL         Ollama server (default: http://localhost:11434)
    LLM_TEMPERATURE         Sampling temperature (default: 0.0)
    LLM_TIMEOUT             Provider request timeout in seconds (default: 60)
    MAX_TOOL_ITERATIONS     Tool loop bound (default: 10)
    TOOL_BACKEND_URL        Tool backend base URL
    COMPOSIO_API_KEY        Tool backend API key (required)
    TOOL_BACKEND_ENTITY_ID  Connected-account owner (default: default)
    SPEECH_DEBOUNCE_MS      Client speech debounce (default: 1500)
    TTS_MODEL / TTS_VOICE   Client text-to-speech settings (tts-1 / echo)
    CORS_ORIGINS            Comma-separated allowed origins
    LOG_LEVEL               Logging level (default: INFO)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("openai", "anthropic", "ollama")

DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "anthropic": "claude-sonnet-4-5-20250929",
    "ollama": "qwen3:4b",
}


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")


@dataclass
class AgentSettings:
    """Runtime settings for the agent service."""

    llm_provider: str = "openai"
    model: Optional[str] = None
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    ollama_base_url: str = "http://localhost:11434"
    temperature: float = 0.0
    llm_timeout: float = 60.0
    max_tool_iterations: int = 10

    tool_backend_url: str = "https://backend.composio.dev"
    tool_backend_api_key: Optional[str] = None
    tool_backend_entity_id: str = "default"

    # Client-side voice settings, served as configuration only
    speech_debounce_ms: int = 1500
    tts_model: str = "tts-1"
    tts_voice: str = "echo"

    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:3000"])
    log_level: str = "INFO"

    def __post_init__(self):
        self.llm_provider = self.llm_provider.strip().lower()
        if not self.model:
            self.model = DEFAULT_MODELS.get(self.llm_provider, DEFAULT_MODELS["openai"])

    @classmethod
    def from_env(cls) -> AgentSettings:
        """Load settings from the environment (and a .env file if present).

        Raises:
            ConfigurationError: If a numeric variable cannot be parsed
        """
        load_dotenv()

        cors = os.getenv("CORS_ORIGINS", "http://localhost:3000")

        return cls(
            llm_provider=os.getenv("LLM_PROVIDER", "openai"),
            model=os.getenv("LLM_MODEL") or os.getenv("OPENAI_MODEL"),
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY"),
            ollama_base_url=os.getenv("OLLAMA_BASE_URL", "http://localhost:11434"),
            temperature=_get_float("LLM_TEMPERATURE", 0.0),
            llm_timeout=_get_float("LLM_TIMEOUT", 60.0),
            max_tool_iterations=_get_int("MAX_TOOL_ITERATIONS", 10),
            tool_backend_url=os.getenv("TOOL_BACKEND_URL", "https://backend.composio.dev"),
            tool_backend_api_key=os.getenv("COMPOSIO_API_KEY"),
            tool_backend_entity_id=os.getenv("TOOL_BACKEND_ENTITY_ID", "default"),
            speech_debounce_ms=_get_int("SPEECH_DEBOUNCE_MS", 1500),
            tts_model=os.getenv("TTS_MODEL", "tts-1"),
            tts_voice=os.getenv("TTS_VOICE", "echo"),
            cors_origins=[origin.strip() for origin in cors.split(",") if origin.strip()],
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> None:
        """Check that the settings can start the service.

        Raises:
            ConfigurationError: Listing every missing credential, or
                describing the first invalid value
        """
        if self.llm_provider not in SUPPORTED_PROVIDERS:
            raise ConfigurationError(
                f"Unknown LLM_PROVIDER {self.llm_provider!r}; "
                f"expected one of {', '.join(SUPPORTED_PROVIDERS)}"
            )

        if self.max_tool_iterations < 1:
            raise ConfigurationError(
                f"MAX_TOOL_ITERATIONS must be at least 1, got {self.max_tool_iterations}"
            )

        missing = []
        if self.llm_provider == "openai" and not self.openai_api_key:
            missing.append("OPENAI_API_KEY")
        if self.llm_provider == "anthropic" and not self.anthropic_api_key:
            missing.append("ANTHROPIC_API_KEY")
        if not self.tool_backend_api_key:
            missing.append("COMPOSIO_API_KEY")

        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}",
                missing=missing,
            )

        logger.debug(f"Settings validated for provider {self.llm_provider} ({self.model})")
