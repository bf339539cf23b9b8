"""FastAPI application for the voice agent.

This is the main entry point for the agent API server:

    python -m voxagent.app
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .agent.api import create_agent_dependencies, validation_exception_handler
from .agent.api import router as agent_router
from .agent.orchestrator import AgentConfig, AgentOrchestrator
from .agent.providers import (
    AnthropicProvider,
    BaseLLMProvider,
    LLMProviderConfig,
    OllamaProvider,
    OpenAIProvider,
)
from .agent.tools import ToolBackendClient, ToolBackendConfig, ToolRegistry
from .config import AgentSettings
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


def build_llm_provider(settings: AgentSettings) -> BaseLLMProvider:
    """Create the configured LLM provider.

    Args:
        settings: Validated settings

    Returns:
        Provider instance

    Raises:
        ConfigurationError: If the provider name is unknown
    """
    if settings.llm_provider == "openai":
        config = LLMProviderConfig(
            api_key=settings.openai_api_key or "",
            model=settings.model,
            timeout=settings.llm_timeout,
            temperature=settings.temperature,
        )
        provider: BaseLLMProvider = OpenAIProvider(config)

    elif settings.llm_provider == "anthropic":
        config = LLMProviderConfig(
            api_key=settings.anthropic_api_key or "",
            model=settings.model,
            timeout=settings.llm_timeout,
            temperature=settings.temperature,
        )
        provider = AnthropicProvider(config)

    elif settings.llm_provider == "ollama":
        config = LLMProviderConfig(
            api_key="not-needed",
            model=settings.model,
            base_url=settings.ollama_base_url,
            timeout=settings.llm_timeout,
            temperature=settings.temperature,
        )
        provider = OllamaProvider(config)

    else:
        raise ConfigurationError(f"Unknown LLM_PROVIDER {settings.llm_provider!r}")

    logger.info(f"Using {settings.llm_provider} provider with model: {settings.model}")
    return provider


def create_app(
    settings: Optional[AgentSettings] = None,
    orchestrator: Optional[AgentOrchestrator] = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Settings to use (loaded from the environment if None)
        orchestrator: Pre-built orchestrator; when given, no provider or
            backend clients are created at startup

    Returns:
        Configured FastAPI app
    """
    settings = settings or AgentSettings.from_env()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager.

        - Startup: Validate settings, build provider, backend client and
          orchestrator, register them with the router
        - Shutdown: Unregister and close clients
        """
        logger.info("Starting voice agent API...")

        llm_provider: Optional[BaseLLMProvider] = None
        backend: Optional[ToolBackendClient] = None
        agent = orchestrator

        if agent is None:
            settings.validate()

            llm_provider = build_llm_provider(settings)
            backend = ToolBackendClient(
                ToolBackendConfig(
                    base_url=settings.tool_backend_url,
                    api_key=settings.tool_backend_api_key,
                    entity_id=settings.tool_backend_entity_id,
                )
            )
            logger.info(f"Tool backend configured for: {settings.tool_backend_url}")

            agent = AgentOrchestrator(
                llm_provider=llm_provider,
                tool_registry=ToolRegistry(backend),
                config=AgentConfig(max_tool_iterations=settings.max_tool_iterations),
            )

        create_agent_dependencies(agent, settings.llm_provider)
        logger.info("Agent orchestrator initialized successfully")

        yield

        logger.info("Shutting down voice agent API...")
        create_agent_dependencies(None)

        if backend:
            await backend.close()
            logger.info("Tool backend client closed")
        if llm_provider:
            await llm_provider.close()
            logger.info("LLM provider closed")

    app = FastAPI(
        title="Voice Agent API",
        description="Turns spoken or typed requests into chat replies or tool actions.",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.include_router(agent_router)

    @app.get("/api/config")
    async def get_config():
        """Get client configuration (voice settings)."""
        return {
            "speech_debounce_ms": settings.speech_debounce_ms,
            "tts_model": settings.tts_model,
            "tts_voice": settings.tts_voice,
            "version": __version__,
        }

    return app


def main() -> None:
    """Run the API server with uvicorn."""
    import uvicorn

    uvicorn.run(
        "voxagent.app:create_app",
        factory=True,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
    )


# Entry point for running with uvicorn
if __name__ == "__main__":
    main()
