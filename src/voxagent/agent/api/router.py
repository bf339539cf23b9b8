"""
FastAPI Router for the voice agent.

Provides the chat and health REST endpoints.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ...api.error_sanitizer import sanitize_error_message
from ...errors import handle_api_error, log_error
from ..alias_store import InMemoryAliasStore
from ..orchestrator import AgentOrchestrator
from .schemas import ChatRequest, ChatResponse, ErrorResponse, HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["agent"])

ERROR_REPLY_PREFIX = "Sorry, I encountered an error: "


# =============================================================================
# Dependencies
# =============================================================================


class AgentDependencies:
    """Container for agent dependencies.

    Injected at application startup.
    """

    orchestrator: Optional[AgentOrchestrator] = None
    provider_name: Optional[str] = None


_deps = AgentDependencies()


def create_agent_dependencies(
    orchestrator: Optional[AgentOrchestrator],
    provider_name: Optional[str] = None,
) -> None:
    """Initialize agent dependencies.

    Call this at application startup (and with None at shutdown).

    Args:
        orchestrator: The agent orchestrator
        provider_name: LLM provider name reported by the health endpoint
    """
    _deps.orchestrator = orchestrator
    _deps.provider_name = provider_name


def get_orchestrator() -> AgentOrchestrator:
    """Get the agent orchestrator dependency."""
    if not _deps.orchestrator:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Agent not initialized",
        )
    return _deps.orchestrator


# =============================================================================
# Error Handling
# =============================================================================


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Reject malformed request bodies with 400 before they reach the agent."""
    details = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "Invalid value")
        details.append(f"{location}: {message}" if location else message)

    logger.info(f"Rejected invalid request to {request.url.path}: {details}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "; ".join(details) or "Invalid request"},
    )


def _error_reply(error: Exception) -> JSONResponse:
    api_error = handle_api_error(error)
    safe_message = sanitize_error_message(api_error.message)
    return JSONResponse(
        status_code=api_error.status_code,
        content={"content": f"{ERROR_REPLY_PREFIX}{safe_message}"},
    )


# =============================================================================
# REST Endpoints
# =============================================================================


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}},
)
async def chat(
    request: ChatRequest,
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
):
    """Process one utterance and return the reply text."""
    alias_store = InMemoryAliasStore.from_payload(request.aliases)

    try:
        reply = await orchestrator.handle(request.message, alias_store)
    except Exception as e:
        log_error(e, context="chat")
        return _error_reply(e)

    logger.info(
        f"Chat handled: intent={reply.intent.value} targets={reply.target_apps} "
        f"iterations={reply.iterations} tool_calls={reply.tool_calls_executed}"
    )
    return ChatResponse(content=reply.content)


@router.get("/health", response_model=HealthResponse)
async def health(
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
) -> HealthResponse:
    """Report the configured model and loop bound."""
    return HealthResponse(
        status="ok",
        model=orchestrator.llm.model_name,
        provider=_deps.provider_name or "unknown",
        max_tool_iterations=orchestrator.config.max_tool_iterations,
    )
