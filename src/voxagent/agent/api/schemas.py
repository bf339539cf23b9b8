"""
Pydantic schemas for agent API.

Defines request/response models for the chat API.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Constants
# =============================================================================

MAX_MESSAGE_LENGTH = 10000


# =============================================================================
# Chat Schemas
# =============================================================================


class AliasSchema(BaseModel):
    """A stored integration parameter."""

    name: str = Field(..., min_length=1)
    value: str


class ChatRequest(BaseModel):
    """Request to send a chat message.

    Aliases are owned by the client and sent with every request,
    keyed by integration name.
    """

    message: str = Field(..., min_length=1, max_length=MAX_MESSAGE_LENGTH)
    aliases: dict[str, list[AliasSchema]] = Field(default_factory=dict)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "message": "send a message to #general on slack saying hi",
                "aliases": {
                    "SLACK": [{"name": "general", "value": "C123"}],
                },
            }
        }
    )


class ChatResponse(BaseModel):
    """Reply text for the client to display (and optionally speak)."""

    content: str

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "content": "Done! I posted your message to #general.",
            }
        }
    )


class ErrorResponse(BaseModel):
    """Request validation failure."""

    error: str


# =============================================================================
# Health Schemas
# =============================================================================


class HealthResponse(BaseModel):
    """Agent health status."""

    status: str
    model: str
    provider: str
    max_tool_iterations: int
