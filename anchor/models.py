"""Request and response models for the Anchor guidance service."""

import uuid
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ChatMessage(BaseModel):
    """A single role-tagged message sent to the completion endpoint."""

    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user"]
    content: str


class ResponseFormat(BaseModel):
    """Output format hint; ``json_object`` asks for strict JSON."""

    model_config = ConfigDict(frozen=True)

    type: str = "json_object"


class CompletionRequest(BaseModel):
    """Outgoing chat-completion request body."""

    model_config = ConfigDict(frozen=True)

    messages: List[ChatMessage]
    model: str
    temperature: float
    max_tokens: int
    top_p: float
    stop: Optional[Union[str, List[str]]] = None
    stream: Literal[False] = False
    response_format: ResponseFormat = Field(default_factory=ResponseFormat)


class CompletionMessage(BaseModel):
    content: str


class CompletionChoice(BaseModel):
    message: CompletionMessage


class CompletionResponse(BaseModel):
    """Envelope returned by the completion endpoint (extra fields ignored)."""

    choices: List[CompletionChoice]


class GuidancePayload(BaseModel):
    """The four-field pastoral response encoded inside the completion content."""

    verseReference: str
    verseText: str
    explanation: str
    prayer: str


class GuidanceResult(GuidancePayload):
    """A decoded guidance payload with a display identity."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4)

    @classmethod
    def from_payload(cls, payload: GuidancePayload) -> "GuidanceResult":
        """Wrap a payload, assigning a fresh id."""
        return cls(**payload.model_dump())


class GuidanceRequest(BaseModel):
    """Incoming guidance request from the presentation layer."""

    input: str = Field(..., description="What's on the user's heart")

    @field_validator("input")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("input must contain non-whitespace characters")
        return v


class ErrorDetail(BaseModel):
    """Structured error detail."""

    type: str
    message: str


class ErrorResponse(BaseModel):
    """Error response envelope."""

    error: ErrorDetail
