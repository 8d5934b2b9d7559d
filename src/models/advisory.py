"""
Advisory Models

Types exchanged between the advisory flow, the UI and the proxy relay.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class AdvisoryState(str, Enum):
    """
    Lifecycle of the advisory panel.

    Idle -> Composing -> AwaitingResponse -> Answered | Failed -> Idle
    """
    IDLE = "idle"
    COMPOSING = "composing"
    AWAITING_RESPONSE = "awaiting_response"
    ANSWERED = "answered"
    FAILED = "failed"


class Answer(BaseModel):
    """Text returned by the remote model."""

    text: str = Field(..., min_length=1)


class AdvisoryOutcome(BaseModel):
    """
    Result of one advisory request, success or failure.

    Exactly one of `answer` / `error_kind` is set. `message` is what the
    UI shows verbatim in both cases.
    """

    sequence: int
    question: str
    answer: Optional[str] = None
    error_kind: Optional[str] = None
    message: str
    stale: bool = Field(
        default=False,
        description="A newer request was started before this one finished"
    )

    @property
    def ok(self) -> bool:
        return self.answer is not None


class ProxyResponse(BaseModel):
    """Framework-neutral HTTP response produced by the ProxyHandler."""

    status_code: int
    body: Optional[dict] = None
    headers: dict[str, str] = Field(default_factory=dict)
