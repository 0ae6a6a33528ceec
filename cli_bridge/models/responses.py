from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class SseMessage(BaseModel):
    """Single framed message on the event stream."""

    type: Literal["stdout", "stderr", "close", "error"]
    content: str


class ErrorDetail(BaseModel):
    """One field-level validation problem."""

    loc: list[str | int]
    msg: str
    type: str


class ErrorResponse(BaseModel):
    """Body of every failure returned before a stream is opened."""

    success: Literal[False] = False
    error: str
    details: list[ErrorDetail] | None = None


class Envelope(BaseModel):
    """Non-streaming result wrapper."""

    success: bool
    data: Any | None = None
    error: str | None = None
    timestamp: str = Field(default_factory=utc_timestamp)


class CommandInfo(BaseModel):
    executable: str
    leading_arguments: list[str]


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    command: CommandInfo
