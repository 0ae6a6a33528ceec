from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class StdoutEvent(BaseModel):
    """Chunk read from the subprocess standard output."""

    type: Literal["stdout"] = "stdout"
    content: str


class StderrEvent(BaseModel):
    """Chunk read from the subprocess standard error."""

    type: Literal["stderr"] = "stderr"
    content: str


class CloseEvent(BaseModel):
    """Subprocess exited. Terminal."""

    type: Literal["close"] = "close"
    exit_code: int


class ErrorEvent(BaseModel):
    """Subprocess could not run or the stream failed. Terminal."""

    type: Literal["error"] = "error"
    message: str


StreamEvent = Annotated[
    Union[StdoutEvent, StderrEvent, CloseEvent, ErrorEvent],
    Field(discriminator="type"),
]


def is_terminal(event: StreamEvent) -> bool:
    return isinstance(event, (CloseEvent, ErrorEvent))
