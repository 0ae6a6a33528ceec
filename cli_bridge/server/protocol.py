from collections.abc import Awaitable, Callable

from fastapi.responses import JSONResponse
from pydantic import ValidationError

from cli_bridge.core.process import ProcessStream, ProcessStreamBridge, ProcessTimeoutError, SpawnError
from cli_bridge.models.events import (
    CloseEvent,
    ErrorEvent,
    StderrEvent,
    StdoutEvent,
    StreamEvent,
)
from cli_bridge.models.responses import Envelope, ErrorDetail, ErrorResponse, SseMessage
from cli_bridge.utils.logging import get_logger


logger = get_logger("protocol")


class ProtocolError(Exception):
    """Event could not be framed."""
    pass


def to_message(event: StreamEvent) -> SseMessage:
    """Map a stream event to its wire message."""
    if isinstance(event, (StdoutEvent, StderrEvent)):
        return SseMessage(type=event.type, content=event.content)

    elif isinstance(event, CloseEvent):
        return SseMessage(type="close", content=f"Process exited with code {event.exit_code}")

    elif isinstance(event, ErrorEvent):
        return SseMessage(type="error", content=event.message)

    raise ProtocolError(f"Unknown event: {event!r}")


def serialize_event(event: StreamEvent) -> str:
    """Frame one event as a server-sent event."""
    return f"data: {to_message(event).model_dump_json()}\n\n"


def create_error(status_code: int, message: str) -> JSONResponse:
    """Create a pre-stream error response."""
    body = ErrorResponse(error=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def create_validation_error(error: ValidationError | None = None, message: str | None = None) -> JSONResponse:
    """Create a 400 response listing every invalid field."""
    if error is not None:
        details = [
            ErrorDetail(loc=list(e["loc"]), msg=e["msg"], type=e["type"])
            for e in error.errors(include_url=False)
        ]
    else:
        details = [ErrorDetail(loc=["body"], msg=message or "Invalid request body", type="json_invalid")]

    body = ErrorResponse(error="Validation error", details=details)
    return JSONResponse(status_code=400, content=body.model_dump(exclude_none=True))


def create_envelope(status_code: int, data: object = None, error: str | None = None) -> JSONResponse:
    """Create a non-streaming result response."""
    body = Envelope(success=error is None, data=data, error=error)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


async def create_run_envelope(
    bridge: ProcessStreamBridge,
    spawner: Awaitable[ProcessStream],
    timeout: float,
    transform: Callable[[str], object] | None = None,
) -> JSONResponse:
    """
    Run a CLI process to completion and wrap its output in an envelope.

    Spawn failure is a 500, a timeout a 504 and a non-zero exit a 502 carrying
    the process's stderr. On success `transform` is applied to stdout.
    """
    try:
        run = await bridge.collect(spawner, timeout=timeout)
    except SpawnError as e:
        return create_envelope(500, error=str(e))
    except ProcessTimeoutError as e:
        return create_envelope(504, error=str(e))

    if run.exit_code != 0:
        logger.warning(f"CLI exited with code {run.exit_code}")
        return create_envelope(502, error=f"CLI exited with code {run.exit_code}: {run.stderr.strip()}")

    return create_envelope(200, data=transform(run.stdout) if transform else run.stdout)
