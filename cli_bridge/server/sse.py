from collections.abc import AsyncIterator, Awaitable
from contextlib import aclosing

from fastapi import BackgroundTasks
from fastapi.responses import Response, StreamingResponse

from cli_bridge.core.process import ProcessStream, SpawnError
from cli_bridge.models.events import ErrorEvent, is_terminal
from cli_bridge.server.protocol import create_error, serialize_event
from cli_bridge.utils.logging import get_logger


logger = get_logger("sse")

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


class EventTransport:
    """
    Turns one CLI process into an HTTP response.

    Until `committed` is set, failures are returned as JSON error bodies.
    Afterwards the status line is gone and failures can only be reported as
    a terminal in-band error frame.
    """

    def __init__(self):
        self.committed = False
        self.terminated = False

    async def open(self, spawner: Awaitable[ProcessStream]) -> Response:
        """Start the process and commit to streaming, or return a 500 error body."""
        try:
            process_stream = await spawner
        except SpawnError as e:
            return self.fail(str(e))

        self.committed = True
        cleanup = BackgroundTasks()
        cleanup.add_task(process_stream.terminate)

        return StreamingResponse(
            self.frames(process_stream),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
            background=cleanup,
        )

    def fail(self, message: str) -> Response:
        if self.committed:
            raise RuntimeError("Response already committed to streaming")
        return create_error(500, message)

    async def frames(self, process_stream: ProcessStream) -> AsyncIterator[str]:
        """Serialized frames, one per event, ending with exactly one terminal frame."""
        try:
            async with aclosing(process_stream.events()) as events:
                async for event in events:
                    if is_terminal(event):
                        self.terminated = True
                    yield serialize_event(event)

        except Exception as e:
            logger.exception(f"Stream for process {process_stream.pid} failed: {e}")
            if not self.terminated:
                self.terminated = True
                yield serialize_event(ErrorEvent(message=str(e)))
