import asyncio
import codecs
import os
import re
import signal
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import aclosing

from pydantic import BaseModel

from cli_bridge.core.command_builder import build_chat_args, build_search_args
from cli_bridge.core.environment import (
    env_from_request,
    mask_sensitive,
    prepare_env,
    resolve_working_directory,
)
from cli_bridge.core.resolver import ResolvedCommand
from cli_bridge.models.config import CliConfig, StreamConfig
from cli_bridge.models.events import (
    CloseEvent,
    ErrorEvent,
    StderrEvent,
    StdoutEvent,
    StreamEvent,
)
from cli_bridge.models.requests import ChatRequest, CliRequest, SearchRequest
from cli_bridge.utils.logging import get_logger


logger = get_logger("process")

_NEW_SESSION = os.name == "posix"
_INFO_MESSAGE = re.compile(r"^\[.*\]\s*(Loaded|Using|Authenticated)")


class BridgeError(Exception):
    """Base error for CLI process handling."""
    pass


class SpawnError(BridgeError):
    """The CLI process could not be started."""

    def __init__(self, executable: str, arguments: list[str], cause: Exception):
        super().__init__(f"Failed to start command {executable}: {cause}")
        self.executable = executable
        self.arguments = arguments
        self.cause = cause


class ProcessTimeoutError(BridgeError):
    """A collected run did not finish in time."""

    def __init__(self, timeout: float):
        super().__init__(f"CLI operation timed out after {timeout:g}s")
        self.timeout = timeout


class CompletedRun(BaseModel):
    """Buffered output of a run collected without streaming."""

    stdout: str
    stderr: str
    exit_code: int


def is_info_message(message: str) -> bool:
    """Stderr lines the CLI prints during normal operation."""
    text = message.strip()
    return (
        text.startswith("Loaded cached credentials")
        or "Using cached credentials" in text
        or bool(_INFO_MESSAGE.match(text))
    )


class ProcessStream:
    """One running CLI subprocess and the events read from it."""

    def __init__(self, process: asyncio.subprocess.Process, config: StreamConfig):
        self._process = process
        self._config = config

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def returncode(self) -> int | None:
        return self._process.returncode

    async def events(self) -> AsyncIterator[StreamEvent]:
        """
        Yield output chunks until the process exits, then one CloseEvent.

        Stdout and stderr are read by independent tasks into a bounded queue,
        so order holds within each stream only. Closing the generator early
        kills the process.
        """
        queue: asyncio.Queue[StreamEvent | None] = asyncio.Queue(maxsize=self._config.queue_size)
        readers = [
            asyncio.create_task(self._pump("stdout", self._process.stdout, queue)),
            asyncio.create_task(self._pump("stderr", self._process.stderr, queue)),
        ]

        try:
            open_streams = len(readers)
            while open_streams:
                event = await queue.get()
                if event is None:
                    open_streams -= 1
                    continue
                yield event

            exit_code = await self._process.wait()
            logger.info(f"Process {self.pid} exited with code {exit_code}")
            yield CloseEvent(exit_code=exit_code)

        finally:
            for reader in readers:
                reader.cancel()
            await self.terminate()
            await asyncio.gather(*readers, return_exceptions=True)

    async def _pump(self, name: str, stream: asyncio.StreamReader, queue: asyncio.Queue) -> None:
        """Move decoded chunks from one pipe into the queue; None marks EOF."""
        event_type = StdoutEvent if name == "stdout" else StderrEvent
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

        try:
            while True:
                chunk = await stream.read(self._config.read_chunk_size)
                if not chunk:
                    break
                content = decoder.decode(chunk)
                if content:
                    self._log_chunk(name, content)
                    await queue.put(event_type(content=content))

            tail = decoder.decode(b"", final=True)
            if tail:
                await queue.put(event_type(content=tail))

        except Exception as e:
            logger.exception(f"Reading {name} of process {self.pid} failed: {e}")

        await queue.put(None)

    def _log_chunk(self, name: str, content: str) -> None:
        if name == "stderr" and not is_info_message(content):
            logger.warning(f"STDERR [{self.pid}]: {content.strip()}")
        else:
            logger.debug(f"{name.upper()} [{self.pid}]: {content.strip()}")

    def _kill(self) -> None:
        try:
            if _NEW_SESSION:
                # The package runner spawns the real tool as a grandchild
                os.killpg(self._process.pid, signal.SIGKILL)
            else:
                self._process.kill()
        except ProcessLookupError:
            pass

    async def terminate(self) -> None:
        """Kill the process group if still running and reap it."""
        if self._process.returncode is not None:
            return

        logger.info(f"Killing process {self.pid}")
        self._kill()

        try:
            await asyncio.wait_for(self._process.wait(), timeout=self._config.kill_grace_sec)
        except asyncio.TimeoutError:
            logger.error(f"Process {self.pid} did not exit within {self._config.kill_grace_sec}s of kill")


class ProcessStreamBridge:
    """
    Runs the CLI as a subprocess per request and exposes its output as events.

    Args:
        resolve: Returns the cached command used to invoke the CLI
        cli: CLI configuration (API key variable, default working directory)
        stream: Pipe reading configuration
    """

    def __init__(
        self,
        resolve: Callable[[], ResolvedCommand],
        cli: CliConfig,
        stream: StreamConfig,
    ):
        self._resolve = resolve
        self.cli = cli
        self.stream_config = stream

    async def spawn(self, request: ChatRequest) -> ProcessStream:
        """
        Start the CLI for a chat request.

        Raises:
            SpawnError: If the process cannot be started
        """
        return await self._start_request(request, build_chat_args(request))

    async def spawn_search(self, request: SearchRequest) -> ProcessStream:
        """
        Start the CLI with a web search prompt.

        Raises:
            SpawnError: If the process cannot be started
        """
        return await self._start_request(request, build_search_args(request))

    async def _start_request(self, request: CliRequest, arguments: list[str]) -> ProcessStream:
        return await self._start(
            arguments,
            env=prepare_env(self.cli, env_from_request(request, self.cli.api_key_env)),
            cwd=resolve_working_directory(request.working_directory, self.cli.working_directory),
        )

    async def spawn_command(self, arguments: list[str]) -> ProcessStream:
        """
        Start the CLI with raw arguments taken from a command line.

        Raises:
            SpawnError: If the process cannot be started
        """
        return await self._start(
            arguments,
            env=prepare_env(self.cli),
            cwd=resolve_working_directory(None, self.cli.working_directory),
        )

    async def _start(self, arguments: list[str], env: dict[str, str], cwd: str) -> ProcessStream:
        command = self._resolve()
        argv = command.argv(arguments)

        logger.info(f"Streaming: {' '.join(argv)}")
        logger.debug(f"Working directory: {cwd}")
        logger.debug(f"Environment variables: {mask_sensitive(env, [self.cli.api_key_env])}")

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=cwd,
                env=env,
                start_new_session=_NEW_SESSION,
            )
        except (OSError, ValueError) as e:
            # ValueError: NUL byte in an argument, the environment or cwd
            logger.error(f"Failed to start command {command.executable}: {e}")
            raise SpawnError(command.executable, argv[1:], e) from e

        logger.info(f"Started process {process.pid}")
        return ProcessStream(process, self.stream_config)

    async def stream(self, request: ChatRequest) -> AsyncIterator[StreamEvent]:
        """Events for one request; a spawn failure becomes a single ErrorEvent."""
        try:
            process_stream = await self.spawn(request)
        except SpawnError as e:
            yield ErrorEvent(message=str(e))
            return

        async with aclosing(process_stream.events()) as events:
            async for event in events:
                yield event

    async def collect(self, spawner: Awaitable[ProcessStream], timeout: float | None = None) -> CompletedRun:
        """
        Run a spawned CLI process to completion and return its buffered output.

        Raises:
            SpawnError: If the process cannot be started
            ProcessTimeoutError: If the run exceeds timeout; the process is killed
        """
        process_stream = await spawner
        stdout: list[str] = []
        stderr: list[str] = []
        exit_code = -1

        async def drain() -> None:
            nonlocal exit_code
            async with aclosing(process_stream.events()) as events:
                async for event in events:
                    if isinstance(event, StdoutEvent):
                        stdout.append(event.content)
                    elif isinstance(event, StderrEvent):
                        stderr.append(event.content)
                    elif isinstance(event, CloseEvent):
                        exit_code = event.exit_code

        try:
            await asyncio.wait_for(drain(), timeout=timeout)
        except asyncio.TimeoutError:
            await process_stream.terminate()
            logger.error(f"Process {process_stream.pid} timed out after {timeout}s")
            raise ProcessTimeoutError(timeout) from None

        return CompletedRun(stdout="".join(stdout), stderr="".join(stderr), exit_code=exit_code)
