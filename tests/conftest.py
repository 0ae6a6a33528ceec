import json
import os
import sys
import time
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from cli_bridge.core.process import ProcessStreamBridge
from cli_bridge.core.resolver import ResolvedCommand
from cli_bridge.models.config import CliConfig, StreamConfig
from cli_bridge.server.app import create_app, get_bridge


FAKE_CLI = Path(__file__).parent / "fake_cli.py"


def parse_frames(body: str) -> list[dict]:
    """Decode every `data:` frame of an event-stream body."""
    return [
        json.loads(block[len("data: "):])
        for block in body.split("\n\n")
        if block.startswith("data: ")
    ]


def process_exists(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    return True


def is_zombie(pid: int) -> bool:
    try:
        with open(f"/proc/{pid}/stat") as f:
            stat = f.read()
    except FileNotFoundError:
        return False
    # State follows the parenthesised command name
    return stat.rsplit(")", 1)[-1].split()[0] == "Z"


def wait_until_gone(pid: int, timeout: float = 5.0) -> bool:
    """True once pid has exited; an unreaped orphan counts as exited."""
    deadline = time.monotonic() + timeout
    while process_exists(pid) and not is_zombie(pid):
        if time.monotonic() >= deadline:
            return False
        time.sleep(0.05)
    return True


@pytest.fixture
def fake_command() -> ResolvedCommand:
    return ResolvedCommand(executable=sys.executable, leading_arguments=(str(FAKE_CLI),))


@pytest.fixture
def bridge(fake_command: ResolvedCommand) -> ProcessStreamBridge:
    return ProcessStreamBridge(
        resolve=lambda: fake_command,
        cli=CliConfig(),
        stream=StreamConfig(queue_size=4, kill_grace_sec=5),
    )


@pytest.fixture
def client(bridge: ProcessStreamBridge):
    app = create_app()
    app.dependency_overrides[get_bridge] = lambda: bridge
    with TestClient(app) as test_client:
        yield test_client
