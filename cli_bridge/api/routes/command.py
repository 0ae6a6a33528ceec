from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from pydantic import ValidationError

from cli_bridge.core.command_builder import InvalidCommandError, parse_command
from cli_bridge.core.process import ProcessStreamBridge
from cli_bridge.models.requests import CommandRequest
from cli_bridge.server.app import get_bridge
from cli_bridge.server.protocol import create_error, create_validation_error
from cli_bridge.server.sse import EventTransport
from cli_bridge.utils.logging import get_logger


logger = get_logger("command")
router = APIRouter(tags=["command"])


@router.post("/gemini-command")
async def command_stream(
    request: Request,
    bridge: ProcessStreamBridge = Depends(get_bridge),
) -> Response:
    """Stream output of a raw CLI command line."""
    try:
        command_request = CommandRequest.model_validate(await request.json())
    except ValidationError as e:
        return create_validation_error(e)
    except ValueError as e:
        return create_validation_error(message=f"Invalid JSON body: {e}")

    try:
        arguments = parse_command(command_request.command.strip(), bridge.cli.executable)
    except InvalidCommandError as e:
        logger.info(f"Rejected command: {e}")
        return create_error(400, str(e))

    return await EventTransport().open(bridge.spawn_command(arguments))
