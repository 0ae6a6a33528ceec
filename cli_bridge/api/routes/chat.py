from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from pydantic import ValidationError

from cli_bridge.core import normalizer
from cli_bridge.core.process import ProcessStreamBridge
from cli_bridge.models.config import AppConfig
from cli_bridge.server.app import get_app_config, get_bridge
from cli_bridge.server.protocol import (
    create_error,
    create_run_envelope,
    create_validation_error,
)
from cli_bridge.server.sse import EventTransport
from cli_bridge.utils.logging import get_logger


logger = get_logger("chat")
router = APIRouter(tags=["chat"])


@router.post("/gemini-chat")
async def chat_stream(
    request: Request,
    bridge: ProcessStreamBridge = Depends(get_bridge),
) -> Response:
    """Stream CLI output for a JSON body request."""
    try:
        chat_request = normalizer.from_body(await request.json())
    except ValidationError as e:
        logger.info(f"Rejected chat request: {e.error_count()} validation error(s)")
        return create_validation_error(e)
    except ValueError as e:
        logger.info(f"Rejected chat request: malformed JSON body ({e})")
        return create_validation_error(message=f"Invalid JSON body: {e}")

    logger.info(f"Chat stream: model={chat_request.model}, sandbox={chat_request.sandbox}, yolo={chat_request.yolo}")
    return await EventTransport().open(bridge.spawn(chat_request))


@router.get("/gemini-chat")
async def chat_stream_query(
    request: Request,
    bridge: ProcessStreamBridge = Depends(get_bridge),
) -> Response:
    """Stream CLI output for a query-string request (usable from EventSource)."""
    try:
        chat_request = normalizer.from_query(request.query_params)
    except normalizer.MissingPromptError as e:
        return create_error(400, str(e))

    logger.info(f"Chat stream (query): model={chat_request.model}, sandbox={chat_request.sandbox}, yolo={chat_request.yolo}")
    return await EventTransport().open(bridge.spawn(chat_request))


@router.post("/gemini-chat/complete")
async def chat_complete(
    request: Request,
    bridge: ProcessStreamBridge = Depends(get_bridge),
    config: AppConfig = Depends(get_app_config),
) -> Response:
    """Run the CLI to completion and return its output in one envelope."""
    try:
        chat_request = normalizer.from_body(await request.json())
    except ValidationError as e:
        return create_validation_error(e)
    except ValueError as e:
        return create_validation_error(message=f"Invalid JSON body: {e}")

    return await create_run_envelope(bridge, bridge.spawn(chat_request), config.cli.chat_timeout_sec)
