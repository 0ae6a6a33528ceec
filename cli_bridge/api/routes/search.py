from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from pydantic import ValidationError

from cli_bridge.core import normalizer
from cli_bridge.core.command_builder import process_raw_search_result
from cli_bridge.core.process import ProcessStreamBridge
from cli_bridge.models.config import AppConfig
from cli_bridge.models.requests import SearchRequest
from cli_bridge.server.app import get_app_config, get_bridge
from cli_bridge.server.protocol import (
    create_error,
    create_run_envelope,
    create_validation_error,
)
from cli_bridge.utils.logging import get_logger


logger = get_logger("search")
router = APIRouter(tags=["search"])


@router.post("/google-search")
async def search(
    request: Request,
    bridge: ProcessStreamBridge = Depends(get_bridge),
    config: AppConfig = Depends(get_app_config),
) -> Response:
    """Run a web search through the CLI for a JSON body request."""
    try:
        search_request = normalizer.search_from_body(await request.json())
    except ValidationError as e:
        logger.info(f"Rejected search request: {e.error_count()} validation error(s)")
        return create_validation_error(e)
    except ValueError as e:
        return create_validation_error(message=f"Invalid JSON body: {e}")

    return await run_search(bridge, search_request, config)


@router.get("/google-search")
async def search_query(
    request: Request,
    bridge: ProcessStreamBridge = Depends(get_bridge),
    config: AppConfig = Depends(get_app_config),
) -> Response:
    """Run a web search through the CLI for a query-string request."""
    try:
        search_request = normalizer.search_from_query(request.query_params)
    except normalizer.QueryParameterError as e:
        return create_error(400, str(e))
    except ValidationError as e:
        return create_validation_error(e)

    return await run_search(bridge, search_request, config)


async def run_search(bridge: ProcessStreamBridge, search_request: SearchRequest, config: AppConfig) -> Response:
    logger.info(f"Search: limit={search_request.limit}, raw={search_request.raw}, model={search_request.model}")
    return await create_run_envelope(
        bridge,
        bridge.spawn_search(search_request),
        config.cli.search_timeout_sec,
        transform=process_raw_search_result if search_request.raw else None,
    )
