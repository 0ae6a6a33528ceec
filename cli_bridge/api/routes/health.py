from fastapi import APIRouter, Depends

from cli_bridge.core.resolver import CommandResolver
from cli_bridge.models.responses import CommandInfo, HealthResponse
from cli_bridge.server.app import get_resolver


router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health(resolver: CommandResolver = Depends(get_resolver)) -> HealthResponse:
    """Liveness check, with the command used to invoke the CLI."""
    command = resolver.resolve()
    return HealthResponse(
        command=CommandInfo(
            executable=command.executable,
            leading_arguments=list(command.leading_arguments),
        )
    )
