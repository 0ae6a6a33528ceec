from fastapi import APIRouter, Depends

from cli_bridge.models.config import AppConfig
from cli_bridge.server.app import get_app_config


router = APIRouter(tags=["settings"])


@router.get("/config", response_model=AppConfig)
async def get_configuration(config: AppConfig = Depends(get_app_config)) -> AppConfig:
    """Get current configuration."""
    return config
