import json
import os
from pathlib import Path

from dotenv import load_dotenv

from cli_bridge.models.config import AppConfig


_config: AppConfig | None = None


def get_project_root() -> Path:
    """Get project root directory."""
    return Path(__file__).parent.parent.parent


def apply_env_overrides(config: AppConfig) -> AppConfig:
    """Fill config values that may also be provided through the environment."""
    working_dir = os.getenv("GEMINI_CLI_WORKING_DIR", "")
    if working_dir and not config.cli.working_directory:
        config.cli.working_directory = working_dir

    log_level = os.getenv("LOG_LEVEL", "")
    if log_level:
        config.logging.level = log_level.upper()

    return config


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from JSON file and environment variables."""
    global _config

    if config_path is None:
        config_path = get_project_root() / "config.json"

    # Load .env file
    env_path = get_project_root() / ".env"
    load_dotenv(env_path)

    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        config = AppConfig.model_validate(data)
    else:
        config = AppConfig()

    _config = apply_env_overrides(config)
    return _config


def get_config() -> AppConfig:
    """Get current configuration. Loads from file if not already loaded."""
    if _config is None:
        return load_config()
    return _config
