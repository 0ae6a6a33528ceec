import os
from collections.abc import Iterable, Mapping

from cli_bridge.models.config import CliConfig
from cli_bridge.models.requests import CliRequest


MASK = "[MASKED]"


def prepare_env(
    config: CliConfig,
    overrides: Mapping[str, str | None] | None = None,
) -> dict[str, str]:
    """
    Build the environment for one CLI subprocess.

    Starts from the service environment, drops the IDE integration variables
    and any inherited API key (so the CLI uses its own login unless the caller
    supplies a key), then applies overrides. A None override unsets the key.
    """
    env = dict(os.environ)

    for key in config.unset_env:
        env.pop(key, None)
    env.pop(config.api_key_env, None)

    if overrides:
        for key, value in overrides.items():
            if value is None:
                env.pop(key, None)
            else:
                env[key] = value

    return env


def env_from_request(request: CliRequest, api_key_env: str) -> dict[str, str]:
    """Per-request environment additions. The API key is passed here, never on argv."""
    if request.api_key:
        return {api_key_env: request.api_key}
    return {}


def mask_sensitive(env: Mapping[str, str], keys: Iterable[str]) -> dict[str, str]:
    """Copy of env safe for logging."""
    masked = dict(env)
    for key in keys:
        if key in masked:
            masked[key] = MASK
    return masked


def resolve_working_directory(requested: str | None, default: str | None = None) -> str:
    return requested or default or os.getcwd()
