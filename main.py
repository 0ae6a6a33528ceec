import uvicorn

from cli_bridge.server.app import create_app
from cli_bridge.utils.config import get_config


def main() -> None:
    """Entry point for CLI bridge server."""
    config = get_config()

    app = create_app()

    uvicorn.run(
        app,
        host=config.server.host,
        port=config.server.port,
        log_level=config.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
