from pydantic import BaseModel, Field


class ServerConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = Field(default=8765, ge=1, le=65535)
    api_prefix: str = "/api"
    cors_origins: list[str] = Field(default_factory=list)


class CliConfig(BaseModel):
    executable: str = "gemini"
    package_runner: str = "npx"
    package_runner_args: list[str] = Field(default_factory=list)
    package_name: str = "@google/gemini-cli"
    api_key_env: str = "GEMINI_API_KEY"
    working_directory: str | None = None
    # Stripped from the inherited environment before every spawn
    unset_env: list[str] = Field(
        default_factory=lambda: [
            "GEMINI_CLI_IDE_SERVER_PORT",
            "GEMINI_CLI_IDE_WORKSPACE_PATH",
            "ENABLE_IDE_INTEGRATION",
        ]
    )
    chat_timeout_sec: float = Field(default=600, gt=0)
    search_timeout_sec: float = Field(default=60, gt=0)


class StreamConfig(BaseModel):
    read_chunk_size: int = Field(default=4096, ge=1)
    queue_size: int = Field(default=16, ge=1)
    kill_grace_sec: float = Field(default=5.0, gt=0)


class LoggingConfig(BaseModel):
    level: str = "INFO"


class AppConfig(BaseModel):
    server: ServerConfig = Field(default_factory=ServerConfig)
    cli: CliConfig = Field(default_factory=CliConfig)
    stream: StreamConfig = Field(default_factory=StreamConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
